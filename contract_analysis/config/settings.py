"""
Configuration management for the contract analysis pipeline.

Handles loading and validating configuration from environment variables,
YAML data files, and command-line arguments.
"""

import os
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from contract_analysis.exceptions import ConfigurationError


LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


# =============================================================================
# Configuration Models
# =============================================================================

class CompletionConfig(BaseModel):
    """Configuration for the completion endpoint connection."""

    model_config = ConfigDict(validate_assignment=True)

    # OpenAI-compatible API base URL
    base_url: str = Field(
        default="https://api.openai.com/v1",
        description="Completion API base URL"
    )

    # Model identifier stamped into every analysis
    model: str = Field(
        default="gpt-4o",
        description="LLM model identifier"
    )

    api_key: Optional[str] = Field(
        default=None,
        description="Bearer token for the completion API"
    )

    # Request timeout in seconds
    timeout: float = Field(
        default=120.0,
        description="HTTP request timeout in seconds"
    )

    # Maximum tokens for generation
    max_tokens: int = Field(
        default=4096,
        description="Maximum tokens to generate"
    )

    # Pool size; one request fans out to four concurrent calls
    max_connections: int = Field(
        default=8,
        ge=4,
        description="Maximum pooled HTTP connections"
    )


class PipelineConfig(BaseModel):
    """Configuration for stage execution."""

    model_config = ConfigDict(validate_assignment=True)

    # Upper bound on a single stage, including the network call
    stage_timeout: float = Field(
        default=90.0,
        gt=0,
        description="Per-stage timeout in seconds"
    )

    # Fan the four stages out concurrently
    concurrent: bool = Field(
        default=True,
        description="Run stages concurrently instead of sequentially"
    )

    # Lower temperature for structured output, higher for prose
    structured_temperature: float = Field(default=0.2, ge=0.0, le=2.0)
    summary_temperature: float = Field(default=0.4, ge=0.0, le=2.0)
    risk_temperature: float = Field(default=0.3, ge=0.0, le=2.0)
    clause_temperature: float = Field(default=0.4, ge=0.0, le=2.0)


class AgentConfig(BaseModel):
    """Main configuration."""

    model_config = ConfigDict(validate_assignment=True)

    # Completion endpoint settings
    completion: CompletionConfig = Field(default_factory=CompletionConfig)

    # Stage settings
    pipeline: PipelineConfig = Field(default_factory=PipelineConfig)

    # Path to subscription plan limits file
    plan_limits_path: Path = Field(
        default=Path(__file__).parent / "plan_limits.yaml",
        description="Path to plan limits YAML"
    )

    log_level: str = Field(
        default="WARNING",
        description="Root log level for the CLI"
    )

    # Enable verbose output
    verbose: bool = Field(
        default=False,
        description="Enable verbose logging"
    )

    @field_validator("log_level")
    @classmethod
    def _known_log_level(cls, value: str) -> str:
        level = value.strip().upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"log level must be one of {', '.join(LOG_LEVELS)}")
        return level


# =============================================================================
# Configuration Loading Functions
# =============================================================================

def load_yaml_config(path: Path) -> dict:
    """
    Load configuration from a YAML file.

    Args:
        path: Path to the YAML file

    Returns:
        Dictionary with configuration data

    Raises:
        FileNotFoundError: If file doesn't exist
        yaml.YAMLError: If YAML is invalid
    """
    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {path}")

    with open(path, "r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def load_plan_limits(path: Optional[Path] = None) -> dict:
    """
    Load subscription plan limits from YAML file.

    Args:
        path: Optional path to limits file. Uses default if not provided.

    Returns:
        Dictionary mapping tier name to its raw limits
    """
    if path is None:
        path = Path(__file__).parent / "plan_limits.yaml"

    return load_yaml_config(path).get("plans", {})


def get_config(
    model: Optional[str] = None,
    base_url: Optional[str] = None,
    verbose: bool = False
) -> AgentConfig:
    """
    Get configuration with environment and explicit overrides.

    Args:
        model: Override default model
        base_url: Override completion API base URL
        verbose: Enable verbose mode

    Returns:
        Configured AgentConfig instance

    Raises:
        ConfigurationError: If an override fails validation
    """
    config = AgentConfig(verbose=verbose)

    try:
        # Apply environment variable overrides
        if env_key := os.getenv("OPENAI_API_KEY"):
            config.completion.api_key = env_key

        if env_url := os.getenv("CONTRACT_ANALYSIS_BASE_URL"):
            config.completion.base_url = env_url

        if env_model := os.getenv("CONTRACT_ANALYSIS_MODEL"):
            config.completion.model = env_model

        if env_timeout := os.getenv("CONTRACT_ANALYSIS_STAGE_TIMEOUT"):
            config.pipeline.stage_timeout = env_timeout

        if env_level := os.getenv("CONTRACT_ANALYSIS_LOG_LEVEL"):
            config.log_level = env_level

        # Apply explicit overrides
        if model:
            config.completion.model = model

        if base_url:
            config.completion.base_url = base_url
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration: {e}") from e

    return config
