"""
Configuration package for the contract analysis pipeline.
"""

from contract_analysis.config.log import configure_logging
from contract_analysis.config.settings import (
    AgentConfig,
    CompletionConfig,
    PipelineConfig,
    get_config,
    load_plan_limits,
    load_yaml_config,
)

__all__ = [
    "AgentConfig",
    "CompletionConfig",
    "PipelineConfig",
    "configure_logging",
    "get_config",
    "load_plan_limits",
    "load_yaml_config",
]
