"""
Contract analysis agent: the upload-to-analysis entry point.

Wires configuration, the completion client, the text extractor and the
analyzer together. Persistence, usage counters and export stay with the
caller.
"""

import asyncio
import logging
from pathlib import Path
from typing import Optional, Union

from contract_analysis.config.settings import AgentConfig, get_config
from contract_analysis.models.schemas import ContractAnalysis, Tier
from contract_analysis.pipeline.analyzer import ContractAnalyzer
from contract_analysis.pipeline.tiers import check_upload, parse_tier
from contract_analysis.tools.document_loader import TextExtractor, normalize_file_type
from contract_analysis.tools.llm_client import CompletionClient, create_client

logger = logging.getLogger(__name__)


# =============================================================================
# Contract Analysis Agent
# =============================================================================

class ContractAnalysisAgent:
    """
    High-level interface: bytes or files in, ContractAnalysis out.

    Example:
        >>> async with ContractAnalysisAgent() as agent:
        ...     analysis = await agent.analyze_file("nda.pdf", tier="pro")
        >>> print(analysis.summary)
    """

    def __init__(
        self,
        config: Optional[AgentConfig] = None,
        llm_client: Optional[CompletionClient] = None,
        verbose: bool = False
    ):
        """
        Initialize the agent.

        Args:
            config: Full configuration (environment defaults if omitted)
            llm_client: Pre-built client to inject; built from config otherwise
            verbose: Enable verbose output

        Raises:
            ConfigurationError: If no client is injected and no API key is set
        """
        self.config = config or get_config(verbose=verbose)
        self.verbose = verbose or self.config.verbose

        # Fail fast on missing credentials rather than on first use
        self._owns_client = llm_client is None
        self.llm = llm_client or create_client(self.config.completion)

        self.extractor = TextExtractor()
        self.analyzer = ContractAnalyzer(self.llm, self.config.pipeline)

    # -------------------------------------------------------------------------
    # Main Analysis Methods
    # -------------------------------------------------------------------------

    async def analyze_document(
        self,
        data: bytes,
        file_type: str,
        tier: Union[Tier, str] = Tier.FREE,
        filename: Optional[str] = None,
        correlation_id: Optional[str] = None
    ) -> ContractAnalysis:
        """
        Gate, extract and analyze an uploaded document.

        Args:
            data: Raw document bytes
            file_type: Declared type (extension, tag or MIME type)
            tier: Subscription tier
            filename: Original filename for metadata and logs
            correlation_id: Optional request id

        Returns:
            ContractAnalysis

        Raises:
            ExtractionError: If the document cannot be read; no completion
                calls are made in that case
            UploadRejectedError: If the upload exceeds the plan
        """
        tier = parse_tier(tier)
        kind = normalize_file_type(file_type)
        check_upload(tier, kind, len(data), self.config.plan_limits_path)

        document = self.extractor.extract(data, kind, filename=filename)
        logger.info(
            "Extracted %s (%s, %d words)",
            filename or "<upload>", kind, document.metadata.get("word_count", 0)
        )

        return await self.analyzer.analyze(document.text, tier, correlation_id)

    async def analyze_file(
        self,
        contract_path: Union[str, Path],
        tier: Union[Tier, str] = Tier.FREE
    ) -> ContractAnalysis:
        """
        Analyze a contract file from disk.

        Raises:
            FileNotFoundError: If the file doesn't exist
            ExtractionError: If the file type is unsupported or unreadable
        """
        path = Path(contract_path)
        if not path.exists():
            raise FileNotFoundError(f"Document not found: {path}")

        return await self.analyze_document(
            path.read_bytes(), path.suffix, tier=tier, filename=path.name
        )

    async def analyze_text(
        self,
        contract_text: str,
        tier: Union[Tier, str] = Tier.FREE,
        correlation_id: Optional[str] = None
    ) -> ContractAnalysis:
        """Analyze already extracted text directly."""
        return await self.analyzer.analyze(contract_text, tier, correlation_id)

    # -------------------------------------------------------------------------
    # Utility Methods
    # -------------------------------------------------------------------------

    async def check_status(self) -> dict:
        """
        Check the completion endpoint.

        Returns:
            Dict with status information
        """
        return {
            "available": await self.llm.is_available(),
            "base_url": self.llm.base_url,
            "configured_model": self.llm.model,
            "stage_timeout": self.config.pipeline.stage_timeout,
        }

    async def aclose(self):
        """Close the client if this agent built it."""
        if self._owns_client:
            await self.llm.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.aclose()


# =============================================================================
# Convenience Functions
# =============================================================================

def analyze_sync(
    contract_path: Union[str, Path],
    tier: Union[Tier, str] = Tier.FREE,
    config: Optional[AgentConfig] = None
) -> ContractAnalysis:
    """
    One-shot blocking analysis of a contract file.

    Args:
        contract_path: Path to contract file
        tier: Subscription tier
        config: Optional configuration

    Returns:
        ContractAnalysis
    """
    async def _run() -> ContractAnalysis:
        async with ContractAnalysisAgent(config=config) as agent:
            return await agent.analyze_file(contract_path, tier)

    return asyncio.run(_run())
