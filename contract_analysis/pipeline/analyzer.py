"""
Contract analyzer: runs the four stages and assembles the result.

All stages read the same truncated text and share no state, so they
are fanned out concurrently by default. Cancelling the analyze() task
cancels the in-flight completion calls.
"""

import asyncio
import logging
import time
from typing import Optional, Union

from contract_analysis.config.settings import PipelineConfig
from contract_analysis.models.schemas import (
    AnalysisRequest,
    ContractAnalysis,
    StageStatus,
    Tier,
)
from contract_analysis.pipeline.assembler import AnalysisAssembler
from contract_analysis.pipeline.stages import (
    ClauseExplanationStage,
    RiskDetectionStage,
    StageOutcome,
    StructuredDataStage,
    SummaryStage,
)
from contract_analysis.pipeline.tiers import parse_tier, truncate_text, TIER_PROFILES
from contract_analysis.tools.llm_client import CompletionClient

logger = logging.getLogger(__name__)


# =============================================================================
# Contract Analyzer
# =============================================================================

class ContractAnalyzer:
    """
    Orchestrates the analysis pipeline for one completion client.

    Example:
        >>> analyzer = ContractAnalyzer(client)
        >>> analysis = await analyzer.analyze(text, "pro")
        >>> analysis.metadata.total_clauses
        7
    """

    def __init__(
        self,
        llm_client: CompletionClient,
        config: Optional[PipelineConfig] = None
    ):
        """
        Initialize the analyzer.

        Args:
            llm_client: Constructed completion client (shared pool)
            config: Stage timeouts, temperatures and concurrency
        """
        self.llm = llm_client
        self.config = config or PipelineConfig()
        self.assembler = AnalysisAssembler()

        timeout = self.config.stage_timeout
        self.structured_stage = StructuredDataStage(
            llm_client, self.config.structured_temperature, timeout
        )
        self.summary_stage = SummaryStage(
            llm_client, self.config.summary_temperature, timeout
        )
        self.risk_stage = RiskDetectionStage(
            llm_client, self.config.risk_temperature, timeout
        )
        self.clause_stage = ClauseExplanationStage(
            llm_client, self.config.clause_temperature, timeout
        )

    @property
    def stages(self) -> tuple:
        return (self.structured_stage, self.summary_stage, self.risk_stage, self.clause_stage)

    async def analyze(
        self,
        text: str,
        tier: Union[Tier, str, None] = Tier.FREE,
        correlation_id: Optional[str] = None
    ) -> ContractAnalysis:
        """
        Analyze contract text at the given tier.

        Unknown tiers are analyzed with the free profile.

        Args:
            text: Extracted contract text
            tier: Subscription tier enum or name
            correlation_id: Optional id threaded through log entries

        Returns:
            ContractAnalysis, even if some stages failed
        """
        request = AnalysisRequest(text=text or "", tier=parse_tier(tier))
        if correlation_id:
            request = request.model_copy(update={"correlation_id": correlation_id})
        return await self.analyze_request(request)

    async def analyze_request(self, request: AnalysisRequest) -> ContractAnalysis:
        """Run all four stages for a request and assemble the result."""
        start_time = time.monotonic()
        profile = TIER_PROFILES[request.tier]
        source = truncate_text(request.text, profile)

        logger.info(
            "Analyzing %d chars (%d after truncation) at tier %s [%s]",
            len(request.text), len(source), request.tier.value, request.correlation_id
        )

        if not source.strip():
            outcomes = [
                StageOutcome(stage.default(), StageStatus.SKIPPED)
                for stage in self.stages
            ]
        elif self.config.concurrent:
            outcomes = await asyncio.gather(*(
                stage.run(source, profile, request.correlation_id)
                for stage in self.stages
            ))
        else:
            outcomes = []
            for stage in self.stages:
                outcomes.append(await stage.run(source, profile, request.correlation_id))

        structured, summary, risks, clauses = outcomes

        analysis = self.assembler.assemble(
            structured=structured.value,
            summary=summary.value,
            risks=risks.value,
            clauses=clauses.value,
            model=self.llm.model,
            tier=request.tier,
            correlation_id=request.correlation_id,
            stages={
                stage.name: outcome.status
                for stage, outcome in zip(self.stages, outcomes)
            },
        )

        logger.info(
            "Analysis complete in %.2fs: %d risks, %d clauses, %d tokens, stages=%s [%s]",
            time.monotonic() - start_time,
            len(analysis.risk_flags),
            analysis.metadata.total_clauses,
            sum(outcome.tokens_used for outcome in outcomes),
            {name: status.value for name, status in analysis.metadata.stages.items()},
            request.correlation_id,
        )
        return analysis
