"""
The four analysis stages.

Each stage makes one completion call over the same truncated text and
produces one part of the final analysis. Stages are isolated: any
failure, malformed reply or timeout degrades that stage's output to its
default and is logged, never raised. Cancellation is not absorbed.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Optional

from contract_analysis.exceptions import (
    MalformedResponseError,
    StageFailure,
    StageTimeoutError,
)
from contract_analysis.models.schemas import (
    ClauseExplanation,
    CompletionResult,
    Importance,
    RiskFinding,
    RiskType,
    Severity,
    StageStatus,
    TierProfile,
)
from contract_analysis.pipeline import prompts
from contract_analysis.pipeline.coerce import as_enum, as_str, find_items, pick
from contract_analysis.tools.llm_client import CompletionClient

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StageOutcome:
    """Output of one stage run plus how it ended."""

    value: Any
    status: StageStatus = StageStatus.OK
    error: Optional[str] = None
    tokens_used: int = field(default=0, compare=False)


# =============================================================================
# Stage Base
# =============================================================================

class Stage:
    """
    One completion call with a fixed prompt template and parser.

    Subclasses set name, system_prompt, expect_json and implement
    default(), build_prompt() and parse().
    """

    name = "stage"
    system_prompt = ""
    expect_json = True

    def __init__(
        self,
        llm_client: CompletionClient,
        temperature: float,
        timeout: float = 90.0
    ):
        """
        Args:
            llm_client: Shared completion client
            temperature: Fixed generation temperature for this stage
            timeout: Seconds before the stage is abandoned
        """
        self.llm = llm_client
        self.temperature = temperature
        self.timeout = timeout

    def default(self) -> Any:
        raise NotImplementedError

    def build_prompt(self, text: str, profile: TierProfile) -> str:
        raise NotImplementedError

    def parse(self, result: CompletionResult) -> Any:
        raise NotImplementedError

    async def run(
        self,
        text: str,
        profile: TierProfile,
        correlation_id: Optional[str] = None
    ) -> StageOutcome:
        """
        Execute the stage with isolation and a time budget.

        Returns:
            StageOutcome holding the parsed value, or the default on failure
        """
        try:
            result = await asyncio.wait_for(
                self.llm.complete(
                    self.system_prompt,
                    self.build_prompt(text, profile),
                    expect_json=self.expect_json,
                    temperature=self.temperature,
                ),
                timeout=self.timeout,
            )
            value = self.parse(result)
        except asyncio.TimeoutError:
            error = StageTimeoutError(
                f"Stage {self.name} timed out after {self.timeout}s", stage=self.name
            )
            logger.warning("%s [%s]", error, correlation_id)
            return StageOutcome(self.default(), StageStatus.TIMEOUT, str(error))
        except StageFailure as e:
            logger.warning(
                "Stage %s failed [%s]: %s: %s",
                self.name, correlation_id, type(e).__name__, e
            )
            return StageOutcome(self.default(), StageStatus.FAILED, str(e))
        except Exception as e:
            logger.warning(
                "Stage %s failed unexpectedly [%s]: %s",
                self.name, correlation_id, e, exc_info=True
            )
            return StageOutcome(self.default(), StageStatus.FAILED, str(e))

        return StageOutcome(value, StageStatus.OK, tokens_used=result.tokens_used)

    def _require_json(self, result: CompletionResult) -> Any:
        if not result.is_json:
            raise MalformedResponseError("Expected a JSON completion", stage=self.name)
        return result.json_data


# =============================================================================
# Structured-Data Extraction
# =============================================================================

class StructuredDataStage(Stage):
    """Pulls parties, dates, money and legal terms out as a loose object."""

    name = "structured"
    system_prompt = prompts.STRUCTURED_SYSTEM_PROMPT

    def default(self) -> dict:
        return {}

    def build_prompt(self, text: str, profile: TierProfile) -> str:
        return prompts.STRUCTURED_PROMPT.format(contract_text=text)

    def parse(self, result: CompletionResult) -> dict:
        payload = self._require_json(result)
        if not isinstance(payload, dict):
            raise MalformedResponseError(
                f"Structured extraction returned {type(payload).__name__}, not an object",
                stage=self.name
            )
        return payload


# =============================================================================
# Summary
# =============================================================================

class SummaryStage(Stage):
    """Free-text plain-English summary, length scaled by tier."""

    name = "summary"
    system_prompt = prompts.SUMMARY_SYSTEM_PROMPT
    expect_json = False

    def default(self) -> str:
        return ""

    def build_prompt(self, text: str, profile: TierProfile) -> str:
        return prompts.SUMMARY_PROMPT.format(
            instructions=prompts.SUMMARY_DEPTH_INSTRUCTIONS[profile.summary_depth],
            contract_text=text
        )

    def parse(self, result: CompletionResult) -> str:
        return (result.text or "").strip()


# =============================================================================
# Risk Detection
# =============================================================================

class RiskDetectionStage(Stage):
    """List of risk findings with sequential ids in response order."""

    name = "risks"
    system_prompt = prompts.RISK_SYSTEM_PROMPT

    def default(self) -> list:
        return []

    def build_prompt(self, text: str, profile: TierProfile) -> str:
        return prompts.RISK_PROMPT.format(
            instructions=prompts.RISK_DEPTH_INSTRUCTIONS[profile.risk_detail],
            contract_text=text
        )

    def parse(self, result: CompletionResult) -> list[RiskFinding]:
        entries = find_items(self._require_json(result), "risks", "riskFlags", "findings")
        if entries is None:
            raise MalformedResponseError("Response holds no risk array", stage=self.name)

        findings = []
        for position, entry in enumerate(entries):
            fields = self._coerce_entry(entry)
            if fields is None:
                logger.debug("Dropping invalid risk entry at position %d: %r", position, entry)
                continue
            findings.append(RiskFinding(id=f"risk-{len(findings) + 1}", **fields))
        return findings

    @staticmethod
    def _coerce_entry(entry: Any) -> Optional[dict]:
        """Validate one risk entry; None if it violates the schema."""
        risk_type = as_enum(RiskType, pick(entry, "type"))
        severity = as_enum(Severity, pick(entry, "severity"))
        title = as_str(pick(entry, "title"))
        description = as_str(pick(entry, "description"))

        if None in (risk_type, severity, title, description):
            return None

        return {
            "type": risk_type,
            "severity": severity,
            "title": title,
            "description": description,
            "clause_text": as_str(pick(entry, "clause_text")) or "",
            "suggestion": as_str(pick(entry, "suggestion")),
        }


# =============================================================================
# Clause Explanation
# =============================================================================

class ClauseExplanationStage(Stage):
    """List of plain-language clause explanations."""

    name = "clauses"
    system_prompt = prompts.CLAUSE_SYSTEM_PROMPT

    def default(self) -> list:
        return []

    def build_prompt(self, text: str, profile: TierProfile) -> str:
        return prompts.CLAUSE_PROMPT.format(
            instructions=prompts.CLAUSE_DEPTH_INSTRUCTIONS[profile.clause_detail],
            contract_text=text
        )

    def parse(self, result: CompletionResult) -> list[ClauseExplanation]:
        entries = find_items(self._require_json(result), "clauses", "clauseExplanations")
        if entries is None:
            raise MalformedResponseError("Response holds no clause array", stage=self.name)

        explanations = []
        for position, entry in enumerate(entries):
            title = as_str(pick(entry, "clause_title", "title"))
            explanation = as_str(pick(entry, "explanation"))
            importance = as_enum(Importance, pick(entry, "importance"))

            if None in (title, explanation, importance):
                logger.debug("Dropping invalid clause entry at position %d: %r", position, entry)
                continue

            # Negotiation suggestions have no field in the typed output
            explanations.append(ClauseExplanation(
                clause_title=title,
                clause_text=as_str(pick(entry, "clause_text")),
                explanation=explanation,
                importance=importance,
            ))
        return explanations
