"""
Data models and schemas for the contract analysis pipeline.

Uses Pydantic for validation and serialization of every record that
crosses a module boundary. Outbound records serialize with camelCase
aliases, which is the shape the export and persistence layers consume.
"""

import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel


# =============================================================================
# Base Model
# =============================================================================

class AnalysisModel(BaseModel):
    """Immutable record with camelCase aliases on the wire."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


# =============================================================================
# Enums
# =============================================================================

class Tier(str, Enum):
    """Subscription tier controlling analysis depth and limits."""
    FREE = "free"
    PRO = "pro"
    BUSINESS = "business"
    ENTERPRISE = "enterprise"

    @property
    def rank(self) -> int:
        """Richness rank; business and enterprise share the top profile."""
        return _TIER_RANK[self]


_TIER_RANK = {
    Tier.FREE: 0,
    Tier.PRO: 1,
    Tier.BUSINESS: 2,
    Tier.ENTERPRISE: 2,
}


class Depth(str, Enum):
    """Prompt verbosity / output richness for a pipeline stage."""
    BASIC = "basic"
    STANDARD = "standard"
    DEEP = "deep"

    @property
    def rank(self) -> int:
        return ["basic", "standard", "deep"].index(self.value)


class RiskType(str, Enum):
    """Category of a flagged contractual risk."""
    NON_COMPETE = "non-compete"
    AUTO_RENEWAL = "auto-renewal"
    TERMINATION = "termination"
    LIABILITY = "liability"
    PAYMENT = "payment"
    OTHER = "other"


class Severity(str, Enum):
    """Severity of a risk finding."""
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class Importance(str, Enum):
    """Importance of an explained clause."""
    CRITICAL = "critical"
    IMPORTANT = "important"
    STANDARD = "standard"


class StageStatus(str, Enum):
    """How a pipeline stage ended."""
    OK = "ok"              # Completed, output is the service's answer
    FAILED = "failed"      # Network / parse / schema failure, output defaulted
    TIMEOUT = "timeout"    # Exceeded the stage time budget, output defaulted
    SKIPPED = "skipped"    # Not run (e.g. empty source text)


# =============================================================================
# Tier and Request Models
# =============================================================================

class TierProfile(AnalysisModel):
    """Knobs derived from a subscription tier, passed by value to every stage."""

    max_input_chars: int = Field(..., gt=0, description="Hard cut on source text length")
    summary_depth: Depth = Field(..., description="Summary length and detail")
    risk_detail: Depth = Field(..., description="Risk category coverage")
    clause_detail: Depth = Field(..., description="Clause inventory breadth")


class AnalysisRequest(AnalysisModel):
    """One pipeline invocation; never persisted."""

    text: str = Field(default="", description="Already extracted source text")
    tier: Tier = Field(default=Tier.FREE, description="Subscription tier")
    correlation_id: str = Field(
        default_factory=lambda: uuid.uuid4().hex,
        description="Identifier threaded through log entries"
    )


class PlanLimits(AnalysisModel):
    """Usage limits attached to a subscription tier."""

    contracts_per_month: int = Field(..., description="-1 for unlimited")
    max_file_size_mb: int = Field(..., description="-1 for unlimited")
    contract_history_days: int = Field(default=7, description="-1 for unlimited")
    upload_types: tuple[str, ...] = Field(default=("pdf", "docx", "txt", "md"))
    export_formats: tuple[str, ...] = Field(default=("pdf",))
    analysis_depth: str = Field(default="basic", description="Marketing label")


# =============================================================================
# Finding Models
# =============================================================================

class RiskFinding(AnalysisModel):
    """A flagged contractual risk."""

    id: str = Field(..., description="Sequential id, risk-1, risk-2, ...")
    type: RiskType
    severity: Severity
    title: str
    description: str
    clause_text: str = Field(default="", description="Quoted clause text")
    suggestion: Optional[str] = Field(default=None, description="Remediation advice")


class ClauseExplanation(AnalysisModel):
    """Plain-language explanation of one contract clause."""

    clause_title: str
    clause_text: Optional[str] = None
    explanation: str
    importance: Importance


# =============================================================================
# Structured Blocks
# =============================================================================

class KeyParties(AnalysisModel):
    party1: str = "Unknown"
    party2: str = "Unknown"


class Dates(AnalysisModel):
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    signing_date: Optional[str] = None
    effective_date: Optional[str] = None


class PaymentAmount(AnalysisModel):
    amount: str
    schedule: str = ""
    due_date: Optional[str] = None


class FinancialDetails(AnalysisModel):
    total_value: Optional[str] = None
    currency: Optional[str] = None
    payment_amounts: Optional[tuple[PaymentAmount, ...]] = None


class LegalInfo(AnalysisModel):
    governing_law: Optional[str] = None
    jurisdiction: Optional[str] = None
    dispute_resolution: Optional[str] = None
    venue: Optional[str] = None


class Signatory(AnalysisModel):
    name: str
    title: Optional[str] = None
    role: Optional[str] = None
    party: str = ""


class ContractMetadata(AnalysisModel):
    contract_type: Optional[str] = None
    category: Optional[str] = None
    signatories: Optional[tuple[Signatory, ...]] = None


class RenewalTerms(AnalysisModel):
    auto_renewal: Optional[bool] = None
    notice_period: Optional[str] = None
    renewal_term: Optional[str] = None
    conditions: Optional[str] = None


class TerminationTerms(AnalysisModel):
    notice_period: Optional[str] = None
    termination_fees: Optional[str] = None
    conditions: Optional[tuple[str, ...]] = None


class IntellectualPropertyTerms(AnalysisModel):
    ownership: Optional[str] = None
    licensing: Optional[str] = None
    restrictions: Optional[str] = None


class ConfidentialityTerms(AnalysisModel):
    scope: Optional[str] = None
    duration: Optional[str] = None
    exceptions: Optional[tuple[str, ...]] = None


class ForceMajeureTerms(AnalysisModel):
    definition: Optional[str] = None
    consequences: Optional[str] = None


class InsuranceTerms(AnalysisModel):
    requirements: Optional[tuple[str, ...]] = None
    minimum_coverage: Optional[str] = None


class StructuredTerms(AnalysisModel):
    renewal: Optional[RenewalTerms] = None
    termination: Optional[TerminationTerms] = None
    intellectual_property: Optional[IntellectualPropertyTerms] = None
    confidentiality: Optional[ConfidentialityTerms] = None
    force_majeure: Optional[ForceMajeureTerms] = None
    insurance: Optional[InsuranceTerms] = None


class Milestone(AnalysisModel):
    name: str
    date: Optional[str] = None
    description: Optional[str] = None


class PerformanceMetrics(AnalysisModel):
    slas: Optional[tuple[str, ...]] = None
    kpis: Optional[tuple[str, ...]] = None
    deliverables: Optional[tuple[str, ...]] = None
    milestones: Optional[tuple[Milestone, ...]] = None


# =============================================================================
# Analysis Result
# =============================================================================

class AnalysisMetadata(AnalysisModel):
    """Provenance stamped by the assembler."""

    total_clauses: int = Field(..., ge=0, description="Always len(clause_explanations)")
    analyzed_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Assembly wall-clock time"
    )
    model: str = Field(..., description="Completion model identifier")
    tier: Optional[Tier] = None
    correlation_id: Optional[str] = None
    stages: dict[str, StageStatus] = Field(
        default_factory=dict,
        description="Per-stage completion status"
    )


class ContractAnalysis(AnalysisModel):
    """The assembled, immutable analysis of one contract."""

    summary: str = ""
    key_parties: KeyParties = Field(default_factory=KeyParties)
    duration: Optional[str] = None
    payment_terms: Optional[str] = None
    obligations: tuple[str, ...] = ()
    risk_flags: tuple[RiskFinding, ...] = ()
    clause_explanations: tuple[ClauseExplanation, ...] = ()

    dates: Optional[Dates] = None
    financial_details: Optional[FinancialDetails] = None
    legal_info: Optional[LegalInfo] = None
    contract_metadata: Optional[ContractMetadata] = None
    structured_terms: Optional[StructuredTerms] = None
    performance_metrics: Optional[PerformanceMetrics] = None

    metadata: AnalysisMetadata

    @model_validator(mode="after")
    def _check_clause_count(self) -> "ContractAnalysis":
        if self.metadata.total_clauses != len(self.clause_explanations):
            raise ValueError(
                f"metadata.total_clauses={self.metadata.total_clauses} does not "
                f"match {len(self.clause_explanations)} clause explanations"
            )
        return self

    def to_dict(self) -> dict[str, Any]:
        """Export shape: camelCase keys, absent optional blocks omitted."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)

    def to_json(self, indent: Optional[int] = 2) -> str:
        return self.model_dump_json(by_alias=True, exclude_none=True, indent=indent)


# =============================================================================
# Document and Completion Models
# =============================================================================

class ExtractedDocument(AnalysisModel):
    """Plain text pulled out of an uploaded document."""

    text: str = Field(..., description="Extracted text, never truncated")
    metadata: dict[str, Any] = Field(default_factory=dict)


class CompletionResult(AnalysisModel):
    """Response from the completion service: free text or parsed JSON."""

    text: Optional[str] = Field(default=None, description="Free-text mode content")
    json_data: Optional[Any] = Field(default=None, description="JSON mode parsed payload")
    model: str = Field(default="", description="Model that generated the response")
    tokens_used: int = Field(default=0, description="Tokens consumed")
    generation_time: float = Field(default=0.0, description="Seconds spent waiting")

    @model_validator(mode="after")
    def _exactly_one_payload(self) -> "CompletionResult":
        if (self.text is None) == (self.json_data is None):
            raise ValueError("CompletionResult needs exactly one of text or json_data")
        return self

    @property
    def is_json(self) -> bool:
        return self.json_data is not None
