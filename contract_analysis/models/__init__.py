"""
Data models package for the contract analysis pipeline.
"""

from contract_analysis.models.schemas import (
    AnalysisMetadata,
    AnalysisRequest,
    ClauseExplanation,
    CompletionResult,
    ConfidentialityTerms,
    ContractAnalysis,
    ContractMetadata,
    Dates,
    Depth,
    ExtractedDocument,
    FinancialDetails,
    ForceMajeureTerms,
    Importance,
    InsuranceTerms,
    IntellectualPropertyTerms,
    KeyParties,
    LegalInfo,
    Milestone,
    PaymentAmount,
    PerformanceMetrics,
    PlanLimits,
    RenewalTerms,
    RiskFinding,
    RiskType,
    Severity,
    Signatory,
    StageStatus,
    StructuredTerms,
    TerminationTerms,
    Tier,
    TierProfile,
)

__all__ = [
    "AnalysisMetadata",
    "AnalysisRequest",
    "ClauseExplanation",
    "CompletionResult",
    "ConfidentialityTerms",
    "ContractAnalysis",
    "ContractMetadata",
    "Dates",
    "Depth",
    "ExtractedDocument",
    "FinancialDetails",
    "ForceMajeureTerms",
    "Importance",
    "InsuranceTerms",
    "IntellectualPropertyTerms",
    "KeyParties",
    "LegalInfo",
    "Milestone",
    "PaymentAmount",
    "PerformanceMetrics",
    "PlanLimits",
    "RenewalTerms",
    "RiskFinding",
    "RiskType",
    "Severity",
    "Signatory",
    "StageStatus",
    "StructuredTerms",
    "TerminationTerms",
    "Tier",
    "TierProfile",
]
