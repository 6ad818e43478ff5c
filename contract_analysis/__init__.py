"""
Contract analysis package.

Turns an uploaded contract into a tier-gated ContractAnalysis: summary,
parties/dates/financial extraction, risk flags and clause explanations.
"""

from contract_analysis.exceptions import (
    CompletionError,
    ConfigurationError,
    ContractAnalysisError,
    ExtractionError,
    MalformedResponseError,
    StageFailure,
    StageTimeoutError,
    UnknownTierError,
    UploadRejectedError,
)
from contract_analysis.models import ContractAnalysis, Tier, TierProfile
from contract_analysis.pipeline import (
    ContractAnalysisAgent,
    ContractAnalyzer,
    analyze_sync,
    resolve_tier_profile,
)

__all__ = [
    "CompletionError",
    "ConfigurationError",
    "ContractAnalysisError",
    "ExtractionError",
    "MalformedResponseError",
    "StageFailure",
    "StageTimeoutError",
    "UnknownTierError",
    "UploadRejectedError",
    "ContractAnalysis",
    "Tier",
    "TierProfile",
    "ContractAnalysisAgent",
    "ContractAnalyzer",
    "analyze_sync",
    "resolve_tier_profile",
]

__version__ = "0.1.0"
