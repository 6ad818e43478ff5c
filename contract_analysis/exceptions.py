"""
Error taxonomy for the contract analysis pipeline.

Only extraction, upload and configuration errors reach callers. Stage
failures are absorbed at the stage boundary and surface as degraded
output plus a log entry.
"""

from typing import Optional


class ContractAnalysisError(Exception):
    """Base class for all errors raised by this package."""


class ConfigurationError(ContractAnalysisError):
    """Required configuration (e.g. API credentials) is missing or invalid."""


class ExtractionError(ContractAnalysisError):
    """
    The document bytes could not be parsed as the declared type.

    Fatal to the whole request: without text there is nothing to analyze.
    """

    def __init__(self, message: str, file_type: Optional[str] = None):
        super().__init__(message)
        self.file_type = file_type


class UploadRejectedError(ContractAnalysisError):
    """The upload exceeds what the subscription plan allows."""


class UnknownTierError(ContractAnalysisError):
    """A tier name is not one of the known subscription tiers."""

    def __init__(self, tier: object):
        super().__init__(f"Unknown subscription tier: {tier!r}")
        self.tier = tier


class StageFailure(ContractAnalysisError):
    """A single pipeline stage failed; isolated by the stage runner."""

    def __init__(self, message: str, stage: Optional[str] = None):
        super().__init__(message)
        self.stage = stage


class CompletionError(StageFailure):
    """The completion endpoint could not be reached or returned an error status."""


class MalformedResponseError(StageFailure):
    """The completion service returned a payload that failed JSON/schema parsing."""

    def __init__(self, message: str, raw: str = "", stage: Optional[str] = None):
        super().__init__(message, stage=stage)
        self.raw = raw[:500]


class StageTimeoutError(StageFailure):
    """A stage did not finish within its time budget."""
