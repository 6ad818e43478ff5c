"""
Analysis pipeline: tier policy, stages, assembler and orchestration.
"""

from contract_analysis.pipeline.analyzer import ContractAnalyzer
from contract_analysis.pipeline.assembler import AnalysisAssembler
from contract_analysis.pipeline.core import ContractAnalysisAgent, analyze_sync
from contract_analysis.pipeline.reporter import (
    ReportFormat,
    ReportGenerator,
    print_report,
    save_report,
)
from contract_analysis.pipeline.stages import (
    ClauseExplanationStage,
    RiskDetectionStage,
    Stage,
    StageOutcome,
    StructuredDataStage,
    SummaryStage,
)
from contract_analysis.pipeline.tiers import (
    TIER_PROFILES,
    can_export_format,
    check_upload,
    get_plan_limits,
    parse_tier,
    resolve_tier_profile,
    truncate_text,
)

__all__ = [
    "ContractAnalyzer",
    "AnalysisAssembler",
    "ContractAnalysisAgent",
    "analyze_sync",
    "ReportFormat",
    "ReportGenerator",
    "print_report",
    "save_report",
    "ClauseExplanationStage",
    "RiskDetectionStage",
    "Stage",
    "StageOutcome",
    "StructuredDataStage",
    "SummaryStage",
    "TIER_PROFILES",
    "can_export_format",
    "check_upload",
    "get_plan_limits",
    "parse_tier",
    "resolve_tier_profile",
    "truncate_text",
]
