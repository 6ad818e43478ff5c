"""
Report rendering for contract analyses.

Terminal text, Markdown and JSON views of a ContractAnalysis, used by
the CLI. Richer export formats belong to the downstream export layer.
"""

from enum import Enum
from pathlib import Path
from typing import Union

from contract_analysis.models.schemas import (
    ContractAnalysis,
    Importance,
    Severity,
    StageStatus,
)


# =============================================================================
# Report Templates
# =============================================================================

REPORT_HEADER = """
═══════════════════════════════════════════════════════════════════════════════
                           CONTRACT ANALYSIS REPORT
═══════════════════════════════════════════════════════════════════════════════
"""

OVERVIEW_TEMPLATE = """
Parties: {party1} / {party2}
Analysis Date: {date}
Model: {model} (tier: {tier})
Risks Flagged: {risk_count} ({high_count} high)
Clauses Explained: {clause_count}
"""

SECTION_RULE = "─" * 79


class ReportFormat(str, Enum):
    """File formats save_report can write."""
    MARKDOWN = "markdown"
    JSON = "json"
    TEXT = "text"


SEVERITY_EMOJI = {
    Severity.HIGH: "🔴",
    Severity.MEDIUM: "🟡",
    Severity.LOW: "🟢",
}

IMPORTANCE_MARKER = {
    Importance.CRITICAL: "[CRITICAL]",
    Importance.IMPORTANT: "[IMPORTANT]",
    Importance.STANDARD: "[STANDARD]",
}


# =============================================================================
# Report Generator
# =============================================================================

class ReportGenerator:
    """
    Renders analyses as text, Markdown or JSON.
    """

    def __init__(self, include_clauses: bool = True):
        """
        Args:
            include_clauses: Whether to include clause explanations
        """
        self.include_clauses = include_clauses

    # -------------------------------------------------------------------------
    # Main Report Methods
    # -------------------------------------------------------------------------

    def generate_text_report(self, analysis: ContractAnalysis) -> str:
        """
        Generate a plain text report for terminal display.

        Args:
            analysis: Contract analysis

        Returns:
            Formatted text report
        """
        parts = [REPORT_HEADER, self._format_overview(analysis)]

        if analysis.summary:
            parts.extend([SECTION_RULE, "SUMMARY", "", analysis.summary, ""])

        if analysis.risk_flags:
            parts.extend([SECTION_RULE, "RISK FLAGS", ""])
            for risk in analysis.risk_flags:
                parts.append(
                    f"{SEVERITY_EMOJI[risk.severity]} {risk.id:<8} {risk.title} "
                    f"({risk.type.value}, {risk.severity.value})"
                )
                if risk.suggestion:
                    parts.append(f"   Suggestion: {risk.suggestion}")
            parts.append("")

        if self.include_clauses and analysis.clause_explanations:
            parts.extend([SECTION_RULE, "CLAUSES", ""])
            for clause in analysis.clause_explanations:
                parts.append(f"{IMPORTANCE_MARKER[clause.importance]} {clause.clause_title}")
                parts.append(f"   {clause.explanation}")
            parts.append("")

        degraded = self._degraded_stages(analysis)
        if degraded:
            parts.append(f"Incomplete: {', '.join(degraded)} stage(s) did not complete")

        parts.append("═" * 79)
        return "\n".join(parts)

    def generate_markdown_report(self, analysis: ContractAnalysis) -> str:
        """
        Generate a Markdown report.

        Args:
            analysis: Contract analysis

        Returns:
            Markdown report
        """
        meta = analysis.metadata
        lines = [
            "# Contract Analysis Report",
            "",
            f"**Parties:** {analysis.key_parties.party1} / {analysis.key_parties.party2}",
            f"**Analysis Date:** {meta.analyzed_at.strftime('%Y-%m-%d %H:%M')} UTC",
            f"**Model:** {meta.model}",
            "",
            "---",
            "",
            "## Summary",
            "",
            analysis.summary or "_No summary available._",
            "",
        ]

        key_terms = [
            ("Duration", analysis.duration),
            ("Payment Terms", analysis.payment_terms),
        ]
        if analysis.dates:
            key_terms.extend([
                ("Effective Date", analysis.dates.effective_date),
                ("Start Date", analysis.dates.start_date),
                ("End Date", analysis.dates.end_date),
            ])
        if analysis.legal_info:
            key_terms.append(("Governing Law", analysis.legal_info.governing_law))

        key_terms = [(label, value) for label, value in key_terms if value]
        if key_terms:
            lines.extend(["## Key Terms", "", "| Term | Value |", "|------|-------|"])
            lines.extend(f"| {label} | {value} |" for label, value in key_terms)
            lines.append("")

        if analysis.obligations:
            lines.extend(["## Obligations", ""])
            lines.extend(f"- {item}" for item in analysis.obligations)
            lines.append("")

        lines.extend(["## Risk Flags", ""])
        if not analysis.risk_flags:
            lines.extend(["_No risks flagged._", ""])
        for risk in analysis.risk_flags:
            lines.extend([
                f"### {SEVERITY_EMOJI[risk.severity]} {risk.title}",
                "",
                f"**Type:** {risk.type.value} | **Severity:** {risk.severity.value.upper()}",
                "",
                risk.description,
                "",
            ])
            if risk.clause_text:
                lines.extend([f"> {risk.clause_text[:300]}", ""])
            if risk.suggestion:
                lines.extend([f"**Suggestion:** {risk.suggestion}", ""])

        if self.include_clauses and analysis.clause_explanations:
            lines.extend(["## Clause Explanations", ""])
            for clause in analysis.clause_explanations:
                lines.extend([
                    f"### {clause.clause_title} ({clause.importance.value})",
                    "",
                    clause.explanation,
                    "",
                ])

        degraded = self._degraded_stages(analysis)
        if degraded:
            lines.extend([
                f"*Note: the {', '.join(degraded)} stage(s) did not complete; "
                "those sections may be empty.*",
                "",
            ])

        # Disclaimer
        lines.extend([
            "---",
            "",
            "*This analysis is generated by an AI system for informational purposes only. "
            "It is not legal advice. Always consult a qualified legal professional.*",
        ])

        return "\n".join(lines)

    def generate_json_report(self, analysis: ContractAnalysis) -> str:
        """JSON in the export shape: camelCase, absent blocks omitted."""
        return analysis.to_json(indent=2)

    # -------------------------------------------------------------------------
    # Formatting Helpers
    # -------------------------------------------------------------------------

    def _format_overview(self, analysis: ContractAnalysis) -> str:
        meta = analysis.metadata
        return OVERVIEW_TEMPLATE.format(
            party1=analysis.key_parties.party1,
            party2=analysis.key_parties.party2,
            date=meta.analyzed_at.strftime("%Y-%m-%d"),
            model=meta.model,
            tier=meta.tier.value if meta.tier else "n/a",
            risk_count=len(analysis.risk_flags),
            high_count=sum(1 for r in analysis.risk_flags if r.severity == Severity.HIGH),
            clause_count=meta.total_clauses,
        )

    @staticmethod
    def _degraded_stages(analysis: ContractAnalysis) -> list[str]:
        return [
            name for name, status in analysis.metadata.stages.items()
            if status in (StageStatus.FAILED, StageStatus.TIMEOUT)
        ]


# =============================================================================
# Convenience Functions
# =============================================================================

def print_report(analysis: ContractAnalysis, verbose: bool = False):
    """
    Print a formatted report to the terminal.

    Args:
        analysis: Contract analysis
        verbose: Whether to include clause explanations
    """
    print(ReportGenerator(include_clauses=verbose).generate_text_report(analysis))


def save_report(
    analysis: ContractAnalysis,
    filepath: Union[str, Path],
    format: Union[ReportFormat, str] = ReportFormat.MARKDOWN
):
    """
    Save a report to file.

    Args:
        analysis: Contract analysis
        filepath: Output file path
        format: Report format (markdown, json, text)

    Raises:
        ValueError: If the format is not a ReportFormat value
    """
    format = ReportFormat(format)
    generator = ReportGenerator()

    if format == ReportFormat.JSON:
        content = generator.generate_json_report(analysis)
    elif format == ReportFormat.TEXT:
        content = generator.generate_text_report(analysis)
    else:
        content = generator.generate_markdown_report(analysis)

    with open(filepath, "w", encoding="utf-8") as f:
        f.write(content)
