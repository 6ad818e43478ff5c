"""
Tests for merging stage outputs into a ContractAnalysis.
"""

from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from contract_analysis.models.schemas import (
    AnalysisMetadata,
    ClauseExplanation,
    ContractAnalysis,
    Importance,
    RiskFinding,
    RiskType,
    Severity,
    StageStatus,
    Tier,
)
from contract_analysis.pipeline.assembler import AnalysisAssembler


@pytest.fixture
def assembler():
    return AnalysisAssembler()


def _clause(title="Term"):
    return ClauseExplanation(
        clause_title=title, explanation="Plain words.", importance=Importance.STANDARD
    )


def _assemble(assembler, structured=None, summary="", risks=None, clauses=None, **kwargs):
    return assembler.assemble(
        structured=structured if structured is not None else {},
        summary=summary,
        risks=risks or [],
        clauses=clauses or [],
        model="gpt-4o",
        **kwargs
    )


# =============================================================================
# Defaults
# =============================================================================

class TestDefaults:

    def test_all_stages_empty(self, assembler):
        analysis = _assemble(assembler)

        assert analysis.summary == ""
        assert analysis.key_parties.party1 == "Unknown"
        assert analysis.key_parties.party2 == "Unknown"
        assert analysis.obligations == ()
        assert analysis.risk_flags == ()
        assert analysis.clause_explanations == ()
        assert analysis.metadata.total_clauses == 0
        assert analysis.metadata.model == "gpt-4o"
        assert analysis.dates is None

    def test_partial_parties(self, assembler):
        analysis = _assemble(assembler, {"keyParties": {"party1": "Acme", "party2": "  "}})
        assert analysis.key_parties.party1 == "Acme"
        assert analysis.key_parties.party2 == "Unknown"

    def test_non_dict_structured_is_ignored(self, assembler):
        analysis = _assemble(assembler, structured=["not", "an", "object"])
        assert analysis.key_parties.party1 == "Unknown"

    def test_total_clauses_matches(self, assembler):
        analysis = _assemble(assembler, clauses=[_clause("A"), _clause("B"), _clause("C")])
        assert analysis.metadata.total_clauses == 3


# =============================================================================
# Structured Coercion
# =============================================================================

class TestStructuredCoercion:

    def test_camel_and_snake_keys(self, assembler):
        camel = _assemble(assembler, {"dates": {"effectiveDate": "2024-01-01"}})
        snake = _assemble(assembler, {"dates": {"effective_date": "2024-01-01"}})

        assert camel.dates.effective_date == "2024-01-01"
        assert camel.dates == snake.dates

    def test_empty_block_is_omitted(self, assembler):
        analysis = _assemble(assembler, {
            "dates": {"startDate": None, "endDate": ""},
            "legalInfo": "Delaware",
            "financialDetails": {"totalValue": 120000, "currency": "USD"},
        })

        assert analysis.dates is None
        assert analysis.legal_info is None
        assert analysis.financial_details.total_value == "120000"

    def test_wrong_types_are_dropped(self, assembler):
        analysis = _assemble(assembler, {
            "duration": {"years": 2},
            "obligations": ["Pay on time", 7, None, ""],
            "structuredTerms": {
                "renewal": {"autoRenewal": "yes", "noticePeriod": "60 days"},
                "termination": {"conditions": "Material breach"},
            },
        })

        assert analysis.duration is None
        assert analysis.obligations == ("Pay on time", "7")
        assert analysis.structured_terms.renewal.auto_renewal is True
        assert analysis.structured_terms.termination.conditions == ("Material breach",)
        assert analysis.structured_terms.insurance is None

    def test_nested_records_skip_invalid_items(self, assembler):
        analysis = _assemble(assembler, {
            "contractMetadata": {
                "contractType": "MSA",
                "signatories": [{"name": "Jane Doe", "party": "Acme"}, {"title": "CEO"}],
            },
            "performanceMetrics": {"milestones": [{"name": "Kickoff"}, "junk"]},
        })

        assert [s.name for s in analysis.contract_metadata.signatories] == ["Jane Doe"]
        assert analysis.performance_metrics.milestones[0].name == "Kickoff"


# =============================================================================
# Serialization and Metadata
# =============================================================================

class TestSerialization:

    def test_to_dict_is_camel_case_without_nulls(self, assembler):
        risk = RiskFinding(
            id="risk-1", type=RiskType.PAYMENT, severity=Severity.MEDIUM,
            title="Late fee", description="5% monthly late fee."
        )
        analysis = _assemble(
            assembler,
            {"keyParties": {"party1": "Acme"}, "dates": {"endDate": "2025-12-31"}},
            summary="A services agreement.",
            risks=[risk],
            clauses=[_clause()],
            tier=Tier.PRO,
            stages={"risks": StageStatus.OK},
        )

        data = analysis.to_dict()

        assert data["keyParties"] == {"party1": "Acme", "party2": "Unknown"}
        assert data["dates"] == {"endDate": "2025-12-31"}
        assert "legalInfo" not in data
        assert "duration" not in data
        assert data["riskFlags"][0]["clauseText"] == ""
        assert "suggestion" not in data["riskFlags"][0]
        assert data["clauseExplanations"][0]["clauseTitle"] == "Term"
        assert data["metadata"]["totalClauses"] == 1
        assert data["metadata"]["tier"] == "pro"
        assert data["metadata"]["stages"] == {"risks": "ok"}

    def test_analyzed_at_is_assembly_time(self, assembler):
        before = datetime.now(timezone.utc)
        analysis = _assemble(assembler)
        after = datetime.now(timezone.utc)

        assert before <= analysis.metadata.analyzed_at <= after

    def test_analyzed_at_override(self, assembler):
        fixed = datetime(2024, 1, 1, tzinfo=timezone.utc)
        analysis = _assemble(assembler, analyzed_at=fixed)
        assert analysis.metadata.analyzed_at == fixed

    def test_analysis_is_immutable(self, assembler):
        analysis = _assemble(assembler, summary="original")
        with pytest.raises(ValidationError):
            analysis.summary = "changed"

    def test_clause_count_mismatch_rejected(self):
        with pytest.raises(ValidationError):
            ContractAnalysis(
                clause_explanations=(_clause(),),
                metadata=AnalysisMetadata(total_clauses=2, model="gpt-4o"),
            )
