"""
Analysis assembler.

Deterministic merge of the four stage outputs into one immutable
ContractAnalysis. The structured stage's loose object is coerced field
by field; anything malformed is dropped rather than raised, so the
assembler cannot reject a request.
"""

from datetime import datetime, timezone
from typing import Any, Optional

from pydantic import BaseModel

from contract_analysis.models.schemas import (
    AnalysisMetadata,
    ClauseExplanation,
    ConfidentialityTerms,
    ContractAnalysis,
    ContractMetadata,
    Dates,
    FinancialDetails,
    ForceMajeureTerms,
    InsuranceTerms,
    IntellectualPropertyTerms,
    KeyParties,
    LegalInfo,
    Milestone,
    PaymentAmount,
    PerformanceMetrics,
    RenewalTerms,
    RiskFinding,
    Signatory,
    StageStatus,
    StructuredTerms,
    TerminationTerms,
    Tier,
)
from contract_analysis.pipeline.coerce import as_bool, as_str, as_str_list, pick


def _block(model: type[BaseModel], **fields: Any) -> Optional[BaseModel]:
    """Build a block only if at least one leaf survived coercion."""
    present = {k: v for k, v in fields.items() if v is not None}
    if not present:
        return None
    return model(**present)


def _records(value: Any, build) -> Optional[tuple]:
    """Coerce a list of objects with build(); invalid items are skipped."""
    if not isinstance(value, list):
        return None
    items = tuple(r for r in (build(v) for v in value) if r is not None)
    return items or None


# =============================================================================
# Analysis Assembler
# =============================================================================

class AnalysisAssembler:
    """
    Merges stage outputs into a ContractAnalysis.

    Example:
        >>> analysis = AnalysisAssembler().assemble(
        ...     structured={"keyParties": {"party1": "Acme"}},
        ...     summary="...", risks=[], clauses=[], model="gpt-4o")
        >>> analysis.key_parties.party2
        'Unknown'
    """

    def assemble(
        self,
        structured: dict,
        summary: str,
        risks: list[RiskFinding],
        clauses: list[ClauseExplanation],
        model: str,
        tier: Optional[Tier] = None,
        correlation_id: Optional[str] = None,
        stages: Optional[dict[str, StageStatus]] = None,
        analyzed_at: Optional[datetime] = None
    ) -> ContractAnalysis:
        """
        Build the immutable analysis record.

        Args:
            structured: Loose object from the structured extraction stage
            summary: Summary text ("" when the stage failed)
            risks: Validated risk findings, ids already assigned
            clauses: Validated clause explanations
            model: Completion model identifier for provenance
            tier: Tier the analysis ran under
            correlation_id: Request correlation id
            stages: Per-stage completion status
            analyzed_at: Override for the assembly timestamp (tests)

        Returns:
            ContractAnalysis
        """
        structured = structured if isinstance(structured, dict) else {}
        clauses = list(clauses or [])

        return ContractAnalysis(
            summary=summary or "",
            key_parties=self._key_parties(pick(structured, "key_parties")),
            duration=as_str(pick(structured, "duration")),
            payment_terms=as_str(pick(structured, "payment_terms")),
            obligations=as_str_list(pick(structured, "obligations")) or (),
            risk_flags=tuple(risks or ()),
            clause_explanations=tuple(clauses),
            dates=self._dates(pick(structured, "dates")),
            financial_details=self._financial_details(pick(structured, "financial_details")),
            legal_info=self._legal_info(pick(structured, "legal_info")),
            contract_metadata=self._contract_metadata(pick(structured, "contract_metadata")),
            structured_terms=self._structured_terms(pick(structured, "structured_terms")),
            performance_metrics=self._performance_metrics(
                pick(structured, "performance_metrics")
            ),
            metadata=AnalysisMetadata(
                total_clauses=len(clauses),
                analyzed_at=analyzed_at or datetime.now(timezone.utc),
                model=model,
                tier=tier,
                correlation_id=correlation_id,
                stages=dict(stages or {}),
            ),
        )

    # -------------------------------------------------------------------------
    # Block Coercion
    # -------------------------------------------------------------------------

    @staticmethod
    def _key_parties(data: Any) -> KeyParties:
        return KeyParties(
            party1=as_str(pick(data, "party1")) or "Unknown",
            party2=as_str(pick(data, "party2")) or "Unknown",
        )

    @staticmethod
    def _dates(data: Any) -> Optional[Dates]:
        return _block(
            Dates,
            start_date=as_str(pick(data, "start_date")),
            end_date=as_str(pick(data, "end_date")),
            signing_date=as_str(pick(data, "signing_date")),
            effective_date=as_str(pick(data, "effective_date")),
        )

    @staticmethod
    def _financial_details(data: Any) -> Optional[FinancialDetails]:
        def payment(item: Any) -> Optional[PaymentAmount]:
            amount = as_str(pick(item, "amount"))
            if amount is None:
                return None
            return PaymentAmount(
                amount=amount,
                schedule=as_str(pick(item, "schedule")) or "",
                due_date=as_str(pick(item, "due_date")),
            )

        return _block(
            FinancialDetails,
            total_value=as_str(pick(data, "total_value")),
            currency=as_str(pick(data, "currency")),
            payment_amounts=_records(pick(data, "payment_amounts"), payment),
        )

    @staticmethod
    def _legal_info(data: Any) -> Optional[LegalInfo]:
        return _block(
            LegalInfo,
            governing_law=as_str(pick(data, "governing_law")),
            jurisdiction=as_str(pick(data, "jurisdiction")),
            dispute_resolution=as_str(pick(data, "dispute_resolution")),
            venue=as_str(pick(data, "venue")),
        )

    @staticmethod
    def _contract_metadata(data: Any) -> Optional[ContractMetadata]:
        def signatory(item: Any) -> Optional[Signatory]:
            name = as_str(pick(item, "name"))
            if name is None:
                return None
            return Signatory(
                name=name,
                title=as_str(pick(item, "title")),
                role=as_str(pick(item, "role")),
                party=as_str(pick(item, "party")) or "",
            )

        return _block(
            ContractMetadata,
            contract_type=as_str(pick(data, "contract_type")),
            category=as_str(pick(data, "category")),
            signatories=_records(pick(data, "signatories"), signatory),
        )

    @staticmethod
    def _structured_terms(data: Any) -> Optional[StructuredTerms]:
        renewal = pick(data, "renewal")
        termination = pick(data, "termination")
        ip = pick(data, "intellectual_property")
        confidentiality = pick(data, "confidentiality")
        force_majeure = pick(data, "force_majeure")
        insurance = pick(data, "insurance")

        return _block(
            StructuredTerms,
            renewal=_block(
                RenewalTerms,
                auto_renewal=as_bool(pick(renewal, "auto_renewal")),
                notice_period=as_str(pick(renewal, "notice_period")),
                renewal_term=as_str(pick(renewal, "renewal_term")),
                conditions=as_str(pick(renewal, "conditions")),
            ),
            termination=_block(
                TerminationTerms,
                notice_period=as_str(pick(termination, "notice_period")),
                termination_fees=as_str(pick(termination, "termination_fees")),
                conditions=as_str_list(pick(termination, "conditions")),
            ),
            intellectual_property=_block(
                IntellectualPropertyTerms,
                ownership=as_str(pick(ip, "ownership")),
                licensing=as_str(pick(ip, "licensing")),
                restrictions=as_str(pick(ip, "restrictions")),
            ),
            confidentiality=_block(
                ConfidentialityTerms,
                scope=as_str(pick(confidentiality, "scope")),
                duration=as_str(pick(confidentiality, "duration")),
                exceptions=as_str_list(pick(confidentiality, "exceptions")),
            ),
            force_majeure=_block(
                ForceMajeureTerms,
                definition=as_str(pick(force_majeure, "definition")),
                consequences=as_str(pick(force_majeure, "consequences")),
            ),
            insurance=_block(
                InsuranceTerms,
                requirements=as_str_list(pick(insurance, "requirements")),
                minimum_coverage=as_str(pick(insurance, "minimum_coverage")),
            ),
        )

    @staticmethod
    def _performance_metrics(data: Any) -> Optional[PerformanceMetrics]:
        def milestone(item: Any) -> Optional[Milestone]:
            name = as_str(pick(item, "name"))
            if name is None:
                return None
            return Milestone(
                name=name,
                date=as_str(pick(item, "date")),
                description=as_str(pick(item, "description")),
            )

        return _block(
            PerformanceMetrics,
            slas=as_str_list(pick(data, "slas")),
            kpis=as_str_list(pick(data, "kpis")),
            deliverables=as_str_list(pick(data, "deliverables")),
            milestones=_records(pick(data, "milestones"), milestone),
        )
