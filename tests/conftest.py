"""
Shared fixtures: a scripted completion client and sample contract text.
"""

import asyncio
from typing import Any, Optional

import pytest

from contract_analysis.models.schemas import CompletionResult
from contract_analysis.pipeline import prompts


STAGE_BY_SYSTEM_PROMPT = {
    prompts.STRUCTURED_SYSTEM_PROMPT: "structured",
    prompts.SUMMARY_SYSTEM_PROMPT: "summary",
    prompts.RISK_SYSTEM_PROMPT: "risks",
    prompts.CLAUSE_SYSTEM_PROMPT: "clauses",
}


class StubCompletionClient:
    """
    Completion client that answers from canned per-stage responses.

    A response may be a JSON value, a string, or an exception instance to
    raise. Calls, in-flight concurrency and cancellations are recorded.
    """

    def __init__(
        self,
        responses: Optional[dict[str, Any]] = None,
        delays: Optional[dict[str, float]] = None,
        model: str = "stub-model"
    ):
        self.responses = responses or {}
        self.delays = delays or {}
        self.model = model
        self.base_url = "http://stub.local/v1"
        self.calls: list[dict] = []
        self.in_flight = 0
        self.max_in_flight = 0
        self.cancelled = 0

    async def complete(
        self,
        system_instruction: str,
        user_prompt: str,
        expect_json: bool = False,
        temperature: float = 0.3,
        model: Optional[str] = None,
        max_tokens: Optional[int] = None
    ) -> CompletionResult:
        stage = STAGE_BY_SYSTEM_PROMPT[system_instruction]
        self.calls.append({
            "stage": stage,
            "prompt": user_prompt,
            "expect_json": expect_json,
            "temperature": temperature,
        })

        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.delays.get(stage, 0.01))
        except asyncio.CancelledError:
            self.cancelled += 1
            raise
        finally:
            self.in_flight -= 1

        response = self.responses.get(stage)
        if isinstance(response, BaseException):
            raise response

        if expect_json:
            return CompletionResult(
                json_data=response if response is not None else {},
                model=self.model,
            )
        return CompletionResult(text=response if response is not None else "", model=self.model)

    def prompts_for(self, stage: str) -> list[str]:
        return [call["prompt"] for call in self.calls if call["stage"] == stage]

    async def is_available(self) -> bool:
        return True

    async def aclose(self):
        pass


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def canned_responses():
    """Well-formed responses for all four stages."""
    return {
        "structured": {
            "keyParties": {"party1": "Acme Corp", "party2": "Globex Inc"},
            "obligations": ["Keep information confidential"],
            "dates": {"effectiveDate": "2024-01-01"},
            "contractMetadata": {"contractType": "NDA"},
        },
        "summary": "  This is a mutual NDA between Acme Corp and Globex Inc.  ",
        "risks": {
            "risks": [
                {
                    "type": "termination",
                    "severity": "low",
                    "title": "No termination notice",
                    "description": "Either party may end the agreement at will.",
                    "clauseText": "This Agreement may be terminated at any time.",
                },
                {
                    "type": "liability",
                    "severity": "high",
                    "title": "Uncapped liability",
                    "description": "Liability for breach is not limited.",
                    "clauseText": "The Receiving Party shall be liable for all damages.",
                    "suggestion": "Negotiate a liability cap.",
                },
            ]
        },
        "clauses": {
            "clauses": [
                {
                    "clauseTitle": "Confidentiality",
                    "clauseText": "The Receiving Party shall hold ...",
                    "explanation": "You must keep the other side's information secret.",
                    "importance": "critical",
                },
                {
                    "clauseTitle": "Governing Law",
                    "explanation": "Delaware law applies.",
                    "importance": "standard",
                },
            ]
        },
    }


@pytest.fixture
def stub_client(canned_responses):
    return StubCompletionClient(canned_responses)


@pytest.fixture
def make_stub():
    """Factory for stubs with custom responses or delays."""
    return StubCompletionClient


@pytest.fixture
def sample_nda_text():
    """Sample NDA contract text for testing."""
    return """
    NON-DISCLOSURE AGREEMENT

    This Non-Disclosure Agreement ("Agreement") is entered into as of January 1, 2024
    by and between Acme Corp ("Disclosing Party") and Globex Inc ("Receiving Party").

    1. CONFIDENTIAL INFORMATION
    "Confidential Information" means any information disclosed by the Disclosing Party
    to the Receiving Party that is designated as confidential.

    2. TERM
    This Agreement shall remain in effect for a period of two (2) years.

    3. GOVERNING LAW
    This Agreement shall be governed by the laws of the State of Delaware.
    """


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests (require a live API key)"
    )
