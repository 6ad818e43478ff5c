"""
Prompt templates for the four analysis stages.

Each stage has a fixed system instruction and a user prompt whose
coverage scales with the tier profile's depth for that stage.
"""

from contract_analysis.models.schemas import Depth


# =============================================================================
# Structured Extraction
# =============================================================================

STRUCTURED_SYSTEM_PROMPT = """You are a legal contract analyst. Extract key information from contracts and return valid JSON only.

Only report what the contract states. When a field is not present in the text, omit it entirely; never guess or fabricate values."""


STRUCTURED_PROMPT = """Analyze the following contract and extract key structural information.

Return a single JSON object that may contain these keys (omit any key the contract does not support):
{{
    "keyParties": {{"party1": "first party name", "party2": "second party name"}},
    "duration": "contract term in words",
    "paymentTerms": "summary of payment terms",
    "obligations": ["main obligation of either party", "..."],
    "dates": {{
        "startDate": "YYYY-MM-DD",
        "endDate": "YYYY-MM-DD",
        "signingDate": "YYYY-MM-DD",
        "effectiveDate": "YYYY-MM-DD"
    }},
    "financialDetails": {{
        "totalValue": "total contract value",
        "currency": "ISO currency code",
        "paymentAmounts": [{{"amount": "...", "schedule": "...", "dueDate": "..."}}]
    }},
    "legalInfo": {{
        "governingLaw": "...",
        "jurisdiction": "...",
        "disputeResolution": "...",
        "venue": "..."
    }},
    "contractMetadata": {{
        "contractType": "e.g. NDA, Service Agreement",
        "category": "e.g. employment, vendor, licensing",
        "signatories": [{{"name": "...", "title": "...", "role": "...", "party": "..."}}]
    }},
    "structuredTerms": {{
        "renewal": {{"autoRenewal": true, "noticePeriod": "...", "renewalTerm": "...", "conditions": "..."}},
        "termination": {{"noticePeriod": "...", "terminationFees": "...", "conditions": ["..."]}},
        "intellectualProperty": {{"ownership": "...", "licensing": "...", "restrictions": "..."}},
        "confidentiality": {{"scope": "...", "duration": "...", "exceptions": ["..."]}},
        "forceMajeure": {{"definition": "...", "consequences": "..."}},
        "insurance": {{"requirements": ["..."], "minimumCoverage": "..."}}
    }},
    "performanceMetrics": {{
        "slas": ["..."],
        "kpis": ["..."],
        "deliverables": ["..."],
        "milestones": [{{"name": "...", "date": "...", "description": "..."}}]
    }}
}}

Contract text:
---
{contract_text}
---"""


# =============================================================================
# Summary
# =============================================================================

SUMMARY_SYSTEM_PROMPT = """You are a legal translator who explains contracts in simple, understandable language."""


SUMMARY_DEPTH_INSTRUCTIONS = {
    Depth.BASIC: (
        "Summarize the following contract in clear, plain English (2-3 paragraphs). "
        "Stay factual: what the contract is about, who the parties are, what they are "
        "agreeing to, and the main terms."
    ),
    Depth.STANDARD: (
        "Summarize the following contract in clear, plain English (3-4 paragraphs). "
        "Cover what the contract is about, who the parties are, each party's key "
        "obligations, the main commercial terms, and the clauses a reader should pay "
        "attention to."
    ),
    Depth.DEEP: (
        "Write a thorough plain-English summary of the following contract (4-5 paragraphs). "
        "Cover the purpose, the parties and their obligations, commercial and payment "
        "terms, term and termination, and liability allocation. Explicitly highlight any "
        "unusual, one-sided or non-market terms and explain why they stand out."
    ),
}


SUMMARY_PROMPT = """{instructions}

Contract text:
---
{contract_text}
---"""


# =============================================================================
# Risk Detection
# =============================================================================

RISK_SYSTEM_PROMPT = """You are a risk analyst specializing in contract review. Identify potential legal and financial risks.

Always respond with a JSON object of the form {"risks": [...]}."""


RISK_CATEGORIES = """- Non-compete clauses
- Auto-renewal terms
- Unilateral termination rights
- Unfavorable payment terms
- Excessive liability clauses
- Other concerning terms"""


RISK_DEPTH_INSTRUCTIONS = {
    Depth.BASIC: (
        "Look for:\n" + RISK_CATEGORIES + "\n\n"
        "Keep each description to one or two sentences."
    ),
    Depth.STANDARD: (
        "Look for:\n" + RISK_CATEGORIES + "\n\n"
        "For each finding explain briefly why you chose its severity and suggest "
        "how the clause could be improved."
    ),
    Depth.DEEP: (
        "Look for:\n" + RISK_CATEGORIES + "\n"
        "- Intellectual property assignment or licensing traps\n"
        "- Data privacy and confidentiality exposure\n"
        "- Force majeure gaps or one-sided force majeure\n"
        "- Hidden fees, penalties and price escalation\n\n"
        "For each finding state explicitly why it has its severity (likelihood and "
        "impact), and always give an actionable suggestion the reader can bring to a "
        "negotiation. Map IP, privacy, force majeure and fee findings to the closest "
        "type, using \"other\" when none fits."
    ),
}


RISK_PROMPT = """Analyze the following contract for potential red flags and risks.

{instructions}

For each risk found, provide:
- type: one of "non-compete", "auto-renewal", "termination", "liability", "payment", "other"
- severity: "high", "medium", or "low"
- title: short title
- description: explanation of the risk
- clauseText: the actual clause text
- suggestion: recommendation

Return {{"risks": [ ...risk objects... ]}}. Return {{"risks": []}} if there are none.

Contract text:
---
{contract_text}
---"""


# =============================================================================
# Clause Explanation
# =============================================================================

CLAUSE_SYSTEM_PROMPT = """You are a legal educator who explains complex legal clauses in simple terms.

Always respond with a JSON object of the form {"clauses": [...]}."""


CLAUSE_CATEGORIES = [
    "Parties and definitions",
    "Scope of work or services",
    "Payment and fees",
    "Term and renewal",
    "Termination",
    "Confidentiality",
    "Intellectual property",
    "Warranties and representations",
    "Limitation of liability",
    "Indemnification",
    "Dispute resolution and governing law",
    "Miscellaneous (assignment, notices, force majeure)",
]


CLAUSE_DEPTH_INSTRUCTIONS = {
    Depth.BASIC: (
        "Identify the key clauses and give each a short (one or two sentence) "
        "plain-English explanation."
    ),
    Depth.STANDARD: (
        "Identify every important clause and explain what it means in practice for "
        "each party, in a short paragraph per clause."
    ),
    Depth.DEEP: (
        "Build a comprehensive clause inventory covering these categories where "
        "present:\n"
        + "\n".join(f"- {c}" for c in CLAUSE_CATEGORIES)
        + "\n\nExplain each clause in depth, including its practical consequences, and "
        "add a \"suggestion\" with negotiation advice where the clause could be improved."
    ),
}


CLAUSE_PROMPT = """Identify and explain the clauses in the following contract.

{instructions}

For each clause provide:
- clauseTitle: name of the clause
- clauseText: the actual clause text (truncate if too long)
- explanation: plain English explanation
- importance: "critical", "important", or "standard"

Return {{"clauses": [ ...clause objects... ]}}.

Contract text:
---
{contract_text}
---"""
