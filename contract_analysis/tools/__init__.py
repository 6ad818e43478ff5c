"""
Tools package: document text extraction and the completion client.
"""

from contract_analysis.tools.document_loader import TextExtractor, extract_text
from contract_analysis.tools.llm_client import (
    CompletionClient,
    create_client,
    parse_json_payload,
)

__all__ = [
    "TextExtractor",
    "extract_text",
    "CompletionClient",
    "create_client",
    "parse_json_payload",
]
