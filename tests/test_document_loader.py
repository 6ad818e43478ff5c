"""
Tests for text extraction from document buffers.
"""

import io

import docx
import pypdf
import pytest

from contract_analysis.exceptions import ExtractionError
from contract_analysis.tools.document_loader import (
    TextExtractor,
    extract_text,
    normalize_file_type,
)


@pytest.fixture
def extractor():
    return TextExtractor()


def _docx_bytes() -> bytes:
    document = docx.Document()
    document.add_paragraph("SERVICE AGREEMENT")
    document.add_paragraph("")
    document.add_paragraph("Provider agrees to provide consulting services.")
    table = document.add_table(rows=1, cols=2)
    table.rows[0].cells[0].text = "Monthly fee"
    table.rows[0].cells[1].text = "$10,000"
    buffer = io.BytesIO()
    document.save(buffer)
    return buffer.getvalue()


def _blank_pdf_bytes(pages: int = 2) -> bytes:
    writer = pypdf.PdfWriter()
    for _ in range(pages):
        writer.add_blank_page(width=612, height=792)
    buffer = io.BytesIO()
    writer.write(buffer)
    return buffer.getvalue()


# =============================================================================
# Type Normalization
# =============================================================================

class TestFileTypes:

    @pytest.mark.parametrize("declared, expected", [
        ("pdf", "pdf"),
        (".PDF", "pdf"),
        ("application/pdf", "pdf"),
        ("application/vnd.openxmlformats-officedocument.wordprocessingml.document", "docx"),
        ("text/plain; charset=utf-8", "txt"),
        (".md", "md"),
    ])
    def test_normalize(self, declared, expected):
        assert normalize_file_type(declared) == expected

    def test_unsupported_type_raises(self, extractor):
        with pytest.raises(ExtractionError) as exc_info:
            extractor.extract(b"data", "rtf")
        assert exc_info.value.file_type == "rtf"

    def test_is_supported(self):
        assert TextExtractor.is_supported("docx")
        assert not TextExtractor.is_supported("odt")
        assert TextExtractor.supported_formats() == ("pdf", "docx", "txt", "md")

    def test_extract_text_helper(self):
        doc = extract_text(b"Lease agreement", ".txt")
        assert doc.text == "Lease agreement"
        assert doc.metadata["word_count"] == 2


# =============================================================================
# Plain Text
# =============================================================================

class TestPlainText:

    def test_utf8(self, extractor):
        doc = extractor.extract("Fee: 100 €".encode("utf-8"), "txt")
        assert doc.text == "Fee: 100 €"
        assert doc.metadata["file_type"] == "txt"
        assert doc.metadata["character_count"] == len("Fee: 100 €")

    def test_utf8_bom_is_stripped(self, extractor):
        doc = extractor.extract(b"\xef\xbb\xbfAgreement", "txt")
        assert doc.text == "Agreement"

    def test_utf16_with_bom(self, extractor):
        doc = extractor.extract("Agreement".encode("utf-16"), "text/plain")
        assert doc.text == "Agreement"

    def test_cp1252_fallback(self, extractor):
        doc = extractor.extract("Café “quoted”".encode("cp1252"), "txt")
        assert doc.text == "Café “quoted”"

    def test_empty_buffer(self, extractor):
        doc = extractor.extract(b"", "txt")
        assert doc.text == ""
        assert doc.metadata["word_count"] == 0

    def test_long_text_is_not_truncated(self, extractor):
        text = "word " * 50000
        doc = extractor.extract(text.encode(), "txt")
        assert doc.text == text


# =============================================================================
# DOCX and PDF
# =============================================================================

class TestOfficeFormats:

    def test_docx_paragraphs_and_tables(self, extractor):
        doc = extractor.extract(_docx_bytes(), "docx", filename="msa.docx")

        assert "SERVICE AGREEMENT" in doc.text
        assert "Provider agrees to provide consulting services." in doc.text
        assert "Monthly fee | $10,000" in doc.text
        assert doc.metadata["filename"] == "msa.docx"

    def test_corrupt_docx_raises(self, extractor):
        with pytest.raises(ExtractionError) as exc_info:
            extractor.extract(b"this is not a zip container", "docx")
        assert "DOCX" in str(exc_info.value)

    def test_pdf_page_count(self, extractor):
        doc = extractor.extract(_blank_pdf_bytes(pages=2), "pdf")
        assert doc.metadata["pages"] == 2
        assert doc.metadata["file_type"] == "pdf"

    def test_corrupt_pdf_raises_with_decoder_message(self, extractor):
        with pytest.raises(ExtractionError) as exc_info:
            extractor.extract(b"%PDF-garbage with no structure", "pdf")
        assert str(exc_info.value).startswith("Failed to parse PDF:")
        assert exc_info.value.__cause__ is not None


# =============================================================================
# File Loading
# =============================================================================

class TestLoad:

    def test_load_text_file(self, extractor, tmp_path, sample_nda_text):
        path = tmp_path / "nda.txt"
        path.write_text(sample_nda_text, encoding="utf-8")

        doc = extractor.load(path)

        assert "NON-DISCLOSURE AGREEMENT" in doc.text
        assert doc.metadata["filename"] == "nda.txt"

    def test_load_missing_file(self, extractor, tmp_path):
        with pytest.raises(FileNotFoundError):
            extractor.load(tmp_path / "missing.pdf")
