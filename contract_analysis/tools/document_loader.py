"""
Text extraction for uploaded contract documents.

Converts a raw byte buffer plus a declared type tag into plain text.
Pure and offline: no tier awareness and no truncation happen here.
"""

import io
import logging
from pathlib import Path
from typing import Any, Optional

import docx
import pypdf

from contract_analysis.exceptions import ExtractionError
from contract_analysis.models.schemas import ExtractedDocument

logger = logging.getLogger(__name__)


# Declared type tags and MIME types mapped to the parser that handles them
TYPE_ALIASES = {
    "pdf": "pdf",
    "application/pdf": "pdf",
    "docx": "docx",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document": "docx",
    "txt": "txt",
    "text": "txt",
    "text/plain": "txt",
    "md": "md",
    "markdown": "md",
    "text/markdown": "md",
}


def normalize_file_type(file_type: str) -> str:
    """
    Map an extension, type tag or MIME type to a canonical tag.

    Raises:
        ExtractionError: If the type is not supported
    """
    key = (file_type or "").strip().lower().lstrip(".")
    key = key.split(";")[0].strip()  # drop MIME parameters such as charset
    try:
        return TYPE_ALIASES[key]
    except KeyError:
        raise ExtractionError(
            f"Unsupported file type: {file_type!r}. "
            f"Supported: pdf, docx, txt, md",
            file_type=file_type
        ) from None


# =============================================================================
# Text Extractor
# =============================================================================

class TextExtractor:
    """
    Extracts text from contract documents held in memory.

    Example:
        >>> extractor = TextExtractor()
        >>> doc = extractor.extract(upload_bytes, "application/pdf")
        >>> doc.metadata["pages"]
        3
    """

    SUPPORTED_TYPES = ("pdf", "docx", "txt", "md")

    # -------------------------------------------------------------------------
    # Main Extraction Methods
    # -------------------------------------------------------------------------

    def extract(
        self,
        data: bytes,
        file_type: str,
        filename: Optional[str] = None
    ) -> ExtractedDocument:
        """
        Extract text from a document buffer.

        Args:
            data: Raw document bytes
            file_type: Declared type (extension, tag or MIME type)
            filename: Optional original filename for metadata

        Returns:
            ExtractedDocument with text and metadata

        Raises:
            ExtractionError: If the bytes cannot be parsed as the declared type
        """
        kind = normalize_file_type(file_type)

        if kind == "pdf":
            text, metadata = self._extract_pdf(data)
        elif kind == "docx":
            text, metadata = self._extract_docx(data)
        else:
            text, metadata = self._extract_text(data)

        metadata.update(
            file_type=kind,
            file_size=len(data),
            character_count=len(text),
            word_count=len(text.split()),
        )
        if filename:
            metadata["filename"] = filename

        logger.debug(
            "Extracted %d characters from %s document %s",
            len(text), kind, filename or "<buffer>"
        )
        return ExtractedDocument(text=text, metadata=metadata)

    def load(self, file_path: str | Path) -> ExtractedDocument:
        """
        Read a document from disk, inferring its type from the suffix.

        Raises:
            FileNotFoundError: If file doesn't exist
            ExtractionError: If the file type is unsupported or unreadable
        """
        path = Path(file_path)
        if not path.exists():
            raise FileNotFoundError(f"Document not found: {path}")

        return self.extract(path.read_bytes(), path.suffix, filename=path.name)

    # -------------------------------------------------------------------------
    # Format-Specific Extractors
    # -------------------------------------------------------------------------

    def _extract_pdf(self, data: bytes) -> tuple[str, dict[str, Any]]:
        """Extract text from every page of a PDF."""
        try:
            reader = pypdf.PdfReader(io.BytesIO(data))
            text_parts = []
            for page in reader.pages:
                page_text = page.extract_text()
                if page_text:
                    text_parts.append(page_text)
            info = {
                str(key).lstrip("/"): str(value)
                for key, value in (reader.metadata or {}).items()
            }
            page_count = len(reader.pages)
        except Exception as e:
            raise ExtractionError(f"Failed to parse PDF: {e}", file_type="pdf") from e

        return "\n\n".join(text_parts), {"pages": page_count, "info": info}

    def _extract_docx(self, data: bytes) -> tuple[str, dict[str, Any]]:
        """Extract paragraphs and table rows from a DOCX file."""
        try:
            document = docx.Document(io.BytesIO(data))
        except Exception as e:
            raise ExtractionError(f"Failed to parse DOCX: {e}", file_type="docx") from e

        paragraphs = [para.text for para in document.paragraphs if para.text.strip()]

        # Tables hold schedules and fee grids in many contracts
        for table in document.tables:
            for row in table.rows:
                row_text = [cell.text for cell in row.cells if cell.text.strip()]
                if row_text:
                    paragraphs.append(" | ".join(row_text))

        return "\n\n".join(paragraphs), {"paragraphs": len(document.paragraphs)}

    def _extract_text(self, data: bytes) -> tuple[str, dict[str, Any]]:
        """Decode a plain text buffer."""
        if data.startswith((b"\xff\xfe", b"\xfe\xff")):
            encodings = ["utf-16"]
        else:
            encodings = ["utf-8-sig", "cp1252"]

        for encoding in encodings:
            try:
                return data.decode(encoding), {"encoding": encoding}
            except UnicodeDecodeError:
                continue

        # latin-1 maps every byte
        return data.decode("latin-1"), {"encoding": "latin-1"}

    # -------------------------------------------------------------------------
    # Utility Methods
    # -------------------------------------------------------------------------

    @classmethod
    def supported_formats(cls) -> tuple[str, ...]:
        return cls.SUPPORTED_TYPES

    @staticmethod
    def is_supported(file_type: str) -> bool:
        """Check if a declared type can be extracted."""
        try:
            normalize_file_type(file_type)
        except ExtractionError:
            return False
        return True


# =============================================================================
# Convenience Functions
# =============================================================================

def extract_text(data: bytes, file_type: str) -> ExtractedDocument:
    """One-shot extraction of an in-memory document."""
    return TextExtractor().extract(data, file_type)
