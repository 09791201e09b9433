"""
app/services/resume_service.py

Purpose: Résumé upload parsing

- Text extraction from .docx (python-docx), PDF (pypdf) and plain text uploads
- Hands the text to the heuristic parser
"""

import io
from typing import Any, Dict, Optional
from zipfile import BadZipFile

from docx import Document
from docx.opc.exceptions import PackageNotFoundError
from pypdf import PdfReader
from pypdf.errors import PyPdfError

from app.core.exceptions import ValidationError
from app.core.logging import get_logger
from utils.resume_utils import parse_resume_text

logger = get_logger(__name__)

MIN_TEXT_LENGTH = 50
DOCX_MIME = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
PDF_MIME = "application/pdf"


def _is_docx(filename: str, content_type: Optional[str]) -> bool:
    return content_type == DOCX_MIME or filename.lower().endswith(".docx")


def _is_pdf(filename: str, content_type: Optional[str]) -> bool:
    return content_type == PDF_MIME or filename.lower().endswith(".pdf")


def _is_text(filename: str, content_type: Optional[str]) -> bool:
    return (content_type or "").startswith("text/") or filename.lower().endswith(".txt")


def docx_text(content: bytes) -> str:
    """
    Paragraph text of a Word document, table cells included, one line each.
    """
    try:
        document = Document(io.BytesIO(content))
    except (PackageNotFoundError, BadZipFile, KeyError, ValueError) as e:
        logger.error(f"Word document parsing error: {e}")
        raise ValidationError("Failed to parse Word document")

    lines = [paragraph.text for paragraph in document.paragraphs]
    for table in document.tables:
        for row in table.rows:
            lines.extend(cell.text for cell in row.cells)
    return "\n".join(lines)


def pdf_text(content: bytes) -> str:
    """
    Text of every page, pages separated by blank lines.
    """
    try:
        reader = PdfReader(io.BytesIO(content))
        pages = [page.extract_text() or "" for page in reader.pages]
    except (PyPdfError, ValueError, KeyError) as e:
        logger.error(f"PDF parsing error: {e}")
        raise ValidationError("Failed to parse PDF document")
    return "\n\n".join(pages)


def extract_text(filename: Optional[str], content_type: Optional[str], content: bytes) -> str:
    """
    Raises:
        ValidationError: unsupported type or unreadable document
    """
    filename = filename or ""
    if _is_docx(filename, content_type):
        return docx_text(content)
    if _is_pdf(filename, content_type):
        return pdf_text(content)
    if _is_text(filename, content_type):
        return content.decode("utf-8", errors="ignore")
    raise ValidationError("Unsupported file type. Please upload a PDF, Word (.docx) or text document.")


def parse_resume(filename: Optional[str], content_type: Optional[str], content: bytes) -> Dict[str, Any]:
    text = extract_text(filename, content_type, content)
    if len(text.strip()) < MIN_TEXT_LENGTH:
        logger.warning(f"Insufficient text extracted: {len(text.strip())} characters")
        raise ValidationError("Could not extract sufficient text from resume")

    logger.info(f"Parsing resume text ({len(text)} characters)")
    return parse_resume_text(text)
