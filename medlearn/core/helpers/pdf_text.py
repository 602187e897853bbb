"""
Text extraction from uploaded PDF study material.
"""
import io
import logging

from pypdf import PdfReader

logger = logging.getLogger(__name__)


def extract_pdf_text(file_bytes: bytes) -> str:
    """
    Extract text from PDF bytes.

    Args:
        file_bytes: Raw PDF content

    Returns:
        Text of every non-empty page, separated by blank lines

    Raises:
        ValueError: If the file cannot be read as a PDF
    """
    try:
        pdf = PdfReader(io.BytesIO(file_bytes))
        text_parts = []
        for page in pdf.pages:
            page_text = page.extract_text() or ""
            if page_text.strip():
                text_parts.append(page_text)
        return "\n\n".join(text_parts)
    except Exception as e:
        logger.error(f"PDF extraction error: {e}")
        raise ValueError(f"Failed to extract PDF: {str(e)}")
