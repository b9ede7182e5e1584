"""
PDF Receipt Text Reader

Turns receipt attachment bytes into text and runs the text extractor on it.
PDF decoding uses pdfplumber; when the bytes are not a readable PDF they are
decoded as UTF-8 text instead (some senders attach plain-text receipts with a
PDF content type).
"""

import io

import pdfplumber

from errors import ParseError
from receipts.logging_config import get_logger
from receipts.text_extractor import extract_receipt_data

logger = get_logger(__name__)


def extract_text_from_pdf(pdf_bytes: bytes) -> str:
    """
    Extract text content from a PDF file.

    Args:
        pdf_bytes: Raw PDF file content

    Returns:
        Extracted text, pages joined by newlines

    Raises:
        ParseError: If the bytes cannot be decoded as a PDF
    """
    try:
        with pdfplumber.open(io.BytesIO(pdf_bytes)) as pdf:
            text_parts = []
            for page in pdf.pages:
                page_text = page.extract_text()
                if page_text:
                    text_parts.append(page_text)
            return "\n".join(text_parts)
    except Exception as e:
        # pdfminer raises a variety of exception types for malformed input
        raise ParseError(f"PDF decoding failed: {e}") from e


def decode_text(content: bytes) -> str:
    """Decode attachment bytes as UTF-8 text."""
    try:
        return content.decode("utf-8")
    except UnicodeDecodeError as e:
        raise ParseError(f"Text decoding failed: {e}") from e


def read_receipt_text(content: bytes) -> str:
    """
    Get receipt text from attachment bytes, PDF first then plain text.

    Raises:
        ParseError: If neither decoding succeeds
    """
    try:
        return extract_text_from_pdf(content)
    except ParseError as pdf_error:
        logger.warning(f"{pdf_error}; trying as text file")
        try:
            return decode_text(content)
        except ParseError as text_error:
            raise ParseError(f"{pdf_error}. {text_error}") from text_error


def parse_receipt(content: bytes) -> dict:
    """
    Decode a receipt attachment and extract structured data from it.

    Args:
        content: Attachment bytes

    Returns:
        Dict with success flag, extracted data, raw_text and error message.
        Decoding failures are reported in the result, not raised.
    """
    try:
        text = read_receipt_text(content)
    except ParseError as e:
        logger.error(f"Receipt decoding failed: {e}")
        return {"success": False, "data": None, "raw_text": "", "error": str(e)}

    return {
        "success": True,
        "data": extract_receipt_data(text),
        "raw_text": text,
        "error": None,
    }
