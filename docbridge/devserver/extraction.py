"""Text extraction for the development backend.

PDFs are read with pypdf; any other file is decoded as UTF-8 text. This is
a local stand-in for the real extraction service, not a replacement for it.
"""

import io
import logging
from pathlib import PurePath

from pypdf import PdfReader
from pypdf.errors import PdfReadError

logger = logging.getLogger(__name__)

# Constants
MAX_FILE_SIZE = 10 * 1024 * 1024  # 10MB
PDF_MAGIC_BYTES = b"%PDF"


class ExtractionError(Exception):
    """Raised when a file's text cannot be extracted."""

    pass


def _extract_pdf(file_content: bytes) -> str:
    if not file_content.lstrip()[:10].startswith(PDF_MAGIC_BYTES):
        raise ExtractionError("Invalid PDF: file does not start with PDF header")

    try:
        reader = PdfReader(io.BytesIO(file_content))
    except PdfReadError as e:
        raise ExtractionError(f"Corrupt or invalid PDF: {e}") from e
    except Exception as e:
        raise ExtractionError(f"Failed to read PDF: {e}") from e

    text_parts: list[str] = []
    for i, page in enumerate(reader.pages):
        try:
            page_text = page.extract_text()
            if page_text:
                text_parts.append(page_text)
        except Exception as e:
            logger.warning(f"Failed to extract text from page {i + 1}: {e}")
            continue

    return "\n\n".join(text_parts)


def extract_text(filename: str, file_content: bytes) -> str:
    """Extract the text of one uploaded file.

    Args:
        filename: Original file name; its extension picks the reader.
        file_content: Raw bytes of the file.

    Returns:
        Extracted text, possibly empty.

    Raises:
        ExtractionError: If the file is empty, too large, or unreadable.
    """
    if not file_content:
        raise ExtractionError(f"Empty file provided: {filename}")

    if len(file_content) > MAX_FILE_SIZE:
        size_mb = len(file_content) / (1024 * 1024)
        raise ExtractionError(
            f"{filename}: file size ({size_mb:.1f}MB) exceeds maximum allowed (10MB)"
        )

    if PurePath(filename).suffix.lower() == ".pdf":
        text = _extract_pdf(file_content)
    else:
        text = file_content.decode("utf-8", errors="replace")

    if not text.strip():
        logger.warning(f"{filename} contains no extractable text")
    return text
