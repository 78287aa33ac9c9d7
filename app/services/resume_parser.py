"""Parse PDF bytes to plain text plus page/word counts."""

import io
from dataclasses import dataclass

from pypdf import PdfReader

from app.core.exceptions import NotFoundError, ReadFailureError, UnprocessableError
from app.core.logging import get_logger
from app.models.resume_document import MIN_TEXT_LENGTH
from app.storage.base import StorageBackend

log = get_logger(__name__)


@dataclass(frozen=True)
class ExtractedText:
    text: str
    page_count: int
    word_count: int


def count_words(text: str) -> int:
    return len(text.split())


def parse_pdf(content: bytes) -> tuple[str, int]:
    """Return (raw_text, page_count); raise UnprocessableError if pypdf cannot read it."""
    try:
        reader = PdfReader(io.BytesIO(content))
        if reader.is_encrypted:
            # pypdf can open owner-password-only files with an empty user password
            reader.decrypt("")
        pages = [page.extract_text() or "" for page in reader.pages]
        return "\n".join(pages), len(pages)
    except Exception as e:
        log.error("pdf_parse_failed", error=str(e))
        raise UnprocessableError(
            "Failed to parse PDF. The file may be corrupted, encrypted, or unsupported."
        ) from e


def extract_pdf_text(content: bytes) -> ExtractedText:
    raw, page_count = parse_pdf(content)
    text = raw.strip()
    if len(text) < MIN_TEXT_LENGTH:
        raise UnprocessableError(
            "PDF appears to contain no extractable text. It may be a scanned image-only PDF. "
            "Please upload a text-based PDF."
        )
    word_count = count_words(text)
    log.debug("pdf_extracted", chars=len(text), words=word_count, pages=page_count)
    return ExtractedText(text=text, page_count=page_count, word_count=word_count)


async def extract_stored_pdf(storage: StorageBackend, key: str) -> ExtractedText:
    """Load the stored upload and extract its text."""
    try:
        content = await storage.get(key)
    except FileNotFoundError as e:
        raise NotFoundError("PDF file not found on disk.") from e
    except OSError as e:
        log.error("pdf_read_failed", key=key, error=str(e))
        raise ReadFailureError("Failed to read uploaded PDF file.") from e
    return extract_pdf_text(content)
