"""Resume upload, text extraction, analysis and retrieval."""

import re
import time
import uuid
from datetime import timedelta

from beanie import PydanticObjectId

from app.analysis.analyzer import ResumeAnalyzer
from app.core.exceptions import InvalidTransitionError, NotFoundError, UnprocessableError
from app.core.logging import get_logger
from app.core.pagination import PageInfo, page_info, paginate
from app.models.resume_document import (
    MIN_TEXT_LENGTH,
    AnalysisResult,
    ResumeDocument,
    ResumeStatus,
    ResumeSummary,
    can_transition,
    utcnow,
)
from app.services.resume_parser import extract_stored_pdf
from app.storage.base import StorageBackend

log = get_logger(__name__)

_UNSAFE_FILENAME_CHARS = re.compile(r"[^a-zA-Z0-9._-]")

INTERRUPTED_MESSAGE = "Processing was interrupted before text extraction completed."


def stored_filename(original_name: str) -> str:
    """Timestamped, sanitized name used on disk."""
    sanitized = _UNSAFE_FILENAME_CHARS.sub("_", original_name.strip()) or "resume.pdf"
    return f"{int(time.time() * 1000)}-{uuid.uuid4().hex[:8]}-{sanitized}"


def _not_found(resume_id: PydanticObjectId) -> NotFoundError:
    return NotFoundError(f"No resume found with ID: {resume_id}")


async def upload_resume(
    storage: StorageBackend,
    content: bytes,
    original_name: str,
    mime_type: str = "application/pdf",
) -> ResumeDocument:
    """
    Store the upload, create the record, then extract text.
    On extraction failure the record is kept with status failed and the error re-raised.
    """
    filename = stored_filename(original_name)
    await storage.put(filename, content, content_type=mime_type)
    doc = ResumeDocument(
        filename=filename,
        original_name=original_name.strip(),
        storage_path=filename,
        file_size_bytes=len(content),
        mime_type=mime_type,
    )
    await doc.insert()

    try:
        extracted = await extract_stored_pdf(storage, doc.storage_path)
    except Exception as e:
        doc.transition_to(ResumeStatus.FAILED)
        doc.error_message = getattr(e, "message", None) or str(e)
        await doc.save()
        log.warning("resume_extraction_failed", resume_id=str(doc.id), error=doc.error_message)
        raise

    doc.extracted_text = extracted.text
    doc.page_count = extracted.page_count
    doc.word_count = extracted.word_count
    doc.transition_to(ResumeStatus.PROCESSED)
    await doc.save()
    log.info("resume_processed", resume_id=str(doc.id), pages=doc.page_count, words=doc.word_count)
    return doc


async def analyze_resume(
    analyzer: ResumeAnalyzer,
    resume_id: PydanticObjectId,
    job_description: str | None = None,
) -> tuple[ResumeDocument, AnalysisResult]:
    """Score the extracted text; the record is only written once analysis succeeds."""
    doc = await ResumeDocument.get(resume_id)
    if not doc:
        raise _not_found(resume_id)
    if doc.status == ResumeStatus.FAILED:
        raise UnprocessableError("This resume failed to process and cannot be analyzed.")
    if len(doc.extracted_text.strip()) < MIN_TEXT_LENGTH:
        raise UnprocessableError("Resume has insufficient text content for analysis.")
    if not can_transition(doc.status, ResumeStatus.ANALYZED):
        raise InvalidTransitionError(doc.status.value, ResumeStatus.ANALYZED.value)

    result = await analyzer.analyze(doc.extracted_text, job_description)

    doc.analysis_result = result
    doc.transition_to(ResumeStatus.ANALYZED)
    await doc.save()
    log.info("resume_analyzed", resume_id=str(doc.id), score=result.overall_score, provider=result.provider)
    return doc, result


async def list_resumes(page: int | None = None, limit: int | None = None) -> tuple[list[ResumeSummary], PageInfo]:
    """Newest first; extracted text is projected out."""
    page, limit, skip = paginate(page, limit)
    total = await ResumeDocument.find_all().count()
    items = (
        await ResumeDocument.find_all()
        .sort(-ResumeDocument.created_at, -ResumeDocument.id)
        .skip(skip)
        .limit(limit)
        .project(ResumeSummary)
        .to_list()
    )
    return items, page_info(total, page, limit)


async def get_resume(resume_id: PydanticObjectId) -> ResumeDocument:
    doc = await ResumeDocument.get(resume_id)
    if not doc:
        raise _not_found(resume_id)
    return doc


async def delete_resume(storage: StorageBackend, resume_id: PydanticObjectId) -> None:
    """Remove the record; the stored file is deleted best-effort."""
    doc = await ResumeDocument.get(resume_id)
    if not doc:
        raise _not_found(resume_id)
    await doc.delete()
    try:
        await storage.delete(doc.storage_path)
    except (OSError, ValueError) as e:
        log.warning("resume_file_delete_failed", resume_id=str(resume_id), error=str(e))
    log.info("resume_deleted", resume_id=str(resume_id))


async def fail_stale_uploads(older_than: timedelta) -> int:
    """Mark records stuck in uploaded (e.g. after a crash mid-extraction) as failed."""
    cutoff = utcnow() - older_than
    stale = await ResumeDocument.find(
        ResumeDocument.status == ResumeStatus.UPLOADED,
        ResumeDocument.created_at < cutoff,
    ).to_list()
    for doc in stale:
        doc.transition_to(ResumeStatus.FAILED)
        doc.error_message = INTERRUPTED_MESSAGE
        await doc.save()
    if stale:
        log.warning("stale_uploads_failed", count=len(stale))
    return len(stale)
