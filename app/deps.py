"""Shared FastAPI dependencies."""

from dataclasses import dataclass
from functools import lru_cache

from beanie import PydanticObjectId
from bson import ObjectId
from fastapi import Request
from starlette.datastructures import UploadFile

from app.analysis.analyzer import ResumeAnalyzer, build_analyzer
from app.core.config import get_settings
from app.core.exceptions import BadRequestError, PayloadTooLargeError
from app.storage.base import StorageBackend, get_storage

UPLOAD_FIELD_NAME = "resume"
PDF_MIME_TYPE = "application/pdf"


@dataclass(frozen=True)
class ResumeUpload:
    content: bytes
    filename: str
    content_type: str


@lru_cache
def get_storage_backend() -> StorageBackend:
    return get_storage(get_settings())


@lru_cache
def get_analyzer() -> ResumeAnalyzer:
    return build_analyzer(get_settings())


def valid_object_id(resume_id: str) -> PydanticObjectId:
    """Dependency: reject malformed ids before any database lookup."""
    if not ObjectId.is_valid(resume_id):
        raise BadRequestError(f'Invalid ID format: "{resume_id}"')
    return PydanticObjectId(resume_id)


async def accept_resume_upload(request: Request) -> ResumeUpload:
    """Dependency: exactly one PDF under the "resume" field, within the size limit."""
    settings = get_settings()
    form = await request.form()
    files = [(key, value) for key, value in form.multi_items() if isinstance(value, UploadFile)]
    if not files:
        raise BadRequestError("Please upload a PDF file.")
    if len(files) > 1:
        raise BadRequestError("Too many files. Upload one file at a time.")
    field, upload = files[0]
    if field != UPLOAD_FIELD_NAME:
        raise BadRequestError(f'Unexpected field name. Use "{UPLOAD_FIELD_NAME}" as the form field name.')
    if upload.content_type != PDF_MIME_TYPE:
        raise BadRequestError("Only PDF files are allowed.")
    too_large = f"File too large. Maximum size is {settings.max_file_size_mb}MB."
    if upload.size is not None and upload.size > settings.max_file_size_bytes:
        raise PayloadTooLargeError(too_large)
    content = await upload.read(settings.max_file_size_bytes + 1)
    if len(content) > settings.max_file_size_bytes:
        raise PayloadTooLargeError(too_large)
    if not content:
        raise BadRequestError("Uploaded file is empty.")
    return ResumeUpload(content=content, filename=upload.filename or "resume.pdf", content_type=upload.content_type)
