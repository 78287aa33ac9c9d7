from beanie import PydanticObjectId
from fastapi import APIRouter, Body, Depends, Query, Request, Response, status
from pydantic import BaseModel, ConfigDict, Field

from app.analysis.analyzer import ResumeAnalyzer
from app.core.rate_limit import rate_limit
from app.deps import (
    ResumeUpload,
    accept_resume_upload,
    get_analyzer,
    get_storage_backend,
    valid_object_id,
)
from app.models.resume_document import serialize_resume
from app.services import resume as resume_service
from app.storage.base import StorageBackend

router = APIRouter()


class AnalyzeRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    job_description: str | None = Field(default=None, alias="jobDescription", max_length=10_000)


@router.get("")
@rate_limit()
async def resumes_list(
    request: Request,
    response: Response,
    page: int | None = Query(None),
    limit: int | None = Query(None),
):
    """Paginated list, newest first, without extracted text."""
    items, info = await resume_service.list_resumes(page, limit)
    return {
        "status": "success",
        "data": {
            "resumes": [serialize_resume(r, include_text=False) for r in items],
            "pagination": info.to_response(),
        },
    }


@router.post("/upload", status_code=status.HTTP_201_CREATED)
@rate_limit()
async def resume_upload(
    request: Request,
    response: Response,
    upload: ResumeUpload = Depends(accept_resume_upload),
    storage: StorageBackend = Depends(get_storage_backend),
):
    """Upload a PDF (multipart field "resume"); stored and text extracted."""
    doc = await resume_service.upload_resume(storage, upload.content, upload.filename, upload.content_type)
    return {
        "status": "success",
        "message": "Resume uploaded and text extracted successfully.",
        "data": {"resume": serialize_resume(doc)},
    }


@router.get("/{resume_id}")
@rate_limit()
async def resume_get(
    request: Request,
    response: Response,
    resume_id: PydanticObjectId = Depends(valid_object_id),
):
    """Full resume including extracted text and analysis."""
    doc = await resume_service.get_resume(resume_id)
    return {"status": "success", "data": {"resume": serialize_resume(doc)}}


@router.post("/{resume_id}/analyze")
@rate_limit()
async def resume_analyze(
    request: Request,
    response: Response,
    resume_id: PydanticObjectId = Depends(valid_object_id),
    body: AnalyzeRequest | None = Body(default=None),
    analyzer: ResumeAnalyzer = Depends(get_analyzer),
):
    """Run analysis on a processed resume; optional jobDescription targets the feedback."""
    job_description = body.job_description if body else None
    doc, analysis = await resume_service.analyze_resume(analyzer, resume_id, job_description)
    return {
        "status": "success",
        "message": "Resume analyzed successfully.",
        "data": {
            "resume": serialize_resume(doc),
            "analysis": analysis.to_response(),
        },
    }


@router.delete("/{resume_id}", status_code=status.HTTP_204_NO_CONTENT)
@rate_limit()
async def resume_delete(
    request: Request,
    resume_id: PydanticObjectId = Depends(valid_object_id),
    storage: StorageBackend = Depends(get_storage_backend),
):
    """Delete the record and, best-effort, its stored file."""
    await resume_service.delete_resume(storage, resume_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
