from datetime import datetime, timezone
from enum import Enum
from typing import Any, Literal

from beanie import Document, PydanticObjectId
from pydantic import BaseModel, Field
from pymongo import ASCENDING, DESCENDING, IndexModel

from app.core.exceptions import InvalidTransitionError

ExperienceLevel = Literal["entry", "mid", "senior", "executive", "unknown"]
EXPERIENCE_LEVELS: tuple[str, ...] = ("entry", "mid", "senior", "executive", "unknown")

MIN_TEXT_LENGTH = 50


def utcnow() -> datetime:
    """Naive UTC timestamp, matching what MongoDB hands back."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class ResumeStatus(str, Enum):
    UPLOADED = "uploaded"
    PROCESSED = "processed"
    ANALYZED = "analyzed"
    FAILED = "failed"


ALLOWED_TRANSITIONS: frozenset[tuple[ResumeStatus, ResumeStatus]] = frozenset({
    (ResumeStatus.UPLOADED, ResumeStatus.PROCESSED),
    (ResumeStatus.UPLOADED, ResumeStatus.FAILED),
    (ResumeStatus.PROCESSED, ResumeStatus.ANALYZED),
    (ResumeStatus.ANALYZED, ResumeStatus.ANALYZED),
})


def can_transition(current: ResumeStatus, target: ResumeStatus) -> bool:
    return (current, target) in ALLOWED_TRANSITIONS


class SectionPresence(BaseModel):
    has_contact: bool = False
    has_summary: bool = False
    has_experience: bool = False
    has_education: bool = False
    has_skills: bool = False

    def to_response(self) -> dict[str, bool]:
        return {
            "hasContact": self.has_contact,
            "hasSummary": self.has_summary,
            "hasExperience": self.has_experience,
            "hasEducation": self.has_education,
            "hasSkills": self.has_skills,
        }


class AnalysisResult(BaseModel):
    overall_score: int = Field(ge=0, le=100)
    experience_level: ExperienceLevel = "unknown"
    strengths: list[str] = Field(default_factory=list)
    weaknesses: list[str] = Field(default_factory=list)
    suggestions: list[str] = Field(default_factory=list)
    keywords: list[str] = Field(default_factory=list)
    sections: SectionPresence = Field(default_factory=SectionPresence)
    analyzed_at: datetime = Field(default_factory=utcnow)
    provider: str | None = None

    def to_response(self) -> dict[str, Any]:
        return {
            "overallScore": self.overall_score,
            "experienceLevel": self.experience_level,
            "strengths": self.strengths,
            "weaknesses": self.weaknesses,
            "suggestions": self.suggestions,
            "keywords": self.keywords,
            "sections": self.sections.to_response(),
            "analyzedAt": self.analyzed_at.isoformat(),
            "provider": self.provider,
        }


class ResumeDocument(Document):
    filename: str
    original_name: str
    storage_path: str
    file_size_bytes: int
    mime_type: str = "application/pdf"
    extracted_text: str = ""
    word_count: int = 0
    page_count: int = 0
    analysis_result: AnalysisResult | None = None
    status: ResumeStatus = ResumeStatus.UPLOADED
    error_message: str | None = None
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    class Settings:
        name = "resumes"
        indexes = [
            IndexModel([("status", ASCENDING), ("created_at", DESCENDING)]),
            IndexModel([("created_at", DESCENDING)]),
        ]

    def transition_to(self, target: ResumeStatus) -> None:
        """Move to ``target``; raise if the lifecycle does not allow it."""
        if not can_transition(self.status, target):
            raise InvalidTransitionError(self.status.value, target.value)
        self.status = target
        self.updated_at = utcnow()


class ResumeSummary(BaseModel):
    """List-view projection of ResumeDocument: no extracted text, no storage path."""

    id: PydanticObjectId = Field(alias="_id")
    filename: str
    original_name: str
    file_size_bytes: int
    mime_type: str = "application/pdf"
    word_count: int = 0
    page_count: int = 0
    analysis_result: AnalysisResult | None = None
    status: ResumeStatus = ResumeStatus.UPLOADED
    error_message: str | None = None
    created_at: datetime
    updated_at: datetime


def serialize_resume(resume: ResumeDocument | ResumeSummary, include_text: bool = True) -> dict[str, Any]:
    """Wire representation of a resume; the storage path is never included."""
    out: dict[str, Any] = {
        "id": str(resume.id),
        "filename": resume.filename,
        "originalName": resume.original_name,
        "fileSizeBytes": resume.file_size_bytes,
        "fileSizeKB": f"{resume.file_size_bytes / 1024:.2f}",
        "mimeType": resume.mime_type,
        "wordCount": resume.word_count,
        "pageCount": resume.page_count,
        "analysisResult": resume.analysis_result.to_response() if resume.analysis_result else None,
        "status": resume.status.value,
        "errorMessage": resume.error_message,
        "createdAt": resume.created_at.isoformat(),
        "updatedAt": resume.updated_at.isoformat(),
    }
    if include_text and isinstance(resume, ResumeDocument):
        out["extractedText"] = resume.extracted_text
    return out
