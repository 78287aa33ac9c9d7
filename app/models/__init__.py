from app.models.resume_document import (
    AnalysisResult,
    ResumeDocument,
    ResumeStatus,
    ResumeSummary,
    SectionPresence,
)

__all__ = [
    "AnalysisResult",
    "ResumeDocument",
    "ResumeStatus",
    "ResumeSummary",
    "SectionPresence",
]
