"""Rule-based resume scorer. Needs no external service and is fully deterministic."""

import re

from app.analysis.base import AnalysisProvider
from app.models.resume_document import AnalysisResult, SectionPresence

TECH_KEYWORDS = ("javascript", "python", "java", "react", "node", "sql", "aws", "docker", "git")
SOFT_KEYWORDS = ("leadership", "communication", "teamwork", "problem-solving")
KEYWORDS = TECH_KEYWORDS + SOFT_KEYWORDS

CONTACT_RE = re.compile(r"email|phone|@|\+", re.IGNORECASE)
SUMMARY_RE = re.compile(r"summary|objective|profile", re.IGNORECASE)
EXPERIENCE_RE = re.compile(r"experience|employment|work history", re.IGNORECASE)
EDUCATION_RE = re.compile(r"education|degree|university|bachelor", re.IGNORECASE)
SKILLS_RE = re.compile(r"skills|technologies|competencies|competency", re.IGNORECASE)

SENIOR_RE = re.compile(r"senior|lead", re.IGNORECASE)
ENTRY_RE = re.compile(r"entry|junior", re.IGNORECASE)

SECTION_POINTS = {
    "has_contact": 8,
    "has_summary": 8,
    "has_experience": 10,
    "has_education": 7,
    "has_skills": 7,
}
POINTS_PER_KEYWORD = 3
MAX_KEYWORD_POINTS = 30
IDEAL_WORD_RANGE = (300, 900)
IDEAL_LENGTH_POINTS = 30
OTHER_LENGTH_POINTS = 15
KEYWORD_STRENGTH_THRESHOLD = 5

# (section flag, strength, weakness, suggestion)
SECTION_FEEDBACK = (
    ("has_contact", "Contact information present", "Missing contact info",
     "Add an email address and phone number"),
    ("has_summary", "Professional summary included", "No summary or objective",
     "Open with a short professional summary"),
    ("has_experience", "Work experience documented", "No work experience section found",
     "Add work experience section"),
    ("has_education", "Education background listed", "Education section missing",
     "List your degrees and institutions"),
    ("has_skills", "Dedicated skills section", "No skills section found",
     "Add a skills section with relevant technologies"),
)


def detect_sections(text: str) -> SectionPresence:
    return SectionPresence(
        has_contact=bool(CONTACT_RE.search(text)),
        has_summary=bool(SUMMARY_RE.search(text)),
        has_experience=bool(EXPERIENCE_RE.search(text)),
        has_education=bool(EDUCATION_RE.search(text)),
        has_skills=bool(SKILLS_RE.search(text)),
    )


def match_keywords(text: str) -> list[str]:
    lower = text.lower()
    return [k for k in KEYWORDS if k in lower]


def classify_experience(text: str) -> str:
    if SENIOR_RE.search(text):
        return "senior"
    if ENTRY_RE.search(text):
        return "entry"
    return "mid"


def score_resume(sections: SectionPresence, keyword_count: int, word_count: int) -> int:
    score = sum(points for field, points in SECTION_POINTS.items() if getattr(sections, field))
    score += min(MAX_KEYWORD_POINTS, keyword_count * POINTS_PER_KEYWORD)
    low, high = IDEAL_WORD_RANGE
    score += IDEAL_LENGTH_POINTS if low <= word_count <= high else OTHER_LENGTH_POINTS
    return min(100, score)


class HeuristicProvider(AnalysisProvider):
    name = "mock"

    async def analyze(self, text: str, job_description: str | None = None) -> AnalysisResult:
        return self.analyze_sync(text)

    def analyze_sync(self, text: str) -> AnalysisResult:
        sections = detect_sections(text)
        keywords = match_keywords(text)
        word_count = len(text.split())

        strengths: list[str] = []
        weaknesses: list[str] = []
        suggestions: list[str] = []
        for field, strength, weakness, suggestion in SECTION_FEEDBACK:
            if getattr(sections, field):
                strengths.append(strength)
            else:
                weaknesses.append(weakness)
                suggestions.append(suggestion)
        if len(keywords) >= KEYWORD_STRENGTH_THRESHOLD:
            strengths.append(f"{len(keywords)} relevant keywords found")
        else:
            suggestions.append("Add more industry keywords")

        return AnalysisResult(
            overall_score=score_resume(sections, len(keywords), word_count),
            experience_level=classify_experience(text),
            strengths=strengths,
            weaknesses=weaknesses,
            suggestions=suggestions,
            keywords=keywords,
            sections=sections,
            provider=self.name,
        )
