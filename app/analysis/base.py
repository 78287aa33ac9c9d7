"""Analysis provider interface, prompt and response normalisation."""

import json
import re
from abc import ABC, abstractmethod
from typing import Any

from app.core.config import Settings
from app.core.exceptions import ProviderResponseError
from app.models.resume_document import EXPERIENCE_LEVELS, AnalysisResult, SectionPresence

SYSTEM_PROMPT = "You are an expert resume reviewer. Respond ONLY with valid JSON."

RESPONSE_SHAPE = """{
  "overallScore": <number 0-100>,
  "experienceLevel": "<entry|mid|senior|executive>",
  "strengths": ["strength 1", "..."],
  "weaknesses": ["weakness 1", "..."],
  "suggestions": ["suggestion 1", "..."],
  "keywords": ["keyword 1", "..."],
  "sections": {
    "hasContact": <boolean>,
    "hasSummary": <boolean>,
    "hasExperience": <boolean>,
    "hasEducation": <boolean>,
    "hasSkills": <boolean>
  }
}"""

_FENCE_RE = re.compile(r"```(?:json)?\s*", re.IGNORECASE)

_SECTION_KEYS = {
    "hasContact": "has_contact",
    "hasSummary": "has_summary",
    "hasExperience": "has_experience",
    "hasEducation": "has_education",
    "hasSkills": "has_skills",
}


def build_prompt(text: str, job_description: str | None = None) -> str:
    prompt = (
        "Analyze this resume and provide feedback in JSON format.\n\n"
        f"Resume:\n{text}\n\n"
    )
    if job_description and job_description.strip():
        prompt += (
            "Tailor strengths, weaknesses and suggestions to this target job description:\n"
            f"{job_description.strip()}\n\n"
        )
    prompt += (
        f"Return ONLY valid JSON (no markdown) with this structure:\n{RESPONSE_SHAPE}\n\n"
        "Scoring: 90-100 exceptional, 80-89 excellent, 70-79 good, 60-69 fair, below 60 needs work."
    )
    return prompt


def strip_code_fences(raw: str) -> str:
    return _FENCE_RE.sub("", raw.strip()).strip()


def _string_list(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    return [str(v).strip() for v in value if v is not None and str(v).strip()]


def _score(value: Any, provider: str) -> int:
    try:
        score = round(float(value))
    except (TypeError, ValueError, OverflowError) as e:
        raise ProviderResponseError(f"Invalid overallScore from {provider}: {value!r}", provider) from e
    return max(0, min(100, score))


def parse_provider_payload(raw: str, provider: str) -> AnalysisResult:
    """Turn a provider's text response into a normalised AnalysisResult."""
    try:
        data = json.loads(strip_code_fences(raw))
    except (TypeError, ValueError) as e:
        raise ProviderResponseError(f"{provider} returned non-JSON response", provider) from e
    if not isinstance(data, dict):
        raise ProviderResponseError(f"{provider} returned unexpected JSON type", provider)
    if data.get("overallScore") is None or not data.get("experienceLevel"):
        raise ProviderResponseError("Invalid response structure", provider)

    level = str(data["experienceLevel"]).strip().lower()
    raw_sections = data.get("sections") if isinstance(data.get("sections"), dict) else {}
    sections = SectionPresence(**{
        field: bool(raw_sections.get(key, False)) for key, field in _SECTION_KEYS.items()
    })
    keywords = list(dict.fromkeys(_string_list(data.get("keywords"))))
    return AnalysisResult(
        overall_score=_score(data["overallScore"], provider),
        experience_level=level if level in EXPERIENCE_LEVELS else "unknown",
        strengths=_string_list(data.get("strengths")),
        weaknesses=_string_list(data.get("weaknesses")),
        suggestions=_string_list(data.get("suggestions")),
        keywords=keywords,
        sections=sections,
        provider=provider,
    )


class AnalysisProvider(ABC):
    name: str

    @abstractmethod
    async def analyze(self, text: str, job_description: str | None = None) -> AnalysisResult:
        """Score resume text; raise AnalysisProviderError on any failure."""
        ...


def get_analysis_provider(settings: Settings) -> AnalysisProvider:
    """Single dispatch point from the AI_PROVIDER setting to a provider."""
    if settings.ai_provider == "gemini":
        from app.analysis.gemini import GeminiProvider
        return GeminiProvider(settings.gemini_api_key, settings.gemini_model, settings.provider_timeout_s)
    if settings.ai_provider == "groq":
        from app.analysis.groq import GroqProvider
        return GroqProvider(settings.groq_api_key, settings.groq_model, settings.provider_timeout_s)
    if settings.ai_provider == "ollama":
        from app.analysis.ollama import OllamaProvider
        return OllamaProvider(settings.ollama_host, settings.ollama_model, settings.provider_timeout_s)
    from app.analysis.heuristic import HeuristicProvider
    return HeuristicProvider()
