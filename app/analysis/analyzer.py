"""Primary provider with a one-shot heuristic fallback."""

from app.analysis.base import AnalysisProvider, get_analysis_provider
from app.analysis.heuristic import HeuristicProvider
from app.core.config import Settings
from app.core.logging import get_logger
from app.models.resume_document import AnalysisResult

log = get_logger(__name__)


class ResumeAnalyzer:
    """Runs the configured provider, then the heuristic provider once if it fails.

    ``fallback`` is None when the primary is already the heuristic provider;
    its failures then propagate unchanged.
    """

    def __init__(self, primary: AnalysisProvider, fallback: AnalysisProvider | None = None):
        self.primary = primary
        self.fallback = fallback

    async def analyze(self, text: str, job_description: str | None = None) -> AnalysisResult:
        log.info("analysis_started", provider=self.primary.name)
        try:
            result = await self.primary.analyze(text, job_description)
        except Exception as e:
            if self.fallback is None:
                log.error("analysis_failed", provider=self.primary.name, error=str(e))
                raise
            log.warning(
                "analysis_fallback",
                provider=self.primary.name,
                fallback=self.fallback.name,
                error=str(e),
            )
            result = await self.fallback.analyze(text, job_description)
        log.info("analysis_done", provider=result.provider, score=result.overall_score)
        return result


def build_analyzer(settings: Settings) -> ResumeAnalyzer:
    primary = get_analysis_provider(settings)
    if isinstance(primary, HeuristicProvider):
        return ResumeAnalyzer(primary)
    return ResumeAnalyzer(primary, fallback=HeuristicProvider())
