from groq import AsyncGroq

from app.analysis.base import SYSTEM_PROMPT, AnalysisProvider, build_prompt, parse_provider_payload
from app.core.exceptions import AnalysisProviderError, ProviderConfigError
from app.core.logging import get_logger
from app.models.resume_document import AnalysisResult

log = get_logger(__name__)


class GroqProvider(AnalysisProvider):
    name = "groq"

    def __init__(self, api_key: str, model: str, timeout_s: float = 60.0):
        self._api_key = api_key.strip()
        self._model = model
        self._client = AsyncGroq(api_key=self._api_key, timeout=timeout_s) if self._api_key else None

    async def analyze(self, text: str, job_description: str | None = None) -> AnalysisResult:
        if self._client is None:
            raise ProviderConfigError("GROQ_API_KEY not found", self.name)
        log.debug("provider_request", provider=self.name, model=self._model)
        try:
            completion = await self._client.chat.completions.create(
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": build_prompt(text, job_description)},
                ],
                model=self._model,
                temperature=0.3,
                max_tokens=2000,
            )
        except Exception as e:
            raise AnalysisProviderError(f"Groq request failed: {e}", self.name) from e
        content = completion.choices[0].message.content if completion.choices else None
        return parse_provider_payload(content or "", self.name)
