from google import genai
from google.genai import types

from app.analysis.base import SYSTEM_PROMPT, AnalysisProvider, build_prompt, parse_provider_payload
from app.core.exceptions import AnalysisProviderError, ProviderConfigError
from app.core.logging import get_logger
from app.models.resume_document import AnalysisResult

log = get_logger(__name__)


class GeminiProvider(AnalysisProvider):
    name = "gemini"

    def __init__(self, api_key: str, model: str, timeout_s: float = 60.0):
        self._api_key = api_key.strip()
        self._model = model
        self._client = None
        if self._api_key:
            self._client = genai.Client(
                api_key=self._api_key,
                http_options=types.HttpOptions(timeout=int(timeout_s * 1000)),
            )

    async def analyze(self, text: str, job_description: str | None = None) -> AnalysisResult:
        if self._client is None:
            raise ProviderConfigError("GEMINI_API_KEY not found in environment variables", self.name)
        log.debug("provider_request", provider=self.name, model=self._model)
        try:
            response = await self._client.aio.models.generate_content(
                model=self._model,
                contents=build_prompt(text, job_description),
                config=types.GenerateContentConfig(
                    system_instruction=SYSTEM_PROMPT,
                    temperature=0.3,
                    response_mime_type="application/json",
                ),
            )
        except Exception as e:
            raise AnalysisProviderError(f"Gemini request failed: {e}", self.name) from e
        return parse_provider_payload(response.text or "", self.name)
