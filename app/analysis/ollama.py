"""Local inference through the Ollama REST API."""

import httpx

from app.analysis.base import SYSTEM_PROMPT, AnalysisProvider, build_prompt, parse_provider_payload
from app.core.exceptions import AnalysisProviderError, ProviderResponseError
from app.core.logging import get_logger
from app.models.resume_document import AnalysisResult

log = get_logger(__name__)


class OllamaProvider(AnalysisProvider):
    name = "ollama"

    def __init__(
        self,
        host: str,
        model: str,
        timeout_s: float = 60.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._host = host.rstrip("/")
        self._model = model
        self._timeout_s = timeout_s
        self._transport = transport

    async def analyze(self, text: str, job_description: str | None = None) -> AnalysisResult:
        payload = {
            "model": self._model,
            "messages": [
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": build_prompt(text, job_description)},
            ],
            "options": {"temperature": 0.3, "num_predict": 2000},
            "stream": False,
        }
        log.debug("provider_request", provider=self.name, model=self._model, host=self._host)
        try:
            async with httpx.AsyncClient(
                base_url=self._host,
                timeout=self._timeout_s,
                transport=self._transport,
            ) as client:
                response = await client.post("/api/chat", json=payload)
                response.raise_for_status()
                body = response.json()
        except (httpx.HTTPError, ValueError) as e:
            raise AnalysisProviderError(f"Ollama request failed: {e}", self.name) from e
        try:
            content = body["message"]["content"]
        except (KeyError, TypeError) as e:
            raise ProviderResponseError("Ollama response missing message content", self.name) from e
        return parse_provider_payload(content, self.name)
