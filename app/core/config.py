from functools import lru_cache
from typing import Any, List, Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

_DEFAULT_CORS = ["*"]

AIProviderName = Literal["gemini", "groq", "ollama", "mock"]


def _parse_cors_origins(v: Any) -> List[str]:
    try:
        if v is None or v == "":
            return _DEFAULT_CORS.copy()
        if isinstance(v, list):
            return [x for x in v if isinstance(x, str) and x.strip()]
        s = str(v).strip()
        if not s:
            return _DEFAULT_CORS.copy()
        if s.startswith("["):
            import json
            out = json.loads(s)
            return [x for x in out if isinstance(x, str) and x.strip()] or _DEFAULT_CORS.copy()
        return [x.strip() for x in s.split(",") if x.strip()] or _DEFAULT_CORS.copy()
    except ValueError:
        return _DEFAULT_CORS.copy()


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
        populate_by_name=True,
    )

    # App
    env: str = Field(default="development", alias="ENV")
    debug: bool = Field(default=False, alias="DEBUG")
    port: int = Field(default=5000, alias="PORT")

    # MongoDB
    mongodb_uri: str = Field(default="mongodb://localhost:27017", alias="MONGODB_URI")
    mongodb_db_name: str = Field(default="resume_analyzer", alias="MONGODB_DB_NAME")

    # Uploads
    upload_dir: str = Field(default="./uploads", alias="UPLOAD_DIR")
    max_file_size_mb: int = Field(default=5, ge=1, alias="MAX_FILE_SIZE_MB")
    stale_upload_minutes: int = Field(default=15, ge=1, alias="STALE_UPLOAD_MINUTES")

    # Rate limiting
    rate_limit_enabled: bool = Field(default=True, alias="RATE_LIMIT_ENABLED")
    rate_limit_window_ms: int = Field(default=900_000, ge=1000, alias="RATE_LIMIT_WINDOW_MS")
    rate_limit_max_requests: int = Field(default=100, ge=1, alias="RATE_LIMIT_MAX_REQUESTS")

    # Analysis providers
    ai_provider: AIProviderName = Field(default="gemini", alias="AI_PROVIDER")
    gemini_api_key: str = Field(default="", alias="GEMINI_API_KEY")
    gemini_model: str = Field(default="gemini-2.5-flash", alias="GEMINI_MODEL")
    groq_api_key: str = Field(default="", alias="GROQ_API_KEY")
    groq_model: str = Field(default="llama-3.3-70b-versatile", alias="GROQ_MODEL")
    ollama_host: str = Field(default="http://localhost:11434", alias="OLLAMA_HOST")
    ollama_model: str = Field(default="llama3.1", alias="OLLAMA_MODEL")
    provider_timeout_s: float = Field(default=60.0, gt=0, alias="PROVIDER_TIMEOUT_S")

    # Sentry
    sentry_dsn: str | None = Field(default=None, alias="SENTRY_DSN")

    # CORS: env as string, exposed as list
    cors_origins_raw: str = Field(
        default="*",
        alias="CORS_ORIGIN",
        description="Comma-separated or JSON list",
    )

    @property
    def cors_origins(self) -> List[str]:
        return _parse_cors_origins(self.cors_origins_raw)

    @property
    def is_development(self) -> bool:
        return self.env.lower() == "development"

    @property
    def max_file_size_bytes(self) -> int:
        return self.max_file_size_mb * 1024 * 1024

    @property
    def rate_limit(self) -> str:
        """slowapi/limits expression, e.g. "100/900 seconds"."""
        window_s = max(1, self.rate_limit_window_ms // 1000)
        return f"{self.rate_limit_max_requests}/{window_s} seconds"


@lru_cache
def get_settings() -> Settings:
    return Settings()
