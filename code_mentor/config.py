from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file='.env', env_file_encoding='utf-8', extra='ignore')

    # Analysis service
    CODE_MENTOR_API_URL: str = "http://127.0.0.1:8000"
    CODE_MENTOR_REQUEST_TIMEOUT: float = 300.0

    # Diagram rendering service (Kroki-compatible)
    CODE_MENTOR_RENDER_URL: str = "https://kroki.io"
    CODE_MENTOR_RENDER_TIMEOUT: float = 30.0

    # App Config
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "console"

    @field_validator("CODE_MENTOR_API_URL", "CODE_MENTOR_RENDER_URL")
    @classmethod
    def _require_http_url(cls, value: str) -> str:
        if not value.startswith(("http://", "https://")):
            raise ValueError(f"Expected an http(s) URL, got: {value!r}")
        return value

    @field_validator("CODE_MENTOR_REQUEST_TIMEOUT", "CODE_MENTOR_RENDER_TIMEOUT")
    @classmethod
    def _require_positive_timeout(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("Timeouts must be positive")
        return value

    @field_validator("LOG_FORMAT")
    @classmethod
    def _require_known_format(cls, value: str) -> str:
        value = value.lower()
        if value not in ("console", "json"):
            raise ValueError("LOG_FORMAT must be 'console' or 'json'")
        return value

    def get_api_base_url(self) -> str:
        """Return the analysis service URL without a trailing slash."""
        return self.CODE_MENTOR_API_URL.rstrip("/")

    def get_render_base_url(self) -> str:
        """Return the rendering service URL without a trailing slash."""
        return self.CODE_MENTOR_RENDER_URL.rstrip("/")

settings = Settings()
