"""Application settings loaded from environment variables."""

import os
from functools import lru_cache

from dotenv import load_dotenv
from pydantic import BaseModel

load_dotenv()


class Settings(BaseModel):
    """Service configuration.

    Keep all credentials and tunables centralized here.
    """

    app_env: str = "production"
    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = 5000
    cors_origin_regex: str = ".*"

    gemini_api_key: str | None = None
    gemini_model: str = "gemini-2.5-flash"
    temperature: float = 0.7
    max_output_tokens: int = 8192

    session_ttl_seconds: int = 3600
    stream_buffer_size: int = 32

    @property
    def is_development(self) -> bool:
        return self.app_env.lower() in {"dev", "development", "local"}

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from the current process environment."""
        return cls(
            app_env=os.getenv("APP_ENV") or os.getenv("NODE_ENV") or "production",
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            host=os.getenv("HOST", "0.0.0.0"),
            port=int(os.getenv("PORT", "5000")),
            cors_origin_regex=os.getenv("CORS_ORIGIN_REGEX", ".*"),
            gemini_api_key=os.getenv("GEMINI_API_KEY") or os.getenv("GOOGLE_API_KEY"),
            gemini_model=os.getenv("GEMINI_MODEL", "gemini-2.5-flash"),
            temperature=float(os.getenv("MODEL_TEMPERATURE", "0.7")),
            max_output_tokens=int(os.getenv("MAX_OUTPUT_TOKENS", "8192")),
            session_ttl_seconds=int(os.getenv("SESSION_TTL_SECONDS", "3600")),
            stream_buffer_size=int(os.getenv("STREAM_BUFFER_SIZE", "32")),
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings.from_env()
