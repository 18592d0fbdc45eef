import os
from dataclasses import dataclass

DEFAULT_DATABASE_URL = "postgresql+psycopg://postgres:postgres@db:5432/datashield"


@dataclass(frozen=True)
class Settings:
    """Process configuration, read once at startup (no hot reload)."""

    port: int = 3002
    database_url: str = DEFAULT_DATABASE_URL
    openai_api_key: str = ""
    openai_base_url: str | None = None
    openai_model: str = "gpt-3.5-turbo"
    rate_limit: str = "100/15 minutes"
    log_level: str = "INFO"
    cors_allow_origins: tuple[str, ...] = ("*",)

    @classmethod
    def from_env(cls) -> "Settings":
        # API_KEY is the legacy name used by the extension backend's .env files.
        api_key = os.getenv("OPENAI_API_KEY", "").strip() or os.getenv("API_KEY", "").strip()
        base_url = os.getenv("OPENAI_BASE_URL", "").strip()
        origins = os.getenv("CORS_ALLOW_ORIGINS", "*").split(",")
        return cls(
            port=int(os.getenv("PORT", "3002")),
            database_url=os.getenv("DATABASE_URL", DEFAULT_DATABASE_URL),
            openai_api_key=api_key,
            openai_base_url=base_url or None,
            openai_model=os.getenv("OPENAI_MODEL", "gpt-3.5-turbo").strip() or "gpt-3.5-turbo",
            rate_limit=os.getenv("RATE_LIMIT", "100/15 minutes"),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            cors_allow_origins=tuple(o.strip() for o in origins if o.strip()) or ("*",),
        )
