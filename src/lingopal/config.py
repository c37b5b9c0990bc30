"""Application configuration via environment variables.

Uses pydantic-settings to load config from env vars with LINGOPAL_ prefix
(a local .env file is read too). Secrets have no defaults: a missing
database URL, signing secret, AI key or mail credential is a validation
error, and the CLI turns that into exit code 1 before anything listens.

Learn: Settings is frozen. It is built once at process entry, handed to
create_app(), and reached from handlers through app.state, never re-read
from the environment mid-request.
"""

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_FRONTEND_URL = "http://localhost:5173"


class Settings(BaseSettings):
    """All app configuration. Set via LINGOPAL_* env vars."""

    # Database
    database_url: str = Field(min_length=1)

    # Auth
    jwt_secret: str = Field(min_length=1)
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = 60 * 24 * 30  # 30 days
    reset_token_expire_minutes: int = 60

    # Generative AI (Gemini)
    ai_api_key: str = Field(min_length=1)
    ai_model: str = "gemini-2.5-flash"

    # Mail (password reset)
    email_user: str = Field(min_length=1)
    email_pass: str = Field(min_length=1)
    smtp_host: str = "smtp.gmail.com"
    smtp_port: int = 465
    smtp_timeout_seconds: float = 30.0
    mail_sender_name: str = "AI English Assistant"

    # Frontend (used to build password reset links)
    frontend_url: str = DEFAULT_FRONTEND_URL

    # Server
    environment: str = "development"
    debug: bool = False
    host: str = "0.0.0.0"
    port: int = 5000

    # CORS
    cors_origins: list[str] = [
        "https://ai-englishfrontend.vercel.app",
        "http://localhost:5173",
        "http://127.0.0.1:5173",
    ]

    # Redis (optional, only used for rate limiting)
    redis_url: str = ""

    # Rate limiting
    rate_limit_rpm: int = 100  # requests per minute per IP
    rate_limit_auth_rpm: int = 10  # stricter limit for auth endpoints

    model_config = SettingsConfigDict(
        env_prefix="LINGOPAL_",
        env_file=".env",
        extra="ignore",
        frozen=True,
    )

    @field_validator("frontend_url")
    @classmethod
    def strip_trailing_slash(cls, value: str) -> str:
        """Reset links are built as f"{frontend_url}/#/...", so no trailing slash."""
        return value.rstrip("/")

    @property
    def frontend_url_is_default(self) -> bool:
        return self.frontend_url == DEFAULT_FRONTEND_URL

    def redacted(self) -> dict:
        """Settings as a dict with secrets masked, safe to print or log."""
        data = self.model_dump()
        for key in ("jwt_secret", "ai_api_key", "email_pass"):
            data[key] = "***"
        if "@" in data["database_url"]:
            scheme, _, rest = data["database_url"].partition("://")
            data["database_url"] = f"{scheme}://***@{rest.split('@', 1)[1]}"
        return data


@lru_cache
def load_settings() -> Settings:
    """Build Settings from the environment (cached for the process)."""
    return Settings()
