from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # App
    app_name: str = "Onboarding State Sync"
    debug: bool = False

    # API
    backend_url: str = "http://localhost:8000"
    frontend_url: str = "http://localhost:3000"
    allowed_origins: list[str] = [
        "http://localhost:3000",
    ]

    # Remote document store
    redis_url: str = "redis://localhost:6379"

    # Session (issued by the auth provider, verified here)
    session_cookie_name: str = "__session"
    session_secret: str = "dev-only-session-secret-change-me-now"
    session_algorithm: str = "HS256"

    # Onboarding store persistence debounce (milliseconds)
    onboarding_persist_debounce_ms: int = 2500


@lru_cache
def get_settings() -> Settings:
    return Settings()
