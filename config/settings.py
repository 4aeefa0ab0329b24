"""Configuration settings loaded from .env file."""

from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings, loaded from .env file.

    Timing values are in seconds; the backend is the local REST server
    the desktop shell starts on port 8080.
    """

    # Backend
    api_base_url: str = "http://localhost:8080/api"
    request_timeout_seconds: float = 15.0

    # Reading session
    prefetch_chapter_count: int = 10
    progress_debounce_seconds: float = 0.4

    # Import jobs
    import_poll_interval_seconds: float = 0.8
    import_clear_delay_seconds: float = 1.0
    import_max_poll_failures: int = 15
    cancel_polls_on_search: bool = True

    # Local state
    preferences_path: Path = Path("./data/preferences.json")

    # Logging
    log_dir: Path = Path("./data/logs")

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
    }

    @field_validator("api_base_url")
    @classmethod
    def validate_base_url(cls, v: str) -> str:
        if not v.startswith(("http://", "https://")):
            raise ValueError("api_base_url must start with http:// or https://")
        return v.rstrip("/")

    @field_validator(
        "request_timeout_seconds",
        "progress_debounce_seconds",
        "import_poll_interval_seconds",
        "import_clear_delay_seconds",
    )
    @classmethod
    def validate_positive_duration(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("Durations must be positive")
        return v

    @field_validator("prefetch_chapter_count", "import_max_poll_failures")
    @classmethod
    def validate_counts(cls, v: int) -> int:
        if v < 1:
            raise ValueError("Count settings must be >= 1")
        return v

    @field_validator("preferences_path", "log_dir")
    @classmethod
    def ensure_parent_dirs(cls, v: Path) -> Path:
        v.parent.mkdir(parents=True, exist_ok=True)
        return v


_settings_instance: Settings | None = None


def get_settings() -> Settings:
    """Get cached settings instance."""
    global _settings_instance
    if _settings_instance is None:
        _settings_instance = Settings()
    return _settings_instance
