"""Configuration package — settings, preferences, logging, and exceptions."""

from config.exceptions import (
    ReaderError,
    NetworkError,
    ApiError,
    SearchError,
    RateLimitedError,
    JobError,
    StaleFetchError,
    ValidationError,
    InvalidConfigError,
)
from config.logging_config import setup_logging
from config.preferences import PreferenceStore, ReaderPreferences
from config.settings import Settings, get_settings

__all__ = [
    "Settings",
    "get_settings",
    "setup_logging",
    "PreferenceStore",
    "ReaderPreferences",
    "ReaderError",
    "NetworkError",
    "ApiError",
    "SearchError",
    "RateLimitedError",
    "JobError",
    "StaleFetchError",
    "ValidationError",
    "InvalidConfigError",
]
