"""Persisted reader preferences — a key-value blob with explicit load/save."""

import json
import logging
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, ValidationError, field_validator

logger = logging.getLogger(__name__)


class ReaderPreferences(BaseModel):
    """Typography and display preferences owned by the front end.

    The core only stores and returns them; it never interprets them.
    """

    theme: Literal["light", "dark"] = "dark"
    font_size: int = 17
    line_spacing: float = 1.7
    page_margin: int = 20
    content_language: Literal["zh-Hant", "zh-Hans"] = "zh-Hant"
    reading_theme: Literal["day", "night", "sepia"] = "night"
    font_family: Literal["serif", "sans"] = "serif"
    library_sort: Literal["recent", "last_read", "title"] = "recent"

    @field_validator("font_size")
    @classmethod
    def validate_font_size(cls, v: int) -> int:
        if not 8 <= v <= 72:
            raise ValueError("font_size must be between 8 and 72")
        return v


class PreferenceStore:
    """JSON-file backed store for ReaderPreferences."""

    def __init__(self, path: str | Path):
        self.path = Path(path)

    def load(self) -> ReaderPreferences:
        """Load preferences, falling back to defaults if missing or unreadable."""
        if not self.path.exists():
            return ReaderPreferences()
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
            return ReaderPreferences.model_validate(data)
        except (OSError, json.JSONDecodeError, ValidationError) as e:
            logger.warning("Ignoring unreadable preferences at %s: %s", self.path, e)
            return ReaderPreferences()

    def save(self, prefs: ReaderPreferences) -> Path:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(
            json.dumps(prefs.model_dump(), ensure_ascii=False, indent=2),
            encoding="utf-8",
        )
        logger.debug("Preferences saved to %s", self.path)
        return self.path

    def update(self, **changes) -> ReaderPreferences:
        """Apply changes on top of the stored preferences and persist them."""
        current = self.load()
        updated = ReaderPreferences.model_validate({**current.model_dump(), **changes})
        self.save(updated)
        return updated
