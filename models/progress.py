"""Reading progress data model."""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from models.timestamps import parse_timestamp


@dataclass
class ReadingProgress:
    """Persisted progress pointer for one book."""
    book_id: str = ""
    current_chapter: int = 0  # 0-based index into the full chapter list, dividers included
    current_position: int = 0  # raw scroll offset
    progress_percentage: float = 0.0
    last_read_at: Optional[datetime] = None

    @classmethod
    def from_api(cls, data: dict) -> "ReadingProgress":
        return cls(
            book_id=str(data.get("book_id", "")),
            current_chapter=int(data.get("current_chapter") or 0),
            current_position=max(0, int(data.get("current_position") or 0)),
            progress_percentage=float(data.get("progress_percentage") or 0.0),
            last_read_at=parse_timestamp(data.get("last_read_at")),
        )


@dataclass(frozen=True)
class ProgressUpdate:
    """Payload for PUT /progress/:bookId, captured when a save is scheduled."""
    current_chapter: int
    current_position: int
    progress_percentage: float

    def to_payload(self) -> dict:
        return {
            "current_chapter": self.current_chapter,
            "current_position": self.current_position,
            "progress_percentage": self.progress_percentage,
        }
