"""Book data model."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from models.enums import FileFormat
from models.timestamps import parse_timestamp


@dataclass
class Book:
    """A book in the library. Only the backend mutates it."""
    id: str = ""
    title: str = ""
    author: str = ""
    description: str = ""
    cover_path: str = ""
    file_path: str = ""
    file_format: FileFormat = FileFormat.TXT
    file_size: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_api(cls, data: dict) -> "Book":
        return cls(
            id=str(data.get("id", "")),
            title=data.get("title") or "",
            author=data.get("author") or "",
            description=data.get("description") or "",
            cover_path=data.get("cover_path") or "",
            file_path=data.get("file_path") or "",
            file_format=FileFormat(data.get("file_format") or FileFormat.TXT.value),
            file_size=int(data.get("file_size") or 0),
            created_at=parse_timestamp(data.get("created_at")),
            updated_at=parse_timestamp(data.get("updated_at")),
        )


@dataclass
class CreateBookRequest:
    """Payload for POST /books."""
    title: str = ""
    file_path: str = ""
    file_format: FileFormat = FileFormat.TXT
    author: str = ""
    description: str = ""
    tag_ids: list[str] = field(default_factory=list)

    def to_payload(self) -> dict:
        payload = {
            "title": self.title,
            "file_path": self.file_path,
            "file_format": self.file_format.value,
        }
        if self.author:
            payload["author"] = self.author
        if self.description:
            payload["description"] = self.description
        if self.tag_ids:
            payload["tag_ids"] = list(self.tag_ids)
        return payload
