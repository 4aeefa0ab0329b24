"""Chapter data models.

A chapter's kind is decided once, when it enters the client: a volume
divider (``volume_chapter_number == 0``) is a table-of-contents heading with
no fetchable content, everything else is a content chapter whose text is
``None`` until it has been fetched.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, Union

from models.timestamps import parse_timestamp


@dataclass
class ChapterSummary:
    """Metadata-only chapter record, cheap to list for a whole book."""
    id: str = ""
    book_id: str = ""
    chapter_number: int = 0  # 1-based, global across volumes
    volume_number: Optional[int] = None
    volume_chapter_number: Optional[int] = None
    title: str = ""
    word_count: int = 0
    created_at: Optional[datetime] = None

    @classmethod
    def from_api(cls, data: dict) -> "ChapterSummary":
        return cls(
            id=str(data.get("id", "")),
            book_id=str(data.get("book_id", "")),
            chapter_number=int(data.get("chapter_number") or 0),
            volume_number=data.get("volume_number"),
            volume_chapter_number=data.get("volume_chapter_number"),
            title=data.get("title") or "",
            word_count=int(data.get("word_count") or 0),
            created_at=parse_timestamp(data.get("created_at")),
        )

    @property
    def is_divider(self) -> bool:
        return self.volume_chapter_number == 0


@dataclass(frozen=True)
class Divider:
    """Volume heading page; never fetched."""


@dataclass(frozen=True)
class Content:
    """Readable chapter; ``text`` stays None until fetched."""
    text: Optional[str] = None


ChapterKind = Union[Divider, Content]


@dataclass
class Chapter:
    """A chapter summary plus its kind (and content, once loaded)."""
    summary: ChapterSummary = field(default_factory=ChapterSummary)
    kind: ChapterKind = field(default_factory=Content)

    @classmethod
    def placeholder(cls, summary: ChapterSummary) -> "Chapter":
        """Build a contentless slot for a summary."""
        kind = Divider() if summary.is_divider else Content()
        return cls(summary=summary, kind=kind)

    @classmethod
    def from_api(cls, data: dict) -> "Chapter":
        summary = ChapterSummary.from_api(data)
        content = data.get("content")
        # Older imports mark volume pages only by an empty body inside a volume
        if summary.is_divider or (summary.volume_number and summary.word_count == 0 and content == ""):
            return cls(summary=summary, kind=Divider())
        return cls(summary=summary, kind=Content(text=content))

    @property
    def is_divider(self) -> bool:
        return isinstance(self.kind, Divider)

    @property
    def content(self) -> Optional[str]:
        """Chapter text; dividers render as the empty string."""
        if isinstance(self.kind, Divider):
            return ""
        return self.kind.text

    @property
    def has_content(self) -> bool:
        return isinstance(self.kind, Content) and bool(self.kind.text)

    @property
    def chapter_number(self) -> int:
        return self.summary.chapter_number

    @property
    def title(self) -> str:
        return self.summary.title

    @property
    def id(self) -> str:
        return self.summary.id
