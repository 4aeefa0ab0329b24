"""Remote search results and import job models."""

from dataclasses import dataclass
from typing import Optional

from models.enums import JobStatus


@dataclass(frozen=True)
class SearchResult:
    """One hit from the remote source; ``url`` identifies it for imports."""
    title: str
    url: str
    author: str = ""
    latest: str = ""

    @classmethod
    def from_api(cls, data: dict) -> "SearchResult":
        return cls(
            title=data.get("title") or "",
            url=data.get("url") or "",
            author=data.get("author") or "",
            latest=data.get("latest") or "",
        )

    def to_payload(self) -> dict:
        payload = {"title": self.title, "url": self.url}
        if self.author:
            payload["author"] = self.author
        if self.latest:
            payload["latest"] = self.latest
        return payload


@dataclass
class ImportJob:
    """Server-side status of an asynchronous import."""
    id: str = ""
    status: JobStatus = JobStatus.PENDING
    total: int = 0
    done: int = 0
    error: Optional[str] = None
    book_id: Optional[str] = None

    @classmethod
    def from_api(cls, data: dict) -> "ImportJob":
        return cls(
            id=str(data.get("id", "")),
            status=JobStatus(data.get("status") or JobStatus.PENDING.value),
            total=int(data.get("total") or 0),
            done=int(data.get("done") or 0),
            error=data.get("error") or None,
            book_id=data.get("book_id") or None,
        )

    @property
    def percent(self) -> int:
        """Whole-number completion, 0 while the total is unknown."""
        if self.total <= 0:
            return 0
        return min(100, (self.done * 100) // self.total)
