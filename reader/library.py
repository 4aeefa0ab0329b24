"""Library listing: books, their reading progress, filtering and sorting."""

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import PurePath
from typing import Optional

from config.exceptions import ReaderError, ValidationError
from models.book import Book, CreateBookRequest
from models.enums import FileFormat, LibrarySort
from models.progress import ReadingProgress

logger = logging.getLogger(__name__)

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


def detect_format(file_name: str) -> FileFormat:
    """Guess a book's format from its file extension; anything unknown is plain text."""
    ext = PurePath(file_name).suffix.lower().lstrip(".")
    if ext in ("md", "markdown"):
        return FileFormat.MARKDOWN
    if ext == "epub":
        return FileFormat.EPUB
    return FileFormat.TXT


def validate_new_book(request: CreateBookRequest) -> None:
    """Reject a submission missing its required fields, before any network call."""
    missing = [name for name in ("title", "file_path") if not getattr(request, name).strip()]
    if missing:
        raise ValidationError("Title and file path are required", {"missing": ",".join(missing)})


def _aware(value: Optional[datetime]) -> datetime:
    if value is None:
        return _EPOCH
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


@dataclass
class BookOverview:
    """A book with the reading state shown next to it in the library."""
    book: Book
    progress: Optional[ReadingProgress] = None
    chapter_count: int = 0

    @property
    def last_read_at(self) -> Optional[datetime]:
        return self.progress.last_read_at if self.progress else None


class Library:
    """Holds the book list and per-book overviews for the library view."""

    def __init__(self, api):
        self.api = api
        self.books: list[Book] = []
        self.overviews: dict[str, BookOverview] = {}

    async def refresh(self) -> list[Book]:
        """Reload the book list and every book's overview."""
        self.books = await self.api.list_books()
        await self.load_overviews()
        return self.books

    async def load_overviews(self) -> dict[str, BookOverview]:
        results = await asyncio.gather(*(self._load_overview(book) for book in self.books))
        self.overviews = {overview.book.id: overview for overview in results}
        return self.overviews

    async def _load_overview(self, book: Book) -> BookOverview:
        try:
            progress, chapters = await asyncio.gather(
                self.api.get_progress(book.id),
                self.api.get_book_chapters(book.id),
            )
        except ReaderError as e:
            logger.warning("Could not load overview for book %s: %s", book.id, e)
            return BookOverview(book=book)
        return BookOverview(book=book, progress=progress, chapter_count=len(chapters))

    def browse(self, query: str = "", sort: LibrarySort = LibrarySort.RECENT) -> list[BookOverview]:
        """Books matching ``query`` (title or author, case-insensitive), in ``sort`` order."""
        needle = query.strip().casefold()
        matches = [
            self.overviews.get(book.id) or BookOverview(book=book)
            for book in self.books
            if not needle
            or needle in book.title.casefold()
            or needle in (book.author or "").casefold()
        ]

        if sort == LibrarySort.TITLE:
            return sorted(matches, key=lambda o: o.book.title.casefold())
        if sort == LibrarySort.LAST_READ:
            # Ties (including never-read books) fall back to newest first
            by_recent = sorted(matches, key=lambda o: _aware(o.book.created_at), reverse=True)
            return sorted(by_recent, key=lambda o: _aware(o.last_read_at), reverse=True)
        return sorted(matches, key=lambda o: _aware(o.book.created_at), reverse=True)

    async def add_book(self, request: CreateBookRequest) -> Book:
        """Validate and create a book.

        Raises:
            ValidationError: If title or file path is missing.
        """
        validate_new_book(request)
        book = await self.api.create_book(request)
        self.books.append(book)
        self.overviews[book.id] = BookOverview(book=book)
        logger.info("Added book %s (%s)", book.id, book.title)
        return book

    async def remove_book(self, book_id: str) -> None:
        await self.api.delete_book(book_id)
        self.books = [b for b in self.books if b.id != book_id]
        self.overviews.pop(book_id, None)
        logger.info("Removed book %s", book_id)
