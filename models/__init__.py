"""Models package — books, chapters, progress, import jobs, and enums."""

from models.book import Book, CreateBookRequest
from models.chapter import Chapter, ChapterKind, ChapterSummary, Content, Divider
from models.progress import ProgressUpdate, ReadingProgress
from models.job import ImportJob, SearchResult
from models.enums import FileFormat, JobStatus, LibrarySort

__all__ = [
    "Book",
    "CreateBookRequest",
    "Chapter",
    "ChapterKind",
    "ChapterSummary",
    "Content",
    "Divider",
    "ProgressUpdate",
    "ReadingProgress",
    "ImportJob",
    "SearchResult",
    "FileFormat",
    "JobStatus",
    "LibrarySort",
]
