"""Enumerations shared by the reader models."""

from enum import Enum


class FileFormat(str, Enum):
    TXT = "txt"
    MARKDOWN = "md"
    EPUB = "epub"
    WEB = "web"


class JobStatus(str, Enum):
    PENDING = "pending"
    RUNNING = "running"
    SUCCESS = "success"
    ERROR = "error"

    @property
    def is_terminal(self) -> bool:
        return self in (JobStatus.SUCCESS, JobStatus.ERROR)


class LibrarySort(str, Enum):
    RECENT = "recent"
    LAST_READ = "last_read"
    TITLE = "title"
