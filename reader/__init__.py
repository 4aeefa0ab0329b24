"""Reader package — reading session, chapter cache, progress sync, and library."""

from reader.app import ReaderApp
from reader.chapter_cache import ChapterContentCache
from reader.library import BookOverview, Library, detect_format, validate_new_book
from reader.progress_sync import ProgressSynchronizer, compute_percent
from reader.session import ReadingSession, clamp_index, plan_prefetch
from reader.toc import content_chapters, display_position, reading_stats, volume_groups
from reader.viewport import LineViewport, Viewport, wrap_text

__all__ = [
    "ReaderApp",
    "ChapterContentCache",
    "BookOverview",
    "Library",
    "detect_format",
    "validate_new_book",
    "ProgressSynchronizer",
    "compute_percent",
    "ReadingSession",
    "clamp_index",
    "plan_prefetch",
    "content_chapters",
    "display_position",
    "reading_stats",
    "volume_groups",
    "LineViewport",
    "Viewport",
    "wrap_text",
]
