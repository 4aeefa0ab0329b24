"""Reading session controller: which book and chapter are open right now."""

import asyncio
import logging
from typing import Callable, Optional

from config.exceptions import ReaderError, StaleFetchError
from config.settings import Settings
from models.chapter import Chapter, ChapterSummary
from models.progress import ReadingProgress
from reader.chapter_cache import ChapterContentCache

logger = logging.getLogger(__name__)

# (previous index or None when a session starts, current index)
ChapterChangeListener = Callable[[Optional[int], int], None]


def plan_prefetch(
    summaries: list[ChapterSummary],
    current_chapter: int,
    limit: int = 10,
) -> list[int]:
    """Return the chapter numbers to fetch eagerly when a book is opened.

    The first ``limit`` non-divider chapters, plus the chapter the reader
    stopped at (``current_chapter`` is a 0-based index into ``summaries``)
    when it is in range and not a divider.
    """
    numbers = [s.chapter_number for s in summaries if not s.is_divider][:limit]
    position = current_chapter + 1
    if 0 < position <= len(summaries):
        target = summaries[position - 1]
        if not target.is_divider and target.chapter_number not in numbers:
            numbers.append(target.chapter_number)
    return numbers


def clamp_index(index: int, length: int) -> int:
    """Clamp a persisted chapter index into ``[0, length - 1]``."""
    return min(max(index, 0), max(length - 1, 0))


class ReadingSession:
    """Owns the open book, its chapter list and the current chapter index.

    The chapter list itself lives in the ChapterContentCache; this class
    decides what to prefetch on open and moves the reader between chapters.
    Listeners are told about every index change so scroll/progress handling
    can follow along.
    """

    def __init__(self, api, cache: Optional[ChapterContentCache] = None, settings: Optional[Settings] = None):
        self.api = api
        self.settings = settings or Settings()
        self.cache = cache or ChapterContentCache(api)
        self.progress: Optional[ReadingProgress] = None
        self._current_index = 0
        self._open_generation = 0
        self._prefetch: list[asyncio.Task] = []
        self._listeners: list[ChapterChangeListener] = []

    # ---- State -----------------------------------------------------------

    @property
    def book_id(self) -> Optional[str]:
        return self.cache.book_id

    @property
    def is_active(self) -> bool:
        return self.cache.is_active

    @property
    def chapters(self) -> list[Chapter]:
        return self.cache.chapters

    @property
    def current_index(self) -> int:
        return self._current_index

    @property
    def current_chapter(self) -> Optional[Chapter]:
        return self.cache.get(self._current_index)

    def add_listener(self, listener: ChapterChangeListener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: ChapterChangeListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    # ---- Open / close ----------------------------------------------------

    async def open(self, book_id: str) -> bool:
        """Open a book and prefetch the chapters the reader is about to need.

        Returns False if the session was closed or replaced while loading.

        Raises:
            NetworkError, ApiError: If the chapter list or progress cannot be fetched.
        """
        self.close()
        generation = self._open_generation

        summaries, progress = await asyncio.gather(
            self.api.get_book_chapters(book_id),
            self.api.get_progress(book_id),
        )
        if generation != self._open_generation:
            logger.debug("%s", StaleFetchError(book_id))
            return False

        if not summaries:
            # Legacy imports have no per-chapter rows; load everything at once
            logger.info("Book %s has no chapter summaries, loading full content", book_id)
            chapters = await self.api.get_book_content(book_id)
            return self._start(generation, book_id, chapters, progress)

        summaries = sorted(summaries, key=lambda s: s.chapter_number)
        placeholders = [Chapter.placeholder(s) for s in summaries]
        numbers = plan_prefetch(summaries, progress.current_chapter, self.settings.prefetch_chapter_count)
        logger.debug("Prefetching %d chapters of book %s: %s", len(numbers), book_id, numbers)

        loop = asyncio.get_running_loop()
        tasks = [
            loop.create_task(self.api.get_chapter(book_id, number), name=f"prefetch:{book_id}:{number}")
            for number in numbers
        ]
        self._prefetch = tasks
        try:
            results = await asyncio.gather(*tasks, return_exceptions=True)
        finally:
            if self._prefetch is tasks:
                self._prefetch = []
        if generation != self._open_generation:
            logger.debug("%s", StaleFetchError(book_id))
            return False

        fetched = []
        for number, result in zip(numbers, results):
            if isinstance(result, ReaderError):
                logger.warning("Prefetch of chapter %d of book %s failed: %s", number, book_id, result)
            elif isinstance(result, BaseException):
                raise result
            else:
                fetched.append(result)

        return self._start(generation, book_id, placeholders, progress, fetched)

    def _start(
        self,
        generation: int,
        book_id: str,
        chapters: list[Chapter],
        progress: ReadingProgress,
        fetched: Optional[list[Chapter]] = None,
    ) -> bool:
        if generation != self._open_generation:
            logger.debug("%s", StaleFetchError(book_id))
            return False

        self.cache.attach(book_id, chapters)
        for chapter in fetched or []:
            self.cache.merge(chapter)

        self.progress = progress
        self._current_index = clamp_index(progress.current_chapter, len(chapters))
        if self._current_index != progress.current_chapter:
            logger.info(
                "Persisted chapter %d out of range for %d chapters, starting at %d",
                progress.current_chapter, len(chapters), self._current_index,
            )
        logger.info("Opened book %s at chapter index %d", book_id, self._current_index)
        self._notify(None, self._current_index)
        return True

    def close(self) -> None:
        """Forget everything about the current book."""
        if self.is_active:
            logger.info("Closing book %s", self.book_id)
        self._open_generation += 1
        for task in self._prefetch:
            task.cancel()
        self._prefetch = []
        self.cache.reset()
        self.progress = None
        self._current_index = 0

    # ---- Navigation ------------------------------------------------------

    def set_current_chapter(self, index: int) -> None:
        """Jump to ``index``. Callers pass indices taken from the chapter list."""
        previous = self._current_index
        self._current_index = index
        if previous != index:
            self._notify(previous, index)

    def next(self) -> bool:
        if self._current_index >= len(self.chapters) - 1:
            return False
        self.set_current_chapter(self._current_index + 1)
        return True

    def previous(self) -> bool:
        if self._current_index <= 0:
            return False
        self.set_current_chapter(self._current_index - 1)
        return True

    def update_progress(self, progress: ReadingProgress) -> None:
        """Store the progress record the backend returned after a save."""
        self.progress = progress

    def ensure_current_loaded(self) -> Optional[asyncio.Task]:
        return self.cache.request_content(self._current_index)

    def _notify(self, previous: Optional[int], current: int) -> None:
        for listener in list(self._listeners):
            listener(previous, current)
        self.ensure_current_loaded()
