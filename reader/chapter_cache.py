"""Session-scoped chapter list with deduplicated on-demand content loading."""

import asyncio
import logging
from typing import Callable, Optional

from config.exceptions import ReaderError, StaleFetchError
from models.chapter import Chapter

logger = logging.getLogger(__name__)

ContentListener = Callable[[int], None]


class ChapterContentCache:
    """Owns the chapter list of the open book.

    At most one fetch per chapter index is ever in flight. Content is never
    evicted while the session lives; ``reset`` drops everything and cancels
    outstanding fetches so their results cannot land in a later session.
    """

    def __init__(self, api):
        self.api = api
        self._book_id: Optional[str] = None
        self._chapters: list[Chapter] = []
        self._in_flight: dict[int, asyncio.Task] = {}
        self._generation = 0
        self._listeners: list[ContentListener] = []

    @property
    def book_id(self) -> Optional[str]:
        return self._book_id

    @property
    def is_active(self) -> bool:
        return self._book_id is not None

    @property
    def chapters(self) -> list[Chapter]:
        return self._chapters

    def __len__(self) -> int:
        return len(self._chapters)

    def get(self, index: int) -> Optional[Chapter]:
        if 0 <= index < len(self._chapters):
            return self._chapters[index]
        return None

    def is_loading(self, index: int) -> bool:
        return index in self._in_flight

    def add_listener(self, listener: ContentListener) -> None:
        """Register a callback fired with the index of every slot that receives content."""
        self._listeners.append(listener)

    def remove_listener(self, listener: ContentListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    # ---- Lifecycle -------------------------------------------------------

    def attach(self, book_id: str, chapters: list[Chapter]) -> None:
        """Start serving a new book's chapter list."""
        self.reset()
        self._book_id = book_id
        self._chapters = list(chapters)

    def reset(self) -> None:
        """Drop the chapter list and cancel every in-flight fetch."""
        self._generation += 1
        for task in self._in_flight.values():
            task.cancel()
        self._in_flight.clear()
        self._book_id = None
        self._chapters = []

    # ---- Content ---------------------------------------------------------

    def merge(self, chapter: Chapter) -> bool:
        """Place a fetched chapter at ``chapter_number - 1``. Returns False if out of range."""
        index = chapter.chapter_number - 1
        if not 0 <= index < len(self._chapters):
            logger.debug("Dropping chapter %d outside list of %d", chapter.chapter_number, len(self._chapters))
            return False
        self._store(index, chapter)
        return True

    def request_content(self, index: int) -> Optional[asyncio.Task]:
        """Fetch content for ``index`` unless there is nothing to do.

        Returns the fetch task, or None when the request is a no-op: no
        session, invalid index, content already present, divider page, or
        a fetch for this index already running.
        """
        if self._book_id is None:
            return None
        chapter = self.get(index)
        if chapter is None or chapter.is_divider or chapter.has_content:
            return None
        if index in self._in_flight:
            return None

        task = asyncio.get_running_loop().create_task(
            self._fetch(index, chapter.chapter_number, self._book_id, self._generation),
            name=f"chapter:{self._book_id}:{index}",
        )
        self._in_flight[index] = task
        return task

    async def _fetch(self, index: int, chapter_number: int, book_id: str, generation: int) -> None:
        try:
            fetched = await self.api.get_chapter(book_id, chapter_number)
            if generation != self._generation:
                raise StaleFetchError(book_id, index)
            self._store(index, fetched)
            logger.debug("Loaded chapter %d of book %s", chapter_number, book_id)
        except StaleFetchError as e:
            logger.debug("%s", e)
        except ReaderError as e:
            logger.warning("Failed to load chapter %d of book %s: %s", chapter_number, book_id, e)
        finally:
            if generation == self._generation and self._in_flight.get(index) is asyncio.current_task():
                del self._in_flight[index]

    def _store(self, index: int, chapter: Chapter) -> None:
        self._chapters[index] = chapter
        for listener in list(self._listeners):
            listener(index)
