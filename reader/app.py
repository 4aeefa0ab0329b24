"""Reader application controller wiring the API, session, progress and imports together."""

import logging
from typing import Optional

from config.preferences import PreferenceStore, ReaderPreferences
from config.settings import Settings, get_settings
from crawler.callbacks import ImportCallback
from crawler.job_tracker import ImportTracker
from models.book import Book, CreateBookRequest
from reader.library import Library
from reader.progress_sync import ProgressSynchronizer
from reader.session import ReadingSession
from reader.viewport import LineViewport, Viewport, wrap_text
from tools.api_client import ReaderAPIClient
from tools.scheduler import TaskScheduler

logger = logging.getLogger(__name__)

LOADING_TEXT = "載入中…"


class ReaderApp:
    """Process-wide state for one reader window.

    Owns a single ReadingSession; opening a book replaces whatever was open
    before. When the viewport is a LineViewport, the current chapter is
    re-wrapped into it whenever the chapter or its content changes.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        api: Optional[ReaderAPIClient] = None,
        viewport: Optional[Viewport] = None,
        callback: Optional[ImportCallback] = None,
        line_width: int = 80,
    ):
        self.settings = settings or get_settings()
        self.api = api or ReaderAPIClient(self.settings)
        self.scheduler = TaskScheduler()
        self.viewport = viewport or LineViewport()
        self.line_width = line_width

        self.session = ReadingSession(self.api, settings=self.settings)
        self.sync = ProgressSynchronizer(
            self.session, self.api, self.viewport, self.scheduler, self.settings,
        )
        self.library = Library(self.api)
        self.imports = ImportTracker(self.api, self.scheduler, self.settings, callback)
        self.preference_store = PreferenceStore(self.settings.preferences_path)
        self.preferences: ReaderPreferences = self.preference_store.load()

        # Registered after the synchronizer so restores see freshly wrapped lines
        self.session.add_listener(self._on_chapter_changed)
        self.session.cache.add_listener(self._on_content_loaded)

    async def __aenter__(self) -> "ReaderApp":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    # ---- Books -----------------------------------------------------------

    async def open_book(self, book_id: str) -> bool:
        """Open ``book_id`` for reading, saving progress of the previous book first."""
        await self.sync.flush()
        self.sync.discard_pending()
        return await self.session.open(book_id)

    async def close_book(self) -> None:
        await self.sync.flush()
        self.sync.discard_pending()
        self.session.close()
        self._render()

    async def add_book(self, request: CreateBookRequest) -> Book:
        return await self.library.add_book(request)

    async def delete_book(self, book_id: str) -> None:
        """Delete a book; deleting the open book also ends the reading session."""
        await self.library.remove_book(book_id)
        if self.session.book_id == book_id:
            logger.info("Open book %s was deleted, closing reader", book_id)
            self.sync.discard_pending()
            self.session.close()
            self._render()

    def save_preferences(self, **changes) -> ReaderPreferences:
        self.preferences = self.preference_store.update(**changes)
        return self.preferences

    async def aclose(self) -> None:
        """Flush progress, stop background work and close the HTTP client."""
        try:
            if self.session.is_active:
                await self.close_book()
        finally:
            self.imports.close()
            self.scheduler.cancel_all()
            # A save already on the wire finishes before the client goes away
            await self.scheduler.wait_idle(timeout=self.settings.request_timeout_seconds)
            self.sync.detach()
            await self.api.close()
            logger.debug("Reader closed after %d API calls", self.api.total_calls)

    # ---- Rendering -------------------------------------------------------

    def _on_chapter_changed(self, previous: Optional[int], current: int) -> None:
        self._render()

    def _on_content_loaded(self, index: int) -> None:
        if index == self.session.current_index:
            self._render()

    def current_lines(self) -> list[str]:
        """The current chapter wrapped for display."""
        chapter = self.session.current_chapter
        if chapter is None:
            return []
        heading = f"【{chapter.title}】" if chapter.title else ""
        if chapter.is_divider:
            return [heading]
        body = chapter.content if chapter.has_content else LOADING_TEXT
        return [heading, ""] + wrap_text(body, self.line_width)

    def _render(self) -> None:
        if isinstance(self.viewport, LineViewport):
            self.viewport.set_lines(self.current_lines())
