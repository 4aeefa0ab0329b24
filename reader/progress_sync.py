"""Turns scroll and navigation signals into durable reading progress.

Two signals drive it: the reader scrolled, or the current chapter changed.
Each signal captures a progress snapshot and (re)starts a quiet window;
only the last snapshot of a burst is written to the backend. On entering
the persisted chapter, the saved scroll offset is restored once per visit.
"""

import logging
import math
from typing import Any, Optional

from config.exceptions import ReaderError
from config.settings import Settings
from models.progress import ProgressUpdate
from reader.session import ReadingSession
from reader.toc import display_position
from reader.viewport import Viewport
from tools.scheduler import TaskScheduler

logger = logging.getLogger(__name__)

SAVE_KEY = "progress:save"


def _clamp_percent(value: float) -> float:
    return min(100.0, max(0.0, value))


def scroll_percent(offset: float, viewport_height: float, total_height: float) -> float:
    """Share of the chapter seen so far, or NaN when layout metrics are missing."""
    if not total_height:
        return math.nan
    percent = (offset + viewport_height) / total_height * 100
    if not math.isfinite(percent):
        return math.nan
    return _clamp_percent(percent)


def fallback_percent(display_index: int, display_total: int) -> float:
    """Share of the book by chapter position, used until layout settles."""
    total = display_total or 1
    return _clamp_percent((display_index + 1) / total * 100)


def compute_percent(
    offset: float,
    viewport_height: float,
    total_height: float,
    display_index: int,
    display_total: int,
) -> float:
    """Progress percentage in [0, 100].

    The scroll-based value wins unless it is zero or not finite, e.g.
    right after a chapter switch before anything has been laid out.
    """
    percent = scroll_percent(offset, viewport_height, total_height)
    if math.isfinite(percent) and percent > 0:
        return percent
    return fallback_percent(display_index, display_total)


class ProgressSynchronizer:
    """Debounced progress persistence and once-per-visit position restore."""

    def __init__(
        self,
        session: ReadingSession,
        api,
        viewport: Viewport,
        scheduler: Optional[TaskScheduler] = None,
        settings: Optional[Settings] = None,
    ):
        self.session = session
        self.api = api
        self.viewport = viewport
        self.settings = settings or session.settings
        self.scheduler = scheduler or TaskScheduler()
        self._restored: set[int] = set()
        self._frame: Any = None
        self._pending: Optional[tuple[str, ProgressUpdate]] = None

        session.add_listener(self.on_chapter_changed)
        session.cache.add_listener(self._on_content_loaded)

    def detach(self) -> None:
        """Stop observing the session and drop any pending save or restore."""
        self.discard_pending()
        self.session.remove_listener(self.on_chapter_changed)
        self.session.cache.remove_listener(self._on_content_loaded)

    def discard_pending(self) -> None:
        """Forget the unsaved snapshot and any scheduled restore."""
        self.scheduler.cancel(SAVE_KEY)
        self._pending = None
        self._cancel_frame()

    # ---- Signals ---------------------------------------------------------

    def on_scroll(self) -> None:
        self.schedule_save()

    def on_chapter_changed(self, previous: Optional[int], current: int) -> None:
        """Entering a chapter starts a new visit: top of page, fresh restore attempt."""
        if previous is None:
            self._restored.clear()
        self._cancel_frame()
        self.viewport.scroll_to(0)
        self._restored.discard(current)
        # The view may still hold the previous chapter's layout
        self.schedule_save(settled=False)
        self.maybe_restore()

    def on_content_rendered(self) -> None:
        """The view re-rendered the current chapter."""
        self.maybe_restore()

    def _on_content_loaded(self, index: int) -> None:
        if index == self.session.current_index:
            self.maybe_restore()

    # ---- Restore ---------------------------------------------------------

    def restore_pending(self) -> bool:
        """True while the current chapter still owes the reader a position restore."""
        progress = self.session.progress
        chapter = self.session.current_chapter
        index = self.session.current_index
        return (
            progress is not None
            and chapter is not None
            and not chapter.is_divider
            and progress.current_chapter == index
            and progress.current_position > 0
            and index not in self._restored
        )

    def maybe_restore(self) -> None:
        """Schedule a scroll to the saved offset once the chapter is laid out."""
        if not self.session.is_active or not self.restore_pending():
            return
        if not self.session.current_chapter.has_content:
            return
        index = self.session.current_index
        position = self.session.progress.current_position
        self._cancel_frame()
        self._frame = self.viewport.request_frame(lambda: self._restore(index, position))

    def _restore(self, index: int, position: int) -> None:
        self._frame = None
        if self.session.current_index != index or index in self._restored:
            return
        max_scroll = max(0, self.viewport.scroll_height - self.viewport.client_height)
        target = min(position, max_scroll)
        self.viewport.scroll_to(target)
        self._restored.add(index)
        logger.debug("Restored chapter %d to offset %s", index, target)
        # A programmatic scroll is still a scroll
        self.schedule_save()

    def _cancel_frame(self) -> None:
        if self._frame is not None:
            self.viewport.cancel_frame(self._frame)
            self._frame = None

    def was_restored(self, index: int) -> bool:
        return index in self._restored

    # ---- Save ------------------------------------------------------------

    def capture(self, settled: bool = True) -> ProgressUpdate:
        """Snapshot the current chapter index, scroll offset and percentage.

        With ``settled=False`` the layout metrics are ignored and the
        percentage comes from the chapter position alone.
        """
        index = self.session.current_index
        display_index, display_total = display_position(self.session.chapters, index)
        offset = self.viewport.scroll_top or 0
        if settled:
            percent = compute_percent(
                offset,
                self.viewport.client_height,
                self.viewport.scroll_height,
                display_index,
                display_total,
            )
        else:
            percent = fallback_percent(display_index, display_total)
        return ProgressUpdate(
            current_chapter=index,
            current_position=max(0, int(offset)),
            progress_percentage=percent,
        )

    def schedule_save(self, settled: bool = True) -> None:
        """(Re)start the quiet window with a fresh snapshot."""
        self.scheduler.cancel(SAVE_KEY)
        self._pending = None
        chapter = self.session.current_chapter
        if not self.session.is_active or chapter is None or chapter.is_divider:
            return
        if self.restore_pending():
            # Saving now would overwrite the offset we are about to restore
            return
        self._pending = (self.session.book_id, self.capture(settled))
        self.scheduler.schedule(SAVE_KEY, self.settings.progress_debounce_seconds, self._save_pending)

    async def flush(self) -> None:
        """Write the pending snapshot immediately instead of waiting out the window."""
        if self._pending is None:
            return
        self.scheduler.cancel(SAVE_KEY)
        await self._save_pending()

    async def _save_pending(self) -> None:
        if self._pending is None:
            return
        book_id, update = self._pending
        self._pending = None
        if self.session.book_id != book_id:
            return

        try:
            saved = await self.api.update_progress(book_id, update)
        except ReaderError as e:
            logger.warning("Failed to save progress for book %s: %s", book_id, e)
            return

        if self.session.book_id != book_id:
            return
        self.session.update_progress(saved)
        # The reader is already at the offset just saved
        if saved.current_chapter == self.session.current_index:
            self._restored.add(saved.current_chapter)
        logger.debug(
            "Saved progress for book %s: chapter %d offset %d (%.1f%%)",
            book_id, update.current_chapter, update.current_position, update.progress_percentage,
        )
