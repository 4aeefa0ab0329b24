"""Shared pytest fixtures for the novelreader test suite."""

import pytest
from unittest.mock import MagicMock, AsyncMock


# ---------------------------------------------------------------------------
# Settings fixture
# ---------------------------------------------------------------------------

@pytest.fixture
def settings(tmp_path):
    """Return a Settings instance with paths under tmp_path and short timers."""
    from config.settings import Settings
    return Settings(
        _env_file=None,
        preferences_path=tmp_path / "prefs" / "preferences.json",
        log_dir=tmp_path / "logs",
        progress_debounce_seconds=0.05,
        import_poll_interval_seconds=0.01,
        import_clear_delay_seconds=0.05,
        import_max_poll_failures=3,
    )


# ---------------------------------------------------------------------------
# Data builders
# ---------------------------------------------------------------------------

def make_summaries(count: int, dividers: tuple = (), book_id: str = "b1") -> list:
    """Build ``count`` chapter summaries; numbers listed in ``dividers`` are volume pages."""
    from models.chapter import ChapterSummary
    summaries = []
    volume, in_volume = 1, 0
    for number in range(1, count + 1):
        if number in dividers:
            if number != 1:
                volume += 1
            in_volume = 0
            summaries.append(ChapterSummary(
                id=f"c{number}", book_id=book_id, chapter_number=number,
                volume_number=volume, volume_chapter_number=0, title=f"第{volume}卷",
            ))
            continue
        in_volume += 1
        summaries.append(ChapterSummary(
            id=f"c{number}", book_id=book_id, chapter_number=number,
            volume_number=volume, volume_chapter_number=in_volume,
            title=f"第{number}章", word_count=1000,
        ))
    return summaries


def make_chapter(summary, text: str = None):
    """Return a loaded chapter for ``summary``."""
    from models.chapter import Chapter, Content, Divider
    if summary.is_divider:
        return Chapter(summary=summary, kind=Divider())
    return Chapter(summary=summary, kind=Content(text=text or f"{summary.title}的內容"))


class FakeViewport:
    """Viewport with settable metrics whose frames run only when flushed."""

    def __init__(self, client_height: float = 600, scroll_height: float = 5000):
        self.scroll_top = 0
        self.client_height = client_height
        self.scroll_height = scroll_height
        self.frames: dict[int, object] = {}
        self.scroll_calls: list[float] = []
        self._next_handle = 0

    def scroll_to(self, top: float) -> None:
        self.scroll_top = top
        self.scroll_calls.append(top)

    def request_frame(self, callback):
        self._next_handle += 1
        self.frames[self._next_handle] = callback
        return self._next_handle

    def cancel_frame(self, handle) -> None:
        self.frames.pop(handle, None)

    def run_frames(self) -> int:
        """Run every pending frame callback; return how many ran."""
        pending = list(self.frames.values())
        self.frames.clear()
        for callback in pending:
            callback()
        return len(pending)


@pytest.fixture
def viewport():
    return FakeViewport()


# ---------------------------------------------------------------------------
# API client mock
# ---------------------------------------------------------------------------

@pytest.fixture
def mock_api():
    """Return a MagicMock standing in for ReaderAPIClient.

    Serves a 25-chapter book "b1" with no saved progress. Chapter fetches
    return generated content for ``api.summaries``; progress saves echo the
    update back.
    """
    from models.progress import ReadingProgress

    summaries = make_summaries(25)

    async def get_chapter(book_id, number):
        return make_chapter(api.summaries[number - 1])

    async def update_progress(book_id, update):
        return ReadingProgress(book_id=book_id, **update.to_payload())

    api = MagicMock()
    api.summaries = summaries
    api.get_book_chapters = AsyncMock(return_value=summaries)
    api.get_progress = AsyncMock(return_value=ReadingProgress(book_id="b1"))
    api.get_book_content = AsyncMock(return_value=[])
    api.get_chapter = AsyncMock(side_effect=get_chapter)
    api.update_progress = AsyncMock(side_effect=update_progress)
    api.list_books = AsyncMock(return_value=[])
    api.get_book = AsyncMock()
    api.create_book = AsyncMock()
    api.delete_book = AsyncMock(return_value=None)
    api.search = AsyncMock(return_value=[])
    api.start_import = AsyncMock(return_value="job-1")
    api.get_import_status = AsyncMock()
    api.close = AsyncMock()
    api.total_calls = 0
    return api
