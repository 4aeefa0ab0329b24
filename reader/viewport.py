"""Scrollable viewport abstraction the progress synchronizer reads and drives."""

import asyncio
from typing import Any, Callable, Optional, Protocol, runtime_checkable

from rich.cells import cell_len


@runtime_checkable
class Viewport(Protocol):
    """The scroll container showing the current chapter.

    ``request_frame`` defers a callback until the next rendering cycle,
    after the current content has been laid out.
    """

    scroll_top: float
    client_height: float
    scroll_height: float

    def scroll_to(self, top: float) -> None:
        ...

    def request_frame(self, callback: Callable[[], None]) -> Any:
        ...

    def cancel_frame(self, handle: Any) -> None:
        ...


class LineViewport:
    """Viewport over wrapped text lines, one line per scroll unit.

    Used by the terminal pager; frames are run on the next loop iteration.
    """

    def __init__(self, page_height: int = 30):
        self.page_height = max(1, page_height)
        self.lines: list[str] = []
        self.scroll_top = 0

    @property
    def client_height(self) -> int:
        return self.page_height

    @property
    def scroll_height(self) -> int:
        return len(self.lines)

    @property
    def max_scroll(self) -> int:
        return max(0, self.scroll_height - self.client_height)

    def set_lines(self, lines: list[str]) -> None:
        self.lines = list(lines)
        self.scroll_top = min(self.scroll_top, self.max_scroll)

    def scroll_to(self, top: float) -> None:
        self.scroll_top = int(min(max(top, 0), self.max_scroll))

    def scroll_by(self, delta: int) -> bool:
        """Scroll by ``delta`` lines. Returns False if already at that edge."""
        before = self.scroll_top
        self.scroll_to(self.scroll_top + delta)
        return self.scroll_top != before

    def visible_lines(self) -> list[str]:
        return self.lines[self.scroll_top:self.scroll_top + self.page_height]

    def request_frame(self, callback: Callable[[], None]) -> Optional[asyncio.Handle]:
        return asyncio.get_running_loop().call_soon(callback)

    def cancel_frame(self, handle: Optional[asyncio.Handle]) -> None:
        if handle is not None:
            handle.cancel()


def wrap_text(text: str, width: int) -> list[str]:
    """Hard-wrap ``text`` to ``width`` terminal cells, keeping paragraph breaks.

    CJK prose has no spaces to break on, so lines are cut at any character.
    """
    width = max(2, width)
    lines: list[str] = []
    for paragraph in text.splitlines():
        paragraph = paragraph.rstrip()
        if not paragraph:
            lines.append("")
            continue
        current, used = [], 0
        for char in paragraph:
            size = cell_len(char)
            if used + size > width and current:
                lines.append("".join(current))
                current, used = [], 0
            current.append(char)
            used += size
        lines.append("".join(current))
    return lines
