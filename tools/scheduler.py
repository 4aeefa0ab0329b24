"""Keyed one-shot timers on the running asyncio loop.

``schedule(key, delay, fn)`` replaces whatever is still waiting under the
same key, which gives debounce semantics for free. Once the delay has
elapsed the callback runs to completion; ``cancel`` only affects callbacks
that are still waiting.
"""

import asyncio
import inspect
import logging
from typing import Any, Callable, Optional

logger = logging.getLogger(__name__)


class TaskScheduler:
    """Cancel-and-replace timers keyed by name."""

    def __init__(self):
        self._pending: dict[str, asyncio.Task] = {}
        self._running: set[asyncio.Task] = set()

    def schedule(self, key: str, delay: float, fn: Callable[[], Any]) -> asyncio.Task:
        """Run ``fn`` after ``delay`` seconds, replacing any pending callback for ``key``."""
        self.cancel(key)
        loop = asyncio.get_running_loop()
        task = loop.create_task(self._run(key, delay, fn), name=f"scheduled:{key}")
        self._pending[key] = task
        self._running.add(task)
        task.add_done_callback(self._running.discard)
        return task

    async def _run(self, key: str, delay: float, fn: Callable[[], Any]) -> None:
        await asyncio.sleep(delay)
        if self._pending.get(key) is asyncio.current_task():
            del self._pending[key]
        try:
            result = fn()
            if inspect.isawaitable(result):
                await result
        except asyncio.CancelledError:
            raise
        except Exception:
            logger.exception("Scheduled callback '%s' failed", key)

    def cancel(self, key: str) -> bool:
        """Cancel a pending callback. Returns True if one was waiting."""
        task = self._pending.pop(key, None)
        if task is None or task.done():
            return False
        task.cancel()
        return True

    def cancel_all(self) -> None:
        """Cancel every pending callback (teardown)."""
        for key in list(self._pending):
            self.cancel(key)

    def is_pending(self, key: str) -> bool:
        task = self._pending.get(key)
        return task is not None and not task.done()

    async def wait_idle(self, timeout: Optional[float] = None) -> None:
        """Wait until every scheduled callback has finished or been cancelled."""
        tasks = list(self._running)
        if tasks:
            await asyncio.wait(tasks, timeout=timeout)
