"""Remote search and background import tracking.

An import is keyed by the remote item's URL. Starting it submits the job
to the backend and polls its status until it succeeds or fails; only one
import per URL is tracked at a time. The job table is only touched in
await-free sections, so each read-modify-write on it is atomic on the loop.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Optional

from config.exceptions import (
    JobError,
    RateLimitedError,
    ReaderError,
    SearchError,
    ValidationError,
)
from config.settings import Settings
from crawler.callbacks import ImportCallback, LoggingCallback
from models.enums import JobStatus
from models.job import ImportJob, SearchResult
from tools.scheduler import TaskScheduler

logger = logging.getLogger(__name__)

# Throttling phrases the remote source puts in its error pages
RATE_LIMIT_SIGNALS = (
    "rate_limit",
    "搜索次数已耗尽",
    "搜索过于频繁",
    "搜索次數已耗盡",
    "搜索過於頻繁",
    "提供10次搜索机会",
    "提供10次搜索機會",
    "一分钟只提供10次搜索机会",
    "一分鐘只提供10次搜索機會",
    "為防止惡意搜索",
    "为防止恶意搜索",
    "為防止惡意搜尋",
    "为防止恶意搜尋",
    "429",
)


def is_rate_limited(message: str) -> bool:
    """True if a search failure message looks like remote throttling."""
    normalized = (message or "").lower()
    if "too many" in normalized:
        return True
    return any(signal.lower() in normalized for signal in RATE_LIMIT_SIGNALS)


@dataclass
class ImportState:
    """Local tracking entry for one remote item."""
    item: SearchResult
    job_id: Optional[str] = None
    status: JobStatus = JobStatus.PENDING
    progress: int = 0
    active: bool = True
    task: Optional[asyncio.Task] = None


class ImportTracker:
    """Runs remote searches and tracks import jobs to completion."""

    def __init__(
        self,
        api,
        scheduler: Optional[TaskScheduler] = None,
        settings: Optional[Settings] = None,
        callback: Optional[ImportCallback] = None,
    ):
        self.api = api
        self.settings = settings or Settings()
        self.scheduler = scheduler or TaskScheduler()
        self.callback = callback or LoggingCallback()
        self._jobs: dict[str, ImportState] = {}

    # ---- Search ----------------------------------------------------------

    async def search(self, query: str) -> list[SearchResult]:
        """Search the remote source.

        Raises:
            ValidationError: If the query is blank.
            RateLimitedError: If the remote source is throttling searches.
            SearchError: For any other failure.
        """
        query = query.strip()
        if not query:
            raise ValidationError("Search query is required")

        if self.settings.cancel_polls_on_search and self._jobs:
            logger.info("New search supersedes %d tracked import(s)", len(self._jobs))
            self.close()

        try:
            results = await self.api.search(query)
        except ReaderError as e:
            if is_rate_limited(e.message):
                logger.warning("Search for '%s' rate limited: %s", query, e.message)
                raise RateLimitedError(e.message) from e
            logger.error("Search for '%s' failed: %s", query, e.message)
            raise SearchError(e.message) from e

        logger.info("Search for '%s' returned %d result(s)", query, len(results))
        return results

    # ---- Import lifecycle --------------------------------------------------

    def is_active(self, url: str) -> bool:
        state = self._jobs.get(url)
        return state is not None and state.active

    def progress(self, url: str) -> Optional[int]:
        """Displayed progress for ``url``, or None when nothing is shown."""
        state = self._jobs.get(url)
        return state.progress if state else None

    def progress_display(self) -> dict[str, int]:
        return {url: state.progress for url, state in self._jobs.items()}

    def start_import(self, item: SearchResult, callback: Optional[ImportCallback] = None) -> Optional[asyncio.Task]:
        """Submit an import for ``item`` and poll it in the background.

        Returns the polling task, or None if ``item.url`` is already being imported.
        The task resolves to the terminal ImportJob, or None if tracking ended early.
        """
        key = item.url
        if self.is_active(key):
            logger.debug("Import for %s already active", key)
            return None

        self.scheduler.cancel(self._clear_key(key))
        state = ImportState(item=item)
        self._jobs[key] = state
        state.task = asyncio.get_running_loop().create_task(
            self._track(state, callback or self.callback),
            name=f"import:{key}",
        )
        return state.task

    def cancel(self, url: str) -> bool:
        """Stop tracking ``url`` locally. The server-side job is left alone."""
        self.scheduler.cancel(self._clear_key(url))
        state = self._jobs.pop(url, None)
        if state is None:
            return False
        if state.task is not None and not state.task.done():
            state.task.cancel()
        logger.info("Stopped tracking import for %s", url)
        return True

    def close(self) -> None:
        """Stop tracking every import (the owning view went away)."""
        for url in list(self._jobs):
            self.cancel(url)

    @staticmethod
    def _clear_key(url: str) -> str:
        return f"import:clear:{url}"

    def _owns(self, state: ImportState) -> bool:
        return self._jobs.get(state.item.url) is state

    async def _track(self, state: ImportState, callback: ImportCallback) -> Optional[ImportJob]:
        item = state.item
        try:
            state.job_id = await self.api.start_import(item)
        except ReaderError as e:
            logger.error("Could not start import of %s: %s", item.url, e)
            if self._owns(state):
                del self._jobs[item.url]
            callback.on_error(item, JobError(e.message))
            return None

        logger.info("Import of '%s' started as job %s", item.title, state.job_id)
        failures = 0
        while True:
            await asyncio.sleep(self.settings.import_poll_interval_seconds)
            if not self._owns(state):
                return None
            try:
                job = await self.api.get_import_status(state.job_id)
            except ReaderError as e:
                failures += 1
                logger.warning("Poll for job %s failed (%d): %s", state.job_id, failures, e)
                if failures >= self.settings.import_max_poll_failures:
                    if self._owns(state):
                        del self._jobs[item.url]
                    callback.on_error(item, JobError(f"Lost contact with import job: {e.message}", state.job_id))
                    return None
                continue
            failures = 0

            if not self._owns(state):
                return None

            if job.status == JobStatus.SUCCESS:
                self._finish_success(state, job)
                callback.on_success(item, job)
                return job
            if job.status == JobStatus.ERROR:
                del self._jobs[item.url]
                logger.error("Import job %s failed: %s", job.id, job.error)
                callback.on_error(item, JobError(job.error, job.id))
                return job

            state.status = job.status
            state.progress = job.percent
            callback.on_progress(item, state.progress)

    def _finish_success(self, state: ImportState, job: ImportJob) -> None:
        state.status = JobStatus.SUCCESS
        state.progress = 100
        state.active = False
        url = state.item.url

        def _clear_display():
            if self._owns(state):
                del self._jobs[url]

        self.scheduler.schedule(self._clear_key(url), self.settings.import_clear_delay_seconds, _clear_display)
        logger.info("Import job %s finished, book %s", job.id, job.book_id)
