"""Import progress callbacks for monitoring and real-time reporting."""

import logging
from typing import Protocol, runtime_checkable

from config.exceptions import JobError
from models.job import ImportJob, SearchResult

logger = logging.getLogger(__name__)


@runtime_checkable
class ImportCallback(Protocol):
    """Protocol for import job callbacks.

    Implement this protocol to hook into the import polling lifecycle.
    """

    def on_progress(self, item: SearchResult, percent: int) -> None:
        """Called after every poll while the job is pending or running."""
        ...

    def on_success(self, item: SearchResult, job: ImportJob) -> None:
        """Called once when the job finishes successfully."""
        ...

    def on_error(self, item: SearchResult, error: JobError) -> None:
        """Called once when the job fails or cannot be tracked any longer."""
        ...


class LoggingCallback:
    """Lightweight callback that logs import progress to the standard logger."""

    def on_progress(self, item: SearchResult, percent: int) -> None:
        logger.debug("Import '%s': %d%%", item.title, percent)

    def on_success(self, item: SearchResult, job: ImportJob) -> None:
        logger.info("《%s》下載成功！(book_id=%s)", item.title, job.book_id or "?")

    def on_error(self, item: SearchResult, error: JobError) -> None:
        logger.error("%s (%s)", error.user_message, item.url)


class RichProgressCallback:
    """Callback that renders a Rich live progress bar per import in the terminal."""

    def __init__(self, console=None):
        """
        Args:
            console: Rich Console instance. Creates one if not provided.
        """
        self._console = console
        self._progress = None
        self._task_ids: dict[str, int] = {}

    def start(self):
        """Start the progress display. Call before starting imports."""
        from rich.console import Console
        from rich.progress import BarColumn, Progress, SpinnerColumn, TaskProgressColumn, TextColumn

        console = self._console or Console()
        self._progress = Progress(
            SpinnerColumn("dots"),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            TaskProgressColumn(),
            console=console,
        )
        self._progress.start()

    def stop(self):
        """Stop the progress display."""
        if self._progress:
            self._progress.stop()
            self._progress = None

    def _task_for(self, item: SearchResult) -> int:
        if item.url not in self._task_ids:
            self._task_ids[item.url] = self._progress.add_task(f"下載中 《{item.title}》", total=100)
        return self._task_ids[item.url]

    def on_progress(self, item: SearchResult, percent: int) -> None:
        if not self._progress:
            return
        self._progress.update(self._task_for(item), completed=percent)

    def on_success(self, item: SearchResult, job: ImportJob) -> None:
        if not self._progress:
            return
        self._progress.update(
            self._task_for(item),
            completed=100,
            description=f"[green]《{item.title}》下載成功！[/]",
        )

    def on_error(self, item: SearchResult, error: JobError) -> None:
        if not self._progress:
            return
        self._progress.update(
            self._task_for(item),
            description=f"[red]{error.user_message[:80]}[/]",
        )
