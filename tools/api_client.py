"""Async HTTP client for the reader backend REST API."""

import logging
from typing import Any, Optional

import httpx

from config.exceptions import ApiError, NetworkError
from config.settings import Settings
from models.book import Book, CreateBookRequest
from models.chapter import Chapter, ChapterSummary
from models.job import ImportJob, SearchResult
from models.progress import ProgressUpdate, ReadingProgress
from tools.envelope import Failure, parse_envelope

logger = logging.getLogger(__name__)


class ReaderAPIClient:
    """Thin typed wrapper over the backend endpoints.

    Every call is bounded by the configured timeout. Transport failures
    raise NetworkError; a non-success envelope raises ApiError carrying the
    backend's message.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.settings = settings or Settings()
        self._client = httpx.AsyncClient(
            base_url=self.settings.api_base_url,
            timeout=httpx.Timeout(self.settings.request_timeout_seconds),
            headers={"Content-Type": "application/json"},
            transport=transport,
        )
        self.total_calls = 0

    async def close(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "ReaderAPIClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    # ---- Low-level HTTP helpers ----------------------------------------

    async def _request(
        self,
        method: str,
        path: str,
        json: Optional[dict] = None,
        params: Optional[dict] = None,
    ) -> Any:
        """Send a request and return the unwrapped ``data`` payload."""
        self.total_calls += 1
        try:
            response = await self._client.request(method, path, json=json, params=params)
        except httpx.TimeoutException as e:
            raise NetworkError(f"{method} {path} timed out", {"path": path}) from e
        except httpx.TransportError as e:
            raise NetworkError(f"{method} {path} failed: {e}", {"path": path}) from e

        logger.debug("%s %s → HTTP %d", method, path, response.status_code)

        try:
            body = response.json()
        except ValueError as e:
            raise ApiError(
                f"HTTP {response.status_code}: non-JSON response",
                path=path,
                status_code=response.status_code,
            ) from e

        result = parse_envelope(body)
        if isinstance(result, Failure):
            logger.debug("%s %s failed: %s", method, path, result.message)
            raise ApiError(result.message, path=path, status_code=response.status_code)
        return result.data

    async def _get(self, path: str, params: Optional[dict] = None) -> Any:
        return await self._request("GET", path, params=params)

    # ---- Books ----------------------------------------------------------

    async def list_books(self) -> list[Book]:
        data = await self._get("/books")
        return [Book.from_api(item) for item in data or []]

    async def get_book(self, book_id: str) -> Book:
        data = await self._get(f"/books/{book_id}")
        return Book.from_api(data or {})

    async def create_book(self, request: CreateBookRequest) -> Book:
        data = await self._request("POST", "/books", json=request.to_payload())
        return Book.from_api(data or {})

    async def delete_book(self, book_id: str) -> None:
        await self._request("DELETE", f"/books/{book_id}")

    # ---- Chapters -------------------------------------------------------

    async def get_book_content(self, book_id: str) -> list[Chapter]:
        """Every chapter with content; used for books without per-chapter summaries."""
        data = await self._get(f"/books/{book_id}/content")
        return [Chapter.from_api(item) for item in data or []]

    async def get_book_chapters(self, book_id: str) -> list[ChapterSummary]:
        data = await self._get(f"/books/{book_id}/chapters")
        return [ChapterSummary.from_api(item) for item in data or []]

    async def get_chapter(self, book_id: str, chapter_number: int) -> Chapter:
        data = await self._get(f"/books/{book_id}/chapters/{chapter_number}")
        return Chapter.from_api(data or {})

    # ---- Progress -------------------------------------------------------

    async def get_progress(self, book_id: str) -> ReadingProgress:
        data = await self._get(f"/progress/{book_id}")
        return ReadingProgress.from_api(data or {"book_id": book_id})

    async def update_progress(self, book_id: str, update: ProgressUpdate) -> ReadingProgress:
        data = await self._request("PUT", f"/progress/{book_id}", json=update.to_payload())
        return ReadingProgress.from_api(data or {"book_id": book_id, **update.to_payload()})

    # ---- Crawler --------------------------------------------------------

    async def search(self, query: str) -> list[SearchResult]:
        data = await self._request("POST", "/crawler/search", json={"query": query})
        return [SearchResult.from_api(item) for item in data or []]

    async def start_import(self, item: SearchResult) -> str:
        data = await self._request("POST", "/crawler/import/start", json=item.to_payload())
        job_id = (data or {}).get("job_id")
        if not job_id:
            raise ApiError("Import start returned no job id", path="/crawler/import/start")
        return str(job_id)

    async def get_import_status(self, job_id: str) -> ImportJob:
        data = await self._get("/crawler/import/status", params={"id": job_id})
        try:
            return ImportJob.from_api(data or {"id": job_id})
        except (TypeError, ValueError) as e:
            raise ApiError(f"Malformed import status: {e}", path="/crawler/import/status") from e

    def get_usage_summary(self) -> dict:
        """Return call count statistics."""
        return {"total_calls": self.total_calls}
