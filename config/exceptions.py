"""Custom exception hierarchy for the novel reader."""

from typing import Optional


class ReaderError(Exception):
    """Base exception for all reader errors."""

    def __init__(self, message: str, details: Optional[dict] = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)

    def __str__(self) -> str:
        if self.details:
            detail_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.message} ({detail_str})"
        return self.message


# ---- Transport / API Errors ----

class NetworkError(ReaderError):
    """Transport failure or timeout while talking to the backend."""


class ApiError(ReaderError):
    """Backend answered with a non-success envelope."""

    def __init__(self, message: str, path: str = "", status_code: Optional[int] = None):
        details = {}
        if path:
            details["path"] = path
        if status_code is not None:
            details["status"] = status_code
        super().__init__(message, details)
        self.path = path
        self.status_code = status_code


# ---- Search / Import Errors ----

GENERIC_FAILURE_MESSAGE = "未知錯誤"


class SearchError(ReaderError):
    """Remote search failed for a reason other than throttling."""

    def __init__(self, message: str):
        super().__init__(message)

    @property
    def user_message(self) -> str:
        return f"搜尋失敗：{self.message or GENERIC_FAILURE_MESSAGE}"


class RateLimitedError(SearchError):
    """Remote source refused the search because of throttling."""

    @property
    def user_message(self) -> str:
        return "搜尋過於頻繁，已超過網站限制，請稍後再試。"


class JobError(ReaderError):
    """Import job reached a terminal error state on the server."""

    def __init__(self, message: str = "", job_id: str = ""):
        super().__init__(message or GENERIC_FAILURE_MESSAGE, {"job_id": job_id} if job_id else None)
        self.job_id = job_id

    @property
    def user_message(self) -> str:
        return f"下載失敗：{self.message}"


# ---- Session Errors ----

class StaleFetchError(ReaderError):
    """A fetch resolved after the session that issued it was closed or replaced."""

    def __init__(self, book_id: str, chapter_index: Optional[int] = None):
        details = {"book_id": book_id}
        if chapter_index is not None:
            details["chapter_index"] = chapter_index
        super().__init__("Discarding result of superseded fetch", details)


# ---- Validation Errors ----

class ValidationError(ReaderError):
    """Input validation failed before submission."""


class InvalidConfigError(ValidationError):
    """Configuration value is invalid."""
