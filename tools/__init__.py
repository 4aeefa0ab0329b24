"""Tools package — backend API client, response envelopes, and task scheduling."""

from tools.api_client import ReaderAPIClient
from tools.envelope import ApiResult, Failure, Success, parse_envelope
from tools.scheduler import TaskScheduler

__all__ = [
    "ReaderAPIClient",
    "ApiResult",
    "Failure",
    "Success",
    "parse_envelope",
    "TaskScheduler",
]
