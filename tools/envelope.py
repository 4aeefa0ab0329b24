"""Strict result type for the backend response envelope.

Every backend response is wrapped as ``{"success": bool, "data": ..., "error": str}``.
Instead of inspecting the boolean at each call site, the envelope is parsed
once into either a Success carrying the payload or a Failure carrying the
message.
"""

from dataclasses import dataclass
from typing import Any, Union

UNKNOWN_ERROR = "Unknown error"


@dataclass(frozen=True)
class Success:
    data: Any = None


@dataclass(frozen=True)
class Failure:
    message: str = UNKNOWN_ERROR


ApiResult = Union[Success, Failure]


def parse_envelope(body: Any) -> ApiResult:
    """Classify a decoded response body."""
    if not isinstance(body, dict):
        return Failure("Malformed response envelope")
    if body.get("success") is True:
        return Success(body.get("data"))
    return Failure(body.get("error") or body.get("message") or UNKNOWN_ERROR)
