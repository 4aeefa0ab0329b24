"""Timestamp parsing for backend payloads."""

import re
from datetime import datetime
from typing import Optional

# Backend fractions run to nanoseconds; datetime takes exactly microseconds
_FRACTION_RE = re.compile(r"(?<=\d{2}:\d{2}:\d{2})\.(\d+)")


def _microseconds(match: re.Match) -> str:
    return "." + (match.group(1) + "000000")[:6]


def parse_timestamp(value) -> Optional[datetime]:
    """Parse an RFC 3339 timestamp string, returning None when absent or malformed."""
    if not value:
        return None
    if isinstance(value, datetime):
        return value
    text = _FRACTION_RE.sub(_microseconds, str(value).strip())
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        return None
