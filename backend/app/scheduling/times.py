from __future__ import annotations

import re
from datetime import time
from typing import Optional

TIME_PATTERN = re.compile(r"([01]?[0-9]|2[0-3]):[0-5][0-9]")


def is_valid_time(value: Optional[str]) -> bool:
    """Return True for 24-hour ``H:MM`` / ``HH:MM`` values."""
    if not isinstance(value, str):
        return False
    return TIME_PATTERN.fullmatch(value) is not None


def parse_time(value: str) -> time:
    if not is_valid_time(value):
        raise ValueError(f"Invalid time value: {value!r}")
    hours, minutes = value.split(":")
    return time(hour=int(hours), minute=int(minutes))


def is_valid_range(start: Optional[str], end: Optional[str]) -> bool:
    if not (is_valid_time(start) and is_valid_time(end)):
        return False
    return parse_time(start) < parse_time(end)
