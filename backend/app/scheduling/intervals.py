"""Interval helpers for times of day.

Two different rules live here. Slot-vs-slot conflicts use a
half-open overlap, so ``09:00-10:00`` and ``10:00-11:00`` can sit side by
side. Appointment times are matched against a slot with a closed range, so a
booking at exactly ``10:00`` fits a ``09:00-10:00`` slot.
"""

from __future__ import annotations

from datetime import time
from typing import Union

from app.scheduling.times import parse_time

TimeLike = Union[str, time]


def _as_time(value: TimeLike) -> time:
    return value if isinstance(value, time) else parse_time(value)


def overlaps(a_start: TimeLike, a_end: TimeLike, b_start: TimeLike, b_end: TimeLike) -> bool:
    return _as_time(a_start) < _as_time(b_end) and _as_time(b_start) < _as_time(a_end)


def contains(point: TimeLike, start: TimeLike, end: TimeLike) -> bool:
    return _as_time(start) <= _as_time(point) <= _as_time(end)
