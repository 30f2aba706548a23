"""Service for detecting venue clashes between scheduled items."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import date, datetime, time

from dateutil import parser as date_parser

from campusops.domain.models import Conflict, ScheduledItem

DAY_START = time(0, 0)
DAY_END = time(23, 59)

_EARLY = datetime(2000, 1, 1, 0, 0)
_LATE = datetime(2000, 1, 1, 23, 59)


def _clock(raw: str | None, fallback: time) -> time:
    """Read a clock time such as ``"10:30"`` or ``"2:30 PM"``.

    Anything missing or unreadable becomes *fallback*, including strings
    dateutil reads as a date with no hour in them (``"17"``, ``"2024-03-05"``).
    """
    if not raw or not raw.strip():
        return fallback
    try:
        early = date_parser.parse(raw, default=_EARLY)
        late = date_parser.parse(raw, default=_LATE)
    except (ValueError, OverflowError):
        return fallback
    # No hour in the string: it was filled in from the default.
    if early.hour != late.hour:
        return fallback
    return early.time()


def item_interval(item: ScheduledItem) -> tuple[datetime, datetime]:
    """Return the ``[start, end)`` datetimes an item occupies its venue for."""
    start = datetime.combine(item.start_date, _clock(item.start_time, DAY_START))
    end_day = item.end_date or item.start_date
    end = datetime.combine(end_day, _clock(item.end_time, DAY_END))
    return start, end


def overlaps(a: tuple[datetime, datetime], b: tuple[datetime, datetime]) -> bool:
    """Half-open overlap: touching boundaries (end == start) are NOT conflicts."""
    return a[0] < b[1] and b[0] < a[1]


def detect_conflicts(items: Sequence[ScheduledItem]) -> list[Conflict]:
    """Return every pair of items booked into the same venue at overlapping times.

    Items are grouped by start date and only compared within a group, so a
    multi-day item is checked only against items starting on the same day.
    Each unordered pair appears once, ordered as in *items*. Inverted ranges
    are not rejected; they simply tend not to overlap anything.
    """
    by_day: dict[date, list[ScheduledItem]] = {}
    for item in items:
        by_day.setdefault(item.start_date, []).append(item)

    conflicts: list[Conflict] = []
    for day, day_items in by_day.items():
        intervals = [item_interval(item) for item in day_items]
        for i in range(len(day_items)):
            for j in range(i + 1, len(day_items)):
                first, second = day_items[i], day_items[j]
                if first.venue != second.venue:
                    continue
                if overlaps(intervals[i], intervals[j]):
                    conflicts.append(
                        Conflict(item_a=first, item_b=second, date=day, venue=first.venue)
                    )
    return conflicts
