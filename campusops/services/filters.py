"""Filtering, sorting and paging of event lists."""

from __future__ import annotations

import math
from datetime import date, timedelta

from dateutil.relativedelta import relativedelta

from campusops.domain.models import (
    DateRange,
    Event,
    EventFilters,
    EventPage,
    SortField,
    SortOrder,
)


def month_window(year: int, month: int) -> tuple[date, date]:
    """First and last day of the given month."""
    first = date(year, month, 1)
    return first, first + relativedelta(day=31)


def _contains(haystack: str | None, needle: str) -> bool:
    return bool(haystack) and needle in haystack.lower()


def _matches_search(event: Event, term: str) -> bool:
    term = term.lower()
    return any(
        _contains(value, term)
        for value in (
            event.title,
            event.description,
            event.venue,
            event.organizer_name,
            event.category,
        )
    )


def _in_date_range(event: Event, date_range: DateRange, today: date) -> bool:
    start = event.start_date
    if date_range == DateRange.TODAY:
        return start == today
    if date_range == DateRange.WEEK:
        return today <= start <= today + timedelta(days=7)
    if date_range == DateRange.MONTH:
        return today <= start <= today + timedelta(days=30)
    if date_range == DateRange.PAST:
        return start < today
    if date_range == DateRange.UPCOMING:
        return start > today
    return True


def apply_filters(
    events: list[Event],
    filters: EventFilters,
    today: date | None = None,
) -> list[Event]:
    """Return the events matching every filter that is set."""
    today = today or date.today()
    result = list(events)

    if filters.search:
        result = [e for e in result if _matches_search(e, filters.search)]
    if filters.category:
        result = [e for e in result if e.category == filters.category]
    if filters.status:
        result = [e for e in result if e.status == filters.status]
    if filters.date_range:
        result = [e for e in result if _in_date_range(e, filters.date_range, today)]
    if filters.venue:
        venue = filters.venue.lower()
        result = [e for e in result if _contains(e.venue, venue)]
    if filters.organizer:
        organizer = filters.organizer.lower()
        result = [e for e in result if _contains(e.organizer_name, organizer)]

    return result


def in_month(events: list[Event], year: int, month: int) -> list[Event]:
    """Events whose start date falls within the given month."""
    first, last = month_window(year, month)
    return [e for e in events if first <= e.start_date <= last]


_SORT_KEYS = {
    SortField.CREATED_AT: lambda e: e.created_at,
    SortField.START_DATE: lambda e: e.start_date,
    SortField.TITLE: lambda e: e.title.lower(),
}


def sort_events(
    events: list[Event],
    sort_by: SortField = SortField.CREATED_AT,
    order: SortOrder = SortOrder.DESC,
) -> list[Event]:
    return sorted(events, key=_SORT_KEYS[sort_by], reverse=order == SortOrder.DESC)


def paginate(events: list[Event], page: int, page_size: int) -> EventPage:
    """Slice out a 1-based page. Pages past the end come back empty."""
    total = len(events)
    offset = (page - 1) * page_size
    return EventPage(
        items=events[offset : offset + page_size],
        total=total,
        page=page,
        page_size=page_size,
        total_pages=math.ceil(total / page_size) if total else 0,
    )
