"""Dashboard aggregates over the event list."""

from __future__ import annotations

from datetime import date

from campusops.domain.models import Event, EventStats, EventStatus


def is_upcoming(event: Event, today: date) -> bool:
    return event.start_date > today


def is_ongoing(event: Event, today: date) -> bool:
    return event.start_date <= today <= (event.end_date or event.start_date)


def compute_stats(events: list[Event], today: date | None = None) -> EventStats:
    today = today or date.today()
    return EventStats(
        total_events=len(events),
        upcoming_events=sum(1 for e in events if is_upcoming(e, today)),
        ongoing_events=sum(1 for e in events if is_ongoing(e, today)),
        total_registrations=sum(len(e.registrations or []) for e in events),
        pending_approvals=sum(1 for e in events if e.status == EventStatus.PENDING),
    )
