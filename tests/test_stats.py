"""Tests for dashboard statistics."""

from datetime import date, timedelta

from campusops.domain.models import Event, EventStatus, Registration
from campusops.services.stats import compute_stats

_TODAY = date(2026, 6, 15)


def _make_event(**overrides) -> Event:
    defaults = dict(title="Event", venue="Hall", start_date=_TODAY, status=EventStatus.APPROVED)
    defaults.update(overrides)
    return Event(**defaults)


def test_empty_list():
    stats = compute_stats([], _TODAY)

    assert stats.total_events == 0
    assert stats.total_registrations == 0


def test_counts():
    events = [
        _make_event(start_date=_TODAY + timedelta(days=2), status=EventStatus.PENDING),
        _make_event(
            start_date=_TODAY - timedelta(days=1),
            end_date=_TODAY + timedelta(days=1),
            registrations=[
                Registration(participant_name="Meera"),
                Registration(participant_name="Kabir"),
            ],
        ),
        _make_event(start_date=_TODAY, registrations=[Registration(participant_name="Zoya")]),
        _make_event(start_date=_TODAY - timedelta(days=10), status=EventStatus.PENDING),
    ]

    stats = compute_stats(events, _TODAY)

    assert stats.total_events == 4
    assert stats.upcoming_events == 1
    # Multi-day event spanning today, plus a single-day event on today.
    assert stats.ongoing_events == 2
    assert stats.total_registrations == 3
    assert stats.pending_approvals == 2


def test_missing_registrations_count_as_zero():
    stats = compute_stats([_make_event(registrations=None), _make_event(registrations=[])], _TODAY)

    assert stats.total_registrations == 0
