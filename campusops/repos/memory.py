"""In-memory repositories for events, timelines and the clash snapshot."""

from __future__ import annotations

import logging
from datetime import date, datetime, timedelta, timezone
from typing import Any, Generic, TypeVar

from pydantic import BaseModel

from campusops.core.exceptions import ResourceNotFoundError
from campusops.domain.models import (
    Conflict,
    Event,
    EventCategory,
    EventStatus,
    Registration,
    TimelineEntry,
)

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


class CollectionRepository(Generic[ModelT]):
    """Dict-backed store for one named collection of documents, keyed by id.

    ``get`` returns ``None`` for unknown ids; ``update`` and ``delete`` raise
    :class:`ResourceNotFoundError` instead.
    """

    def __init__(self, collection: str) -> None:
        self.collection = collection
        self._store: dict[str, ModelT] = {}

    def get(self, doc_id: str) -> ModelT | None:
        return self._store.get(doc_id)

    def list_all(self) -> list[ModelT]:
        return list(self._store.values())

    def create(self, doc: ModelT) -> ModelT:
        self._store[doc.id] = doc
        logger.info("Created %s/%s", self.collection, doc.id)
        return doc

    def update(self, doc_id: str, changes: dict[str, Any]) -> ModelT:
        current = self._store.get(doc_id)
        if current is None:
            raise ResourceNotFoundError(self.collection, doc_id)
        updated = current.model_copy(update=changes)
        self._store[doc_id] = updated
        logger.info("Updated %s/%s fields=%s", self.collection, doc_id, sorted(changes))
        return updated

    def delete(self, doc_id: str) -> ModelT:
        removed = self._store.pop(doc_id, None)
        if removed is None:
            raise ResourceNotFoundError(self.collection, doc_id)
        logger.info("Deleted %s/%s", self.collection, doc_id)
        return removed

    def clear(self) -> None:
        self._store.clear()


class EventRepository(CollectionRepository[Event]):
    def __init__(self) -> None:
        super().__init__("events")

    def list_recent(self, limit: int) -> list[Event]:
        """Newest first by creation time."""
        return sorted(self._store.values(), key=lambda e: e.created_at, reverse=True)[:limit]


class TimelineRepository:
    """List-backed store for TimelineEntry instances."""

    def __init__(self) -> None:
        self._entries: list[TimelineEntry] = []

    def add(self, entry: TimelineEntry) -> None:
        self._entries.append(entry)

    def list_for_event(self, event_id: str) -> list[TimelineEntry]:
        return sorted(
            [e for e in self._entries if e.event_id == event_id],
            key=lambda e: e.timestamp,
        )

    def clear(self) -> None:
        self._entries.clear()


class ConflictRepository:
    """Holds the clash set from the most recent detection pass."""

    def __init__(self) -> None:
        self._conflicts: list[Conflict] = []

    def replace(self, conflicts: list[Conflict]) -> list[Conflict]:
        """Store a new snapshot and return the conflicts it did not have before."""
        known = {c.pair for c in self._conflicts}
        self._conflicts = list(conflicts)
        return [c for c in conflicts if c.pair not in known]

    def list_all(self) -> list[Conflict]:
        return list(self._conflicts)

    def list_for_event(self, event_id: str) -> list[Conflict]:
        return [c for c in self._conflicts if event_id in c.pair]

    def clear(self) -> None:
        self._conflicts.clear()


# ---------------------------------------------------------------------------
# Seed data: a handful of campus events, two of which clash in the main hall
# ---------------------------------------------------------------------------


def _seed_events(repo: EventRepository) -> None:
    today = date.today()
    now = datetime.now(timezone.utc)

    repo.create(
        Event(
            title="AI Research Symposium",
            venue="Main Auditorium",
            start_date=today + timedelta(days=3),
            end_date=today + timedelta(days=3),
            start_time="10:00",
            end_time="13:00",
            category=EventCategory.CONFERENCE,
            status=EventStatus.APPROVED,
            organizer_name="Dept. of Computer Science",
            registrations=[Registration(participant_name="Asha Rao")],
            max_participants=120,
            created_at=now - timedelta(days=2),
        )
    )
    repo.create(
        Event(
            title="Alumni Talk: Careers in Finance",
            venue="Main Auditorium",
            start_date=today + timedelta(days=3),
            end_date=today + timedelta(days=3),
            start_time="12:00",
            end_time="14:00",
            category=EventCategory.GUEST_LECTURE,
            status=EventStatus.PENDING,
            organizer_name="Placement Cell",
            created_at=now - timedelta(days=1),
        )
    )
    repo.create(
        Event(
            title="Inter-College Football Cup",
            venue="Sports Ground",
            start_date=today + timedelta(days=10),
            end_date=today + timedelta(days=12),
            category=EventCategory.SPORTS,
            status=EventStatus.APPROVED,
            organizer_name="Sports Committee",
            created_at=now,
        )
    )


def create_event_repository() -> EventRepository:
    """Return an EventRepository pre-loaded with sample data."""
    repo = EventRepository()
    _seed_events(repo)
    return repo
