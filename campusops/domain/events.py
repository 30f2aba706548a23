"""Domain events emitted when the event collection changes."""

from __future__ import annotations

import datetime

from pydantic import BaseModel

from campusops.domain.models import EventStatus


class DomainEvent(BaseModel):
    """Base for everything carried on the bus; every event names its subject."""

    event_id: str


class EventCreated(DomainEvent):
    """Fired when a new Event is persisted."""


class EventUpdated(DomainEvent):
    """Fired after an edit to an event's fields."""

    fields: list[str]


class EventStatusChanged(DomainEvent):
    old_status: EventStatus
    new_status: EventStatus


class EventDeleted(DomainEvent):
    title: str


class ParticipantRegistered(DomainEvent):
    """Fired when someone signs up, whether they got a seat or a waitlist spot."""

    registration_id: str
    participant_name: str
    waitlisted: bool


class RegistrationCancelled(DomainEvent):
    registration_id: str
    promoted_id: str | None = None


class ConflictDetected(DomainEvent):
    """Fired once per venue clash that was not present in the previous snapshot.

    ``event_id`` is the first item of the pair; ``other_event_id`` the second.
    """

    other_event_id: str
    venue: str
    date: datetime.date

    @property
    def event_ids(self) -> tuple[str, str]:
        return self.event_id, self.other_event_id
