"""Domain models for the campus event console."""

from __future__ import annotations

import uuid
from datetime import date, datetime, timezone
from enum import StrEnum

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    model_validator,
)
from pydantic.alias_generators import to_camel


class EventCategory(StrEnum):
    ACADEMIC = "Academic"
    CULTURAL = "Cultural"
    TECHNICAL = "Technical"
    SPORTS = "Sports"
    PLACEMENT = "Placement"
    WORKSHOP = "Workshop"
    SEMINAR = "Seminar"
    CONFERENCE = "Conference"
    HACKATHON = "Hackathon"
    COMPETITION = "Competition"
    GUEST_LECTURE = "Guest Lecture"
    OTHER = "Other"


class EventStatus(StrEnum):
    DRAFT = "draft"
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    ONGOING = "ongoing"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class TimelineEntryType(StrEnum):
    CREATED = "created"
    UPDATED = "updated"
    STATUS_CHANGED = "status_changed"
    CONFLICT_DETECTED = "conflict_detected"
    DELETED = "deleted"
    REGISTERED = "registered"
    WAITLISTED = "waitlisted"
    REGISTRATION_CANCELLED = "registration_cancelled"
    PROMOTED = "promoted"


class RegistrationStatus(StrEnum):
    REGISTERED = "registered"
    WAITLIST = "waitlist"


class DateRange(StrEnum):
    TODAY = "today"
    WEEK = "week"
    MONTH = "month"
    PAST = "past"
    UPCOMING = "upcoming"


class SortField(StrEnum):
    CREATED_AT = "created_at"
    START_DATE = "start_date"
    TITLE = "title"


class SortOrder(StrEnum):
    ASC = "asc"
    DESC = "desc"


_Date = date


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _new_id() -> str:
    return str(uuid.uuid4())


class CamelModel(BaseModel):
    """Accepts both snake_case and the stored documents' camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---------------------------------------------------------------------------
# Core domain models
# ---------------------------------------------------------------------------


class ScheduledItem(CamelModel):
    """Anything that occupies a venue for a span of time.

    Clock times are kept as raw strings: a missing or unreadable value falls
    back to the full-day bound when the item is checked for clashes.
    """

    id: str = Field(default_factory=_new_id)
    venue: str
    start_date: date
    end_date: date | None = None
    start_time: str | None = None
    end_time: str | None = None


class Registration(CamelModel):
    id: str = Field(default_factory=_new_id)
    participant_name: str
    email: str | None = None
    registered_at: datetime = Field(default_factory=_utcnow)
    status: RegistrationStatus = RegistrationStatus.REGISTERED
    promoted_at: datetime | None = None


class Event(ScheduledItem):
    title: str
    description: str = ""
    category: EventCategory = EventCategory.OTHER
    status: EventStatus = EventStatus.DRAFT
    organizer_name: str | None = None
    registrations: list[Registration] | None = None
    max_participants: int | None = None
    waitlist: list[Registration] | None = None
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime | None = None


class Conflict(CamelModel):
    """Two items booked into the same venue at overlapping times."""

    item_a: Event | ScheduledItem
    item_b: Event | ScheduledItem
    date: _Date
    venue: str

    @property
    def pair(self) -> frozenset[str]:
        return frozenset((self.item_a.id, self.item_b.id))


class TimelineEntry(CamelModel):
    id: str = Field(default_factory=_new_id)
    event_id: str
    timestamp: datetime = Field(default_factory=_utcnow)
    type: TimelineEntryType
    payload: dict = Field(default_factory=dict)


# ---------------------------------------------------------------------------
# Request / Response DTOs
# ---------------------------------------------------------------------------


class EventCreate(CamelModel):
    title: str = Field(min_length=1)
    venue: str = Field(min_length=1)
    start_date: date
    end_date: date | None = None
    start_time: str | None = None
    end_time: str | None = None
    description: str = ""
    category: EventCategory = EventCategory.OTHER
    status: EventStatus = EventStatus.PENDING
    organizer_name: str | None = None
    registrations: list[Registration] | None = None
    max_participants: int | None = Field(default=None, ge=1)

    @model_validator(mode="after")
    def _end_not_before_start(self) -> EventCreate:
        if self.end_date is not None and self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self


class EventUpdate(CamelModel):
    """Partial update; only the fields that are sent are applied."""

    title: str | None = Field(default=None, min_length=1)
    venue: str | None = Field(default=None, min_length=1)
    start_date: date | None = None
    end_date: date | None = None
    start_time: str | None = None
    end_time: str | None = None
    description: str | None = None
    category: EventCategory | None = None
    organizer_name: str | None = None
    registrations: list[Registration] | None = None
    # null lifts the cap
    max_participants: int | None = Field(default=None, ge=1)

    @model_validator(mode="after")
    def _required_fields_not_null(self) -> EventUpdate:
        for name in ("title", "venue", "start_date", "description", "category"):
            if name in self.model_fields_set and getattr(self, name) is None:
                raise ValueError(f"{name} cannot be null")
        return self


class StatusChangeRequest(CamelModel):
    status: EventStatus


class RegistrationRequest(CamelModel):
    participant_name: str = Field(min_length=1)
    email: str | None = None


class CancellationResult(CamelModel):
    """The registration that was removed and, if a seat opened, who got it."""

    cancelled: Registration
    promoted: Registration | None = None


class BulkDeleteRequest(CamelModel):
    ids: list[str] = Field(min_length=1)


class BulkDeleteResponse(CamelModel):
    deleted: list[str] = Field(default_factory=list)
    missing: list[str] = Field(default_factory=list)


class EventFilters(CamelModel):
    search: str | None = None
    category: EventCategory | None = None
    status: EventStatus | None = None
    date_range: DateRange | None = None
    venue: str | None = None
    organizer: str | None = None


class EventPage(CamelModel):
    items: list[Event]
    total: int
    page: int
    page_size: int
    total_pages: int


class CalendarView(CamelModel):
    year: int
    month: int
    events: list[Event]
    clashes: list[Conflict]


class EventStats(CamelModel):
    total_events: int = 0
    upcoming_events: int = 0
    ongoing_events: int = 0
    total_registrations: int = 0
    pending_approvals: int = 0


class DashboardView(CamelModel):
    stats: EventStats
    upcoming: list[Event]
    recent: list[Event]
