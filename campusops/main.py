"""FastAPI application: entry point for the campus event console."""

from __future__ import annotations

import logging
from datetime import date, datetime, timezone

from fastapi import Depends, FastAPI, Query, Request
from fastapi.responses import JSONResponse

from campusops.core.config import get_settings
from campusops.core.exceptions import AppError, ResourceNotFoundError
from campusops.domain.bus import EventBus
from campusops.domain.events import (
    EventCreated,
    EventDeleted,
    EventStatusChanged,
    EventUpdated,
    ParticipantRegistered,
    RegistrationCancelled,
)
from campusops.domain.handlers import HandlerRegistry
from campusops.domain.models import (
    BulkDeleteRequest,
    BulkDeleteResponse,
    CalendarView,
    CancellationResult,
    Conflict,
    DashboardView,
    DateRange,
    Event,
    EventCategory,
    EventCreate,
    EventFilters,
    EventPage,
    EventStatus,
    EventUpdate,
    Registration,
    RegistrationRequest,
    RegistrationStatus,
    ScheduledItem,
    SortField,
    SortOrder,
    StatusChangeRequest,
    TimelineEntry,
)
from campusops.repos.memory import (
    ConflictRepository,
    EventRepository,
    TimelineRepository,
    create_event_repository,
)
from campusops.services.conflicts import detect_conflicts
from campusops.services.filters import apply_filters, in_month, paginate, sort_events
from campusops.services.registrations import add_registration, remove_registration
from campusops.services.stats import compute_stats, is_upcoming

settings = get_settings()
logging.getLogger("campusops").setLevel(settings.log_level.upper())

app = FastAPI(title=settings.project_name)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": exc.message, "details": exc.details},
    )


# ── Singletons (created at import time for simplicity) ────────────────
event_bus = EventBus()
event_repo = create_event_repository() if settings.seed_demo_data else EventRepository()
timeline_repo = TimelineRepository()
conflict_repo = ConflictRepository()

handler_registry = HandlerRegistry(
    bus=event_bus,
    event_repo=event_repo,
    timeline_repo=timeline_repo,
    conflict_repo=conflict_repo,
)
handler_registry.refresh_conflicts()


def _get_event_or_404(event_id: str) -> Event:
    event = event_repo.get(event_id)
    if event is None:
        raise ResourceNotFoundError("events", event_id)
    return event


def _filters(
    search: str | None = None,
    category: EventCategory | None = None,
    status: EventStatus | None = None,
    date_range: DateRange | None = None,
    venue: str | None = None,
    organizer: str | None = None,
) -> EventFilters:
    return EventFilters(
        search=search,
        category=category,
        status=status,
        date_range=date_range,
        venue=venue,
        organizer=organizer,
    )


# ── Routes ────────────────────────────────────────────────────────────


@app.post("/events", response_model=Event, status_code=201)
def create_event(payload: EventCreate) -> Event:
    """Create an event. Clashes it causes show up in /conflicts."""
    event = Event(**{name: getattr(payload, name) for name in EventCreate.model_fields})
    event_repo.create(event)
    event_bus.publish(EventCreated(event_id=event.id))
    return event


@app.get("/events", response_model=EventPage)
def list_events(
    filters: EventFilters = Depends(_filters),
    sort_by: SortField = SortField.CREATED_AT,
    sort_order: SortOrder = SortOrder.DESC,
    page: int = Query(1, ge=1),
    page_size: int | None = Query(None, ge=1),
) -> EventPage:
    """Return one page of events matching the filters."""
    size = min(page_size or settings.default_page_size, settings.max_page_size)
    matching = apply_filters(event_repo.list_all(), filters)
    return paginate(sort_events(matching, sort_by, sort_order), page, size)


@app.post("/events/bulk-delete", response_model=BulkDeleteResponse)
def bulk_delete_events(body: BulkDeleteRequest) -> BulkDeleteResponse:
    result = BulkDeleteResponse()
    for event_id in dict.fromkeys(body.ids):
        try:
            removed = event_repo.delete(event_id)
        except ResourceNotFoundError:
            result.missing.append(event_id)
            continue
        event_bus.publish(EventDeleted(event_id=event_id, title=removed.title))
        result.deleted.append(event_id)
    return result


@app.get("/events/{event_id}", response_model=Event)
def get_event(event_id: str) -> Event:
    return _get_event_or_404(event_id)


@app.patch("/events/{event_id}", response_model=Event)
def update_event(event_id: str, payload: EventUpdate) -> Event:
    """Apply a partial edit; only the fields present in the body change."""
    current = _get_event_or_404(event_id)
    if not payload.model_fields_set:
        return current
    changes = {name: getattr(payload, name) for name in payload.model_fields_set}
    end_date = changes.get("end_date", current.end_date)
    start_date = changes.get("start_date", current.start_date)
    if end_date is not None and end_date < start_date:
        raise AppError("end_date must not be before start_date", status_code=422)
    changes["updated_at"] = datetime.now(timezone.utc)
    updated = event_repo.update(event_id, changes)
    event_bus.publish(EventUpdated(event_id=event_id, fields=sorted(payload.model_fields_set)))
    return updated


@app.patch("/events/{event_id}/status", response_model=Event)
def change_event_status(event_id: str, body: StatusChangeRequest) -> Event:
    current = _get_event_or_404(event_id)
    if current.status == body.status:
        return current
    updated = event_repo.update(
        event_id, {"status": body.status, "updated_at": datetime.now(timezone.utc)}
    )
    event_bus.publish(
        EventStatusChanged(
            event_id=event_id, old_status=current.status, new_status=body.status
        )
    )
    return updated


@app.delete("/events/{event_id}")
def delete_event(event_id: str) -> dict:
    removed = event_repo.delete(event_id)
    event_bus.publish(EventDeleted(event_id=event_id, title=removed.title))
    return {"status": "deleted"}


@app.get("/events/{event_id}/timeline", response_model=list[TimelineEntry])
def get_event_timeline(event_id: str) -> list[TimelineEntry]:
    """Activity log for an event. Still readable after the event is deleted."""
    entries = timeline_repo.list_for_event(event_id)
    if not entries and event_repo.get(event_id) is None:
        raise ResourceNotFoundError("events", event_id)
    return entries


@app.post(
    "/events/{event_id}/registrations", response_model=Registration, status_code=201
)
def register_participant(event_id: str, body: RegistrationRequest) -> Registration:
    """Take a seat, or a waitlist spot once the event is at capacity."""
    event = _get_event_or_404(event_id)
    registration, changes = add_registration(event, body)
    event_repo.update(event_id, changes)
    event_bus.publish(
        ParticipantRegistered(
            event_id=event_id,
            registration_id=registration.id,
            participant_name=registration.participant_name,
            waitlisted=registration.status == RegistrationStatus.WAITLIST,
        )
    )
    return registration


@app.delete(
    "/events/{event_id}/registrations/{registration_id}",
    response_model=CancellationResult,
)
def cancel_registration(event_id: str, registration_id: str) -> CancellationResult:
    """Cancel a seat or waitlist spot. A freed seat goes to the head of the waitlist."""
    event = _get_event_or_404(event_id)
    result, changes = remove_registration(event, registration_id)
    event_repo.update(event_id, changes)
    event_bus.publish(
        RegistrationCancelled(
            event_id=event_id,
            registration_id=registration_id,
            promoted_id=result.promoted.id if result.promoted else None,
        )
    )
    return result


@app.get("/calendar", response_model=CalendarView)
def get_calendar(
    year: int | None = Query(None, ge=1, le=9999),
    month: int | None = Query(None, ge=1, le=12),
    filters: EventFilters = Depends(_filters),
) -> CalendarView:
    """Month view: the filtered events of one month and the clashes among them."""
    today = date.today()
    year = year or today.year
    month = month or today.month
    visible = in_month(apply_filters(event_repo.list_all(), filters), year, month)
    return CalendarView(
        year=year, month=month, events=visible, clashes=detect_conflicts(visible)
    )


@app.get("/conflicts", response_model=list[Conflict])
def list_conflicts() -> list[Conflict]:
    """Clashes across all stored events, as of the last write."""
    return conflict_repo.list_all()


@app.post("/conflicts/check", response_model=list[Conflict])
def check_conflicts(items: list[ScheduledItem]) -> list[Conflict]:
    """Run clash detection over caller-supplied items without storing anything."""
    return detect_conflicts(items)


@app.get("/dashboard", response_model=DashboardView)
def get_dashboard() -> DashboardView:
    """Stats and previews over the most recently created events."""
    today = date.today()
    events = event_repo.list_recent(settings.recent_events_limit)
    upcoming = sorted(
        (e for e in events if is_upcoming(e, today)), key=lambda e: e.start_date
    )
    return DashboardView(
        stats=compute_stats(events, today),
        upcoming=upcoming[: settings.dashboard_preview_size],
        recent=events[: settings.dashboard_preview_size],
    )
