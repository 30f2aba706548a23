"""Seat allocation for event registrations.

An event with ``max_participants`` set holds at most that many seated
registrations; anyone signing up after that joins the waitlist. When a seated
participant cancels, the head of the waitlist takes the freed seat. An event
with no cap never waitlists anyone.

The functions here never write to storage. They return the field changes for
the caller to apply to the event.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from campusops.core.exceptions import ResourceNotFoundError
from campusops.domain.models import (
    CancellationResult,
    Event,
    Registration,
    RegistrationRequest,
    RegistrationStatus,
)


def has_free_seat(event: Event, seated: int | None = None) -> bool:
    if event.max_participants is None:
        return True
    if seated is None:
        seated = len(event.registrations or [])
    return seated < event.max_participants


def add_registration(
    event: Event, request: RegistrationRequest
) -> tuple[Registration, dict[str, Any]]:
    """Seat the participant, or waitlist them if the event is full."""
    if has_free_seat(event):
        entry = Registration(
            participant_name=request.participant_name,
            email=request.email,
            status=RegistrationStatus.REGISTERED,
        )
        return entry, {"registrations": [*(event.registrations or []), entry]}

    entry = Registration(
        participant_name=request.participant_name,
        email=request.email,
        status=RegistrationStatus.WAITLIST,
    )
    return entry, {"waitlist": [*(event.waitlist or []), entry]}


def remove_registration(
    event: Event,
    registration_id: str,
    now: datetime | None = None,
) -> tuple[CancellationResult, dict[str, Any]]:
    """Drop a seated or waitlisted registration, promoting from the waitlist if a seat opens.

    Raises :class:`ResourceNotFoundError` if the id is on neither list.
    """
    seated = list(event.registrations or [])
    waitlist = list(event.waitlist or [])

    cancelled = next((r for r in seated if r.id == registration_id), None)
    if cancelled is None:
        queued = next((r for r in waitlist if r.id == registration_id), None)
        if queued is None:
            raise ResourceNotFoundError("registrations", registration_id)
        remaining = [r for r in waitlist if r.id != registration_id]
        return CancellationResult(cancelled=queued), {"waitlist": remaining}

    seated = [r for r in seated if r.id != registration_id]
    promoted = None
    # A lowered cap can leave the event over capacity; no seat opens then.
    if waitlist and has_free_seat(event, len(seated)):
        head = waitlist.pop(0)
        promoted = head.model_copy(
            update={
                "status": RegistrationStatus.REGISTERED,
                "promoted_at": now or datetime.now(timezone.utc),
            }
        )
        seated.append(promoted)

    result = CancellationResult(cancelled=cancelled, promoted=promoted)
    return result, {"registrations": seated, "waitlist": waitlist}
