"""Domain event handlers, wired up at application startup."""

from __future__ import annotations

import logging

from campusops.domain.bus import EventBus
from campusops.domain.events import (
    ConflictDetected,
    EventCreated,
    EventDeleted,
    EventStatusChanged,
    EventUpdated,
    ParticipantRegistered,
    RegistrationCancelled,
)
from campusops.domain.models import Conflict, TimelineEntry, TimelineEntryType
from campusops.repos.memory import (
    ConflictRepository,
    EventRepository,
    TimelineRepository,
)
from campusops.services.conflicts import detect_conflicts

logger = logging.getLogger(__name__)


class HandlerRegistry:
    """Wires domain-event handlers to the bus with access to all repositories."""

    def __init__(
        self,
        bus: EventBus,
        event_repo: EventRepository,
        timeline_repo: TimelineRepository,
        conflict_repo: ConflictRepository,
    ) -> None:
        self.bus = bus
        self.event_repo = event_repo
        self.timeline_repo = timeline_repo
        self.conflict_repo = conflict_repo
        self._register()

    def _register(self) -> None:
        self.bus.subscribe(EventCreated, self.on_event_created)
        self.bus.subscribe(EventUpdated, self.on_event_updated)
        self.bus.subscribe(EventStatusChanged, self.on_status_changed)
        self.bus.subscribe(EventDeleted, self.on_event_deleted)
        self.bus.subscribe(ParticipantRegistered, self.on_participant_registered)
        self.bus.subscribe(RegistrationCancelled, self.on_registration_cancelled)
        self.bus.subscribe(ConflictDetected, self.on_conflict_detected)

    def refresh_conflicts(self) -> list[Conflict]:
        """Recompute clashes over every stored event and announce the new ones."""
        conflicts = detect_conflicts(self.event_repo.list_all())
        new_conflicts = self.conflict_repo.replace(conflicts)
        self.bus.publish_all(
            ConflictDetected(
                event_id=conflict.item_a.id,
                other_event_id=conflict.item_b.id,
                venue=conflict.venue,
                date=conflict.date,
            )
            for conflict in new_conflicts
        )
        return conflicts

    # ------------------------------------------------------------------
    # Handlers
    # ------------------------------------------------------------------

    def on_event_created(self, event: EventCreated) -> None:
        if self.event_repo.get(event.event_id) is None:
            return

        self.timeline_repo.add(
            TimelineEntry(event_id=event.event_id, type=TimelineEntryType.CREATED)
        )
        self.refresh_conflicts()

    def on_event_updated(self, event: EventUpdated) -> None:
        if self.event_repo.get(event.event_id) is None:
            return

        self.timeline_repo.add(
            TimelineEntry(
                event_id=event.event_id,
                type=TimelineEntryType.UPDATED,
                payload={"fields": event.fields},
            )
        )
        self.refresh_conflicts()

    def on_status_changed(self, event: EventStatusChanged) -> None:
        self.timeline_repo.add(
            TimelineEntry(
                event_id=event.event_id,
                type=TimelineEntryType.STATUS_CHANGED,
                payload={"from": event.old_status, "to": event.new_status},
            )
        )
        self.refresh_conflicts()

    def on_event_deleted(self, event: EventDeleted) -> None:
        # The entry outlives the event so the activity log stays readable.
        self.timeline_repo.add(
            TimelineEntry(
                event_id=event.event_id,
                type=TimelineEntryType.DELETED,
                payload={"title": event.title},
            )
        )
        self.refresh_conflicts()

    def on_participant_registered(self, event: ParticipantRegistered) -> None:
        entry_type = (
            TimelineEntryType.WAITLISTED if event.waitlisted else TimelineEntryType.REGISTERED
        )
        self.timeline_repo.add(
            TimelineEntry(
                event_id=event.event_id,
                type=entry_type,
                payload={
                    "registration_id": event.registration_id,
                    "participant_name": event.participant_name,
                },
            )
        )

    def on_registration_cancelled(self, event: RegistrationCancelled) -> None:
        self.timeline_repo.add(
            TimelineEntry(
                event_id=event.event_id,
                type=TimelineEntryType.REGISTRATION_CANCELLED,
                payload={"registration_id": event.registration_id},
            )
        )
        if event.promoted_id is not None:
            self.timeline_repo.add(
                TimelineEntry(
                    event_id=event.event_id,
                    type=TimelineEntryType.PROMOTED,
                    payload={"registration_id": event.promoted_id},
                )
            )

    def on_conflict_detected(self, event: ConflictDetected) -> None:
        first_id, second_id = event.event_ids
        logger.warning(
            "Venue clash at %s on %s between %s and %s",
            event.venue,
            event.date.isoformat(),
            first_id,
            second_id,
        )
        for event_id, other_id in ((first_id, second_id), (second_id, first_id)):
            self.timeline_repo.add(
                TimelineEntry(
                    event_id=event_id,
                    type=TimelineEntryType.CONFLICT_DETECTED,
                    payload={
                        "conflicting_event_id": other_id,
                        "venue": event.venue,
                        "date": event.date.isoformat(),
                    },
                )
            )
