"""In-process bus carrying the console's domain events to their handlers."""

from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Callable, Iterable
from typing import TypeVar

from campusops.domain.events import DomainEvent

logger = logging.getLogger(__name__)

EventT = TypeVar("EventT", bound=DomainEvent)


class EventBus:
    """Dispatches each domain event to the handlers subscribed to its exact type.

    Handlers run synchronously, in subscription order, inside the request that
    published the event. A handler that raises aborts the remaining handlers
    and the error reaches the publisher.
    """

    def __init__(self) -> None:
        self._subscribers: dict[type[DomainEvent], list[Callable]] = defaultdict(list)

    def subscribe(self, event_type: type[EventT], handler: Callable[[EventT], None]) -> None:
        self._subscribers[event_type].append(handler)

    def publish(self, event: DomainEvent) -> None:
        handlers = self._subscribers.get(type(event), [])
        logger.debug(
            "Dispatching %s(event_id=%s) to %d handler(s)",
            type(event).__name__,
            event.event_id,
            len(handlers),
        )
        for handler in handlers:
            handler(event)

    def publish_all(self, events: Iterable[DomainEvent]) -> int:
        """Publish in order; returns how many events went out."""
        count = 0
        for event in events:
            self.publish(event)
            count += 1
        return count
