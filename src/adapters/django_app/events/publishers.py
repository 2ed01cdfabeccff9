"""
Event Publishers - domain event delivery.

Implementations:
- LoggingEventPublisher: logs, runs in-process handlers (development)
- CeleryEventPublisher: hands events to Celery (production)
- InMemoryEventPublisher: keeps events for assertions (tests)
- CompositeEventPublisher: fans out to several publishers

Publishing happens after commit, so a failing publisher is logged and
never undoes the committed change.
"""

from typing import Callable, Dict, List, Optional
import json
import logging

from src.core.shared.events import DomainEvent
from src.core.shared.interfaces import EventPublisher

logger = logging.getLogger(__name__)

EventHandler = Callable[[DomainEvent], None]

PUBLISHER_MODES = ("sync", "celery", "memory")


class _HandlerRegistry:
    """In-process handlers keyed by event type."""

    def __init__(self):
        self._handlers: Dict[str, List[EventHandler]] = {}

    def register_handler(self, event_type: str, handler: EventHandler) -> None:
        self._handlers.setdefault(event_type, []).append(handler)

    def _dispatch_to_handlers(self, event: DomainEvent) -> None:
        for handler in self._handlers.get(event.event_type, []):
            try:
                handler(event)
            except Exception as e:
                logger.error(
                    f"[EVENT] Handler {getattr(handler, '__name__', handler)} "
                    f"failed for {event.event_type}: {e}",
                    exc_info=True,
                )


class LoggingEventPublisher(_HandlerRegistry, EventPublisher):
    """
    Logs every event and runs the registered in-process handlers.

    Used in development to see events without a broker.
    """

    def __init__(self, log_level: int = logging.INFO):
        super().__init__()
        self._log_level = log_level

    def publish(self, event: DomainEvent) -> None:
        logger.log(
            self._log_level,
            f"[EVENT] {event.event_type} | "
            f"aggregate={event.aggregate_id} | "
            f"data={json.dumps(event.to_dict(), default=str)}"
        )
        self._dispatch_to_handlers(event)

    def publish_batch(self, events: List[DomainEvent]) -> None:
        for event in events:
            self.publish(event)


class CeleryEventPublisher(EventPublisher):
    """
    Sends events to the dispatch_domain_event task.

    The payload is event.to_dict(), which is JSON-serializable.
    """

    def __init__(self, also_log: bool = True):
        self._also_log = also_log

    def publish(self, event: DomainEvent) -> None:
        from src.adapters.django_app.events.handlers import dispatch_domain_event

        if self._also_log:
            logger.info(
                f"[EVENT->CELERY] {event.event_type} | "
                f"aggregate={event.aggregate_id}"
            )

        try:
            dispatch_domain_event.delay(event.event_type, json.loads(
                json.dumps(event.to_dict(), default=str)
            ))
        except Exception as e:
            logger.error(f"Failed to publish event to Celery: {e}", exc_info=True)

    def publish_batch(self, events: List[DomainEvent]) -> None:
        for event in events:
            self.publish(event)


class InMemoryEventPublisher(_HandlerRegistry, EventPublisher):
    """Stores published events for inspection in tests."""

    def __init__(self):
        super().__init__()
        self._published_events: List[DomainEvent] = []

    def publish(self, event: DomainEvent) -> None:
        self._published_events.append(event)
        self._dispatch_to_handlers(event)

    def publish_batch(self, events: List[DomainEvent]) -> None:
        for event in events:
            self.publish(event)

    @property
    def published_events(self) -> List[DomainEvent]:
        return self._published_events.copy()

    def clear(self) -> None:
        self._published_events.clear()

    def get_events_by_type(self, event_type: str) -> List[DomainEvent]:
        return [e for e in self._published_events if e.event_type == event_type]


class CompositeEventPublisher(EventPublisher):
    """Delegates to several publishers; one failing does not stop the others."""

    def __init__(self, publishers: Optional[List[EventPublisher]] = None):
        self._publishers = list(publishers or [])

    def add_publisher(self, publisher: EventPublisher) -> None:
        self._publishers.append(publisher)

    def publish(self, event: DomainEvent) -> None:
        for publisher in self._publishers:
            try:
                publisher.publish(event)
            except Exception as e:
                logger.error(f"Error publishing to {publisher.__class__.__name__}: {e}")

    def publish_batch(self, events: List[DomainEvent]) -> None:
        for publisher in self._publishers:
            try:
                publisher.publish_batch(events)
            except Exception as e:
                logger.error(f"Error publishing batch to {publisher.__class__.__name__}: {e}")


def get_event_publisher(mode: str = "sync") -> EventPublisher:
    """
    Build the publisher for a mode.

    Args:
        mode: "sync" (log + in-process handlers), "celery" or "memory"

    Raises:
        ValueError: Unknown mode
    """
    mode = (mode or "sync").lower()
    if mode == "celery":
        return CeleryEventPublisher()
    if mode == "memory":
        return InMemoryEventPublisher()
    if mode == "sync":
        return LoggingEventPublisher()
    raise ValueError(
        f"Unknown event publisher mode: {mode}. Valid modes: {', '.join(PUBLISHER_MODES)}"
    )
