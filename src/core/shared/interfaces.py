"""
Interfaces (Ports) - contracts between the core and its adapters.

Driven ports live here: UnitOfWork and EventPublisher. Repository ports
are declared next to the entities they persist (projects/ports.py,
tickets/ports.py).

The core defines interfaces; adapters implement them. Dependencies always
point towards the core.
"""

from abc import ABC, abstractmethod
from typing import List

from .events import DomainEvent


class UnitOfWork(ABC):
    """
    Unit of Work - one atomic transaction per use case.

    Pattern: context manager
        with uow:
            repo.save(entity)
            uow.publish_event(event)
        # commit on clean exit, rollback on exception

    Events queued with publish_event() are only handed to the publisher
    after a successful commit. A rollback discards them.
    """

    def __init__(self):
        self._events: List[DomainEvent] = []

    def __enter__(self) -> "UnitOfWork":
        self._begin_transaction()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        if exc_type is not None:
            self.rollback()
        else:
            self.commit()
        return False

    @abstractmethod
    def _begin_transaction(self) -> None:
        raise NotImplementedError

    @abstractmethod
    def commit(self) -> None:
        """
        Persist the changes, then publish queued events.

        Note:
            Events are only published after a successful commit.
        """
        raise NotImplementedError

    @abstractmethod
    def rollback(self) -> None:
        """Undo the changes and discard queued events."""
        raise NotImplementedError

    def publish_event(self, event: DomainEvent) -> None:
        """
        Queue an event for publication after commit.

        Args:
            event: Domain event to publish
        """
        self._events.append(event)

    def collect_events(self) -> List[DomainEvent]:
        return list(self._events)

    def clear_events(self) -> None:
        self._events.clear()


class EventPublisher(ABC):
    """
    Port for publishing domain events to the surrounding system.

    Example:
        class CeleryEventPublisher(EventPublisher):
            def publish(self, event):
                dispatch_domain_event.delay(event.event_type, event.to_dict())
    """

    @abstractmethod
    def publish(self, event: DomainEvent) -> None:
        raise NotImplementedError

    @abstractmethod
    def publish_batch(self, events: List[DomainEvent]) -> None:
        raise NotImplementedError
