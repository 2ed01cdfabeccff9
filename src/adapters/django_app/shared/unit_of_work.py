"""
Unit of Work - Django implementation.

Wraps one use case in a single database transaction.

Responsibilities:
- Open/close the transaction (django.db.transaction.atomic)
- Coordinated commit/rollback
- Publish queued events only after a successful commit

A failure while publishing is logged and never undoes the commit: the
mutation already happened and the event can be replayed from the logs.
"""

from typing import List, Optional
import logging

from django.db import transaction

from src.core.shared.interfaces import EventPublisher, UnitOfWork
from src.core.shared.events import DomainEvent

logger = logging.getLogger(__name__)


class DjangoUnitOfWork(UnitOfWork):
    """
    Django Unit of Work.

    Uses transaction.atomic, so it nests correctly inside an outer
    atomic block (a request with ATOMIC_REQUESTS, or a test case).
    The same instance can run several use cases one after another;
    every `with` starts clean.

    Example:
        with DjangoUnitOfWork(event_publisher=publisher) as uow:
            repo.save(entity1)
            repo.save(entity2)
            uow.publish_event(MyEvent(...))
        # committed, then events published

    Example with rollback:
        with DjangoUnitOfWork() as uow:
            repo.save(entity)
            raise ValidationError("...")
        # rolled back, events discarded
    """

    def __init__(
        self,
        event_publisher: Optional[EventPublisher] = None,
        using: Optional[str] = None,
    ):
        """
        Args:
            event_publisher: Where events go after commit (logging, Celery, memory)
            using: Database alias, default connection when None
        """
        super().__init__()
        self._event_publisher = event_publisher
        self._using = using
        self._atomic = None
        self._committed = False
        self._rolled_back = False

    def _begin_transaction(self) -> None:
        self.clear_events()
        self._committed = False
        self._rolled_back = False
        self._atomic = transaction.atomic(using=self._using)
        self._atomic.__enter__()
        logger.debug("Transaction started")

    def commit(self) -> None:
        """
        Commit the transaction, then publish queued events.

        Raises:
            Exception: If the commit itself fails (events are discarded)
        """
        if self._committed or self._rolled_back:
            logger.warning("Transaction already finalized")
            return

        atomic, self._atomic = self._atomic, None
        try:
            if atomic is not None:
                atomic.__exit__(None, None, None)
                logger.debug("Transaction committed")
        except Exception as e:
            logger.error(f"Commit failed: {e}")
            self._rolled_back = True
            self.clear_events()
            raise

        self._committed = True
        self._publish_events()

    def rollback(self) -> None:
        """Undo the changes and discard queued events."""
        if self._committed or self._rolled_back:
            return

        atomic, self._atomic = self._atomic, None
        try:
            if atomic is not None:
                transaction.set_rollback(True, using=self._using)
                atomic.__exit__(None, None, None)
                logger.debug("Transaction rolled back")
        finally:
            self._rolled_back = True
            self.clear_events()

    def _publish_events(self) -> None:
        events = self.collect_events()
        self.clear_events()

        for event in events:
            logger.info(
                f"[EVENT] Publishing {event.event_type} "
                f"for aggregate {event.aggregate_id}"
            )
            if self._event_publisher is None:
                continue
            try:
                self._event_publisher.publish(event)
            except Exception as e:
                logger.error(f"[EVENT] Failed to publish {event.event_type}: {e}")

    @property
    def is_committed(self) -> bool:
        return self._committed

    @property
    def is_rolled_back(self) -> bool:
        return self._rolled_back


class InMemoryUnitOfWork(UnitOfWork):
    """
    In-memory Unit of Work for tests.

    Persists nothing; records what would have been published.

    Example:
        uow = InMemoryUnitOfWork()
        with uow:
            uow.publish_event(event)

        assert uow.committed
        assert len(uow.published_events) == 1
    """

    def __init__(self, event_publisher: Optional[EventPublisher] = None):
        super().__init__()
        self._event_publisher = event_publisher
        self._committed = False
        self._rolled_back = False
        self._published_events: List[DomainEvent] = []

    def _begin_transaction(self) -> None:
        self.clear_events()
        self._committed = False
        self._rolled_back = False

    def commit(self) -> None:
        self._committed = True
        events = self.collect_events()
        self.clear_events()
        self._published_events.extend(events)
        if self._event_publisher is not None:
            self._event_publisher.publish_batch(events)

    def rollback(self) -> None:
        self._rolled_back = True
        self.clear_events()

    @property
    def committed(self) -> bool:
        return self._committed

    @property
    def rolled_back(self) -> bool:
        return self._rolled_back

    @property
    def published_events(self) -> List[DomainEvent]:
        return self._published_events

    def reset(self) -> None:
        """Reset for the next test."""
        self._committed = False
        self._rolled_back = False
        self._published_events.clear()
        self.clear_events()
