"""
Domain Events - decoupled mutation hooks.

Every successful mutation in the core queues a DomainEvent on the
UnitOfWork. Events are published only after the transaction commits, so
the surrounding system (notifications, audit feeds, caches) never sees a
change that was rolled back.

Characteristics:
- Named in the past tense (TicketCreated, not CreateTicket)
- Auto-generated id and timestamp
- Serializable for logging and transport over Celery
- Traceable through aggregate_id
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict
import uuid


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class DomainEvent(ABC):
    """
    Abstract base for domain events.

    Attributes:
        event_id: Unique event identifier
        aggregate_id: Id of the aggregate that produced the event
        occurred_at: When the event happened
        version: Schema version of the event payload

    Example:
        @dataclass
        class TicketCreatedEvent(DomainEvent):
            project_id: str = ""

            @property
            def aggregate_type(self) -> str:
                return "Ticket"
    """

    event_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    aggregate_id: str = ""
    occurred_at: datetime = field(default_factory=_utcnow)
    version: int = 1

    def __post_init__(self):
        if not self.aggregate_id:
            raise ValueError("aggregate_id is required")

    @property
    @abstractmethod
    def aggregate_type(self) -> str:
        """Name of the aggregate that produced this event (e.g. "Ticket")."""
        ...

    @property
    def event_type(self) -> str:
        return self.__class__.__name__

    def to_dict(self) -> Dict[str, Any]:
        """
        Serialize the event.

        The payload is what Celery handlers receive, so every value must
        be JSON-friendly.

        Returns:
            Dictionary with envelope fields and event specific data
        """
        return {
            "event_id": self.event_id,
            "event_type": self.event_type,
            "aggregate_id": self.aggregate_id,
            "aggregate_type": self.aggregate_type,
            "occurred_at": self.occurred_at.isoformat(),
            "version": self.version,
            "data": self._get_event_data(),
        }

    def _get_event_data(self) -> Dict[str, Any]:
        base_fields = {"event_id", "aggregate_id", "occurred_at", "version"}
        data = {}
        for key, value in self.__dict__.items():
            if key in base_fields or key.startswith("_"):
                continue
            if isinstance(value, (tuple, set, frozenset)):
                value = list(value)
            data[key] = value
        return data

    def __repr__(self) -> str:
        return (
            f"{self.event_type}("
            f"event_id={self.event_id[:8]}..., "
            f"aggregate_id={self.aggregate_id}, "
            f"occurred_at={self.occurred_at.isoformat()}"
            f")"
        )
