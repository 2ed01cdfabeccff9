"""
Domain Events of the Tickets domain.

Events:
- TicketCreatedEvent: a ticket was created
- TicketUpdatedEvent: ticket fields changed
- TicketStatusChangedEvent: the ticket moved to another status
- TicketAssigneesChangedEvent: the assignee set was replaced
- TicketDeletedEvent: a ticket was removed
- TicketDependencyAddedEvent / TicketDependencyRemovedEvent
- TicketCommentAddedEvent: someone commented

Usage:
    Use cases queue events on the UnitOfWork; they are published after a
    successful commit.

    with uow:
        repo.save(ticket)
        uow.publish_event(TicketCreatedEvent(aggregate_id=ticket.id, ...))

Every ticket event carries recipient_ids: the users the surrounding
system should notify (creator, assignees, commenters, minus the actor).
"""

from dataclasses import dataclass, field
from typing import List, Optional

from src.core.shared.events import DomainEvent


@dataclass
class TicketEvent(DomainEvent):
    """
    Base of all ticket events.

    Attributes:
        project_id: Project of the ticket
        actor_id: User who performed the change
        recipient_ids: Users to notify
    """

    project_id: str = ""
    actor_id: Optional[str] = None
    recipient_ids: List[str] = field(default_factory=list)

    @property
    def aggregate_type(self) -> str:
        return "Ticket"


@dataclass
class TicketCreatedEvent(TicketEvent):
    """
    Handlers:
    - notify the assignees of a new ticket
    """

    uuid: str = ""
    name: str = ""
    ticket_status_id: str = ""
    assignee_ids: List[str] = field(default_factory=list)


@dataclass
class TicketUpdatedEvent(TicketEvent):
    changed_fields: List[str] = field(default_factory=list)


@dataclass
class TicketStatusChangedEvent(TicketEvent):
    """
    Attributes:
        from_status_id: Previous status
        to_status_id: New status
        note: Optional note given with the change
    """

    from_status_id: Optional[str] = None
    to_status_id: str = ""
    note: Optional[str] = None


@dataclass
class TicketAssigneesChangedEvent(TicketEvent):
    added_ids: List[str] = field(default_factory=list)
    removed_ids: List[str] = field(default_factory=list)


@dataclass
class TicketDeletedEvent(TicketEvent):
    uuid: str = ""
    name: str = ""


@dataclass
class TicketDependencyAddedEvent(TicketEvent):
    dependency_id: str = ""
    depends_on_ticket_id: str = ""
    dependency_type: str = ""


@dataclass
class TicketDependencyRemovedEvent(TicketEvent):
    dependency_id: str = ""
    depends_on_ticket_id: str = ""


@dataclass
class TicketCommentAddedEvent(TicketEvent):
    comment_id: str = ""
