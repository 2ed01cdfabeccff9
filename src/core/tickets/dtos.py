"""
Data Transfer Objects (DTOs) of the Tickets domain.

Types of DTOs:
- Input DTOs: validated input coming from APIs, imports or scripts
- Output DTOs: response shapes built from entities
- Query DTOs: list/pagination shapes
"""

from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, List, Optional, Tuple

from .entities import (
    TicketCommentEntity,
    TicketDependencyEntity,
    TicketEntity,
    TicketHistoryEntity,
)


def _iso(value) -> Optional[str]:
    return value.isoformat() if value else None


# =============================================================================
# INPUT DTOs
# =============================================================================

@dataclass(frozen=True)
class CreateTicketInputDTO:
    """
    Input for creating a ticket.

    Frozen so validated input cannot be altered by accident.

    Attributes:
        project_id: Owning project
        name: Ticket name
        created_by: Creator user id
        ticket_status_id: Explicit starting status, or None for the project default
        issue_type: Bug, Task, Story or Epic
        start_date / due_date: date objects or ISO strings
        assignee_ids: Users to assign
        custom_fields: Custom field id -> value
    """

    project_id: str
    name: str
    created_by: Optional[str] = None
    description: str = ""
    ticket_status_id: Optional[str] = None
    priority_id: Optional[str] = None
    epic_id: Optional[str] = None
    sprint_id: Optional[str] = None
    parent_id: Optional[str] = None
    issue_type: str = "Task"
    start_date: Any = None
    due_date: Any = None
    assignee_ids: Tuple[str, ...] = field(default_factory=tuple)
    custom_fields: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class UpdateTicketInputDTO:
    """
    Partial update of a ticket.

    Attributes:
        data: Fields to change; a key that is absent is left alone.
            "custom_fields" re-syncs custom values ({} clears them).
        assignee_ids: New assignee set, or None to leave it unchanged
        status_note: History note used if the status changes
    """

    ticket_id: str
    data: Dict[str, Any] = field(default_factory=dict)
    actor_id: Optional[str] = None
    assignee_ids: Optional[Tuple[str, ...]] = None
    status_note: Optional[str] = None


@dataclass(frozen=True)
class ChangeStatusInputDTO:
    ticket_id: str
    ticket_status_id: str
    actor_id: Optional[str] = None
    note: Optional[str] = None


@dataclass(frozen=True)
class AssignUsersInputDTO:
    ticket_id: str
    user_ids: Tuple[str, ...] = field(default_factory=tuple)
    actor_id: Optional[str] = None


@dataclass(frozen=True)
class AddDependencyInputDTO:
    """
    Attributes:
        ticket_id: The dependent ticket
        depends_on_ticket_id: The ticket it depends on
        type: "blocks" (depends_on blocks ticket) or "relates"
    """

    ticket_id: str
    depends_on_ticket_id: str
    type: str = "blocks"
    actor_id: Optional[str] = None


@dataclass(frozen=True)
class AddCommentInputDTO:
    ticket_id: str
    user_id: str
    body: str


# =============================================================================
# OUTPUT DTOs
# =============================================================================

@dataclass(frozen=True)
class TicketOutputDTO:
    """Full view of a ticket, custom values included."""

    id: str
    uuid: str
    project_id: str
    ticket_status_id: Optional[str]
    name: str
    description: str
    issue_type: str
    priority_id: Optional[str]
    epic_id: Optional[str]
    sprint_id: Optional[str]
    parent_id: Optional[str]
    start_date: Optional[date]
    due_date: Optional[date]
    created_by: Optional[str]
    assignee_ids: Tuple[str, ...]
    custom_fields: Dict[str, Any]
    created_at: Any
    updated_at: Any

    @classmethod
    def from_entity(
        cls,
        ticket: TicketEntity,
        custom_fields: Optional[Dict[str, Any]] = None,
    ) -> "TicketOutputDTO":
        return cls(
            id=ticket.id,
            uuid=ticket.uuid,
            project_id=ticket.project_id,
            ticket_status_id=ticket.ticket_status_id,
            name=ticket.name,
            description=ticket.description,
            issue_type=ticket.issue_type.value,
            priority_id=ticket.priority_id,
            epic_id=ticket.epic_id,
            sprint_id=ticket.sprint_id,
            parent_id=ticket.parent_id,
            start_date=ticket.start_date,
            due_date=ticket.due_date,
            created_by=ticket.created_by,
            assignee_ids=tuple(ticket.assignee_ids),
            custom_fields=dict(custom_fields or {}),
            created_at=ticket.created_at,
            updated_at=ticket.updated_at,
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "uuid": self.uuid,
            "project_id": self.project_id,
            "ticket_status_id": self.ticket_status_id,
            "name": self.name,
            "description": self.description,
            "issue_type": self.issue_type,
            "priority_id": self.priority_id,
            "epic_id": self.epic_id,
            "sprint_id": self.sprint_id,
            "parent_id": self.parent_id,
            "start_date": _iso(self.start_date),
            "due_date": _iso(self.due_date),
            "created_by": self.created_by,
            "assignee_ids": list(self.assignee_ids),
            "custom_fields": dict(self.custom_fields),
            "created_at": _iso(self.created_at),
            "updated_at": _iso(self.updated_at),
        }


@dataclass(frozen=True)
class TicketListItemDTO:
    """Light row for listings."""

    id: str
    uuid: str
    name: str
    issue_type: str
    ticket_status_id: Optional[str]
    parent_id: Optional[str]
    due_date: Optional[date]
    assignee_ids: Tuple[str, ...]

    @classmethod
    def from_entity(cls, ticket: TicketEntity) -> "TicketListItemDTO":
        return cls(
            id=ticket.id,
            uuid=ticket.uuid,
            name=ticket.name,
            issue_type=ticket.issue_type.value,
            ticket_status_id=ticket.ticket_status_id,
            parent_id=ticket.parent_id,
            due_date=ticket.due_date,
            assignee_ids=tuple(ticket.assignee_ids),
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "uuid": self.uuid,
            "name": self.name,
            "issue_type": self.issue_type,
            "ticket_status_id": self.ticket_status_id,
            "parent_id": self.parent_id,
            "due_date": _iso(self.due_date),
            "assignee_ids": list(self.assignee_ids),
        }


@dataclass(frozen=True)
class TicketHistoryOutputDTO:
    id: str
    ticket_id: str
    user_id: Optional[str]
    from_ticket_status_id: Optional[str]
    to_ticket_status_id: str
    note: Optional[str]
    created_at: Any

    @classmethod
    def from_entity(cls, entry: TicketHistoryEntity) -> "TicketHistoryOutputDTO":
        return cls(
            id=entry.id,
            ticket_id=entry.ticket_id,
            user_id=entry.user_id,
            from_ticket_status_id=entry.from_ticket_status_id,
            to_ticket_status_id=entry.to_ticket_status_id,
            note=entry.note,
            created_at=entry.created_at,
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "ticket_id": self.ticket_id,
            "user_id": self.user_id,
            "from_ticket_status_id": self.from_ticket_status_id,
            "to_ticket_status_id": self.to_ticket_status_id,
            "note": self.note,
            "created_at": _iso(self.created_at),
        }


@dataclass(frozen=True)
class TicketDependencyOutputDTO:
    id: str
    ticket_id: str
    depends_on_ticket_id: str
    type: str

    @classmethod
    def from_entity(cls, dependency: TicketDependencyEntity) -> "TicketDependencyOutputDTO":
        return cls(
            id=dependency.id,
            ticket_id=dependency.ticket_id,
            depends_on_ticket_id=dependency.depends_on_ticket_id,
            type=dependency.type.value,
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "ticket_id": self.ticket_id,
            "depends_on_ticket_id": self.depends_on_ticket_id,
            "type": self.type,
        }


@dataclass(frozen=True)
class TicketCommentOutputDTO:
    id: str
    ticket_id: str
    user_id: str
    body: str
    created_at: Any

    @classmethod
    def from_entity(cls, comment: TicketCommentEntity) -> "TicketCommentOutputDTO":
        return cls(
            id=comment.id,
            ticket_id=comment.ticket_id,
            user_id=comment.user_id,
            body=comment.body,
            created_at=comment.created_at,
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "ticket_id": self.ticket_id,
            "user_id": self.user_id,
            "body": self.body,
            "created_at": _iso(self.created_at),
        }


# =============================================================================
# QUERY DTOs
# =============================================================================

@dataclass(frozen=True)
class PaginatedResultDTO:
    """
    One page of a listing.

    Attributes:
        items: Items of the current page
        total: Total items without pagination
        page: Current page (1-based)
        per_page: Items per page
    """

    items: List[TicketListItemDTO]
    total: int
    page: int
    per_page: int

    @property
    def total_pages(self) -> int:
        if self.per_page <= 0:
            return 0
        return (self.total + self.per_page - 1) // self.per_page

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages

    @property
    def has_previous(self) -> bool:
        return self.page > 1

    def to_dict(self) -> dict:
        return {
            "items": [item.to_dict() for item in self.items],
            "total": self.total,
            "page": self.page,
            "per_page": self.per_page,
            "total_pages": self.total_pages,
            "has_next": self.has_next,
            "has_previous": self.has_previous,
        }
