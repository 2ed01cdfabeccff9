"""
Entities of the Tickets domain.

Entities:
- TicketEntity: the trackable work item (aggregate root)
- TicketHistoryEntity: immutable audit row, one per status change
- TicketDependencyEntity: directed blocks/relates link between two tickets
- TicketCommentEntity: discussion entry on a ticket
- IssueType / DependencyType: enumerations

Rules encapsulated here are the ones that need no other ticket to check
(name, dates, issue type). Rules that span tickets (parent chain,
dependents, workflow) live in hierarchy.py, transitions.py and the use
cases.
"""

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from enum import Enum
from typing import Any, ClassVar, Iterable, List, Optional, Tuple
from uuid import uuid4
import secrets
import string

from src.core.shared.exceptions import ValidationError


DEFAULT_TICKET_PREFIX = "TKT"
TICKET_CODE_LENGTH = 6
_CODE_ALPHABET = string.ascii_uppercase + string.digits


def _new_id() -> str:
    return str(uuid4())


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def generate_ticket_code(prefix: Optional[str]) -> str:
    """
    Build a human-readable ticket code such as "WEB-K3J9QZ".

    Args:
        prefix: Project ticket prefix, "TKT" when empty
    """
    head = (prefix or DEFAULT_TICKET_PREFIX).upper()
    tail = "".join(secrets.choice(_CODE_ALPHABET) for _ in range(TICKET_CODE_LENGTH))
    return f"{head}-{tail}"


def coerce_date(value: Any, field_name: str) -> Optional[date]:
    """
    Accept a date, a datetime or an ISO string (YYYY-MM-DD).

    Raises:
        ValidationError: If the value cannot be read as a date
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value.strip()[:10])
        except ValueError:
            pass
    raise ValidationError(f"Invalid date for {field_name}: {value!r}", field=field_name)


class IssueType(Enum):
    """Kinds of ticket."""

    BUG = "Bug"
    TASK = "Task"
    STORY = "Story"
    EPIC = "Epic"

    @classmethod
    def from_string(cls, value: str) -> "IssueType":
        """
        Parse an issue type by value or name, case-insensitive.

        Raises:
            ValidationError: If the value is not a known issue type
        """
        if isinstance(value, cls):
            return value
        normalized = value.strip().lower() if isinstance(value, str) else ""
        for member in cls:
            if normalized in (member.value.lower(), member.name.lower()):
                return member
        valid = ", ".join(m.value for m in cls)
        raise ValidationError(
            f"Invalid issue type: {value}. Valid types: {valid}",
            field="issue_type",
        )


class DependencyType(Enum):
    """
    Kind of link between two tickets.

    A row (ticket=A, depends_on=B, type=BLOCKS) means B blocks A.
    """

    BLOCKS = "blocks"
    RELATES = "relates"

    @classmethod
    def from_string(cls, value: str) -> "DependencyType":
        if isinstance(value, cls):
            return value
        normalized = value.strip().lower() if isinstance(value, str) else ""
        for member in cls:
            if member.value == normalized:
                return member
        raise ValidationError(
            f"Invalid dependency type: {value}. Valid types: blocks, relates",
            field="type",
        )


@dataclass
class TicketEntity:
    """
    Domain Entity: Ticket.

    Invariants kept by the entity:
    - name is required and at most 255 characters
    - due_date is not before start_date

    Invariants kept by the use cases:
    - parent_id references a ticket of the same project, never itself,
      and never closes a loop
    - ticket_status_id references a status of the same project

    Attributes:
        id: Identifier (UUID)
        project_id: Owning project
        ticket_status_id: Current status (None only before creation completes)
        uuid: Human-readable code, "<PREFIX>-XXXXXX"
        assignee_ids: Ordered set of assigned user ids

    Example:
        ticket = TicketEntity.create(
            project_id=project.id,
            name="Login page returns 500",
            created_by="user-1",
            issue_type="Bug",
        )
    """

    id: str = field(default_factory=_new_id)
    project_id: str = ""
    ticket_status_id: Optional[str] = None
    name: str = ""
    description: str = ""
    issue_type: IssueType = IssueType.TASK
    priority_id: Optional[str] = None
    epic_id: Optional[str] = None
    sprint_id: Optional[str] = None
    parent_id: Optional[str] = None
    start_date: Optional[date] = None
    due_date: Optional[date] = None
    created_by: Optional[str] = None
    uuid: str = ""
    assignee_ids: List[str] = field(default_factory=list)
    created_at: datetime = field(default_factory=_utcnow)
    updated_at: datetime = field(default_factory=_utcnow)

    NAME_MAX_LENGTH: ClassVar[int] = 255

    @classmethod
    def create(
        cls,
        project_id: str,
        name: str,
        created_by: Optional[str] = None,
        description: str = "",
        issue_type: Any = IssueType.TASK,
        priority_id: Optional[str] = None,
        epic_id: Optional[str] = None,
        sprint_id: Optional[str] = None,
        parent_id: Optional[str] = None,
        start_date: Any = None,
        due_date: Any = None,
        assignee_ids: Iterable[str] = (),
    ) -> "TicketEntity":
        """
        Factory method with the entity-level validations.

        The status and the code are filled in by CreateTicketService,
        which knows the project.

        Raises:
            ValidationError: If name, issue type or dates are invalid
        """
        if not project_id:
            raise ValidationError("Project is required.", field="project_id")
        if not created_by:
            raise ValidationError("Ticket creator is required.", field="created_by")
        cls.validate_name(name)
        description = cls.validate_description(description)
        kind = IssueType.from_string(issue_type)
        start = coerce_date(start_date, "start_date")
        due = coerce_date(due_date, "due_date")
        cls.validate_dates(start, due)

        return cls(
            project_id=project_id,
            name=name.strip(),
            description=description,
            issue_type=kind,
            priority_id=priority_id or None,
            epic_id=epic_id or None,
            sprint_id=sprint_id or None,
            parent_id=parent_id or None,
            start_date=start,
            due_date=due,
            created_by=created_by,
            assignee_ids=normalize_user_ids(assignee_ids),
        )

    @classmethod
    def validate_name(cls, name: str) -> None:
        if name is not None and not isinstance(name, str):
            raise ValidationError("Ticket name must be text.", field="name")
        if not name or not name.strip():
            raise ValidationError("Ticket name is required.", field="name")
        if len(name.strip()) > cls.NAME_MAX_LENGTH:
            raise ValidationError(
                f"Ticket name must be at most {cls.NAME_MAX_LENGTH} characters.",
                field="name",
            )

    @staticmethod
    def validate_description(description: Any) -> str:
        """Stripped description; None gives an empty one."""
        if description is None:
            return ""
        if not isinstance(description, str):
            raise ValidationError("Ticket description must be text.", field="description")
        return description.strip()

    @staticmethod
    def validate_dates(start_date: Optional[date], due_date: Optional[date]) -> None:
        if start_date and due_date and due_date < start_date:
            raise ValidationError(
                "Due date cannot be before the start date.",
                field="due_date",
            )

    def move_to_status(self, status_id: str) -> Optional[str]:
        """
        Point the ticket at a new status.

        No workflow check happens here; StatusTransitionEngine does that.

        Returns:
            The previous status id
        """
        previous = self.ticket_status_id
        self.ticket_status_id = status_id
        self.touch()
        return previous

    def replace_assignees(self, user_ids: Iterable[str]) -> Tuple[List[str], List[str]]:
        """
        Replace the assignee set.

        Returns:
            (added ids, removed ids)
        """
        new_ids = normalize_user_ids(user_ids)
        added = [u for u in new_ids if u not in self.assignee_ids]
        removed = [u for u in self.assignee_ids if u not in new_ids]
        self.assignee_ids = new_ids
        if added or removed:
            self.touch()
        return added, removed

    def touch(self) -> None:
        self.updated_at = _utcnow()

    @property
    def is_subtask(self) -> bool:
        return self.parent_id is not None

    def __repr__(self) -> str:
        return (
            f"TicketEntity("
            f"id={self.id[:8]}..., "
            f"uuid={self.uuid}, "
            f"name='{self.name[:20]}', "
            f"status={self.ticket_status_id}"
            f")"
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TicketEntity):
            return False
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)


@dataclass(frozen=True)
class TicketHistoryEntity:
    """
    Append-only audit row of a status change.

    from_ticket_status_id is None for the row written at creation.
    """

    ticket_id: str
    to_ticket_status_id: str
    from_ticket_status_id: Optional[str] = None
    user_id: Optional[str] = None
    note: Optional[str] = None
    id: str = field(default_factory=_new_id)
    created_at: datetime = field(default_factory=_utcnow)


@dataclass
class TicketDependencyEntity:
    """Directed link: ticket_id depends on depends_on_ticket_id."""

    ticket_id: str
    depends_on_ticket_id: str
    type: DependencyType = DependencyType.BLOCKS
    id: str = field(default_factory=_new_id)
    created_at: datetime = field(default_factory=_utcnow)

    @property
    def is_blocking(self) -> bool:
        return self.type is DependencyType.BLOCKS


@dataclass
class TicketCommentEntity:
    ticket_id: str
    user_id: str
    body: str
    id: str = field(default_factory=_new_id)
    created_at: datetime = field(default_factory=_utcnow)
    updated_at: datetime = field(default_factory=_utcnow)

    @classmethod
    def create(cls, ticket_id: str, user_id: Optional[str], body: str) -> "TicketCommentEntity":
        if not user_id:
            raise ValidationError("Comment author is required.", field="user_id")
        if body is not None and not isinstance(body, str):
            raise ValidationError("Comment body must be text.", field="body")
        if not body or not body.strip():
            raise ValidationError("Comment body is required.", field="body")
        return cls(ticket_id=ticket_id, user_id=user_id, body=body.strip())


def normalize_user_ids(user_ids: Optional[Iterable[Any]]) -> List[str]:
    """Stringify, drop blanks and duplicates, keep first-seen order."""
    result = []
    for user_id in user_ids or ():
        if user_id is None or str(user_id).strip() == "":
            continue
        value = str(user_id).strip()
        if value not in result:
            result.append(value)
    return result


def resolve_recipients(
    ticket: TicketEntity,
    actor_id: Optional[str],
    commenter_ids: Iterable[str] = (),
) -> List[str]:
    """
    Users to notify about a change to the ticket.

    Creator, assignees and previous commenters, without the acting user
    and without duplicates.
    """
    candidates = [ticket.created_by, *ticket.assignee_ids, *commenter_ids]
    return [u for u in normalize_user_ids(candidates) if u != actor_id]
