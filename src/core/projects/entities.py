"""
Entities of the Projects domain.

A project owns its ticket statuses, its optional workflow graph and its
custom-field schema. Tickets (see src.core.tickets) always belong to one
project and may only use that project's statuses.

Entities:
- ProjectEntity: the grouping aggregate, carries the ticket code prefix
- TicketStatusEntity: a column of the board (name, color, completed flag)
- WorkflowDefinition: value type holding the allowed-transition graph
- ProjectWorkflowEntity: one workflow definition per project
- ProjectCustomFieldEntity: a project-specific ticket attribute
"""

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from enum import Enum
from typing import Any, ClassVar, Dict, FrozenSet, Iterable, List, Mapping, Optional
import re
import uuid

from src.core.shared.exceptions import ValidationError


DEFAULT_STATUS_COLOR = "#2563EB"


def _new_id() -> str:
    return str(uuid.uuid4())


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _ensure_text(value: Any, field_name: str) -> Any:
    """Reject non-string input such as numbers from a JSON body. None passes."""
    if value is not None and not isinstance(value, str):
        raise ValidationError(f"{field_name} must be text.", field=field_name)
    return value


class CustomFieldType(Enum):
    """Input kinds a project custom field can take."""

    TEXT = "text"
    NUMBER = "number"
    SELECT = "select"
    DATE = "date"

    @classmethod
    def from_string(cls, value: str) -> "CustomFieldType":
        """
        Parse a field type name, case-insensitive.

        Raises:
            ValidationError: If the value is not a known type
        """
        normalized = (_ensure_text(value, "type") or "").strip().lower()
        for member in cls:
            if member.value == normalized:
                return member
        valid = ", ".join(m.value for m in cls)
        raise ValidationError(
            f"Invalid custom field type: {value}. Valid types: {valid}",
            field="type",
        )


@dataclass
class ProjectEntity:
    """
    Domain Entity: Project.

    Invariants:
    - name is required
    - ticket_prefix is 1-10 uppercase letters/digits (unique across projects,
      enforced by the use case)
    - end_date, when set, is not before start_date

    Example:
        project = ProjectEntity.create(name="Website", ticket_prefix="web")
        project.ticket_prefix  # "WEB"
    """

    id: str = field(default_factory=_new_id)
    name: str = ""
    ticket_prefix: str = ""
    description: str = ""
    color: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    created_at: datetime = field(default_factory=_utcnow)
    updated_at: datetime = field(default_factory=_utcnow)

    NAME_MAX_LENGTH: ClassVar[int] = 255
    PREFIX_PATTERN: ClassVar[re.Pattern] = re.compile(r"^[A-Z0-9]{1,10}$")

    @classmethod
    def create(
        cls,
        name: str,
        ticket_prefix: str,
        description: str = "",
        color: Optional[str] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> "ProjectEntity":
        """
        Factory method that validates input before building the project.

        Raises:
            ValidationError: If name, prefix or dates are invalid
        """
        cls._validate_name(name)
        _ensure_text(description, "description")
        prefix = cls.normalize_prefix(ticket_prefix)

        if start_date and end_date and end_date < start_date:
            raise ValidationError(
                "Project end date cannot be before its start date.",
                field="end_date",
            )

        return cls(
            name=name.strip(),
            ticket_prefix=prefix,
            description=(description or "").strip(),
            color=color,
            start_date=start_date,
            end_date=end_date,
        )

    @classmethod
    def _validate_name(cls, name: str) -> None:
        _ensure_text(name, "name")
        if not name or not name.strip():
            raise ValidationError("Project name is required.", field="name")
        if len(name.strip()) > cls.NAME_MAX_LENGTH:
            raise ValidationError(
                f"Project name must be at most {cls.NAME_MAX_LENGTH} characters.",
                field="name",
            )

    @classmethod
    def normalize_prefix(cls, ticket_prefix: str) -> str:
        """
        Uppercase and validate a ticket code prefix.

        Raises:
            ValidationError: If the prefix is empty or not alphanumeric
        """
        prefix = (_ensure_text(ticket_prefix, "ticket_prefix") or "").strip().upper()
        if not cls.PREFIX_PATTERN.match(prefix):
            raise ValidationError(
                "Ticket prefix must be 1 to 10 letters or digits.",
                field="ticket_prefix",
            )
        return prefix

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ProjectEntity):
            return False
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)


@dataclass
class TicketStatusEntity:
    """
    Domain Entity: a ticket status owned by exactly one project.

    Attributes:
        project_id: Owning project
        name: Display name, unique within the project
        color: Hex color used by boards
        is_completed: Whether tickets in this status count as done
        sort_order: Position on the board, also used to pick the default status
    """

    id: str = field(default_factory=_new_id)
    project_id: str = ""
    name: str = ""
    color: str = DEFAULT_STATUS_COLOR
    is_completed: bool = False
    sort_order: int = 0

    NAME_MAX_LENGTH: ClassVar[int] = 100

    @classmethod
    def create(
        cls,
        project_id: str,
        name: str,
        color: Optional[str] = None,
        is_completed: bool = False,
        sort_order: int = 0,
    ) -> "TicketStatusEntity":
        _ensure_text(name, "name")
        if not name or not name.strip():
            raise ValidationError("Status name is required.", field="name")
        if len(name.strip()) > cls.NAME_MAX_LENGTH:
            raise ValidationError(
                f"Status name must be at most {cls.NAME_MAX_LENGTH} characters.",
                field="name",
            )
        return cls(
            project_id=project_id,
            name=name.strip(),
            color=color or DEFAULT_STATUS_COLOR,
            is_completed=bool(is_completed),
            sort_order=int(sort_order),
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TicketStatusEntity):
            return False
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)


@dataclass(frozen=True)
class WorkflowDefinition:
    """
    Value type: the allowed-transition graph of a project.

    initial_statuses holds the statuses a new ticket may start in;
    transitions maps a status id to the statuses reachable in one hop.
    An empty definition allows no move at all; a project without any
    workflow is handled by the caller.

    The definition is always replaced wholesale, never patched.

    Example:
        definition = WorkflowDefinition.from_dict({
            "initial_statuses": ["open"],
            "transitions": {"open": ["review"], "review": ["done"]},
        })
        definition.is_transition_allowed("open", "done")  # False
    """

    initial_statuses: FrozenSet[str] = frozenset()
    transitions: Mapping[str, FrozenSet[str]] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(
            self, "initial_statuses", frozenset(str(s) for s in self.initial_statuses)
        )
        object.__setattr__(
            self,
            "transitions",
            {
                str(source): frozenset(str(t) for t in (targets or ()))
                for source, targets in dict(self.transitions).items()
            },
        )

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> "WorkflowDefinition":
        """Build a definition from its JSON shape. None gives an empty definition."""
        data = data or {}
        return cls(
            initial_statuses=frozenset(data.get("initial_statuses") or ()),
            transitions=dict(data.get("transitions") or {}),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "initial_statuses": sorted(self.initial_statuses),
            "transitions": {
                source: sorted(targets)
                for source, targets in sorted(self.transitions.items())
            },
        }

    @property
    def is_empty(self) -> bool:
        return not self.initial_statuses and not self.transitions

    def allowed_targets(self, from_status_id: Optional[str]) -> FrozenSet[str]:
        """Statuses reachable in one hop; initial statuses when there is no current one."""
        if from_status_id is None:
            return self.initial_statuses
        return self.transitions.get(str(from_status_id), frozenset())

    def is_transition_allowed(self, from_status_id: Optional[str], to_status_id: str) -> bool:
        return str(to_status_id) in self.allowed_targets(from_status_id)

    def referenced_status_ids(self) -> FrozenSet[str]:
        ids = set(self.initial_statuses)
        for source, targets in self.transitions.items():
            ids.add(source)
            ids.update(targets)
        return frozenset(ids)


@dataclass
class ProjectWorkflowEntity:
    """One-to-one with a project. Absence means "no transition restriction"."""

    id: str = field(default_factory=_new_id)
    project_id: str = ""
    definition: WorkflowDefinition = field(default_factory=WorkflowDefinition)
    created_at: datetime = field(default_factory=_utcnow)
    updated_at: datetime = field(default_factory=_utcnow)

    def replace_definition(self, definition: WorkflowDefinition) -> None:
        self.definition = definition
        self.updated_at = _utcnow()


@dataclass
class ProjectCustomFieldEntity:
    """
    Domain Entity: a custom ticket attribute declared by a project.

    Only active fields accept values; values for unknown or inactive
    fields are dropped when a ticket is saved.
    """

    id: str = field(default_factory=_new_id)
    project_id: str = ""
    key: str = ""
    label: str = ""
    field_type: CustomFieldType = CustomFieldType.TEXT
    options: List[str] = field(default_factory=list)
    is_required: bool = False
    sort_order: int = 0
    is_active: bool = True

    KEY_PATTERN: ClassVar[re.Pattern] = re.compile(r"^[a-z][a-z0-9_]{0,49}$")

    @classmethod
    def create(
        cls,
        project_id: str,
        key: str,
        label: str,
        field_type: str = "text",
        options: Optional[Iterable[str]] = None,
        is_required: bool = False,
        sort_order: int = 0,
        is_active: bool = True,
    ) -> "ProjectCustomFieldEntity":
        normalized_key = (_ensure_text(key, "key") or "").strip().lower()
        if not cls.KEY_PATTERN.match(normalized_key):
            raise ValidationError(
                "Custom field key must start with a letter and contain only "
                "lowercase letters, digits and underscores.",
                field="key",
            )
        _ensure_text(label, "label")
        if not label or not label.strip():
            raise ValidationError("Custom field label is required.", field="label")

        kind = CustomFieldType.from_string(field_type)
        choices = [str(o).strip() for o in (options or ()) if str(o).strip()]
        if kind is CustomFieldType.SELECT and not choices:
            raise ValidationError(
                "Select fields need at least one option.",
                field="options",
            )

        return cls(
            project_id=project_id,
            key=normalized_key,
            label=label.strip(),
            field_type=kind,
            options=choices if kind is CustomFieldType.SELECT else [],
            is_required=bool(is_required),
            sort_order=int(sort_order),
            is_active=bool(is_active),
        )
