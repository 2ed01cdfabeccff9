"""
Data Transfer Objects of the Projects domain.

Input DTOs are frozen so validated input cannot be altered on its way
through a use case. Output DTOs are built from entities and expose a
JSON-friendly to_dict().
"""

from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, List, Optional, Tuple

from .entities import (
    ProjectCustomFieldEntity,
    ProjectEntity,
    ProjectWorkflowEntity,
    TicketStatusEntity,
)


def _iso(value) -> Optional[str]:
    return value.isoformat() if value else None


# =============================================================================
# INPUT DTOs
# =============================================================================

@dataclass(frozen=True)
class CreateProjectInputDTO:
    """
    Input for creating a project.

    Attributes:
        name: Project name
        ticket_prefix: Prefix of ticket codes (e.g. "WEB" gives WEB-8K2J1Q)
        status_presets: Optional status seeds as dicts with name, color,
            is_completed. Defaults to To Do / In Progress / Done.
    """

    name: str
    ticket_prefix: str
    description: str = ""
    color: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    status_presets: Tuple[Dict[str, Any], ...] = field(default_factory=tuple)
    created_by: Optional[str] = None


@dataclass(frozen=True)
class AddStatusInputDTO:
    project_id: str
    name: str
    color: Optional[str] = None
    is_completed: bool = False
    sort_order: Optional[int] = None


@dataclass(frozen=True)
class SaveWorkflowInputDTO:
    """
    Input for replacing a project's workflow.

    Attributes:
        initial_statuses: Status ids a new ticket may start in
        transitions: Status id -> status ids reachable in one hop
    """

    project_id: str
    initial_statuses: Tuple[str, ...] = field(default_factory=tuple)
    transitions: Dict[str, Tuple[str, ...]] = field(default_factory=dict)
    saved_by: Optional[str] = None


@dataclass(frozen=True)
class CreateCustomFieldInputDTO:
    project_id: str
    key: str
    label: str
    field_type: str = "text"
    options: Tuple[str, ...] = field(default_factory=tuple)
    is_required: bool = False
    sort_order: int = 0
    is_active: bool = True


# =============================================================================
# OUTPUT DTOs
# =============================================================================

@dataclass(frozen=True)
class TicketStatusOutputDTO:
    id: str
    project_id: str
    name: str
    color: str
    is_completed: bool
    sort_order: int

    @classmethod
    def from_entity(cls, status: TicketStatusEntity) -> "TicketStatusOutputDTO":
        return cls(
            id=status.id,
            project_id=status.project_id,
            name=status.name,
            color=status.color,
            is_completed=status.is_completed,
            sort_order=status.sort_order,
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "project_id": self.project_id,
            "name": self.name,
            "color": self.color,
            "is_completed": self.is_completed,
            "sort_order": self.sort_order,
        }


@dataclass(frozen=True)
class ProjectOutputDTO:
    """Project with its ordered statuses."""

    id: str
    name: str
    ticket_prefix: str
    description: str
    color: Optional[str]
    start_date: Optional[date]
    end_date: Optional[date]
    statuses: Tuple[TicketStatusOutputDTO, ...] = field(default_factory=tuple)

    @classmethod
    def from_entity(
        cls,
        project: ProjectEntity,
        statuses: List[TicketStatusEntity] = (),
    ) -> "ProjectOutputDTO":
        return cls(
            id=project.id,
            name=project.name,
            ticket_prefix=project.ticket_prefix,
            description=project.description,
            color=project.color,
            start_date=project.start_date,
            end_date=project.end_date,
            statuses=tuple(TicketStatusOutputDTO.from_entity(s) for s in statuses),
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "ticket_prefix": self.ticket_prefix,
            "description": self.description,
            "color": self.color,
            "start_date": _iso(self.start_date),
            "end_date": _iso(self.end_date),
            "statuses": [s.to_dict() for s in self.statuses],
        }


@dataclass(frozen=True)
class WorkflowOutputDTO:
    project_id: str
    initial_statuses: Tuple[str, ...]
    transitions: Dict[str, Tuple[str, ...]]

    @classmethod
    def from_entity(cls, workflow: ProjectWorkflowEntity) -> "WorkflowOutputDTO":
        data = workflow.definition.to_dict()
        return cls(
            project_id=workflow.project_id,
            initial_statuses=tuple(data["initial_statuses"]),
            transitions={k: tuple(v) for k, v in data["transitions"].items()},
        )

    def to_dict(self) -> dict:
        return {
            "project_id": self.project_id,
            "initial_statuses": list(self.initial_statuses),
            "transitions": {k: list(v) for k, v in self.transitions.items()},
        }


@dataclass(frozen=True)
class CustomFieldOutputDTO:
    id: str
    project_id: str
    key: str
    label: str
    field_type: str
    options: Tuple[str, ...]
    is_required: bool
    sort_order: int
    is_active: bool

    @classmethod
    def from_entity(cls, custom_field: ProjectCustomFieldEntity) -> "CustomFieldOutputDTO":
        return cls(
            id=custom_field.id,
            project_id=custom_field.project_id,
            key=custom_field.key,
            label=custom_field.label,
            field_type=custom_field.field_type.value,
            options=tuple(custom_field.options),
            is_required=custom_field.is_required,
            sort_order=custom_field.sort_order,
            is_active=custom_field.is_active,
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "project_id": self.project_id,
            "key": self.key,
            "label": self.label,
            "type": self.field_type,
            "options": list(self.options),
            "is_required": self.is_required,
            "sort_order": self.sort_order,
            "is_active": self.is_active,
        }
