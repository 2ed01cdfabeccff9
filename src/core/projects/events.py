"""
Domain Events of the Projects domain.

Events:
- ProjectCreatedEvent: a project and its seed statuses were created
- TicketStatusAddedEvent / TicketStatusRemovedEvent: board columns changed
- ProjectWorkflowSavedEvent: the transition graph was replaced
- CustomFieldCreatedEvent: a new custom attribute is available
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from src.core.shared.events import DomainEvent


@dataclass
class ProjectCreatedEvent(DomainEvent):
    name: str = ""
    ticket_prefix: str = ""
    status_ids: List[str] = field(default_factory=list)

    @property
    def aggregate_type(self) -> str:
        return "Project"


@dataclass
class TicketStatusAddedEvent(DomainEvent):
    status_id: str = ""
    name: str = ""

    @property
    def aggregate_type(self) -> str:
        return "Project"


@dataclass
class TicketStatusRemovedEvent(DomainEvent):
    status_id: str = ""

    @property
    def aggregate_type(self) -> str:
        return "Project"


@dataclass
class ProjectWorkflowSavedEvent(DomainEvent):
    """
    The project's workflow definition was replaced.

    Attributes:
        definition: New definition in its JSON shape
        saved_by: User that saved it
    """

    definition: Dict[str, Any] = field(default_factory=dict)
    saved_by: Optional[str] = None

    @property
    def aggregate_type(self) -> str:
        return "Project"


@dataclass
class CustomFieldCreatedEvent(DomainEvent):
    field_id: str = ""
    key: str = ""
    field_type: str = ""

    @property
    def aggregate_type(self) -> str:
        return "Project"
