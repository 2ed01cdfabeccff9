"""
Ports (Interfaces) of the Projects domain.

Repository contracts implemented by the Django adapter
(src.adapters.django_app.projects.repositories) and by the in-memory
versions below, which back the unit tests.
"""

from typing import Dict, List, Optional, Protocol, runtime_checkable

from .entities import (
    ProjectCustomFieldEntity,
    ProjectEntity,
    ProjectWorkflowEntity,
    TicketStatusEntity,
    WorkflowDefinition,
)


@runtime_checkable
class ProjectRepository(Protocol):
    """Persistence of projects."""

    def save(self, project: ProjectEntity) -> None:
        ...

    def get_by_id(self, project_id: str) -> Optional[ProjectEntity]:
        ...

    def get_by_prefix(self, ticket_prefix: str) -> Optional[ProjectEntity]:
        ...

    def list_all(self) -> List[ProjectEntity]:
        ...


@runtime_checkable
class TicketStatusRepository(Protocol):
    """Persistence of the statuses a project offers."""

    def save(self, status: TicketStatusEntity) -> None:
        ...

    def get_by_id(self, status_id: str) -> Optional[TicketStatusEntity]:
        ...

    def get_by_name(self, project_id: str, name: str) -> Optional[TicketStatusEntity]:
        ...

    def list_for_project(self, project_id: str) -> List[TicketStatusEntity]:
        """
        Statuses of a project ordered by sort_order.

        Returns:
            Ordered list, empty when the project has none
        """
        ...

    def delete(self, status_id: str) -> None:
        ...


@runtime_checkable
class ProjectWorkflowRepository(Protocol):
    """Persistence of per-project workflow definitions."""

    def for_project(self, project_id: str) -> Optional[ProjectWorkflowEntity]:
        ...

    def create_or_update(
        self,
        project_id: str,
        definition: WorkflowDefinition,
    ) -> ProjectWorkflowEntity:
        """
        Replace the project's whole definition, creating the row if needed.

        Returns:
            The stored workflow
        """
        ...


@runtime_checkable
class CustomFieldRepository(Protocol):
    """Persistence of project custom-field schemas."""

    def save(self, custom_field: ProjectCustomFieldEntity) -> None:
        ...

    def get_by_id(self, field_id: str) -> Optional[ProjectCustomFieldEntity]:
        ...

    def get_by_key(self, project_id: str, key: str) -> Optional[ProjectCustomFieldEntity]:
        ...

    def list_for_project(self, project_id: str) -> List[ProjectCustomFieldEntity]:
        ...

    def list_active_for_project(self, project_id: str) -> List[ProjectCustomFieldEntity]:
        ...


@runtime_checkable
class StatusUsageChecker(Protocol):
    """Answers whether any ticket still points at a status."""

    def exists_with_status(self, status_id: str) -> bool:
        ...


# =============================================================================
# In-memory implementations
# =============================================================================

class InMemoryProjectRepository:
    """
    In-memory ProjectRepository.

    Useful for unit tests and prototyping. Not for production.
    """

    def __init__(self):
        self._projects: Dict[str, ProjectEntity] = {}

    def save(self, project: ProjectEntity) -> None:
        self._projects[project.id] = project

    def get_by_id(self, project_id: str) -> Optional[ProjectEntity]:
        return self._projects.get(project_id)

    def get_by_prefix(self, ticket_prefix: str) -> Optional[ProjectEntity]:
        for project in self._projects.values():
            if project.ticket_prefix == ticket_prefix:
                return project
        return None

    def list_all(self) -> List[ProjectEntity]:
        return sorted(self._projects.values(), key=lambda p: p.name)

    def clear(self) -> None:
        self._projects.clear()


class InMemoryTicketStatusRepository:
    """In-memory TicketStatusRepository."""

    def __init__(self):
        self._statuses: Dict[str, TicketStatusEntity] = {}

    def save(self, status: TicketStatusEntity) -> None:
        self._statuses[status.id] = status

    def get_by_id(self, status_id: str) -> Optional[TicketStatusEntity]:
        return self._statuses.get(status_id)

    def get_by_name(self, project_id: str, name: str) -> Optional[TicketStatusEntity]:
        for status in self._statuses.values():
            if status.project_id == project_id and status.name == name:
                return status
        return None

    def list_for_project(self, project_id: str) -> List[TicketStatusEntity]:
        statuses = [s for s in self._statuses.values() if s.project_id == project_id]
        return sorted(statuses, key=lambda s: (s.sort_order, s.name))

    def delete(self, status_id: str) -> None:
        self._statuses.pop(status_id, None)


class InMemoryProjectWorkflowRepository:
    """In-memory ProjectWorkflowRepository keyed by project id."""

    def __init__(self):
        self._workflows: Dict[str, ProjectWorkflowEntity] = {}

    def for_project(self, project_id: str) -> Optional[ProjectWorkflowEntity]:
        return self._workflows.get(project_id)

    def create_or_update(
        self,
        project_id: str,
        definition: WorkflowDefinition,
    ) -> ProjectWorkflowEntity:
        workflow = self._workflows.get(project_id)
        if workflow is None:
            workflow = ProjectWorkflowEntity(project_id=project_id, definition=definition)
            self._workflows[project_id] = workflow
        else:
            workflow.replace_definition(definition)
        return workflow


class InMemoryCustomFieldRepository:
    """In-memory CustomFieldRepository."""

    def __init__(self):
        self._fields: Dict[str, ProjectCustomFieldEntity] = {}

    def save(self, custom_field: ProjectCustomFieldEntity) -> None:
        self._fields[custom_field.id] = custom_field

    def get_by_id(self, field_id: str) -> Optional[ProjectCustomFieldEntity]:
        return self._fields.get(field_id)

    def get_by_key(self, project_id: str, key: str) -> Optional[ProjectCustomFieldEntity]:
        for custom_field in self._fields.values():
            if custom_field.project_id == project_id and custom_field.key == key:
                return custom_field
        return None

    def list_for_project(self, project_id: str) -> List[ProjectCustomFieldEntity]:
        fields = [f for f in self._fields.values() if f.project_id == project_id]
        return sorted(fields, key=lambda f: (f.sort_order, f.key))

    def list_active_for_project(self, project_id: str) -> List[ProjectCustomFieldEntity]:
        return [f for f in self.list_for_project(project_id) if f.is_active]
