"""
Use Cases (Application Services) of the Projects domain.

Use cases:
- CreateProjectService: creates a project and seeds its statuses
- AddStatusService: adds a status column to a project
- RemoveStatusService: removes a status no ticket references
- ListProjectStatusesService: ordered statuses of a project
- SaveWorkflowService: create-or-update of the workflow graph
- GetWorkflowService: current workflow graph, if any
- CreateCustomFieldService: declares a project custom field

Every mutating use case runs inside one UnitOfWork and queues a domain
event that is published after commit.
"""

from typing import List, Optional

from src.core.shared.interfaces import UnitOfWork
from src.core.shared.exceptions import (
    ConflictError,
    NotFoundError,
    ValidationError,
)

from .entities import (
    ProjectCustomFieldEntity,
    ProjectEntity,
    TicketStatusEntity,
    WorkflowDefinition,
)
from .ports import (
    CustomFieldRepository,
    ProjectRepository,
    ProjectWorkflowRepository,
    StatusUsageChecker,
    TicketStatusRepository,
)
from .dtos import (
    AddStatusInputDTO,
    CreateCustomFieldInputDTO,
    CreateProjectInputDTO,
    CustomFieldOutputDTO,
    ProjectOutputDTO,
    SaveWorkflowInputDTO,
    TicketStatusOutputDTO,
    WorkflowOutputDTO,
)
from .events import (
    CustomFieldCreatedEvent,
    ProjectCreatedEvent,
    ProjectWorkflowSavedEvent,
    TicketStatusAddedEvent,
    TicketStatusRemovedEvent,
)


DEFAULT_STATUS_PRESETS = (
    {"name": "To Do", "color": "#64748B", "is_completed": False},
    {"name": "In Progress", "color": "#2563EB", "is_completed": False},
    {"name": "Done", "color": "#16A34A", "is_completed": True},
)


def get_project_or_fail(project_repo: ProjectRepository, project_id: str) -> ProjectEntity:
    """
    Load a project or raise.

    Raises:
        NotFoundError: If the project does not exist
    """
    project = project_repo.get_by_id(project_id)
    if project is None:
        raise NotFoundError(
            "Project not found.",
            entity_type="Project",
            entity_id=project_id,
        )
    return project


class CreateProjectService:
    """
    Use Case: create a project with its initial statuses.

    Flow:
    1. Validate name and prefix (prefix must be unused)
    2. Build the status seeds, defaulting to To Do / In Progress / Done
    3. Persist project and statuses
    4. Queue ProjectCreatedEvent

    Example:
        service = CreateProjectService(project_repo, status_repo, uow)
        output = service.execute(CreateProjectInputDTO(name="Website", ticket_prefix="WEB"))
    """

    def __init__(
        self,
        project_repo: ProjectRepository,
        status_repo: TicketStatusRepository,
        uow: UnitOfWork,
    ):
        self.project_repo = project_repo
        self.status_repo = status_repo
        self.uow = uow

    def execute(self, input_dto: CreateProjectInputDTO) -> ProjectOutputDTO:
        """
        Raises:
            ValidationError: If name, prefix, dates or status seeds are invalid
            ConflictError: If the prefix is already used by another project
        """
        with self.uow:
            project = ProjectEntity.create(
                name=input_dto.name,
                ticket_prefix=input_dto.ticket_prefix,
                description=input_dto.description,
                color=input_dto.color,
                start_date=input_dto.start_date,
                end_date=input_dto.end_date,
            )

            if self.project_repo.get_by_prefix(project.ticket_prefix) is not None:
                raise ConflictError(
                    f"Ticket prefix '{project.ticket_prefix}' is already in use.",
                    rule="unique_ticket_prefix",
                )

            presets = input_dto.status_presets or DEFAULT_STATUS_PRESETS
            statuses = []
            seen_names = set()
            for index, preset in enumerate(presets):
                if not isinstance(preset, dict):
                    raise ValidationError(
                        "Each status preset must be an object.",
                        field="status_presets",
                    )
                status = TicketStatusEntity.create(
                    project_id=project.id,
                    name=preset.get("name", ""),
                    color=preset.get("color"),
                    is_completed=preset.get("is_completed", False),
                    sort_order=index,
                )
                if status.name in seen_names:
                    raise ValidationError(
                        f"Duplicate status name '{status.name}'.",
                        field="status_presets",
                    )
                seen_names.add(status.name)
                statuses.append(status)

            self.project_repo.save(project)
            for status in statuses:
                self.status_repo.save(status)

            self.uow.publish_event(
                ProjectCreatedEvent(
                    aggregate_id=project.id,
                    name=project.name,
                    ticket_prefix=project.ticket_prefix,
                    status_ids=[s.id for s in statuses],
                )
            )

            return ProjectOutputDTO.from_entity(project, statuses)


class AddStatusService:
    """Use Case: add a status to a project. sort_order defaults to last + 1."""

    def __init__(
        self,
        project_repo: ProjectRepository,
        status_repo: TicketStatusRepository,
        uow: UnitOfWork,
    ):
        self.project_repo = project_repo
        self.status_repo = status_repo
        self.uow = uow

    def execute(self, input_dto: AddStatusInputDTO) -> TicketStatusOutputDTO:
        with self.uow:
            project = get_project_or_fail(self.project_repo, input_dto.project_id)

            sort_order = input_dto.sort_order
            if sort_order is None:
                existing = self.status_repo.list_for_project(project.id)
                sort_order = max((s.sort_order for s in existing), default=-1) + 1

            status = TicketStatusEntity.create(
                project_id=project.id,
                name=input_dto.name,
                color=input_dto.color,
                is_completed=input_dto.is_completed,
                sort_order=sort_order,
            )

            if self.status_repo.get_by_name(project.id, status.name) is not None:
                raise ConflictError(
                    f"Status '{status.name}' already exists in this project.",
                    rule="unique_status_name",
                )

            self.status_repo.save(status)

            self.uow.publish_event(
                TicketStatusAddedEvent(
                    aggregate_id=project.id,
                    status_id=status.id,
                    name=status.name,
                )
            )

            return TicketStatusOutputDTO.from_entity(status)


class RemoveStatusService:
    """
    Use Case: remove a status.

    Workflow definitions that still mention the status are left as they
    are; keeping them consistent is the caller's job.
    """

    def __init__(
        self,
        status_repo: TicketStatusRepository,
        usage_checker: StatusUsageChecker,
        uow: UnitOfWork,
    ):
        self.status_repo = status_repo
        self.usage_checker = usage_checker
        self.uow = uow

    def execute(self, status_id: str) -> None:
        """
        Raises:
            NotFoundError: If the status does not exist
            ConflictError: If any ticket still uses the status
        """
        with self.uow:
            status = self.status_repo.get_by_id(status_id)
            if status is None:
                raise NotFoundError(
                    "Ticket status not found.",
                    entity_type="TicketStatus",
                    entity_id=status_id,
                )

            if self.usage_checker.exists_with_status(status.id):
                raise ConflictError(
                    "Cannot delete status while tickets still reference it.",
                    rule="status_in_use",
                )

            self.status_repo.delete(status.id)

            self.uow.publish_event(
                TicketStatusRemovedEvent(
                    aggregate_id=status.project_id,
                    status_id=status.id,
                )
            )


class ListProjectStatusesService:
    """Use Case: statuses of a project ordered by sort_order (read only)."""

    def __init__(self, project_repo: ProjectRepository, status_repo: TicketStatusRepository):
        self.project_repo = project_repo
        self.status_repo = status_repo

    def execute(self, project_id: str) -> List[TicketStatusOutputDTO]:
        project = get_project_or_fail(self.project_repo, project_id)
        return [
            TicketStatusOutputDTO.from_entity(s)
            for s in self.status_repo.list_for_project(project.id)
        ]


class SaveWorkflowService:
    """
    Use Case: create or replace the workflow graph of a project.

    The definition is replaced wholesale. Every status id it mentions
    must belong to the project.
    """

    def __init__(
        self,
        project_repo: ProjectRepository,
        status_repo: TicketStatusRepository,
        workflow_repo: ProjectWorkflowRepository,
        uow: UnitOfWork,
    ):
        self.project_repo = project_repo
        self.status_repo = status_repo
        self.workflow_repo = workflow_repo
        self.uow = uow

    def execute(self, input_dto: SaveWorkflowInputDTO) -> WorkflowOutputDTO:
        """
        Raises:
            NotFoundError: If the project does not exist
            ValidationError: If the definition mentions foreign or unknown statuses
        """
        with self.uow:
            project = get_project_or_fail(self.project_repo, input_dto.project_id)

            definition = WorkflowDefinition(
                initial_statuses=frozenset(input_dto.initial_statuses),
                transitions=dict(input_dto.transitions),
            )

            project_status_ids = {
                s.id for s in self.status_repo.list_for_project(project.id)
            }
            unknown = definition.referenced_status_ids() - project_status_ids
            if unknown:
                raise ValidationError(
                    "Workflow references statuses that do not belong to this "
                    f"project: {', '.join(sorted(unknown))}",
                    field="definition",
                )

            workflow = self.workflow_repo.create_or_update(project.id, definition)

            self.uow.publish_event(
                ProjectWorkflowSavedEvent(
                    aggregate_id=project.id,
                    definition=definition.to_dict(),
                    saved_by=input_dto.saved_by,
                )
            )

            return WorkflowOutputDTO.from_entity(workflow)


class GetWorkflowService:
    """Use Case: the project's workflow, or None when transitions are unrestricted."""

    def __init__(self, project_repo: ProjectRepository, workflow_repo: ProjectWorkflowRepository):
        self.project_repo = project_repo
        self.workflow_repo = workflow_repo

    def execute(self, project_id: str) -> Optional[WorkflowOutputDTO]:
        project = get_project_or_fail(self.project_repo, project_id)
        workflow = self.workflow_repo.for_project(project.id)
        if workflow is None:
            return None
        return WorkflowOutputDTO.from_entity(workflow)


class CreateCustomFieldService:
    """Use Case: declare a custom field on a project. Keys are unique per project."""

    def __init__(
        self,
        project_repo: ProjectRepository,
        custom_field_repo: CustomFieldRepository,
        uow: UnitOfWork,
    ):
        self.project_repo = project_repo
        self.custom_field_repo = custom_field_repo
        self.uow = uow

    def execute(self, input_dto: CreateCustomFieldInputDTO) -> CustomFieldOutputDTO:
        with self.uow:
            project = get_project_or_fail(self.project_repo, input_dto.project_id)

            custom_field = ProjectCustomFieldEntity.create(
                project_id=project.id,
                key=input_dto.key,
                label=input_dto.label,
                field_type=input_dto.field_type,
                options=input_dto.options,
                is_required=input_dto.is_required,
                sort_order=input_dto.sort_order,
                is_active=input_dto.is_active,
            )

            if self.custom_field_repo.get_by_key(project.id, custom_field.key) is not None:
                raise ConflictError(
                    f"Custom field with key '{custom_field.key}' already exists "
                    "for this project.",
                    rule="unique_custom_field_key",
                )

            self.custom_field_repo.save(custom_field)

            self.uow.publish_event(
                CustomFieldCreatedEvent(
                    aggregate_id=project.id,
                    field_id=custom_field.id,
                    key=custom_field.key,
                    field_type=custom_field.field_type.value,
                )
            )

            return CustomFieldOutputDTO.from_entity(custom_field)
