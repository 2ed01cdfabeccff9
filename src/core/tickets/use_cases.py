"""
Use Cases (Application Services) of the Tickets domain.

Use cases:
- CreateTicketService: creates a ticket with its first history row
- UpdateTicketService: partial update, status changes included
- DeleteTicketService: deletes a ticket no other ticket relies on
- ChangeTicketStatusService: moves a ticket through the workflow
- AssignUsersService: replaces the assignee set
- GetTicketService / ListProjectTicketsService / GetTicketHistoryService
- ListAllowedStatusesService: statuses reachable from the current one
- AddDependencyService / RemoveDependencyService / ListTicketDependenciesService
- AddCommentService / ListTicketCommentsService

Responsibilities of a use case:
- Validate every rule before the first write
- Coordinate entities, the hierarchy guard and the transition engine
- Manage the transaction (UnitOfWork)
- Queue domain events, published after commit
- Return output DTOs

Principles:
- One use case = one business operation
- Dependencies are injected
- No infrastructure code
"""

from typing import Any, Dict, List, Mapping, Optional

from src.core.shared.interfaces import UnitOfWork
from src.core.shared.exceptions import (
    ConflictError,
    NotFoundError,
    ValidationError,
)
from src.core.projects.dtos import TicketStatusOutputDTO
from src.core.projects.ports import (
    CustomFieldRepository,
    ProjectRepository,
    ProjectWorkflowRepository,
    TicketStatusRepository,
)
from src.core.projects.use_cases import get_project_or_fail

from .entities import (
    DependencyType,
    IssueType,
    TicketCommentEntity,
    TicketDependencyEntity,
    TicketEntity,
    coerce_date,
    generate_ticket_code,
    resolve_recipients,
)
from .hierarchy import TicketHierarchyGuard
from .transitions import StatusTransitionEngine
from .ports import (
    TicketCommentRepository,
    TicketCustomValueRepository,
    TicketDependencyRepository,
    TicketHistoryRepository,
    TicketRepository,
)
from .dtos import (
    AddCommentInputDTO,
    AddDependencyInputDTO,
    AssignUsersInputDTO,
    ChangeStatusInputDTO,
    CreateTicketInputDTO,
    PaginatedResultDTO,
    TicketCommentOutputDTO,
    TicketDependencyOutputDTO,
    TicketHistoryOutputDTO,
    TicketListItemDTO,
    TicketOutputDTO,
    UpdateTicketInputDTO,
)
from .events import (
    TicketAssigneesChangedEvent,
    TicketCommentAddedEvent,
    TicketCreatedEvent,
    TicketDeletedEvent,
    TicketDependencyAddedEvent,
    TicketDependencyRemovedEvent,
    TicketStatusChangedEvent,
    TicketUpdatedEvent,
)


CREATION_NOTE = "Ticket created"
MAX_CODE_ATTEMPTS = 20
MAX_PER_PAGE = 100

UPDATABLE_FIELDS = frozenset({
    "name",
    "description",
    "ticket_status_id",
    "priority_id",
    "epic_id",
    "sprint_id",
    "parent_id",
    "issue_type",
    "start_date",
    "due_date",
    "custom_fields",
})


def get_ticket_or_fail(
    ticket_repo: TicketRepository,
    ticket_id: str,
    for_update: bool = False,
) -> TicketEntity:
    """
    Load a ticket or raise.

    Args:
        for_update: Lock the row for the running transaction

    Raises:
        NotFoundError: If the ticket does not exist
    """
    if for_update:
        ticket = ticket_repo.get_for_update(ticket_id)
    else:
        ticket = ticket_repo.get_by_id(ticket_id)
    if ticket is None:
        raise NotFoundError(
            "Ticket not found.",
            entity_type="Ticket",
            entity_id=ticket_id,
        )
    return ticket


def filter_custom_values(
    custom_field_repo: CustomFieldRepository,
    project_id: str,
    raw_values: Optional[Mapping[str, Any]],
) -> Dict[str, Any]:
    """
    Keep only values of the project's active custom fields.

    Keys may be field ids or field keys; the result is keyed by field id.
    Unknown or inactive fields and empty values are dropped.
    """
    active = custom_field_repo.list_active_for_project(project_id)
    by_id = {f.id: f for f in active}
    by_key = {f.key: f for f in active}

    values = {}
    for name, value in (raw_values or {}).items():
        custom_field = by_id.get(str(name)) or by_key.get(str(name))
        if custom_field is None or value is None or value == "":
            continue
        values[custom_field.id] = value
    return values


class CreateTicketService:
    """
    Use Case: create a ticket.

    Flow:
    1. Validate the project, the fields and the parent
    2. Resolve the starting status (explicit or project default) and
       check it against the workflow's initial statuses
    3. Generate the ticket code
    4. Persist ticket, assignees, history row and custom values
    5. Queue TicketCreatedEvent

    Example:
        output = service.execute(CreateTicketInputDTO(
            project_id=project.id,
            name="Checkout button misaligned",
            created_by="user-1",
            issue_type="Bug",
        ))
        print(output.uuid)  # e.g. WEB-4K9Q2Z
    """

    def __init__(
        self,
        ticket_repo: TicketRepository,
        project_repo: ProjectRepository,
        status_repo: TicketStatusRepository,
        workflow_repo: ProjectWorkflowRepository,
        history_repo: TicketHistoryRepository,
        custom_field_repo: CustomFieldRepository,
        custom_value_repo: TicketCustomValueRepository,
        uow: UnitOfWork,
    ):
        self.ticket_repo = ticket_repo
        self.project_repo = project_repo
        self.custom_field_repo = custom_field_repo
        self.custom_value_repo = custom_value_repo
        self.uow = uow
        self.guard = TicketHierarchyGuard(ticket_repo)
        self.engine = StatusTransitionEngine(status_repo, workflow_repo, history_repo)

    def execute(self, input_dto: CreateTicketInputDTO) -> TicketOutputDTO:
        """
        Raises:
            NotFoundError: Unknown project, status or parent
            ValidationError: Invalid fields, parent in another project,
                or no usable starting status
            InvalidTransitionError: Explicit status is not an initial status
        """
        with self.uow:
            project = get_project_or_fail(self.project_repo, input_dto.project_id)

            ticket = TicketEntity.create(
                project_id=project.id,
                name=input_dto.name,
                created_by=input_dto.created_by,
                description=input_dto.description,
                issue_type=input_dto.issue_type,
                priority_id=input_dto.priority_id,
                epic_id=input_dto.epic_id,
                sprint_id=input_dto.sprint_id,
                parent_id=input_dto.parent_id,
                start_date=input_dto.start_date,
                due_date=input_dto.due_date,
                assignee_ids=input_dto.assignee_ids,
            )

            if ticket.parent_id is not None:
                self.guard.validate_parent(ticket.parent_id, project.id)

            if input_dto.ticket_status_id:
                status = self.engine.check(project.id, None, input_dto.ticket_status_id)
            else:
                status = self.engine.default_status(project.id)

            custom_values = filter_custom_values(
                self.custom_field_repo, project.id, input_dto.custom_fields
            )

            ticket.ticket_status_id = status.id
            ticket.uuid = self._unique_code(project.ticket_prefix)

            self.ticket_repo.save(ticket)
            self.engine.record(ticket, None, actor_id=ticket.created_by, note=CREATION_NOTE)
            if custom_values:
                self.custom_value_repo.sync_for_ticket(ticket.id, custom_values)

            self.uow.publish_event(
                TicketCreatedEvent(
                    aggregate_id=ticket.id,
                    project_id=ticket.project_id,
                    actor_id=ticket.created_by,
                    recipient_ids=resolve_recipients(ticket, ticket.created_by),
                    uuid=ticket.uuid,
                    name=ticket.name,
                    ticket_status_id=ticket.ticket_status_id,
                    assignee_ids=list(ticket.assignee_ids),
                )
            )

            return TicketOutputDTO.from_entity(ticket, custom_values)

    def _unique_code(self, prefix: str) -> str:
        for _ in range(MAX_CODE_ATTEMPTS):
            code = generate_ticket_code(prefix)
            if not self.ticket_repo.code_exists(code):
                return code
        raise ConflictError(
            "Could not generate a unique ticket code.",
            rule="unique_ticket_code",
        )


class UpdateTicketService:
    """
    Use Case: partial update of a ticket.

    Only the keys present in input_dto.data are touched. A status change
    goes through the transition engine and writes one history row.

    Flow:
    1. Load the ticket (locked for update)
    2. Validate every changed field, the parent chain and the status move
    3. Apply and persist
    4. Queue TicketUpdatedEvent and, on a status change, TicketStatusChangedEvent
    """

    def __init__(
        self,
        ticket_repo: TicketRepository,
        status_repo: TicketStatusRepository,
        workflow_repo: ProjectWorkflowRepository,
        history_repo: TicketHistoryRepository,
        custom_field_repo: CustomFieldRepository,
        custom_value_repo: TicketCustomValueRepository,
        comment_repo: TicketCommentRepository,
        uow: UnitOfWork,
    ):
        self.ticket_repo = ticket_repo
        self.custom_field_repo = custom_field_repo
        self.custom_value_repo = custom_value_repo
        self.comment_repo = comment_repo
        self.uow = uow
        self.guard = TicketHierarchyGuard(ticket_repo)
        self.engine = StatusTransitionEngine(status_repo, workflow_repo, history_repo)

    def execute(self, input_dto: UpdateTicketInputDTO) -> TicketOutputDTO:
        """
        Raises:
            NotFoundError: Unknown ticket, status or parent
            ValidationError: Invalid field, self parent, cross-project parent
            CircularReferenceError: The new parent is a descendant of the ticket
            InvalidTransitionError: The workflow refuses the status change
        """
        with self.uow:
            ticket = get_ticket_or_fail(self.ticket_repo, input_dto.ticket_id, for_update=True)
            data = dict(input_dto.data or {})

            if "project_id" in data:
                if data.pop("project_id") != ticket.project_id:
                    raise ValidationError(
                        "A ticket cannot be moved to another project.",
                        field="project_id",
                    )
            for name in data:
                if name not in UPDATABLE_FIELDS:
                    raise ValidationError(f"Field '{name}' cannot be updated.", field=name)

            changes = self._validated_changes(ticket, data)

            new_status_id = None
            if "ticket_status_id" in data:
                target = data["ticket_status_id"]
                if not target:
                    raise ValidationError("Ticket status is required.", field="ticket_status_id")
                if target != ticket.ticket_status_id:
                    new_status_id = self.engine.check(
                        ticket.project_id, ticket.ticket_status_id, target
                    ).id

            custom_values = None
            if "custom_fields" in data:
                custom_values = filter_custom_values(
                    self.custom_field_repo, ticket.project_id, data["custom_fields"]
                )

            # All checks passed; apply.
            changed_fields = [
                name for name, value in changes.items() if getattr(ticket, name) != value
            ]
            for name in changed_fields:
                setattr(ticket, name, changes[name])

            from_status_id = ticket.ticket_status_id
            if new_status_id is not None:
                ticket.move_to_status(new_status_id)
                changed_fields.append("ticket_status_id")

            if input_dto.assignee_ids is not None:
                added, removed = ticket.replace_assignees(input_dto.assignee_ids)
                if added or removed:
                    changed_fields.append("assignee_ids")

            if custom_values is not None:
                changed_fields.append("custom_fields")

            ticket.touch()
            self.ticket_repo.save(ticket)

            if new_status_id is not None:
                self.engine.record(
                    ticket, from_status_id, actor_id=input_dto.actor_id, note=input_dto.status_note
                )
            if custom_values is not None:
                self.custom_value_repo.sync_for_ticket(ticket.id, custom_values)

            recipients = resolve_recipients(
                ticket, input_dto.actor_id, self.comment_repo.commenter_ids(ticket.id)
            )
            if changed_fields:
                self.uow.publish_event(
                    TicketUpdatedEvent(
                        aggregate_id=ticket.id,
                        project_id=ticket.project_id,
                        actor_id=input_dto.actor_id,
                        recipient_ids=recipients,
                        changed_fields=changed_fields,
                    )
                )
            if new_status_id is not None:
                self.uow.publish_event(
                    TicketStatusChangedEvent(
                        aggregate_id=ticket.id,
                        project_id=ticket.project_id,
                        actor_id=input_dto.actor_id,
                        recipient_ids=recipients,
                        from_status_id=from_status_id,
                        to_status_id=new_status_id,
                        note=input_dto.status_note,
                    )
                )

            if custom_values is None:
                custom_values = self.custom_value_repo.list_for_ticket(ticket.id)
            return TicketOutputDTO.from_entity(ticket, custom_values)

    def _validated_changes(self, ticket: TicketEntity, data: Dict[str, Any]) -> Dict[str, Any]:
        changes: Dict[str, Any] = {}

        if "name" in data:
            TicketEntity.validate_name(data["name"])
            changes["name"] = data["name"].strip()
        if "description" in data:
            changes["description"] = TicketEntity.validate_description(data["description"])
        if "issue_type" in data:
            changes["issue_type"] = IssueType.from_string(data["issue_type"])
        for name in ("priority_id", "epic_id", "sprint_id"):
            if name in data:
                changes[name] = data[name] or None

        start_date = ticket.start_date
        due_date = ticket.due_date
        if "start_date" in data:
            start_date = changes["start_date"] = coerce_date(data["start_date"], "start_date")
        if "due_date" in data:
            due_date = changes["due_date"] = coerce_date(data["due_date"], "due_date")
        TicketEntity.validate_dates(start_date, due_date)

        if "parent_id" in data:
            parent_id = data["parent_id"] or None
            if parent_id is not None:
                self.guard.validate_parent(parent_id, ticket.project_id, ticket.id)
            changes["parent_id"] = parent_id

        return changes


class DeleteTicketService:
    """
    Use Case: delete a ticket.

    Refused while the ticket has sub-tasks or blocks another ticket.
    Dependencies, custom values, comments, assignees and history go with it.
    """

    def __init__(
        self,
        ticket_repo: TicketRepository,
        dependency_repo: TicketDependencyRepository,
        custom_value_repo: TicketCustomValueRepository,
        history_repo: TicketHistoryRepository,
        comment_repo: TicketCommentRepository,
        uow: UnitOfWork,
    ):
        self.ticket_repo = ticket_repo
        self.dependency_repo = dependency_repo
        self.custom_value_repo = custom_value_repo
        self.history_repo = history_repo
        self.comment_repo = comment_repo
        self.uow = uow

    def execute(self, ticket_id: str, actor_id: Optional[str] = None) -> None:
        """
        Raises:
            NotFoundError: If the ticket does not exist
            ConflictError: If the ticket has sub-tasks or blocking dependents
        """
        with self.uow:
            ticket = get_ticket_or_fail(self.ticket_repo, ticket_id, for_update=True)

            if self.ticket_repo.has_children(ticket.id):
                raise ConflictError(
                    "Cannot delete ticket with sub-tasks. "
                    "Please delete or reassign sub-tasks first.",
                    rule="no_children_on_delete",
                )
            if self.dependency_repo.has_blocking_dependents(ticket.id):
                raise ConflictError(
                    "Cannot delete ticket that is blocking other tickets. "
                    "Please remove dependencies first.",
                    rule="no_blocking_dependents_on_delete",
                )

            recipients = resolve_recipients(
                ticket, actor_id, self.comment_repo.commenter_ids(ticket.id)
            )

            self.dependency_repo.delete_for_ticket(ticket.id)
            self.custom_value_repo.delete_for_ticket(ticket.id)
            self.comment_repo.delete_for_ticket(ticket.id)
            self.history_repo.delete_for_ticket(ticket.id)
            self.ticket_repo.delete(ticket.id)

            self.uow.publish_event(
                TicketDeletedEvent(
                    aggregate_id=ticket.id,
                    project_id=ticket.project_id,
                    actor_id=actor_id,
                    recipient_ids=recipients,
                    uuid=ticket.uuid,
                    name=ticket.name,
                )
            )


class ChangeTicketStatusService:
    """
    Use Case: move a ticket to another status.

    Moving to the current status is a no-op: no history, no event.
    """

    def __init__(
        self,
        ticket_repo: TicketRepository,
        status_repo: TicketStatusRepository,
        workflow_repo: ProjectWorkflowRepository,
        history_repo: TicketHistoryRepository,
        comment_repo: TicketCommentRepository,
        uow: UnitOfWork,
    ):
        self.ticket_repo = ticket_repo
        self.comment_repo = comment_repo
        self.uow = uow
        self.engine = StatusTransitionEngine(status_repo, workflow_repo, history_repo)

    def execute(self, input_dto: ChangeStatusInputDTO) -> TicketOutputDTO:
        """
        Raises:
            NotFoundError: Unknown ticket, or status outside the ticket's project
            InvalidTransitionError: The workflow refuses the move
        """
        with self.uow:
            ticket = get_ticket_or_fail(self.ticket_repo, input_dto.ticket_id, for_update=True)

            if input_dto.ticket_status_id == ticket.ticket_status_id:
                return TicketOutputDTO.from_entity(ticket)

            target = self.engine.check(
                ticket.project_id, ticket.ticket_status_id, input_dto.ticket_status_id
            )

            from_status_id = ticket.move_to_status(target.id)
            self.ticket_repo.save(ticket)
            self.engine.record(
                ticket, from_status_id, actor_id=input_dto.actor_id, note=input_dto.note
            )

            self.uow.publish_event(
                TicketStatusChangedEvent(
                    aggregate_id=ticket.id,
                    project_id=ticket.project_id,
                    actor_id=input_dto.actor_id,
                    recipient_ids=resolve_recipients(
                        ticket, input_dto.actor_id, self.comment_repo.commenter_ids(ticket.id)
                    ),
                    from_status_id=from_status_id,
                    to_status_id=target.id,
                    note=input_dto.note,
                )
            )

            return TicketOutputDTO.from_entity(ticket)


class AssignUsersService:
    """Use Case: replace the assignee set of a ticket."""

    def __init__(
        self,
        ticket_repo: TicketRepository,
        comment_repo: TicketCommentRepository,
        uow: UnitOfWork,
    ):
        self.ticket_repo = ticket_repo
        self.comment_repo = comment_repo
        self.uow = uow

    def execute(self, input_dto: AssignUsersInputDTO) -> TicketOutputDTO:
        with self.uow:
            ticket = get_ticket_or_fail(self.ticket_repo, input_dto.ticket_id, for_update=True)

            added, removed = ticket.replace_assignees(input_dto.user_ids)
            self.ticket_repo.save(ticket)

            if added or removed:
                self.uow.publish_event(
                    TicketAssigneesChangedEvent(
                        aggregate_id=ticket.id,
                        project_id=ticket.project_id,
                        actor_id=input_dto.actor_id,
                        recipient_ids=resolve_recipients(
                            ticket,
                            input_dto.actor_id,
                            [*removed, *self.comment_repo.commenter_ids(ticket.id)],
                        ),
                        added_ids=added,
                        removed_ids=removed,
                    )
                )

            return TicketOutputDTO.from_entity(ticket)


class GetTicketService:
    """Use Case: a single ticket with its custom values (read only)."""

    def __init__(self, ticket_repo: TicketRepository, custom_value_repo: TicketCustomValueRepository):
        self.ticket_repo = ticket_repo
        self.custom_value_repo = custom_value_repo

    def execute(self, ticket_id: str) -> TicketOutputDTO:
        ticket = get_ticket_or_fail(self.ticket_repo, ticket_id)
        return TicketOutputDTO.from_entity(
            ticket, self.custom_value_repo.list_for_ticket(ticket.id)
        )


class ListProjectTicketsService:
    """
    Use Case: paginated tickets of a project, newest first.

    page is 1-based; per_page is clamped to 1..100.
    """

    def __init__(self, ticket_repo: TicketRepository, project_repo: ProjectRepository):
        self.ticket_repo = ticket_repo
        self.project_repo = project_repo

    def execute(self, project_id: str, page: int = 1, per_page: int = 20) -> PaginatedResultDTO:
        project = get_project_or_fail(self.project_repo, project_id)

        page = max(1, int(page))
        per_page = min(max(1, int(per_page)), MAX_PER_PAGE)

        tickets = self.ticket_repo.list_for_project(
            project.id, offset=(page - 1) * per_page, limit=per_page
        )
        return PaginatedResultDTO(
            items=[TicketListItemDTO.from_entity(t) for t in tickets],
            total=self.ticket_repo.count_for_project(project.id),
            page=page,
            per_page=per_page,
        )


class GetTicketHistoryService:
    """Use Case: status history of a ticket, oldest first."""

    def __init__(self, ticket_repo: TicketRepository, history_repo: TicketHistoryRepository):
        self.ticket_repo = ticket_repo
        self.history_repo = history_repo

    def execute(self, ticket_id: str) -> List[TicketHistoryOutputDTO]:
        ticket = get_ticket_or_fail(self.ticket_repo, ticket_id)
        return [
            TicketHistoryOutputDTO.from_entity(e)
            for e in self.history_repo.list_for_ticket(ticket.id)
        ]


class ListAllowedStatusesService:
    """Use Case: statuses the ticket may move to next."""

    def __init__(
        self,
        ticket_repo: TicketRepository,
        status_repo: TicketStatusRepository,
        workflow_repo: ProjectWorkflowRepository,
    ):
        self.ticket_repo = ticket_repo
        self.engine = StatusTransitionEngine(status_repo, workflow_repo)

    def execute(self, ticket_id: str) -> List[TicketStatusOutputDTO]:
        ticket = get_ticket_or_fail(self.ticket_repo, ticket_id)
        return [
            TicketStatusOutputDTO.from_entity(s)
            for s in self.engine.allowed_statuses(ticket.project_id, ticket.ticket_status_id)
        ]


class AddDependencyService:
    """
    Use Case: link two tickets.

    With type "blocks", depends_on_ticket_id blocks ticket_id and cannot
    be deleted until the link is removed.
    """

    def __init__(
        self,
        ticket_repo: TicketRepository,
        dependency_repo: TicketDependencyRepository,
        uow: UnitOfWork,
    ):
        self.ticket_repo = ticket_repo
        self.dependency_repo = dependency_repo
        self.uow = uow

    def execute(self, input_dto: AddDependencyInputDTO) -> TicketDependencyOutputDTO:
        """
        Raises:
            NotFoundError: If either ticket does not exist
            ValidationError: Self dependency or unknown type
            ConflictError: If the same link already exists
        """
        with self.uow:
            ticket = get_ticket_or_fail(self.ticket_repo, input_dto.ticket_id)
            if input_dto.depends_on_ticket_id == ticket.id:
                raise ValidationError(
                    "A ticket cannot depend on itself.",
                    field="depends_on_ticket_id",
                )
            other = get_ticket_or_fail(self.ticket_repo, input_dto.depends_on_ticket_id)
            dependency_type = DependencyType.from_string(input_dto.type)

            if self.dependency_repo.exists(ticket.id, other.id, dependency_type):
                raise ConflictError(
                    "This dependency already exists.",
                    rule="unique_dependency",
                )

            dependency = TicketDependencyEntity(
                ticket_id=ticket.id,
                depends_on_ticket_id=other.id,
                type=dependency_type,
            )
            self.dependency_repo.add(dependency)

            self.uow.publish_event(
                TicketDependencyAddedEvent(
                    aggregate_id=ticket.id,
                    project_id=ticket.project_id,
                    actor_id=input_dto.actor_id,
                    dependency_id=dependency.id,
                    depends_on_ticket_id=other.id,
                    dependency_type=dependency_type.value,
                )
            )

            return TicketDependencyOutputDTO.from_entity(dependency)


class RemoveDependencyService:
    def __init__(
        self,
        ticket_repo: TicketRepository,
        dependency_repo: TicketDependencyRepository,
        uow: UnitOfWork,
    ):
        self.ticket_repo = ticket_repo
        self.dependency_repo = dependency_repo
        self.uow = uow

    def execute(self, dependency_id: str, actor_id: Optional[str] = None) -> None:
        with self.uow:
            dependency = self.dependency_repo.get_by_id(dependency_id)
            if dependency is None:
                raise NotFoundError(
                    "Dependency not found.",
                    entity_type="TicketDependency",
                    entity_id=dependency_id,
                )
            ticket = get_ticket_or_fail(self.ticket_repo, dependency.ticket_id)

            self.dependency_repo.remove(dependency.id)

            self.uow.publish_event(
                TicketDependencyRemovedEvent(
                    aggregate_id=ticket.id,
                    project_id=ticket.project_id,
                    actor_id=actor_id,
                    dependency_id=dependency.id,
                    depends_on_ticket_id=dependency.depends_on_ticket_id,
                )
            )


class ListTicketDependenciesService:
    """Use Case: links where the ticket is on either side."""

    def __init__(self, ticket_repo: TicketRepository, dependency_repo: TicketDependencyRepository):
        self.ticket_repo = ticket_repo
        self.dependency_repo = dependency_repo

    def execute(self, ticket_id: str) -> List[TicketDependencyOutputDTO]:
        ticket = get_ticket_or_fail(self.ticket_repo, ticket_id)
        return [
            TicketDependencyOutputDTO.from_entity(d)
            for d in self.dependency_repo.list_for_ticket(ticket.id)
        ]


class AddCommentService:
    """
    Use Case: comment on a ticket.

    The new comment notifies the creator, the assignees and earlier
    commenters, never the author.
    """

    def __init__(
        self,
        ticket_repo: TicketRepository,
        comment_repo: TicketCommentRepository,
        uow: UnitOfWork,
    ):
        self.ticket_repo = ticket_repo
        self.comment_repo = comment_repo
        self.uow = uow

    def execute(self, input_dto: AddCommentInputDTO) -> TicketCommentOutputDTO:
        with self.uow:
            ticket = get_ticket_or_fail(self.ticket_repo, input_dto.ticket_id)
            comment = TicketCommentEntity.create(
                ticket_id=ticket.id,
                user_id=input_dto.user_id,
                body=input_dto.body,
            )

            recipients = resolve_recipients(
                ticket, comment.user_id, self.comment_repo.commenter_ids(ticket.id)
            )
            self.comment_repo.save(comment)

            self.uow.publish_event(
                TicketCommentAddedEvent(
                    aggregate_id=ticket.id,
                    project_id=ticket.project_id,
                    actor_id=comment.user_id,
                    recipient_ids=recipients,
                    comment_id=comment.id,
                )
            )

            return TicketCommentOutputDTO.from_entity(comment)


class ListTicketCommentsService:
    def __init__(self, ticket_repo: TicketRepository, comment_repo: TicketCommentRepository):
        self.ticket_repo = ticket_repo
        self.comment_repo = comment_repo

    def execute(self, ticket_id: str) -> List[TicketCommentOutputDTO]:
        ticket = get_ticket_or_fail(self.ticket_repo, ticket_id)
        return [
            TicketCommentOutputDTO.from_entity(c)
            for c in self.comment_repo.list_for_ticket(ticket.id)
        ]
