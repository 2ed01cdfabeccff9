"""
Status Transition Engine.

Decides whether a ticket may move to a status given the project's
optional workflow graph, and writes the matching history row.

Rules:
- no workflow: any status of the same project is allowed
- with a workflow: the target must be in transitions[current], or in
  initial_statuses when the ticket has no status yet
- a refused move raises InvalidTransitionError and writes nothing
"""

from typing import List, Optional

from src.core.shared.exceptions import (
    InvalidTransitionError,
    NotFoundError,
    ValidationError,
)
from src.core.projects.entities import TicketStatusEntity, WorkflowDefinition
from src.core.projects.ports import ProjectWorkflowRepository, TicketStatusRepository

from .entities import TicketEntity, TicketHistoryEntity
from .ports import TicketHistoryRepository


class StatusTransitionEngine:
    """
    Example:
        engine = StatusTransitionEngine(status_repo, workflow_repo, history_repo)
        engine.check(ticket.project_id, ticket.ticket_status_id, target_id)
        previous = ticket.move_to_status(target_id)
        ticket_repo.save(ticket)
        engine.record(ticket, previous, actor_id, note)
    """

    def __init__(
        self,
        status_repo: TicketStatusRepository,
        workflow_repo: ProjectWorkflowRepository,
        history_repo: Optional[TicketHistoryRepository] = None,
    ):
        self.status_repo = status_repo
        self.workflow_repo = workflow_repo
        self.history_repo = history_repo

    def load_definition(self, project_id: str) -> Optional[WorkflowDefinition]:
        """The project's definition, or None when no workflow is configured."""
        workflow = self.workflow_repo.for_project(project_id)
        if workflow is None:
            return None
        return workflow.definition

    def get_status_or_fail(self, project_id: str, status_id: str) -> TicketStatusEntity:
        """
        Raises:
            NotFoundError: If the status does not exist in this project
        """
        status = self.status_repo.get_by_id(status_id) if status_id else None
        if status is None or status.project_id != project_id:
            raise NotFoundError(
                "Ticket status not found in this project.",
                entity_type="TicketStatus",
                entity_id=status_id,
            )
        return status

    def check(
        self,
        project_id: str,
        from_status_id: Optional[str],
        to_status_id: str,
    ) -> TicketStatusEntity:
        """
        Validate a move without changing anything.

        Returns:
            The target status

        Raises:
            NotFoundError: Target status unknown or from another project
            InvalidTransitionError: The workflow does not allow the move
        """
        target = self.get_status_or_fail(project_id, to_status_id)
        definition = self.load_definition(project_id)
        if definition is None:
            return target

        if not definition.is_transition_allowed(from_status_id, target.id):
            allowed = definition.allowed_targets(from_status_id)
            raise InvalidTransitionError(
                self._refusal_message(from_status_id, target),
                current_status_id=from_status_id,
                attempted_status_id=target.id,
                allowed_status_ids=allowed,
            )
        return target

    def allowed_statuses(self, project_id: str, from_status_id: Optional[str]) -> List[TicketStatusEntity]:
        """Statuses a ticket in from_status_id may move to, ordered by sort_order."""
        statuses = self.status_repo.list_for_project(project_id)
        definition = self.load_definition(project_id)
        if definition is None:
            return [s for s in statuses if s.id != from_status_id]
        targets = definition.allowed_targets(from_status_id)
        return [s for s in statuses if s.id in targets]

    def default_status(self, project_id: str) -> TicketStatusEntity:
        """
        Status for a ticket created without one.

        First status by sort_order that the workflow accepts as initial.

        Raises:
            ValidationError: If the project has no usable status
        """
        definition = self.load_definition(project_id)
        for status in self.status_repo.list_for_project(project_id):
            if definition is None or definition.is_transition_allowed(None, status.id):
                return status
        raise ValidationError(
            "Project has no status a new ticket can start in.",
            field="ticket_status_id",
        )

    def record(
        self,
        ticket: TicketEntity,
        from_status_id: Optional[str],
        actor_id: Optional[str] = None,
        note: Optional[str] = None,
    ) -> TicketHistoryEntity:
        """Append the history row for the ticket's current status."""
        entry = TicketHistoryEntity(
            ticket_id=ticket.id,
            from_ticket_status_id=from_status_id,
            to_ticket_status_id=ticket.ticket_status_id,
            user_id=actor_id,
            note=note or None,
        )
        self.history_repo.append(entry)
        return entry

    def _refusal_message(self, from_status_id: Optional[str], target: TicketStatusEntity) -> str:
        if from_status_id is None:
            return f'Status "{target.name}" is not an initial status of the project workflow.'
        current = self.status_repo.get_by_id(from_status_id)
        current_name = current.name if current else from_status_id
        return (
            f'Transition from "{current_name}" to "{target.name}" '
            "is not allowed by the project workflow."
        )
