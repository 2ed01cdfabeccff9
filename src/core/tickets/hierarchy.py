"""
Parent/child guard for tickets.

Tickets form a forest per project: a parent must live in the same
project, a ticket is never its own parent, and following parent_id
upward never comes back to the starting ticket.
"""

from typing import Optional

from src.core.shared.exceptions import (
    CircularReferenceError,
    NotFoundError,
    ValidationError,
)

from .entities import TicketEntity
from .ports import TicketRepository


class TicketHierarchyGuard:
    """
    Validates a proposed parent for a new or existing ticket.

    The same routine serves create (ticket_id is None) and update.

    Example:
        guard = TicketHierarchyGuard(ticket_repo)
        guard.validate_parent(parent_id="...", project_id=ticket.project_id, ticket_id=ticket.id)
    """

    def __init__(self, ticket_repo: TicketRepository):
        self.ticket_repo = ticket_repo

    def validate_parent(
        self,
        parent_id: str,
        project_id: str,
        ticket_id: Optional[str] = None,
    ) -> TicketEntity:
        """
        Returns:
            The parent ticket

        Raises:
            ValidationError: Self reference or parent in another project
            NotFoundError: If the parent does not exist
            CircularReferenceError: If the parent chain reaches ticket_id
        """
        if ticket_id is not None and parent_id == ticket_id:
            raise ValidationError("A ticket cannot be its own parent.", field="parent_id")

        parent = self.ticket_repo.get_by_id(parent_id)
        if parent is None:
            raise NotFoundError(
                "Parent ticket not found.",
                entity_type="Ticket",
                entity_id=parent_id,
            )

        if parent.project_id != project_id:
            raise ValidationError(
                "Parent ticket must belong to the same project.",
                field="parent_id",
            )

        if ticket_id is not None and self.chain_contains(parent, ticket_id):
            raise CircularReferenceError(ticket_id=ticket_id, parent_id=parent_id)

        return parent

    def chain_contains(self, start: TicketEntity, ticket_id: str) -> bool:
        """
        Walk up from `start` looking for `ticket_id`.

        The walk is bounded by the number of tickets in the project, so
        data that already holds a loop cannot make it spin forever.
        """
        limit = self.ticket_repo.count_for_project(start.project_id)
        current = start
        steps = 0
        while current is not None and steps <= limit:
            if current.id == ticket_id:
                return True
            if current.parent_id is None:
                return False
            current = self.ticket_repo.get_by_id(current.parent_id)
            steps += 1
        return False
