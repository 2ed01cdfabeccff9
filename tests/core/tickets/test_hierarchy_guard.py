"""
Unit tests of TicketHierarchyGuard (parent/child rules).
"""

import pytest

from src.core.shared.exceptions import (
    CircularReferenceError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from src.core.tickets.hierarchy import TicketHierarchyGuard


@pytest.fixture
def guard(ticket_repo):
    return TicketHierarchyGuard(ticket_repo)


@pytest.fixture
def chain(make_ticket):
    """epic <- story <- task"""
    epic = make_ticket(name="Epic")
    story = make_ticket(name="Story", parent=epic)
    task = make_ticket(name="Task", parent=story)
    return epic, story, task


class TestValidateParent:
    def test_valid_parent_returned(self, guard, chain, project):
        epic, story, _ = chain

        assert guard.validate_parent(epic.id, project.id, story.id) == epic

    def test_new_ticket_skips_cycle_check(self, guard, chain, project):
        _, _, task = chain

        assert guard.validate_parent(task.id, project.id) == task

    def test_self_parent_refused(self, guard, chain, project):
        epic, _, _ = chain

        with pytest.raises(ValidationError) as exc_info:
            guard.validate_parent(epic.id, project.id, epic.id)

        assert exc_info.value.message == "A ticket cannot be its own parent."

    def test_missing_parent(self, guard, project):
        with pytest.raises(NotFoundError) as exc_info:
            guard.validate_parent("missing", project.id)

        assert exc_info.value.message == "Parent ticket not found."

    def test_parent_in_other_project(self, guard, make_ticket, project, other_project,
                                     foreign_status):
        outsider = make_ticket(name="Outsider", project_entity=other_project,
                               status=foreign_status)

        with pytest.raises(ValidationError) as exc_info:
            guard.validate_parent(outsider.id, project.id)

        assert exc_info.value.field == "parent_id"

    def test_descendant_as_parent_is_circular(self, guard, chain, project):
        epic, _, task = chain

        with pytest.raises(CircularReferenceError) as exc_info:
            guard.validate_parent(task.id, project.id, epic.id)

        assert isinstance(exc_info.value, ConflictError)
        assert exc_info.value.code == "CIRCULAR_REFERENCE"
        assert exc_info.value.parent_id == task.id

    def test_walk_stops_on_corrupt_loop(self, guard, ticket_repo, make_ticket, project):
        """A loop already stored in the data does not hang the walk."""
        first = make_ticket(name="First")
        second = make_ticket(name="Second", parent=first)
        first.parent_id = second.id
        ticket_repo.save(first)
        newcomer = make_ticket(name="Newcomer")

        assert guard.chain_contains(first, newcomer.id) is False
