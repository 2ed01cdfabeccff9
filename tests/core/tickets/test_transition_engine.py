"""
Unit tests of StatusTransitionEngine.

Coverage:
- Moves without a workflow
- Moves restricted by a workflow graph
- A stored empty workflow refuses every move
- Initial statuses and the default status of new tickets
- Allowed statuses listing
- History rows
"""

import pytest

from src.core.shared.exceptions import (
    InvalidTransitionError,
    NotFoundError,
    ValidationError,
)
from src.core.tickets.transitions import StatusTransitionEngine


@pytest.fixture
def engine(status_repo, workflow_repo, history_repo):
    return StatusTransitionEngine(status_repo, workflow_repo, history_repo)


class TestWithoutWorkflow:
    def test_any_project_status_allowed(self, engine, project, statuses):
        target = engine.check(project.id, statuses["todo"].id, statuses["done"].id)

        assert target == statuses["done"]

    def test_status_of_another_project_not_found(self, engine, project, statuses, foreign_status):
        with pytest.raises(NotFoundError) as exc_info:
            engine.check(project.id, statuses["todo"].id, foreign_status.id)

        assert exc_info.value.entity_id == foreign_status.id

    def test_unknown_status_not_found(self, engine, project, statuses):
        with pytest.raises(NotFoundError):
            engine.check(project.id, statuses["todo"].id, "missing")

    def test_allowed_statuses_are_all_others(self, engine, project, statuses):
        allowed = engine.allowed_statuses(project.id, statuses["doing"].id)

        assert [s.name for s in allowed] == ["To Do", "Review", "Done"]

    def test_default_status_is_first_by_sort_order(self, engine, project, statuses):
        assert engine.default_status(project.id) == statuses["todo"]


class TestWithWorkflow:
    @pytest.fixture(autouse=True)
    def workflow(self, set_workflow, statuses):
        """todo -> doing -> review -> (done | doing); new tickets start in todo or doing."""
        return set_workflow(
            initial=[statuses["todo"], statuses["doing"]],
            transitions={
                statuses["todo"]: [statuses["doing"]],
                statuses["doing"]: [statuses["review"]],
                statuses["review"]: [statuses["done"], statuses["doing"]],
            },
        )

    def test_listed_move_allowed(self, engine, project, statuses):
        engine.check(project.id, statuses["doing"].id, statuses["review"].id)

    def test_unlisted_move_refused(self, engine, project, statuses):
        with pytest.raises(InvalidTransitionError) as exc_info:
            engine.check(project.id, statuses["todo"].id, statuses["done"].id)

        error = exc_info.value
        assert error.current_status_id == statuses["todo"].id
        assert error.attempted_status_id == statuses["done"].id
        assert error.allowed_status_ids == [statuses["doing"].id]
        assert error.message == (
            'Transition from "To Do" to "Done" is not allowed by the project workflow.'
        )

    def test_terminal_status_has_no_moves(self, engine, project, statuses):
        assert engine.allowed_statuses(project.id, statuses["done"].id) == []

    def test_allowed_statuses_follow_graph(self, engine, project, statuses):
        allowed = engine.allowed_statuses(project.id, statuses["review"].id)

        assert [s.name for s in allowed] == ["In Progress", "Done"]

    def test_new_ticket_must_start_in_initial_status(self, engine, project, statuses):
        with pytest.raises(InvalidTransitionError) as exc_info:
            engine.check(project.id, None, statuses["review"].id)

        assert exc_info.value.message == (
            'Status "Review" is not an initial status of the project workflow.'
        )

    def test_default_status_respects_initial_statuses(self, engine, project, statuses,
                                                      set_workflow):
        set_workflow(initial=[statuses["review"]])

        assert engine.default_status(project.id) == statuses["review"]

    def test_no_initial_status_means_no_default(self, engine, project, statuses, set_workflow):
        set_workflow(transitions={statuses["todo"]: [statuses["doing"]]})

        with pytest.raises(ValidationError) as exc_info:
            engine.default_status(project.id)

        assert exc_info.value.field == "ticket_status_id"

    def test_refusal_to_dict(self, engine, project, statuses):
        with pytest.raises(InvalidTransitionError) as exc_info:
            engine.check(project.id, statuses["todo"].id, statuses["review"].id)

        payload = exc_info.value.to_dict()
        assert payload["error"] == "INVALID_TRANSITION"
        assert payload["allowed_status_ids"] == [statuses["doing"].id]


class TestEmptyWorkflow:
    """A configured workflow with no edges refuses every move."""

    @pytest.fixture(autouse=True)
    def workflow(self, set_workflow):
        return set_workflow()

    def test_move_refused(self, engine, project, statuses, workflow_repo):
        assert workflow_repo.for_project(project.id) is not None

        with pytest.raises(InvalidTransitionError) as exc_info:
            engine.check(project.id, statuses["todo"].id, statuses["done"].id)

        assert exc_info.value.allowed_status_ids == []

    def test_no_allowed_statuses(self, engine, project, statuses):
        assert engine.allowed_statuses(project.id, statuses["todo"].id) == []

    def test_no_default_status(self, engine, project, statuses):
        with pytest.raises(ValidationError):
            engine.default_status(project.id)


class TestRecord:
    def test_record_appends_history(self, engine, history_repo, make_ticket, statuses):
        ticket = make_ticket(status=statuses["doing"])

        entry = engine.record(ticket, statuses["todo"].id, actor_id="alice", note="")

        assert history_repo.list_for_ticket(ticket.id) == [entry]
        assert entry.from_ticket_status_id == statuses["todo"].id
        assert entry.to_ticket_status_id == statuses["doing"].id
        assert entry.user_id == "alice"
        assert entry.note is None
