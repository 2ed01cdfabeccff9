"""
Unit tests of WorkflowDefinition (the allowed-transition graph).

Coverage:
- Empty definition allows no move
- Initial statuses gate tickets without a status
- One-hop transitions
- JSON shape (from_dict / to_dict)
"""

import pytest

from src.core.projects.entities import WorkflowDefinition


class TestEmptyDefinition:
    """A stored but empty graph has no edges and no initial status."""

    def test_default_is_empty(self):
        assert WorkflowDefinition().is_empty is True

    def test_from_none_is_empty(self):
        assert WorkflowDefinition.from_dict(None).is_empty is True

    def test_no_move_allowed(self):
        definition = WorkflowDefinition()

        assert definition.is_transition_allowed("a", "b") is False
        assert definition.is_transition_allowed(None, "b") is False
        assert definition.allowed_targets("a") == frozenset()


class TestTransitions:
    @pytest.fixture
    def definition(self):
        return WorkflowDefinition.from_dict({
            "initial_statuses": ["open"],
            "transitions": {
                "open": ["review"],
                "review": ["done", "open"],
            },
        })

    def test_listed_transition_allowed(self, definition):
        assert definition.is_transition_allowed("open", "review") is True

    def test_skipping_a_step_refused(self, definition):
        assert definition.is_transition_allowed("open", "done") is False

    def test_status_without_outgoing_edges_is_terminal(self, definition):
        assert definition.is_transition_allowed("done", "open") is False
        assert definition.allowed_targets("done") == frozenset()

    def test_initial_statuses_used_without_current_status(self, definition):
        """A ticket with no status may only start in an initial status."""
        assert definition.allowed_targets(None) == frozenset({"open"})
        assert definition.is_transition_allowed(None, "open") is True
        assert definition.is_transition_allowed(None, "review") is False

    def test_only_transitions_means_no_initial_status(self):
        """With transitions but no initial statuses, nothing can start."""
        definition = WorkflowDefinition.from_dict({"transitions": {"a": ["b"]}})

        assert definition.is_empty is False
        assert definition.is_transition_allowed(None, "a") is False

    def test_referenced_status_ids(self, definition):
        assert definition.referenced_status_ids() == frozenset({"open", "review", "done"})


class TestSerialization:
    def test_to_dict_is_sorted(self):
        definition = WorkflowDefinition(
            initial_statuses=frozenset({"b", "a"}),
            transitions={"z": {"y", "x"}, "a": {"b"}},
        )

        assert definition.to_dict() == {
            "initial_statuses": ["a", "b"],
            "transitions": {"a": ["b"], "z": ["x", "y"]},
        }

    def test_ids_are_stringified(self):
        definition = WorkflowDefinition.from_dict({
            "initial_statuses": [1],
            "transitions": {1: [2]},
        })

        assert definition.is_transition_allowed("1", "2") is True

    def test_definition_is_immutable(self):
        definition = WorkflowDefinition()

        with pytest.raises(Exception):
            definition.initial_statuses = frozenset({"x"})

    def test_equal_definitions_compare_equal(self):
        first = WorkflowDefinition.from_dict({"initial_statuses": ["a"], "transitions": {"a": ["b"]}})
        second = WorkflowDefinition.from_dict({"transitions": {"a": ["b"]}, "initial_statuses": ["a"]})

        assert first == second
