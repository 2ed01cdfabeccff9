"""
Unit tests of the Tickets entities.

Coverage:
- TicketEntity.create validations
- Status moves and assignee replacement
- Ticket codes
- Recipient resolution
- Enumerations parsing
"""

from datetime import date

import pytest

from src.core.shared.exceptions import ValidationError
from src.core.tickets.entities import (
    DependencyType,
    IssueType,
    TicketCommentEntity,
    TicketDependencyEntity,
    TicketEntity,
    coerce_date,
    generate_ticket_code,
    normalize_user_ids,
    resolve_recipients,
)


@pytest.fixture
def ticket():
    return TicketEntity.create(
        project_id="project-1",
        name="Login page returns 500",
        created_by="creator",
        issue_type="Bug",
        assignee_ids=["alice", "bob"],
    )


class TestTicketCreation:
    def test_create_valid_ticket(self, ticket):
        assert ticket.name == "Login page returns 500"
        assert ticket.issue_type is IssueType.BUG
        assert ticket.assignee_ids == ["alice", "bob"]
        assert ticket.ticket_status_id is None
        assert ticket.is_subtask is False

    def test_name_is_stripped(self):
        ticket = TicketEntity.create(project_id="p", name="  Title  ", created_by="u")

        assert ticket.name == "Title"

    @pytest.mark.parametrize("name", ["", "   ", None])
    def test_name_required(self, name):
        with pytest.raises(ValidationError) as exc_info:
            TicketEntity.create(project_id="p", name=name, created_by="u")

        assert exc_info.value.field == "name"

    def test_name_too_long(self):
        with pytest.raises(ValidationError):
            TicketEntity.create(project_id="p", name="x" * 256, created_by="u")

    def test_creator_required(self):
        with pytest.raises(ValidationError) as exc_info:
            TicketEntity.create(project_id="p", name="Title")

        assert exc_info.value.field == "created_by"

    def test_due_date_before_start_date(self):
        with pytest.raises(ValidationError) as exc_info:
            TicketEntity.create(
                project_id="p",
                name="Title",
                created_by="u",
                start_date="2026-03-10",
                due_date="2026-03-01",
            )

        assert exc_info.value.field == "due_date"

    def test_dates_from_iso_strings(self):
        ticket = TicketEntity.create(
            project_id="p",
            name="Title",
            created_by="u",
            start_date="2026-03-01",
            due_date="2026-03-10T12:00:00",
        )

        assert ticket.start_date == date(2026, 3, 1)
        assert ticket.due_date == date(2026, 3, 10)

    def test_invalid_issue_type(self):
        with pytest.raises(ValidationError) as exc_info:
            TicketEntity.create(project_id="p", name="Title", created_by="u", issue_type="Chore")

        assert exc_info.value.field == "issue_type"

    @pytest.mark.parametrize("field_name, value", [
        ("name", 123),
        ("name", ["Title"]),
        ("description", 5),
        ("issue_type", 1),
    ])
    def test_non_text_values_refused(self, field_name, value):
        kwargs = {"project_id": "p", "name": "Title", "created_by": "u", field_name: value}

        with pytest.raises(ValidationError) as exc_info:
            TicketEntity.create(**kwargs)

        assert exc_info.value.field == field_name


class TestTicketBehaviour:
    def test_move_to_status_returns_previous(self, ticket):
        ticket.ticket_status_id = "todo"

        previous = ticket.move_to_status("doing")

        assert previous == "todo"
        assert ticket.ticket_status_id == "doing"

    def test_replace_assignees_reports_changes(self, ticket):
        added, removed = ticket.replace_assignees(["bob", "carol", "carol"])

        assert added == ["carol"]
        assert removed == ["alice"]
        assert ticket.assignee_ids == ["bob", "carol"]

    def test_replace_with_same_set_changes_nothing(self, ticket):
        before = ticket.updated_at

        added, removed = ticket.replace_assignees(["alice", "bob"])

        assert (added, removed) == ([], [])
        assert ticket.updated_at == before

    def test_equality_by_id(self, ticket):
        copy = TicketEntity(id=ticket.id, name="Other")

        assert copy == ticket
        assert hash(copy) == hash(ticket)


class TestHelpers:
    def test_ticket_code_format(self):
        code = generate_ticket_code("web")

        head, tail = code.split("-")
        assert head == "WEB"
        assert len(tail) == 6
        assert tail.isalnum() and tail.upper() == tail

    def test_ticket_code_default_prefix(self):
        assert generate_ticket_code("").startswith("TKT-")

    def test_normalize_user_ids(self):
        assert normalize_user_ids([1, "1", " ", None, "2"]) == ["1", "2"]

    def test_coerce_date_rejects_garbage(self):
        with pytest.raises(ValidationError):
            coerce_date("next week", "due_date")

    def test_recipients_exclude_actor_and_duplicates(self, ticket):
        recipients = resolve_recipients(ticket, "alice", ["bob", "dave", "creator"])

        assert recipients == ["creator", "bob", "dave"]

    def test_recipients_for_creator_acting(self, ticket):
        assert resolve_recipients(ticket, "creator") == ["alice", "bob"]


class TestOtherEntities:
    def test_dependency_type_parsing(self):
        assert DependencyType.from_string("BLOCKS") is DependencyType.BLOCKS
        with pytest.raises(ValidationError):
            DependencyType.from_string("duplicates")

    def test_blocking_dependency(self):
        dependency = TicketDependencyEntity(ticket_id="a", depends_on_ticket_id="b")

        assert dependency.is_blocking is True

    def test_issue_type_by_name_or_value(self):
        assert IssueType.from_string("epic") is IssueType.EPIC
        assert IssueType.from_string("STORY") is IssueType.STORY

    def test_comment_requires_body(self):
        with pytest.raises(ValidationError) as exc_info:
            TicketCommentEntity.create(ticket_id="t", user_id="u", body="  ")

        assert exc_info.value.field == "body"

    def test_comment_body_must_be_text(self):
        with pytest.raises(ValidationError) as exc_info:
            TicketCommentEntity.create(ticket_id="t", user_id="u", body=42)

        assert exc_info.value.field == "body"
