"""
Tests of the Celery event handlers and the dispatcher.

Tasks are called directly (synchronously); notify_user is patched so
the notifications fanned out by each handler can be inspected.
"""

from unittest.mock import patch

import pytest

from src.adapters.django_app.events import handlers
from src.adapters.django_app.events.publishers import CeleryEventPublisher
from src.core.projects.events import ProjectCreatedEvent
from src.core.tickets.events import (
    TicketAssigneesChangedEvent,
    TicketCommentAddedEvent,
    TicketCreatedEvent,
    TicketDeletedEvent,
    TicketStatusChangedEvent,
    TicketUpdatedEvent,
)


@pytest.fixture
def notify():
    """Patched notify_user task."""
    with patch("src.adapters.django_app.events.handlers.notify_user") as mock_task:
        yield mock_task


def notified_users(notify):
    return [c.kwargs["user_id"] for c in notify.delay.call_args_list]


# =============================================================================
# Handlers
# =============================================================================

class TestTicketHandlers:
    def test_created_notifies_assignees_but_not_creator(self, notify):
        event = TicketCreatedEvent(
            aggregate_id="ticket-1",
            project_id="project-1",
            actor_id="creator",
            uuid="WEB-ABC123",
            name="Checkout broken",
            ticket_status_id="todo",
            assignee_ids=["alice", "creator", "bob"],
        )

        result = handlers.handle_ticket_created(event.to_dict())

        assert result == ["alice", "bob"]
        assert notified_users(notify) == ["alice", "bob"]
        assert notify.delay.call_args_list[0].kwargs["ticket_id"] == "ticket-1"
        assert "WEB-ABC123" in notify.delay.call_args_list[0].kwargs["message"]

    def test_status_changed_notifies_recipients(self, notify):
        event = TicketStatusChangedEvent(
            aggregate_id="ticket-1",
            actor_id="alice",
            recipient_ids=["creator", "dave", "creator"],
            from_status_id="todo",
            to_status_id="doing",
            note="Picked up",
        )

        result = handlers.handle_ticket_status_changed(event.to_dict())

        assert result == ["creator", "dave"]
        assert notify.delay.call_args_list[0].kwargs["message"] == "Ticket status changed: Picked up"

    def test_updated_notifies_recipients(self, notify):
        event = TicketUpdatedEvent(
            aggregate_id="ticket-1",
            recipient_ids=["creator"],
            changed_fields=["name", "due_date"],
        )

        assert handlers.handle_ticket_updated(event.to_dict()) == ["creator"]
        assert "name, due_date" in notify.delay.call_args.kwargs["message"]

    def test_assignees_changed_notifies_added_and_recipients(self, notify):
        event = TicketAssigneesChangedEvent(
            aggregate_id="ticket-1",
            actor_id="lead",
            recipient_ids=["creator", "alice", "carol"],
            added_ids=["carol", "lead"],
            removed_ids=["alice"],
        )

        result = handlers.handle_ticket_assignees_changed(event.to_dict())

        assert result == ["carol", "creator", "alice"]
        messages = {c.kwargs["user_id"]: c.kwargs["message"] for c in notify.delay.call_args_list}
        assert messages == {
            "carol": "You were assigned to a ticket",
            "creator": "Ticket assignees changed",
            "alice": "Ticket assignees changed",
        }

    def test_deleted_and_commented(self, notify):
        deleted = TicketDeletedEvent(aggregate_id="ticket-1", recipient_ids=["creator"],
                                     uuid="WEB-ABC123", name="Gone")
        commented = TicketCommentAddedEvent(aggregate_id="ticket-2", recipient_ids=["alice"],
                                            comment_id="c-1")

        assert handlers.handle_ticket_deleted(deleted.to_dict()) == ["creator"]
        assert handlers.handle_ticket_comment_added(commented.to_dict()) == ["alice"]
        assert notified_users(notify) == ["creator", "alice"]

    def test_empty_recipients(self, notify):
        event = TicketUpdatedEvent(aggregate_id="ticket-1", changed_fields=["name"])

        assert handlers.handle_ticket_updated(event.to_dict()) == []
        notify.delay.assert_not_called()


# =============================================================================
# Dispatcher
# =============================================================================

class TestDispatcher:
    def test_routes_known_event(self):
        payload = TicketUpdatedEvent(aggregate_id="ticket-1").to_dict()

        with patch.object(handlers.handle_ticket_updated, "delay") as delay:
            routed = handlers.dispatch_domain_event("TicketUpdatedEvent", payload)

        assert routed is True
        delay.assert_called_once_with(payload)

    def test_ignores_event_without_handler(self):
        payload = ProjectCreatedEvent(aggregate_id="project-1").to_dict()

        assert handlers.dispatch_domain_event("ProjectCreatedEvent", payload) is False

    def test_every_ticket_event_has_a_handler(self):
        assert set(handlers.EVENT_HANDLERS) == {
            "TicketCreatedEvent",
            "TicketUpdatedEvent",
            "TicketStatusChangedEvent",
            "TicketAssigneesChangedEvent",
            "TicketDeletedEvent",
            "TicketCommentAddedEvent",
        }


class TestCeleryPipeline:
    """Publisher -> dispatcher -> handler -> notify_user, eagerly."""

    def test_published_event_reaches_notifications(self, notify):
        event = TicketCommentAddedEvent(
            aggregate_id="ticket-1",
            actor_id="alice",
            recipient_ids=["creator", "bob"],
            comment_id="c-1",
        )

        CeleryEventPublisher(also_log=False).publish(event)

        assert notified_users(notify) == ["creator", "bob"]

    def test_broker_failure_is_logged(self):
        event = TicketUpdatedEvent(aggregate_id="ticket-1")

        with patch.object(handlers.dispatch_domain_event, "delay",
                          side_effect=ConnectionError("no broker")), \
                patch("src.adapters.django_app.events.publishers.logger") as mock_logger:
            CeleryEventPublisher(also_log=False).publish(event)

        assert mock_logger.error.called
