"""
Event Handlers - domain event processing.

Handlers run asynchronously in Celery workers when the CeleryEventPublisher
is active. They turn ticket events into per-user notifications; the core
has already computed who should hear about each change (recipient_ids).

Payload:
    event_data is DomainEvent.to_dict(): envelope fields plus "data",
    the event specific attributes.

Pattern:
    @shared_task(bind=True, ...)
    def handle_<event>(self, event_data: dict) -> None:
        ...
"""

import logging
from typing import Any, Dict, Iterable, List

from celery import shared_task

logger = logging.getLogger(__name__)


def _payload(event_data: Dict[str, Any]) -> Dict[str, Any]:
    return event_data.get('data') or {}


def _fan_out(user_ids: Iterable[str], message: str, ticket_id: str) -> List[str]:
    """Queue one notification per user; returns the ids notified."""
    notified = []
    for user_id in user_ids or ():
        if not user_id or user_id in notified:
            continue
        notify_user.delay(user_id=user_id, message=message, ticket_id=ticket_id)
        notified.append(user_id)
    return notified


# =============================================================================
# Event Handlers - Tickets
# =============================================================================

@shared_task(
    bind=True,
    max_retries=3,
    default_retry_delay=60,
    acks_late=True,
)
def handle_ticket_created(self, event_data: Dict[str, Any]) -> List[str]:
    """
    TicketCreatedEvent: tell the assignees about their new ticket.

    The creator is the actor and is never notified.
    """
    try:
        ticket_id = event_data.get('aggregate_id')
        data = _payload(event_data)
        actor_id = data.get('actor_id')

        logger.info(
            f"[HANDLER] TicketCreated: {data.get('uuid')} | "
            f"Creator: {actor_id} | Name: {data.get('name')}"
        )

        assignees = [u for u in data.get('assignee_ids') or [] if u != actor_id]
        return _fan_out(
            assignees,
            f"You were assigned to new ticket {data.get('uuid')}: {data.get('name')}",
            ticket_id,
        )

    except Exception as e:
        logger.error(f"Error in TicketCreated handler: {e}", exc_info=True)
        raise


@shared_task(
    bind=True,
    max_retries=3,
    default_retry_delay=60,
    acks_late=True,
)
def handle_ticket_updated(self, event_data: Dict[str, Any]) -> List[str]:
    try:
        ticket_id = event_data.get('aggregate_id')
        data = _payload(event_data)
        changed = ', '.join(data.get('changed_fields') or [])

        logger.info(f"[HANDLER] TicketUpdated: {ticket_id} | Fields: {changed}")

        return _fan_out(
            data.get('recipient_ids'),
            f"Ticket updated ({changed})",
            ticket_id,
        )

    except Exception as e:
        logger.error(f"Error in TicketUpdated handler: {e}", exc_info=True)
        raise


@shared_task(
    bind=True,
    max_retries=3,
    default_retry_delay=60,
    acks_late=True,
)
def handle_ticket_status_changed(self, event_data: Dict[str, Any]) -> List[str]:
    """
    TicketStatusChangedEvent: notify creator, assignees and commenters.
    """
    try:
        ticket_id = event_data.get('aggregate_id')
        data = _payload(event_data)

        logger.info(
            f"[HANDLER] TicketStatusChanged: {ticket_id} | "
            f"{data.get('from_status_id')} -> {data.get('to_status_id')}"
        )

        message = "Ticket status changed"
        if data.get('note'):
            message = f"{message}: {data['note']}"
        return _fan_out(data.get('recipient_ids'), message, ticket_id)

    except Exception as e:
        logger.error(f"Error in TicketStatusChanged handler: {e}", exc_info=True)
        raise


@shared_task(
    bind=True,
    max_retries=3,
    default_retry_delay=60,
    acks_late=True,
)
def handle_ticket_assignees_changed(self, event_data: Dict[str, Any]) -> List[str]:
    """
    TicketAssigneesChangedEvent: newly added users are told they were
    assigned; the other recipients are told the assignees changed.
    """
    try:
        ticket_id = event_data.get('aggregate_id')
        data = _payload(event_data)
        actor_id = data.get('actor_id')

        logger.info(
            f"[HANDLER] TicketAssigneesChanged: {ticket_id} | "
            f"Added: {data.get('added_ids')} | Removed: {data.get('removed_ids')}"
        )

        added = [u for u in data.get('added_ids') or [] if u != actor_id]
        others = [u for u in data.get('recipient_ids') or [] if u not in added]
        notified = _fan_out(added, "You were assigned to a ticket", ticket_id)
        return notified + _fan_out(others, "Ticket assignees changed", ticket_id)

    except Exception as e:
        logger.error(f"Error in TicketAssigneesChanged handler: {e}", exc_info=True)
        raise


@shared_task(
    bind=True,
    max_retries=3,
    default_retry_delay=60,
    acks_late=True,
)
def handle_ticket_deleted(self, event_data: Dict[str, Any]) -> List[str]:
    try:
        ticket_id = event_data.get('aggregate_id')
        data = _payload(event_data)

        logger.info(f"[HANDLER] TicketDeleted: {data.get('uuid')} | By: {data.get('actor_id')}")

        return _fan_out(
            data.get('recipient_ids'),
            f"Ticket {data.get('uuid')} was deleted",
            ticket_id,
        )

    except Exception as e:
        logger.error(f"Error in TicketDeleted handler: {e}", exc_info=True)
        raise


@shared_task(
    bind=True,
    max_retries=3,
    default_retry_delay=60,
    acks_late=True,
)
def handle_ticket_comment_added(self, event_data: Dict[str, Any]) -> List[str]:
    try:
        ticket_id = event_data.get('aggregate_id')
        data = _payload(event_data)

        logger.info(f"[HANDLER] TicketCommentAdded: {ticket_id} | By: {data.get('actor_id')}")

        return _fan_out(data.get('recipient_ids'), "New comment on a ticket", ticket_id)

    except Exception as e:
        logger.error(f"Error in TicketCommentAdded handler: {e}", exc_info=True)
        raise


# =============================================================================
# Event Dispatcher (Router)
# =============================================================================

EVENT_HANDLERS = {
    'TicketCreatedEvent': handle_ticket_created,
    'TicketUpdatedEvent': handle_ticket_updated,
    'TicketStatusChangedEvent': handle_ticket_status_changed,
    'TicketAssigneesChangedEvent': handle_ticket_assignees_changed,
    'TicketDeletedEvent': handle_ticket_deleted,
    'TicketCommentAddedEvent': handle_ticket_comment_added,
}


@shared_task(bind=True, max_retries=5, default_retry_delay=30)
def dispatch_domain_event(self, event_type: str, event_data: Dict[str, Any]) -> bool:
    """
    Central entry point for every published event.

    Events without a handler (project events, dependency events) are
    only logged.

    Returns:
        True when a handler was queued
    """
    handler = EVENT_HANDLERS.get(event_type)

    if handler is None:
        logger.debug(f"[DISPATCHER] No handler for {event_type}")
        return False

    logger.info(f"[DISPATCHER] Routing {event_type} to {handler.name}")
    handler.delay(event_data)
    return True


# =============================================================================
# Notification Tasks
# =============================================================================

@shared_task(bind=True, max_retries=3, default_retry_delay=120)
def notify_user(
    self,
    user_id: str,
    message: str,
    ticket_id: str = None,
    channel: str = 'email',
) -> None:
    """
    Deliver a notification to a user.

    Delivery itself belongs to the surrounding system; this task is the
    hook it plugs into.
    """
    logger.info(f"[NOTIFICATION] {channel.upper()} to {user_id}: {message} (ticket {ticket_id})")
