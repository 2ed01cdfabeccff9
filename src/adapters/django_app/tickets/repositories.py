"""
Django repositories for ticket persistence.

Implement the interfaces (Ports) defined in src/core/tickets/ports.py.
They are DRIVEN ADAPTERS: the Core calls them in response to operations.

Principles:
- Repositories hold no business logic
- Mappers do the conversions
- Queries avoid N+1 (assignees are prefetched)
"""

from typing import Any, Dict, List, Optional
import logging

from django.db.models import Max

from src.core.tickets.entities import (
    DependencyType,
    TicketCommentEntity,
    TicketDependencyEntity,
    TicketEntity,
    TicketHistoryEntity,
)

from ..shared.repository import BaseRepository
from .mappers import (
    TicketCommentMapper,
    TicketDependencyMapper,
    TicketHistoryMapper,
    TicketMapper,
)
from .models import (
    TicketAssigneeModel,
    TicketCommentModel,
    TicketCustomValueModel,
    TicketDependencyModel,
    TicketHistoryModel,
    TicketModel,
)

logger = logging.getLogger(__name__)


class DjangoTicketRepository(BaseRepository[TicketEntity, TicketModel]):
    """
    Django implementation of TicketRepository.

    Also serves as the StatusUsageChecker of the Projects domain through
    exists_with_status().

    Example:
        repo = DjangoTicketRepository()
        repo.save(ticket)
        ticket = repo.get_for_update(ticket.id)
    """

    model_class = TicketModel
    prefetch_related_fields = ['assignees']

    def to_entity(self, model: TicketModel) -> TicketEntity:
        return TicketMapper.to_entity(model)

    def to_model(self, entity: TicketEntity) -> TicketModel:
        return TicketMapper.to_model(entity)

    def save(self, ticket: TicketEntity) -> None:
        """Upsert the ticket row, then make the assignee rows match assignee_ids."""
        super().save(ticket)
        self._sync_assignees(ticket)

    def _sync_assignees(self, ticket: TicketEntity) -> None:
        TicketAssigneeModel.objects.filter(ticket_id=ticket.id).exclude(
            user_id__in=ticket.assignee_ids
        ).delete()

        for position, user_id in enumerate(ticket.assignee_ids):
            TicketAssigneeModel.objects.update_or_create(
                ticket_id=ticket.id,
                user_id=user_id,
                defaults={'position': position},
            )

    def get_for_update(self, ticket_id: str) -> Optional[TicketEntity]:
        """
        Lock the ticket row until the surrounding transaction ends.

        Serializes concurrent status changes of the same ticket so each
        history row records the status actually replaced.
        """
        model = (
            self._get_base_queryset()
            .select_for_update()
            .filter(pk=ticket_id)
            .first()
        )
        return self.to_entity(model) if model else None

    def delete(self, ticket_id: str) -> None:
        super().delete(ticket_id)
        logger.info(f"Ticket deleted: {ticket_id}")

    def list_for_project(
        self,
        project_id: str,
        offset: int = 0,
        limit: Optional[int] = None,
    ) -> List[TicketEntity]:
        qs = self._get_base_queryset().filter(project_id=project_id).order_by('-created_at')
        if limit is None:
            qs = qs[offset:]
        else:
            qs = qs[offset:offset + limit]
        return self._to_entities(qs)

    def count_for_project(self, project_id: str) -> int:
        return TicketModel.objects.filter(project_id=project_id).count()

    def has_children(self, ticket_id: str) -> bool:
        return TicketModel.objects.filter(parent_id=ticket_id).exists()

    def exists_with_status(self, status_id: str) -> bool:
        return TicketModel.objects.filter(ticket_status_id=status_id).exists()

    def code_exists(self, code: str) -> bool:
        return TicketModel.objects.filter(uuid=code).exists()


class DjangoTicketHistoryRepository:
    """Append-only: rows are inserted, never updated."""

    def append(self, entry: TicketHistoryEntity) -> None:
        model = TicketHistoryMapper.to_model(entry)
        last = (
            TicketHistoryModel.objects.filter(ticket_id=entry.ticket_id)
            .aggregate(last=Max('sequence'))['last']
        )
        model.sequence = 0 if last is None else last + 1
        model.save(force_insert=True)
        logger.debug(
            f"History appended for ticket {entry.ticket_id}: "
            f"{entry.from_ticket_status_id} -> {entry.to_ticket_status_id}"
        )

    def list_for_ticket(self, ticket_id: str) -> List[TicketHistoryEntity]:
        qs = TicketHistoryModel.objects.filter(ticket_id=ticket_id).order_by('sequence')
        return [TicketHistoryMapper.to_entity(m) for m in qs]

    def delete_for_ticket(self, ticket_id: str) -> None:
        TicketHistoryModel.objects.filter(ticket_id=ticket_id).delete()


class DjangoTicketDependencyRepository:
    def add(self, dependency: TicketDependencyEntity) -> None:
        TicketDependencyMapper.to_model(dependency).save(force_insert=True)

    def get_by_id(self, dependency_id: str) -> Optional[TicketDependencyEntity]:
        model = TicketDependencyModel.objects.filter(pk=dependency_id).first()
        return TicketDependencyMapper.to_entity(model) if model else None

    def remove(self, dependency_id: str) -> None:
        TicketDependencyModel.objects.filter(pk=dependency_id).delete()

    def exists(self, ticket_id: str, depends_on_ticket_id: str, type: DependencyType) -> bool:
        return TicketDependencyModel.objects.filter(
            ticket_id=ticket_id,
            depends_on_ticket_id=depends_on_ticket_id,
            type=type.value,
        ).exists()

    def has_blocking_dependents(self, ticket_id: str) -> bool:
        return TicketDependencyModel.objects.filter(
            depends_on_ticket_id=ticket_id,
            type=DependencyType.BLOCKS.value,
        ).exists()

    def list_for_ticket(self, ticket_id: str) -> List[TicketDependencyEntity]:
        qs = (
            TicketDependencyModel.objects.filter(ticket_id=ticket_id)
            | TicketDependencyModel.objects.filter(depends_on_ticket_id=ticket_id)
        ).order_by('created_at')
        return [TicketDependencyMapper.to_entity(m) for m in qs]

    def delete_for_ticket(self, ticket_id: str) -> None:
        TicketDependencyModel.objects.filter(ticket_id=ticket_id).delete()
        TicketDependencyModel.objects.filter(depends_on_ticket_id=ticket_id).delete()


class DjangoTicketCustomValueRepository:
    """Values keyed by custom field id."""

    def sync_for_ticket(self, ticket_id: str, values: Dict[str, Any]) -> None:
        TicketCustomValueModel.objects.filter(ticket_id=ticket_id).exclude(
            custom_field_id__in=list(values)
        ).delete()

        for field_id, value in values.items():
            TicketCustomValueModel.objects.update_or_create(
                ticket_id=ticket_id,
                custom_field_id=field_id,
                defaults={'value': value},
            )

    def list_for_ticket(self, ticket_id: str) -> Dict[str, Any]:
        rows = TicketCustomValueModel.objects.filter(ticket_id=ticket_id).values_list(
            'custom_field_id', 'value'
        )
        return {field_id: value for field_id, value in rows}

    def delete_for_ticket(self, ticket_id: str) -> None:
        TicketCustomValueModel.objects.filter(ticket_id=ticket_id).delete()


class DjangoTicketCommentRepository:
    def save(self, comment: TicketCommentEntity) -> None:
        model = TicketCommentMapper.to_model(comment)
        TicketCommentModel.objects.update_or_create(
            pk=model.pk,
            defaults={
                'ticket_id': model.ticket_id,
                'user_id': model.user_id,
                'body': model.body,
                'created_at': model.created_at,
                'updated_at': model.updated_at,
            },
        )

    def list_for_ticket(self, ticket_id: str) -> List[TicketCommentEntity]:
        qs = TicketCommentModel.objects.filter(ticket_id=ticket_id).order_by('created_at')
        return [TicketCommentMapper.to_entity(m) for m in qs]

    def commenter_ids(self, ticket_id: str) -> List[str]:
        user_ids = (
            TicketCommentModel.objects.filter(ticket_id=ticket_id)
            .order_by('created_at')
            .values_list('user_id', flat=True)
        )
        result = []
        for user_id in user_ids:
            if user_id not in result:
                result.append(user_id)
        return result

    def delete_for_ticket(self, ticket_id: str) -> None:
        TicketCommentModel.objects.filter(ticket_id=ticket_id).delete()
