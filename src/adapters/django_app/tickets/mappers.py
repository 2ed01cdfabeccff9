"""
Mappers between Tickets entities (Core) and models (Django).

Responsibilities:
- TicketEntity <-> TicketModel (assignee rows are read from the prefetch)
- TicketHistoryEntity <-> TicketHistoryModel
- TicketDependencyEntity <-> TicketDependencyModel
- TicketCommentEntity <-> TicketCommentModel

Mappers are stateless and hold no business logic.
"""

from typing import List

from src.core.tickets.entities import (
    DependencyType,
    IssueType,
    TicketCommentEntity,
    TicketDependencyEntity,
    TicketEntity,
    TicketHistoryEntity,
)

from .models import (
    TicketCommentModel,
    TicketDependencyModel,
    TicketHistoryModel,
    TicketModel,
)


class TicketMapper:
    """
    Conversion between TicketEntity and TicketModel.

    to_model() does not touch assignees: the repository syncs the
    ticket_assignees rows itself after saving the ticket row.
    """

    @staticmethod
    def to_model(entity: TicketEntity) -> TicketModel:
        """
        Build an unsaved TicketModel.

        Note:
            Does not call .save(); the Repository does that
        """
        return TicketModel(
            id=entity.id,
            uuid=entity.uuid,
            project_id=entity.project_id,
            ticket_status_id=entity.ticket_status_id,
            parent_id=entity.parent_id,
            priority_id=entity.priority_id,
            epic_id=entity.epic_id,
            sprint_id=entity.sprint_id,
            issue_type=entity.issue_type.value,
            name=entity.name,
            description=entity.description,
            start_date=entity.start_date,
            due_date=entity.due_date,
            created_by=entity.created_by,
            created_at=entity.created_at,
            updated_at=entity.updated_at,
        )

    @staticmethod
    def to_entity(model: TicketModel) -> TicketEntity:
        """
        Rebuild the entity from the model.

        Expects 'assignees' to be prefetched; falls back to a query
        otherwise.
        """
        return TicketEntity(
            id=model.id,
            uuid=model.uuid,
            project_id=model.project_id,
            ticket_status_id=model.ticket_status_id,
            parent_id=model.parent_id,
            priority_id=model.priority_id,
            epic_id=model.epic_id,
            sprint_id=model.sprint_id,
            issue_type=IssueType(model.issue_type),
            name=model.name,
            description=model.description or "",
            start_date=model.start_date,
            due_date=model.due_date,
            created_by=model.created_by,
            assignee_ids=[a.user_id for a in model.assignees.all()],
            created_at=model.created_at,
            updated_at=model.updated_at,
        )

    @staticmethod
    def to_entity_list(models_: List[TicketModel]) -> List[TicketEntity]:
        return [TicketMapper.to_entity(m) for m in models_]


class TicketHistoryMapper:
    @staticmethod
    def to_model(entity: TicketHistoryEntity) -> TicketHistoryModel:
        return TicketHistoryModel(
            id=entity.id,
            ticket_id=entity.ticket_id,
            user_id=entity.user_id,
            from_ticket_status_id=entity.from_ticket_status_id,
            to_ticket_status_id=entity.to_ticket_status_id,
            note=entity.note,
            created_at=entity.created_at,
        )

    @staticmethod
    def to_entity(model: TicketHistoryModel) -> TicketHistoryEntity:
        return TicketHistoryEntity(
            id=model.id,
            ticket_id=model.ticket_id,
            user_id=model.user_id,
            from_ticket_status_id=model.from_ticket_status_id,
            to_ticket_status_id=model.to_ticket_status_id,
            note=model.note,
            created_at=model.created_at,
        )


class TicketDependencyMapper:
    @staticmethod
    def to_model(entity: TicketDependencyEntity) -> TicketDependencyModel:
        return TicketDependencyModel(
            id=entity.id,
            ticket_id=entity.ticket_id,
            depends_on_ticket_id=entity.depends_on_ticket_id,
            type=entity.type.value,
            created_at=entity.created_at,
        )

    @staticmethod
    def to_entity(model: TicketDependencyModel) -> TicketDependencyEntity:
        return TicketDependencyEntity(
            id=model.id,
            ticket_id=model.ticket_id,
            depends_on_ticket_id=model.depends_on_ticket_id,
            type=DependencyType(model.type),
            created_at=model.created_at,
        )


class TicketCommentMapper:
    @staticmethod
    def to_model(entity: TicketCommentEntity) -> TicketCommentModel:
        return TicketCommentModel(
            id=entity.id,
            ticket_id=entity.ticket_id,
            user_id=entity.user_id,
            body=entity.body,
            created_at=entity.created_at,
            updated_at=entity.updated_at,
        )

    @staticmethod
    def to_entity(model: TicketCommentModel) -> TicketCommentEntity:
        return TicketCommentEntity(
            id=model.id,
            ticket_id=model.ticket_id,
            user_id=model.user_id,
            body=model.body,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )
