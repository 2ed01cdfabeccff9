"""
Mappers between Projects entities (Core) and models (Django).

Mappers are stateless and only convert data; they keep ORM details out
of the Core.
"""

from src.core.projects.entities import (
    CustomFieldType,
    ProjectCustomFieldEntity,
    ProjectEntity,
    ProjectWorkflowEntity,
    TicketStatusEntity,
    WorkflowDefinition,
)

from .models import (
    ProjectCustomFieldModel,
    ProjectModel,
    ProjectWorkflowModel,
    TicketStatusModel,
)


class ProjectMapper:
    @staticmethod
    def to_model(entity: ProjectEntity) -> ProjectModel:
        return ProjectModel(
            id=entity.id,
            name=entity.name,
            description=entity.description,
            ticket_prefix=entity.ticket_prefix,
            color=entity.color,
            start_date=entity.start_date,
            end_date=entity.end_date,
            created_at=entity.created_at,
            updated_at=entity.updated_at,
        )

    @staticmethod
    def to_entity(model: ProjectModel) -> ProjectEntity:
        return ProjectEntity(
            id=model.id,
            name=model.name,
            description=model.description or "",
            ticket_prefix=model.ticket_prefix,
            color=model.color,
            start_date=model.start_date,
            end_date=model.end_date,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )


class TicketStatusMapper:
    @staticmethod
    def to_model(entity: TicketStatusEntity) -> TicketStatusModel:
        return TicketStatusModel(
            id=entity.id,
            project_id=entity.project_id,
            name=entity.name,
            color=entity.color,
            is_completed=entity.is_completed,
            sort_order=entity.sort_order,
        )

    @staticmethod
    def to_entity(model: TicketStatusModel) -> TicketStatusEntity:
        return TicketStatusEntity(
            id=model.id,
            project_id=model.project_id,
            name=model.name,
            color=model.color,
            is_completed=model.is_completed,
            sort_order=model.sort_order,
        )


class ProjectWorkflowMapper:
    """The JSON column is read through WorkflowDefinition.from_dict, so bad shapes become empty."""

    @staticmethod
    def to_entity(model: ProjectWorkflowModel) -> ProjectWorkflowEntity:
        return ProjectWorkflowEntity(
            id=model.id,
            project_id=model.project_id,
            definition=WorkflowDefinition.from_dict(model.definition),
            created_at=model.created_at,
            updated_at=model.updated_at,
        )


class CustomFieldMapper:
    @staticmethod
    def to_model(entity: ProjectCustomFieldEntity) -> ProjectCustomFieldModel:
        return ProjectCustomFieldModel(
            id=entity.id,
            project_id=entity.project_id,
            key=entity.key,
            label=entity.label,
            type=entity.field_type.value,
            options=list(entity.options),
            is_required=entity.is_required,
            sort_order=entity.sort_order,
            is_active=entity.is_active,
        )

    @staticmethod
    def to_entity(model: ProjectCustomFieldModel) -> ProjectCustomFieldEntity:
        return ProjectCustomFieldEntity(
            id=model.id,
            project_id=model.project_id,
            key=model.key,
            label=model.label,
            field_type=CustomFieldType(model.type),
            options=list(model.options or []),
            is_required=model.is_required,
            sort_order=model.sort_order,
            is_active=model.is_active,
        )
