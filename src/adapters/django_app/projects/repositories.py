"""
Django repositories of the Projects domain.

Implement the Ports of src/core/projects/ports.py with the Django ORM.
They are DRIVEN ADAPTERS: the Core calls them, they hold no rules.
"""

from typing import List, Optional
import logging

from django.utils import timezone

from src.core.projects.entities import (
    ProjectCustomFieldEntity,
    ProjectEntity,
    ProjectWorkflowEntity,
    TicketStatusEntity,
    WorkflowDefinition,
)

from ..shared.repository import BaseRepository
from .mappers import (
    CustomFieldMapper,
    ProjectMapper,
    ProjectWorkflowMapper,
    TicketStatusMapper,
)
from .models import (
    ProjectCustomFieldModel,
    ProjectModel,
    ProjectWorkflowModel,
    TicketStatusModel,
)

logger = logging.getLogger(__name__)


class DjangoProjectRepository(BaseRepository[ProjectEntity, ProjectModel]):
    """
    Example:
        repo = DjangoProjectRepository()
        repo.save(project)
        repo.get_by_prefix("WEB")
    """

    model_class = ProjectModel

    def to_entity(self, model: ProjectModel) -> ProjectEntity:
        return ProjectMapper.to_entity(model)

    def to_model(self, entity: ProjectEntity) -> ProjectModel:
        return ProjectMapper.to_model(entity)

    def get_by_prefix(self, ticket_prefix: str) -> Optional[ProjectEntity]:
        model = ProjectModel.objects.filter(ticket_prefix=ticket_prefix).first()
        return self.to_entity(model) if model else None

    def list_all(self) -> List[ProjectEntity]:
        return self._to_entities(ProjectModel.objects.order_by('name'))


class DjangoTicketStatusRepository(BaseRepository[TicketStatusEntity, TicketStatusModel]):
    model_class = TicketStatusModel

    def to_entity(self, model: TicketStatusModel) -> TicketStatusEntity:
        return TicketStatusMapper.to_entity(model)

    def to_model(self, entity: TicketStatusEntity) -> TicketStatusModel:
        return TicketStatusMapper.to_model(entity)

    def get_by_name(self, project_id: str, name: str) -> Optional[TicketStatusEntity]:
        model = TicketStatusModel.objects.filter(project_id=project_id, name=name).first()
        return self.to_entity(model) if model else None

    def list_for_project(self, project_id: str) -> List[TicketStatusEntity]:
        return self._to_entities(
            TicketStatusModel.objects.filter(project_id=project_id).order_by('sort_order', 'name')
        )


class DjangoProjectWorkflowRepository:
    """Workflow rows keyed by project; the definition is stored as JSON."""

    def for_project(self, project_id: str) -> Optional[ProjectWorkflowEntity]:
        model = ProjectWorkflowModel.objects.filter(project_id=project_id).first()
        return ProjectWorkflowMapper.to_entity(model) if model else None

    def create_or_update(
        self,
        project_id: str,
        definition: WorkflowDefinition,
    ) -> ProjectWorkflowEntity:
        model = ProjectWorkflowModel.objects.filter(project_id=project_id).first()
        if model is None:
            entity = ProjectWorkflowEntity(project_id=project_id, definition=definition)
            model = ProjectWorkflowModel.objects.create(
                id=entity.id,
                project_id=project_id,
                definition=definition.to_dict(),
                created_at=entity.created_at,
                updated_at=entity.updated_at,
            )
            logger.info(f"Workflow created for project {project_id}")
        else:
            model.definition = definition.to_dict()
            model.updated_at = timezone.now()
            model.save(update_fields=['definition', 'updated_at'])
            logger.info(f"Workflow replaced for project {project_id}")
        return ProjectWorkflowMapper.to_entity(model)


class DjangoCustomFieldRepository(BaseRepository[ProjectCustomFieldEntity, ProjectCustomFieldModel]):
    model_class = ProjectCustomFieldModel

    def to_entity(self, model: ProjectCustomFieldModel) -> ProjectCustomFieldEntity:
        return CustomFieldMapper.to_entity(model)

    def to_model(self, entity: ProjectCustomFieldEntity) -> ProjectCustomFieldModel:
        return CustomFieldMapper.to_model(entity)

    def get_by_key(self, project_id: str, key: str) -> Optional[ProjectCustomFieldEntity]:
        model = ProjectCustomFieldModel.objects.filter(project_id=project_id, key=key).first()
        return self.to_entity(model) if model else None

    def list_for_project(self, project_id: str) -> List[ProjectCustomFieldEntity]:
        return self._to_entities(
            ProjectCustomFieldModel.objects.filter(project_id=project_id).order_by('sort_order', 'key')
        )

    def list_active_for_project(self, project_id: str) -> List[ProjectCustomFieldEntity]:
        return self._to_entities(
            ProjectCustomFieldModel.objects.filter(project_id=project_id, is_active=True)
            .order_by('sort_order', 'key')
        )
