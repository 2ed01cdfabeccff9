"""
Base Repository - common Django ORM persistence.

Provides what every repository needs:
- save (create or update)
- get by id, delete, exists, count
- query optimization hooks (select_related, prefetch_related)

Principles:
- Repositories are stateless
- No business logic
- Only persistence and queries
"""

from abc import ABC, abstractmethod
from typing import Generic, Iterable, List, Optional, Type, TypeVar
import logging

from django.db import models
from django.db.models import QuerySet

logger = logging.getLogger(__name__)

T = TypeVar("T")  # Entity type
M = TypeVar("M", bound=models.Model)  # Model type


class BaseRepository(ABC, Generic[T, M]):
    """
    Abstract base for Django repositories.

    Subclasses set model_class and the two conversions; everything else
    has a default that can be overridden.

    Type Parameters:
        T: Domain entity type
        M: Django model type

    Example:
        class DjangoProjectRepository(BaseRepository[ProjectEntity, ProjectModel]):
            model_class = ProjectModel

            def to_entity(self, model):
                return ProjectMapper.to_entity(model)

            def to_model(self, entity):
                return ProjectMapper.to_model(entity)
    """

    model_class: Type[M]

    # Fields for select_related (N+1 optimization)
    select_related_fields: List[str] = []

    # Fields for prefetch_related (M2M, reverse FK)
    prefetch_related_fields: List[str] = []

    @abstractmethod
    def to_entity(self, model: M) -> T:
        raise NotImplementedError

    @abstractmethod
    def to_model(self, entity: T) -> M:
        """Build an unsaved model from the entity."""
        raise NotImplementedError

    def _get_base_queryset(self) -> QuerySet:
        qs = self.model_class.objects.all()

        if self.select_related_fields:
            qs = qs.select_related(*self.select_related_fields)

        if self.prefetch_related_fields:
            qs = qs.prefetch_related(*self.prefetch_related_fields)

        return qs

    def save(self, entity: T) -> None:
        """
        Persist the entity (create or update) with update_or_create.

        Foreign keys are written through their attname (project_id, ...)
        so no related row is fetched.
        """
        model = self.to_model(entity)

        defaults = {}
        for field in model._meta.concrete_fields:
            if field.primary_key:
                continue
            defaults[field.attname] = getattr(model, field.attname)

        self.model_class.objects.update_or_create(
            pk=model.pk,
            defaults=defaults,
        )

        logger.debug(f"{self.model_class.__name__} saved: {model.pk}")

    def get_by_id(self, entity_id: str) -> Optional[T]:
        try:
            model = self._get_base_queryset().get(pk=entity_id)
        except self.model_class.DoesNotExist:
            return None
        return self.to_entity(model)

    def delete(self, entity_id: str) -> bool:
        """
        Returns:
            True if a row was deleted
        """
        deleted_count, _ = self.model_class.objects.filter(pk=entity_id).delete()
        return deleted_count > 0

    def exists(self, entity_id: str) -> bool:
        return self.model_class.objects.filter(pk=entity_id).exists()

    def count(self) -> int:
        return self.model_class.objects.count()

    def _to_entities(self, models_: Iterable[M]) -> List[T]:
        return [self.to_entity(m) for m in models_]
