"""
Tests of DjangoUnitOfWork.

Coverage:
- Commit persists and then publishes
- Exceptions roll back and discard events
- A failing publisher never undoes the commit
"""

from unittest.mock import Mock, patch

import pytest

from src.adapters.django_app.events.publishers import InMemoryEventPublisher
from src.adapters.django_app.projects.models import ProjectModel
from src.adapters.django_app.projects.repositories import DjangoProjectRepository
from src.adapters.django_app.shared.unit_of_work import DjangoUnitOfWork, InMemoryUnitOfWork
from src.core.projects.entities import ProjectEntity
from src.core.projects.events import ProjectCreatedEvent
from src.core.shared.exceptions import ValidationError


pytestmark = pytest.mark.django_db


@pytest.fixture
def publisher():
    return InMemoryEventPublisher()


@pytest.fixture
def new_project():
    return ProjectEntity.create(name="Website", ticket_prefix="WEB")


def created_event(project):
    return ProjectCreatedEvent(
        aggregate_id=project.id,
        name=project.name,
        ticket_prefix=project.ticket_prefix,
    )


class TestDjangoUnitOfWork:
    def test_commit_persists_and_publishes(self, publisher, new_project):
        uow = DjangoUnitOfWork(event_publisher=publisher)

        with uow:
            DjangoProjectRepository().save(new_project)
            uow.publish_event(created_event(new_project))
            assert publisher.published_events == []

        assert uow.is_committed
        assert ProjectModel.objects.filter(pk=new_project.id).exists()
        assert [e.aggregate_id for e in publisher.published_events] == [new_project.id]

    def test_exception_rolls_back(self, publisher, new_project):
        uow = DjangoUnitOfWork(event_publisher=publisher)

        with pytest.raises(ValidationError):
            with uow:
                DjangoProjectRepository().save(new_project)
                uow.publish_event(created_event(new_project))
                raise ValidationError("Nope")

        assert uow.is_rolled_back
        assert not ProjectModel.objects.filter(pk=new_project.id).exists()
        assert publisher.published_events == []

    def test_publisher_failure_keeps_commit(self, new_project):
        failing = Mock()
        failing.publish.side_effect = RuntimeError("broker down")
        uow = DjangoUnitOfWork(event_publisher=failing)

        with patch("src.adapters.django_app.shared.unit_of_work.logger") as mock_logger:
            with uow:
                DjangoProjectRepository().save(new_project)
                uow.publish_event(created_event(new_project))

        assert uow.is_committed
        assert ProjectModel.objects.filter(pk=new_project.id).exists()
        assert "broker down" in mock_logger.error.call_args[0][0]

    def test_instance_reusable(self, publisher, new_project):
        uow = DjangoUnitOfWork(event_publisher=publisher)

        with pytest.raises(ValidationError):
            with uow:
                raise ValidationError("first run fails")

        with uow:
            DjangoProjectRepository().save(new_project)

        assert uow.is_committed
        assert not uow.is_rolled_back


class TestInMemoryUnitOfWork:
    def test_events_recorded_on_commit(self, new_project, publisher):
        uow = InMemoryUnitOfWork(event_publisher=publisher)

        with uow:
            uow.publish_event(created_event(new_project))

        assert uow.committed
        assert len(uow.published_events) == 1
        assert len(publisher.published_events) == 1

    def test_reset(self, new_project):
        uow = InMemoryUnitOfWork()
        with uow:
            uow.publish_event(created_event(new_project))

        uow.reset()

        assert uow.published_events == []
        assert not uow.committed
