"""
Fixtures of the Django adapter tests.

Settings come from src.config.settings_test:
- SQLite in memory
- EVENT_PUBLISHER_MODE = 'memory', so published events can be inspected
- Celery tasks run eagerly
"""

import json

import pytest
from django.test import Client

from src.config.container import get_container
from src.core.projects.dtos import CreateProjectInputDTO
from src.core.tickets.dtos import CreateTicketInputDTO


@pytest.fixture
def container():
    """Global DI container (reset around every test by the root conftest)."""
    return get_container()


@pytest.fixture
def publisher(container):
    """The InMemoryEventPublisher the container hands to every Unit of Work."""
    return container.event_publisher()


@pytest.fixture
def project(db, container):
    """
    Project "Website" (WEB) with the default statuses.

    Returns the ProjectOutputDTO.
    """
    return container.create_project_service().execute(
        CreateProjectInputDTO(name="Website", ticket_prefix="WEB")
    )


@pytest.fixture
def statuses(project):
    """Statuses of the project keyed by name: "To Do", "In Progress", "Done"."""
    return {s.name: s for s in project.statuses}


@pytest.fixture
def create_ticket(container, project):
    """Factory that creates tickets through the use case."""
    def _create(name="Ticket", **kwargs):
        kwargs.setdefault("created_by", "creator")
        return container.create_ticket_service().execute(
            CreateTicketInputDTO(project_id=project.id, name=name, **kwargs)
        )

    return _create


class JsonClient(Client):
    """Test client that sends JSON bodies and decodes JSON responses."""

    def _send(self, method, path, data=None):
        body = json.dumps(data) if data is not None else ""
        response = getattr(super(), method)(path, data=body, content_type="application/json")
        response.data = response.json()
        return response

    def post_json(self, path, data=None):
        return self._send("post", path, data)

    def patch_json(self, path, data=None):
        return self._send("patch", path, data)

    def put_json(self, path, data=None):
        return self._send("put", path, data)

    def get_json(self, path, params=None):
        response = self.get(path, params or {})
        response.data = response.json()
        return response

    def delete_json(self, path):
        response = self.delete(path)
        response.data = response.json()
        return response


@pytest.fixture
def api_client():
    return JsonClient()
