"""
Shared fixtures of the core (domain) tests.

Everything runs against the in-memory repositories and the in-memory
Unit of Work: no database, no broker.
"""

import pytest

from src.adapters.django_app.shared.unit_of_work import InMemoryUnitOfWork
from src.core.projects.entities import (
    ProjectEntity,
    TicketStatusEntity,
    WorkflowDefinition,
)
from src.core.projects.ports import (
    InMemoryCustomFieldRepository,
    InMemoryProjectRepository,
    InMemoryProjectWorkflowRepository,
    InMemoryTicketStatusRepository,
)
from src.core.tickets.entities import TicketEntity, generate_ticket_code
from src.core.tickets.ports import (
    InMemoryTicketCommentRepository,
    InMemoryTicketCustomValueRepository,
    InMemoryTicketDependencyRepository,
    InMemoryTicketHistoryRepository,
    InMemoryTicketRepository,
)


# =============================================================================
# Repositories
# =============================================================================

@pytest.fixture
def project_repo():
    return InMemoryProjectRepository()


@pytest.fixture
def status_repo():
    return InMemoryTicketStatusRepository()


@pytest.fixture
def workflow_repo():
    return InMemoryProjectWorkflowRepository()


@pytest.fixture
def custom_field_repo():
    return InMemoryCustomFieldRepository()


@pytest.fixture
def ticket_repo():
    return InMemoryTicketRepository()


@pytest.fixture
def history_repo():
    return InMemoryTicketHistoryRepository()


@pytest.fixture
def dependency_repo():
    return InMemoryTicketDependencyRepository()


@pytest.fixture
def custom_value_repo():
    return InMemoryTicketCustomValueRepository()


@pytest.fixture
def comment_repo():
    return InMemoryTicketCommentRepository()


@pytest.fixture
def uow():
    """Unit of Work that records committed events in published_events."""
    return InMemoryUnitOfWork()


# =============================================================================
# Domain data
# =============================================================================

@pytest.fixture
def project(project_repo):
    """Project "Website" with prefix WEB."""
    entity = ProjectEntity.create(name="Website", ticket_prefix="web")
    project_repo.save(entity)
    return entity


@pytest.fixture
def other_project(project_repo):
    entity = ProjectEntity.create(name="Mobile", ticket_prefix="MOB")
    project_repo.save(entity)
    return entity


@pytest.fixture
def statuses(project, status_repo):
    """
    Four statuses of the project, keyed by a short name.

    Board order: todo, doing, review, done.
    """
    result = {}
    for index, (key, name, completed) in enumerate([
        ("todo", "To Do", False),
        ("doing", "In Progress", False),
        ("review", "Review", False),
        ("done", "Done", True),
    ]):
        status = TicketStatusEntity.create(
            project_id=project.id,
            name=name,
            is_completed=completed,
            sort_order=index,
        )
        status_repo.save(status)
        result[key] = status
    return result


@pytest.fixture
def foreign_status(other_project, status_repo):
    """A status that belongs to another project."""
    status = TicketStatusEntity.create(project_id=other_project.id, name="Backlog")
    status_repo.save(status)
    return status


@pytest.fixture
def set_workflow(project, workflow_repo):
    """
    Install a workflow on the project.

    Usage:
        set_workflow(initial=[s["todo"]], transitions={s["todo"]: [s["doing"]]})
    """
    def _set(initial=(), transitions=None):
        definition = WorkflowDefinition(
            initial_statuses=frozenset(s.id for s in initial),
            transitions={
                source.id: frozenset(t.id for t in targets)
                for source, targets in (transitions or {}).items()
            },
        )
        return workflow_repo.create_or_update(project.id, definition)

    return _set


@pytest.fixture
def make_ticket(project, statuses, ticket_repo):
    """
    Factory that stores a ticket directly, bypassing the use cases.

    Defaults: status "todo", created by "creator".
    """
    def _make(name="Ticket", status=None, parent=None, created_by="creator",
              assignee_ids=(), project_entity=None):
        owner = project_entity or project
        ticket = TicketEntity.create(
            project_id=owner.id,
            name=name,
            created_by=created_by,
            parent_id=parent.id if parent else None,
            assignee_ids=assignee_ids,
        )
        ticket.ticket_status_id = (status or statuses["todo"]).id
        ticket.uuid = generate_ticket_code(owner.ticket_prefix)
        ticket_repo.save(ticket)
        return ticket

    return _make
