"""
Dependency Injection Container.

Configures and owns every dependency of the application, using
dependency-injector for lazy loading and injection.

Patterns:
- Singleton: one instance for the whole app (repositories, publisher)
- Factory: a new instance per call (unit of work, use cases)
- Configuration: values taken from Django settings

Imports are lazy so the container can be imported before Django apps
are loaded.
"""

from typing import Callable, Optional

from dependency_injector import containers, providers


def _lazy(module_path: str, name: str) -> Callable:
    """Callable that imports module_path.name on first use and calls it."""
    def build(*args, **kwargs):
        module = __import__(module_path, fromlist=[name])
        return getattr(module, name)(*args, **kwargs)
    build.__name__ = name
    return build


PROJECT_REPOSITORIES = 'src.adapters.django_app.projects.repositories'
TICKET_REPOSITORIES = 'src.adapters.django_app.tickets.repositories'
PROJECT_USE_CASES = 'src.core.projects.use_cases'
TICKET_USE_CASES = 'src.core.tickets.use_cases'


class Container(containers.DeclarativeContainer):
    """
    Main Dependency Injection container.

    Layout:
    - Configuration: settings values
    - Infrastructure: event publisher
    - Repositories: persistence
    - Unit of Work: transactions
    - Services: use cases

    Example:
        from src.config.container import get_container

        service = get_container().create_ticket_service()
        output = service.execute(input_dto)
    """

    # =========================================================================
    # Configuration
    # =========================================================================

    config = providers.Configuration()

    # =========================================================================
    # Infrastructure
    # =========================================================================

    event_publisher = providers.Singleton(
        _lazy('src.adapters.django_app.events.publishers', 'get_event_publisher'),
        mode=config.event_publisher_mode,
    )

    # =========================================================================
    # Repositories (Singleton - stateless)
    # =========================================================================

    project_repository = providers.Singleton(_lazy(PROJECT_REPOSITORIES, 'DjangoProjectRepository'))
    status_repository = providers.Singleton(_lazy(PROJECT_REPOSITORIES, 'DjangoTicketStatusRepository'))
    workflow_repository = providers.Singleton(_lazy(PROJECT_REPOSITORIES, 'DjangoProjectWorkflowRepository'))
    custom_field_repository = providers.Singleton(_lazy(PROJECT_REPOSITORIES, 'DjangoCustomFieldRepository'))

    ticket_repository = providers.Singleton(_lazy(TICKET_REPOSITORIES, 'DjangoTicketRepository'))
    history_repository = providers.Singleton(_lazy(TICKET_REPOSITORIES, 'DjangoTicketHistoryRepository'))
    dependency_repository = providers.Singleton(_lazy(TICKET_REPOSITORIES, 'DjangoTicketDependencyRepository'))
    custom_value_repository = providers.Singleton(_lazy(TICKET_REPOSITORIES, 'DjangoTicketCustomValueRepository'))
    comment_repository = providers.Singleton(_lazy(TICKET_REPOSITORIES, 'DjangoTicketCommentRepository'))

    # =========================================================================
    # Unit of Work (Factory - one per operation)
    # =========================================================================

    unit_of_work = providers.Factory(
        _lazy('src.adapters.django_app.shared.unit_of_work', 'DjangoUnitOfWork'),
        event_publisher=event_publisher,
    )

    # =========================================================================
    # Services / Use Cases - Projects
    # =========================================================================

    create_project_service = providers.Factory(
        _lazy(PROJECT_USE_CASES, 'CreateProjectService'),
        project_repo=project_repository,
        status_repo=status_repository,
        uow=unit_of_work,
    )

    add_status_service = providers.Factory(
        _lazy(PROJECT_USE_CASES, 'AddStatusService'),
        project_repo=project_repository,
        status_repo=status_repository,
        uow=unit_of_work,
    )

    # The ticket repository answers "is this status still in use?"
    remove_status_service = providers.Factory(
        _lazy(PROJECT_USE_CASES, 'RemoveStatusService'),
        status_repo=status_repository,
        usage_checker=ticket_repository,
        uow=unit_of_work,
    )

    list_project_statuses_service = providers.Factory(
        _lazy(PROJECT_USE_CASES, 'ListProjectStatusesService'),
        project_repo=project_repository,
        status_repo=status_repository,
    )

    save_workflow_service = providers.Factory(
        _lazy(PROJECT_USE_CASES, 'SaveWorkflowService'),
        project_repo=project_repository,
        status_repo=status_repository,
        workflow_repo=workflow_repository,
        uow=unit_of_work,
    )

    get_workflow_service = providers.Factory(
        _lazy(PROJECT_USE_CASES, 'GetWorkflowService'),
        project_repo=project_repository,
        workflow_repo=workflow_repository,
    )

    create_custom_field_service = providers.Factory(
        _lazy(PROJECT_USE_CASES, 'CreateCustomFieldService'),
        project_repo=project_repository,
        custom_field_repo=custom_field_repository,
        uow=unit_of_work,
    )

    # =========================================================================
    # Services / Use Cases - Tickets
    # =========================================================================

    create_ticket_service = providers.Factory(
        _lazy(TICKET_USE_CASES, 'CreateTicketService'),
        ticket_repo=ticket_repository,
        project_repo=project_repository,
        status_repo=status_repository,
        workflow_repo=workflow_repository,
        history_repo=history_repository,
        custom_field_repo=custom_field_repository,
        custom_value_repo=custom_value_repository,
        uow=unit_of_work,
    )

    update_ticket_service = providers.Factory(
        _lazy(TICKET_USE_CASES, 'UpdateTicketService'),
        ticket_repo=ticket_repository,
        status_repo=status_repository,
        workflow_repo=workflow_repository,
        history_repo=history_repository,
        custom_field_repo=custom_field_repository,
        custom_value_repo=custom_value_repository,
        comment_repo=comment_repository,
        uow=unit_of_work,
    )

    delete_ticket_service = providers.Factory(
        _lazy(TICKET_USE_CASES, 'DeleteTicketService'),
        ticket_repo=ticket_repository,
        dependency_repo=dependency_repository,
        custom_value_repo=custom_value_repository,
        history_repo=history_repository,
        comment_repo=comment_repository,
        uow=unit_of_work,
    )

    change_ticket_status_service = providers.Factory(
        _lazy(TICKET_USE_CASES, 'ChangeTicketStatusService'),
        ticket_repo=ticket_repository,
        status_repo=status_repository,
        workflow_repo=workflow_repository,
        history_repo=history_repository,
        comment_repo=comment_repository,
        uow=unit_of_work,
    )

    assign_users_service = providers.Factory(
        _lazy(TICKET_USE_CASES, 'AssignUsersService'),
        ticket_repo=ticket_repository,
        comment_repo=comment_repository,
        uow=unit_of_work,
    )

    # Read-only (no UoW)
    get_ticket_service = providers.Factory(
        _lazy(TICKET_USE_CASES, 'GetTicketService'),
        ticket_repo=ticket_repository,
        custom_value_repo=custom_value_repository,
    )

    list_project_tickets_service = providers.Factory(
        _lazy(TICKET_USE_CASES, 'ListProjectTicketsService'),
        ticket_repo=ticket_repository,
        project_repo=project_repository,
    )

    get_ticket_history_service = providers.Factory(
        _lazy(TICKET_USE_CASES, 'GetTicketHistoryService'),
        ticket_repo=ticket_repository,
        history_repo=history_repository,
    )

    list_allowed_statuses_service = providers.Factory(
        _lazy(TICKET_USE_CASES, 'ListAllowedStatusesService'),
        ticket_repo=ticket_repository,
        status_repo=status_repository,
        workflow_repo=workflow_repository,
    )

    add_dependency_service = providers.Factory(
        _lazy(TICKET_USE_CASES, 'AddDependencyService'),
        ticket_repo=ticket_repository,
        dependency_repo=dependency_repository,
        uow=unit_of_work,
    )

    remove_dependency_service = providers.Factory(
        _lazy(TICKET_USE_CASES, 'RemoveDependencyService'),
        ticket_repo=ticket_repository,
        dependency_repo=dependency_repository,
        uow=unit_of_work,
    )

    list_ticket_dependencies_service = providers.Factory(
        _lazy(TICKET_USE_CASES, 'ListTicketDependenciesService'),
        ticket_repo=ticket_repository,
        dependency_repo=dependency_repository,
    )

    add_comment_service = providers.Factory(
        _lazy(TICKET_USE_CASES, 'AddCommentService'),
        ticket_repo=ticket_repository,
        comment_repo=comment_repository,
        uow=unit_of_work,
    )

    list_ticket_comments_service = providers.Factory(
        _lazy(TICKET_USE_CASES, 'ListTicketCommentsService'),
        ticket_repo=ticket_repository,
        comment_repo=comment_repository,
    )


# =============================================================================
# Global Container
# =============================================================================

_container: Optional[Container] = None


def get_container() -> Container:
    """
    Global container instance, created on first use.

    The publisher mode comes from settings.EVENT_PUBLISHER_MODE.
    """
    global _container

    if _container is None:
        from django.conf import settings

        _container = Container()
        _container.config.from_dict({
            'event_publisher_mode': getattr(settings, 'EVENT_PUBLISHER_MODE', 'sync'),
        })

    return _container


def reset_container() -> None:
    """Drop the global container (tests)."""
    global _container
    _container = None
