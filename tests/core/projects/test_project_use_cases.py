"""
Unit tests of the Projects use cases.

Strategy:
- In-memory repositories and Unit of Work
- Checks persisted state and queued events

Coverage:
- CreateProjectService
- AddStatusService / RemoveStatusService / ListProjectStatusesService
- SaveWorkflowService / GetWorkflowService
- CreateCustomFieldService
"""

import pytest

from src.core.projects.dtos import (
    AddStatusInputDTO,
    CreateCustomFieldInputDTO,
    CreateProjectInputDTO,
    SaveWorkflowInputDTO,
)
from src.core.projects.entities import CustomFieldType
from src.core.projects.events import (
    CustomFieldCreatedEvent,
    ProjectCreatedEvent,
    ProjectWorkflowSavedEvent,
    TicketStatusAddedEvent,
    TicketStatusRemovedEvent,
)
from src.core.projects.use_cases import (
    AddStatusService,
    CreateCustomFieldService,
    CreateProjectService,
    GetWorkflowService,
    ListProjectStatusesService,
    RemoveStatusService,
    SaveWorkflowService,
)
from src.core.shared.exceptions import (
    ConflictError,
    NotFoundError,
    ValidationError,
)


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def create_project_service(project_repo, status_repo, uow):
    return CreateProjectService(project_repo, status_repo, uow)


@pytest.fixture
def add_status_service(project_repo, status_repo, uow):
    return AddStatusService(project_repo, status_repo, uow)


@pytest.fixture
def remove_status_service(status_repo, ticket_repo, uow):
    """The ticket repository answers whether a status is still in use."""
    return RemoveStatusService(status_repo, ticket_repo, uow)


@pytest.fixture
def save_workflow_service(project_repo, status_repo, workflow_repo, uow):
    return SaveWorkflowService(project_repo, status_repo, workflow_repo, uow)


@pytest.fixture
def create_custom_field_service(project_repo, custom_field_repo, uow):
    return CreateCustomFieldService(project_repo, custom_field_repo, uow)


# =============================================================================
# CreateProjectService
# =============================================================================

class TestCreateProjectService:
    def test_create_project_seeds_default_statuses(self, create_project_service, status_repo, uow):
        output = create_project_service.execute(
            CreateProjectInputDTO(name="Website", ticket_prefix="web")
        )

        assert output.ticket_prefix == "WEB"
        assert [s.name for s in output.statuses] == ["To Do", "In Progress", "Done"]
        assert [s.sort_order for s in output.statuses] == [0, 1, 2]
        assert [s.is_completed for s in output.statuses] == [False, False, True]
        assert len(status_repo.list_for_project(output.id)) == 3
        assert uow.committed

    def test_create_project_with_custom_presets(self, create_project_service):
        output = create_project_service.execute(CreateProjectInputDTO(
            name="Ops",
            ticket_prefix="OPS",
            status_presets=(
                {"name": "New", "color": "#111111"},
                {"name": "Closed", "is_completed": True},
            ),
        ))

        assert [s.name for s in output.statuses] == ["New", "Closed"]
        assert output.statuses[0].color == "#111111"
        assert output.statuses[1].color == "#2563EB"

    def test_create_project_emits_event(self, create_project_service, uow):
        output = create_project_service.execute(
            CreateProjectInputDTO(name="Website", ticket_prefix="WEB")
        )

        assert len(uow.published_events) == 1
        event = uow.published_events[0]
        assert isinstance(event, ProjectCreatedEvent)
        assert event.aggregate_id == output.id
        assert event.status_ids == [s.id for s in output.statuses]

    def test_duplicate_prefix_conflicts(self, create_project_service, project_repo, uow):
        create_project_service.execute(CreateProjectInputDTO(name="One", ticket_prefix="WEB"))

        with pytest.raises(ConflictError) as exc_info:
            create_project_service.execute(CreateProjectInputDTO(name="Two", ticket_prefix="web"))

        assert exc_info.value.rule == "unique_ticket_prefix"
        assert len(project_repo.list_all()) == 1
        assert uow.rolled_back

    @pytest.mark.parametrize("prefix", ["", "WEB-1", "TOOLONGPREFIX"])
    def test_invalid_prefix(self, create_project_service, prefix):
        with pytest.raises(ValidationError) as exc_info:
            create_project_service.execute(CreateProjectInputDTO(name="X", ticket_prefix=prefix))

        assert exc_info.value.field == "ticket_prefix"

    @pytest.mark.parametrize("field_name, value", [
        ("name", 7),
        ("ticket_prefix", 12),
        ("description", ["text"]),
    ])
    def test_non_text_values_refused(self, create_project_service, project_repo,
                                     field_name, value):
        data = {"name": "X", "ticket_prefix": "X", field_name: value}

        with pytest.raises(ValidationError) as exc_info:
            create_project_service.execute(CreateProjectInputDTO(**data))

        assert exc_info.value.field == field_name
        assert project_repo.list_all() == []

    def test_duplicate_preset_names_refused(self, create_project_service, project_repo):
        with pytest.raises(ValidationError):
            create_project_service.execute(CreateProjectInputDTO(
                name="X",
                ticket_prefix="X",
                status_presets=({"name": "Open"}, {"name": "Open"}),
            ))

        assert project_repo.list_all() == []


# =============================================================================
# Statuses
# =============================================================================

class TestStatusServices:
    def test_add_status_goes_last_by_default(self, add_status_service, project, statuses):
        output = add_status_service.execute(
            AddStatusInputDTO(project_id=project.id, name="Blocked")
        )

        assert output.sort_order == 4

    def test_add_status_emits_event(self, add_status_service, project, uow):
        add_status_service.execute(AddStatusInputDTO(project_id=project.id, name="Blocked"))

        assert isinstance(uow.published_events[0], TicketStatusAddedEvent)

    def test_add_status_duplicate_name(self, add_status_service, project, statuses):
        with pytest.raises(ConflictError):
            add_status_service.execute(AddStatusInputDTO(project_id=project.id, name="Review"))

    def test_add_status_unknown_project(self, add_status_service):
        with pytest.raises(NotFoundError):
            add_status_service.execute(AddStatusInputDTO(project_id="missing", name="X"))

    def test_list_statuses_in_board_order(self, project_repo, status_repo, project, statuses):
        service = ListProjectStatusesService(project_repo, status_repo)

        names = [s.name for s in service.execute(project.id)]

        assert names == ["To Do", "In Progress", "Review", "Done"]

    def test_remove_unused_status(self, remove_status_service, status_repo, statuses, uow):
        remove_status_service.execute(statuses["review"].id)

        assert status_repo.get_by_id(statuses["review"].id) is None
        assert isinstance(uow.published_events[0], TicketStatusRemovedEvent)

    def test_remove_status_in_use_refused(self, remove_status_service, status_repo,
                                          statuses, make_ticket):
        make_ticket(status=statuses["review"])

        with pytest.raises(ConflictError) as exc_info:
            remove_status_service.execute(statuses["review"].id)

        assert exc_info.value.rule == "status_in_use"
        assert status_repo.get_by_id(statuses["review"].id) is not None

    def test_remove_missing_status(self, remove_status_service):
        with pytest.raises(NotFoundError):
            remove_status_service.execute("missing")


# =============================================================================
# Workflow
# =============================================================================

class TestSaveWorkflowService:
    def test_save_creates_then_replaces(self, save_workflow_service, workflow_repo,
                                        project, statuses):
        todo, doing, done = statuses["todo"].id, statuses["doing"].id, statuses["done"].id

        save_workflow_service.execute(SaveWorkflowInputDTO(
            project_id=project.id,
            initial_statuses=(todo,),
            transitions={todo: (doing,)},
        ))
        output = save_workflow_service.execute(SaveWorkflowInputDTO(
            project_id=project.id,
            initial_statuses=(todo,),
            transitions={doing: (done,)},
        ))

        definition = workflow_repo.for_project(project.id).definition
        assert definition.is_transition_allowed(todo, doing) is False
        assert definition.is_transition_allowed(doing, done) is True
        assert output.transitions == {doing: (done,)}

    def test_save_emits_event(self, save_workflow_service, project, statuses, uow):
        todo = statuses["todo"].id
        save_workflow_service.execute(SaveWorkflowInputDTO(
            project_id=project.id,
            initial_statuses=(todo,),
            saved_by="admin",
        ))

        event = uow.published_events[0]
        assert isinstance(event, ProjectWorkflowSavedEvent)
        assert event.saved_by == "admin"
        assert event.definition["initial_statuses"] == [todo]

    def test_foreign_status_refused(self, save_workflow_service, workflow_repo, project,
                                    statuses, foreign_status):
        with pytest.raises(ValidationError) as exc_info:
            save_workflow_service.execute(SaveWorkflowInputDTO(
                project_id=project.id,
                transitions={statuses["todo"].id: (foreign_status.id,)},
            ))

        assert exc_info.value.field == "definition"
        assert workflow_repo.for_project(project.id) is None

    def test_get_workflow_none_when_unset(self, project_repo, workflow_repo, project):
        assert GetWorkflowService(project_repo, workflow_repo).execute(project.id) is None

    def test_get_workflow(self, project_repo, workflow_repo, project, statuses, set_workflow):
        set_workflow(initial=[statuses["todo"]])

        output = GetWorkflowService(project_repo, workflow_repo).execute(project.id)

        assert output.initial_statuses == (statuses["todo"].id,)
        assert output.transitions == {}


# =============================================================================
# Custom fields
# =============================================================================

class TestCreateCustomFieldService:
    def test_create_select_field(self, create_custom_field_service, project, uow):
        output = create_custom_field_service.execute(CreateCustomFieldInputDTO(
            project_id=project.id,
            key="Browser",
            label="Browser",
            field_type="select",
            options=("Chrome", "Firefox", " "),
        ))

        assert output.key == "browser"
        assert output.field_type == CustomFieldType.SELECT.value
        assert output.options == ("Chrome", "Firefox")
        assert isinstance(uow.published_events[0], CustomFieldCreatedEvent)

    def test_select_without_options_refused(self, create_custom_field_service, project):
        with pytest.raises(ValidationError) as exc_info:
            create_custom_field_service.execute(CreateCustomFieldInputDTO(
                project_id=project.id, key="browser", label="Browser", field_type="select",
            ))

        assert exc_info.value.field == "options"

    @pytest.mark.parametrize("key", ["1st", "has space", "", "a" * 51])
    def test_invalid_key(self, create_custom_field_service, project, key):
        with pytest.raises(ValidationError):
            create_custom_field_service.execute(
                CreateCustomFieldInputDTO(project_id=project.id, key=key, label="Label")
            )

    def test_non_text_label_refused(self, create_custom_field_service, project):
        with pytest.raises(ValidationError) as exc_info:
            create_custom_field_service.execute(
                CreateCustomFieldInputDTO(project_id=project.id, key="k", label=3)
            )

        assert exc_info.value.field == "label"

    def test_unknown_type(self, create_custom_field_service, project):
        with pytest.raises(ValidationError):
            create_custom_field_service.execute(CreateCustomFieldInputDTO(
                project_id=project.id, key="k", label="K", field_type="checkbox",
            ))

    def test_duplicate_key(self, create_custom_field_service, project):
        dto = CreateCustomFieldInputDTO(project_id=project.id, key="env", label="Env")
        create_custom_field_service.execute(dto)

        with pytest.raises(ConflictError):
            create_custom_field_service.execute(dto)
