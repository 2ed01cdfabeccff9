"""
Projects domain - statuses, workflow graphs and custom-field schemas.

Contents:
- Entities (ProjectEntity, TicketStatusEntity, WorkflowDefinition, ...)
- Use Cases (CreateProject, AddStatus, RemoveStatus, SaveWorkflow, ...)
- Domain Events (ProjectCreated, ProjectWorkflowSaved, ...)
- DTOs and Ports
"""

from .entities import (
    CustomFieldType,
    ProjectCustomFieldEntity,
    ProjectEntity,
    ProjectWorkflowEntity,
    TicketStatusEntity,
    WorkflowDefinition,
)
from .use_cases import (
    AddStatusService,
    CreateCustomFieldService,
    CreateProjectService,
    GetWorkflowService,
    ListProjectStatusesService,
    RemoveStatusService,
    SaveWorkflowService,
)

__all__ = [
    "CustomFieldType",
    "ProjectCustomFieldEntity",
    "ProjectEntity",
    "ProjectWorkflowEntity",
    "TicketStatusEntity",
    "WorkflowDefinition",
    "AddStatusService",
    "CreateCustomFieldService",
    "CreateProjectService",
    "GetWorkflowService",
    "ListProjectStatusesService",
    "RemoveStatusService",
    "SaveWorkflowService",
]
