"""
Tickets domain - work items, their hierarchy and their status workflow.

Contents:
- Entities (TicketEntity, TicketHistoryEntity, TicketDependencyEntity, ...)
- Hierarchy guard (no self parent, no cross-project parent, no loops)
- Status Transition Engine (workflow check + history row)
- Use Cases (CreateTicket, UpdateTicket, DeleteTicket, ChangeTicketStatus, ...)
- Domain Events carrying the users to notify
- DTOs and Ports

Domain characteristics:
- Every check runs before the first write
- Status changes are appended to an immutable history
- Events are published only after commit
"""

from .entities import (
    DependencyType,
    IssueType,
    TicketCommentEntity,
    TicketDependencyEntity,
    TicketEntity,
    TicketHistoryEntity,
)
from .hierarchy import TicketHierarchyGuard
from .transitions import StatusTransitionEngine
from .events import (
    TicketAssigneesChangedEvent,
    TicketCommentAddedEvent,
    TicketCreatedEvent,
    TicketDeletedEvent,
    TicketStatusChangedEvent,
    TicketUpdatedEvent,
)
from .dtos import (
    CreateTicketInputDTO,
    UpdateTicketInputDTO,
    ChangeStatusInputDTO,
    TicketOutputDTO,
    TicketListItemDTO,
)
from .ports import TicketRepository
from .use_cases import (
    AddCommentService,
    AddDependencyService,
    AssignUsersService,
    ChangeTicketStatusService,
    CreateTicketService,
    DeleteTicketService,
    GetTicketHistoryService,
    GetTicketService,
    ListAllowedStatusesService,
    ListProjectTicketsService,
    RemoveDependencyService,
    UpdateTicketService,
)

__all__ = [
    # Entities
    "DependencyType",
    "IssueType",
    "TicketCommentEntity",
    "TicketDependencyEntity",
    "TicketEntity",
    "TicketHistoryEntity",
    # Rules
    "TicketHierarchyGuard",
    "StatusTransitionEngine",
    # Events
    "TicketAssigneesChangedEvent",
    "TicketCommentAddedEvent",
    "TicketCreatedEvent",
    "TicketDeletedEvent",
    "TicketStatusChangedEvent",
    "TicketUpdatedEvent",
    # DTOs
    "CreateTicketInputDTO",
    "UpdateTicketInputDTO",
    "ChangeStatusInputDTO",
    "TicketOutputDTO",
    "TicketListItemDTO",
    # Ports
    "TicketRepository",
    # Use Cases
    "AddCommentService",
    "AddDependencyService",
    "AssignUsersService",
    "ChangeTicketStatusService",
    "CreateTicketService",
    "DeleteTicketService",
    "GetTicketHistoryService",
    "GetTicketService",
    "ListAllowedStatusesService",
    "ListProjectTicketsService",
    "RemoveDependencyService",
    "UpdateTicketService",
]
