"""
Ports (interfaces) of the Tickets domain.

Protocols the use cases depend on, plus in-memory implementations used
by the unit tests. The Django adapters implement the same protocols.
"""

from typing import Any, Dict, Iterable, List, Optional, Protocol, Tuple, runtime_checkable

from .entities import (
    DependencyType,
    TicketCommentEntity,
    TicketDependencyEntity,
    TicketEntity,
    TicketHistoryEntity,
)


@runtime_checkable
class TicketRepository(Protocol):
    """
    Persistence of tickets, assignees included.

    save() stores the ticket row and replaces its assignee set.
    """

    def save(self, ticket: TicketEntity) -> None:
        ...

    def get_by_id(self, ticket_id: str) -> Optional[TicketEntity]:
        ...

    def get_for_update(self, ticket_id: str) -> Optional[TicketEntity]:
        """Same as get_by_id, locking the row for the current transaction when supported."""
        ...

    def delete(self, ticket_id: str) -> None:
        ...

    def list_for_project(
        self,
        project_id: str,
        offset: int = 0,
        limit: Optional[int] = None,
    ) -> List[TicketEntity]:
        ...

    def count_for_project(self, project_id: str) -> int:
        ...

    def has_children(self, ticket_id: str) -> bool:
        ...

    def exists_with_status(self, status_id: str) -> bool:
        ...

    def code_exists(self, code: str) -> bool:
        ...


@runtime_checkable
class TicketHistoryRepository(Protocol):
    """Append-only store of status changes."""

    def append(self, entry: TicketHistoryEntity) -> None:
        ...

    def list_for_ticket(self, ticket_id: str) -> List[TicketHistoryEntity]:
        """Entries oldest first."""
        ...

    def delete_for_ticket(self, ticket_id: str) -> None:
        """Only used when the ticket itself is deleted."""
        ...


@runtime_checkable
class TicketDependencyRepository(Protocol):
    def add(self, dependency: TicketDependencyEntity) -> None:
        ...

    def get_by_id(self, dependency_id: str) -> Optional[TicketDependencyEntity]:
        ...

    def remove(self, dependency_id: str) -> None:
        ...

    def exists(self, ticket_id: str, depends_on_ticket_id: str, type: DependencyType) -> bool:
        ...

    def has_blocking_dependents(self, ticket_id: str) -> bool:
        """True when some "blocks" row points at ticket_id as depends_on."""
        ...

    def list_for_ticket(self, ticket_id: str) -> List[TicketDependencyEntity]:
        """Rows where the ticket is on either side."""
        ...

    def delete_for_ticket(self, ticket_id: str) -> None:
        ...


@runtime_checkable
class TicketCustomValueRepository(Protocol):
    def sync_for_ticket(self, ticket_id: str, values: Dict[str, Any]) -> None:
        """
        Make the stored values equal to `values` (custom field id -> value).

        Values missing from the mapping are deleted.
        """
        ...

    def list_for_ticket(self, ticket_id: str) -> Dict[str, Any]:
        ...

    def delete_for_ticket(self, ticket_id: str) -> None:
        ...


@runtime_checkable
class TicketCommentRepository(Protocol):
    def save(self, comment: TicketCommentEntity) -> None:
        ...

    def list_for_ticket(self, ticket_id: str) -> List[TicketCommentEntity]:
        ...

    def commenter_ids(self, ticket_id: str) -> List[str]:
        """Distinct authors in order of their first comment."""
        ...

    def delete_for_ticket(self, ticket_id: str) -> None:
        ...


# =============================================================================
# In-memory implementations
# =============================================================================

class InMemoryTicketRepository:
    """
    In-memory TicketRepository.

    Useful for unit tests and prototyping. Not for production.
    """

    def __init__(self):
        self._tickets: Dict[str, TicketEntity] = {}

    def save(self, ticket: TicketEntity) -> None:
        self._tickets[ticket.id] = ticket

    def get_by_id(self, ticket_id: str) -> Optional[TicketEntity]:
        return self._tickets.get(ticket_id)

    def get_for_update(self, ticket_id: str) -> Optional[TicketEntity]:
        return self.get_by_id(ticket_id)

    def delete(self, ticket_id: str) -> None:
        self._tickets.pop(ticket_id, None)

    def list_for_project(
        self,
        project_id: str,
        offset: int = 0,
        limit: Optional[int] = None,
    ) -> List[TicketEntity]:
        tickets = sorted(
            (t for t in self._tickets.values() if t.project_id == project_id),
            key=lambda t: t.created_at,
            reverse=True,
        )
        end = None if limit is None else offset + limit
        return tickets[offset:end]

    def count_for_project(self, project_id: str) -> int:
        return sum(1 for t in self._tickets.values() if t.project_id == project_id)

    def has_children(self, ticket_id: str) -> bool:
        return any(t.parent_id == ticket_id for t in self._tickets.values())

    def exists_with_status(self, status_id: str) -> bool:
        return any(t.ticket_status_id == status_id for t in self._tickets.values())

    def code_exists(self, code: str) -> bool:
        return any(t.uuid == code for t in self._tickets.values())

    def clear(self) -> None:
        self._tickets.clear()


class InMemoryTicketHistoryRepository:
    def __init__(self):
        self._entries: List[TicketHistoryEntity] = []

    def append(self, entry: TicketHistoryEntity) -> None:
        self._entries.append(entry)

    def list_for_ticket(self, ticket_id: str) -> List[TicketHistoryEntity]:
        return [e for e in self._entries if e.ticket_id == ticket_id]

    def delete_for_ticket(self, ticket_id: str) -> None:
        self._entries = [e for e in self._entries if e.ticket_id != ticket_id]


class InMemoryTicketDependencyRepository:
    def __init__(self):
        self._dependencies: Dict[str, TicketDependencyEntity] = {}

    def add(self, dependency: TicketDependencyEntity) -> None:
        self._dependencies[dependency.id] = dependency

    def get_by_id(self, dependency_id: str) -> Optional[TicketDependencyEntity]:
        return self._dependencies.get(dependency_id)

    def remove(self, dependency_id: str) -> None:
        self._dependencies.pop(dependency_id, None)

    def exists(self, ticket_id: str, depends_on_ticket_id: str, type: DependencyType) -> bool:
        return any(
            d.ticket_id == ticket_id
            and d.depends_on_ticket_id == depends_on_ticket_id
            and d.type is type
            for d in self._dependencies.values()
        )

    def has_blocking_dependents(self, ticket_id: str) -> bool:
        return any(
            d.depends_on_ticket_id == ticket_id and d.is_blocking
            for d in self._dependencies.values()
        )

    def list_for_ticket(self, ticket_id: str) -> List[TicketDependencyEntity]:
        return [
            d for d in self._dependencies.values()
            if ticket_id in (d.ticket_id, d.depends_on_ticket_id)
        ]

    def delete_for_ticket(self, ticket_id: str) -> None:
        for dependency in self.list_for_ticket(ticket_id):
            self._dependencies.pop(dependency.id, None)


class InMemoryTicketCustomValueRepository:
    def __init__(self):
        self._values: Dict[Tuple[str, str], Any] = {}

    def sync_for_ticket(self, ticket_id: str, values: Dict[str, Any]) -> None:
        self.delete_for_ticket(ticket_id)
        for field_id, value in values.items():
            self._values[(ticket_id, field_id)] = value

    def list_for_ticket(self, ticket_id: str) -> Dict[str, Any]:
        return {
            field_id: value
            for (owner_id, field_id), value in self._values.items()
            if owner_id == ticket_id
        }

    def delete_for_ticket(self, ticket_id: str) -> None:
        for key in [k for k in self._values if k[0] == ticket_id]:
            del self._values[key]


class InMemoryTicketCommentRepository:
    def __init__(self):
        self._comments: List[TicketCommentEntity] = []

    def save(self, comment: TicketCommentEntity) -> None:
        self._comments.append(comment)

    def list_for_ticket(self, ticket_id: str) -> List[TicketCommentEntity]:
        return [c for c in self._comments if c.ticket_id == ticket_id]

    def commenter_ids(self, ticket_id: str) -> List[str]:
        return _distinct(c.user_id for c in self.list_for_ticket(ticket_id))

    def delete_for_ticket(self, ticket_id: str) -> None:
        self._comments = [c for c in self._comments if c.ticket_id != ticket_id]


def _distinct(values: Iterable[str]) -> List[str]:
    result = []
    for value in values:
        if value not in result:
            result.append(value)
    return result
