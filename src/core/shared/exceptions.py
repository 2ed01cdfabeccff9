"""
Domain exceptions for the ticket workflow core.

Every failure the core can report is one of these typed exceptions, so
callers (admin UI, importers, JSON API) can tell input problems from
business-rule violations without parsing messages.

Hierarchy:
    DomainException (base)
    ├── ValidationError (malformed or structurally invalid input)
    ├── NotFoundError (referenced entity does not exist)
    ├── ConflictError (existing related data forbids the operation)
    │   └── CircularReferenceError (parent chain would loop)
    └── InvalidTransitionError (workflow forbids the status change)
"""

from typing import Iterable, Optional


class DomainException(Exception):
    """
    Base exception for all domain errors.

    Example:
        try:
            service.execute(input_dto)
        except DomainException as e:
            logger.error(f"Domain error: {e}")
    """

    def __init__(self, message: str, code: str = None):
        self.message = message
        self.code = code or self.__class__.__name__
        super().__init__(self.message)

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"

    def to_dict(self) -> dict:
        """Serialize the error for API responses."""
        return {
            "error": self.code,
            "message": self.message,
        }


class ValidationError(DomainException):
    """
    Input does not meet the minimum requirements for processing.

    Always raised before anything is written.

    Example:
        if not name.strip():
            raise ValidationError("Ticket name is required.", field="name")
    """

    def __init__(self, message: str, field: str = None):
        self.field = field
        code = f"VALIDATION_ERROR_{field.upper()}" if field else "VALIDATION_ERROR"
        super().__init__(message, code)

    def to_dict(self) -> dict:
        result = super().to_dict()
        if self.field:
            result["field"] = self.field
        return result


class NotFoundError(DomainException):
    """
    A referenced ticket, status, project or dependency does not exist.

    Example:
        ticket = repo.get_by_id(ticket_id)
        if ticket is None:
            raise NotFoundError("Ticket not found.", entity_type="Ticket", entity_id=ticket_id)
    """

    def __init__(self, message: str, entity_type: str = None, entity_id: str = None):
        self.entity_type = entity_type
        self.entity_id = entity_id
        super().__init__(message, "NOT_FOUND")

    def to_dict(self) -> dict:
        result = super().to_dict()
        if self.entity_type:
            result["entity_type"] = self.entity_type
        if self.entity_id:
            result["entity_id"] = self.entity_id
        return result


class ConflictError(DomainException):
    """
    The operation is blocked by existing related data.

    Raised for deletes blocked by children or dependents, duplicate keys
    and similar invariant violations.

    Example:
        if ticket_repo.has_children(ticket.id):
            raise ConflictError("Cannot delete ticket with sub-tasks.", rule="no_children")
    """

    def __init__(self, message: str, rule: str = None, code: str = "CONFLICT"):
        self.rule = rule
        super().__init__(message, code)

    def to_dict(self) -> dict:
        result = super().to_dict()
        if self.rule:
            result["rule"] = self.rule
        return result


class CircularReferenceError(ConflictError):
    """Setting the parent would create a loop in the parent chain."""

    def __init__(
        self,
        message: str = (
            "Circular reference detected. This would create a loop "
            "in the parent-child relationship."
        ),
        ticket_id: str = None,
        parent_id: str = None,
    ):
        self.ticket_id = ticket_id
        self.parent_id = parent_id
        super().__init__(message, rule="acyclic_parent_chain", code="CIRCULAR_REFERENCE")


class InvalidTransitionError(DomainException):
    """
    Status change not permitted by the project's workflow graph.

    Carries the current status, the attempted status and the set of
    statuses that would have been accepted, so the caller can show a
    helpful message.
    """

    def __init__(
        self,
        message: str,
        current_status_id: Optional[str],
        attempted_status_id: str,
        allowed_status_ids: Iterable[str] = (),
    ):
        self.current_status_id = current_status_id
        self.attempted_status_id = attempted_status_id
        self.allowed_status_ids = sorted(allowed_status_ids)
        super().__init__(message, "INVALID_TRANSITION")

    def to_dict(self) -> dict:
        result = super().to_dict()
        result.update({
            "current_status_id": self.current_status_id,
            "attempted_status_id": self.attempted_status_id,
            "allowed_status_ids": list(self.allowed_status_ids),
        })
        return result
