"""
Shared Domain Components.

Components shared by every domain:
- Domain exceptions
- Interfaces (Ports)
- Base class for Domain Events
"""

from .exceptions import (
    DomainException,
    ValidationError,
    NotFoundError,
    ConflictError,
    CircularReferenceError,
    InvalidTransitionError,
)
from .events import DomainEvent
from .interfaces import UnitOfWork, EventPublisher

__all__ = [
    "DomainException",
    "ValidationError",
    "NotFoundError",
    "ConflictError",
    "CircularReferenceError",
    "InvalidTransitionError",
    "DomainEvent",
    "UnitOfWork",
    "EventPublisher",
]
