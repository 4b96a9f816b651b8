"""
Base entity and exceptions for the domain layer.
This module contains the foundational classes for the invoice engine.
"""

from datetime import datetime, timezone
from typing import Optional, Any, Dict, List
from abc import ABC
from dataclasses import dataclass, field

from invoice_engine.domain.events.base import DomainEvent


def utc_now() -> datetime:
    """Current timestamp in UTC."""
    return datetime.now(timezone.utc)


@dataclass
class BaseEntity(ABC):
    """
    Base class for all domain entities.
    Provides identity, timestamps and domain event collection.
    """

    id: Optional[str] = None
    created_at: datetime = field(default_factory=utc_now)
    updated_at: datetime = field(default_factory=utc_now)

    # Domain events
    _events: List[DomainEvent] = field(default_factory=list, init=False, repr=False)

    def __post_init__(self):
        """Initialize entity after creation."""
        if self.created_at is None:
            self.created_at = utc_now()
        if self.updated_at is None:
            self.updated_at = utc_now()

    def __eq__(self, other: Any) -> bool:
        """Entities are equal if they have the same ID and are of the same type."""
        if not isinstance(other, self.__class__):
            return False
        if self.id is None or other.id is None:
            return False
        return self.id == other.id

    def __hash__(self) -> int:
        """Hash based on entity ID."""
        if self.id is None:
            return hash(id(self))
        return hash((self.__class__.__name__, self.id))

    def mark_as_updated(self) -> None:
        """Update the updated_at timestamp."""
        self.updated_at = utc_now()

    def add_event(self, event: DomainEvent) -> None:
        """Add a domain event."""
        self._events.append(event)

    def pull_events(self) -> List[DomainEvent]:
        """Get and clear all domain events."""
        events = self._events.copy()
        self._events.clear()
        return events

    @property
    def is_new(self) -> bool:
        """Check if entity is new (not persisted)."""
        return self.id is None


@dataclass(eq=False)
class AggregateRoot(BaseEntity):
    """
    Base class for aggregate roots.
    The version is used by callers for optimistic concurrency checks.
    """

    version: int = field(default=1)

    def increment_version(self) -> None:
        """Increment the aggregate version for optimistic locking."""
        self.version += 1
        self.mark_as_updated()


class DomainException(Exception):
    """Base exception for domain errors."""

    code = "DOMAIN_ERROR"

    def __init__(self, message: str, code: Optional[str] = None):
        self.message = message
        self.code = code or self.code
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary."""
        return {"code": self.code, "message": self.message}


class ValidationError(DomainException):
    """Exception raised when input to the engine is malformed."""

    code = "VALIDATION_ERROR"

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["field"] = self.field
        return data


class InvalidAmount(ValidationError):
    """Raised for negative, NaN, missing or non-numeric monetary input."""

    code = "INVALID_AMOUNT"


class InvalidLineItem(ValidationError):
    """Raised for a line item with non-positive quantity or negative rate."""

    code = "INVALID_LINE_ITEM"


class BusinessRuleViolation(DomainException):
    """Exception raised when a business rule is violated."""

    code = "BUSINESS_RULE_VIOLATION"


class DuplicatePaymentReference(BusinessRuleViolation):
    """Raised when a payment reference was already applied to the ledger."""

    code = "DUPLICATE_PAYMENT_REFERENCE"

    def __init__(self, reference: str):
        super().__init__(f"Payment with reference '{reference}' has already been recorded")
        self.reference = reference


class InvalidTransition(BusinessRuleViolation):
    """Raised when a status change is not allowed from the current state."""

    code = "INVALID_TRANSITION"


class StaleInvoiceVersion(DomainException):
    """Raised when a caller applies a change against an outdated invoice version."""

    code = "STALE_INVOICE_VERSION"

    def __init__(self, expected: int, actual: int):
        super().__init__(
            f"Invoice version mismatch: expected {expected}, found {actual}"
        )
        self.expected = expected
        self.actual = actual


@dataclass(frozen=True)
class ValueObject(ABC):
    """
    Base class for value objects.
    Value objects are immutable and are compared by their values.
    """

    def __post_init__(self):
        """Validate value object after creation."""
        self.validate()

    def validate(self) -> None:
        """Validate the value object's state."""
        pass
