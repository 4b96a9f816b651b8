"""
Base use case classes for the application layer.
Provides common patterns and structure for use case implementations.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional, TypeVar, Generic
from dataclasses import dataclass
from datetime import datetime, timezone

from invoice_engine.domain.models.base import DomainException, ValidationError


logger = logging.getLogger(__name__)

T = TypeVar('T')
R = TypeVar('R')


@dataclass
class UseCaseResult(Generic[T]):
    """Result wrapper for use case operations."""

    success: bool
    data: Optional[T] = None
    error: Optional[str] = None
    error_code: Optional[str] = None
    error_field: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = None

    @classmethod
    def success_result(cls, data: T, metadata: Optional[Dict[str, Any]] = None) -> "UseCaseResult[T]":
        """Create a successful result."""
        return cls(success=True, data=data, metadata=metadata)

    @classmethod
    def error_result(
        cls,
        error: str,
        error_code: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
        error_field: Optional[str] = None
    ) -> "UseCaseResult[T]":
        """Create an error result."""
        return cls(
            success=False,
            error=error,
            error_code=error_code,
            error_field=error_field,
            metadata=metadata
        )

    @classmethod
    def from_exception(cls, exc: DomainException) -> "UseCaseResult[T]":
        """Create error result from a domain exception."""
        field = exc.field if isinstance(exc, ValidationError) else None
        return cls.error_result(exc.message, exc.code, error_field=field)


class BaseUseCase(ABC, Generic[T, R]):
    """
    Base class for all use cases.
    Domain failures become error results; anything else propagates.
    """

    def __init__(self):
        self.execution_start: Optional[datetime] = None
        self.execution_end: Optional[datetime] = None

    def execute(self, request: T) -> UseCaseResult[R]:
        """
        Execute the use case with error translation and timing metadata.
        """
        self.execution_start = datetime.now(timezone.utc)

        try:
            result = self._execute_business_logic(request)

        except DomainException as exc:
            self.execution_end = datetime.now(timezone.utc)
            logger.info(f"{self.__class__.__name__} rejected: [{exc.code}] {exc.message}")

            error_result = UseCaseResult.from_exception(exc)
            error_result.metadata = {
                "execution_time_seconds": self._elapsed(),
                "failed_at": self.execution_end.isoformat(),
                "exception_type": type(exc).__name__
            }
            return error_result

        self.execution_end = datetime.now(timezone.utc)
        return UseCaseResult.success_result(
            result,
            metadata={
                "execution_time_seconds": self._elapsed(),
                "executed_at": self.execution_end.isoformat()
            }
        )

    def _elapsed(self) -> float:
        return (self.execution_end - self.execution_start).total_seconds()

    @abstractmethod
    def _execute_business_logic(self, request: T) -> R:
        """
        Execute the core business logic. Must be implemented by subclasses.
        """
        pass


class QueryUseCase(BaseUseCase[T, R]):
    """
    Base class for query use cases (read operations).
    """
    pass


class CommandUseCase(BaseUseCase[T, R]):
    """
    Base class for command use cases (write operations).
    Collects the domain events raised while executing.
    """

    def __init__(self):
        super().__init__()
        self.events: list = []

    def _execute_business_logic(self, request: T) -> R:
        """Execute command logic."""
        self.events = []
        return self._execute_command_logic(request)

    @abstractmethod
    def _execute_command_logic(self, request: T) -> R:
        """Execute command-specific logic."""
        pass
