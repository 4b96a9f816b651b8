"""
Base class for domain events.
Events are collected by aggregates and pulled by the caller for dispatch.
"""

from abc import ABC, abstractmethod
from typing import Dict, Any
from datetime import datetime, timezone
from dataclasses import dataclass, field
import uuid


@dataclass(kw_only=True)
class DomainEvent(ABC):
    """Base class for all domain events."""

    event_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    occurred_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    event_type: str = field(default="", init=False)
    version: int = field(default=1)

    def __post_init__(self):
        """Set event type based on class name."""
        if not self.event_type:
            self.event_type = self.__class__.__name__

    def to_dict(self) -> Dict[str, Any]:
        """Convert event to dictionary for serialization."""
        return {
            "event_id": self.event_id,
            "event_type": self.event_type,
            "occurred_at": self.occurred_at.isoformat(),
            "version": self.version,
            "data": self._get_event_data()
        }

    @abstractmethod
    def _get_event_data(self) -> Dict[str, Any]:
        """Get event-specific data for serialization."""
        pass
