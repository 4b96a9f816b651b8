"""
Base DTOs for the application layer.
Field names are snake_case in Python and camelCase on the wire, matching
the JSON payloads exchanged with the invoice endpoints.
"""

from typing import Any, Dict, Optional
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class BaseDTO(BaseModel):
    """Base DTO with common configuration."""

    model_config = ConfigDict(
        # camelCase aliases for JSON payloads
        alias_generator=to_camel,
        # Allow population by field name or alias
        populate_by_name=True,
        # Convert enum values to their values
        use_enum_values=True,
        # Validate assignment
        validate_assignment=True,
        # Reject unknown fields
        extra="forbid",
    )

    def to_payload(self, exclude_none: bool = False) -> Dict[str, Any]:
        """JSON-compatible dictionary using the wire (camelCase) names."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=exclude_none)


class RequestDTO(BaseDTO):
    """Base class for request DTOs."""
    pass


class ResponseDTO(BaseDTO):
    """Base class for response DTOs."""
    pass


class ErrorResponseDTO(ResponseDTO):
    """Error response DTO."""

    error: str = Field(description="Error code")
    message: str = Field(description="Error message")
    field: Optional[str] = Field(default=None, description="Offending input field")
