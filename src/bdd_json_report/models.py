"""Core data models for bdd-json-report library."""
from typing import Any, Dict

from pydantic import BaseModel, ConfigDict, Field
from ulid import ULID


def _new_event_id() -> str:
    return str(ULID())


class SourceLocation(BaseModel):
    """A point in specification source text, compared by value."""

    model_config = ConfigDict(frozen=True)

    uri: str = Field(
        ...,
        min_length=1,
        description="Path or URI of the source document (e.g. 'a.feature')",
    )
    line: int = Field(
        ...,
        ge=0,
        description="1-based line number inside the source document",
    )

    def __str__(self) -> str:
        return f"{self.uri}:{self.line}"


class Event(BaseModel):
    """Immutable in-process event as delivered by the broadcaster."""

    model_config = ConfigDict(frozen=True)

    event_id: str = Field(
        default_factory=_new_event_id,
        min_length=1,
        description="Unique event identifier (ULID by default)",
    )
    event_type: str = Field(
        ...,
        min_length=1,
        description="Event type identifier (e.g., 'FeatureParsed', 'TestStepFinished')"
    )
    payload: Dict[str, Any] = Field(
        default_factory=dict,
        description="Event-specific data, validated by the consuming component"
    )

    def __repr__(self) -> str:
        """Human-readable representation."""
        return (
            f"Event(event_id={self.event_id[:8]}..., "
            f"type={self.event_type})"
        )

    def to_dict(self) -> Dict[str, Any]:
        """Serialize event to dictionary."""
        return self.model_dump()

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Event":
        """Deserialize event from dictionary."""
        return cls(**data)


# Custom Exceptions
class BddJsonReportError(Exception):
    """Base exception for all library errors."""
    pass


class ValidationError(BddJsonReportError):
    """A value handed to the library failed validation."""
    pass
