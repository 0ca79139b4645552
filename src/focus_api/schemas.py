from __future__ import annotations

from datetime import date, datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from .models import FocusEntry


def _parse_created_at(value: Any) -> Any:
    """
    Internal helper to promote a bare date to midnight before pydantic parses createdAt.
    - A date (not datetime) or a 'YYYY-MM-DD' string becomes a datetime at 00:00.
    - Anything else (full ISO8601 strings incl. 'Z'/offsets, epoch numbers, datetimes)
      is passed through unchanged for pydantic's own datetime parsing.
    """
    if isinstance(value, datetime):
        return value

    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, 0, 0, 0)

    if isinstance(value, str) and len(value.strip()) == 10:
        try:
            d = date.fromisoformat(value.strip())
        except ValueError:
            return value
        return datetime(d.year, d.month, d.day, 0, 0, 0)

    return value


class _CamelModel(BaseModel):
    """Base model exposing camelCase JSON keys while accepting snake_case too."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# PUBLIC_INTERFACE
class FocusEntryCreate(_CamelModel):
    """
    Schema for logging a new focus entry.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "reason": "Closed the video tab and kept reading",
                "status": True,
                "category": "study",
                "createdAt": "2025-02-01T09:30:00",
            }
        },
    )

    reason: str = Field(..., description="Why the entry was logged", min_length=1)
    status: bool = Field(
        ..., description="True if the distraction was resisted, False otherwise", strict=True
    )
    category: str = Field(..., description="Free-form label for the entry", min_length=1)
    created_at: Optional[datetime] = Field(
        default=None,
        description=(
            "Creation time. Accepts an ISO8601 date or datetime (with Z or offset) or epoch seconds; "
            "dates are set to 00:00 and server time is used when omitted"
        ),
    )

    @field_validator("reason", "category")
    @classmethod
    def validate_text(cls, v: str) -> str:
        """
        Strip whitespace and reject blank values.
        """
        s = v.strip()
        if not s:
            raise ValueError("must not be blank")
        return s

    @field_validator("created_at", mode="before")
    @classmethod
    def parse_created_at(cls, v: Any) -> Any:
        """
        Promote date-only createdAt values to midnight; pydantic parses the rest.
        """
        return _parse_created_at(v)

    def to_entity(self) -> FocusEntry:
        """Build an unsaved FocusEntry from this payload."""
        entry = FocusEntry(self.reason, self.status, self.created_at)
        entry.category = self.category
        return entry


# PUBLIC_INTERFACE
class FocusEntryOut(_CamelModel):
    """
    Schema returned by the API for a focus entry.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "id": 7,
                "reason": "Closed the video tab and kept reading",
                "status": True,
                "category": "study",
                "createdAt": "2025-02-01T09:30:00",
            }
        },
    )

    id: int = Field(..., description="Unique identifier of the entry")
    reason: str = Field(..., description="Why the entry was logged")
    status: bool = Field(..., description="True for a successful focus session")
    category: str = Field(..., description="Free-form label for the entry")
    created_at: datetime = Field(..., description="Creation timestamp")


# PUBLIC_INTERFACE
class StatsOut(_CamelModel):
    """
    Aggregate statistics over every stored entry.
    """

    total: int = Field(..., description="Number of entries")
    successes: int = Field(..., description="Entries with status true")
    failures: int = Field(..., description="Entries with status false")
    success_rate: float = Field(
        ..., description="Percentage of successful entries (0-100); 0.0 when there are no entries"
    )
