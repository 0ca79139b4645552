from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from typing import List, Optional

from .errors import ValidationError

REQUIRED_FIELDS = ("reason", "status", "category")


# PUBLIC_INTERFACE
@dataclass
class FocusEntry:
    """
    A single logged attempt at maintaining focus.

    Fields:
    - reason: Why the entry was logged (required, non-blank)
    - status: True for a successful focus session, False for a failure (required)
    - created_at: Creation timestamp; defaulted to server time on first save
    - category: Free-form label (required)
    - id: Unique integer identifier assigned by the storage provider

    All fields default to None so the record can be built empty and filled in
    field by field before it is saved.
    """

    reason: Optional[str] = None
    status: Optional[bool] = None
    created_at: Optional[datetime] = None
    category: Optional[str] = None
    id: Optional[int] = None

    def missing_fields(self) -> List[str]:
        """Return the required fields that are unset (blank text counts as unset)."""
        missing = []
        for name in REQUIRED_FIELDS:
            value = getattr(self, name)
            if value is None or (isinstance(value, str) and not value.strip()):
                missing.append(name)
        return missing

    def ensure_valid(self) -> None:
        """
        Raise ValidationError if any required field is missing.
        """
        missing = self.missing_fields()
        if missing:
            raise ValidationError(
                f"Missing required field(s): {', '.join(missing)}", fields=missing
            )

    def on_create(self, now: datetime) -> "FocusEntry":
        """
        Return a copy ready for its first write: created_at is set to `now`
        unless the caller already supplied one.
        """
        if self.created_at is not None:
            return replace(self)
        return replace(self, created_at=now)
