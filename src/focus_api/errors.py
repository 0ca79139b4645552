from __future__ import annotations

from typing import List, Optional


# PUBLIC_INTERFACE
class ValidationError(ValueError):
    """
    Raised when a focus entry is missing a required field at persistence time.

    Attributes:
    - fields: names of the offending fields, in declaration order
    """

    def __init__(self, message: str, fields: Optional[List[str]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.fields = list(fields or [])


# PUBLIC_INTERFACE
class StorageError(RuntimeError):
    """Raised when the persistence provider fails (connectivity, constraints, I/O)."""
