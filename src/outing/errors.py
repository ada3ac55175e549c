"""Exception types shared across the state core."""

from __future__ import annotations


class OutingError(Exception):
    """Base class for errors raised by the outing package."""


class StoreContextError(OutingError):
    """Raised when the store API is used without a bound store.

    This indicates a wiring defect in the calling layer, not a data
    condition, so it is never caught inside the package.
    """


class ChecklistValidationError(OutingError, ValueError):
    """Raised when a checklist or item is built from invalid input."""

    def __init__(self, message: str, field: str | None = None) -> None:
        """Initialize ChecklistValidationError.

        Args:
            message: Error description
            field: Name of the offending input field
        """
        self.field = field
        super().__init__(message)


class BuiltInChecklistError(OutingError):
    """Raised when a guarded operation targets a built-in checklist."""

    def __init__(self, checklist_id: str) -> None:
        self.checklist_id = checklist_id
        super().__init__(f"Checklist '{checklist_id}' is built-in and cannot be deleted")


class StorageError(OutingError):
    """Raised by key-value storage backends when a call fails."""

    def __init__(self, message: str, key: str | None = None) -> None:
        """Initialize StorageError.

        Args:
            message: Error description
            key: Storage key involved in the failed call, if any
        """
        self.key = key
        super().__init__(message)
