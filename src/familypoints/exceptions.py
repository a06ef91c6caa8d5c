"""Custom exception hierarchy for the Family Points package."""

from __future__ import annotations


class FamilyPointsError(Exception):
    """Base class for all Family Points specific errors."""


class StoreUnavailableError(FamilyPointsError):
    """Raised when the persistent store cannot be constructed or reached."""


class QueryFailureError(FamilyPointsError):
    """Raised when a single read or write against the store fails."""

    def __init__(self, operation: str, message: str = "") -> None:
        self.operation = operation
        super().__init__(f"{operation} failed: {message}" if message else f"{operation} failed")


class NoActionToUndoError(FamilyPointsError):
    """Raised when undo is requested with nothing pending or no store connection."""


class MemberNotFoundError(FamilyPointsError):
    """Raised when a member lookup fails."""
