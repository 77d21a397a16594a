"""Exceptions raised by the portal services."""

from __future__ import annotations

from typing import Iterable


class MappingPortalError(Exception):
    """Base class for portal service errors."""


class ConfigValidationError(MappingPortalError):
    """Raised when a submission is missing required fields."""

    def __init__(self, missing_fields: Iterable[str], message: str | None = None) -> None:
        self.missing_fields = list(missing_fields)
        if message is None:
            message = "Missing required configuration fields: " + ", ".join(self.missing_fields)
        super().__init__(message)


class NotFoundError(MappingPortalError):
    """Raised when a referenced record or file does not exist."""


class SourceNotFoundError(NotFoundError):
    """Raised when a source set or source table cannot be located."""


class PersistenceError(MappingPortalError):
    """Raised when a project file cannot be read or written."""


class PublishError(MappingPortalError):
    """Raised when git add/commit/push fails."""
