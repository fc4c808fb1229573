"""
Error types raised by the university services.

Callers (the CLI) catch UniversityServiceError once and turn it into a
status message. CorruptState never leaves the local service.
"""

from __future__ import annotations

from typing import Optional, Sequence


class UniversityServiceError(Exception):
    """Base class for all errors raised by a UniversityService."""


class ValidationError(UniversityServiceError):
    """Raised by create() when required fields are missing or blank."""

    def __init__(self, missing: Sequence[str], message: str = "Name, portal link, and location are required") -> None:
        super().__init__(message)
        self.missing = list(missing)


class NotFound(UniversityServiceError):
    """Raised when no university has the requested id."""

    def __init__(self, university_id: str) -> None:
        super().__init__("University not found")
        self.university_id = university_id


class RequestFailed(UniversityServiceError):
    """
    Raised by the remote service for any failed HTTP call.

    Only the operation and the status code are kept; the response body is
    not parsed.
    """

    def __init__(self, operation: str, status_code: Optional[int] = None) -> None:
        super().__init__(f"Failed to {operation}")
        self.operation = operation
        self.status_code = status_code


class CorruptState(UniversityServiceError):
    """Persisted local data could not be parsed."""
