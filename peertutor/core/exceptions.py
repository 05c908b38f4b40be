"""
Domain exceptions for the booking core.

They are raised where a rule is broken and turned into typed results by
``peertutor.core.results.service_operation`` before leaving the service layer.
"""

from peertutor.core.results import ErrorKind


class DomainException(Exception):
    """Base exception for all domain-specific errors."""

    kind = ErrorKind.UNEXPECTED

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(self.message)


class NotFoundException(DomainException):
    """Raised when a referenced entity does not exist."""

    kind = ErrorKind.NOT_FOUND


class ValidationException(DomainException):
    """Raised when a business rule is violated."""

    kind = ErrorKind.VALIDATION


class ForbiddenException(DomainException):
    """Raised when the acting user lacks the capability for an operation."""

    kind = ErrorKind.FORBIDDEN


class StoreConflictException(Exception):
    """
    Raised by repositories when the store rejects a write because it
    conflicts with an existing row (unique constraint violation).
    """
