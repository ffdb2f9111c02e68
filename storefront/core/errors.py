# storefront/core/errors.py
"""
Domain error taxonomy shared by the entity store, the gateway and the
API clients.

Every error carries an ErrorKind so callers can branch on the category
without matching exception classes, and a message that is safe to put in
a gateway envelope.
"""
from enum import Enum


class ErrorKind(str, Enum):
    NOT_FOUND = "not_found"
    VERSION_CONFLICT = "version_conflict"
    VALIDATION = "validation"
    TRANSPORT = "transport"


class StoreError(Exception):
    kind: ErrorKind = ErrorKind.TRANSPORT

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(StoreError):
    kind = ErrorKind.NOT_FOUND


class VersionConflictError(StoreError):
    """Raised when a conditional write loses against a concurrent writer."""

    kind = ErrorKind.VERSION_CONFLICT


class DuplicateEntityError(VersionConflictError):
    """Insert of a (partition, row) key that already exists."""


class ValidationFailure(StoreError):
    kind = ErrorKind.VALIDATION


class TransportFailure(StoreError):
    kind = ErrorKind.TRANSPORT
