"""Error types shared by repositories, services and routers."""

from __future__ import annotations


class AppError(Exception):
    """Base class for errors that map onto an HTTP outcome."""

    status_code = 500
    default_message = "Server error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(AppError):
    status_code = 400
    default_message = "Invalid request"


class DuplicateEmail(AppError):
    status_code = 409
    default_message = "Email in use"


class InvalidCredentials(AppError):
    status_code = 401
    default_message = "Invalid credentials"


class MissingToken(AppError):
    status_code = 401
    default_message = "No token"


class InvalidToken(AppError):
    status_code = 401
    default_message = "Invalid token"


class NotFound(AppError):
    """Record absent or owned by someone else; the two are never distinguished."""

    status_code = 404
    default_message = "Not found"


class StorageError(AppError):
    """Unexpected persistence failure. Clients only ever see a generic 500."""

    backend = "storage"


class EmbeddedStoreError(StorageError):
    backend = "embedded"


class ExternalStoreError(StorageError):
    backend = "external"
