"""Domain error taxonomy.

Every failure the ledger reports to a client is an ``AppError`` carrying a
machine-readable ``kind`` and an HTTP status. ``main`` turns them into
``{"kind": ..., "detail": ...}`` responses.
"""

from fastapi import status


class AppError(Exception):
    """Base class for all application errors."""

    kind: str = "InternalError"
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Internal server error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(AppError):
    kind = "ValidationError"
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    default_message = "Invalid input"


class UnauthorizedError(AppError):
    kind = "Unauthorized"
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Not authenticated"


class InvalidCredentialsError(UnauthorizedError):
    default_message = "Invalid email or password"


class InvalidOrExpiredTokenError(UnauthorizedError):
    default_message = "Invalid or expired refresh token"


class ForbiddenError(AppError):
    kind = "Forbidden"
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Insufficient permissions"


class NotFoundError(AppError):
    kind = "NotFound"
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Resource not found"


class ConflictError(AppError):
    kind = "Conflict"
    status_code = status.HTTP_409_CONFLICT
    default_message = "A record with this identifier already exists"


class InsufficientStockError(AppError):
    kind = "InsufficientStock"
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    default_message = "Insufficient stock for this category"
