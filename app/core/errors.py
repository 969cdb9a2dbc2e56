"""
Application Error Taxonomy

Every domain operation reports failures by raising one of these exceptions.
The HTTP layer (app.main) maps them to status codes uniformly and always
answers with a ``{"message": ...}`` body.
"""

from typing import Optional


class AppError(Exception):
    """Base class for expected, client-facing failures."""

    status_code: int = 500
    default_message: str = "Internal server error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(AppError):
    """Missing or malformed input."""
    status_code = 400
    default_message = "Invalid request"


class UnauthenticatedError(AppError):
    """No session, or a session that cannot be resolved to a user."""
    status_code = 401
    default_message = "Unauthorized"


class ForbiddenError(AppError):
    """Authenticated, but disallowed by role, country or ownership."""
    status_code = 403
    default_message = "Forbidden"


class NotFoundError(AppError):
    """Referenced entity does not exist."""
    status_code = 404
    default_message = "Resource not found"


class ConflictError(AppError):
    """Request conflicts with the current state of a resource."""
    status_code = 400
    default_message = "Request conflicts with the current resource state"


class InvalidTransitionError(ConflictError):
    """Order status transition not allowed from the current status."""

    def __init__(self, message: str, current_status: str):
        self.current_status = current_status
        super().__init__(f"{message} (current status: {current_status})")
