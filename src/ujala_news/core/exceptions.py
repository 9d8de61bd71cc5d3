"""
Error taxonomy shared by every layer.

Each error carries the HTTP status it is rendered with, so the API boundary
needs a single exception handler.
"""

from typing import Any


class UjalaError(Exception):
    """Base class for all application errors."""

    status_code: int = 500
    default_message: str = "Something went wrong!"

    def __init__(self, message: str | None = None, **context: Any):
        self.message = message or self.default_message
        self.context = context
        super().__init__(self.message)


class ValidationError(UjalaError):
    """Missing required field or violated schema constraint."""

    status_code = 400
    default_message = "Validation failed"


class DuplicateError(ValidationError):
    """A unique constraint (slug, short id, email, reporter code) was violated."""

    status_code = 409
    default_message = "Duplicate value"


class InvalidTransitionError(ValidationError):
    """A workflow transition was requested from a state that forbids it."""

    status_code = 409
    default_message = "Transition not allowed"


class NotFoundError(UjalaError):
    status_code = 404
    default_message = "Not found"


class AuthenticationError(UjalaError):
    status_code = 401
    default_message = "Invalid credentials"


class AuthorizationError(UjalaError):
    status_code = 403
    default_message = "You do not have permission to perform this action"


class ReporterPendingApprovalError(AuthorizationError):
    default_message = "Reporter account pending approval"


class NotAReporterError(AuthorizationError):
    status_code = 400
    default_message = "Not a reporter account"


class FeedError(UjalaError):
    """The live news provider failed or returned garbage."""

    status_code = 502
    default_message = "Live news provider error"


class FeedNotConfiguredError(FeedError):
    status_code = 503
    default_message = "NEWS_API_KEY is not configured"
