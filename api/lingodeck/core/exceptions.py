"""
Custom exceptions for the application.
"""


class LingodeckException(Exception):
    """Base exception for all Lingodeck application exceptions."""
    pass


class ValidationError(LingodeckException):
    """Raised when validation fails."""
    pass


class NotFoundError(LingodeckException):
    """Raised when a requested resource is not found."""
    pass


class ConflictError(LingodeckException):
    """Raised when there's a conflict (e.g., duplicate entry)."""
    pass


class UpstreamServiceError(LingodeckException):
    """
    Raised when an external collaborator (database, AI provider) fails.

    The message is meant for display: callers surface it as a recoverable
    error and retry later.
    """
    pass
