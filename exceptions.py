"""
Custom Exceptions for TaskTrack
===============================

This module defines a hierarchy of custom exceptions that:

1. **Categorize Errors**: Different exception types for different problems
2. **Carry Context**: Include relevant information for debugging
3. **Support APIs**: Map cleanly to HTTP status codes

Exception Hierarchy:
    TaskTrackError (base)
    ├── AuthError
    │   ├── UnauthenticatedError
    │   ├── InvalidTokenError
    │   │   └── ExpiredTokenError
    │   └── InvalidCredentialsError
    ├── TaskNotFoundError
    ├── DuplicateUsernameError
    └── StorageError

TaskNotFoundError is raised both when a task does not exist and when it
belongs to someone else. Callers must not be able to tell the two apart,
so it never carries the owner id.
"""

from typing import Optional


class TaskTrackError(Exception):
    """
    Base exception for all TaskTrack errors.

    All custom exceptions inherit from this, allowing code to catch
    all TaskTrack-related errors with a single except clause.

    Attributes:
        message: Human-readable error description
        details: Additional context (dict for API responses)
    """

    def __init__(
        self,
        message: str,
        details: Optional[dict] = None
    ):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict:
        """
        Convert to dictionary for API responses.

        Returns a structured error that can be easily serialized to JSON.
        """
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "details": self.details
        }


# =============================================================================
# Authentication Errors
# =============================================================================

class AuthError(TaskTrackError):
    """Base class for authentication errors."""
    pass


class UnauthenticatedError(AuthError):
    """Raised when a protected route is called without a valid bearer token."""

    def __init__(self, reason: str = "Invalid token"):
        super().__init__(message=reason)


class InvalidTokenError(AuthError):
    """Raised when a token is malformed or its signature does not match."""

    def __init__(self, reason: str = "Invalid token"):
        super().__init__(message=reason)


class ExpiredTokenError(InvalidTokenError):
    """Raised when a correctly signed token is past its expiry."""

    def __init__(self):
        super().__init__(reason="Token has expired")


class InvalidCredentialsError(AuthError):
    """Raised on login mismatch. Does not say whether the username exists."""

    def __init__(self):
        super().__init__(message="Invalid username or password")


# =============================================================================
# Data Errors
# =============================================================================

class TaskNotFoundError(TaskTrackError):
    """Raised when a task is absent or not owned by the caller."""

    def __init__(self, task_id: str):
        super().__init__(
            message=f"Task {task_id} not found",
            details={"task_id": task_id}
        )


class DuplicateUsernameError(TaskTrackError):
    """Raised when registering a username that is already taken."""

    def __init__(self, username: str):
        super().__init__(
            message=f"Username '{username}' is already taken",
            details={"username": username}
        )


class StorageError(TaskTrackError):
    """
    Raised when the persistence backend fails.

    The original error is logged server-side and kept on ``__cause__``;
    nothing about it is exposed to the client.
    """

    def __init__(self, operation: str):
        super().__init__(message=f"Storage failure during {operation}")

