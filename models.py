"""
Domain Models for TaskTrack
===========================

This module defines the core data structures used throughout the application.
We use Pydantic for validation and for JSON serialization, both for the
HTTP layer and for the records kept in Redis.

Field names are snake_case in Python and camelCase on the wire
(``is_complete`` <-> ``isComplete``). Models accept either form on input.

Design Principle: These models are "pure" - they have no dependencies on
external services, databases, or frameworks.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model serializing to camelCase and accepting both spellings."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )


class UserIdentity(CamelModel):
    """
    Public view of a registered user.

    This is what registration returns. It never carries the password
    or its hash.
    """

    id: str = Field(..., description="Opaque user identifier")
    username: str = Field(..., description="Unique, case-sensitive username")


class User(UserIdentity):
    """
    Stored credential record.

    Created once at registration and never modified afterwards.
    Only the credential store and the login route ever see this model.
    """

    password_hash: str = Field(..., description="bcrypt hash of the password")

    def identity(self) -> UserIdentity:
        """Drop the hash, keeping only the public fields."""
        return UserIdentity(id=self.id, username=self.username)


class Task(CamelModel):
    """
    A single task owned by exactly one user.

    ``owner_id`` is assigned at creation from the verified token and is
    never reassigned.
    """

    id: str = Field(..., description="Opaque task identifier")
    owner_id: str = Field(..., description="Id of the owning user")
    title: str = Field(..., description="Short task title")
    description: str = Field(default="", description="Free-form details")
    is_complete: bool = Field(default=False, description="Completion flag")


class TaskUpdate(CamelModel):
    """
    Partial set of mutable task fields.

    Fields left as None are not touched by an update.
    """

    title: Optional[str] = None
    description: Optional[str] = None
    is_complete: Optional[bool] = None

    def changes(self) -> dict:
        """Return only the fields that were provided, keyed by attribute name."""
        return self.model_dump(exclude_none=True)
