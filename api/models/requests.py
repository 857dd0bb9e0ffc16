"""
API Request Models
==================

Pydantic models for task request validation.

None of these models has an owner field. Unknown fields such as
``ownerId`` are dropped during validation; the owner always comes from
the verified token.
"""

from typing import Optional

from pydantic import ConfigDict, Field

from models import CamelModel, TaskUpdate


class TaskCreateRequest(CamelModel):
    """Request model for creating a task."""

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "title": "Buy milk",
                "description": "Semi-skimmed, two litres"
            }
        }
    )

    title: str = Field(
        ...,
        min_length=1,
        max_length=200,
        description="Short task title"
    )
    description: str = Field(
        default="",
        max_length=5000,
        description="Free-form details"
    )


class TaskUpdateRequest(CamelModel):
    """
    Request model for updating a task.

    Every field is optional; omitted fields keep their current value.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "title": "Buy milk",
                "description": "Oat, one litre",
                "isComplete": True
            }
        }
    )

    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = Field(default=None, max_length=5000)
    is_complete: Optional[bool] = Field(default=None)

    def to_update(self) -> TaskUpdate:
        return TaskUpdate(
            title=self.title,
            description=self.description,
            is_complete=self.is_complete
        )
