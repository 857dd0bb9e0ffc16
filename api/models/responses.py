"""
API Response Models
===================

Pydantic models for API responses.

Tasks and user identities are returned using the domain models from
``models`` directly; this module only holds the error envelope.
"""

from pydantic import BaseModel, ConfigDict, Field


class ErrorResponse(BaseModel):
    """Structured error body returned for every handled failure."""

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "error_type": "TaskNotFoundError",
                "message": "Task 550e8400-e29b-41d4-a716-446655440000 not found",
                "details": {"task_id": "550e8400-e29b-41d4-a716-446655440000"}
            }
        }
    )

    error_type: str = Field(..., description="Stable error kind")
    message: str = Field(..., description="Human-readable description")
    details: dict = Field(default_factory=dict, description="Additional context")
