from typing import Any

from fastapi import FastAPI
from fastapi.openapi.utils import get_openapi
from pydantic import BaseModel, Field

TAGS_METADATA = [
    {"name": "students", "description": "Students with sequential student ids"},
    {"name": "courses", "description": "Course catalogue"},
    {"name": "stats", "description": "Dashboard aggregates"},
]


def set_custom_openapi(app: FastAPI) -> None:
    def custom_openapi() -> dict[str, Any]:
        if app.openapi_schema:
            return app.openapi_schema

        app.openapi_schema = get_openapi(
            title="EduManager API",
            version="0.1.0",
            summary="Student and course record keeping",
            routes=app.routes,
            tags=TAGS_METADATA,
        )
        return app.openapi_schema

    app.openapi = custom_openapi  # type: ignore[method-assign]


class ErrorResponse(BaseModel):
    """Standard error response format."""

    message: str = Field(..., description="Human-readable error message")
    type: str = Field(..., description="Machine-readable error type")

    model_config = {
        "json_schema_extra": {
            "examples": [
                {"message": "Student not found", "type": "not_found"},
                {"message": "Name, email, course, and enrollment date are required", "type": "validation_error"},
                {"message": "Failed to allocate a unique 'studentId' after 5 attempts", "type": "allocation_exhausted"},
            ]
        }
    }


class MessageResponse(BaseModel):
    """Acknowledgement for operations without a resource body."""

    message: str
