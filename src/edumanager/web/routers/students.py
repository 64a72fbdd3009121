"""Student endpoints."""

from datetime import datetime
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Query
from pydantic import BaseModel, Field

from edumanager.core.modules.student.models import Student, StudentStatus
from edumanager.core.pagination import PaginationResult
from edumanager.web.deps import AppDep
from edumanager.web.openapi import ErrorResponse, MessageResponse

router: APIRouter = APIRouter(tags=["students"])


class StudentRequest(BaseModel):
    """Student fields accepted on create and update. The student id is assigned by the server."""

    name: str = Field("", description="Full name")
    email: str = Field("", description="Contact email, stored lowercased")
    course: str = Field("", description="Name of the course the student is enrolled in")
    enrollment_date: datetime | None = Field(None, description="Enrollment date (ISO 8601)")
    status: StudentStatus | None = Field(None, description="Defaults to Active")

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "name": "Ada Lovelace",
                    "email": "ada@example.com",
                    "course": "Mathematics",
                    "enrollment_date": "2025-09-01T00:00:00",
                    "status": "Active",
                }
            ]
        }
    }


@router.get(
    "/students",
    summary="List students",
    description="Get paginated students sorted by student id, newest first. "
    "Use `q` to search name, email and course (case-insensitive).",
    operation_id="listStudents",
)
async def list_students(
    app: AppDep,
    limit: Annotated[int, Query(ge=1, description="Maximum items to return")] = 50,
    offset: Annotated[int, Query(ge=0, description="Number of items to skip")] = 0,
    q: Annotated[str | None, Query(description="Search text")] = None,
) -> PaginationResult[Student]:
    return await app.get_students(limit, offset, q)


@router.get(
    "/students/{student_id}",
    summary="Get student",
    operation_id="getStudent",
    responses={404: {"model": ErrorResponse, "description": "Student not found"}},
)
async def get_student(student_id: UUID, app: AppDep) -> Student:
    return await app.get_student(student_id)


@router.post(
    "/students",
    summary="Create student",
    description="Create a student. A sequential student id is allocated automatically.",
    operation_id="createStudent",
    status_code=201,
    responses={
        201: {"description": "Student created successfully"},
        400: {"model": ErrorResponse, "description": "Missing required fields"},
        409: {"model": ErrorResponse, "description": "Rejected by a unique index on a non-id field"},
        500: {"model": ErrorResponse, "description": "Could not allocate a unique student id"},
    },
)
async def create_student(request: StudentRequest, app: AppDep) -> Student:
    return await app.create_student(request.name, request.email, request.course, request.enrollment_date, request.status)


@router.put(
    "/students/{student_id}",
    summary="Update student",
    description="Replace the editable fields of a student. The student id is immutable.",
    operation_id="updateStudent",
    responses={
        400: {"model": ErrorResponse, "description": "Missing required fields"},
        404: {"model": ErrorResponse, "description": "Student not found"},
    },
)
async def update_student(student_id: UUID, request: StudentRequest, app: AppDep) -> Student:
    return await app.update_student(
        student_id, request.name, request.email, request.course, request.enrollment_date, request.status
    )


@router.delete(
    "/students/{student_id}",
    summary="Delete student",
    description="Delete a student. Deleting the last student resets the student id counter.",
    operation_id="deleteStudent",
    responses={404: {"model": ErrorResponse, "description": "Student not found"}},
)
async def delete_student(student_id: UUID, app: AppDep) -> MessageResponse:
    await app.delete_student(student_id)
    return MessageResponse(message="Student deleted successfully")
