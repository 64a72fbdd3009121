from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Query
from pydantic import BaseModel, Field

from edumanager.core.modules.course.models import Course, CourseStatus
from edumanager.core.pagination import PaginationResult
from edumanager.web.deps import AppDep
from edumanager.web.openapi import ErrorResponse, MessageResponse

router: APIRouter = APIRouter(tags=["courses"])


class CourseRequest(BaseModel):
    """Course fields accepted on create and update."""

    name: str = Field("", description="Course name")
    description: str = Field("", description="Short description")
    duration: int | None = Field(None, description="Length in months (1-48)")
    status: CourseStatus | None = Field(None, description="Defaults to Active")


@router.get("/courses", summary="List courses", operation_id="listCourses")
async def list_courses(
    app: AppDep,
    limit: Annotated[int, Query(ge=1, description="Maximum items to return")] = 50,
    offset: Annotated[int, Query(ge=0, description="Number of items to skip")] = 0,
) -> PaginationResult[Course]:
    return await app.get_courses(limit, offset)


@router.get(
    "/courses/{course_id}",
    summary="Get course",
    operation_id="getCourse",
    responses={404: {"model": ErrorResponse, "description": "Course not found"}},
)
async def get_course(course_id: UUID, app: AppDep) -> Course:
    return await app.get_course(course_id)


@router.post(
    "/courses",
    summary="Create course",
    operation_id="createCourse",
    status_code=201,
    responses={400: {"model": ErrorResponse, "description": "Missing fields or duration out of range"}},
)
async def create_course(request: CourseRequest, app: AppDep) -> Course:
    return await app.create_course(request.name, request.description, request.duration, request.status)


@router.put(
    "/courses/{course_id}",
    summary="Update course",
    operation_id="updateCourse",
    responses={
        400: {"model": ErrorResponse, "description": "Missing fields or duration out of range"},
        404: {"model": ErrorResponse, "description": "Course not found"},
    },
)
async def update_course(course_id: UUID, request: CourseRequest, app: AppDep) -> Course:
    return await app.update_course(course_id, request.name, request.description, request.duration, request.status)


@router.delete(
    "/courses/{course_id}",
    summary="Delete course",
    operation_id="deleteCourse",
    responses={404: {"model": ErrorResponse, "description": "Course not found"}},
)
async def delete_course(course_id: UUID, app: AppDep) -> MessageResponse:
    await app.delete_course(course_id)
    return MessageResponse(message="Course deleted successfully")
