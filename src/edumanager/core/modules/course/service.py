from typing import Any
from uuid import UUID

import structlog
from pymongo.asynchronous.database import AsyncDatabase

from edumanager.core.core import Service
from edumanager.core.db import store_errors
from edumanager.core.modules.course.models import MAX_DURATION, MIN_DURATION, Course, CourseStatus
from edumanager.core.pagination import PaginationResult, paginate
from edumanager.errors import NotFoundError, ValidationError
from edumanager.utils import clean, now

logger = structlog.get_logger(__name__)


class CourseService(Service):
    """Manages the course catalogue."""

    def __init__(self, database: AsyncDatabase[dict[str, Any]]) -> None:
        super().__init__(database)
        self._collection = database.get_collection("courses")

    async def on_start(self) -> None:
        await self._collection.create_index([("created_at", -1)])

    async def list_courses(self, limit: int = 50, offset: int = 0) -> PaginationResult[Course]:
        """Get paginated courses, most recently created first."""
        return await paginate(self._collection, Course, {}, [("created_at", -1)], limit, offset)

    async def get_course(self, course_id: UUID) -> Course:
        with store_errors():
            doc = await self._collection.find_one({"_id": course_id})
        if not doc:
            raise NotFoundError("Course not found")
        return Course.model_validate(doc)

    async def create_course(
        self, name: str, description: str, duration: int | None, status: CourseStatus | None = None
    ) -> Course:
        course = Course(**self._clean_fields(name, description, duration, status))
        with store_errors():
            await self._collection.insert_one(course.to_mongo())
        logger.info("course_created", id=course.id, name=course.name)
        return course

    async def update_course(
        self, course_id: UUID, name: str, description: str, duration: int | None, status: CourseStatus | None = None
    ) -> Course:
        fields = self._clean_fields(name, description, duration, status)
        with store_errors():
            result = await self._collection.update_one({"_id": course_id}, {"$set": {**fields, "updated_at": now()}})
        if result.matched_count == 0:
            raise NotFoundError("Course not found")
        return await self.get_course(course_id)

    async def delete_course(self, course_id: UUID) -> None:
        with store_errors():
            result = await self._collection.delete_one({"_id": course_id})
        if result.deleted_count == 0:
            raise NotFoundError("Course not found")
        logger.info("course_deleted", id=course_id)

    async def count_courses(self, status: CourseStatus | None = None) -> int:
        query = {} if status is None else {"status": status}
        with store_errors():
            return await self._collection.count_documents(query)

    @staticmethod
    def _clean_fields(
        name: str, description: str, duration: int | None, status: CourseStatus | None
    ) -> dict[str, Any]:
        name, description = clean(name), clean(description)
        if not name or not description or not duration:
            raise ValidationError("Course name, description, and duration are required")
        if not MIN_DURATION <= duration <= MAX_DURATION:
            raise ValidationError(f"Duration must be between {MIN_DURATION} and {MAX_DURATION} months")
        return {
            "name": name,
            "description": description,
            "duration": duration,
            "status": status or CourseStatus.ACTIVE,
        }
