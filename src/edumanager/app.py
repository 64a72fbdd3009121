from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Any
from uuid import UUID

from pymongo import AsyncMongoClient

from edumanager.config import Config
from edumanager.core.core import Core
from edumanager.core.modules.course.models import Course, CourseStatus
from edumanager.core.modules.stats.models import DashboardStats
from edumanager.core.modules.student.models import Student, StudentStatus
from edumanager.core.pagination import PaginationResult


class App:
    """Facade for all application operations, the only entry point used by the web layer."""

    def __init__(self, config: Config, mongo_client: AsyncMongoClient[dict[str, Any]] | None = None) -> None:
        self._core = Core(config, mongo_client)

    @asynccontextmanager
    async def lifespan(self) -> AsyncGenerator[None]:
        """Application lifespan management - delegates to Core."""
        async with self._core.lifespan():
            yield

    async def get_dashboard_stats(self) -> DashboardStats:
        return await self._core.services.stats.get_dashboard_stats()

    # === Students ===
    async def get_students(self, limit: int = 50, offset: int = 0, query: str | None = None) -> PaginationResult[Student]:
        return await self._core.services.student.list_students(limit, offset, query)

    async def get_student(self, student_id: UUID) -> Student:
        return await self._core.services.student.get_student(student_id)

    async def create_student(
        self, name: str, email: str, course: str, enrollment_date: datetime | None, status: StudentStatus | None
    ) -> Student:
        return await self._core.services.student.create_student(name, email, course, enrollment_date, status)

    async def update_student(
        self,
        student_id: UUID,
        name: str,
        email: str,
        course: str,
        enrollment_date: datetime | None,
        status: StudentStatus | None,
    ) -> Student:
        return await self._core.services.student.update_student(student_id, name, email, course, enrollment_date, status)

    async def delete_student(self, student_id: UUID) -> None:
        await self._core.services.student.delete_student(student_id)

    # === Courses ===
    async def get_courses(self, limit: int = 50, offset: int = 0) -> PaginationResult[Course]:
        return await self._core.services.course.list_courses(limit, offset)

    async def get_course(self, course_id: UUID) -> Course:
        return await self._core.services.course.get_course(course_id)

    async def create_course(
        self, name: str, description: str, duration: int | None, status: CourseStatus | None
    ) -> Course:
        return await self._core.services.course.create_course(name, description, duration, status)

    async def update_course(
        self, course_id: UUID, name: str, description: str, duration: int | None, status: CourseStatus | None
    ) -> Course:
        return await self._core.services.course.update_course(course_id, name, description, duration, status)

    async def delete_course(self, course_id: UUID) -> None:
        await self._core.services.course.delete_course(course_id)
