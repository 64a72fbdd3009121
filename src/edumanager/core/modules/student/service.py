import re
from datetime import datetime
from typing import Any
from uuid import UUID

import structlog
from pymongo.asynchronous.database import AsyncDatabase
from pymongo.errors import OperationFailure

from edumanager.core.core import Service
from edumanager.core.db import store_errors
from edumanager.core.modules.sequence.allocator import IdAllocator
from edumanager.core.modules.sequence.creator import RecordCreator
from edumanager.core.modules.sequence.deleter import RecordDeleter
from edumanager.core.modules.student.models import STUDENT_ID_SEQUENCE, Student, StudentStatus
from edumanager.core.pagination import PaginationResult, paginate
from edumanager.errors import NotFoundError, ValidationError
from edumanager.utils import clean, now

logger = structlog.get_logger(__name__)

# Server error codes meaning there was nothing to drop
NAMESPACE_NOT_FOUND = 26
INDEX_NOT_FOUND = 27

SEARCH_FIELDS = ("name", "email", "course")


class StudentService(Service):
    """Manages students, allocating sequential student ids on creation."""

    def __init__(self, database: AsyncDatabase[dict[str, Any]]) -> None:
        super().__init__(database)
        self._collection = database.get_collection("students")
        self._creator: RecordCreator[Student] | None = None
        self._deleter: RecordDeleter | None = None

    async def on_start(self) -> None:
        """Drop stale indexes, create indexes and wire the id allocation pipeline."""
        for index_name in self.core.config.stale_student_indexes:
            await self._drop_stale_index(index_name)
        await self._create_student_id_index()
        await self._collection.create_index([("created_at", -1)])

        store = self.core.services.sequence
        self._creator = RecordCreator(
            IdAllocator(store),
            self._collection,
            STUDENT_ID_SEQUENCE,
            "student_id",
            self.core.config.student_id_max_retries,
        )
        self._deleter = RecordDeleter(
            store, self._collection, STUDENT_ID_SEQUENCE, reclaim=self.core.config.reset_counter_on_empty
        )

    async def _create_student_id_index(self) -> None:
        """Create the unique student_id index.

        Databases written without it may already hold duplicate ids. Startup
        continues without the index then, and duplicates must be renumbered by hand.
        """
        try:
            await self._collection.create_index([("student_id", 1)], unique=True)
        except OperationFailure as e:
            logger.warning("student_id_index_failed", code=e.code, error=str(e))

    async def _drop_stale_index(self, index_name: str) -> None:
        try:
            await self._collection.drop_index(index_name)
        except OperationFailure as e:
            if e.code in (NAMESPACE_NOT_FOUND, INDEX_NOT_FOUND):
                logger.debug("stale_index_absent", index=index_name)
            else:
                logger.warning("stale_index_drop_failed", index=index_name, error=str(e))
        else:
            logger.info("stale_index_dropped", index=index_name)

    @property
    def creator(self) -> RecordCreator[Student]:
        if self._creator is None:
            raise RuntimeError("StudentService not started")
        return self._creator

    @property
    def deleter(self) -> RecordDeleter:
        if self._deleter is None:
            raise RuntimeError("StudentService not started")
        return self._deleter

    async def list_students(self, limit: int = 50, offset: int = 0, query: str | None = None) -> PaginationResult[Student]:
        """Get paginated students, newest student ids first.

        An optional query matches name, email or course case-insensitively.
        """
        mongo_query: dict[str, Any] = {}
        if query and query.strip():
            pattern = re.escape(query.strip())
            mongo_query["$or"] = [{field: {"$regex": pattern, "$options": "i"}} for field in SEARCH_FIELDS]
        return await paginate(
            self._collection, Student, mongo_query, [("student_id", -1), ("created_at", -1)], limit, offset
        )

    async def get_student(self, student_id: UUID) -> Student:
        """Get student by storage id."""
        with store_errors():
            doc = await self._collection.find_one({"_id": student_id})
        if not doc:
            raise NotFoundError("Student not found")
        return Student.model_validate(doc)

    async def create_student(
        self,
        name: str,
        email: str,
        course: str,
        enrollment_date: datetime | None,
        status: StudentStatus | None = None,
    ) -> Student:
        """Validate input and insert a student with the next sequential student id."""
        fields = self._clean_fields(name, email, course, enrollment_date, status)
        student = await self.creator.create(lambda sequence_id: Student(student_id=sequence_id, **fields))
        logger.info("student_created", id=student.id, student_id=student.student_id)
        return student

    async def update_student(
        self,
        student_id: UUID,
        name: str,
        email: str,
        course: str,
        enrollment_date: datetime | None,
        status: StudentStatus | None = None,
    ) -> Student:
        """Replace the editable fields of a student. The sequential student id never changes."""
        fields = self._clean_fields(name, email, course, enrollment_date, status)
        with store_errors():
            result = await self._collection.update_one(
                {"_id": student_id}, {"$set": {**fields, "updated_at": now()}}
            )
        if result.matched_count == 0:
            raise NotFoundError("Student not found")
        return await self.get_student(student_id)

    async def delete_student(self, student_id: UUID) -> None:
        """Delete a student, resetting the id counter when no students remain."""
        doc = await self.deleter.delete_and_maybe_reclaim(student_id)
        logger.info("student_deleted", id=student_id, student_id=doc.get("student_id"))

    async def count_students(self, status: StudentStatus | None = None) -> int:
        query = {} if status is None else {"status": status}
        with store_errors():
            return await self._collection.count_documents(query)

    @staticmethod
    def _clean_fields(
        name: str, email: str, course: str, enrollment_date: datetime | None, status: StudentStatus | None
    ) -> dict[str, Any]:
        name, email, course = clean(name), clean(email).lower(), clean(course)
        if not name or not email or not course or enrollment_date is None:
            raise ValidationError("Name, email, course, and enrollment date are required")
        return {
            "name": name,
            "email": email,
            "course": course,
            "enrollment_date": enrollment_date,
            "status": status or StudentStatus.ACTIVE,
        }
