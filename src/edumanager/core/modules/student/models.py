from datetime import datetime
from enum import StrEnum

from pydantic import Field

from edumanager.core.db import MongoModel
from edumanager.utils import now

STUDENT_ID_SEQUENCE = "studentId"


class StudentStatus(StrEnum):
    ACTIVE = "Active"
    INACTIVE = "Inactive"  # Counted as graduated on the dashboard


class Student(MongoModel):
    """Enrolled student with a sequential human-facing id."""

    student_id: int  # Allocated from the "studentId" sequence, immutable after creation
    name: str
    email: str  # Stored lowercased, duplicates allowed
    course: str
    enrollment_date: datetime
    status: StudentStatus = StudentStatus.ACTIVE
    created_at: datetime = Field(default_factory=now)
    updated_at: datetime = Field(default_factory=now)
