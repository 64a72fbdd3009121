from datetime import datetime
from enum import StrEnum

from pydantic import Field

from edumanager.core.db import MongoModel
from edumanager.utils import now

MIN_DURATION = 1
MAX_DURATION = 48  # Months


class CourseStatus(StrEnum):
    ACTIVE = "Active"
    INACTIVE = "Inactive"


class Course(MongoModel):
    """Course offered to students."""

    name: str
    description: str
    duration: int  # Months, between MIN_DURATION and MAX_DURATION
    status: CourseStatus = CourseStatus.ACTIVE
    created_at: datetime = Field(default_factory=now)
    updated_at: datetime = Field(default_factory=now)
