from pydantic import BaseModel, Field


class DashboardStats(BaseModel):
    """Headline numbers for the dashboard."""

    total_students: int = Field(..., ge=0)
    active_courses: int = Field(..., ge=0)
    graduates: int = Field(..., ge=0, description="Students with Inactive status")
    success_rate: int = Field(..., ge=0, le=100, description="Graduates as a rounded percentage of all students")
