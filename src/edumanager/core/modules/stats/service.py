from edumanager.core.core import Service
from edumanager.core.modules.course.models import CourseStatus
from edumanager.core.modules.stats.models import DashboardStats
from edumanager.core.modules.student.models import StudentStatus


def success_rate(graduates: int, total: int) -> int:
    """Percentage of graduates rounded half up, 0 when there are no students."""
    if total <= 0:
        return 0
    return (graduates * 200 + total) // (2 * total)


class StatsService(Service):
    """Aggregates counts across students and courses for the dashboard."""

    async def get_dashboard_stats(self) -> DashboardStats:
        services = self.core.services
        total_students = await services.student.count_students()
        graduates = await services.student.count_students(StudentStatus.INACTIVE)
        active_courses = await services.course.count_courses(CourseStatus.ACTIVE)
        return DashboardStats(
            total_students=total_students,
            active_courses=active_courses,
            graduates=graduates,
            success_rate=success_rate(graduates, total_students),
        )
