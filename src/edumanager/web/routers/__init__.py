from edumanager.web.routers.courses import router as courses_router
from edumanager.web.routers.stats import router as stats_router
from edumanager.web.routers.students import router as students_router

__all__ = [
    "courses_router",
    "stats_router",
    "students_router",
]
