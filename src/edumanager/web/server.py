from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from edumanager.app import App
from edumanager.config import Config
from edumanager.errors import AllocationExhaustedError, StoreUnavailableError, UserError
from edumanager.utils import now
from edumanager.web.error_handlers import (
    allocation_exhausted_handler,
    general_exception_handler,
    store_unavailable_handler,
    user_error_handler,
)
from edumanager.web.openapi import set_custom_openapi
from edumanager.web.routers import courses_router, stats_router, students_router


def create_fastapi_app(app_instance: App, config: Config) -> FastAPI:
    """Create and configure FastAPI application."""

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
        app.state.app = app_instance
        app.state.config = config
        async with app_instance.lifespan():
            yield

    app = FastAPI(title="EduManager API", lifespan=lifespan)

    if config.cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=config.cors_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    # Health check endpoint (at root level, not versioned)
    @app.get("/health")
    async def health_check() -> dict[str, Any]:
        return {
            "status": "healthy",
            "message": "EduManager API is running",
            "timestamp": now().isoformat(),
            "commit": config.git_commit_hash,
            "build_time": config.build_time,
        }

    app.include_router(stats_router, prefix="/api/v1")
    app.include_router(students_router, prefix="/api/v1")
    app.include_router(courses_router, prefix="/api/v1")

    app.add_exception_handler(UserError, user_error_handler)
    app.add_exception_handler(AllocationExhaustedError, allocation_exhausted_handler)
    app.add_exception_handler(StoreUnavailableError, store_unavailable_handler)
    app.add_exception_handler(Exception, general_exception_handler)

    set_custom_openapi(app)

    # Single-page UI, mounted last so it never shadows API routes
    if config.static_path:
        app.mount("/", StaticFiles(directory=config.static_path, html=True), name="static")

    return app
