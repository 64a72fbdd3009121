from __future__ import annotations

import importlib
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any, cast
from urllib.parse import urlparse

from pymongo import AsyncMongoClient
from pymongo.asynchronous.database import AsyncDatabase

from edumanager.config import Config


class Service:
    """Base class for services with direct database access."""

    def __init__(self, database: AsyncDatabase[dict[str, Any]]) -> None:
        self.database = database
        self._core: Core | None = None

    async def on_start(self) -> None:
        """Initialize service on application startup."""

    async def on_stop(self) -> None:
        """Cleanup service on application shutdown."""

    @property
    def core(self) -> Core:
        """Get the core application context."""
        if self._core is None:
            raise RuntimeError("Core not set for service")
        return self._core

    def set_core(self, core: Core) -> None:
        """Set the core application context."""
        self._core = core


class Services:
    """Service registry that instantiates services in dependency order."""

    from edumanager.core.modules.course.service import CourseService  # noqa: PLC0415
    from edumanager.core.modules.sequence.service import SequenceService  # noqa: PLC0415
    from edumanager.core.modules.stats.service import StatsService  # noqa: PLC0415
    from edumanager.core.modules.student.service import StudentService  # noqa: PLC0415

    sequence: SequenceService
    student: StudentService
    course: CourseService
    stats: StatsService

    def __init__(self, database: AsyncDatabase[dict[str, Any]]) -> None:
        self._services: list[Service] = []

        # (attribute_name, module_path, class_name)
        # Order matters: the sequence store must start before the services allocating from it
        service_configs = [
            ("sequence", "edumanager.core.modules.sequence.service", "SequenceService"),
            ("student", "edumanager.core.modules.student.service", "StudentService"),
            ("course", "edumanager.core.modules.course.service", "CourseService"),
            ("stats", "edumanager.core.modules.stats.service", "StatsService"),
        ]

        for attr_name, module_path, class_name in service_configs:
            module = importlib.import_module(module_path)
            service_class = cast(type[Service], getattr(module, class_name))
            service_instance = service_class(database)
            setattr(self, attr_name, service_instance)
            self._services.append(service_instance)

    def set_core(self, core: Core) -> None:
        """Set core reference for all services."""
        for service in self._services:
            service.set_core(core)

    async def start_all(self) -> None:
        for service in self._services:
            await service.on_start()

    async def stop_all(self) -> None:
        for service in reversed(self._services):
            await service.on_stop()


class Core:
    """Container providing config, database, and all service instances."""

    config: Config
    mongo_client: AsyncMongoClient[dict[str, Any]]
    database: AsyncDatabase[dict[str, Any]]
    services: Services

    def __init__(self, config: Config, mongo_client: AsyncMongoClient[dict[str, Any]] | None = None) -> None:
        """Initialize core with config, MongoDB, and register services.

        Every MongoDB round trip is bounded by config.database_timeout_ms.
        """
        self.config = config
        if mongo_client is None:
            mongo_client = AsyncMongoClient(
                config.database_url, uuidRepresentation="standard", timeoutMS=config.database_timeout_ms
            )
        self.mongo_client = mongo_client
        self.database = self.mongo_client.get_database(urlparse(config.database_url).path[1:])
        self.services = Services(self.database)
        self.services.set_core(self)

    @asynccontextmanager
    async def lifespan(self) -> AsyncGenerator[None]:
        """Manage application lifecycle - startup and shutdown."""
        await self.on_start()
        try:
            yield
        finally:
            await self.on_stop()

    async def on_start(self) -> None:
        await self.services.start_all()

    async def on_stop(self) -> None:
        """Stop services and close MongoDB connection on shutdown."""
        await self.services.stop_all()
        await self.mongo_client.aclose()
