from __future__ import annotations

import importlib
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, Any, Protocol, cast

from pymongo.asynchronous.database import AsyncDatabase

from salesdesk.config import Config
from salesdesk.core.db import MongoConnection

if TYPE_CHECKING:
    from salesdesk.core.modules.access.service import AccessService
    from salesdesk.core.modules.counter.service import CounterService
    from salesdesk.core.modules.session.service import SessionService
    from salesdesk.core.modules.user.service import UserService


class Connection(Protocol):
    """What Core needs from a database connection resource."""

    database: Any

    async def ensure_connected(self) -> None: ...

    async def ping(self) -> None: ...

    async def close(self) -> None: ...


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
    """Service registry that imports and initializes services in dependency order."""

    user: UserService
    counter: CounterService
    session: SessionService
    access: AccessService

    def __init__(self, database: AsyncDatabase[dict[str, Any]]) -> None:
        self._services: list[Service] = []

        # (attribute_name, module_path, class_name); counter must start before user
        # because the bootstrap admin needs a code
        service_configs = [
            ("counter", "salesdesk.core.modules.counter.service", "CounterService"),
            ("user", "salesdesk.core.modules.user.service", "UserService"),
            ("session", "salesdesk.core.modules.session.service", "SessionService"),
            ("access", "salesdesk.core.modules.access.service", "AccessService"),
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
    """Container providing config, database connection, and all service instances."""

    config: Config
    connection: Connection
    services: Services

    def __init__(self, config: Config, connection: Connection | None = None) -> None:
        """Initialize core with config and an owned connection, then register services."""
        self.config = config
        self.connection = connection or MongoConnection(config.database_url, config.database_timeout_ms)
        self.services = Services(self.connection.database)
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
        await self.connection.ensure_connected()
        await self.services.start_all()

    async def on_stop(self) -> None:
        await self.services.stop_all()
        await self.connection.close()
