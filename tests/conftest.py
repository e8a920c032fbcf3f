"""Shared pytest fixtures."""

from collections.abc import AsyncGenerator, Generator

import pytest
import pytest_asyncio
from fake_mongo import FakeCollection, FakeConnection
from fastapi.testclient import TestClient

from salesdesk.app import App
from salesdesk.config import Config
from salesdesk.core.core import Core
from salesdesk.core.modules.user.models import Role, User
from salesdesk.utils import ClientInfo
from salesdesk.web.server import create_fastapi_app


@pytest.fixture
def config() -> Config:
    """Config with the cheapest bcrypt cost so tests stay fast."""
    return Config(
        _env_file=None,
        database_url="mongodb://localhost:27017/salesdesk_test",
        host="127.0.0.1",
        port=8000,
        debug=True,
        bcrypt_rounds=4,
    )


@pytest.fixture
def connection() -> FakeConnection:
    return FakeConnection()


@pytest.fixture
def client_info() -> ClientInfo:
    return ClientInfo(user_agent="pytest", ip_address="127.0.0.1")


@pytest_asyncio.fixture
async def core(config: Config, connection: FakeConnection) -> AsyncGenerator[Core]:
    """Started Core backed by the in-memory database."""
    core = Core(config, connection)
    async with core.lifespan():
        yield core


@pytest.fixture
def sessions_collection(connection: FakeConnection) -> FakeCollection:
    return connection.database.get_collection("sessions")


@pytest.fixture
def users_collection(connection: FakeConnection) -> FakeCollection:
    return connection.database.get_collection("users")


@pytest_asyncio.fixture
async def sales_user(core: Core) -> User:
    return await core.services.user.create_user("Sam Sales", "sam@example.com", "Sales#123")


@pytest_asyncio.fixture
async def manager_user(core: Core) -> User:
    return await core.services.user.create_user("Mia Manager", "mia@example.com", "Manager#123", Role.MANAGER)


@pytest.fixture
def http(config: Config, connection: FakeConnection) -> Generator[TestClient]:
    """HTTP client running the full FastAPI app, lifespan included."""
    app = App(config, connection)
    with TestClient(create_fastapi_app(app, config)) as client:
        yield client
