"""Tests for Core lifecycle."""

import pytest
from fake_mongo import FakeConnection
from pymongo.errors import AutoReconnect

from salesdesk.core.core import Core


@pytest.mark.asyncio
async def test_lifespan_creates_indexes_and_closes_connection(config, connection):
    core = Core(config, connection)
    async with core.lifespan():
        users = connection.database.get_collection("users")
        unique = {keys[0][0] for keys, options in users.indexes if options.get("unique")}
        assert unique == {"email", "code"}
    assert connection.closed is True


@pytest.mark.asyncio
async def test_startup_fails_closed_when_database_unreachable(config):
    connection = FakeConnection()
    connection.available = False
    core = Core(config, connection)
    with pytest.raises(AutoReconnect):
        async with core.lifespan():
            pass
