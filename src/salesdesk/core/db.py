import asyncio
from typing import Any, Self
from urllib.parse import urlparse
from uuid import UUID, uuid4

import structlog
from pydantic import BaseModel, ConfigDict, Field
from pymongo import AsyncMongoClient
from pymongo.asynchronous.cursor import AsyncCursor
from pymongo.asynchronous.database import AsyncDatabase

logger = structlog.get_logger(__name__)


class MongoModel(BaseModel):
    id: UUID = Field(alias="_id", serialization_alias="id", default_factory=uuid4)

    model_config = ConfigDict(
        populate_by_name=True,
        arbitrary_types_allowed=True,
        json_schema_serialization_defaults_required=True,
    )

    def to_mongo(self) -> dict[str, Any]:
        """Convert the model to a dictionary for MongoDB storage with _id field."""
        data = self.model_dump()
        if "id" in data:
            data["_id"] = data.pop("id")  # Rename id → _id for MongoDB
        return data

    @classmethod
    async def list_cursor(cls, cursor: AsyncCursor[dict[str, Any]]) -> list[Self]:
        """Iterate over an AsyncCursor and return a list of model instances."""
        return [cls.model_validate(item) async for item in cursor]


class MongoConnection:
    """Owned MongoDB client with single-flight connection check.

    The driver connects lazily; ensure_connected() pings the server once and
    every concurrent caller awaits the same in-flight ping.
    """

    def __init__(self, database_url: str, timeout_ms: int) -> None:
        self.client: AsyncMongoClient[dict[str, Any]] = AsyncMongoClient(
            database_url,
            uuidRepresentation="standard",
            tz_aware=True,
            timeoutMS=timeout_ms,
            serverSelectionTimeoutMS=timeout_ms,
        )
        self.database: AsyncDatabase[dict[str, Any]] = self.client.get_database(urlparse(database_url).path[1:])
        self._connecting: asyncio.Task[None] | None = None
        self._connected = False

    async def ensure_connected(self) -> None:
        if self._connected:
            return
        if self._connecting is None:
            self._connecting = asyncio.create_task(self._connect())
        task = self._connecting
        try:
            await asyncio.shield(task)
        except Exception:
            # Failed attempt is dropped so the next caller retries
            if self._connecting is task:
                self._connecting = None
            raise

    async def _connect(self) -> None:
        await self.client.admin.command("ping")
        self._connected = True
        logger.info("mongo_connected", database=self.database.name)

    async def ping(self) -> None:
        await self.client.admin.command("ping")

    async def close(self) -> None:
        await self.client.aclose()
