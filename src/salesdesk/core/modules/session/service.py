import secrets
from datetime import timedelta
from typing import Any
from uuid import UUID

import structlog
from pymongo import ReturnDocument
from pymongo.asynchronous.database import AsyncDatabase
from pymongo.errors import PyMongoError

from salesdesk.core.core import Service
from salesdesk.core.modules.session.models import AuthFailure, AuthToken, IssuedSession, Session
from salesdesk.core.modules.user.models import User
from salesdesk.errors import PersistenceError
from salesdesk.utils import ClientInfo, now

logger = structlog.get_logger(__name__)


class SessionService(Service):
    """Issues, verifies, extends and revokes bearer-token sessions.

    Every operation is a single-document or single bulk call, so the store's
    own atomicity is the only coordination; no locks are taken here.
    """

    def __init__(self, database: AsyncDatabase[dict[str, Any]]) -> None:
        super().__init__(database)
        self._collection = database.get_collection("sessions")

    async def on_start(self) -> None:
        """Create indexes and drop rows the TTL monitor has not reclaimed yet."""
        await self._collection.create_index([("auth_token", 1)], unique=True)
        await self._collection.create_index([("user_id", 1), ("expires_at", 1)])
        # TTL index: a document is removed once expires_at is in the past
        await self._collection.create_index([("expires_at", 1)], expireAfterSeconds=0)
        await self.cleanup_expired_sessions()

    async def issue_session(self, user: User, client: ClientInfo, ttl_hours: int | None = None) -> IssuedSession:
        """Create a new session row for an already authenticated user."""
        config = self.core.config
        hours = ttl_hours if ttl_hours is not None else config.session_ttl_hours
        auth_token = AuthToken(secrets.token_urlsafe(config.session_token_bytes))
        issued_at = now()
        session = Session(
            user_id=user.id,
            auth_token=auth_token,
            created_at=issued_at,
            last_accessed_at=issued_at,
            expires_at=issued_at + timedelta(hours=hours),
            user_agent=client.user_agent,
            ip_address=client.ip_address,
        )
        try:
            await self._collection.insert_one(session.to_mongo())
        except PyMongoError as e:
            logger.exception("session_issue_failed", user_id=str(user.id))
            raise PersistenceError("Failed to persist session") from e

        logger.info("session_issued", user_id=str(user.id), session_id=str(session.id))
        return IssuedSession(token=auth_token, expires_at=session.expires_at)

    async def verify(self, auth_token: AuthToken | None) -> User | AuthFailure:
        """Resolve a bearer token to its live session's user.

        Expired rows are filtered out by the query itself, so they are absent
        even before the TTL monitor deletes them.
        """
        if not auth_token:
            return AuthFailure.MISSING_TOKEN

        doc = await self._collection.find_one({"auth_token": auth_token, "expires_at": {"$gt": now()}})
        if doc is None:
            return AuthFailure.UNKNOWN_OR_EXPIRED
        session = Session.model_validate(doc)

        user = await self.core.services.user.find_user(session.user_id)
        if user is None or not user.active:
            return AuthFailure.USER_MISSING

        await self._touch(session.id)
        return user

    async def extend(self, auth_token: AuthToken, hours: int) -> bool:
        """Push a live session's expiry to now + hours; the token itself is unchanged."""
        current = now()
        doc = await self._collection.find_one_and_update(
            {"auth_token": auth_token, "expires_at": {"$gt": current}},
            {"$set": {"expires_at": current + timedelta(hours=hours), "last_accessed_at": current}},
            return_document=ReturnDocument.AFTER,
        )
        if doc is None:
            return False
        logger.debug("session_extended", session_id=str(doc["_id"]), hours=hours)
        return True

    async def list_user_sessions(self, user_id: UUID) -> list[Session]:
        """Live sessions of a user, most recently used first."""
        cursor = self._collection.find({"user_id": user_id, "expires_at": {"$gt": now()}}).sort("last_accessed_at", -1)
        return await Session.list_cursor(cursor)

    async def revoke_one(self, auth_token: AuthToken) -> bool:
        """Delete the session holding this token; False if it was already gone."""
        result = await self._collection.delete_one({"auth_token": auth_token})
        return result.deleted_count > 0

    async def revoke_by_id(self, user_id: UUID, session_id: UUID) -> bool:
        """Delete one of the user's own sessions by its id."""
        result = await self._collection.delete_one({"_id": session_id, "user_id": user_id})
        return result.deleted_count > 0

    async def revoke_all(self, user_id: UUID) -> int:
        """Delete every session of a user in one bulk call."""
        result = await self._collection.delete_many({"user_id": user_id})
        logger.info("sessions_revoked", user_id=str(user_id), count=result.deleted_count)
        return result.deleted_count

    async def revoke_others(self, user_id: UUID, keep_token: AuthToken) -> int:
        """Delete every session of a user except the one holding keep_token."""
        result = await self._collection.delete_many({"user_id": user_id, "auth_token": {"$ne": keep_token}})
        logger.info("sessions_revoked", user_id=str(user_id), count=result.deleted_count, kept_current=True)
        return result.deleted_count

    async def cleanup_expired_sessions(self) -> int:
        result = await self._collection.delete_many({"expires_at": {"$lt": now()}})
        logger.info("expired_sessions_cleaned", count=result.deleted_count)
        return result.deleted_count

    async def _touch(self, session_id: UUID) -> None:
        # A failed last-access write must not fail the request being authenticated
        try:
            await self._collection.update_one({"_id": session_id}, {"$set": {"last_accessed_at": now()}})
        except PyMongoError as e:
            logger.warning("session_touch_failed", session_id=str(session_id), error=str(e))
