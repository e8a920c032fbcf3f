"""Session management models."""

from datetime import datetime
from enum import StrEnum
from typing import NewType
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from salesdesk.core.db import MongoModel
from salesdesk.utils import mask_token, now

AuthToken = NewType("AuthToken", str)


class Session(MongoModel):
    """User authentication session.

    Indexed on auth_token - unique, (user_id, expires_at), expires_at (TTL, expires at the stored instant).
    """

    user_id: UUID
    auth_token: str
    created_at: datetime = Field(default_factory=now)
    last_accessed_at: datetime = Field(default_factory=now)
    expires_at: datetime  # Always now + hours, computed by the service
    user_agent: str = "Unknown"
    ip_address: str | None = None


class AuthFailure(StrEnum):
    """Why a bearer token was rejected. Logged only, never returned to the client."""

    MISSING_TOKEN = "missing_token"
    UNKNOWN_OR_EXPIRED = "unknown_or_expired"
    USER_MISSING = "user_missing"


class IssuedSession(BaseModel):
    token: AuthToken
    expires_at: datetime


class SessionView(BaseModel):
    """Active session as shown to its owner (API representation)."""

    id: UUID = Field(..., description="Session ID")
    token: str = Field(..., description="First characters of the token")
    created_at: datetime = Field(..., alias="createdAt")
    last_accessed: datetime = Field(..., alias="lastAccessed")
    user_agent: str = Field(..., alias="userAgent")
    ip_address: str | None = Field(None, alias="ipAddress")
    expires_at: datetime = Field(..., alias="expiresAt")

    model_config = ConfigDict(populate_by_name=True)

    @classmethod
    def from_domain(cls, session: Session) -> "SessionView":
        return cls(
            id=session.id,
            token=mask_token(session.auth_token),
            created_at=session.created_at,
            last_accessed=session.last_accessed_at,
            user_agent=session.user_agent,
            ip_address=session.ip_address,
            expires_at=session.expires_at,
        )
