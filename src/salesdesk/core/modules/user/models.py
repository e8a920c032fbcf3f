from datetime import datetime
from enum import StrEnum
from typing import assert_never
from uuid import UUID

from pydantic import BaseModel, Field

from salesdesk.core.db import MongoModel
from salesdesk.utils import now


class Role(StrEnum):
    ADMIN = "admin"
    MANAGER = "manager"
    SALES = "sales"


def code_prefix(role: Role) -> str:
    """Two-letter prefix of the human-readable user code for a role."""
    match role:
        case Role.ADMIN:
            return "AA"
        case Role.MANAGER:
            return "MM"
        case Role.SALES:
            return "SS"
        case _:
            assert_never(role)


class User(MongoModel):
    """User domain model with credentials.

    Indexed on email - unique, code - unique, role.
    """

    name: str
    email: str  # Stored trimmed and lowercased
    password_hash: str  # bcrypt hash
    role: Role = Role.SALES
    code: str  # Assigned once at creation, never recomputed
    active: bool = True
    created_at: datetime = Field(default_factory=now)


class UserView(BaseModel):
    """User account information (API representation)."""

    id: UUID = Field(..., description="User ID")
    name: str = Field(..., description="Display name")
    email: str = Field(..., description="Email address")
    role: Role = Field(..., description="User role")
    code: str = Field(..., description="Human-readable user code, e.g. SS001")

    @classmethod
    def from_domain(cls, user: User) -> "UserView":
        """Create view model from domain model."""
        return cls(id=user.id, name=user.name, email=user.email, role=user.role, code=user.code)
