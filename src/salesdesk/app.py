from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from uuid import UUID

import structlog
from pydantic import BaseModel, Field

from salesdesk.config import Config
from salesdesk.core.core import Connection, Core
from salesdesk.core.modules.access.models import Permission
from salesdesk.core.modules.session.models import AuthToken, SessionView
from salesdesk.core.modules.user.models import Role, User, UserView
from salesdesk.errors import AccessDeniedError, InvalidCredentialsError, NotFoundError, ValidationError
from salesdesk.utils import ClientInfo

logger = structlog.get_logger(__name__)


class AuthResult(BaseModel):
    """Token and public profile returned by login and signup."""

    token: str = Field(..., description="Bearer token for subsequent requests")
    user: UserView


class App:
    """Facade for all application operations, validates permissions before delegating to Core."""

    def __init__(self, config: Config, connection: Connection | None = None) -> None:
        self._core = Core(config, connection)

    @asynccontextmanager
    async def lifespan(self) -> AsyncGenerator[None]:
        """Application lifespan management - delegates to Core."""
        async with self._core.lifespan():
            yield

    async def check_database(self) -> None:
        """Ping the database, raise if it is unreachable."""
        await self._core.connection.ping()

    # === Login / signup ===
    async def login(self, email: str, password: str, client: ClientInfo) -> AuthResult:
        """Authenticate user and create session."""
        if not email.strip() or not password:
            raise ValidationError("Email and password are required")
        user = await self._core.services.user.authenticate(email, password)
        if user is None:
            logger.info("login_failed")
            raise InvalidCredentialsError
        return await self._start_session(user, client)

    async def signup(
        self,
        name: str,
        email: str,
        password: str,
        client: ClientInfo,
        role: Role | None = None,
        code: str | None = None,
    ) -> AuthResult:
        """Register a new user and log them in immediately."""
        if not name.strip() or not email.strip() or not password:
            raise ValidationError("Name, email and password are required")
        role = role or Role.SALES
        if role not in self._core.config.signup_allowed_roles:
            raise AccessDeniedError(f"Signing up as '{role}' is not allowed")
        user = await self._core.services.user.create_user(name, email, password, role, code)
        logger.info("user_signed_up", user_id=str(user.id), role=user.role, code=user.code)
        return await self._start_session(user, client)

    # === Sessions ===
    async def logout(self, auth_token: AuthToken) -> None:
        """Invalidate the current session."""
        await self._core.services.access.ensure_authenticated(auth_token)
        if not await self._core.services.session.revoke_one(auth_token):
            raise NotFoundError("Session not found")

    async def logout_all(self, auth_token: AuthToken) -> int:
        """Invalidate every session of the current user, this one included."""
        current_user = await self._core.services.access.ensure_authenticated(auth_token)
        return await self._core.services.session.revoke_all(current_user.id)

    async def get_sessions(self, auth_token: AuthToken) -> list[SessionView]:
        """List live sessions of the current user."""
        current_user = await self._core.services.access.ensure_authenticated(auth_token)
        sessions = await self._core.services.session.list_user_sessions(current_user.id)
        return [SessionView.from_domain(session) for session in sessions]

    async def extend_session(self, auth_token: AuthToken, hours: int | None = None) -> None:
        """Push the current session's expiry out by the given hours."""
        await self._core.services.access.ensure_authenticated(auth_token)
        config = self._core.config
        hours = config.session_ttl_hours if hours is None else hours
        if not 0 < hours <= config.max_session_extension_hours:
            raise ValidationError(f"Hours must be between 1 and {config.max_session_extension_hours}")
        if not await self._core.services.session.extend(auth_token, hours):
            raise ValidationError("Failed to extend session")

    async def revoke_session(self, auth_token: AuthToken, session_id: UUID) -> None:
        """Revoke one of the current user's sessions by id, e.g. a lost device."""
        current_user = await self._core.services.access.ensure_authenticated(auth_token)
        if not await self._core.services.session.revoke_by_id(current_user.id, session_id):
            raise NotFoundError("Session not found")

    # === Users ===
    async def get_current_user(self, auth_token: AuthToken) -> UserView:
        """Get current authenticated user profile."""
        current_user = await self._core.services.access.ensure_authenticated(auth_token)
        return UserView.from_domain(current_user)

    async def change_password(self, auth_token: AuthToken, old_password: str, new_password: str) -> None:
        """Change password for current user and sign out every other device."""
        current_user = await self._core.services.access.ensure_authenticated(auth_token)
        await self._core.services.user.change_password(current_user.id, old_password, new_password)
        await self._core.services.session.revoke_others(current_user.id, auth_token)

    async def get_all_users(self, auth_token: AuthToken) -> list[UserView]:
        """Get all users (requires authentication)."""
        await self._core.services.access.ensure_authenticated(auth_token)
        users = await self._core.services.user.get_all_users()
        return [UserView.from_domain(user) for user in users]

    async def create_user(
        self, auth_token: AuthToken, name: str, email: str, password: str, role: Role, code: str | None = None
    ) -> UserView:
        """Create a user with any role (admin only)."""
        await self._core.services.access.ensure_permission(auth_token, Permission.MANAGE_USERS)
        user = await self._core.services.user.create_user(name, email, password, role, code)
        return UserView.from_domain(user)

    async def delete_user(self, auth_token: AuthToken, user_id: UUID) -> None:
        """Delete a user and all of their sessions (admin and manager, cannot delete self)."""
        current_user = await self._core.services.access.ensure_permission(auth_token, Permission.DELETE_RECORDS)
        if user_id == current_user.id:
            raise ValidationError("Cannot delete yourself")

        user = await self._core.services.user.get_user(user_id)
        if user.role == Role.ADMIN and current_user.role != Role.ADMIN:
            raise AccessDeniedError("Only admins can delete admin accounts")
        await self._core.services.session.revoke_all(user_id)
        await self._core.services.user.delete_user(user_id)

    async def _start_session(self, user: User, client: ClientInfo) -> AuthResult:
        issued = await self._core.services.session.issue_session(user, client)
        return AuthResult(token=issued.token, user=UserView.from_domain(user))
