from collections.abc import Collection
from uuid import UUID

import structlog

from salesdesk.core.core import Service
from salesdesk.core.modules.access.models import POLICY, Permission
from salesdesk.core.modules.session.models import AuthFailure, AuthToken
from salesdesk.core.modules.user.models import Role, User
from salesdesk.errors import AccessDeniedError, AuthenticationError

logger = structlog.get_logger(__name__)


def authorize(user: User, allowed_roles: Collection[Role]) -> bool:
    """Role gate: True iff the user's role is in the allow-list."""
    return user.role in allowed_roles


def can_update_task_status(user: User, assignee_id: UUID) -> bool:
    """Staff may update any task; everyone else only tasks assigned to them."""
    if authorize(user, POLICY[Permission.UPDATE_ANY_TASK_STATUS]):
        return True
    return user.id == assignee_id


class AccessService(Service):
    async def ensure_authenticated(self, auth_token: AuthToken | None) -> User:
        """Ensure the token belongs to a live session, raise AuthenticationError otherwise."""
        match await self.core.services.session.verify(auth_token):
            case User() as user:
                return user
            case AuthFailure() as failure:
                logger.info("auth_rejected", reason=failure)
                raise AuthenticationError("Invalid or expired session")

    async def ensure_roles(self, auth_token: AuthToken | None, allowed_roles: Collection[Role]) -> User:
        """Ensure the user is authenticated and holds one of the allowed roles."""
        user = await self.ensure_authenticated(auth_token)
        if not authorize(user, allowed_roles):
            logger.info("access_denied", user_id=str(user.id), role=user.role)
            raise AccessDeniedError("Insufficient permissions")
        return user

    async def ensure_permission(self, auth_token: AuthToken | None, permission: Permission) -> User:
        return await self.ensure_roles(auth_token, POLICY[permission])
