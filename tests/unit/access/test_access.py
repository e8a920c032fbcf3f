"""Tests for the role gate and the authentication precondition."""

from uuid import uuid4

import pytest

from salesdesk.core.modules.access.models import POLICY, Permission
from salesdesk.core.modules.access.service import authorize, can_update_task_status
from salesdesk.core.modules.session.models import AuthToken
from salesdesk.core.modules.user.models import Role, User
from salesdesk.errors import AccessDeniedError, AuthenticationError


def make_user(role: Role) -> User:
    return User(name=f"{role} user", email=f"{role}@example.com", password_hash="$2b$04$hash", role=role, code="XX001")


class TestAuthorize:
    @pytest.mark.parametrize("role", list(Role))
    def test_role_in_allow_list(self, role):
        assert authorize(make_user(role), {role}) is True

    def test_role_not_in_allow_list(self):
        assert authorize(make_user(Role.SALES), {Role.ADMIN, Role.MANAGER}) is False

    def test_empty_allow_list(self):
        assert authorize(make_user(Role.ADMIN), frozenset()) is False


class TestPolicy:
    @pytest.mark.parametrize(
        "permission",
        [
            Permission.MANAGE_CATALOG,
            Permission.CREATE_TASK,
            Permission.UPDATE_ANY_TASK_STATUS,
            Permission.DELETE_RECORDS,
        ],
    )
    def test_staff_only_permissions(self, permission):
        assert POLICY[permission] == {Role.ADMIN, Role.MANAGER}

    def test_user_management_is_admin_only(self):
        assert POLICY[Permission.MANAGE_USERS] == {Role.ADMIN}

    def test_every_permission_has_a_rule(self):
        assert set(POLICY) == set(Permission)


class TestTaskStatusUpdate:
    @pytest.mark.parametrize("role", [Role.ADMIN, Role.MANAGER])
    def test_staff_update_any_task(self, role):
        assert can_update_task_status(make_user(role), uuid4()) is True

    def test_sales_update_own_task(self):
        user = make_user(Role.SALES)
        assert can_update_task_status(user, user.id) is True

    def test_sales_cannot_update_others_task(self):
        assert can_update_task_status(make_user(Role.SALES), uuid4()) is False


class TestAccessService:
    @pytest.mark.asyncio
    async def test_invalid_tokens_get_uniform_error(self, core, sales_user, client_info):
        issued = await core.services.session.issue_session(sales_user, client_info)
        await core.services.session.revoke_one(issued.token)

        messages = []
        for token in [None, AuthToken("no-such-token"), issued.token]:
            with pytest.raises(AuthenticationError) as exc_info:
                await core.services.access.ensure_authenticated(token)
            messages.append(str(exc_info.value))
        assert len(set(messages)) == 1

    @pytest.mark.asyncio
    async def test_sales_user_is_forbidden_from_staff_operations(self, core, sales_user, client_info):
        issued = await core.services.session.issue_session(sales_user, client_info)
        for permission in [Permission.MANAGE_CATALOG, Permission.CREATE_TASK, Permission.DELETE_RECORDS]:
            with pytest.raises(AccessDeniedError):
                await core.services.access.ensure_permission(issued.token, permission)

    @pytest.mark.asyncio
    async def test_manager_allowed_staff_operations(self, core, manager_user, client_info):
        issued = await core.services.session.issue_session(manager_user, client_info)
        user = await core.services.access.ensure_permission(issued.token, Permission.CREATE_TASK)
        assert user.id == manager_user.id

    @pytest.mark.asyncio
    async def test_authentication_checked_before_role(self, core):
        with pytest.raises(AuthenticationError):
            await core.services.access.ensure_permission(AuthToken("no-such-token"), Permission.CREATE_TASK)
