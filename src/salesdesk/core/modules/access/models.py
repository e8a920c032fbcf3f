"""Role-based permissions for protected operations."""

from collections.abc import Mapping
from enum import StrEnum
from types import MappingProxyType

from salesdesk.core.modules.user.models import Role

STAFF_ROLES = frozenset({Role.ADMIN, Role.MANAGER})


class Permission(StrEnum):
    MANAGE_CATALOG = "manage_catalog"  # Create/update products and categories
    CREATE_TASK = "create_task"
    UPDATE_ANY_TASK_STATUS = "update_any_task_status"  # Sales may only update tasks assigned to them
    DELETE_RECORDS = "delete_records"
    MANAGE_USERS = "manage_users"  # Create accounts with any role


POLICY: Mapping[Permission, frozenset[Role]] = MappingProxyType(
    {
        Permission.MANAGE_CATALOG: STAFF_ROLES,
        Permission.CREATE_TASK: STAFF_ROLES,
        Permission.UPDATE_ANY_TASK_STATUS: STAFF_ROLES,
        Permission.DELETE_RECORDS: STAFF_ROLES,
        Permission.MANAGE_USERS: frozenset({Role.ADMIN}),
    }
)
