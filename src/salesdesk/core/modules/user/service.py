import asyncio
from functools import cached_property
from typing import Any
from uuid import UUID

import structlog
from pymongo.asynchronous.database import AsyncDatabase
from pymongo.errors import DuplicateKeyError

from salesdesk.core.core import Service
from salesdesk.core.modules.user.models import Role, User, code_prefix
from salesdesk.core.modules.user.passwords import PasswordHasher
from salesdesk.core.modules.user.validators import validate_email, validate_name, validate_password
from salesdesk.errors import ConflictError, NotFoundError, PersistenceError, ValidationError
from salesdesk.utils import normalize_email

logger = structlog.get_logger(__name__)

# Generated codes can collide with codes that were supplied by hand
MAX_CODE_ATTEMPTS = 5


def duplicate_key_field(exc: DuplicateKeyError) -> str | None:
    """Name of the first field of the unique index that was violated."""
    key_pattern = (exc.details or {}).get("keyPattern") or {}
    return next(iter(key_pattern), None)


class UserService(Service):
    """Manages user records and their credentials."""

    def __init__(self, database: AsyncDatabase[dict[str, Any]]) -> None:
        super().__init__(database)
        self._collection = database.get_collection("users")

    @cached_property
    def passwords(self) -> PasswordHasher:
        return PasswordHasher(self.core.config.bcrypt_rounds)

    async def find_user(self, user_id: UUID) -> User | None:
        doc = await self._collection.find_one({"_id": user_id})
        return User.model_validate(doc) if doc else None

    async def get_user(self, user_id: UUID) -> User:
        """Get user by ID, raise NotFoundError if absent."""
        user = await self.find_user(user_id)
        if user is None:
            raise NotFoundError(f"User '{user_id}' not found")
        return user

    async def find_user_by_email(self, email: str) -> User | None:
        doc = await self._collection.find_one({"email": normalize_email(email)})
        return User.model_validate(doc) if doc else None

    async def get_all_users(self) -> list[User]:
        """Get all users, newest first."""
        return await User.list_cursor(self._collection.find().sort("created_at", -1))

    async def has_role(self, role: Role) -> bool:
        return await self._collection.find_one({"role": role}) is not None

    async def create_user(
        self, name: str, email: str, password: str, role: Role = Role.SALES, code: str | None = None
    ) -> User:
        """Create user with hashed password and a code assigned once, here."""
        name = name.strip()
        email = normalize_email(email)
        validate_name(name)
        validate_email(email)
        validate_password(password)
        if code is not None:
            code = code.strip()
            if not code:
                raise ValidationError("Code cannot be empty")

        if await self.find_user_by_email(email) is not None:
            raise ConflictError(f"User with email '{email}' already exists")

        password_hash = await asyncio.to_thread(self.passwords.hash_password, password)

        if code is not None:
            user = User(name=name, email=email, password_hash=password_hash, role=role, code=code)
            await self._insert(user)
            return user

        for _ in range(MAX_CODE_ATTEMPTS):
            user = User(name=name, email=email, password_hash=password_hash, role=role, code=await self._next_code(role))
            try:
                await self._insert(user, retry_on_code=True)
            except _CodeTakenError:
                logger.warning("user_code_taken", code=user.code, role=role)
                continue
            return user
        raise PersistenceError(f"Could not assign a unique code for role '{role}'")

    async def authenticate(self, email: str, password: str) -> User | None:
        """Return the active user matching the credentials, None otherwise."""
        user = await self.find_user_by_email(email)
        if user is None or not user.active:
            # Unknown emails still cost one bcrypt check
            await asyncio.to_thread(self.passwords.verify_dummy, password)
            return None
        if not await asyncio.to_thread(self.passwords.verify_password, password, user.password_hash):
            return None
        return user

    async def change_password(self, user_id: UUID, old_password: str, new_password: str) -> None:
        """Change user password after verifying current password."""
        user = await self.get_user(user_id)
        if not await asyncio.to_thread(self.passwords.verify_password, old_password, user.password_hash):
            raise ValidationError("Invalid current password")

        validate_password(new_password)
        password_hash = await asyncio.to_thread(self.passwords.hash_password, new_password)
        await self._collection.update_one({"_id": user_id}, {"$set": {"password_hash": password_hash}})

    async def delete_user(self, user_id: UUID) -> None:
        result = await self._collection.delete_one({"_id": user_id})
        if result.deleted_count == 0:
            raise NotFoundError(f"User '{user_id}' not found")

    async def ensure_admin_user_exists(self) -> None:
        """Create the configured bootstrap admin if no admin exists yet."""
        config = self.core.config
        if not config.admin_email or not config.admin_password:
            return
        if await self.has_role(Role.ADMIN):
            return
        user = await self.create_user(config.admin_name, config.admin_email, config.admin_password, Role.ADMIN)
        logger.info("admin_user_created", user_id=str(user.id), code=user.code)

    async def _next_code(self, role: Role) -> str:
        seq = await self.core.services.counter.get_next_sequence(f"user_code:{role}")
        return f"{code_prefix(role)}{seq:03d}"

    async def _insert(self, user: User, retry_on_code: bool = False) -> None:
        try:
            await self._collection.insert_one(user.to_mongo())
        except DuplicateKeyError as e:
            field = duplicate_key_field(e)
            if field == "code":
                if retry_on_code:
                    raise _CodeTakenError from e
                raise ConflictError(f"User code '{user.code}' is already taken") from e
            raise ConflictError(f"User with email '{user.email}' already exists") from e

    async def on_start(self) -> None:
        """Initialize indexes and the bootstrap admin."""
        await self._collection.create_index([("email", 1)], unique=True)
        await self._collection.create_index([("code", 1)], unique=True)
        await self._collection.create_index([("role", 1)])
        await self.ensure_admin_user_exists()
        logger.debug("user_service_started")


class _CodeTakenError(Exception):
    """A generated code hit the unique index; the next sequence value is tried."""
