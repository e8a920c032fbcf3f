"""Tests for UserService against the in-memory store."""

import asyncio
import time

import pytest

from salesdesk.core.modules.user.models import Role
from salesdesk.core.modules.user.passwords import PasswordHasher
from salesdesk.errors import ConflictError, NotFoundError, ValidationError


class TestCreateUser:
    @pytest.mark.asyncio
    async def test_email_is_normalized(self, core):
        user = await core.services.user.create_user("Alice", "  Alice@Example.COM ", "Pw#12345")
        assert user.email == "alice@example.com"

    @pytest.mark.asyncio
    async def test_password_is_hashed(self, core):
        user = await core.services.user.create_user("Alice", "alice@example.com", "Pw#12345")
        assert user.password_hash != "Pw#12345"
        assert core.services.user.passwords.verify_password("Pw#12345", user.password_hash)

    @pytest.mark.asyncio
    async def test_codes_follow_per_role_sequence(self, core):
        service = core.services.user
        first = await service.create_user("S1", "s1@example.com", "Pw#12345")
        second = await service.create_user("S2", "s2@example.com", "Pw#12345")
        manager = await service.create_user("M1", "m1@example.com", "Pw#12345", Role.MANAGER)
        admin = await service.create_user("A1", "a1@example.com", "Pw#12345", Role.ADMIN)
        assert [first.code, second.code, manager.code, admin.code] == ["SS001", "SS002", "MM001", "AA001"]

    @pytest.mark.asyncio
    async def test_concurrent_signups_get_distinct_sequential_codes(self, core):
        service = core.services.user
        users = await asyncio.gather(
            *(service.create_user(f"S{i}", f"s{i}@example.com", "Pw#12345") for i in range(5))
        )
        assert sorted(user.code for user in users) == ["SS001", "SS002", "SS003", "SS004", "SS005"]

    @pytest.mark.asyncio
    async def test_codes_are_not_reused_after_delete(self, core):
        service = core.services.user
        first = await service.create_user("S1", "s1@example.com", "Pw#12345")
        await service.delete_user(first.id)
        second = await service.create_user("S2", "s2@example.com", "Pw#12345")
        assert second.code == "SS002"

    @pytest.mark.asyncio
    async def test_supplied_code_is_kept(self, core):
        user = await core.services.user.create_user("S1", "s1@example.com", "Pw#12345", code=" REP-7 ")
        assert user.code == "REP-7"

    @pytest.mark.asyncio
    async def test_generated_code_skips_manually_taken_code(self, core):
        service = core.services.user
        await service.create_user("Manual", "manual@example.com", "Pw#12345", code="SS001")
        user = await service.create_user("Auto", "auto@example.com", "Pw#12345")
        assert user.code == "SS002"

    @pytest.mark.asyncio
    async def test_duplicate_email_is_conflict_case_insensitive(self, core):
        await core.services.user.create_user("Alice", "alice@example.com", "Pw#12345")
        with pytest.raises(ConflictError, match="already exists"):
            await core.services.user.create_user("Alice 2", "ALICE@example.com", "Pw#12345")

    @pytest.mark.asyncio
    async def test_duplicate_supplied_code_is_conflict(self, core):
        await core.services.user.create_user("S1", "s1@example.com", "Pw#12345", code="REP-7")
        with pytest.raises(ConflictError, match="REP-7"):
            await core.services.user.create_user("S2", "s2@example.com", "Pw#12345", code="REP-7")

    @pytest.mark.asyncio
    async def test_invalid_input_rejected(self, core):
        with pytest.raises(ValidationError):
            await core.services.user.create_user("Alice", "not-an-email", "Pw#12345")
        with pytest.raises(ValidationError):
            await core.services.user.create_user("Alice", "alice@example.com", "short")
        with pytest.raises(ValidationError):
            await core.services.user.create_user("Alice", "alice@example.com", "Pw#12345", code="  ")


class TestAuthenticate:
    @pytest.mark.asyncio
    async def test_correct_password(self, core, sales_user):
        user = await core.services.user.authenticate("SAM@example.com ", "Sales#123")
        assert user is not None
        assert user.id == sales_user.id

    @pytest.mark.asyncio
    async def test_wrong_password(self, core, sales_user):
        assert await core.services.user.authenticate("sam@example.com", "Wrong#123") is None

    @pytest.mark.asyncio
    async def test_unknown_email(self, core):
        assert await core.services.user.authenticate("nobody@example.com", "Sales#123") is None

    @pytest.mark.asyncio
    async def test_unknown_email_does_not_block_event_loop(self, core, monkeypatch):
        hash_password = PasswordHasher.hash_password

        def slow_hash_password(self, password):
            time.sleep(0.2)
            return hash_password(self, password)

        monkeypatch.setattr(PasswordHasher, "hash_password", slow_hash_password)
        ticks = 0

        async def ticker():
            nonlocal ticks
            while True:
                await asyncio.sleep(0.01)
                ticks += 1

        task = asyncio.create_task(ticker())
        try:
            assert await core.services.user.authenticate("nobody@example.com", "Sales#123") is None
        finally:
            task.cancel()
        assert ticks >= 5

    @pytest.mark.asyncio
    async def test_inactive_user(self, core, sales_user, users_collection):
        await users_collection.update_one({"_id": sales_user.id}, {"$set": {"active": False}})
        assert await core.services.user.authenticate("sam@example.com", "Sales#123") is None


class TestChangePassword:
    @pytest.mark.asyncio
    async def test_change_password(self, core, sales_user):
        await core.services.user.change_password(sales_user.id, "Sales#123", "Sales#456")
        assert await core.services.user.authenticate("sam@example.com", "Sales#123") is None
        assert await core.services.user.authenticate("sam@example.com", "Sales#456") is not None

    @pytest.mark.asyncio
    async def test_wrong_current_password(self, core, sales_user):
        with pytest.raises(ValidationError, match="Invalid current password"):
            await core.services.user.change_password(sales_user.id, "Wrong#123", "Sales#456")


class TestUserLookup:
    @pytest.mark.asyncio
    async def test_get_missing_user(self, core, sales_user):
        await core.services.user.delete_user(sales_user.id)
        with pytest.raises(NotFoundError):
            await core.services.user.get_user(sales_user.id)
        with pytest.raises(NotFoundError):
            await core.services.user.delete_user(sales_user.id)

    @pytest.mark.asyncio
    async def test_get_all_users_newest_first(self, core, sales_user, manager_user):
        users = await core.services.user.get_all_users()
        assert [user.id for user in users] == [manager_user.id, sales_user.id]


class TestBootstrapAdmin:
    @pytest.mark.asyncio
    async def test_not_created_without_config(self, core):
        assert await core.services.user.has_role(Role.ADMIN) is False

    @pytest.mark.asyncio
    async def test_created_once_when_configured(self, core):
        core.config.admin_email = "admin@example.com"
        core.config.admin_password = "Admin#123"

        await core.services.user.ensure_admin_user_exists()
        await core.services.user.ensure_admin_user_exists()

        admins = [user for user in await core.services.user.get_all_users() if user.role == Role.ADMIN]
        assert len(admins) == 1
        assert admins[0].email == "admin@example.com"
        assert admins[0].code == "AA001"
