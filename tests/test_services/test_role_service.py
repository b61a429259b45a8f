"""Tests for role lookups and upgrades."""

import pytest

from flipdeck.services.role_service import get_user_role, set_user_role


@pytest.mark.asyncio
class TestRoleService:
    async def test_missing_row_is_free(self, db_session, test_user):
        assert await get_user_role(db_session, test_user.id) == "free"

    async def test_set_creates_row(self, db_session, test_user):
        user_role = await set_user_role(db_session, test_user.id, "pro")
        assert user_role.role == "pro"
        assert await get_user_role(db_session, test_user.id) == "pro"

    async def test_set_updates_existing_row(self, db_session, test_user):
        first = await set_user_role(db_session, test_user.id, "pro")
        second = await set_user_role(db_session, test_user.id, "free")
        assert first.id == second.id
        assert await get_user_role(db_session, test_user.id) == "free"

    async def test_unknown_role_rejected(self, db_session, test_user):
        with pytest.raises(ValueError):
            await set_user_role(db_session, test_user.id, "admin")
