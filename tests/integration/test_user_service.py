"""
가입/유저 조회 통합 테스트
"""
from unittest.mock import AsyncMock

import pytest

from exceptions import UserAlreadyExistsError, UserNotFoundError, ValidationError
from models import User, UserRole
from service.user_service import get_user_by_discord_id, register_user

pytestmark = pytest.mark.integration


class TestRegisterUser:
    async def test_registers_with_role(self, test_db):
        user = await register_user(discord_id=111, username="seller", role="auctioneer")

        stored = await User.get(id=user.id)
        assert stored.role == UserRole.AUCTIONEER
        assert (stored.money_spent, stored.auctions_won, stored.unpaid_commission) == (0, 0, 0)

    async def test_duplicate_discord_id(self, test_db):
        await register_user(discord_id=111, username="seller", role=UserRole.BIDDER)

        with pytest.raises(UserAlreadyExistsError):
            await register_user(discord_id=111, username="again", role=UserRole.BIDDER)

        assert await User.all().count() == 1

    async def test_unknown_role(self, test_db):
        with pytest.raises(ValidationError):
            await register_user(discord_id=111, username="who", role="admin")


class TestGetUser:
    async def test_found(self, user_factory):
        user = await user_factory()

        found = await get_user_by_discord_id(user.discord_id)

        assert found.id == user.id

    async def test_not_found(self, test_db):
        with pytest.raises(UserNotFoundError):
            await get_user_by_discord_id(999)


class TestRegisterRace:
    async def test_concurrent_registration_maps_to_conflict(self, test_db, monkeypatch):
        """중복 확인 뒤 다른 요청이 먼저 가입하면 UserAlreadyExistsError"""
        from service import user_service

        await register_user(discord_id=111, username="first", role=UserRole.BIDDER)
        monkeypatch.setattr(user_service, "exists_account_by_discord_id", AsyncMock(return_value=False))

        with pytest.raises(UserAlreadyExistsError):
            await register_user(discord_id=111, username="second", role=UserRole.BIDDER)

        assert await User.all().count() == 1
