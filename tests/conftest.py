"""
pytest 설정 및 공통 픽스처 정의
"""
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path
from types import SimpleNamespace
from typing import AsyncGenerator
from unittest.mock import AsyncMock

import pytest

# 프로젝트 루트를 Python 경로에 추가
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))


# =============================================================================
# pytest 설정
# =============================================================================


def pytest_configure(config):
    """pytest 설정"""
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )


# =============================================================================
# 데이터베이스 픽스처
# =============================================================================


@pytest.fixture(scope="function")
async def test_db() -> AsyncGenerator[None, None]:
    """
    테스트용 인메모리 SQLite 데이터베이스
    각 테스트 함수마다 새로운 DB 생성
    """
    from tortoise import Tortoise

    await Tortoise.init(
        db_url="sqlite://:memory:",
        modules={"models": ["models"]},
        use_tz=True
    )
    await Tortoise.generate_schemas()

    yield

    await Tortoise.close_connections()


# =============================================================================
# 시간 픽스처
# =============================================================================


@pytest.fixture
def now() -> datetime:
    """테스트 기준 시각 (초 단위 절삭)"""
    return datetime.now(timezone.utc).replace(microsecond=0)


# =============================================================================
# 엔티티 팩토리 픽스처
# =============================================================================


@pytest.fixture
def user_factory(test_db):
    """DB에 User 생성"""
    from models import User, UserRole

    counter = {"next": 1000}

    async def _create_user(
        role: UserRole = UserRole.BIDDER,
        username: str | None = None,
        money_spent: int = 0,
        auctions_won: int = 0,
        unpaid_commission: int = 0,
    ) -> User:
        counter["next"] += 1
        return await User.create(
            discord_id=counter["next"],
            username=username or f"user{counter['next']}",
            role=role,
            money_spent=money_spent,
            auctions_won=auctions_won,
            unpaid_commission=unpaid_commission,
        )

    return _create_user


@pytest.fixture
def auction_factory(test_db, now):
    """
    DB에 Auction 직접 생성 (등록 검증 우회)

    start_offset, end_offset은 기준 시각으로부터의 분 단위 오프셋
    """
    from models import Auction, AuctionCondition

    async def _create_auction(
        seller,
        start_offset: int = -60,
        end_offset: int = 60,
        starting_bid: int = 100,
        **overrides,
    ) -> Auction:
        fields = dict(
            title="테스트 물품",
            description="테스트용 경매입니다.",
            category="collectibles",
            condition=AuctionCondition.NEW,
            image_public_id="img-1",
            image_url="https://cdn.example.com/img-1.png",
            starting_bid=starting_bid,
            start_time=now + timedelta(minutes=start_offset),
            end_time=now + timedelta(minutes=end_offset),
            created_by_id=seller.id,
        )
        fields.update(overrides)
        return await Auction.create(**fields)

    return _create_auction


# =============================================================================
# 이미지 저장소 픽스처
# =============================================================================


@pytest.fixture
def image_store():
    """업로드 결과를 고정으로 돌려주는 이미지 저장소"""
    from service.image import ImageRef

    store = SimpleNamespace()
    store.upload = AsyncMock(
        return_value=ImageRef(public_id="img-42", url="https://cdn.example.com/img-42.png")
    )
    return store


@pytest.fixture
def png_image():
    """Mock discord.Attachment (PNG)"""
    return SimpleNamespace(content_type="image/png", filename="item.png")
