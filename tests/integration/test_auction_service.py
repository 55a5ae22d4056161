"""
경매 등록/조회/삭제 통합 테스트
"""
from datetime import timedelta
from types import SimpleNamespace

import pytest

from exceptions import (
    ActiveAuctionExistsError,
    AuctionNotFoundError,
    ConflictError,
    InvalidAmountError,
    InvalidAuctionIdError,
    InvalidImageFormatError,
    InvalidScheduleError,
    MissingFieldsError,
    ValidationError,
)
from models import Auction, AuctionCondition, AuctionState, Bid, UserRole
from service.auction import AuctionDetails, AuctionService

pytestmark = pytest.mark.integration


def _details(now, **overrides) -> AuctionDetails:
    values = dict(
        title="사인 유니폼",
        description="2024 시즌 사인 유니폼",
        category="sports",
        condition="new",
        starting_bid=100,
        start_time=now + timedelta(hours=1),
        end_time=now + timedelta(hours=25),
    )
    values.update(overrides)
    return AuctionDetails(**values)


@pytest.fixture
async def seller(user_factory):
    return await user_factory(role=UserRole.AUCTIONEER)


@pytest.fixture
async def bidder(user_factory):
    return await user_factory(role=UserRole.BIDDER)


class TestCreateAuction:
    async def test_creates_scheduled_auction(self, seller, image_store, png_image, now):
        auction = await AuctionService.create_auction(
            seller, _details(now), png_image, image_store, now=now
        )

        stored = await Auction.get(id=auction.id)
        assert stored.title == "사인 유니폼"
        assert stored.condition == AuctionCondition.NEW
        assert stored.starting_bid == 100
        assert stored.current_bid == 0
        assert stored.highest_bidder_id is None
        assert stored.commission_calculated is False
        assert stored.bid_round == 1
        assert stored.created_by_id == seller.id
        assert stored.image_public_id == "img-42"
        assert stored.image_url == "https://cdn.example.com/img-42.png"
        assert stored.state_at(now) == AuctionState.SCHEDULED
        image_store.upload.assert_awaited_once_with(png_image)

    async def test_requires_image(self, seller, image_store, now):
        with pytest.raises(MissingFieldsError) as exc:
            await AuctionService.create_auction(seller, _details(now), None, image_store, now=now)

        assert exc.value.fields == ["image"]
        image_store.upload.assert_not_awaited()

    async def test_rejects_image_format_before_upload(self, seller, image_store, now):
        gif = SimpleNamespace(content_type="image/gif", filename="item.gif")

        with pytest.raises(InvalidImageFormatError):
            await AuctionService.create_auction(seller, _details(now), gif, image_store, now=now)

        image_store.upload.assert_not_awaited()

    async def test_reports_missing_fields(self, seller, image_store, png_image, now):
        details = _details(now, title="  ", category=None)

        with pytest.raises(MissingFieldsError) as exc:
            await AuctionService.create_auction(seller, details, png_image, image_store, now=now)

        assert exc.value.fields == ["title", "category"]
        assert await Auction.all().count() == 0

    async def test_rejects_unknown_condition(self, seller, image_store, png_image, now):
        with pytest.raises(ValidationError):
            await AuctionService.create_auction(
                seller, _details(now, condition="refurbished"), png_image, image_store, now=now
            )

    @pytest.mark.parametrize("starting_bid", [0, -10])
    async def test_rejects_non_positive_starting_bid(self, seller, image_store, png_image, now, starting_bid):
        with pytest.raises(InvalidAmountError):
            await AuctionService.create_auction(
                seller, _details(now, starting_bid=starting_bid), png_image, image_store, now=now
            )

    async def test_rejects_start_in_past(self, seller, image_store, png_image, now):
        details = _details(now, start_time=now - timedelta(minutes=5))

        with pytest.raises(ValidationError) as exc:
            await AuctionService.create_auction(seller, details, png_image, image_store, now=now)

        assert isinstance(exc.value, InvalidScheduleError)

    async def test_rejects_start_not_before_end(self, seller, image_store, png_image, now):
        start = now + timedelta(hours=2)
        details = _details(now, start_time=start, end_time=start)

        with pytest.raises(ValidationError):
            await AuctionService.create_auction(seller, details, png_image, image_store, now=now)

        image_store.upload.assert_not_awaited()

    async def test_second_unfinished_auction_conflicts(self, seller, image_store, png_image, now):
        await AuctionService.create_auction(seller, _details(now), png_image, image_store, now=now)

        with pytest.raises(ConflictError) as exc:
            await AuctionService.create_auction(seller, _details(now), png_image, image_store, now=now)

        assert isinstance(exc.value, ActiveAuctionExistsError)
        assert image_store.upload.await_count == 1
        assert await Auction.filter(created_by_id=seller.id).count() == 1

    async def test_active_auction_blocks_new_one(self, seller, auction_factory, image_store, png_image, now):
        await auction_factory(seller, start_offset=-30, end_offset=30)

        with pytest.raises(ActiveAuctionExistsError):
            await AuctionService.create_auction(seller, _details(now), png_image, image_store, now=now)

    async def test_closed_auction_does_not_block(self, seller, auction_factory, image_store, png_image, now):
        await auction_factory(seller, start_offset=-120, end_offset=-60)

        auction = await AuctionService.create_auction(seller, _details(now), png_image, image_store, now=now)

        assert auction.id is not None

    async def test_other_sellers_are_independent(self, seller, user_factory, auction_factory, image_store, png_image, now):
        other = await user_factory(role=UserRole.AUCTIONEER)
        await auction_factory(other, start_offset=-30, end_offset=30)

        auction = await AuctionService.create_auction(seller, _details(now), png_image, image_store, now=now)

        assert auction.created_by_id == seller.id


class TestQueries:
    async def test_list_auctions_newest_first(self, seller, user_factory, auction_factory, now):
        other = await user_factory(role=UserRole.AUCTIONEER)
        first = await auction_factory(seller, title="첫 번째")
        second = await auction_factory(other, title="두 번째")

        summaries = await AuctionService.list_auctions(now=now)

        assert [s.id for s in summaries] == [second.id, first.id]
        assert summaries[0].state == AuctionState.ACTIVE
        assert not hasattr(summaries[0], "bids")

    async def test_detail_sorts_bids_descending(self, seller, bidder, user_factory, auction_factory):
        auction = await auction_factory(seller)
        other = await user_factory()
        await Bid.create(auction=auction, bidder_id=bidder.id, amount=150, bid_round=1)
        await Bid.create(auction=auction, bidder_id=other.id, amount=300, bid_round=1)
        await Bid.create(auction=auction, bidder_id=bidder.id, amount=200, bid_round=1)

        detail = await AuctionService.get_auction_detail(str(auction.id))

        assert detail.auction.id == auction.id
        assert [b.amount for b in detail.bidders] == [300, 200, 150]

    async def test_detail_ignores_previous_round_bids(self, seller, bidder, auction_factory):
        auction = await auction_factory(seller, bid_round=2)
        await Bid.create(auction=auction, bidder_id=bidder.id, amount=500, bid_round=1)
        await Bid.create(auction=auction, bidder_id=bidder.id, amount=120, bid_round=2)

        detail = await AuctionService.get_auction_detail(auction.id)

        assert [b.amount for b in detail.bidders] == [120]

    @pytest.mark.parametrize("raw_id", ["abc", "-1", "0", "", "12.5"])
    async def test_detail_invalid_id(self, test_db, raw_id):
        with pytest.raises(InvalidAuctionIdError):
            await AuctionService.get_auction_detail(raw_id)

    async def test_detail_not_found(self, test_db):
        with pytest.raises(AuctionNotFoundError) as exc:
            await AuctionService.get_auction_detail("999")

        assert exc.value.auction_id == 999

    async def test_list_my_auctions(self, seller, user_factory, auction_factory):
        other = await user_factory(role=UserRole.AUCTIONEER)
        mine = await auction_factory(seller)
        await auction_factory(other)

        auctions = await AuctionService.list_my_auctions(seller)

        assert [a.id for a in auctions] == [mine.id]


class TestDeleteAuction:
    async def test_delete_cascades_bids(self, seller, bidder, auction_factory):
        auction = await auction_factory(seller)
        await Bid.create(auction=auction, bidder_id=bidder.id, amount=150, bid_round=1)

        await AuctionService.delete_auction(str(auction.id))

        assert not await Auction.exists(id=auction.id)
        assert await Bid.all().count() == 0

    async def test_delete_active_auction_is_allowed(self, seller, auction_factory):
        auction = await auction_factory(seller, start_offset=-10, end_offset=10)

        await AuctionService.delete_auction(auction.id)

        assert not await Auction.exists(id=auction.id)

    async def test_delete_not_found(self, test_db):
        with pytest.raises(AuctionNotFoundError):
            await AuctionService.delete_auction(12345)

    async def test_delete_invalid_id(self, test_db):
        with pytest.raises(InvalidAuctionIdError):
            await AuctionService.delete_auction("not-an-id")
