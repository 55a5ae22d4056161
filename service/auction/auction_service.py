"""
경매 서비스

경매 등록, 조회, 삭제, 재등록, 입찰의 핵심 비즈니스 로직을 제공합니다.
"""
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List, Optional, Union

from tortoise.transactions import in_transaction

from exceptions import (
    ActiveAuctionExistsError,
    AuctionNotFoundError,
    InvalidAmountError,
    MissingFieldsError,
    StaleBidError,
    ValidationError,
)
from models.auction import Auction, AuctionCondition, AuctionState
from models.bid import Bid
from models.repos.auction_repo import (
    find_round_bids,
    has_unfinished_auction,
    parse_auction_id,
)
from models.users import User
from service.auction.auction_closer import AuctionCloser
from service.auction.bid_validator import validate_bid
from service.auction.republish import RepublishResult, republish
from service.auction.schedule import validate_schedule
from service.auction.store_retry import idempotent_store_call, single_store_call
from service.image.image_store import ImageRef, ImageStore, validate_image_format

logger = logging.getLogger(__name__)


@dataclass
class AuctionDetails:
    """경매 등록 입력값"""
    title: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None
    condition: Optional[Union[AuctionCondition, str]] = None
    starting_bid: Optional[int] = None
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None

    def missing_fields(self) -> List[str]:
        missing = []
        for name in ("title", "description", "category", "condition", "starting_bid", "start_time", "end_time"):
            value = getattr(self, name)
            if value is None or (isinstance(value, str) and not value.strip()):
                missing.append(name)
        return missing


@dataclass(frozen=True)
class AuctionSummary:
    """목록용 경매 요약 (입찰 목록 제외)"""
    id: int
    title: str
    category: str
    condition: AuctionCondition
    image_url: str
    starting_bid: int
    current_bid: int
    start_time: datetime
    end_time: datetime
    state: AuctionState
    created_by_id: int

    @classmethod
    def from_auction(cls, auction: Auction, now: Optional[datetime] = None) -> "AuctionSummary":
        return cls(
            id=auction.id,
            title=auction.title,
            category=auction.category,
            condition=auction.condition,
            image_url=auction.image_url,
            starting_bid=auction.starting_bid,
            current_bid=auction.current_bid,
            start_time=auction.start_time,
            end_time=auction.end_time,
            state=auction.state_at(now),
            created_by_id=auction.created_by_id,
        )


@dataclass(frozen=True)
class AuctionDetail:
    """상세 조회 결과 (입찰은 금액 내림차순)"""
    auction: Auction
    bidders: List[Bid] = field(default_factory=list)


def _parse_condition(value: Union[AuctionCondition, str]) -> AuctionCondition:
    if isinstance(value, AuctionCondition):
        return value
    try:
        return AuctionCondition(str(value).strip().lower())
    except ValueError:
        options = ", ".join(c.value for c in AuctionCondition)
        raise ValidationError(f"물품 상태는 {options} 중 하나여야 합니다. (입력: {value})") from None


def _is_positive_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value > 0


class AuctionService:
    """경매 비즈니스 로직"""

    # =========================================================================
    # 등록 (Create)
    # =========================================================================

    @staticmethod
    async def create_auction(
        creator: User,
        details: AuctionDetails,
        image,
        image_store: ImageStore,
        now: Optional[datetime] = None
    ) -> Auction:
        """
        경매 등록

        Args:
            creator: 판매자
            details: 경매 정보
            image: 업로드할 이미지 (discord.Attachment)
            image_store: 이미지 저장소
            now: 기준 시각 (기본: 현재)

        Returns:
            생성된 Auction

        Raises:
            MissingFieldsError: 이미지 또는 필수 항목 누락
            InvalidImageFormatError: PNG, JPEG, WEBP가 아님
            InvalidAmountError: 시작가가 양의 정수가 아님
            InvalidScheduleError: 일정 오류
            ActiveAuctionExistsError: 끝나지 않은 경매가 이미 있음
            ImageUploadError: 업로드 실패
        """
        now = now or datetime.now(timezone.utc)

        # Guard: 이미지 확인
        if image is None:
            raise MissingFieldsError(["image"])
        validate_image_format(image.content_type)

        # Guard: 필수 항목
        missing = details.missing_fields()
        if missing:
            raise MissingFieldsError(missing)

        condition = _parse_condition(details.condition)

        if not _is_positive_int(details.starting_bid):
            raise InvalidAmountError("시작가", details.starting_bid)

        start_time, end_time = validate_schedule(details.start_time, details.end_time, now)

        # Guard: 판매자당 하나의 경매
        if await AuctionService._seller_has_unfinished_auction(creator.id, now):
            raise ActiveAuctionExistsError(creator.id)

        image_ref = await image_store.upload(image)

        auction = await AuctionService._insert_auction(
            creator, details, condition, start_time, end_time, image_ref, now
        )

        logger.info(
            f"User {creator.id} created auction {auction.id} "
            f"({auction.starting_bid}, {start_time.isoformat()} ~ {end_time.isoformat()})"
        )
        return auction

    @staticmethod
    @idempotent_store_call("진행 중 경매 확인")
    async def _seller_has_unfinished_auction(seller_id: int, now: datetime) -> bool:
        return await has_unfinished_auction(seller_id, now)

    @staticmethod
    @single_store_call("경매 등록")
    async def _insert_auction(
        creator: User,
        details: AuctionDetails,
        condition: AuctionCondition,
        start_time: datetime,
        end_time: datetime,
        image_ref: ImageRef,
        now: datetime
    ) -> Auction:
        # Transaction: 판매자 행 잠금 + 재확인 + 생성
        async with in_transaction() as conn:
            await User.filter(id=creator.id).using_db(conn).select_for_update().first()

            if await has_unfinished_auction(creator.id, now, using_db=conn):
                logger.warning(
                    f"User {creator.id} raced another auction creation; "
                    f"uploaded image {image_ref.public_id} is orphaned"
                )
                raise ActiveAuctionExistsError(creator.id)

            return await Auction.create(
                title=details.title.strip(),
                description=details.description.strip(),
                category=details.category.strip(),
                condition=condition,
                image_public_id=image_ref.public_id,
                image_url=image_ref.url,
                starting_bid=details.starting_bid,
                current_bid=0,
                highest_bidder_id=None,
                start_time=start_time,
                end_time=end_time,
                commission_calculated=False,
                created_by_id=creator.id,
                using_db=conn
            )

    # =========================================================================
    # 조회 (Query)
    # =========================================================================

    @staticmethod
    @idempotent_store_call("경매 목록 조회")
    async def list_auctions(
        offset: int = 0,
        limit: Optional[int] = None,
        now: Optional[datetime] = None
    ) -> List[AuctionSummary]:
        """경매 목록 (입찰 목록 제외, 최신순)"""
        query = Auction.all().order_by("-created_at", "-id").offset(offset)
        if limit:
            query = query.limit(limit)
        auctions = await query
        return [AuctionSummary.from_auction(a, now) for a in auctions]

    @staticmethod
    async def get_auction_detail(auction_id: Union[int, str]) -> AuctionDetail:
        """
        경매 상세 조회

        Raises:
            InvalidAuctionIdError: ID 형식 오류
            AuctionNotFoundError: 경매 없음
        """
        auction = await AuctionService.get_auction(auction_id)
        bidders = await AuctionService._load_bidders(auction)
        return AuctionDetail(auction=auction, bidders=bidders)

    @staticmethod
    async def get_auction(auction_id: Union[int, str]) -> Auction:
        parsed_id = parse_auction_id(auction_id)
        auction = await AuctionService._find_auction(parsed_id)
        if not auction:
            raise AuctionNotFoundError(parsed_id)
        return auction

    @staticmethod
    @idempotent_store_call("경매 조회")
    async def _find_auction(auction_id: int) -> Optional[Auction]:
        return await Auction.get_or_none(id=auction_id)

    @staticmethod
    @idempotent_store_call("입찰 목록 조회")
    async def _load_bidders(auction: Auction) -> List[Bid]:
        return await find_round_bids(auction)

    @staticmethod
    @idempotent_store_call("내 경매 조회")
    async def list_my_auctions(creator: User) -> List[Auction]:
        """내가 등록한 경매 (최신순)"""
        return await Auction.filter(created_by_id=creator.id).order_by("-created_at", "-id")

    # =========================================================================
    # 삭제 (Delete)
    # =========================================================================

    @staticmethod
    async def delete_auction(auction_id: Union[int, str]) -> None:
        """
        경매 삭제 (입찰 기록도 함께 삭제)

        Raises:
            InvalidAuctionIdError: ID 형식 오류
            AuctionNotFoundError: 경매 없음
        """
        auction = await AuctionService.get_auction(auction_id)
        await AuctionService._delete(auction)
        logger.info(f"Deleted auction {auction.id}")

    @staticmethod
    @single_store_call("경매 삭제")
    async def _delete(auction: Auction) -> None:
        await auction.delete()

    # =========================================================================
    # 재등록 (Republish)
    # =========================================================================

    @staticmethod
    async def republish_auction(
        auction_id: Union[int, str],
        start_time: Optional[datetime],
        end_time: Optional[datetime],
        requester: User,
        now: Optional[datetime] = None
    ) -> RepublishResult:
        """
        종료된 경매 재등록

        Raises:
            InvalidAuctionIdError: ID 형식 오류
            AuctionNotFoundError: 경매 없음
            AuctionStillActiveError: 아직 종료되지 않음
            MissingFieldsError, InvalidScheduleError: 새 일정 오류
            ActiveAuctionExistsError: 판매자에게 끝나지 않은 다른 경매가 있음
            FatalInconsistencyError: 후속 단계가 재시도 후에도 실패
        """
        auction = await AuctionService.get_auction(auction_id)
        return await republish(auction, start_time, end_time, requester, now)

    # =========================================================================
    # 입찰 (Bidding)
    # =========================================================================

    @staticmethod
    async def place_bid(
        auction_id: Union[int, str],
        bidder: User,
        amount: int,
        now: Optional[datetime] = None
    ) -> Bid:
        """
        입찰

        Args:
            auction_id: 경매 ID
            bidder: 입찰자
            amount: 입찰 금액
            now: 기준 시각 (기본: 현재)

        Returns:
            생성된 Bid

        Raises:
            AuctionNotFoundError: 경매 없음
            InvalidAmountError: 금액 오류
            SelfBidError: 본인 경매 입찰
            AuctionNotActiveError: 입찰 가능 시간이 아님
            BidTooLowError: 현재가 이하
            StaleBidError: 다른 입찰이 먼저 반영됨
        """
        now = now or datetime.now(timezone.utc)
        auction = await AuctionService.get_auction(auction_id)

        decision = validate_bid(auction, bidder.id, amount, now)
        if not decision.accepted:
            logger.info(
                f"Rejected bid {amount} by user {bidder.id} on auction {auction.id}: "
                f"{decision.reason.value}"
            )
            decision.raise_for_rejection()

        bid = await AuctionService._commit_bid(auction, bidder, amount, now)

        logger.info(f"User {bidder.id} bid {amount} on auction {auction.id}")
        return bid

    @staticmethod
    @single_store_call("입찰")
    async def _commit_bid(auction: Auction, bidder: User, amount: int, now: datetime) -> Bid:
        # Transaction: 현재가 조건부 갱신 (읽은 값 그대로일 때만) + 입찰 생성
        async with in_transaction() as conn:
            updated = await Auction.filter(
                id=auction.id,
                current_bid=auction.current_bid,
                bid_round=auction.bid_round,
                start_time__lte=now,
                end_time__gt=now
            ).using_db(conn).update(
                current_bid=amount,
                highest_bidder_id=bidder.id
            )

            if updated == 0:
                logger.warning(
                    f"Stale bid {amount} by user {bidder.id} on auction {auction.id} "
                    f"(observed {auction.current_bid})"
                )
                raise StaleBidError(auction.id, auction.current_bid)

            bid = await Bid.create(
                auction_id=auction.id,
                bidder_id=bidder.id,
                amount=amount,
                bid_round=auction.bid_round,
                using_db=conn
            )

        auction.current_bid = amount
        auction.highest_bidder_id = bidder.id
        return bid

    # =========================================================================
    # 마감 (Close)
    # =========================================================================

    @staticmethod
    async def close_due_auctions(now: Optional[datetime] = None) -> int:
        """마감된 경매 정산 (스케줄러용)"""
        return await AuctionCloser().close_due_auctions(now)
