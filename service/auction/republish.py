"""
경매 재등록

종료된 경매를 새 일정으로 되돌립니다. 네 가지 기록을 건드리므로
단계별로 나누어 진행하고, 남은 단계는 경매 행의 republish_step에 기록합니다.

1. (트랜잭션) 낙찰자 정산 취소 + 경매 초기화 + 진행 표시
2. 이전 회차 입찰 삭제
3. 요청자 미납 수수료 초기화

2, 3단계는 멱등하므로 재시도하며, 끝내 실패하면 백그라운드 작업이 이어받습니다.
"""
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from tortoise.expressions import F
from tortoise.transactions import in_transaction

from exceptions import (
    ActiveAuctionExistsError,
    AuctionStateChangedError,
    AuctionStillActiveError,
    FatalInconsistencyError,
)
from models.auction import Auction, RepublishStep
from models.bid import Bid
from models.repos.auction_repo import find_pending_republishes, has_unfinished_auction
from models.users import User
from service.auction.schedule import validate_schedule
from service.auction.store_retry import (
    STORE_ERRORS,
    single_store_call,
    store_retrying,
)

logger = logging.getLogger(__name__)


class RepublishStatus(str, Enum):
    APPLIED = "applied"
    PARTIALLY_APPLIED = "partially_applied"


@dataclass(frozen=True)
class RepublishResult:
    """재등록 결과 (PARTIALLY_APPLIED면 resume_from부터 재개)"""
    auction: Auction
    status: RepublishStatus
    resume_from: Optional[RepublishStep] = None

    @property
    def applied(self) -> bool:
        return self.status == RepublishStatus.APPLIED


async def republish(
    auction: Auction,
    start_time: Optional[datetime],
    end_time: Optional[datetime],
    requester: User,
    now: Optional[datetime] = None
) -> RepublishResult:
    """
    재등록 실행

    Raises:
        AuctionStillActiveError: 종료 시각이 아직 지나지 않음
        MissingFieldsError, InvalidScheduleError: 새 일정 오류
        ActiveAuctionExistsError: 판매자에게 끝나지 않은 다른 경매가 있음
        AuctionStateChangedError: 처리 도중 다른 작업이 경매를 변경
        FatalInconsistencyError: 후속 단계가 재시도 후에도 실패
    """
    now = now or datetime.now(timezone.utc)

    # Guard: 종료된 경매만
    if auction.end_time > now:
        raise AuctionStillActiveError(auction.id)

    start_time, end_time = validate_schedule(start_time, end_time, now)

    # 이전 재등록이 끝나지 않았으면 먼저 마무리
    if auction.republish_step is not None:
        previous = await advance(auction)
        if not previous.applied:
            raise FatalInconsistencyError(auction.id, previous.resume_from.value)

    await _reset_auction(auction, start_time, end_time, requester, now)

    logger.info(
        f"User {requester.id} republished auction {auction.id} "
        f"(round {auction.bid_round}, {start_time.isoformat()} ~ {end_time.isoformat()})"
    )

    result = await advance(auction)
    if not result.applied:
        raise FatalInconsistencyError(auction.id, result.resume_from.value)
    return result


@single_store_call("경매 재등록")
async def _reset_auction(
    auction: Auction,
    start_time: datetime,
    end_time: datetime,
    requester: User,
    now: datetime
) -> None:
    settled = auction.commission_calculated
    winner_id = auction.highest_bidder_id
    winning_bid = auction.current_bid
    next_round = auction.bid_round + 1

    # Transaction: 판매자 행 잠금 + 다른 경매 확인 + 경매 초기화 + 낙찰자 정산 취소
    async with in_transaction() as conn:
        await User.filter(id=auction.created_by_id).using_db(conn).select_for_update().first()

        if await has_unfinished_auction(auction.created_by_id, now, using_db=conn, exclude_id=auction.id):
            raise ActiveAuctionExistsError(auction.created_by_id)

        reset = await Auction.filter(
            id=auction.id,
            bid_round=auction.bid_round,
            commission_calculated=settled,
            end_time__lte=now,
            republish_step__isnull=True
        ).using_db(conn).update(
            start_time=start_time,
            end_time=end_time,
            current_bid=0,
            highest_bidder_id=None,
            commission_calculated=False,
            bid_round=next_round,
            republish_step=RepublishStep.PURGE_BIDS,
            republish_requested_by_id=requester.id
        )

        if reset == 0:
            raise AuctionStateChangedError(auction.id)

        # 정산된 회차만 되돌린다 (정산 전이면 더한 적이 없음)
        if settled and winner_id is not None:
            reverted = await User.filter(id=winner_id).using_db(conn).update(
                money_spent=F("money_spent") - winning_bid,
                auctions_won=F("auctions_won") - 1
            )
            if reverted == 0:
                logger.warning(
                    f"Winner {winner_id} of auction {auction.id} no longer exists; "
                    f"nothing to reverse"
                )
            else:
                logger.info(
                    f"Reversed settlement of auction {auction.id} for user {winner_id} "
                    f"({winning_bid})"
                )

    auction.start_time = start_time
    auction.end_time = end_time
    auction.current_bid = 0
    auction.highest_bidder_id = None
    auction.commission_calculated = False
    auction.bid_round = next_round
    auction.republish_step = RepublishStep.PURGE_BIDS
    auction.republish_requested_by_id = requester.id


async def _purge_bids(auction: Auction) -> None:
    async with in_transaction() as conn:
        deleted = await Bid.filter(
            auction_id=auction.id,
            bid_round__lt=auction.bid_round
        ).using_db(conn).delete()

        await Auction.filter(
            id=auction.id,
            republish_step=RepublishStep.PURGE_BIDS
        ).using_db(conn).update(republish_step=RepublishStep.CLEAR_COMMISSION)

    auction.republish_step = RepublishStep.CLEAR_COMMISSION
    logger.info(f"Purged {deleted} stale bids of auction {auction.id}")


async def _clear_commission(auction: Auction) -> None:
    requester_id = auction.republish_requested_by_id

    async with in_transaction() as conn:
        if requester_id is not None:
            await User.filter(id=requester_id).using_db(conn).update(unpaid_commission=0)

        await Auction.filter(
            id=auction.id,
            republish_step=RepublishStep.CLEAR_COMMISSION
        ).using_db(conn).update(
            republish_step=None,
            republish_requested_by_id=None
        )

    auction.republish_step = None
    auction.republish_requested_by_id = None
    logger.info(f"Cleared unpaid commission of user {requester_id} (auction {auction.id})")


_STEP_HANDLERS = {
    RepublishStep.PURGE_BIDS: _purge_bids,
    RepublishStep.CLEAR_COMMISSION: _clear_commission,
}


async def advance(auction: Auction) -> RepublishResult:
    """
    남은 재등록 단계 진행

    각 단계는 재시도하며, 재시도가 모두 실패하면 PARTIALLY_APPLIED를 돌려줍니다.
    """
    while auction.republish_step is not None:
        step = RepublishStep(auction.republish_step)
        try:
            async for attempt in store_retrying():
                with attempt:
                    await _STEP_HANDLERS[step](auction)
        except STORE_ERRORS as e:
            logger.error(
                f"Republish of auction {auction.id} stopped at {step.value}: {e}",
                exc_info=True
            )
            return RepublishResult(
                auction=auction,
                status=RepublishStatus.PARTIALLY_APPLIED,
                resume_from=step
            )

    return RepublishResult(auction=auction, status=RepublishStatus.APPLIED)


async def resume_pending_republishes() -> int:
    """
    중단된 재등록 마무리 (백그라운드 작업용)

    Returns:
        완료된 재등록 수
    """
    pending = await find_pending_republishes()

    completed = 0
    for auction in pending:
        result = await advance(auction)
        if result.applied:
            completed += 1
        else:
            logger.error(
                f"Auction {auction.id} is still inconsistent; "
                f"will resume from {result.resume_from.value}"
            )

    if completed > 0:
        logger.info(f"Resumed {completed} pending republishes")

    return completed
