"""
입찰 검증

입찰 금액과 경매 시간을 검사해 수락 여부와 거절 사유를 돌려줍니다.
저장소에 접근하지 않는 순수 로직입니다.
"""
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from exceptions import (
    AuctionNotActiveError,
    BidTooLowError,
    InvalidAmountError,
    SelfBidError,
)
from models.auction import Auction, AuctionState


class BidRejection(str, Enum):
    """입찰 거절 사유"""
    INVALID_AMOUNT = "invalid_amount"
    SELF_BID = "self_bid"
    NOT_ACTIVE = "not_active"
    AMOUNT_TOO_LOW = "amount_too_low"


@dataclass(frozen=True)
class BidDecision:
    auction: Auction
    amount: int
    minimum: int
    reason: Optional[BidRejection] = None

    @property
    def accepted(self) -> bool:
        return self.reason is None

    def raise_for_rejection(self) -> None:
        """거절 사유를 예외로 변환"""
        if self.reason is None:
            return
        if self.reason == BidRejection.INVALID_AMOUNT:
            raise InvalidAmountError("입찰가", self.amount)
        if self.reason == BidRejection.SELF_BID:
            raise SelfBidError()
        if self.reason == BidRejection.NOT_ACTIVE:
            raise AuctionNotActiveError(self.auction.id)
        raise BidTooLowError(self.minimum, self.amount)


def validate_bid(
    auction: Auction,
    bidder_id: int,
    amount: int,
    now: Optional[datetime] = None
) -> BidDecision:
    """
    입찰 검증

    Args:
        auction: 대상 경매 (읽은 시점의 스냅샷)
        bidder_id: 입찰자 User.id
        amount: 입찰 금액
        now: 기준 시각 (기본: 현재)

    Returns:
        BidDecision (accepted가 False면 reason에 사유)
    """
    now = now or datetime.now(timezone.utc)
    minimum = auction.minimum_bid

    def _decide(reason: Optional[BidRejection]) -> BidDecision:
        return BidDecision(auction=auction, amount=amount, minimum=minimum, reason=reason)

    if isinstance(amount, bool) or not isinstance(amount, int) or amount <= 0:
        return _decide(BidRejection.INVALID_AMOUNT)

    if auction.created_by_id == bidder_id:
        return _decide(BidRejection.SELF_BID)

    if auction.state_at(now) != AuctionState.ACTIVE:
        return _decide(BidRejection.NOT_ACTIVE)

    if amount <= minimum:
        return _decide(BidRejection.AMOUNT_TOO_LOW)

    return _decide(None)
