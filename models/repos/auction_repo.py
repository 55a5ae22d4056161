"""
경매 조회 헬퍼

서비스 레이어에서 공통으로 쓰는 경매/입찰 쿼리를 모아둡니다.
"""
from datetime import datetime
from typing import List, Optional, Union

from exceptions import InvalidAuctionIdError
from models import Auction, Bid

_MAX_ID = 2 ** 63 - 1


def parse_auction_id(raw_id: Union[int, str]) -> int:
    """
    경매 ID 형식 검증

    형식이 올바른 ID라도 실제로 존재하지 않을 수 있습니다.

    Raises:
        InvalidAuctionIdError: 양의 정수가 아님
    """
    if isinstance(raw_id, bool):
        raise InvalidAuctionIdError(raw_id)

    if isinstance(raw_id, int):
        auction_id = raw_id
    else:
        text = str(raw_id).strip()
        if not text.isdigit():
            raise InvalidAuctionIdError(raw_id)
        auction_id = int(text)

    if not (0 < auction_id <= _MAX_ID):
        raise InvalidAuctionIdError(raw_id)
    return auction_id


async def has_unfinished_auction(
    seller_id: int,
    now: datetime,
    using_db=None,
    exclude_id: Optional[int] = None
) -> bool:
    """판매자에게 아직 끝나지 않은 경매(예정 또는 진행 중)가 있는지"""
    query = Auction.filter(created_by_id=seller_id, end_time__gt=now)
    if exclude_id is not None:
        query = query.exclude(id=exclude_id)
    if using_db is not None:
        query = query.using_db(using_db)
    return await query.exists()


async def find_round_bids(auction: Auction) -> List[Bid]:
    """현재 회차 입찰 (금액 내림차순)"""
    return await Bid.filter(
        auction_id=auction.id,
        bid_round=auction.bid_round
    ).order_by("-amount", "created_at")


async def find_due_auctions(now: datetime) -> List[Auction]:
    """마감 시각이 지났지만 정산되지 않은 경매"""
    return await Auction.filter(
        end_time__lte=now,
        commission_calculated=False
    ).order_by("end_time")


async def find_pending_republishes() -> List[Auction]:
    """재등록 후속 단계가 남은 경매"""
    return await Auction.filter(republish_step__isnull=False).order_by("id")
