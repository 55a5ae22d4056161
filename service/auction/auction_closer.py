"""
경매 마감 정산

종료 시각이 지난 경매의 낙찰자에게 낙찰가와 수수료를 반영합니다.
외부 스케줄러가 주기적으로 호출하며, 같은 경매를 두 번 정산하지 않습니다.
"""
import logging
from datetime import datetime, timezone
from typing import Optional

from tortoise.expressions import F
from tortoise.transactions import in_transaction

from models.auction import Auction
from models.repos.auction_repo import find_due_auctions
from models.users import User
from service.auction.commission import CommissionPolicy, commission
from service.auction.store_retry import STORE_ERRORS, idempotent_store_call

logger = logging.getLogger(__name__)


class AuctionCloser:
    """마감 경매 정산기"""

    def __init__(self, policy: Optional[CommissionPolicy] = None):
        self.policy = policy

    async def close_due_auctions(self, now: Optional[datetime] = None) -> int:
        """
        마감된 경매 정산 (크론잡용)

        Returns:
            이번 호출에서 정산된 경매 수
        """
        now = now or datetime.now(timezone.utc)
        due_auctions = await self._load_due_auctions(now)

        settled = 0
        for auction in due_auctions:
            try:
                if await self.settle(auction, now):
                    settled += 1
            except STORE_ERRORS as e:
                logger.error(f"Failed to settle auction {auction.id}: {e}", exc_info=True)

        if settled > 0:
            logger.info(f"Settled {settled} closed auctions")

        return settled

    @staticmethod
    @idempotent_store_call("마감 경매 조회")
    async def _load_due_auctions(now: datetime):
        return await find_due_auctions(now)

    async def settle(self, auction: Auction, now: Optional[datetime] = None) -> bool:
        """
        경매 하나 정산

        Returns:
            이번 호출에서 정산했으면 True (이미 정산됐거나 아직 진행 중이면 False)
        """
        now = now or datetime.now(timezone.utc)
        fee = 0

        # Transaction: 정산 표시 선점 + 낙찰자 통계 반영
        async with in_transaction() as conn:
            claimed = await Auction.filter(
                id=auction.id,
                bid_round=auction.bid_round,
                current_bid=auction.current_bid,
                commission_calculated=False,
                end_time__lte=now
            ).using_db(conn).update(commission_calculated=True)

            if claimed == 0:
                logger.debug(f"Auction {auction.id} already settled or not due")
                return False

            if auction.highest_bidder_id is not None:
                fee = commission(auction.current_bid, self.policy)
                updated = await User.filter(id=auction.highest_bidder_id).using_db(conn).update(
                    money_spent=F("money_spent") + auction.current_bid,
                    auctions_won=F("auctions_won") + 1,
                    unpaid_commission=F("unpaid_commission") + fee
                )
                if updated == 0:
                    logger.warning(
                        f"Winner {auction.highest_bidder_id} of auction {auction.id} "
                        f"no longer exists; settled without user update"
                    )

        auction.commission_calculated = True

        if auction.highest_bidder_id is None:
            logger.info(f"Closed auction {auction.id} without bids")
        else:
            logger.info(
                f"Settled auction {auction.id}: winner={auction.highest_bidder_id}, "
                f"price={auction.current_bid}, commission={fee}"
            )
        return True


async def close_due_auctions(now: Optional[datetime] = None) -> int:
    return await AuctionCloser().close_due_auctions(now)
