"""
경매 모델

판매자가 등록한 경매와 입찰 상태, 정산 여부를 관리합니다.
"""
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from tortoise import fields, models


class AuctionCondition(str, Enum):
    """물품 상태"""
    NEW = "new"
    USED = "used"


class AuctionState(str, Enum):
    """시간으로 결정되는 경매 상태"""
    SCHEDULED = "scheduled"  # 시작 전
    ACTIVE = "active"        # 입찰 가능
    CLOSED = "closed"        # 종료


class RepublishStep(str, Enum):
    """재등록 후속 단계 (중단 시 재개 지점)"""
    PURGE_BIDS = "purge_bids"              # 이전 회차 입찰 삭제
    CLEAR_COMMISSION = "clear_commission"  # 요청자 미납 수수료 초기화


class Auction(models.Model):
    """
    경매

    - highest_bidder_id, created_by_id는 User에 대한 약한 참조 (FK 아님)
    - bid_round는 현재 회차. 재등록 시 1 증가하며, 같은 회차의 Bid만 이 경매의 입찰로 본다
    - commission_calculated는 현재 회차의 정산 완료 여부
    - republish_step이 null이 아니면 재등록 후속 단계가 남아있음
    """

    id = fields.BigIntField(pk=True)

    # 물품 정보
    title = fields.CharField(max_length=255)
    description = fields.TextField()
    category = fields.CharField(max_length=100)
    condition = fields.CharEnumField(AuctionCondition)
    image_public_id = fields.CharField(max_length=255)
    image_url = fields.CharField(max_length=1024)

    # 일정
    start_time = fields.DatetimeField()
    end_time = fields.DatetimeField()

    # 입찰 상태
    starting_bid = fields.BigIntField()
    current_bid = fields.BigIntField(default=0)
    highest_bidder_id = fields.IntField(null=True)
    bid_round = fields.IntField(default=1)

    # 정산
    commission_calculated = fields.BooleanField(default=False)

    # 판매자
    created_by_id = fields.IntField()
    created_at = fields.DatetimeField(auto_now_add=True)

    # 재등록 진행 표시
    republish_step = fields.CharEnumField(RepublishStep, null=True)
    republish_requested_by_id = fields.IntField(null=True)

    class Meta:
        table = "auction"
        indexes = (
            ("end_time", "commission_calculated"),  # 마감 처리 쿼리
            ("created_by_id", "end_time"),          # 판매자 진행 중 경매 조회
        )

    def state_at(self, now: Optional[datetime] = None) -> AuctionState:
        """주어진 시각 기준 경매 상태"""
        now = now or datetime.now(timezone.utc)
        if now < self.start_time:
            return AuctionState.SCHEDULED
        if now < self.end_time:
            return AuctionState.ACTIVE
        return AuctionState.CLOSED

    @property
    def state(self) -> AuctionState:
        return self.state_at()

    @property
    def minimum_bid(self) -> int:
        """다음 입찰이 넘어야 하는 금액"""
        return max(self.current_bid, self.starting_bid)

    def __str__(self) -> str:
        return f"Auction {self.id}: {self.title} (round {self.bid_round})"
