"""
사용자 모델

정산에 필요한 누적 지출, 낙찰 횟수, 미납 수수료를 관리합니다.
"""
from enum import Enum

from tortoise import fields, models


class UserRole(str, Enum):
    """사용자 역할"""
    AUCTIONEER = "auctioneer"  # 판매자
    BIDDER = "bidder"          # 입찰자


class User(models.Model):
    id = fields.IntField(pk=True)
    discord_id = fields.BigIntField(unique=True)
    username = fields.CharField(max_length=255)
    role = fields.CharEnumField(UserRole, default=UserRole.BIDDER)
    created_at = fields.DatetimeField(auto_now_add=True)

    # 정산 정보
    money_spent = fields.BigIntField(default=0)
    auctions_won = fields.IntField(default=0)
    unpaid_commission = fields.BigIntField(default=0)

    def get_name(self):
        return self.username

    class Meta:
        table = "users"

    def __str__(self) -> str:
        return f"User {self.id}: {self.username} ({self.role})"
