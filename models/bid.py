"""
입찰 기록 모델

경매 회차별 입찰 정보를 관리합니다.
"""
from tortoise import fields, models


class Bid(models.Model):
    """
    입찰 기록

    - 경매 삭제 시 함께 삭제 (CASCADE)
    - bidder_id는 User에 대한 약한 참조
    - 생성 후 변경하지 않으며, 재등록 시 이전 회차 입찰은 일괄 삭제
    """

    id = fields.BigIntField(pk=True)

    auction = fields.ForeignKeyField(
        "models.Auction",
        related_name="bids",
        on_delete=fields.CASCADE
    )

    bidder_id = fields.IntField()
    amount = fields.BigIntField()
    bid_round = fields.IntField()
    created_at = fields.DatetimeField(auto_now_add=True)

    class Meta:
        table = "bid"
        indexes = (
            ("auction", "bid_round", "amount"),  # 회차별 최고 입찰 조회
        )

    def __str__(self) -> str:
        return f"Bid {self.id}: {self.amount} on Auction {self.auction_id}"
