"""
낙찰 수수료 계산

낙찰가에 수수료율을 적용해 플랫폼 수수료를 계산합니다.
마감 정산에서 사용합니다.
"""
from dataclasses import dataclass
from decimal import ROUND_FLOOR, Decimal
from typing import Optional

from config.auction import AUCTION


@dataclass(frozen=True)
class CommissionPolicy:
    """수수료 정책 (낙찰가에 곱하는 비율)"""

    rate: float = AUCTION.COMMISSION_RATE

    def __post_init__(self):
        if not (0.0 <= self.rate <= 1.0):
            raise ValueError(f"수수료율은 0~1 사이여야 합니다: {self.rate}")

    def commission(self, winning_amount: int) -> int:
        """
        수수료 계산 (소수점 이하 버림)

        결과는 항상 0 이상, 낙찰가 이하입니다.
        """
        if winning_amount < 0:
            raise ValueError(f"낙찰가는 음수일 수 없습니다: {winning_amount}")
        # 0.29 * 100 == 28.999... 이므로 입력한 비율 그대로 10진수로 계산
        fee = Decimal(winning_amount) * Decimal(str(self.rate))
        return int(fee.to_integral_value(rounding=ROUND_FLOOR))


DEFAULT_POLICY = CommissionPolicy()


def commission(winning_amount: int, policy: Optional[CommissionPolicy] = None) -> int:
    """기본 정책(또는 주어진 정책)으로 수수료 계산"""
    return (policy or DEFAULT_POLICY).commission(winning_amount)
