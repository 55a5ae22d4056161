"""
낙찰 수수료 계산 테스트
"""
import pytest

from config.auction import AUCTION
from service.auction.commission import CommissionPolicy, commission


class TestCommissionPolicy:
    def test_default_rate(self):
        assert commission(200) == int(200 * AUCTION.COMMISSION_RATE)

    def test_rounds_down(self):
        policy = CommissionPolicy(rate=0.05)
        assert policy.commission(199) == 9
        assert policy.commission(19) == 0

    def test_zero_amount(self):
        assert commission(0) == 0

    @pytest.mark.parametrize("rate, amount, expected", [(0.29, 100, 29), (0.07, 100, 7), (0.57, 100, 57)])
    def test_exact_decimal_rate(self, rate, amount, expected):
        """부동소수점 오차로 1 적게 계산되지 않음"""
        assert CommissionPolicy(rate=rate).commission(amount) == expected

    @pytest.mark.parametrize("rate", [0.0, 0.1, 0.5, 1.0])
    @pytest.mark.parametrize("amount", [0, 1, 99, 150, 1_000_000])
    def test_fee_within_bounds(self, rate, amount):
        fee = CommissionPolicy(rate=rate).commission(amount)
        assert 0 <= fee <= amount

    def test_deterministic(self):
        policy = CommissionPolicy(rate=0.07)
        assert policy.commission(12345) == policy.commission(12345)

    def test_custom_policy_is_used(self):
        assert commission(1000, CommissionPolicy(rate=0.1)) == 100

    @pytest.mark.parametrize("rate", [-0.01, 1.01])
    def test_rejects_rate_out_of_range(self, rate):
        with pytest.raises(ValueError):
            CommissionPolicy(rate=rate)

    def test_rejects_negative_amount(self):
        with pytest.raises(ValueError):
            commission(-1)
