"""Unit тесты для FeeEngine (комиссия только с прибыли).

Coverage:
- убыток и break-even не облагаются
- порог прибыли
- fee <= profit, монотонность по profit
- сценарии вывода с ростом стоимости 1050 / 1005
"""

import pytest

from user_vault.fees import FeeSplit, fee_split

UNIT = 1_000_000  # 6 знаков


class TestNoFee:
    def test_loss_not_taxed(self):
        split = fee_split(900 * UNIT, 1000 * UNIT, 1000, 10 * UNIT)
        assert split.fee == 0
        assert split.net == 900 * UNIT
        assert split.profit == 0
        assert not split.charged

    def test_break_even_not_taxed(self):
        split = fee_split(1000 * UNIT, 1000 * UNIT, 1000, 0)
        assert split.fee == 0
        assert split.net == 1000 * UNIT

    def test_profit_at_threshold_not_taxed(self):
        split = fee_split(1010 * UNIT, 1000 * UNIT, 1000, 10 * UNIT)
        assert split.fee == 0
        assert split.profit == 10 * UNIT

    def test_profit_below_threshold_scenario(self):
        # Стоимость выросла только до 1005, порог 10
        split = fee_split(1005 * UNIT, 1000 * UNIT, 1000, 10 * UNIT)
        assert split.fee == 0
        assert split.net == 1005 * UNIT

    def test_zero_rate(self):
        assert fee_split(2000, 1000, 0, 0).fee == 0


class TestFeeCharged:
    def test_withdraw_with_profit_scenario(self):
        # Стоимость 1050, principal 1000, ставка 1000 bps, порог 10
        split = fee_split(1050 * UNIT, 1000 * UNIT, 1000, 10 * UNIT)
        assert split.profit == 50 * UNIT
        assert split.fee == 5 * UNIT
        assert split.net == 1045 * UNIT
        assert split.charged

    def test_manual_rebalance_fee_scenario(self):
        split = fee_split(1100 * UNIT, 1000 * UNIT, 500)
        assert split.fee == 5 * UNIT
        assert split.net == 1095 * UNIT

    def test_fee_floors(self):
        # 15 * 1000 / 10000 = 1.5 → 1
        split = fee_split(1015, 1000, 1000, 0)
        assert split.fee == 1
        assert split.net == 1014

    def test_zero_principal_whole_settlement_is_profit(self):
        split = fee_split(100 * UNIT, 0, 1000, 0)
        assert split.profit == 100 * UNIT
        assert split.fee == 10 * UNIT


class TestProperties:
    @pytest.mark.parametrize("rate", [0, 1, 100, 500, 1000, 10_000])
    @pytest.mark.parametrize("profit", [1, 7, 99, 10_001, 123_456_789])
    def test_fee_never_exceeds_profit(self, rate, profit):
        principal = 1_000 * UNIT
        split = fee_split(principal + profit, principal, rate, 0)
        assert split.fee <= profit
        assert split.net + split.fee == split.settlement
        if rate < 10_000:
            assert split.fee < profit

    def test_monotone_in_profit(self):
        principal = 1_000
        fees = [fee_split(principal + p, principal, 777, 3).fee for p in range(0, 500)]
        assert fees == sorted(fees)

    def test_net_plus_fee_is_settlement(self):
        split = fee_split(1_234_567, 1_000_000, 250, 0)
        assert isinstance(split, FeeSplit)
        assert split.net + split.fee == 1_234_567


class TestValidation:
    def test_negative_settlement(self):
        with pytest.raises(ValueError):
            fee_split(-1, 0, 100)

    def test_rate_above_denominator(self):
        with pytest.raises(ValueError):
            fee_split(10, 0, 10_001)

    def test_float_rejected(self):
        with pytest.raises(TypeError):
            fee_split(10.0, 0, 100)
