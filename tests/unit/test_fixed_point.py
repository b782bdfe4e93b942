"""Unit тесты для целочисленной арифметики сумм.

Coverage:
- floor-округление mul_div / apply_bps
- bias stable-котировки и slippage bound
- валидация сумм и ставок (int only, без bool и float)
"""

import pytest

from user_vault.core.math import (
    BPS_DENOMINATOR,
    apply_bps,
    min_out_after_slippage,
    mul_div,
    scale_up_bps,
    sub_floor_zero,
    validate_amount,
    validate_bps,
)


class TestMulDiv:
    def test_floor_rounding(self):
        assert mul_div(7, 3, 2) == 10
        assert mul_div(1, 1, 3) == 0

    def test_exact(self):
        assert mul_div(50, 1000, BPS_DENOMINATOR) == 5

    def test_large_values_no_precision_loss(self):
        a = 10**30 + 7
        assert mul_div(a, 10_010, 10_000) == (a * 10_010) // 10_000

    @pytest.mark.parametrize("denominator", [0, -1, True])
    def test_invalid_denominator(self, denominator):
        with pytest.raises(ValueError):
            mul_div(1, 1, denominator)


class TestBps:
    def test_apply_bps(self):
        assert apply_bps(100, 500) == 5
        assert apply_bps(9_999, 1) == 0

    def test_apply_bps_rejects_above_denominator(self):
        with pytest.raises(ValueError):
            apply_bps(100, BPS_DENOMINATOR + 1)

    def test_scale_up_bps_stable_bias(self):
        # 0.1% bias: 100.0 → 100.1 (6 знаков)
        assert scale_up_bps(100_000_000, 10) == 100_100_000
        assert scale_up_bps(99_800_000, 10) == 99_899_800

    def test_min_out_after_slippage(self):
        assert min_out_after_slippage(1_000_000, 500) == 950_000
        assert min_out_after_slippage(19, 500) == 18

    def test_min_out_zero_slippage(self):
        assert min_out_after_slippage(1_234, 0) == 1_234

    def test_validate_bps_cap(self):
        assert validate_bps(1000, cap=1000) == 1000
        with pytest.raises(ValueError):
            validate_bps(1001, cap=1000)


class TestValidation:
    def test_negative_rejected(self):
        with pytest.raises(ValueError):
            validate_amount(-1)

    @pytest.mark.parametrize("value", [1.0, "1", True, None])
    def test_non_int_rejected(self, value):
        with pytest.raises(TypeError):
            validate_amount(value)

    def test_sub_floor_zero(self):
        assert sub_floor_zero(1000, 1045) == 0
        assert sub_floor_zero(1000, 400) == 600
