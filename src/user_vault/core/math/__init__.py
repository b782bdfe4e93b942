"""
Mathematical primitives for integer amount accounting.

Floor-rounded basis point arithmetic used by fees, routing and the ledger.
"""

from user_vault.core.math.fixed_point import (
    BPS_DENOMINATOR,
    apply_bps,
    min_out_after_slippage,
    mul_div,
    scale_up_bps,
    sub_floor_zero,
    validate_amount,
    validate_bps,
)

__all__ = [
    "BPS_DENOMINATOR",
    "apply_bps",
    "min_out_after_slippage",
    "mul_div",
    "scale_up_bps",
    "sub_floor_zero",
    "validate_amount",
    "validate_bps",
]
