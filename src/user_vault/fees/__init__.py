"""Fees — profit-only fee computation."""

from .fee_engine import FeeSplit, fee_split

__all__ = [
    "FeeSplit",
    "fee_split",
]
