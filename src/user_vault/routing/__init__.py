"""Routing — asset conversion through the better of two liquidity pools."""

from .swap_router import PoolQuote, QuoteStatus, RouteDecision, SwapResult, SwapRouter

__all__ = [
    "SwapRouter",
    "SwapResult",
    "RouteDecision",
    "PoolQuote",
    "QuoteStatus",
]
