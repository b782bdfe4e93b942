"""SimPoolFactory / SimLiquidityRouter - пулы с фиксированной ценой поверх SimChain.

Пул котирует по фиксированной цене до предела глубины `max_amount_in`;
выше предела котировка падает (недостаточная глубина). `execution_haircut_bps`
ухудшает исполнение относительно котировки для проверки minOut.
"""

from dataclasses import dataclass
from fractions import Fraction
from typing import Dict, List, Optional, Sequence, Tuple

from user_vault.core.math.fixed_point import BPS_DENOMINATOR, mul_div
from user_vault.sim.chain import SimChain, SimRevert
from user_vault.venues.interfaces import Route


@dataclass
class SimPool:
    address: str
    token0: str
    token1: str
    stable: bool
    # Цена token0 в единицах token1
    price: Fraction
    max_amount_in: Optional[int] = None
    execution_haircut_bps: int = 0
    quote_fails: bool = False

    def quote(self, amount_in: int, token_in: str) -> int:
        if self.quote_fails:
            raise SimRevert(f"{self.address}: quote reverted")
        if self.max_amount_in is not None and amount_in > self.max_amount_in:
            raise SimRevert(f"{self.address}: insufficient depth for {amount_in}")
        if token_in == self.token0:
            out = amount_in * self.price
        elif token_in == self.token1:
            out = amount_in / self.price
        else:
            raise SimRevert(f"{self.address}: {token_in} not in pool")
        return int(out)  # floor для положительных

    def execute_out(self, amount_in: int, token_in: str) -> int:
        quoted = self.quote(amount_in, token_in)
        return quoted - mul_div(quoted, self.execution_haircut_bps, BPS_DENOMINATOR)

    def token_out(self, token_in: str) -> str:
        return self.token1 if token_in == self.token0 else self.token0


class SimPoolFactory:
    def __init__(self, chain: SimChain, address: str = "factory"):
        self.chain = chain
        self.address = address
        self._pools: Dict[Tuple[frozenset, bool], SimPool] = {}

    def add_pool(
        self,
        token0: str,
        token1: str,
        stable: bool,
        price: Fraction,
        liquidity: int = 0,
        max_amount_in: Optional[int] = None,
    ) -> SimPool:
        """Создание пула и засев `liquidity` обоих токенов на адрес пула."""
        address = f"pool:{token0}/{token1}:{'stable' if stable else 'volatile'}"
        pool = SimPool(
            address=address,
            token0=token0,
            token1=token1,
            stable=stable,
            price=Fraction(price),
            max_amount_in=max_amount_in,
        )
        self._pools[(frozenset((token0, token1)), stable)] = pool
        if liquidity:
            self.chain.mint(token0, address, liquidity)
            self.chain.mint(token1, address, liquidity)
        return pool

    def pool(self, token_a: str, token_b: str, stable: bool) -> Optional[SimPool]:
        return self._pools.get((frozenset((token_a, token_b)), stable))

    def get_pool(self, token_a: str, token_b: str, stable: bool) -> Optional[str]:
        pool = self.pool(token_a, token_b, stable)
        return pool.address if pool is not None else None


@dataclass
class SwapRecord:
    amount_in: int
    amount_out_min: int
    routes: Tuple[Route, ...]
    to: str
    deadline: int
    sender: str
    amount_out: int = 0
    succeeded: bool = False


class SimLiquidityRouter:
    def __init__(self, chain: SimChain, factory: SimPoolFactory):
        self.chain = chain
        self.factory = factory
        self.quote_calls: List[Tuple[int, Tuple[Route, ...]]] = []
        self.swaps: List[SwapRecord] = []

    def _pool(self, route: Route) -> SimPool:
        pool = self.factory.pool(route.from_token, route.to_token, route.stable)
        if pool is None:
            raise SimRevert(f"no pool for {route}")
        return pool

    def get_amounts_out(self, amount_in: int, routes: Sequence[Route]) -> List[int]:
        self.quote_calls.append((amount_in, tuple(routes)))
        amounts = [amount_in]
        for route in routes:
            amounts.append(self._pool(route).quote(amounts[-1], route.from_token))
        return amounts

    def swap_exact_tokens_for_tokens(
        self,
        amount_in: int,
        amount_out_min: int,
        routes: Sequence[Route],
        to: str,
        deadline: int,
        sender: str,
    ) -> List[int]:
        record = SwapRecord(amount_in, amount_out_min, tuple(routes), to, deadline, sender)
        self.swaps.append(record)
        if self.chain.now() > deadline:
            raise SimRevert("EXPIRED")

        with self.chain.transaction():
            amounts = [amount_in]
            holder = sender
            for i, route in enumerate(routes):
                pool = self._pool(route)
                out = pool.execute_out(amounts[-1], route.from_token)
                self.chain.transfer(route.from_token, holder, pool.address, amounts[-1])
                recipient = to if i == len(routes) - 1 else pool.address
                self.chain.transfer(pool.token_out(route.from_token), pool.address, recipient, out)
                holder = recipient
                amounts.append(out)
            if amounts[-1] < amount_out_min:
                raise SimRevert(f"INSUFFICIENT_OUTPUT_AMOUNT {amounts[-1]} < {amount_out_min}")

        record.amount_out = amounts[-1]
        record.succeeded = True
        return amounts
