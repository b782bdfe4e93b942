"""
In-memory simulation of the external collaborators.

SimChain (clock, token balances, transaction rollback), SimVault (ERC-4626),
SimPoolFactory / SimLiquidityRouter (fixed-price pools) and SimMulticall
(atomic batches). SimWorld wires them into Collaborators for paper mode and tests.
"""

from dataclasses import dataclass, field
from fractions import Fraction
from typing import Optional, Sequence

from user_vault.core.config import VaultConfig
from user_vault.ledger.event_log import EventLog
from user_vault.ledger.position_ledger import Collaborators, PositionLedger
from user_vault.sim.chain import SimChain, SimRevert
from user_vault.sim.liquidity import SimLiquidityRouter, SimPool, SimPoolFactory, SwapRecord
from user_vault.sim.multicall import SimMulticall
from user_vault.sim.vault import SimVault


@dataclass
class SimWorld:
    """Набор симулированных коллабораторов одной сети."""

    chain: SimChain = field(default_factory=SimChain)
    factory: Optional[SimPoolFactory] = None
    router: Optional[SimLiquidityRouter] = None
    multicall: Optional[SimMulticall] = None

    def __post_init__(self):
        if self.factory is None:
            self.factory = SimPoolFactory(self.chain)
        if self.router is None:
            self.router = SimLiquidityRouter(self.chain, self.factory)
        if self.multicall is None:
            self.multicall = SimMulticall(self.chain)

    def collaborators(self) -> Collaborators:
        return Collaborators(
            chain=self.chain,
            tokens=self.chain,
            vaults=self.chain,
            factory=self.factory,
            router=self.router,
            batch_executor=self.multicall,
        )

    def add_vault(self, address: str, asset: str, exit_fee_bps: int = 0) -> SimVault:
        return SimVault(self.chain, address, asset, exit_fee_bps=exit_fee_bps)

    def add_pool(
        self,
        token0: str,
        token1: str,
        stable: bool,
        price: Fraction = Fraction(1),
        liquidity: int = 10**15,
        max_amount_in: Optional[int] = None,
    ) -> SimPool:
        return self.factory.add_pool(token0, token1, stable, price, liquidity, max_amount_in)

    def ledger(
        self,
        base_asset: str,
        venues: Sequence[str],
        account: str = "vault",
        owner: str = "owner",
        admin: str = "admin",
        fee_recipient: str = "treasury",
        config: Optional[VaultConfig] = None,
        event_sink=None,
    ) -> PositionLedger:
        return PositionLedger(
            account=account,
            owner=owner,
            admin=admin,
            base_asset=base_asset,
            venues=venues,
            fee_recipient=fee_recipient,
            collaborators=self.collaborators(),
            config=config,
            event_sink=event_sink if event_sink is not None else EventLog(),
        )


__all__ = [
    "SimChain",
    "SimRevert",
    "SimVault",
    "SimPool",
    "SimPoolFactory",
    "SimLiquidityRouter",
    "SwapRecord",
    "SimMulticall",
    "SimWorld",
]
