"""SimVault — ERC-4626 vault поверх SimChain.

Shares хранятся как баланс токена с адресом vault; total assets — баланс
underlying asset на адресе vault. Yield и убытки моделируются mint/burn asset.
"""

from user_vault.core.math.fixed_point import BPS_DENOMINATOR, mul_div
from user_vault.sim.chain import SimChain, SimRevert


class SimVault:
    def __init__(self, chain: SimChain, address: str, asset: str, exit_fee_bps: int = 0):
        self.chain = chain
        self.address = address
        self._asset = asset
        self.exit_fee_bps = exit_fee_bps
        chain.register_vault(self)

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------

    def asset(self) -> str:
        return self._asset

    def balance_of(self, holder: str) -> int:
        return self.chain.balance_of(self.address, holder)

    def total_shares(self) -> int:
        return self.chain.total_supply(self.address)

    def total_assets(self) -> int:
        return self.chain.balance_of(self._asset, self.address)

    def convert_to_assets(self, shares: int) -> int:
        total_shares = self.total_shares()
        if total_shares == 0:
            return shares
        return mul_div(shares, self.total_assets(), total_shares)

    def convert_to_shares(self, assets: int) -> int:
        total_shares = self.total_shares()
        total_assets = self.total_assets()
        if total_shares == 0 or total_assets == 0:
            return assets
        return mul_div(assets, total_shares, total_assets)

    def preview_redeem(self, shares: int) -> int:
        assets = self.convert_to_assets(shares)
        return assets - mul_div(assets, self.exit_fee_bps, BPS_DENOMINATOR)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def deposit(self, assets: int, receiver: str, sender: str) -> int:
        if assets <= 0:
            raise SimRevert("ZERO_ASSETS")
        shares = self.convert_to_shares(assets)
        if shares == 0:
            raise SimRevert("ZERO_SHARES")
        self.chain.transfer(self._asset, sender, self.address, assets)
        self.chain.mint(self.address, receiver, shares)
        return shares

    def redeem(self, shares: int, receiver: str, owner: str) -> int:
        if shares <= 0:
            raise SimRevert("ZERO_SHARES")
        assets = self.preview_redeem(shares)
        self.chain.burn(self.address, owner, shares)
        self.chain.transfer(self._asset, self.address, receiver, assets)
        return assets

    def accrue_yield(self, assets: int) -> None:
        """Рост стоимости shares: asset зачисляется на адрес vault."""
        self.chain.mint(self._asset, self.address, assets)

    def realize_loss(self, assets: int) -> None:
        self.chain.burn(self._asset, self.address, assets)
