"""
Paper run — прогон жизненного цикла vault на in-memory chain.

Разворачивает vault как deployment script (owner, admin, base asset, два
venue в base asset и один кросс-asset venue за stable пулом), затем:
депозит → начисление yield → periodic rebalance в кросс-asset venue после
cooldown → полный вывод. Печатает итог в display единицах.

Usage:
  user-vault-paper [--config PATH] [--deposit 1000] [--yield 50] [--log-level INFO]
  --config   JSON конфигурация vault (контракт vault_config)
  --deposit  Первый депозит в display единицах base asset
  --yield    Yield, начисляемый первому venue, в display единицах
"""

import argparse
import logging
import sys
from typing import Any, Dict, List, Optional

from user_vault.core.config import VaultConfig, load_config
from user_vault.core.domain.units import format_amount, to_base_units
from user_vault.core.errors import VaultError
from user_vault.core.logging_utils import configure_logging
from user_vault.sim import SimWorld

BASE_ASSET = "USDC"
CROSS_ASSET = "DAI"
OWNER = "owner"
ADMIN = "admin"
TREASURY = "treasury"


def run_paper_session(
    deposit: int,
    accrued_yield: int,
    config: Optional[VaultConfig] = None,
) -> Dict[str, Any]:
    """
    Прогон сценария на свежем SimWorld.

    Args:
        deposit: Первый депозит (base units)
        accrued_yield: Yield первого venue перед rebalance (base units)
        config: Конфигурация vault (defaults, если None)

    Returns:
        Итог в base units: settlement, fee, net, owner_balance, treasury_balance, events
    """
    config = config or VaultConfig()
    world = SimWorld()
    world.add_vault("V1", BASE_ASSET)
    world.add_vault("V2", BASE_ASSET)
    world.add_vault("VD", CROSS_ASSET)
    world.add_pool(BASE_ASSET, CROSS_ASSET, stable=True)
    world.chain.mint(BASE_ASSET, OWNER, deposit)

    ledger = world.ledger(
        base_asset=BASE_ASSET,
        venues=["V1", "V2", "VD"],
        owner=OWNER,
        admin=ADMIN,
        fee_recipient=TREASURY,
        config=config,
    )

    ledger.initial_deposit(OWNER, "V1", deposit)
    if accrued_yield:
        world.chain.vault("V1").accrue_yield(accrued_yield)
    world.chain.advance(config.rebalance_cooldown_sec)
    ledger.periodic_rebalance(OWNER, "VD")
    split = ledger.withdraw(OWNER, "VD")

    events: List[str] = [event.kind for event in ledger.event_sink.events]
    return {
        "settlement": split.settlement,
        "fee": split.fee,
        "net": split.net,
        "owner_balance": world.chain.balance_of(BASE_ASSET, OWNER),
        "treasury_balance": world.chain.balance_of(BASE_ASSET, TREASURY),
        "events": events,
    }


def _parse_args(argv: Optional[List[str]]) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Paper run of the vault lifecycle on the in-memory chain")
    p.add_argument("--config", default=None, help="vault config JSON")
    p.add_argument("--deposit", default="1000", help="first deposit, display units")
    p.add_argument("--yield", dest="accrued_yield", default="50", help="yield on the first venue, display units")
    p.add_argument("--log-level", default="INFO", choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    return p.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = _parse_args(argv)
    configure_logging(getattr(logging, args.log_level))

    try:
        config = load_config(args.config) if args.config else None
        result = run_paper_session(
            to_base_units(args.deposit), to_base_units(args.accrued_yield), config
        )
    except VaultError as e:
        print(f"paper run failed: {e}", file=sys.stderr)
        return 1

    for key in ("settlement", "fee", "net", "owner_balance", "treasury_balance"):
        print(f"{key:<18} {format_amount(result[key])} {BASE_ASSET}")
    print(f"{'events':<18} {' '.join(result['events'])}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
