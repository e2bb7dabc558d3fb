#!/usr/bin/env python3

from __future__ import annotations

import argparse
import logging
import sys
import time
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from pairswap import AmmConfig, AmmError, PoolOperations, load_config
from pairswap.integration import InMemoryAssetBank, InMemoryShareTokens
from pairswap.state.canonical import canonical_json_bytes

UNIT = 10**18


def _parse_args(argv: list[str] | None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Offline pairswap demo: deposit, swap, withdraw.")
    p.add_argument("--config", type=Path, default=None, help="YAML config file (optional)")
    p.add_argument("--amount-a", type=int, default=1000, help="initial deposit of asset A (whole units)")
    p.add_argument("--amount-b", type=int, default=2000, help="initial deposit of asset B (whole units)")
    p.add_argument("--swap-in", type=int, default=100, help="swap input of asset A (whole units)")
    p.add_argument("-v", "--verbose", action="store_true", help="log at DEBUG level")
    return p.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    config = load_config(args.config) if args.config is not None else AmmConfig()
    bank = InMemoryAssetBank(custody=config.controller)
    engine = PoolOperations(bank, InMemoryShareTokens(), config)

    user = "0x" + "aa" * 20
    asset_a = "0x" + "11" * 32
    asset_b = "0x" + "22" * 32
    deadline = int(time.time()) + 3600

    bank.mint(user, asset_a, (args.amount_a + args.swap_in) * UNIT)
    bank.mint(user, asset_b, args.amount_b * UNIT)

    try:
        dep = engine.deposit(
            asset_a, asset_b, args.amount_a * UNIT, args.amount_b * UNIT, 0, 0, user, deadline, sender=user
        )
        print(f"[offline-demo] deposit: used=({dep.optimal_a}, {dep.optimal_b}) shares={dep.shares_to_mint}")
        print(f"[offline-demo] spot price A->B: {engine.get_spot_price(asset_a, asset_b)}")

        swap = engine.swap(args.swap_in * UNIT, 1, [asset_a, asset_b], user, deadline, sender=user)
        print(f"[offline-demo] swap: in={swap.amount_in} out={swap.amount_out}")
        print(f"[offline-demo] reserves after swap: {engine.get_reserves(asset_a, asset_b)}")

        out = engine.withdraw(asset_a, asset_b, dep.shares_to_mint, 0, 0, user, deadline, sender=user)
        print(f"[offline-demo] withdraw: amounts=({out.amount_a}, {out.amount_b})")
    except AmmError as exc:
        print(f"[offline-demo] FAIL ({exc.code}): {exc}")
        return 1

    print(f"[offline-demo] snapshot: {canonical_json_bytes(engine.snapshot()).decode('utf-8')}")
    print(f"[offline-demo] state_root={engine.state_root()}")
    print("[offline-demo] OK")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
