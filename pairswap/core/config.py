"""
Runtime configuration for pool operations.

`AmmConfig` is a frozen dataclass; `load_config()` reads the same fields from
a YAML mapping. Unknown keys are rejected so that typos fail loudly.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Mapping, Union

import yaml

from ..state.balances import NULL_ADDRESS, NULL_ASSET
from .cpmm import SCALE


@dataclass(frozen=True)
class AmmConfig:
    # Fixed-point unit for spot prices and first-deposit shares.
    scale: int = SCALE

    # Identifiers that are never a valid asset / recipient.
    null_asset: str = NULL_ASSET
    null_address: str = NULL_ADDRESS

    # Identity of the pool contract: custody address for pulled assets and
    # sole controller (minter/burner) of every share token.
    controller: str = "pairswap"

    # Share token metadata. Placeholders: {low}, {high}, {low_symbol}, {high_symbol}.
    share_name_template: str = "{low}/{high} Liquidity"
    share_symbol_template: str = "{low_symbol}-{high_symbol}-LP"
    symbol_length: int = 6

    # Re-check Pool invariants on every ledger write.
    check_invariants: bool = True

    # Number of most recent events kept in PoolOperations.events (0 keeps none).
    # Listeners see every event regardless.
    event_log_size: int = 10_000

    def __post_init__(self) -> None:
        for name in ("scale", "symbol_length"):
            value = getattr(self, name)
            if not isinstance(value, int) or isinstance(value, bool) or value <= 0:
                raise ValueError(f"{name} must be a positive int: {value!r}")
        for name in ("null_asset", "null_address", "controller", "share_name_template", "share_symbol_template"):
            if not isinstance(getattr(self, name), str):
                raise ValueError(f"{name} must be a string")
        if not self.controller:
            raise ValueError("controller must be non-empty")
        if not isinstance(self.check_invariants, bool):
            raise ValueError("check_invariants must be a bool")
        if not isinstance(self.event_log_size, int) or isinstance(self.event_log_size, bool) or self.event_log_size < 0:
            raise ValueError(f"event_log_size must be a non-negative int: {self.event_log_size!r}")


_FIELD_NAMES = frozenset(f.name for f in fields(AmmConfig))


def config_from_mapping(obj: Mapping[str, Any]) -> AmmConfig:
    """Build an AmmConfig from a mapping; missing keys take the defaults."""
    if not isinstance(obj, Mapping):
        raise ValueError("config must be a mapping")
    unknown = sorted(set(obj) - _FIELD_NAMES)
    if unknown:
        raise ValueError(f"unknown config keys: {', '.join(map(str, unknown))}")
    return AmmConfig(**dict(obj))


def load_config(path: Union[str, Path]) -> AmmConfig:
    """Load an AmmConfig from a YAML file. An empty file yields the defaults."""
    obj = yaml.safe_load(Path(path).read_text(encoding="utf-8"))
    if obj is None:
        return AmmConfig()
    return config_from_mapping(obj)
