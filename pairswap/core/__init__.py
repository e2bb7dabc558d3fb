"""
Core pool accounting: invariant calculator, share registry, pool operations
"""

from .config import AmmConfig, config_from_mapping, load_config
from .cpmm import (
    SCALE,
    amounts_for_withdraw,
    optimal_deposit,
    proportional,
    shares_for_deposit,
    spot_price,
    swap_input,
    swap_output,
)
from .interfaces import AssetTransfer, ShareToken
from .pool_ops import PoolOperations
from .shares import ShareRegistry
from .types import (
    DepositQuote,
    Event,
    EventKind,
    LiquidityAdded,
    LiquidityRemoved,
    SwappedTokens,
    SwapQuote,
    WithdrawResult,
)

__all__ = [
    "AmmConfig",
    "config_from_mapping",
    "load_config",
    "SCALE",
    "amounts_for_withdraw",
    "optimal_deposit",
    "proportional",
    "shares_for_deposit",
    "spot_price",
    "swap_input",
    "swap_output",
    "AssetTransfer",
    "ShareToken",
    "PoolOperations",
    "ShareRegistry",
    "DepositQuote",
    "Event",
    "EventKind",
    "LiquidityAdded",
    "LiquidityRemoved",
    "SwappedTokens",
    "SwapQuote",
    "WithdrawResult",
]
