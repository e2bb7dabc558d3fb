"""Data types for pool operations.

All types are frozen dataclasses (immutable).

Conventions:
- Deposit/withdraw events carry the canonical pair (low, high) and amounts in
  that same orientation.
- Swap events carry the pair in path order, so `amounts` reads
  (amount_in of pair_assets[0], amount_out of pair_assets[1]).
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, unique
from typing import Tuple, Union

from ..state.balances import Address, Amount, AssetId


@unique
class EventKind(Enum):
    LIQUIDITY_ADDED = "LiquidityAdded"
    LIQUIDITY_REMOVED = "LiquidityRemoved"
    SWAPPED_TOKENS = "SwappedTokens"


@dataclass(frozen=True)
class LiquidityAdded:
    pair_assets: Tuple[AssetId, AssetId]
    recipient: Address
    amount_a: Amount
    amount_b: Amount
    shares_minted: Amount

    kind = EventKind.LIQUIDITY_ADDED


@dataclass(frozen=True)
class LiquidityRemoved:
    pair_assets: Tuple[AssetId, AssetId]
    recipient: Address
    amount_a: Amount
    amount_b: Amount
    shares_burned: Amount

    kind = EventKind.LIQUIDITY_REMOVED


@dataclass(frozen=True)
class SwappedTokens:
    pair_assets: Tuple[AssetId, AssetId]
    recipient: Address
    amounts: Tuple[Amount, Amount]

    kind = EventKind.SWAPPED_TOKENS


Event = Union[LiquidityAdded, LiquidityRemoved, SwappedTokens]


@dataclass(frozen=True)
class DepositQuote:
    """Amounts in the caller's (asset_a, asset_b) order."""

    optimal_a: Amount
    optimal_b: Amount
    shares_to_mint: Amount


@dataclass(frozen=True)
class SwapQuote:
    amount_in: Amount
    amount_out: Amount


@dataclass(frozen=True)
class WithdrawResult:
    """Amounts in the caller's (asset_a, asset_b) order."""

    amount_a: Amount
    amount_b: Amount
