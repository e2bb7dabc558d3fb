"""
Canonical pair keys.

An unordered asset pair {X, Y} always resolves to the same ordered key
(low, high), so (X, Y) and (Y, X) address the same Pool record.
"""

from __future__ import annotations

from typing import Tuple

from ..errors import InvalidPair
from .balances import NULL_ASSET, AssetId, is_null

PairKey = Tuple[AssetId, AssetId]


def canonicalize(asset_a: AssetId, asset_b: AssetId, *, null_asset: AssetId = NULL_ASSET) -> PairKey:
    """
    Order an asset pair by identifier (string comparison).

    Raises:
        InvalidPair: If the assets are equal, not strings, or either is the null identifier.
    """
    for name, asset in (("asset_a", asset_a), ("asset_b", asset_b)):
        if not isinstance(asset, str):
            raise InvalidPair(f"{name} must be a string, got {type(asset).__name__}")
        if is_null(asset, null_asset):
            raise InvalidPair(f"{name} is the null asset")
    if asset_a == asset_b:
        raise InvalidPair(f"identical assets: {asset_a}")
    if asset_a < asset_b:
        return asset_a, asset_b
    return asset_b, asset_a


def is_low(pair_key: PairKey, asset: AssetId) -> bool:
    """True if `asset` is the low side of `pair_key`."""
    if asset == pair_key[0]:
        return True
    if asset == pair_key[1]:
        return False
    raise InvalidPair(f"asset {asset} not in pair {pair_key}")
