"""
Snapshots and deterministic state root hashing (v1).

This is intended for:
- debugging / audit (stable hashes for the same logical state),
- persisting and reloading a ledger plus its share bindings.

Snapshot dict format (sorted by pair key):

    {
      "version": 1,
      "pools": [{"asset_low", "asset_high", "reserve_low", "reserve_high", "total_shares"}, ...],
      "bindings": [{"asset_low", "asset_high", "share_token"}, ...],
    }

Every pool has a binding. A binding may exist without a pool: a first deposit
that fails after the share token was created leaves the binding behind.
"""

from __future__ import annotations

from typing import Any, Dict, Mapping, Tuple

from ..errors import InvalidPair
from .balances import NULL_ASSET, AssetId
from .canonical import tagged_digest
from .lp import TokenId
from .pair_key import PairKey, canonicalize
from .pools import Pool, ReserveLedger


SNAPSHOT_VERSION = 1
STATE_ROOT_VERSION = 1

_POOL_INT_FIELDS = ("reserve_low", "reserve_high", "total_shares")


def _require_str(obj: Mapping[str, Any], name: str) -> str:
    value = obj.get(name)
    if not isinstance(value, str) or not value:
        raise ValueError(f"{name} must be a non-empty string")
    return value


def _require_uint(obj: Mapping[str, Any], name: str) -> int:
    value = obj.get(name)
    if not isinstance(value, int) or isinstance(value, bool) or value < 0:
        raise ValueError(f"{name} must be a non-negative int, got {value!r}")
    return int(value)


def snapshot_to_dict(ledger: ReserveLedger, bindings: Mapping[PairKey, TokenId]) -> Dict[str, Any]:
    """Serialize a ledger and its share bindings to a plain dict."""
    pools = []
    for key in ledger.pairs():
        pool = ledger.get(key)
        pools.append(
            {
                "asset_low": pool.asset_low,
                "asset_high": pool.asset_high,
                "reserve_low": pool.reserve_low,
                "reserve_high": pool.reserve_high,
                "total_shares": pool.total_shares,
            }
        )
    return {
        "version": SNAPSHOT_VERSION,
        "pools": pools,
        "bindings": [
            {"asset_low": low, "asset_high": high, "share_token": bindings[(low, high)]}
            for low, high in sorted(bindings)
        ],
    }


def _require_pair(obj: Mapping[str, Any], where: str, null_asset: AssetId) -> PairKey:
    key = (_require_str(obj, "asset_low"), _require_str(obj, "asset_high"))
    try:
        canonical = canonicalize(*key, null_asset=null_asset)
    except InvalidPair as exc:
        raise ValueError(f"{where}: {exc}") from exc
    if canonical != key:
        raise ValueError(f"{where}: pair not in canonical order: {key}")
    return key


def snapshot_from_dict(
    obj: Mapping[str, Any], *, check_invariants: bool = True, null_asset: AssetId = NULL_ASSET
) -> Tuple[ReserveLedger, Dict[PairKey, TokenId]]:
    """
    Deserialize a snapshot. Returns (ledger, bindings).

    Raises:
        ValueError: On an unknown version, malformed entry, null or unordered
            pair, duplicate pair, or a pool without a share binding.
        InvariantViolation: If a Pool record breaks the Pool invariants.
    """
    if not isinstance(obj, Mapping):
        raise ValueError("snapshot must be an object")
    if obj.get("version") != SNAPSHOT_VERSION:
        raise ValueError(f"unsupported snapshot version: {obj.get('version')!r}")

    pools: Dict[PairKey, Pool] = {}
    for i, entry in enumerate(obj.get("pools", [])):
        if not isinstance(entry, Mapping):
            raise ValueError(f"pools[{i}] must be an object")
        key = _require_pair(entry, f"pools[{i}]", null_asset)
        if key in pools:
            raise ValueError(f"duplicate pool in snapshot: {key}")
        pools[key] = Pool(*key, **{name: _require_uint(entry, name) for name in _POOL_INT_FIELDS})

    bindings: Dict[PairKey, TokenId] = {}
    for i, entry in enumerate(obj.get("bindings", [])):
        if not isinstance(entry, Mapping):
            raise ValueError(f"bindings[{i}] must be an object")
        key = _require_pair(entry, f"bindings[{i}]", null_asset)
        if key in bindings:
            raise ValueError(f"duplicate binding in snapshot: {key}")
        bindings[key] = _require_str(entry, "share_token")

    unbound = sorted(set(pools) - set(bindings))
    if unbound:
        raise ValueError(f"pools without a share binding: {unbound}")

    return ReserveLedger(pools.values(), check_invariants=check_invariants), bindings


def compute_state_root(ledger: ReserveLedger, bindings: Mapping[PairKey, TokenId]) -> str:
    """
    Compute a deterministic state root hash for the ledger and its bindings.

    The root is the tagged digest of the canonical snapshot, so it does not
    depend on insertion order. Returns a 0x-prefixed sha256 digest.
    """
    if not isinstance(ledger, ReserveLedger):
        raise TypeError("ledger must be a ReserveLedger")
    return tagged_digest("state_root", snapshot_to_dict(ledger, bindings), version=STATE_ROOT_VERSION)
