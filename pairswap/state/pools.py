"""
Pool state and the reserve ledger.

The ledger is the only writer of Pool records. Every mutation goes through one
of the `apply_*` methods, which replace the (immutable) Pool record for a pair
key with its successor after checking the Pool invariants.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Dict, Iterable, List, Optional, Tuple

from ..errors import InsufficientReserve, InvalidPair, InvariantViolation
from .balances import Amount, AssetId
from .invariants import check_all
from .pair_key import PairKey, is_low


@dataclass(frozen=True)
class Pool:
    """
    Reserves and share supply of one unordered asset pair.

    Attributes:
        asset_low: Lower asset identifier (canonical orientation)
        asset_high: Higher asset identifier
        reserve_low: Amount of asset_low held by the pool
        reserve_high: Amount of asset_high held by the pool
        total_shares: Outstanding liquidity shares
    """
    asset_low: AssetId
    asset_high: AssetId
    reserve_low: Amount = 0
    reserve_high: Amount = 0
    total_shares: Amount = 0

    @property
    def pair_key(self) -> PairKey:
        return self.asset_low, self.asset_high

    @property
    def is_empty(self) -> bool:
        return self.reserve_low == 0 and self.reserve_high == 0

    def get_reserve(self, asset: AssetId) -> Amount:
        """
        Get reserve for a specific asset.

        Raises:
            InvalidPair: If asset is not in this pool
        """
        return self.reserve_low if is_low(self.pair_key, asset) else self.reserve_high

    def reserves_for(self, asset_a: AssetId, asset_b: AssetId) -> Tuple[Amount, Amount]:
        """Reserves re-mapped to the caller's (asset_a, asset_b) order."""
        if is_low(self.pair_key, asset_a) == is_low(self.pair_key, asset_b):
            raise InvalidPair(f"({asset_a}, {asset_b}) does not match pair {self.pair_key}")
        if is_low(self.pair_key, asset_a):
            return self.reserve_low, self.reserve_high
        return self.reserve_high, self.reserve_low

    def get_constant_product(self) -> int:
        """k = reserve_low * reserve_high."""
        return self.reserve_low * self.reserve_high

    def __repr__(self) -> str:
        return (
            f"Pool(assets=({self.asset_low}, {self.asset_high}), "
            f"reserves=({self.reserve_low}, {self.reserve_high}), "
            f"total_shares={self.total_shares})"
        )


def _require_non_negative(name: str, value: int) -> None:
    if not isinstance(value, int) or isinstance(value, bool) or value < 0:
        raise ValueError(f"{name} must be a non-negative int: {value!r}")


def _subtract(name: str, current: Amount, delta: Amount) -> Amount:
    if delta > current:
        raise InsufficientReserve(f"{name}: cannot subtract {delta} from {current}")
    return current - delta


class ReserveLedger:
    """
    Authoritative mapping pair_key -> Pool.

    Mutators assume the caller already validated sufficiency; a subtraction
    below zero raises `InsufficientReserve` and leaves the record untouched.
    """

    def __init__(self, pools: Optional[Iterable[Pool]] = None, *, check_invariants: bool = True) -> None:
        self._pools: Dict[PairKey, Pool] = {}
        self._check_invariants = check_invariants
        for pool in pools or ():
            self._store(pool)

    def get(self, pair_key: PairKey) -> Pool:
        """Return the Pool for `pair_key`, or the zero Pool if none exists."""
        pool = self._pools.get(pair_key)
        if pool is None:
            return Pool(asset_low=pair_key[0], asset_high=pair_key[1])
        return pool

    def exists(self, pair_key: PairKey) -> bool:
        return pair_key in self._pools

    def pairs(self) -> List[PairKey]:
        return sorted(self._pools)

    def apply_deposit(self, pair_key: PairKey, amount_low: Amount, amount_high: Amount, shares_issued: Amount) -> Pool:
        _require_non_negative("amount_low", amount_low)
        _require_non_negative("amount_high", amount_high)
        _require_non_negative("shares_issued", shares_issued)
        pool = self.get(pair_key)
        return self._store(
            replace(
                pool,
                reserve_low=pool.reserve_low + amount_low,
                reserve_high=pool.reserve_high + amount_high,
                total_shares=pool.total_shares + shares_issued,
            )
        )

    def apply_withdraw(self, pair_key: PairKey, amount_low: Amount, amount_high: Amount, shares_burned: Amount) -> Pool:
        _require_non_negative("amount_low", amount_low)
        _require_non_negative("amount_high", amount_high)
        _require_non_negative("shares_burned", shares_burned)
        pool = self.get(pair_key)
        return self._store(
            replace(
                pool,
                reserve_low=_subtract("reserve_low", pool.reserve_low, amount_low),
                reserve_high=_subtract("reserve_high", pool.reserve_high, amount_high),
                total_shares=_subtract("total_shares", pool.total_shares, shares_burned),
            )
        )

    def apply_swap(self, pair_key: PairKey, low_is_input: bool, amount_in: Amount, amount_out: Amount) -> Pool:
        """Input reserve increases by amount_in, output reserve decreases by amount_out."""
        _require_non_negative("amount_in", amount_in)
        _require_non_negative("amount_out", amount_out)
        pool = self.get(pair_key)
        if low_is_input:
            updated = replace(
                pool,
                reserve_low=pool.reserve_low + amount_in,
                reserve_high=_subtract("reserve_high", pool.reserve_high, amount_out),
            )
        else:
            updated = replace(
                pool,
                reserve_low=_subtract("reserve_low", pool.reserve_low, amount_out),
                reserve_high=pool.reserve_high + amount_in,
            )
        return self._store(updated)

    def restore(self, pair_key: PairKey, pool: Optional[Pool]) -> None:
        """Put back a previously observed record (None = no record). Used by rollback only."""
        if pool is None:
            self._pools.pop(pair_key, None)
        else:
            self._pools[pair_key] = pool

    def _store(self, pool: Pool) -> Pool:
        if self._check_invariants:
            violations = check_all(pool)
            if violations:
                raise InvariantViolation(violations)
        self._pools[pool.pair_key] = pool
        return pool

    def __len__(self) -> int:
        return len(self._pools)

    def __repr__(self) -> str:
        return f"ReserveLedger({len(self._pools)} pools)"
