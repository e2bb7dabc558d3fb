"""Invariant checkers for Pool records.

Each function returns True when the invariant holds, and `check_all()` returns
the list of violated invariant IDs (empty = all pass).
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Callable

if TYPE_CHECKING:
    from .pools import Pool


def inv_canonical_orientation(p: Pool) -> bool:
    return p.asset_low < p.asset_high


def inv_non_negative(p: Pool) -> bool:
    return p.reserve_low >= 0 and p.reserve_high >= 0 and p.total_shares >= 0


def inv_shares_iff_reserves(p: Pool) -> bool:
    # total_shares == 0 <=> both reserves are zero
    if p.total_shares == 0:
        return p.reserve_low == 0 and p.reserve_high == 0
    return p.reserve_low > 0 and p.reserve_high > 0


_ALL_INVARIANTS: tuple[tuple[str, Callable[[Pool], bool]], ...] = (
    ("canonical_orientation", inv_canonical_orientation),
    ("non_negative", inv_non_negative),
    ("shares_iff_reserves", inv_shares_iff_reserves),
)


def check_all(p: Pool) -> list[str]:
    """Return the IDs of all violated invariants."""
    return [name for name, fn in _ALL_INVARIANTS if not fn(p)]
