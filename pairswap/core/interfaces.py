"""
Collaborator capabilities consumed by pool operations.

The engine depends only on these protocols; concrete token backends (or the
in-memory ones in `pairswap.integration.memory`) are injected.
"""

from __future__ import annotations

from typing import Protocol

from ..state.balances import Address, Amount, AssetId
from ..state.lp import TokenId


class AssetTransfer(Protocol):
    """Fungible asset movement. A False return aborts the calling operation."""

    def pull(self, asset: AssetId, owner: Address, to: Address, amount: Amount) -> bool:
        """Move `amount` of `asset` from `owner` into `to` (pool custody)."""
        ...

    def push(self, asset: AssetId, to: Address, amount: Amount) -> bool:
        """Move `amount` of `asset` out of pool custody to `to`."""
        ...


class ShareToken(Protocol):
    """Claim-token backend. Every method raises instead of short-minting or short-burning."""

    def create(self, name: str, symbol: str, controller: Address) -> TokenId:
        ...

    def mint(self, token_id: TokenId, to: Address, amount: Amount) -> None:
        ...

    def burn(self, token_id: TokenId, owner: Address, amount: Amount) -> None:
        ...
