"""
In-memory token collaborators.

`InMemoryAssetBank` and `InMemoryShareTokens` satisfy the `AssetTransfer` and
`ShareToken` protocols on top of plain balance tables. They back the tests and
the offline demo, and refuse every overdraft.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Dict

from ..state.balances import Address, Amount, AssetId, BalanceTable
from ..state.lp import ShareTable, TokenId


class InMemoryAssetBank:
    """
    Fungible asset balances with a single custody account for pool holdings.

    `pull`/`push` return False (rather than raising) when the source balance is
    insufficient, matching the success|failure transfer contract.
    A lock serializes every balance change, since pools on different pairs
    share custody balances for a common asset.
    """

    def __init__(self, custody: Address = "pairswap") -> None:
        self.custody = custody
        self.balances = BalanceTable()
        self._lock = threading.Lock()

    def mint(self, owner: Address, asset: AssetId, amount: Amount) -> None:
        """Credit `owner` out of thin air (test faucet)."""
        if amount < 0:
            raise ValueError(f"mint amount must be non-negative: {amount}")
        with self._lock:
            self.balances.add(owner, asset, amount)

    def balance_of(self, owner: Address, asset: AssetId) -> Amount:
        return self.balances.get(owner, asset)

    def pull(self, asset: AssetId, owner: Address, to: Address, amount: Amount) -> bool:
        return self._move(asset, owner, to, amount)

    def push(self, asset: AssetId, to: Address, amount: Amount) -> bool:
        return self._move(asset, self.custody, to, amount)

    def _move(self, asset: AssetId, src: Address, dst: Address, amount: Amount) -> bool:
        with self._lock:
            if amount < 0 or self.balances.get(src, asset) < amount:
                return False
            self.balances.subtract(src, asset, amount)
            self.balances.add(dst, asset, amount)
            return True


@dataclass(frozen=True)
class ShareTokenInfo:
    token_id: TokenId
    name: str
    symbol: str
    controller: Address


class InMemoryShareTokens:
    """Claim tokens with sequential ids. Mint/burn raise ValueError on bad input or overdraft."""

    def __init__(self) -> None:
        self.tokens: Dict[TokenId, ShareTokenInfo] = {}
        self.balances = ShareTable()
        self._lock = threading.Lock()

    def create(self, name: str, symbol: str, controller: Address) -> TokenId:
        with self._lock:
            token_id = f"share-{len(self.tokens) + 1}"
            self.tokens[token_id] = ShareTokenInfo(token_id, name, symbol, controller)
            return token_id

    def mint(self, token_id: TokenId, to: Address, amount: Amount) -> None:
        self._require_token(token_id)
        if amount <= 0:
            raise ValueError(f"mint amount must be positive: {amount}")
        with self._lock:
            self.balances.add(to, token_id, amount)

    def burn(self, token_id: TokenId, owner: Address, amount: Amount) -> None:
        self._require_token(token_id)
        if amount <= 0:
            raise ValueError(f"burn amount must be positive: {amount}")
        with self._lock:
            self.balances.subtract(owner, token_id, amount)

    def balance_of(self, holder: Address, token_id: TokenId) -> Amount:
        return self.balances.get(holder, token_id)

    def total_supply(self, token_id: TokenId) -> Amount:
        return self.balances.total_supply(token_id)

    def _require_token(self, token_id: TokenId) -> None:
        if token_id not in self.tokens:
            raise ValueError(f"unknown share token: {token_id}")
