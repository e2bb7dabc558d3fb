"""
Claim-token balance tracking for pairswap pools.

Share tokens are scoped per token id and are tracked separately from asset balances.
"""

from __future__ import annotations

from typing import Dict, Tuple

from .balances import Address, Amount

# Type alias
TokenId = str


class ShareTable:
    """
    Deterministic share balance table mapping (holder, token_id) -> amount.

    Notes:
    - Share balances are always non-negative.
    - Zero balances are omitted to keep the table sparse.
    - Per-token total supply is tracked alongside the balances.
    """

    def __init__(self) -> None:
        self._balances: Dict[Tuple[Address, TokenId], Amount] = {}
        self._supply: Dict[TokenId, Amount] = {}

    def get(self, holder: Address, token_id: TokenId) -> Amount:
        """Get share balance for (holder, token_id). Returns 0 if not found."""
        return self._balances.get((holder, token_id), 0)

    def total_supply(self, token_id: TokenId) -> Amount:
        return self._supply.get(token_id, 0)

    def add(self, holder: Address, token_id: TokenId, delta: int) -> None:
        """Add delta to a share balance (delta may be negative)."""
        current = self.get(holder, token_id)
        new_balance = current + delta
        if new_balance < 0:
            raise ValueError(
                f"Insufficient share balance: {current} + {delta} = {new_balance} < 0"
            )
        if new_balance == 0:
            self._balances.pop((holder, token_id), None)
        else:
            self._balances[(holder, token_id)] = new_balance
        self._supply[token_id] = self.total_supply(token_id) + delta

    def subtract(self, holder: Address, token_id: TokenId, delta: Amount) -> None:
        """Subtract a non-negative amount from a share balance."""
        if delta < 0:
            raise ValueError(f"Delta must be non-negative: {delta}")
        self.add(holder, token_id, -delta)

    def __repr__(self) -> str:
        return f"ShareTable({len(self._balances)} entries)"
