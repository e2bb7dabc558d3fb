"""
Multi-asset balance tracking with deterministic ordering.

Implements BalanceTable[Address, AssetId] -> Amount
"""

from typing import Dict, Optional, Tuple


# Type aliases
Address = str  # account / contract identifier
AssetId = str  # asset identifier, totally ordered by string comparison
Amount = int  # Non-negative integer (arbitrary precision)

# Null identifiers: never a valid asset or recipient.
NULL_ASSET = "0x" + "00" * 32
NULL_ADDRESS = "0x" + "00" * 20


def is_null(identifier: Optional[str], null: str) -> bool:
    """True for None, the empty string and the configured null identifier."""
    return not identifier or identifier == null


class BalanceTable:
    """
    Deterministic balance table mapping (address, asset) -> amount.

    Note: this class stores balances in a plain dict. Callers that hash or
    serialize balances must sort keys explicitly.
    """

    def __init__(self):
        """Initialize empty balance table."""
        self._balances: Dict[Tuple[Address, AssetId], Amount] = {}

    def get(self, address: Address, asset: AssetId) -> Amount:
        """Get balance for (address, asset). Returns 0 if not found."""
        return self._balances.get((address, asset), 0)

    def set(self, address: Address, asset: AssetId, amount: Amount) -> None:
        """
        Set balance for (address, asset).

        Raises:
            ValueError: If amount is negative
        """
        if amount < 0:
            raise ValueError(f"Balance cannot be negative: {amount}")
        if amount == 0:
            # Remove zero balances to keep table sparse
            self._balances.pop((address, asset), None)
        else:
            self._balances[(address, asset)] = amount

    def add(self, address: Address, asset: AssetId, delta: Amount) -> None:
        """
        Add delta to balance (delta may be negative).

        Raises:
            ValueError: If resulting balance would be negative
        """
        current = self.get(address, asset)
        new_balance = current + delta
        if new_balance < 0:
            raise ValueError(
                f"Insufficient balance: {current} + {delta} = {new_balance} < 0"
            )
        self.set(address, asset, new_balance)

    def subtract(self, address: Address, asset: AssetId, delta: Amount) -> None:
        """Subtract a non-negative amount from a balance."""
        if delta < 0:
            raise ValueError(f"Delta must be non-negative: {delta}")
        self.add(address, asset, -delta)

    def total(self, asset: AssetId) -> Amount:
        """Sum of all balances held in `asset`."""
        return sum(amount for (_, a), amount in self._balances.items() if a == asset)

    def __repr__(self) -> str:
        return f"BalanceTable({len(self._balances)} entries)"
