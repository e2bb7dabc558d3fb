"""Exception types for the pairswap accounting engine.

Every rejection is a subclass of ``AmmError`` and carries a stable ``code``
string (usable as a rejection reason by result-object callers) alongside the
human-readable message.

Taxonomy:
- ``ValidationError``: bad caller input, always checked first.
- ``StateError``: the operation cannot proceed given current pool state.
- ``SlippageExceeded``: the price moved past the caller's bounds.
- ``InvariantViolation``: an internal consistency check failed (a defect).
"""

from __future__ import annotations


class AmmError(Exception):
    """Base class for every pairswap rejection."""

    code = "amm_error"


class ValidationError(AmmError):
    code = "validation"


class Expired(ValidationError):
    code = "expired"


class InvalidRecipient(ValidationError):
    code = "invalid_recipient"


class ZeroAmount(ValidationError):
    code = "zero_amount"


class MinExceedsDesired(ValidationError):
    code = "min_exceeds_desired"


class InvalidPair(ValidationError):
    code = "invalid_pair"


class InvalidPath(ValidationError):
    code = "invalid_path"


class StateError(AmmError):
    code = "state"


class PoolNotFound(StateError):
    code = "pool_not_found"


class EmptyPool(StateError):
    code = "empty_pool"


class InsufficientLiquidity(StateError):
    code = "insufficient_liquidity"


class InsufficientReserve(StateError):
    """A ledger subtraction would go below zero. Never expected from correct callers."""

    code = "insufficient_reserve"


class TransferFailed(StateError):
    """An external collaborator reported failure for a pull/push/mint/burn."""

    code = "transfer_failed"


class SlippageExceeded(AmmError):
    code = "slippage_exceeded"


class InvariantViolation(AmmError):
    """Raised when a computed value or post-state breaks an invariant."""

    code = "invariant_violation"

    def __init__(self, violations: list[str] | str) -> None:
        if isinstance(violations, str):
            violations = [violations]
        self.violations = list(violations)
        super().__init__(f"invariant violations: {', '.join(self.violations)}")
