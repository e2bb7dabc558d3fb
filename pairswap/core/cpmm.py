"""
Constant Product Market Maker (CPMM) invariant calculator.

Pure functions with deterministic rounding rules. Everything here is integer
arithmetic with floor division; prices and first-deposit shares use an
implicit fixed-point unit of SCALE = 10**18.

Algorithm Design:
- Type: Fixed-Point Integer Arithmetic / Deterministic Rounding
- Time Complexity: O(1) per call
- Invariant: After each swap, x' * y' >= x * y (floor rounding favors the pool)
"""

from __future__ import annotations

from typing import Tuple

from ..errors import EmptyPool, InsufficientLiquidity, InvariantViolation, SlippageExceeded, ZeroAmount
from ..state.balances import Amount

SCALE = 10**18


def _require_int(name: str, value: int) -> None:
    if not isinstance(value, int) or isinstance(value, bool):
        raise TypeError(f"{name} must be an int")


def _require_positive_amount(name: str, value: int) -> None:
    _require_int(name, value)
    if value <= 0:
        raise ZeroAmount(f"{name} must be positive: {value}")


def _require_reserves(**reserves: int) -> None:
    for name, value in reserves.items():
        _require_int(name, value)
    if any(value <= 0 for value in reserves.values()):
        raise EmptyPool(f"reserves must be positive: {reserves}")


def swap_output(amount_in: Amount, reserve_in: Amount, reserve_out: Amount) -> Amount:
    """
    Compute output amount for an exact-in swap (no fee).

        amount_out = floor(amount_in * reserve_out / (reserve_in + amount_in))

    Raises:
        ZeroAmount: If amount_in <= 0
        EmptyPool: If either reserve <= 0
    """
    _require_positive_amount("amount_in", amount_in)
    _require_reserves(reserve_in=reserve_in, reserve_out=reserve_out)
    return (amount_in * reserve_out) // (reserve_in + amount_in)


def swap_input(amount_out: Amount, reserve_in: Amount, reserve_out: Amount) -> Amount:
    """
    Smallest input whose `swap_output` is at least `amount_out`.

        amount_in = ceil(reserve_in * amount_out / (reserve_out - amount_out))

    Raises:
        ZeroAmount: If amount_out <= 0
        EmptyPool: If either reserve <= 0
        InsufficientLiquidity: If amount_out would drain the output reserve
    """
    _require_positive_amount("amount_out", amount_out)
    _require_reserves(reserve_in=reserve_in, reserve_out=reserve_out)
    if amount_out >= reserve_out:
        raise InsufficientLiquidity(
            f"Cannot drain full reserve: amount_out ({amount_out}) >= reserve_out ({reserve_out})"
        )
    numerator = reserve_in * amount_out
    denominator = reserve_out - amount_out
    return -(-numerator // denominator)


def spot_price(reserve_of: Amount, reserve_against: Amount, *, scale: int = SCALE) -> Amount:
    """
    Price of one unit of the first asset in units of the second, scaled by `scale`.

        price = floor(reserve_against * scale / reserve_of)

    Raises:
        EmptyPool: If either reserve <= 0
    """
    _require_reserves(reserve_of=reserve_of, reserve_against=reserve_against)
    return (reserve_against * scale) // reserve_of


def proportional(amount: Amount, reserve_from: Amount, reserve_to: Amount) -> Amount:
    """floor(amount * reserve_to / reserve_from)."""
    _require_positive_amount("amount", amount)
    _require_reserves(reserve_from=reserve_from, reserve_to=reserve_to)
    return (amount * reserve_to) // reserve_from


def optimal_deposit(
    desired_a: Amount,
    desired_b: Amount,
    min_a: Amount,
    min_b: Amount,
    reserve_a: Amount,
    reserve_b: Amount,
) -> Tuple[Amount, Amount]:
    """
    Compute the ratio-preserving amounts actually accepted for a deposit.

    An empty pool accepts everything (the first depositor sets the price).
    Otherwise the deposit is A-constrained when the B-equivalent of desired_a
    fits within desired_b, and B-constrained when it does not. Neither side
    ever exceeds its desired amount.

    Args:
        desired_a: Maximum amount of asset A the depositor offers
        desired_b: Maximum amount of asset B the depositor offers
        min_a: Minimum acceptable amount of A actually used
        min_b: Minimum acceptable amount of B actually used
        reserve_a: Pool reserve of A
        reserve_b: Pool reserve of B

    Returns:
        Tuple of (use_a, use_b)

    Raises:
        SlippageExceeded: If the constrained side falls below its minimum
        InvariantViolation: If the B-constrained candidate exceeds desired_a
    """
    for name, value in (("min_a", min_a), ("min_b", min_b), ("reserve_a", reserve_a), ("reserve_b", reserve_b)):
        _require_int(name, value)
    if reserve_a == 0 and reserve_b == 0:
        _require_positive_amount("desired_a", desired_a)
        _require_positive_amount("desired_b", desired_b)
        return desired_a, desired_b

    candidate_b = proportional(desired_a, reserve_a, reserve_b)
    if candidate_b <= desired_b:
        if candidate_b < min_b:
            raise SlippageExceeded(f"amount_b ({candidate_b}) < min_b ({min_b})")
        return desired_a, candidate_b

    candidate_a = proportional(desired_b, reserve_b, reserve_a)
    if candidate_a > desired_a:
        raise InvariantViolation(f"optimal_a_exceeds_desired:{candidate_a}>{desired_a}")
    if candidate_a < min_a:
        raise SlippageExceeded(f"amount_a ({candidate_a}) < min_a ({min_a})")
    return candidate_a, desired_b


def shares_for_deposit(
    amount_a: Amount,
    amount_b: Amount,
    reserve_a: Amount,
    reserve_b: Amount,
    total_shares: Amount,
    *,
    scale: int = SCALE,
) -> Amount:
    """
    Compute liquidity shares to mint for a deposit.

    First deposit (total_shares == 0):
        shares = floor(amount_a * amount_b / scale)

    Subsequent deposits:
        shares = min(floor(amount_a * total_shares / reserve_a),
                     floor(amount_b * total_shares / reserve_b))

    The first-deposit rule is a plain scaled product, not a geometric mean.
    """
    _require_positive_amount("amount_a", amount_a)
    _require_positive_amount("amount_b", amount_b)
    _require_int("total_shares", total_shares)
    if total_shares < 0:
        raise ValueError(f"total_shares must be non-negative: {total_shares}")

    if total_shares == 0:
        return (amount_a * amount_b) // scale

    _require_reserves(reserve_a=reserve_a, reserve_b=reserve_b)
    return min(
        (amount_a * total_shares) // reserve_a,
        (amount_b * total_shares) // reserve_b,
    )


def amounts_for_withdraw(
    shares: Amount,
    reserve_a: Amount,
    reserve_b: Amount,
    total_shares: Amount,
) -> Tuple[Amount, Amount]:
    """
    Compute asset amounts returned for burning `shares`.

    Formula:
        amount_a = floor(shares * reserve_a / total_shares)
        amount_b = floor(shares * reserve_b / total_shares)

    Raises:
        ZeroAmount: If shares <= 0
        EmptyPool: If total_shares <= 0
        InsufficientLiquidity: If shares > total_shares
    """
    _require_positive_amount("shares", shares)
    for name, value in (("reserve_a", reserve_a), ("reserve_b", reserve_b), ("total_shares", total_shares)):
        _require_int(name, value)
    if total_shares <= 0:
        raise EmptyPool("pool has no outstanding shares")
    if shares > total_shares:
        raise InsufficientLiquidity(f"Cannot burn more shares than supply: {shares} > {total_shares}")
    if reserve_a < 0 or reserve_b < 0:
        raise ValueError(f"Reserves must be non-negative: ({reserve_a}, {reserve_b})")

    return (shares * reserve_a) // total_shares, (shares * reserve_b) // total_shares
