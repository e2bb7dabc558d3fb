"""Property tests for the invariant calculator."""

from __future__ import annotations

import importlib.util

import pytest

if importlib.util.find_spec("hypothesis") is None:  # pragma: no cover
    pytest.skip("hypothesis not installed", allow_module_level=True)

import hypothesis.strategies as st
from hypothesis import assume, given, settings

from pairswap.core.cpmm import amounts_for_withdraw, optimal_deposit, shares_for_deposit, swap_input, swap_output
from pairswap.state.pair_key import canonicalize

reserves = st.integers(min_value=1, max_value=10**36)
amounts = st.integers(min_value=1, max_value=10**36)
assets = st.text(alphabet="0123456789abcdef", min_size=1, max_size=16).map(lambda s: "0x" + s)


@settings(max_examples=300, deadline=None)
@given(amount_in=amounts, reserve_in=reserves, reserve_out=reserves)
def test_swap_never_decreases_constant_product(amount_in, reserve_in, reserve_out):
    amount_out = swap_output(amount_in, reserve_in, reserve_out)
    k_before = reserve_in * reserve_out
    k_after = (reserve_in + amount_in) * (reserve_out - amount_out)
    assert 0 <= amount_out < reserve_out
    assert k_after >= k_before
    # Floor rounding loses strictly less than one output unit.
    assert k_after - k_before < reserve_in + amount_in


@settings(max_examples=200, deadline=None)
@given(amount_out=amounts, reserve_in=reserves, reserve_out=reserves)
def test_swap_input_round_trips_through_swap_output(amount_out, reserve_in, reserve_out):
    assume(amount_out < reserve_out)
    amount_in = swap_input(amount_out, reserve_in, reserve_out)
    assert swap_output(amount_in, reserve_in, reserve_out) >= amount_out


@settings(max_examples=200, deadline=None)
@given(a=st.integers(min_value=10**9, max_value=10**30), b=st.integers(min_value=10**9, max_value=10**30))
def test_deposit_then_full_withdraw_returns_at_most_deposit(a, b):
    use_a, use_b = optimal_deposit(a, b, 0, 0, 0, 0)
    shares = shares_for_deposit(use_a, use_b, 0, 0, 0)
    assert shares > 0
    out_a, out_b = amounts_for_withdraw(shares, use_a, use_b, shares)
    assert out_a <= a and out_b <= b
    assert (out_a, out_b) == (a, b)


@settings(max_examples=200, deadline=None)
@given(x=assets, y=assets)
def test_canonicalize_is_symmetric(x, y):
    assume(x != y)
    low, high = canonicalize(x, y)
    assert (low, high) == canonicalize(y, x)
    assert low < high
    assert {low, high} == {x, y}


@settings(max_examples=200, deadline=None)
@given(
    a=amounts,
    b=amounts,
    bump=st.integers(min_value=1, max_value=10**30),
    reserve_a=reserves,
    reserve_b=reserves,
    total=st.integers(min_value=0, max_value=10**36),
)
def test_shares_monotone_in_each_amount(a, b, bump, reserve_a, reserve_b, total):
    base = shares_for_deposit(a, b, reserve_a, reserve_b, total)
    assert shares_for_deposit(a + bump, b, reserve_a, reserve_b, total) >= base
    assert shares_for_deposit(a, b + bump, reserve_a, reserve_b, total) >= base


@settings(max_examples=200, deadline=None)
@given(desired_a=amounts, desired_b=amounts, reserve_a=reserves, reserve_b=reserves)
def test_optimal_deposit_stays_within_desired(desired_a, desired_b, reserve_a, reserve_b):
    use_a, use_b = optimal_deposit(desired_a, desired_b, 0, 0, reserve_a, reserve_b)
    assert 0 <= use_a <= desired_a
    assert 0 <= use_b <= desired_b
    assert use_a == desired_a or use_b == desired_b
