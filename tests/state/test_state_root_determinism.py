from __future__ import annotations

import pytest

from pairswap.errors import InvariantViolation
from pairswap.state import Pool, ReserveLedger, compute_state_root, snapshot_from_dict, snapshot_to_dict

ASSET_0 = "0x" + "01" * 32
ASSET_1 = "0x" + "02" * 32
ASSET_2 = "0x" + "03" * 32


def _pools() -> list[Pool]:
    return [
        Pool(ASSET_0, ASSET_1, reserve_low=2_000_000, reserve_high=2_000_000, total_shares=4),
        Pool(ASSET_0, ASSET_2, reserve_low=1_000_000, reserve_high=3_000_000, total_shares=3),
    ]


def test_state_root_is_insertion_order_independent() -> None:
    pools = _pools()
    bindings_1 = {(ASSET_0, ASSET_1): "share-1", (ASSET_0, ASSET_2): "share-2"}
    bindings_2 = {(ASSET_0, ASSET_2): "share-2", (ASSET_0, ASSET_1): "share-1"}

    root_1 = compute_state_root(ReserveLedger(pools), bindings_1)
    root_2 = compute_state_root(ReserveLedger(list(reversed(pools))), bindings_2)
    assert root_1 == root_2
    assert root_1.startswith("0x") and len(root_1) == 66


def test_state_root_changes_with_reserves_and_bindings() -> None:
    pools = _pools()
    bindings = {(ASSET_0, ASSET_1): "share-1"}
    base = compute_state_root(ReserveLedger(pools), bindings)

    ledger = ReserveLedger(pools)
    ledger.apply_swap((ASSET_0, ASSET_1), True, 10, 9)
    assert compute_state_root(ledger, bindings) != base
    assert compute_state_root(ReserveLedger(pools), {(ASSET_0, ASSET_1): "share-9"}) != base
    assert compute_state_root(ReserveLedger(pools), {}) != base


def test_state_root_rejects_non_ledger() -> None:
    with pytest.raises(TypeError):
        compute_state_root({}, {})  # type: ignore[arg-type]


def test_snapshot_round_trip_preserves_state_root() -> None:
    ledger = ReserveLedger(_pools())
    bindings = {(ASSET_0, ASSET_1): "share-1", (ASSET_0, ASSET_2): "share-2"}
    snap = snapshot_to_dict(ledger, bindings)

    assert snap["version"] == 1
    assert [p["asset_high"] for p in snap["pools"]] == [ASSET_1, ASSET_2]

    restored, restored_bindings = snapshot_from_dict(snap)
    assert restored_bindings == bindings
    assert restored.get((ASSET_0, ASSET_2)) == ledger.get((ASSET_0, ASSET_2))
    assert compute_state_root(restored, restored_bindings) == compute_state_root(ledger, bindings)


def test_snapshot_rejects_unknown_version() -> None:
    with pytest.raises(ValueError, match="unsupported snapshot version"):
        snapshot_from_dict({"version": 2, "pools": [], "bindings": []})


def test_snapshot_rejects_duplicate_pool() -> None:
    entry = {"asset_low": ASSET_0, "asset_high": ASSET_1, "reserve_low": 1, "reserve_high": 1, "total_shares": 1}
    with pytest.raises(ValueError, match="duplicate pool"):
        snapshot_from_dict({"version": 1, "pools": [entry, dict(entry)], "bindings": []})


def test_snapshot_rejects_bool_amounts() -> None:
    entry = {"asset_low": ASSET_0, "asset_high": ASSET_1, "reserve_low": True, "reserve_high": 1, "total_shares": 1}
    with pytest.raises(ValueError, match="reserve_low"):
        snapshot_from_dict({"version": 1, "pools": [entry], "bindings": []})


def test_snapshot_rejects_non_canonical_binding() -> None:
    binding = {"asset_low": ASSET_1, "asset_high": ASSET_0, "share_token": "share-1"}
    with pytest.raises(ValueError, match="canonical order"):
        snapshot_from_dict({"version": 1, "pools": [], "bindings": [binding]})


def test_snapshot_pool_invariants_checked_on_load() -> None:
    # Shares outstanding against an empty pool.
    entry = {"asset_low": ASSET_0, "asset_high": ASSET_1, "reserve_low": 0, "reserve_high": 0, "total_shares": 5}
    binding = {"asset_low": ASSET_0, "asset_high": ASSET_1, "share_token": "share-1"}
    snap = {"version": 1, "pools": [entry], "bindings": [binding]}
    with pytest.raises(InvariantViolation) as exc_info:
        snapshot_from_dict(snap)
    assert exc_info.value.violations == ["shares_iff_reserves"]

    ledger, _ = snapshot_from_dict(snap, check_invariants=False)
    assert ledger.get((ASSET_0, ASSET_1)).total_shares == 5


def _pool_entry(low: str = ASSET_0, high: str = ASSET_1) -> dict[str, object]:
    return {"asset_low": low, "asset_high": high, "reserve_low": 10, "reserve_high": 10, "total_shares": 10**24}


def test_snapshot_rejects_pool_without_binding() -> None:
    snap = {"version": 1, "pools": [_pool_entry()], "bindings": []}
    with pytest.raises(ValueError, match="pools without a share binding"):
        snapshot_from_dict(snap)
    # Also when invariant checks are off: the binding check is structural.
    with pytest.raises(ValueError, match="pools without a share binding"):
        snapshot_from_dict(snap, check_invariants=False)


def test_snapshot_accepts_binding_without_pool() -> None:
    # Left behind by a first deposit that failed after the share token was created.
    binding = {"asset_low": ASSET_0, "asset_high": ASSET_2, "share_token": "share-1"}
    ledger, bindings = snapshot_from_dict({"version": 1, "pools": [], "bindings": [binding]})
    assert len(ledger) == 0
    assert bindings == {(ASSET_0, ASSET_2): "share-1"}


@pytest.mark.parametrize(
    "low, high, message",
    [
        (ASSET_1, ASSET_0, "canonical order"),
        (ASSET_0, ASSET_0, "identical assets"),
        ("0x" + "00" * 32, ASSET_1, "null asset"),
    ],
)
def test_snapshot_rejects_bad_pool_pair_even_without_invariant_checks(low, high, message) -> None:
    binding = {"asset_low": ASSET_0, "asset_high": ASSET_1, "share_token": "share-1"}
    snap = {"version": 1, "pools": [_pool_entry(low, high)], "bindings": [binding]}
    with pytest.raises(ValueError, match=message):
        snapshot_from_dict(snap, check_invariants=False)


def test_snapshot_custom_null_asset() -> None:
    binding = {"asset_low": "native", "asset_high": "token", "share_token": "share-1"}
    with pytest.raises(ValueError, match="null asset"):
        snapshot_from_dict({"version": 1, "pools": [], "bindings": [binding]}, null_asset="native")
