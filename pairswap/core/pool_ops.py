"""
Pool operations: deposit, withdraw, swap, and the read-only queries.

Each mutating call runs strictly as

    validate -> compute -> move external value -> mint/burn -> commit ledger -> emit

under a per-pair lock, so no call ever observes a half-updated Pool. Every
external effect records a compensating action; if a later step raises, the
compensations run in reverse order and the original error propagates. The
ledger write is the last effect of a call, so a rejected call leaves the
reserves unchanged.
"""

from __future__ import annotations

import logging
import threading
import time
from collections import deque
from contextlib import contextmanager
from typing import Callable, Deque, Dict, Iterator, List, Optional, Sequence, Tuple

from ..errors import (
    AmmError,
    Expired,
    InsufficientLiquidity,
    InvalidPath,
    InvalidRecipient,
    InvariantViolation,
    MinExceedsDesired,
    PoolNotFound,
    SlippageExceeded,
    TransferFailed,
    ZeroAmount,
)
from ..state.balances import Address, Amount, AssetId, is_null
from ..state.lp import TokenId
from ..state.pair_key import PairKey, canonicalize, is_low
from ..state.pools import Pool, ReserveLedger
from ..state.state_root import compute_state_root, snapshot_to_dict
from .config import AmmConfig
from .cpmm import amounts_for_withdraw, optimal_deposit, shares_for_deposit, spot_price, swap_input, swap_output
from .interfaces import AssetTransfer, ShareToken
from .shares import ShareRegistry
from .types import DepositQuote, Event, LiquidityAdded, LiquidityRemoved, SwappedTokens, SwapQuote, WithdrawResult

logger = logging.getLogger(__name__)

Clock = Callable[[], int]
Listener = Callable[[Event], None]


def _unix_now() -> int:
    return int(time.time())


def _require_int(name: str, value: int) -> None:
    if not isinstance(value, int) or isinstance(value, bool):
        raise TypeError(f"{name} must be an int")


def _require_positive(name: str, value: int) -> None:
    _require_int(name, value)
    if value <= 0:
        raise ZeroAmount(f"{name} must be positive: {value}")


class _UndoJournal:
    """Compensating actions for the external effects of one call."""

    def __init__(self) -> None:
        self._entries: List[Tuple[str, Callable[[], None]]] = []

    def record(self, label: str, undo: Callable[[], None]) -> None:
        self._entries.append((label, undo))

    def rollback(self) -> List[str]:
        """Run compensations newest-first. Returns the labels that failed."""
        failed: List[str] = []
        for label, undo in reversed(self._entries):
            try:
                undo()
            except Exception as exc:
                logger.error("rollback step %s failed: %s", label, exc)
                failed.append(f"rollback:{label}")
        self._entries.clear()
        return failed


class PoolOperations:
    """
    Orchestrates the pairswap entry points against a ledger and a share registry.

    Args:
        transfers: Fungible asset collaborator (pull/push)
        share_tokens: Claim-token collaborator (create/mint/burn)
        config: Runtime config (defaults to AmmConfig())
        ledger: Existing reserve ledger (e.g. from a snapshot)
        bindings: Existing share bindings (e.g. from a snapshot)
        clock: Returns the current time in the same unit as deadlines
    """

    def __init__(
        self,
        transfers: AssetTransfer,
        share_tokens: ShareToken,
        config: Optional[AmmConfig] = None,
        *,
        ledger: Optional[ReserveLedger] = None,
        bindings: Optional[Dict[PairKey, TokenId]] = None,
        clock: Optional[Clock] = None,
    ) -> None:
        self._config = config or AmmConfig()
        self._transfers = transfers
        self._ledger = ledger if ledger is not None else ReserveLedger(check_invariants=self._config.check_invariants)
        self._shares = ShareRegistry(share_tokens, self._config, bindings)
        self._clock = clock or _unix_now
        self._locks: Dict[PairKey, threading.RLock] = {}
        self._locks_guard = threading.Lock()
        self._listeners: List[Listener] = []
        self._events: Deque[Event] = deque(maxlen=self._config.event_log_size)
        unbound = sorted(set(self._ledger.pairs()) - set(self._shares.bindings()))
        if unbound:
            raise ValueError(f"pools without a share binding: {unbound}")

    @property
    def config(self) -> AmmConfig:
        return self._config

    @property
    def ledger(self) -> ReserveLedger:
        return self._ledger

    @property
    def shares(self) -> ShareRegistry:
        return self._shares

    @property
    def events(self) -> Tuple[Event, ...]:
        """The most recent `config.event_log_size` events, oldest first."""
        return tuple(self._events)

    def subscribe(self, listener: Listener) -> None:
        """Register a callback invoked with every emitted event, before the call returns."""
        self._listeners.append(listener)

    # -- mutating entry points ----------------------------------------------

    def deposit(
        self,
        asset_a: AssetId,
        asset_b: AssetId,
        desired_a: Amount,
        desired_b: Amount,
        min_a: Amount,
        min_b: Amount,
        recipient: Address,
        deadline: int,
        *,
        sender: Address,
    ) -> DepositQuote:
        """
        Add liquidity. Pulls the optimal amounts from `sender`, mints shares to `recipient`.

        Returns:
            DepositQuote with the amounts actually used (caller's order) and shares minted
        """
        try:
            return self._deposit(asset_a, asset_b, desired_a, desired_b, min_a, min_b, recipient, deadline, sender)
        except AmmError as exc:
            logger.debug("deposit rejected: %s: %s", exc.code, exc)
            raise

    def withdraw(
        self,
        asset_a: AssetId,
        asset_b: AssetId,
        shares: Amount,
        min_a: Amount,
        min_b: Amount,
        recipient: Address,
        deadline: int,
        *,
        sender: Address,
    ) -> WithdrawResult:
        """Burn `shares` from `sender` and push the proportional reserves to `recipient`."""
        try:
            return self._withdraw(asset_a, asset_b, shares, min_a, min_b, recipient, deadline, sender)
        except AmmError as exc:
            logger.debug("withdraw rejected: %s: %s", exc.code, exc)
            raise

    def swap(
        self,
        amount_in: Amount,
        amount_out_min: Amount,
        path: Sequence[AssetId],
        recipient: Address,
        deadline: int,
        *,
        sender: Address,
    ) -> SwapQuote:
        """Exact-in swap along `path[0] -> path[1]`."""
        try:
            return self._swap(amount_in, amount_out_min, path, recipient, deadline, sender)
        except AmmError as exc:
            logger.debug("swap rejected: %s: %s", exc.code, exc)
            raise

    # -- queries -------------------------------------------------------------

    def get_reserves(self, asset_a: AssetId, asset_b: AssetId) -> Tuple[Amount, Amount]:
        """Reserves in the caller's order; (0, 0) for a pair that never received a deposit."""
        pair_key = self._canonical(asset_a, asset_b)
        return self._ledger.get(pair_key).reserves_for(asset_a, asset_b)

    def get_spot_price(self, asset_a: AssetId, asset_b: AssetId) -> Amount:
        """Amount of asset_b one unit of asset_a is worth, scaled by config.scale."""
        pool = self._existing_pool(self._canonical(asset_a, asset_b))
        reserve_a, reserve_b = pool.reserves_for(asset_a, asset_b)
        return spot_price(reserve_a, reserve_b, scale=self._config.scale)

    def quote_swap_output(self, amount_in: Amount, reserve_in: Amount, reserve_out: Amount) -> Amount:
        return swap_output(amount_in, reserve_in, reserve_out)

    def quote_swap_input(self, amount_out: Amount, reserve_in: Amount, reserve_out: Amount) -> Amount:
        return swap_input(amount_out, reserve_in, reserve_out)

    def quote_deposit(
        self,
        asset_a: AssetId,
        asset_b: AssetId,
        desired_a: Amount,
        desired_b: Amount,
        min_a: Amount = 0,
        min_b: Amount = 0,
    ) -> DepositQuote:
        """What `deposit` would accept and mint right now. No state is touched."""
        self._check_deposit_amounts(desired_a, desired_b, min_a, min_b)
        pair_key = self._canonical(asset_a, asset_b)
        with self._lock_for(pair_key):
            return self._quote_deposit(pair_key, asset_a, asset_b, desired_a, desired_b, min_a, min_b)

    def share_token(self, asset_a: AssetId, asset_b: AssetId) -> Optional[TokenId]:
        return self._shares.binding_of(self._canonical(asset_a, asset_b))

    def snapshot(self) -> dict:
        return snapshot_to_dict(self._ledger, self._shares.bindings())

    def state_root(self) -> str:
        return compute_state_root(self._ledger, self._shares.bindings())

    # -- implementation ------------------------------------------------------

    def _deposit(
        self,
        asset_a: AssetId,
        asset_b: AssetId,
        desired_a: Amount,
        desired_b: Amount,
        min_a: Amount,
        min_b: Amount,
        recipient: Address,
        deadline: int,
        sender: Address,
    ) -> DepositQuote:
        self._check_deadline(deadline)
        self._check_recipient(recipient)
        self._check_deposit_amounts(desired_a, desired_b, min_a, min_b)
        pair_key = self._canonical(asset_a, asset_b)

        with self._transaction(pair_key) as journal:
            quote = self._quote_deposit(pair_key, asset_a, asset_b, desired_a, desired_b, min_a, min_b)
            if quote.shares_to_mint <= 0:
                raise InsufficientLiquidity(
                    f"deposit of ({quote.optimal_a}, {quote.optimal_b}) mints zero shares"
                )

            self._pull(journal, asset_a, sender, quote.optimal_a)
            self._pull(journal, asset_b, sender, quote.optimal_b)

            token_id = self._shares.get_or_create_binding(pair_key)
            self._mint(journal, token_id, recipient, quote.shares_to_mint)

            if is_low(pair_key, asset_a):
                amount_low, amount_high = quote.optimal_a, quote.optimal_b
            else:
                amount_low, amount_high = quote.optimal_b, quote.optimal_a
            self._commit(
                journal,
                pair_key,
                lambda: self._ledger.apply_deposit(pair_key, amount_low, amount_high, quote.shares_to_mint),
            )
            self._emit(LiquidityAdded(pair_key, recipient, amount_low, amount_high, quote.shares_to_mint))

        logger.info(
            "deposit %s/%s: amounts=(%d, %d) shares=%d recipient=%s",
            pair_key[0], pair_key[1], amount_low, amount_high, quote.shares_to_mint, recipient,
        )
        return quote

    def _withdraw(
        self,
        asset_a: AssetId,
        asset_b: AssetId,
        shares: Amount,
        min_a: Amount,
        min_b: Amount,
        recipient: Address,
        deadline: int,
        sender: Address,
    ) -> WithdrawResult:
        self._check_deadline(deadline)
        self._check_recipient(recipient)
        _require_positive("shares", shares)
        _require_int("min_a", min_a)
        _require_int("min_b", min_b)
        pair_key = self._canonical(asset_a, asset_b)

        with self._transaction(pair_key) as journal:
            pool = self._existing_pool(pair_key)
            token_id = self._shares.binding_of(pair_key)
            if shares > pool.total_shares:
                raise InsufficientLiquidity(f"shares ({shares}) > total_shares ({pool.total_shares})")

            amount_low, amount_high = amounts_for_withdraw(
                shares, pool.reserve_low, pool.reserve_high, pool.total_shares
            )
            if amount_low == 0 or amount_high == 0:
                raise InsufficientLiquidity(f"burning {shares} shares returns ({amount_low}, {amount_high})")
            if is_low(pair_key, asset_a):
                amount_a, amount_b = amount_low, amount_high
            else:
                amount_a, amount_b = amount_high, amount_low
            if amount_a < min_a:
                raise SlippageExceeded(f"amount_a ({amount_a}) < min_a ({min_a})")
            if amount_b < min_b:
                raise SlippageExceeded(f"amount_b ({amount_b}) < min_b ({min_b})")

            self._burn(journal, token_id, sender, shares)
            self._push(journal, asset_a, recipient, amount_a)
            self._push(journal, asset_b, recipient, amount_b)
            self._commit(
                journal,
                pair_key,
                lambda: self._ledger.apply_withdraw(pair_key, amount_low, amount_high, shares),
            )
            self._emit(LiquidityRemoved(pair_key, recipient, amount_low, amount_high, shares))

        logger.info(
            "withdraw %s/%s: amounts=(%d, %d) shares=%d recipient=%s",
            pair_key[0], pair_key[1], amount_low, amount_high, shares, recipient,
        )
        return WithdrawResult(amount_a=amount_a, amount_b=amount_b)

    def _swap(
        self,
        amount_in: Amount,
        amount_out_min: Amount,
        path: Sequence[AssetId],
        recipient: Address,
        deadline: int,
        sender: Address,
    ) -> SwapQuote:
        self._check_deadline(deadline)
        self._check_recipient(recipient)
        _require_positive("amount_in", amount_in)
        _require_int("amount_out_min", amount_out_min)
        if isinstance(path, str) or len(path) != 2:
            raise InvalidPath(f"path must contain exactly two assets, got {path!r}")
        asset_in, asset_out = path
        pair_key = self._canonical(asset_in, asset_out)

        with self._transaction(pair_key) as journal:
            pool = self._existing_pool(pair_key)
            reserve_in, reserve_out = pool.reserves_for(asset_in, asset_out)
            amount_out = swap_output(amount_in, reserve_in, reserve_out)
            if amount_out < amount_out_min:
                raise SlippageExceeded(f"amount_out ({amount_out}) < amount_out_min ({amount_out_min})")
            if amount_out == 0:
                raise InsufficientLiquidity(f"amount_in ({amount_in}) is too small to produce any output")

            self._pull(journal, asset_in, sender, amount_in)
            self._push(journal, asset_out, recipient, amount_out)
            self._commit(
                journal,
                pair_key,
                lambda: self._ledger.apply_swap(pair_key, is_low(pair_key, asset_in), amount_in, amount_out),
            )
            self._emit(SwappedTokens((asset_in, asset_out), recipient, (amount_in, amount_out)))

        logger.info(
            "swap %s->%s: amount_in=%d amount_out=%d recipient=%s",
            asset_in, asset_out, amount_in, amount_out, recipient,
        )
        return SwapQuote(amount_in=amount_in, amount_out=amount_out)

    def _quote_deposit(
        self,
        pair_key: PairKey,
        asset_a: AssetId,
        asset_b: AssetId,
        desired_a: Amount,
        desired_b: Amount,
        min_a: Amount,
        min_b: Amount,
    ) -> DepositQuote:
        pool = self._ledger.get(pair_key)
        reserve_a, reserve_b = pool.reserves_for(asset_a, asset_b)
        use_a, use_b = optimal_deposit(desired_a, desired_b, min_a, min_b, reserve_a, reserve_b)
        if use_a == 0 or use_b == 0:
            raise InsufficientLiquidity(
                f"deposit of ({desired_a}, {desired_b}) rounds to ({use_a}, {use_b}) at the pool ratio"
            )
        shares = shares_for_deposit(use_a, use_b, reserve_a, reserve_b, pool.total_shares, scale=self._config.scale)
        return DepositQuote(optimal_a=use_a, optimal_b=use_b, shares_to_mint=shares)

    def _check_deadline(self, deadline: int) -> None:
        _require_int("deadline", deadline)
        now = self._clock()
        if now > deadline:
            raise Expired(f"deadline {deadline} has passed (now={now})")

    def _check_recipient(self, recipient: Address) -> None:
        if not isinstance(recipient, str) or is_null(recipient, self._config.null_address):
            raise InvalidRecipient(f"invalid recipient: {recipient!r}")

    @staticmethod
    def _check_deposit_amounts(desired_a: Amount, desired_b: Amount, min_a: Amount, min_b: Amount) -> None:
        _require_positive("desired_a", desired_a)
        _require_positive("desired_b", desired_b)
        _require_int("min_a", min_a)
        _require_int("min_b", min_b)
        if min_a > desired_a:
            raise MinExceedsDesired(f"min_a ({min_a}) > desired_a ({desired_a})")
        if min_b > desired_b:
            raise MinExceedsDesired(f"min_b ({min_b}) > desired_b ({desired_b})")

    def _canonical(self, asset_a: AssetId, asset_b: AssetId) -> PairKey:
        return canonicalize(asset_a, asset_b, null_asset=self._config.null_asset)

    def _existing_pool(self, pair_key: PairKey) -> Pool:
        if not self._ledger.exists(pair_key):
            raise PoolNotFound(f"no pool for pair {pair_key[0]}/{pair_key[1]}")
        return self._ledger.get(pair_key)

    def _lock_for(self, pair_key: PairKey) -> threading.RLock:
        with self._locks_guard:
            lock = self._locks.get(pair_key)
            if lock is None:
                lock = self._locks[pair_key] = threading.RLock()
            return lock

    @contextmanager
    def _transaction(self, pair_key: PairKey) -> Iterator[_UndoJournal]:
        with self._lock_for(pair_key):
            journal = _UndoJournal()
            try:
                yield journal
            except Exception as exc:
                failed = journal.rollback()
                if failed:
                    raise InvariantViolation(failed) from exc
                if isinstance(exc, AmmError):
                    logger.debug("rolled back %s/%s after %s", pair_key[0], pair_key[1], exc.code)
                else:
                    logger.warning("rolled back %s/%s after unexpected %r", pair_key[0], pair_key[1], exc)
                raise

    # -- journaled effects -----------------------------------------------------

    def _pull(self, journal: _UndoJournal, asset: AssetId, owner: Address, amount: Amount) -> None:
        self._must_pull(asset, owner, amount)
        journal.record(f"pull:{asset}", lambda: self._must_push(asset, owner, amount))

    def _push(self, journal: _UndoJournal, asset: AssetId, to: Address, amount: Amount) -> None:
        self._must_push(asset, to, amount)
        journal.record(f"push:{asset}", lambda: self._must_pull(asset, to, amount))

    def _must_push(self, asset: AssetId, to: Address, amount: Amount) -> None:
        if not self._transfers.push(asset, to, amount):
            raise TransferFailed(f"push of {amount} {asset} to {to} failed")

    def _must_pull(self, asset: AssetId, owner: Address, amount: Amount) -> None:
        if not self._transfers.pull(asset, owner, self._config.controller, amount):
            raise TransferFailed(f"pull of {amount} {asset} from {owner} failed")

    def _mint(self, journal: _UndoJournal, token_id: TokenId, to: Address, amount: Amount) -> None:
        self._shares.mint(token_id, to, amount)
        journal.record(f"mint:{token_id}", lambda: self._shares.burn(token_id, to, amount))

    def _burn(self, journal: _UndoJournal, token_id: TokenId, owner: Address, amount: Amount) -> None:
        self._shares.burn(token_id, owner, amount)
        journal.record(f"burn:{token_id}", lambda: self._shares.mint(token_id, owner, amount))

    def _commit(self, journal: _UndoJournal, pair_key: PairKey, apply: Callable[[], Pool]) -> None:
        before = self._ledger.get(pair_key) if self._ledger.exists(pair_key) else None
        apply()
        journal.record("ledger", lambda: self._ledger.restore(pair_key, before))

    def _emit(self, event: Event) -> None:
        for listener in self._listeners:
            listener(event)
        self._events.append(event)
