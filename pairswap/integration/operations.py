"""
Operation parsing and application.

Operations arrive as JSON-like mappings:

    {"kind": "DEPOSIT", "asset_a": ..., "asset_b": ..., "desired_a": ..., "desired_b": ...,
     "min_a": ..., "min_b": ..., "recipient": ..., "deadline": ...}
    {"kind": "WITHDRAW", "asset_a": ..., "asset_b": ..., "shares": ..., "min_a": ..., "min_b": ...,
     "recipient": ..., "deadline": ...}
    {"kind": "SWAP", "amount_in": ..., "amount_out_min": ..., "path": [asset_in, asset_out],
     "recipient": ..., "deadline": ...}

`apply_operations` runs a list of them in order against a `PoolOperations`
engine and reports one `OperationResult` per entry.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any, List, Optional, Sequence, Tuple, Union

from ..core.pool_ops import PoolOperations
from ..core.types import DepositQuote, SwapQuote, WithdrawResult
from ..errors import AmmError


class OperationKind(Enum):
    DEPOSIT = "DEPOSIT"
    WITHDRAW = "WITHDRAW"
    SWAP = "SWAP"


@dataclass(frozen=True)
class DepositOperation:
    asset_a: str
    asset_b: str
    desired_a: int
    desired_b: int
    min_a: int
    min_b: int
    recipient: str
    deadline: int

    kind = OperationKind.DEPOSIT


@dataclass(frozen=True)
class WithdrawOperation:
    asset_a: str
    asset_b: str
    shares: int
    min_a: int
    min_b: int
    recipient: str
    deadline: int

    kind = OperationKind.WITHDRAW


@dataclass(frozen=True)
class SwapOperation:
    amount_in: int
    amount_out_min: int
    path: Tuple[str, ...]
    recipient: str
    deadline: int

    kind = OperationKind.SWAP


Operation = Union[DepositOperation, WithdrawOperation, SwapOperation]


@dataclass(frozen=True)
class OperationResult:
    ok: bool
    value: Optional[Union[DepositQuote, WithdrawResult, SwapQuote]] = None
    error: Optional[str] = None
    code: Optional[str] = None


def _require_str(value: Any, *, name: str, max_len: int = 4096) -> str:
    if not isinstance(value, str):
        raise ValueError(f"{name} must be a string")
    if max_len > 0 and len(value) > max_len:
        raise ValueError(f"{name} too large")
    return value


def _require_int(value: Any, *, name: str, non_negative: bool = False) -> int:
    if not isinstance(value, int) or isinstance(value, bool):
        raise ValueError(f"{name} must be an int")
    if non_negative and value < 0:
        raise ValueError(f"{name} must be non-negative")
    return int(value)


_FIELDS = {
    OperationKind.DEPOSIT: (
        ("asset_a", "str"),
        ("asset_b", "str"),
        ("desired_a", "int"),
        ("desired_b", "int"),
        ("min_a", "uint"),
        ("min_b", "uint"),
        ("recipient", "str"),
        ("deadline", "int"),
    ),
    OperationKind.WITHDRAW: (
        ("asset_a", "str"),
        ("asset_b", "str"),
        ("shares", "int"),
        ("min_a", "uint"),
        ("min_b", "uint"),
        ("recipient", "str"),
        ("deadline", "int"),
    ),
    OperationKind.SWAP: (
        ("amount_in", "int"),
        ("amount_out_min", "uint"),
        ("path", "path"),
        ("recipient", "str"),
        ("deadline", "int"),
    ),
}

_CLASSES = {
    OperationKind.DEPOSIT: DepositOperation,
    OperationKind.WITHDRAW: WithdrawOperation,
    OperationKind.SWAP: SwapOperation,
}


def _parse_field(obj: Mapping, name: str, typ: str) -> Any:
    if name not in obj:
        raise ValueError(f"missing field: {name}")
    value = obj[name]
    if typ == "str":
        return _require_str(value, name=name)
    if typ == "int":
        return _require_int(value, name=name)
    if typ == "uint":
        return _require_int(value, name=name, non_negative=True)
    if not isinstance(value, (list, tuple)):
        raise ValueError(f"{name} must be a list")
    return tuple(_require_str(item, name=f"{name}[{i}]") for i, item in enumerate(value))


def parse_operation(obj: Any) -> Operation:
    """
    Parse one operation mapping.

    Amount semantics (positivity, deadlines, pair validity) are left to the
    engine; parsing only enforces structure and types.

    Raises:
        ValueError: If the structure is invalid
    """
    if not isinstance(obj, Mapping):
        raise ValueError(f"operation must be an object, got {type(obj).__name__}")
    kind_raw = _require_str(obj.get("kind"), name="kind")
    try:
        kind = OperationKind(kind_raw.strip().upper())
    except ValueError as exc:
        raise ValueError(f"unknown operation kind: {kind_raw!r}") from exc

    fields = _FIELDS[kind]
    allowed = {"kind"} | {name for name, _ in fields}
    extra = sorted(k for k in obj.keys() if k not in allowed)
    if extra:
        raise ValueError(f"unexpected fields for {kind.value}: {', '.join(map(str, extra))}")

    kwargs = {name: _parse_field(obj, name, typ) for name, typ in fields}
    return _CLASSES[kind](**kwargs)


def apply_operation(engine: PoolOperations, op: Operation, *, sender: str) -> OperationResult:
    """Apply one parsed operation; AmmError rejections become failed results."""
    try:
        if isinstance(op, DepositOperation):
            value = engine.deposit(
                op.asset_a, op.asset_b, op.desired_a, op.desired_b, op.min_a, op.min_b,
                op.recipient, op.deadline, sender=sender,
            )
        elif isinstance(op, WithdrawOperation):
            value = engine.withdraw(
                op.asset_a, op.asset_b, op.shares, op.min_a, op.min_b,
                op.recipient, op.deadline, sender=sender,
            )
        elif isinstance(op, SwapOperation):
            value = engine.swap(
                op.amount_in, op.amount_out_min, op.path, op.recipient, op.deadline, sender=sender,
            )
        else:
            raise TypeError(f"unsupported operation: {type(op).__name__}")
    except AmmError as exc:
        return OperationResult(ok=False, error=str(exc), code=exc.code)
    return OperationResult(ok=True, value=value)


def apply_operations(engine: PoolOperations, operations: Sequence[Any], *, sender: str) -> List[OperationResult]:
    """
    Parse and apply operations in order.

    Each entry is independent: a rejected entry leaves no effect and later
    entries still run.
    """
    if isinstance(operations, (str, bytes, Mapping)) or not isinstance(operations, Sequence):
        raise ValueError("operations must be a list")

    results: List[OperationResult] = []
    for i, raw in enumerate(operations):
        try:
            op = parse_operation(raw)
        except ValueError as exc:
            results.append(OperationResult(ok=False, error=f"operation {i}: {exc}", code="parse"))
            continue
        results.append(apply_operation(engine, op, sender=sender))
    return results
