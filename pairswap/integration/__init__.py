"""
Integration layer: operation parsing and in-memory collaborators
"""

from .memory import InMemoryAssetBank, InMemoryShareTokens
from .operations import (
    OperationKind,
    OperationResult,
    apply_operation,
    apply_operations,
    parse_operation,
)

__all__ = [
    "InMemoryAssetBank",
    "InMemoryShareTokens",
    "OperationKind",
    "OperationResult",
    "apply_operation",
    "apply_operations",
    "parse_operation",
]
