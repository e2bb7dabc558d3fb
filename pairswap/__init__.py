"""
pairswap: constant-product AMM accounting engine for two-asset pools.
"""

from .core import AmmConfig, PoolOperations, load_config
from .errors import (
    AmmError,
    InvariantViolation,
    SlippageExceeded,
    StateError,
    ValidationError,
)
from .state import Pool, ReserveLedger, canonicalize

__version__ = "0.1.0"

__all__ = [
    "AmmConfig",
    "PoolOperations",
    "load_config",
    "AmmError",
    "InvariantViolation",
    "SlippageExceeded",
    "StateError",
    "ValidationError",
    "Pool",
    "ReserveLedger",
    "canonicalize",
]
