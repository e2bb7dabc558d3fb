"""
State management for pairswap pools
"""

from .balances import NULL_ADDRESS, NULL_ASSET, BalanceTable
from .lp import ShareTable
from .pair_key import PairKey, canonicalize
from .pools import Pool, ReserveLedger
from .state_root import compute_state_root, snapshot_from_dict, snapshot_to_dict

__all__ = [
    "NULL_ADDRESS",
    "NULL_ASSET",
    "BalanceTable",
    "ShareTable",
    "PairKey",
    "canonicalize",
    "Pool",
    "ReserveLedger",
    "compute_state_root",
    "snapshot_from_dict",
    "snapshot_to_dict",
]
