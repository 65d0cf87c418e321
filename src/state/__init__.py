"""
State management for two-reserve pools
"""

from .balances import NATIVE_ASSET, BalanceTable
from .reserves import MAX_UINT128, ReserveBalances, Slot
from .tokens import LedgerToken, NativeAsset, ReserveToken
from .lp import PoolToken

__all__ = [
    "NATIVE_ASSET",
    "BalanceTable",
    "MAX_UINT128",
    "ReserveBalances",
    "Slot",
    "LedgerToken",
    "NativeAsset",
    "ReserveToken",
    "PoolToken",
]
