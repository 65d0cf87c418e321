"""
Reserve balance storage for a two-reserve pool.

Both balances live behind a single accessor that enforces the 128-bit lane
capacity on every write. Slots are addressed by the `Slot` enum; the opposite
slot is available through `Slot.other()`.
"""

from __future__ import annotations

from enum import IntEnum
from typing import Tuple

from ..errors import BalanceOverflowError
from .balances import Amount


MAX_UINT128 = 2**128 - 1


class Slot(IntEnum):
    """Reserve slot index (registration order)."""

    FIRST = 0
    SECOND = 1

    def other(self) -> "Slot":
        return Slot.SECOND if self is Slot.FIRST else Slot.FIRST


def _check_balance(balance: Amount) -> None:
    if not isinstance(balance, int) or isinstance(balance, bool):
        raise TypeError("balance must be an int")
    if balance < 0:
        raise ValueError(f"Reserve balance cannot be negative: {balance}")
    if balance > MAX_UINT128:
        raise BalanceOverflowError(f"Reserve balance exceeds 128 bits: {balance}")


class ReserveBalances:
    """
    Two bounded reserve balances, read and written by slot.

    Writing one slot never touches the other. A failed write leaves both
    balances unchanged.
    """

    __slots__ = ("_balances",)

    def __init__(self, balance0: Amount = 0, balance1: Amount = 0) -> None:
        _check_balance(balance0)
        _check_balance(balance1)
        self._balances = [balance0, balance1]

    def get(self, slot: Slot) -> Amount:
        return self._balances[Slot(slot)]

    def get_both(self) -> Tuple[Amount, Amount]:
        return self._balances[0], self._balances[1]

    def set(self, slot: Slot, balance: Amount) -> None:
        """Set one slot's balance; raises BalanceOverflowError above 2**128 - 1."""
        slot = Slot(slot)
        _check_balance(balance)
        self._balances[slot] = balance

    def set_both(self, balance0: Amount, balance1: Amount) -> None:
        """Set both balances; both are validated before either is written."""
        _check_balance(balance0)
        _check_balance(balance1)
        self._balances[0] = balance0
        self._balances[1] = balance1

    def copy(self) -> "ReserveBalances":
        return ReserveBalances(self._balances[0], self._balances[1])

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ReserveBalances):
            return NotImplemented
        return self._balances == other._balances

    def __repr__(self) -> str:
        return f"ReserveBalances({self._balances[0]}, {self._balances[1]})"
