# [TESTER] v1

from __future__ import annotations

import pytest

from src.errors import BalanceOverflowError
from src.state.reserves import MAX_UINT128, ReserveBalances, Slot


def test_setting_one_slot_leaves_the_other_untouched() -> None:
    reserves = ReserveBalances(5, 7)
    reserves.set(Slot.FIRST, MAX_UINT128)
    assert reserves.get_both() == (MAX_UINT128, 7)
    reserves.set(Slot.SECOND, 0)
    assert reserves.get_both() == (MAX_UINT128, 0)


def test_overflowing_write_is_rejected_without_effect() -> None:
    reserves = ReserveBalances(5, 7)
    with pytest.raises(BalanceOverflowError):
        reserves.set(Slot.SECOND, MAX_UINT128 + 1)
    assert reserves.get_both() == (5, 7)

    with pytest.raises(BalanceOverflowError):
        reserves.set_both(1, MAX_UINT128 + 1)
    assert reserves.get_both() == (5, 7)


def test_negative_and_non_integer_balances_are_rejected() -> None:
    with pytest.raises(ValueError, match="negative"):
        ReserveBalances(-1, 0)
    with pytest.raises(TypeError):
        ReserveBalances(0, True)  # type: ignore[arg-type]


def test_copy_is_independent() -> None:
    reserves = ReserveBalances(1, 2)
    snapshot = reserves.copy()
    reserves.set(Slot.FIRST, 10)
    assert snapshot == ReserveBalances(1, 2)
    assert reserves != snapshot


def test_slot_other() -> None:
    assert Slot.FIRST.other() is Slot.SECOND
    assert Slot.SECOND.other() is Slot.FIRST
