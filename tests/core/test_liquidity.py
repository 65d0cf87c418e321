# [TESTER] v1

from __future__ import annotations

import pytest

from src.core.liquidity import (
    binding_slot,
    compute_add_liquidity,
    compute_add_liquidity_cost,
    compute_fund,
    compute_remove_liquidity,
    fund_cost,
    liquidate_reserve_amount,
    resolve_reserve_amounts,
)
from src.errors import InvalidAmountError, InvalidReserveBalanceError, InvalidReserveError
from src.state.reserves import Slot


def test_resolve_reserve_amounts_reorders_into_slots() -> None:
    assert resolve_reserve_amounts(("A", "B"), ["B", "A"], [5, 7]) == (7, 5)
    assert resolve_reserve_amounts(("A", "B"), ["A", "B"], [5, 7]) == (5, 7)


def test_resolve_reserve_amounts_rejects_mismatched_sets() -> None:
    with pytest.raises(InvalidReserveError, match="not a reserve"):
        resolve_reserve_amounts(("A", "B"), ["A", "C"], [1, 1])
    with pytest.raises(InvalidReserveError, match="Duplicate"):
        resolve_reserve_amounts(("A", "B"), ["A", "A"], [1, 1])
    with pytest.raises(InvalidReserveError, match="Expected 2"):
        resolve_reserve_amounts(("A", "B"), ["A"], [1])
    with pytest.raises(InvalidAmountError, match="Expected 2 amounts"):
        resolve_reserve_amounts(("A", "B"), ["A", "B"], [1])
    with pytest.raises(InvalidAmountError, match="positive"):
        resolve_reserve_amounts(("A", "B"), ["A", "B"], [1, 0])


def test_bootstrap_issues_geometric_mean() -> None:
    result = compute_add_liquidity(0, (0, 0), (10_000, 40_000))
    assert result.bootstrap is True
    assert result.issued == 20_000
    assert result.used == (10_000, 40_000)
    assert result.new_balances == (10_000, 40_000)


def test_binding_reserve_sets_issuance() -> None:
    result = compute_add_liquidity(1000, (1000, 2000), (100, 500))
    assert result.bootstrap is False
    assert result.issued == 100
    assert result.used == (100, 200)
    assert result.new_balances == (1100, 2200)


def test_required_deposits_round_up() -> None:
    # Binding FIRST: issued = floor(5 * 7 / 10) = 3; costs ceil(30/7), ceil(39/7).
    result = compute_add_liquidity(7, (10, 13), (5, 100))
    assert result.issued == 3
    assert result.used == (5, 6)


def test_binding_tie_picks_second_slot() -> None:
    assert binding_slot((10, 10), (4, 4)) is Slot.SECOND
    assert binding_slot((10, 10), (3, 4)) is Slot.FIRST
    assert binding_slot((10, 10), (4, 3)) is Slot.SECOND

    result = compute_add_liquidity(3, (10, 10), (4, 4))
    assert result.issued == 1
    assert result.used == (4, 4)


def test_add_to_empty_reserve_with_supply_is_rejected() -> None:
    with pytest.raises(InvalidReserveBalanceError):
        compute_add_liquidity(10, (0, 5), (1, 1))


def test_remove_pays_floor_share() -> None:
    result = compute_remove_liquidity(1000, (1000, 2000), 333)
    assert result.payouts == (333, 666)
    assert result.new_balances == (667, 1334)


def test_full_redemption_pays_exact_balances() -> None:
    result = compute_remove_liquidity(7, (10, 13), 7)
    assert result.payouts == (10, 13)
    assert result.new_balances == (0, 0)


def test_remove_rejects_zero_and_excess() -> None:
    with pytest.raises(InvalidAmountError, match="positive"):
        compute_remove_liquidity(10, (10, 10), 0)
    with pytest.raises(InvalidAmountError, match="more than supply"):
        compute_remove_liquidity(10, (10, 10), 11)


def test_deposit_then_redeem_never_returns_more() -> None:
    added = compute_add_liquidity(7, (10, 13), (5, 100))
    removed = compute_remove_liquidity(7 + added.issued, added.new_balances, added.issued)
    assert removed.payouts == (4, 5)
    assert removed.payouts[0] <= added.used[0]
    assert removed.payouts[1] <= added.used[1]


def test_fund_rounds_required_deposits_up() -> None:
    result = compute_fund(3, (10, 11), 1)
    assert result.required == (4, 4)
    assert result.new_balances == (14, 15)
    assert fund_cost(3, 9, 1) == 3


def test_fund_requires_existing_supply() -> None:
    with pytest.raises(InvalidAmountError, match="no supply"):
        compute_fund(0, (0, 0), 1)


def test_liquidate_rounds_down_except_full_supply() -> None:
    assert liquidate_reserve_amount(3, 10, 1) == 3
    assert liquidate_reserve_amount(3, 10, 3) == 10
    assert liquidate_reserve_amount(1414, 1000, 1) == 0


def test_add_liquidity_cost_matches_steady_state_deposit() -> None:
    assert compute_add_liquidity_cost(1000, (1000, 2000), Slot.FIRST, 100) == (100, 200)
    assert compute_add_liquidity_cost(1000, (1000, 2000), Slot.SECOND, 200) == (100, 200)
    with pytest.raises(InvalidAmountError):
        compute_add_liquidity_cost(0, (0, 0), Slot.FIRST, 1)
