"""
Liquidity math for a 50/50 two-reserve pool.

Pure functions with explicit rounding rules; amounts and balances are always
ordered by reserve slot (registration order). Rounding always favors the pool:
issuance and payouts round down, required deposits round up.

Proportional model (add/remove liquidity):
- Bootstrap (supply == 0): issued = geometric mean of the deposits, and the
  deposits become the reserve balances.
- Steady state: the binding reserve (smallest deposit/balance ratio) sets
  issued = floor(deposit * supply / balance); every reserve then owes
  ceil(issued * balance / supply).
- Redemption: payout = floor(amount * balance / supply), or the full balance
  when the whole supply is redeemed.

Legacy equal-weighted model (fund/liquidate) is driven by a pool-token amount
and always moves both reserves.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Sequence, Tuple

from ..errors import (
    InvalidAmountError,
    InvalidReserveBalanceError,
    InvalidReserveError,
    PoolInvariantError,
)
from ..state.balances import Amount, AssetId
from ..state.reserves import Slot
from .math_ex import ceil_div, geometric_mean


Pair = Tuple[Amount, Amount]


@dataclass(frozen=True)
class AddLiquidityResult:
    issued: Amount
    used: Pair
    new_balances: Pair
    bootstrap: bool


@dataclass(frozen=True)
class RemoveLiquidityResult:
    payouts: Pair
    new_balances: Pair


@dataclass(frozen=True)
class FundResult:
    required: Pair
    new_balances: Pair


def _require_int(name: str, value: int) -> None:
    if not isinstance(value, int) or isinstance(value, bool):
        raise TypeError(f"{name} must be an int")


def resolve_reserve_slots(registered: Sequence[AssetId], tokens: Sequence[AssetId]) -> List[Slot]:
    """
    Map a caller-ordered token list onto reserve slots.

    Raises:
        InvalidReserveError: If `tokens` is not a permutation of `registered`
    """
    if len(registered) != len(Slot):
        raise InvalidReserveError(f"Pool has {len(registered)} reserves, expected {len(Slot)}")
    if len(tokens) != len(registered):
        raise InvalidReserveError(f"Expected {len(registered)} reserve tokens, got {len(tokens)}")

    slots: List[Slot] = []
    for token in tokens:
        if token not in registered:
            raise InvalidReserveError(f"Token {token} is not a reserve of this pool")
        slot = Slot(registered.index(token))
        if slot in slots:
            raise InvalidReserveError(f"Duplicate reserve token {token}")
        slots.append(slot)
    return slots


def resolve_reserve_amounts(
    registered: Sequence[AssetId],
    tokens: Sequence[AssetId],
    amounts: Sequence[Amount],
) -> Pair:
    """
    Validate a (tokens, amounts) liquidity input and return amounts in slot order.

    `tokens` must be a permutation of the registered reserve set and every
    amount must be strictly positive.

    Raises:
        InvalidReserveError: If the token list is not a bijection onto the reserve set
        InvalidAmountError: If the amount list has the wrong length or a non-positive entry
    """
    slots = resolve_reserve_slots(registered, tokens)
    if len(amounts) != len(slots):
        raise InvalidAmountError(f"Expected {len(slots)} amounts, got {len(amounts)}")

    by_slot = [0, 0]
    for slot, amount in zip(slots, amounts):
        _require_int("amount", amount)
        if amount <= 0:
            raise InvalidAmountError(f"Amounts must be positive: {amount}")
        by_slot[slot] = amount
    return by_slot[0], by_slot[1]


def fund_supply_amount(supply: Amount, balance: Amount, amount: Amount) -> Amount:
    """Pool tokens matching `amount` of a reserve: floor(amount * supply / balance)."""
    if amount == 0:
        return 0
    if balance <= 0:
        raise InvalidReserveBalanceError(f"Reserve balance must be positive: {balance}")
    return (amount * supply) // balance


def fund_cost(supply: Amount, balance: Amount, amount: Amount) -> Amount:
    """Reserve deposit owed for `amount` pool tokens: ceil(amount * balance / supply)."""
    if supply <= 0:
        raise InvalidAmountError("Cannot price a deposit against an empty supply")
    return ceil_div(amount * balance, supply)


def liquidate_reserve_amount(supply: Amount, balance: Amount, amount: Amount) -> Amount:
    """Reserve payout for redeeming `amount` pool tokens (full supply pays the full balance)."""
    if supply <= 0:
        raise InvalidAmountError("Cannot redeem against an empty supply")
    if amount == supply:
        return balance
    return (amount * balance) // supply


def binding_slot(balances: Pair, amounts: Pair) -> Slot:
    """
    Slot whose deposit/balance ratio is smallest.

    Compared by cross-multiplication: amounts[0] / balances[0] < amounts[1] / balances[1]
    iff amounts[0] * balances[1] < amounts[1] * balances[0]. Ties pick SECOND.
    """
    if amounts[0] * balances[1] < amounts[1] * balances[0]:
        return Slot.FIRST
    return Slot.SECOND


def compute_add_liquidity(supply: Amount, balances: Pair, amounts: Pair) -> AddLiquidityResult:
    """
    Compute issuance and per-reserve deposits for a proportional deposit.

    Args:
        supply: Current pool-token supply
        balances: Current reserve balances (slot order)
        amounts: Offered deposit amounts (slot order, all positive)

    Returns:
        AddLiquidityResult with the issued amount and the amounts actually taken

    Raises:
        InvalidReserveBalanceError: If the pool has supply but an empty reserve
        PoolInvariantError: If a required deposit exceeds the offered amount
    """
    if supply < 0:
        raise ValueError(f"supply must be non-negative: {supply}")
    if amounts[0] <= 0 or amounts[1] <= 0:
        raise InvalidAmountError(f"Deposit amounts must be positive: {amounts}")

    if supply == 0:
        issued = geometric_mean(list(amounts))
        return AddLiquidityResult(
            issued=issued,
            used=(amounts[0], amounts[1]),
            new_balances=(amounts[0], amounts[1]),
            bootstrap=True,
        )

    if balances[0] == 0 or balances[1] == 0:
        raise InvalidReserveBalanceError(f"Cannot add liquidity to an empty reserve: {balances}")

    slot = binding_slot(balances, amounts)
    issued = fund_supply_amount(supply, balances[slot], amounts[slot])

    used = []
    for i in (Slot.FIRST, Slot.SECOND):
        required = fund_cost(supply, balances[i], issued)
        if required > amounts[i]:
            raise PoolInvariantError(
                f"required deposit {required} exceeds offered {amounts[i]} for slot {i.name}"
            )
        used.append(required)

    return AddLiquidityResult(
        issued=issued,
        used=(used[0], used[1]),
        new_balances=(balances[0] + used[0], balances[1] + used[1]),
        bootstrap=False,
    )


def compute_remove_liquidity(supply: Amount, balances: Pair, amount: Amount) -> RemoveLiquidityResult:
    """
    Compute per-reserve payouts for redeeming `amount` pool tokens.

    `supply` is the supply before the redeemed amount is burned.
    """
    _require_int("amount", amount)
    if amount <= 0:
        raise InvalidAmountError(f"Redeem amount must be positive: {amount}")
    if amount > supply:
        raise InvalidAmountError(f"Cannot redeem more than supply: {amount} > {supply}")

    payouts = (
        liquidate_reserve_amount(supply, balances[0], amount),
        liquidate_reserve_amount(supply, balances[1], amount),
    )
    return RemoveLiquidityResult(
        payouts=payouts,
        new_balances=(balances[0] - payouts[0], balances[1] - payouts[1]),
    )


def compute_fund(supply: Amount, balances: Pair, amount: Amount) -> FundResult:
    """Legacy funding: deposits owed by every reserve for `amount` new pool tokens."""
    _require_int("amount", amount)
    if amount <= 0:
        raise InvalidAmountError(f"Fund amount must be positive: {amount}")
    if supply <= 0:
        raise InvalidAmountError("Cannot fund a pool with no supply")

    required = (
        fund_cost(supply, balances[0], amount),
        fund_cost(supply, balances[1], amount),
    )
    return FundResult(
        required=required,
        new_balances=(balances[0] + required[0], balances[1] + required[1]),
    )


def compute_add_liquidity_cost(supply: Amount, balances: Pair, slot: Slot, reserve_amount: Amount) -> Pair:
    """
    Deposits of both reserves matching `reserve_amount` of `slot`'s reserve.

    The issuance is computed from the given reserve (floor), and each reserve's
    cost from that issuance (ceil), exactly as a steady-state deposit would.
    """
    if supply <= 0:
        raise InvalidAmountError("Liquidity cost is undefined for an empty pool")
    issued = fund_supply_amount(supply, balances[slot], reserve_amount)
    return fund_cost(supply, balances[0], issued), fund_cost(supply, balances[1], issued)
