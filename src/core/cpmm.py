"""
Constant Product Market Maker (CPMM) pricing for a 50/50 two-reserve pool.

This module implements the stateless swap formula and the conversion fee with
deterministic integer rounding.

Algorithm Design:
- Type: Fixed-Point Integer Arithmetic / Deterministic Rounding
- Time Complexity: O(1) per quote
- Space Complexity: O(1) auxiliary
- Invariant: output < target balance for every positive input (the pool is
  never fully drained), and net output + fee == gross output.
- Fees are always deducted from the target (output) side.
"""

from typing import Tuple

from ..errors import InvalidReserveBalanceError
from ..state.balances import Amount

# Parts-per-million resolution for fees and weights (1_000_000 == 100%)
PPM_RESOLUTION = 1_000_000


def cross_reserve_target_amount(
    source_balance: Amount,
    target_balance: Amount,
    amount: Amount,
) -> Amount:
    """
    Compute the gross target amount for converting `amount` of the source reserve.

    With equal weights the general weighted-reserve formula collapses to the constant
    product rule:
        target_amount = floor(target_balance * amount / (source_balance + amount))

    Args:
        source_balance: Current balance of the source reserve
        target_balance: Current balance of the target reserve
        amount: Source amount being converted

    Returns:
        Gross target amount (before fee)

    Raises:
        InvalidReserveBalanceError: If either balance is zero
        ValueError: If any input is negative
    """
    if source_balance < 0 or target_balance < 0:
        raise ValueError(f"Reserves must be non-negative: ({source_balance}, {target_balance})")
    if amount < 0:
        raise ValueError(f"amount must be non-negative: {amount}")
    if source_balance == 0 or target_balance == 0:
        raise InvalidReserveBalanceError(
            f"Reserve balances must be positive: ({source_balance}, {target_balance})"
        )

    return (target_balance * amount) // (source_balance + amount)


def calculate_fee(gross_amount: Amount, fee_ppm: int) -> Amount:
    """
    Deterministic fee computation (floor rounding).

        fee = floor(gross_amount * fee_ppm / 1_000_000)
    """
    if gross_amount < 0:
        raise ValueError(f"gross_amount must be non-negative: {gross_amount}")
    if not (0 <= fee_ppm <= PPM_RESOLUTION):
        raise ValueError(f"fee_ppm must be in [0, {PPM_RESOLUTION}]: {fee_ppm}")
    return (gross_amount * fee_ppm) // PPM_RESOLUTION


def target_amount_and_fee(
    source_balance: Amount,
    target_balance: Amount,
    amount: Amount,
    fee_ppm: int,
) -> Tuple[Amount, Amount]:
    """
    Quote a conversion: returns (net_target_amount, fee).

    The gross amount is split so that net + fee == gross exactly.
    """
    gross = cross_reserve_target_amount(source_balance, target_balance, amount)
    fee = calculate_fee(gross, fee_ppm)
    return gross - fee, fee
