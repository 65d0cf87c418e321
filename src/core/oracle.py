"""
Average-rate oracle kernel.

This module is intentionally small and pure:
- The functional core decides, from the previous committed average and the
  elapsed time, what the recent average rate is.
- The pool (imperative shell) samples the clock once per call, reads the
  reserve balances and persists the returned record.

The rate is "1 unit of reserve 0 expressed in reserve 1 units", i.e.
numerator = balance1 and denominator = balance0 at the time of the update.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Tuple

from ..state.reserves import MAX_UINT128, Slot
from .math_ex import reduced_ratio


AVERAGE_RATE_PERIOD = 10 * 60
MAX_RATE_FACTOR_LOWER_BOUND = 10**30


@dataclass(frozen=True)
class AverageRate:
    """Last committed average rate and its update timestamp. All-zero means never computed."""

    numerator: int = 0
    denominator: int = 0
    last_update_time: int = 0

    def __post_init__(self) -> None:
        for name, v in (
            ("numerator", self.numerator),
            ("denominator", self.denominator),
            ("last_update_time", self.last_update_time),
        ):
            if not isinstance(v, int) or isinstance(v, bool):
                raise TypeError(f"{name} must be an int")
            if v < 0:
                raise ValueError(f"{name} must be non-negative: {v}")
        if self.numerator > MAX_UINT128 or self.denominator > MAX_UINT128:
            raise ValueError(f"rate elements must fit in 128 bits: ({self.numerator}, {self.denominator})")

    @property
    def is_zero(self) -> bool:
        return self.numerator == 0 and self.denominator == 0 and self.last_update_time == 0


class RateState(Enum):
    COLD = "COLD"
    FRESH = "FRESH"
    DECAYING = "DECAYING"
    EXPIRED = "EXPIRED"


def rate_state(prev: AverageRate, now: int, period: int = AVERAGE_RATE_PERIOD) -> RateState:
    """Classify the previous average relative to the current time."""
    if prev.is_zero:
        return RateState.COLD
    elapsed = now - prev.last_update_time
    if elapsed < 0:
        raise ValueError(f"clock moved backwards: {now} < {prev.last_update_time}")
    if elapsed == 0:
        return RateState.FRESH
    if elapsed >= period:
        return RateState.EXPIRED
    return RateState.DECAYING


def calc_recent_average_rate(
    prev: AverageRate,
    balance0: int,
    balance1: int,
    now: int,
    *,
    period: int = AVERAGE_RATE_PERIOD,
    max_rate_factor: int = MAX_RATE_FACTOR_LOWER_BOUND,
) -> AverageRate:
    """
    Return the average rate as of `now`, given the spot balances before any change.

    Regimes:
        COLD / EXPIRED: adopt the spot rate (balance1 / balance0) as is.
        FRESH:          return `prev` unchanged (at most one update per time step).
        DECAYING:       linear time-weighted blend of prev and spot, reduced so
                        neither element exceeds `max_rate_factor`:
            newN = prevN * spotD * (period - elapsed) + prevD * spotN * elapsed
            newD = prevD * spotD * period

    A spot rate with a zero balance is undefined; the oracle then returns to
    the cold (all-zero) record so the next funded state is adopted directly.
    """
    if period <= 0:
        raise ValueError(f"period must be positive: {period}")
    if now < 0:
        raise ValueError(f"now must be non-negative: {now}")

    state = rate_state(prev, now, period)
    if state == RateState.FRESH:
        return prev

    spot_n, spot_d = balance1, balance0
    if spot_n == 0 or spot_d == 0:
        return AverageRate()

    if state in (RateState.COLD, RateState.EXPIRED):
        return AverageRate(numerator=spot_n, denominator=spot_d, last_update_time=now)

    elapsed = now - prev.last_update_time
    new_n = prev.numerator * spot_d * (period - elapsed) + prev.denominator * spot_n * elapsed
    new_d = prev.denominator * spot_d * period
    new_n, new_d = reduced_ratio(new_n, new_d, max_rate_factor)
    return AverageRate(numerator=new_n, denominator=new_d, last_update_time=now)


def oriented_rate(rate: AverageRate, slot: Slot) -> Tuple[int, int]:
    """Express the rate as "1 unit of `slot`'s reserve in the other reserve's units"."""
    if Slot(slot) is Slot.FIRST:
        return rate.numerator, rate.denominator
    return rate.denominator, rate.numerator
