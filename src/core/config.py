"""
Pool configuration.

Values are fixed at pool construction; changing the fee afterwards is not
supported. `PoolConfig.from_env()` builds a config from `AMM_*` environment
variables with clamped integer parsing.
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from ..state.reserves import MAX_UINT128
from .cpmm import PPM_RESOLUTION
from .oracle import AVERAGE_RATE_PERIOD, MAX_RATE_FACTOR_LOWER_BOUND


def _env_int(name: str, default: int, *, lo: int, hi: int) -> int:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return int(default)
    try:
        v = int(raw.strip())
    except ValueError:
        return int(default)
    if v < lo:
        return int(lo)
    if v > hi:
        return int(hi)
    return int(v)


@dataclass(frozen=True)
class PoolConfig:
    """Runtime config for a two-reserve pool."""

    conversion_fee_ppm: int = 0
    max_conversion_fee_ppm: int = PPM_RESOLUTION

    # Average-rate oracle: full-decay period (seconds) and ratio magnitude bound.
    average_rate_period: int = AVERAGE_RATE_PERIOD
    rate_factor_lower_bound: int = MAX_RATE_FACTOR_LOWER_BOUND

    def __post_init__(self) -> None:
        for name, v in (
            ("conversion_fee_ppm", self.conversion_fee_ppm),
            ("max_conversion_fee_ppm", self.max_conversion_fee_ppm),
            ("average_rate_period", self.average_rate_period),
            ("rate_factor_lower_bound", self.rate_factor_lower_bound),
        ):
            if not isinstance(v, int) or isinstance(v, bool):
                raise TypeError(f"{name} must be an int")
        if not (0 <= self.max_conversion_fee_ppm <= PPM_RESOLUTION):
            raise ValueError(
                f"max_conversion_fee_ppm must be in [0, {PPM_RESOLUTION}]: {self.max_conversion_fee_ppm}"
            )
        if not (0 <= self.conversion_fee_ppm <= self.max_conversion_fee_ppm):
            raise ValueError(
                f"conversion_fee_ppm must be in [0, {self.max_conversion_fee_ppm}]: {self.conversion_fee_ppm}"
            )
        if self.average_rate_period <= 0:
            raise ValueError(f"average_rate_period must be positive: {self.average_rate_period}")
        if not (0 < self.rate_factor_lower_bound <= MAX_UINT128):
            raise ValueError(f"rate_factor_lower_bound must be in (0, 2**128): {self.rate_factor_lower_bound}")

    @classmethod
    def from_env(cls, prefix: str = "AMM_") -> "PoolConfig":
        max_fee = _env_int(f"{prefix}MAX_CONVERSION_FEE_PPM", PPM_RESOLUTION, lo=0, hi=PPM_RESOLUTION)
        return cls(
            conversion_fee_ppm=_env_int(f"{prefix}CONVERSION_FEE_PPM", 0, lo=0, hi=max_fee),
            max_conversion_fee_ppm=max_fee,
            average_rate_period=_env_int(
                f"{prefix}AVERAGE_RATE_PERIOD", AVERAGE_RATE_PERIOD, lo=1, hi=365 * 24 * 3600
            ),
        )
