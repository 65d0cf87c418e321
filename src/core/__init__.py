"""
Core pool algorithms
"""

from .cpmm import (
    PPM_RESOLUTION,
    calculate_fee,
    cross_reserve_target_amount,
    target_amount_and_fee,
)
from .math_ex import geometric_mean, reduced_ratio
from .oracle import (
    AVERAGE_RATE_PERIOD,
    AverageRate,
    RateState,
    calc_recent_average_rate,
    rate_state,
)
from .liquidity import (
    compute_add_liquidity,
    compute_fund,
    compute_remove_liquidity,
)
from .clock import Clock, ManualClock, SystemClock
from .config import PoolConfig
from .pool import RESERVE_WEIGHT_PPM, StandardPool

__all__ = [
    "PPM_RESOLUTION",
    "calculate_fee",
    "cross_reserve_target_amount",
    "target_amount_and_fee",
    "geometric_mean",
    "reduced_ratio",
    "AVERAGE_RATE_PERIOD",
    "AverageRate",
    "RateState",
    "calc_recent_average_rate",
    "rate_state",
    "compute_add_liquidity",
    "compute_fund",
    "compute_remove_liquidity",
    "Clock",
    "ManualClock",
    "SystemClock",
    "PoolConfig",
    "RESERVE_WEIGHT_PPM",
    "StandardPool",
]
