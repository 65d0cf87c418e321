"""
Integer rational helpers (deterministic, integer-only).

Two concerns live here:
- exact integer roots, used for the geometric-mean bootstrap of pool supply;
- ratio normalization, used to keep the average-rate numerator/denominator
  bounded while preserving the ratio to within one unit of the scale.
"""

from __future__ import annotations

import math
from typing import Sequence, Tuple


def _require_int(name: str, value: int) -> None:
    if not isinstance(value, int) or isinstance(value, bool):
        raise TypeError(f"{name} must be an int")


def round_div(numerator: int, denominator: int) -> int:
    """Return `numerator / denominator` rounded half-up (non-negative inputs)."""
    if denominator <= 0:
        raise ValueError("denominator must be positive")
    if numerator < 0:
        raise ValueError("numerator must be non-negative")
    return (numerator + denominator // 2) // denominator


def ceil_div(numerator: int, denominator: int) -> int:
    if denominator <= 0:
        raise ValueError("denominator must be positive")
    if numerator < 0:
        raise ValueError("numerator must be non-negative")
    return (numerator + denominator - 1) // denominator


def integer_root(value: int, n: int) -> int:
    """
    Return floor(value ** (1/n)) exactly.

    Uses `math.isqrt` for square roots and integer Newton iteration otherwise,
    so the result never suffers from float precision loss.
    """
    _require_int("value", value)
    _require_int("n", n)
    if value < 0:
        raise ValueError(f"value must be non-negative: {value}")
    if n <= 0:
        raise ValueError(f"n must be positive: {n}")
    if n == 1 or value < 2:
        return value
    if n == 2:
        return math.isqrt(value)

    # Initial guess above the root: 2^ceil(bits/n).
    x = 1 << -(-value.bit_length() // n)
    while True:
        y = ((n - 1) * x + value // x ** (n - 1)) // n
        if y >= x:
            break
        x = y
    while x ** n > value:
        x -= 1
    while (x + 1) ** n <= value:
        x += 1
    return x


def geometric_mean(values: Sequence[int]) -> int:
    """
    Integer geometric mean of N positive integers.

    Formula:
        floor((v_1 * v_2 * ... * v_N) ** (1/N))
    """
    if not values:
        raise ValueError("geometric_mean requires at least one value")
    product = 1
    for i, v in enumerate(values):
        _require_int(f"values[{i}]", v)
        if v <= 0:
            raise ValueError(f"values must be positive: {v}")
        product *= v
    return integer_root(product, len(values))


def accurate_ratio(a: int, b: int, scale: int) -> Tuple[int, int]:
    """
    Compute (x, y) with x + y == scale and x / y ~= a / b.

    Precondition: a <= b (the smaller element is scaled so x is rounded first).
    """
    if a == b:
        # Allows reduction to (1, 1) in the caller.
        return scale // 2, scale // 2
    x = round_div(a * scale, a + b)
    return x, scale - x


def normalized_ratio(a: int, b: int, scale: int) -> Tuple[int, int]:
    """Scale the ratio a:b so that both elements sum to `scale`."""
    if a <= b:
        return accurate_ratio(a, b, scale)
    y, x = accurate_ratio(b, a, scale)
    return x, y


def reduced_ratio(n: int, d: int, max_value: int) -> Tuple[int, int]:
    """
    Reduce n:d so that neither element exceeds `max_value`.

    Ratios already within bounds are returned unchanged; an equal pair
    collapses to (1, 1).
    """
    for name, v in (("n", n), ("d", d), ("max_value", max_value)):
        _require_int(name, v)
    if n < 0 or d < 0:
        raise ValueError(f"ratio elements must be non-negative: ({n}, {d})")
    if max_value <= 0:
        raise ValueError(f"max_value must be positive: {max_value}")

    if n > max_value or d > max_value:
        n, d = normalized_ratio(n, d, max_value)
    if n != d:
        return n, d
    return 1, 1
