"""Per-pool reentrancy lock for mutating operations."""

from __future__ import annotations

from ..errors import ReentrancyError


class ReentrancyGuard:
    """
    Execution-context flag set on entry and cleared on exit.

    Usage:
        with guard:
            ...  # token transfers here cannot re-enter another mutating call
    """

    def __init__(self) -> None:
        self._locked: bool = False

    @property
    def locked(self) -> bool:
        return self._locked

    def __enter__(self) -> "ReentrancyGuard":
        if self._locked:
            raise ReentrancyError("Reentrancy detected: pool is locked")
        self._locked = True
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self._locked = False
