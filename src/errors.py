"""Exception types for the two-reserve pool.

Recoverable errors derive from ``PoolError`` (a ``ValueError``), so callers
that only care about "bad input" can keep catching ``ValueError``. Internal
invariant breaks raise ``PoolInvariantError`` (an ``AssertionError``) and are
never expected under correct operation.
"""

from __future__ import annotations


class PoolError(ValueError):
    """Base class for all recoverable pool errors."""


class InvalidReserveError(PoolError):
    """Token is not a registered reserve, or the reserve set does not match."""


class InvalidReserveWeightError(PoolError):
    """Reserve weight differs from the fixed 50% share."""


class InvalidReserveBalanceError(PoolError):
    """A reserve balance used for pricing is zero."""


class InvalidAmountError(PoolError):
    """Zero/negative amount, or the received amount does not match the declared one."""


class SameSourceTargetError(PoolError):
    """Swap source token equals target token."""


class ZeroTargetAmountError(PoolError):
    """Computed output or payout rounds to zero or falls below the caller's minimum."""


class ReturnTooLowError(PoolError):
    """Computed pool-token issuance is below the caller's minimum."""


class BalanceOverflowError(PoolError):
    """A reserve balance would exceed the 128-bit lane capacity."""


class EthAmountMismatchError(PoolError):
    """Attached native value does not match the declared amount."""


class AccessDeniedError(PoolError):
    """Caller lacks the role required for a privileged path."""


class InactivePoolError(PoolError):
    """Operation requires an active pool."""


class InsufficientBalanceError(PoolError):
    """Ledger balance or allowance is too small for a transfer."""


class ReentrancyError(PoolError):
    """A mutating operation was entered while another one is in progress."""


class PoolInvariantError(AssertionError):
    """Raised when an internal invariant is violated (logic or configuration bug)."""
