"""
Multi-asset holder ledger.

Implements BalanceTable[Holder, AssetId] -> Amount, the ground truth that the
token collaborators read and move. Pools never write it directly; they only
observe it through `balance_of` and move value through token transfers.
"""

from typing import Dict, Tuple

from ..errors import InsufficientBalanceError


# Type aliases
Holder = str  # account or pool address
AssetId = str  # token identifier
Amount = int  # Non-negative integer (arbitrary precision)

# Native asset identifier (value moved directly, no approvals)
NATIVE_ASSET = "0x" + "ee" * 20


class BalanceTable:
    """
    Balance table mapping (holder, asset) -> amount.

    Zero balances are omitted so the table stays sparse.
    """

    def __init__(self):
        self._balances: Dict[Tuple[Holder, AssetId], Amount] = {}

    def get(self, holder: Holder, asset: AssetId) -> Amount:
        """Get balance for (holder, asset). Returns 0 if not found."""
        return self._balances.get((holder, asset), 0)

    def set(self, holder: Holder, asset: AssetId, amount: Amount) -> None:
        """
        Set balance for (holder, asset).

        Raises:
            ValueError: If amount is negative
        """
        if amount < 0:
            raise ValueError(f"Balance cannot be negative: {amount}")
        if amount == 0:
            self._balances.pop((holder, asset), None)
        else:
            self._balances[(holder, asset)] = amount

    def credit(self, holder: Holder, asset: AssetId, amount: Amount) -> None:
        if amount < 0:
            raise ValueError(f"Credit must be non-negative: {amount}")
        self.set(holder, asset, self.get(holder, asset) + amount)

    def debit(self, holder: Holder, asset: AssetId, amount: Amount) -> None:
        """
        Remove `amount` from (holder, asset).

        Raises:
            InsufficientBalanceError: If the balance is smaller than `amount`
        """
        if amount < 0:
            raise ValueError(f"Debit must be non-negative: {amount}")
        current = self.get(holder, asset)
        if current < amount:
            raise InsufficientBalanceError(
                f"Insufficient {asset} balance for {holder}: {current} < {amount}"
            )
        self.set(holder, asset, current - amount)

    def move(self, sender: Holder, recipient: Holder, asset: AssetId, amount: Amount) -> None:
        """Move `amount` of `asset` from sender to recipient (debit first)."""
        self.debit(sender, asset, amount)
        self.credit(recipient, asset, amount)

    def total(self, asset: AssetId) -> Amount:
        """Sum of all holders' balances of `asset`."""
        return sum(amount for (_, a), amount in self._balances.items() if a == asset)

    def get_all_balances(self) -> Dict[Tuple[Holder, AssetId], Amount]:
        return dict(self._balances)

    def __repr__(self) -> str:
        return f"BalanceTable({len(self._balances)} entries)"
