"""
Pool share token.

The share token is a mintable/burnable balance ledger whose issue/destroy
authority belongs exclusively to its owner. A pool becomes active only once it
owns its share token, so supply moves only through the pool's own issuance and
redemption steps.
"""

from __future__ import annotations

from typing import Dict

from ..errors import AccessDeniedError, InsufficientBalanceError
from .balances import Amount, AssetId, Holder


class PoolToken:
    """
    Share token balances plus a supply counter.

    Notes:
    - Balances are always non-negative; zero balances are omitted.
    - `total_supply` always equals the sum of balances.
    """

    def __init__(self, token_id: AssetId, owner: Holder) -> None:
        self._token_id = token_id
        self._owner = owner
        self._balances: Dict[Holder, Amount] = {}
        self._total_supply: Amount = 0

    @property
    def token_id(self) -> AssetId:
        return self._token_id

    @property
    def owner(self) -> Holder:
        return self._owner

    def total_supply(self) -> Amount:
        return self._total_supply

    def balance_of(self, holder: Holder) -> Amount:
        return self._balances.get(holder, 0)

    def transfer_ownership(self, caller: Holder, new_owner: Holder) -> None:
        self._only_owner(caller)
        self._owner = new_owner

    def issue(self, caller: Holder, to: Holder, amount: Amount) -> None:
        """Mint `amount` to `to`; only the owner may issue."""
        self._only_owner(caller)
        if amount < 0:
            raise ValueError(f"Issue amount must be non-negative: {amount}")
        self._set(to, self.balance_of(to) + amount)
        self._total_supply += amount

    def destroy(self, caller: Holder, holder: Holder, amount: Amount) -> None:
        """Burn `amount` from `holder`; only the owner may destroy."""
        self._only_owner(caller)
        if amount < 0:
            raise ValueError(f"Destroy amount must be non-negative: {amount}")
        current = self.balance_of(holder)
        if current < amount:
            raise InsufficientBalanceError(
                f"Insufficient pool token balance for {holder}: {current} < {amount}"
            )
        self._set(holder, current - amount)
        self._total_supply -= amount

    def transfer(self, sender: Holder, recipient: Holder, amount: Amount) -> None:
        if amount < 0:
            raise ValueError(f"Transfer amount must be non-negative: {amount}")
        current = self.balance_of(sender)
        if current < amount:
            raise InsufficientBalanceError(
                f"Insufficient pool token balance for {sender}: {current} < {amount}"
            )
        self._set(sender, current - amount)
        self._set(recipient, self.balance_of(recipient) + amount)

    def _only_owner(self, caller: Holder) -> None:
        if caller != self._owner:
            raise AccessDeniedError(f"{caller} is not the owner of pool token {self._token_id}")

    def _set(self, holder: Holder, amount: Amount) -> None:
        if amount == 0:
            self._balances.pop(holder, None)
        else:
            self._balances[holder] = amount

    def __repr__(self) -> str:
        return f"PoolToken({self._token_id}, supply={self._total_supply}, {len(self._balances)} holders)"
