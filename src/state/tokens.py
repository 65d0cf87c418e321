"""
Reserve token collaborators.

The pool consumes reserve tokens only through the narrow `ReserveToken`
protocol: read a holder's balance, push a transfer, pull a transfer that the
owner approved beforehand. Two in-memory implementations back it with a shared
`BalanceTable`:

- `LedgerToken`: fungible token with approvals.
- `NativeAsset`: the native value asset; transfers are direct value movements
  and there is no approval/pull path.
"""

from __future__ import annotations

from typing import Dict, Protocol, Tuple

from ..errors import InsufficientBalanceError
from .balances import NATIVE_ASSET, Amount, AssetId, BalanceTable, Holder


class ReserveToken(Protocol):
    """Protocol that reserve token collaborators must implement."""

    @property
    def token_id(self) -> AssetId: ...

    @property
    def is_native(self) -> bool: ...

    def balance_of(self, holder: Holder) -> Amount: ...

    def allowance(self, owner: Holder, spender: Holder) -> Amount: ...

    def approve(self, owner: Holder, spender: Holder, amount: Amount) -> None: ...

    def transfer(self, sender: Holder, recipient: Holder, amount: Amount) -> None: ...

    def transfer_from(self, spender: Holder, owner: Holder, recipient: Holder, amount: Amount) -> None: ...


def _require_amount(amount: Amount) -> None:
    if not isinstance(amount, int) or isinstance(amount, bool):
        raise TypeError("amount must be an int")
    if amount < 0:
        raise ValueError(f"amount must be non-negative: {amount}")


class LedgerToken:
    """Fungible token over a `BalanceTable`, with per-(owner, spender) allowances."""

    is_native = False

    def __init__(self, token_id: AssetId, ledger: BalanceTable) -> None:
        if token_id == NATIVE_ASSET:
            raise ValueError("token_id collides with the native asset id")
        self._token_id = token_id
        self._ledger = ledger
        self._allowances: Dict[Tuple[Holder, Holder], Amount] = {}

    @property
    def token_id(self) -> AssetId:
        return self._token_id

    def balance_of(self, holder: Holder) -> Amount:
        return self._ledger.get(holder, self._token_id)

    def total_supply(self) -> Amount:
        return self._ledger.total(self._token_id)

    def mint(self, holder: Holder, amount: Amount) -> None:
        _require_amount(amount)
        self._ledger.credit(holder, self._token_id, amount)

    def allowance(self, owner: Holder, spender: Holder) -> Amount:
        return self._allowances.get((owner, spender), 0)

    def approve(self, owner: Holder, spender: Holder, amount: Amount) -> None:
        _require_amount(amount)
        if amount == 0:
            self._allowances.pop((owner, spender), None)
        else:
            self._allowances[(owner, spender)] = amount

    def transfer(self, sender: Holder, recipient: Holder, amount: Amount) -> None:
        _require_amount(amount)
        self._ledger.move(sender, recipient, self._token_id, amount)

    def transfer_from(self, spender: Holder, owner: Holder, recipient: Holder, amount: Amount) -> None:
        _require_amount(amount)
        allowed = self.allowance(owner, spender)
        if allowed < amount:
            raise InsufficientBalanceError(
                f"Insufficient {self._token_id} allowance for {spender}: {allowed} < {amount}"
            )
        self._ledger.move(owner, recipient, self._token_id, amount)
        self.approve(owner, spender, allowed - amount)

    def __repr__(self) -> str:
        return f"LedgerToken({self._token_id})"


class NativeAsset:
    """Native value asset: a holder's balance is its own value balance."""

    is_native = True

    def __init__(self, ledger: BalanceTable) -> None:
        self._ledger = ledger

    @property
    def token_id(self) -> AssetId:
        return NATIVE_ASSET

    def balance_of(self, holder: Holder) -> Amount:
        return self._ledger.get(holder, NATIVE_ASSET)

    def mint(self, holder: Holder, amount: Amount) -> None:
        _require_amount(amount)
        self._ledger.credit(holder, NATIVE_ASSET, amount)

    def allowance(self, owner: Holder, spender: Holder) -> Amount:
        return 0

    def approve(self, owner: Holder, spender: Holder, amount: Amount) -> None:
        raise TypeError("native value has no approvals; attach it to the call instead")

    def transfer(self, sender: Holder, recipient: Holder, amount: Amount) -> None:
        _require_amount(amount)
        self._ledger.move(sender, recipient, NATIVE_ASSET, amount)

    def transfer_from(self, spender: Holder, owner: Holder, recipient: Holder, amount: Amount) -> None:
        raise TypeError("native value cannot be pulled; attach it to the call instead")

    def __repr__(self) -> str:
        return "NativeAsset()"
