"""
Two-reserve, equal-weight liquidity pool (imperative shell).

`StandardPool` owns the two reserve slots, the average-rate record and the
authority over its pool token. It wires the pure kernels together:
- `cpmm` prices conversions,
- `oracle` keeps the time-weighted average rate,
- `liquidity` sizes deposits, issuance and payouts.

Every mutating operation runs as one atomic unit under a reentrancy lock: the
clock is sampled once, pool-owned state is snapshotted, every token, allowance
and pool-token movement is journalled, and any exception restores the
snapshot, reverses the journal and propagates unchanged.

Effect ordering inside an operation:
    receive attached value -> sync balances -> compute -> pull deposits
    -> update reserves / pool-token supply -> push payouts and refunds
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Callable, Dict, Iterator, List, Optional, Sequence, Tuple

from ..errors import (
    AccessDeniedError,
    EthAmountMismatchError,
    InactivePoolError,
    InvalidAmountError,
    InvalidReserveError,
    InvalidReserveWeightError,
    PoolInvariantError,
    ReturnTooLowError,
    SameSourceTargetError,
    ZeroTargetAmountError,
)
from ..state.balances import Amount, AssetId, Holder
from ..state.lp import PoolToken
from ..state.reserves import ReserveBalances, Slot
from ..state.tokens import ReserveToken
from .clock import Clock, SystemClock
from .config import PoolConfig
from .cpmm import PPM_RESOLUTION, target_amount_and_fee
from .liquidity import (
    Pair,
    compute_add_liquidity,
    compute_add_liquidity_cost,
    compute_fund,
    compute_remove_liquidity,
    resolve_reserve_amounts,
    resolve_reserve_slots,
)
from .oracle import AverageRate, calc_recent_average_rate, oriented_rate
from .reentrancy import ReentrancyGuard

logger = logging.getLogger(__name__)

RESERVE_WEIGHT_PPM = PPM_RESOLUTION // 2


def _require_amount(name: str, value: Amount) -> None:
    if not isinstance(value, int) or isinstance(value, bool):
        raise TypeError(f"{name} must be an int")
    if value < 0:
        raise InvalidAmountError(f"{name} must be non-negative: {value}")


class _Journal:
    """Undo log for token and pool-token movements made inside one operation."""

    def __init__(self) -> None:
        self._undo: List[Callable[[], None]] = []

    def record(self, undo: Callable[[], None]) -> None:
        self._undo.append(undo)

    def rollback(self) -> None:
        while self._undo:
            self._undo.pop()()


class StandardPool:
    """
    Pricing and liquidity accounting for exactly two reserves at 50/50 weight.

    Args:
        address: Holder identity of the pool in the token ledgers
        pool_token: Share token; the pool must own it before it becomes active
        owner: Identity allowed to register reserves
        router: The only identity allowed to call `convert`
        config: Fee and oracle parameters
        clock: Time source, sampled once per call
    """

    def __init__(
        self,
        *,
        address: Holder,
        pool_token: PoolToken,
        owner: Holder,
        router: Holder,
        config: Optional[PoolConfig] = None,
        clock: Optional[Clock] = None,
    ) -> None:
        self.address = address
        self.pool_token = pool_token
        self.owner = owner
        self.router = router
        self.config = config if config is not None else PoolConfig()
        self.clock = clock if clock is not None else SystemClock()

        self._reserve_tokens: List[ReserveToken] = []
        self._reserve_ids: Dict[AssetId, Slot] = {}
        self._reserves = ReserveBalances()
        self._average_rate = AverageRate()
        self._guard = ReentrancyGuard()

    # -- Setup --------------------------------------------------------------

    def add_reserve(self, caller: Holder, token: ReserveToken, weight_ppm: int = RESERVE_WEIGHT_PPM) -> Slot:
        """Register a reserve token (owner only, before activation)."""
        if caller != self.owner:
            raise AccessDeniedError(f"{caller} is not the pool owner")
        if len(self._reserve_tokens) >= len(Slot):
            raise InvalidReserveError(f"Pool already has {len(Slot)} reserves")
        if token.token_id in self._reserve_ids or token.token_id == self.pool_token.token_id:
            raise InvalidReserveError(f"Invalid reserve token {token.token_id}")
        if weight_ppm != RESERVE_WEIGHT_PPM:
            raise InvalidReserveWeightError(f"Reserve weight must be {RESERVE_WEIGHT_PPM} ppm: {weight_ppm}")

        slot = Slot(len(self._reserve_tokens))
        self._reserve_tokens.append(token)
        self._reserve_ids[token.token_id] = slot
        logger.info("reserve %s registered in slot %s of pool %s", token.token_id, slot.name, self.address)
        return slot

    def is_active(self) -> bool:
        return len(self._reserve_tokens) == len(Slot) and self.pool_token.owner == self.address

    # -- Read-only views ----------------------------------------------------

    @property
    def reserve_tokens(self) -> Tuple[AssetId, ...]:
        return tuple(token.token_id for token in self._reserve_tokens)

    @property
    def conversion_fee(self) -> int:
        return self.config.conversion_fee_ppm

    @property
    def average_rate_info(self) -> AverageRate:
        """The last committed average-rate record."""
        return self._average_rate

    def reserve_weight(self, token: AssetId) -> int:
        self._slot(token)
        return RESERVE_WEIGHT_PPM

    def reserve_balance(self, token: AssetId) -> Amount:
        return self._reserves.get(self._slot(token))

    def reserve_balances(self) -> Pair:
        return self._reserves.get_both()

    def target_amount_and_fee(self, source_token: AssetId, target_token: AssetId, amount: Amount) -> Tuple[Amount, Amount]:
        """Quote a conversion against the stored balances: (net target amount, fee)."""
        if source_token == target_token:
            raise SameSourceTargetError(f"Source and target are the same token: {source_token}")
        source_slot = self._slot(source_token)
        target_slot = self._slot(target_token)
        _require_amount("amount", amount)
        return target_amount_and_fee(
            self._reserves.get(source_slot),
            self._reserves.get(target_slot),
            amount,
            self.config.conversion_fee_ppm,
        )

    def recent_average_rate(self, token: AssetId) -> Tuple[int, int]:
        """
        Average rate of 1 unit of `token` in the other reserve's units, as of now.

        Computes what the next conversion would commit, without committing it.
        """
        slot = self._slot(token)
        rate = self._calc_recent_average_rate(self.clock.now())
        return oriented_rate(rate, slot)

    def add_liquidity_cost(
        self,
        tokens: Sequence[AssetId],
        reserve_token_index: int,
        reserve_amount: Amount,
    ) -> List[Amount]:
        """Deposits of every reserve (in `tokens` order) matching `reserve_amount` of `tokens[reserve_token_index]`."""
        slots = resolve_reserve_slots(self.reserve_tokens, tokens)
        if not (0 <= reserve_token_index < len(slots)):
            raise InvalidReserveError(f"reserve_token_index out of range: {reserve_token_index}")
        _require_amount("reserve_amount", reserve_amount)
        costs = compute_add_liquidity_cost(
            self.pool_token.total_supply(),
            self._reserves.get_both(),
            slots[reserve_token_index],
            reserve_amount,
        )
        return [costs[slot] for slot in slots]

    def add_liquidity_return(self, tokens: Sequence[AssetId], amounts: Sequence[Amount]) -> Amount:
        """Pool tokens an `add_liquidity` with these amounts would issue."""
        by_slot = resolve_reserve_amounts(self.reserve_tokens, tokens, amounts)
        result = compute_add_liquidity(self.pool_token.total_supply(), self._reserves.get_both(), by_slot)
        return result.issued

    def remove_liquidity_return(self, amount: Amount, tokens: Sequence[AssetId]) -> List[Amount]:
        """Payouts (in `tokens` order) a `remove_liquidity` of `amount` would return."""
        slots = resolve_reserve_slots(self.reserve_tokens, tokens)
        result = compute_remove_liquidity(self.pool_token.total_supply(), self._reserves.get_both(), amount)
        return [result.payouts[slot] for slot in slots]

    # -- Conversion ---------------------------------------------------------

    def convert(
        self,
        caller: Holder,
        source_token: AssetId,
        target_token: AssetId,
        amount: Amount,
        trader: Holder,
        beneficiary: Holder,
        *,
        value: Amount = 0,
    ) -> Amount:
        """
        Convert `amount` of the source reserve into the target reserve.

        The router must have moved `amount` source tokens to the pool before the
        call (or attach it as `value` for the native reserve). The average rate
        is refreshed from the balances before the conversion.

        Returns:
            Net target amount sent to `beneficiary`
        """
        if caller != self.router:
            raise AccessDeniedError(f"{caller} is not the designated router")

        with self._operation("convert") as journal:
            self._require_active()
            if source_token == target_token:
                raise SameSourceTargetError(f"Source and target are the same token: {source_token}")
            source_slot = self._slot(source_token)
            target_slot = self._slot(target_token)
            _require_amount("amount", amount)
            _require_amount("value", value)
            if amount == 0:
                raise InvalidAmountError("Conversion amount must be positive")

            source = self._reserve_tokens[source_slot]
            target = self._reserve_tokens[target_slot]
            if source.is_native:
                if value != amount:
                    raise EthAmountMismatchError(f"Attached value {value} != amount {amount}")
            elif value != 0:
                raise InvalidAmountError(f"Unexpected attached value {value} for a non-native source")

            now = self.clock.now()
            self._receive_value(journal, caller, value)
            self._average_rate = self._calc_recent_average_rate(now)

            source_balance = self._reserves.get(source_slot)
            target_balance = self._reserves.get(target_slot)
            target_amount, fee = target_amount_and_fee(
                source_balance, target_balance, amount, self.config.conversion_fee_ppm
            )
            if target_amount == 0:
                raise ZeroTargetAmountError("Conversion returns zero target amount")
            if target_amount >= target_balance:
                raise PoolInvariantError(
                    f"target amount {target_amount} would drain reserve balance {target_balance}"
                )

            actual_source_balance = source.balance_of(self.address)
            if not source.is_native and actual_source_balance - source_balance < amount:
                raise InvalidAmountError(
                    f"Source amount not received: {actual_source_balance - source_balance} < {amount}"
                )

            new_target_balance = target_balance - target_amount
            self._set_balances({source_slot: actual_source_balance, target_slot: new_target_balance})
            self._push(journal, target, beneficiary, target_amount)

            logger.info(
                "conversion %s -> %s by %s: amount=%d return=%d fee=%d",
                source_token, target_token, trader, amount, target_amount, fee,
            )
            logger.debug(
                "token rate update: 1 %s = %d/%d %s",
                source_token, new_target_balance, actual_source_balance, target_token,
            )
            return target_amount

    # -- Proportional liquidity ---------------------------------------------

    def add_liquidity(
        self,
        caller: Holder,
        tokens: Sequence[AssetId],
        amounts: Sequence[Amount],
        min_return: Amount,
        *,
        value: Amount = 0,
    ) -> Amount:
        """
        Deposit both reserves and receive pool tokens.

        Only the amounts required by the issuance are pulled from the caller;
        attached native value beyond its requirement is refunded.

        Returns:
            Pool tokens issued to `caller`
        """
        with self._operation("add_liquidity") as journal:
            self._require_active()
            offered = resolve_reserve_amounts(self.reserve_tokens, tokens, amounts)
            _require_amount("min_return", min_return)
            _require_amount("value", value)
            self._check_attached_value(offered, value)
            self._receive_value(journal, caller, value)

            supply = self.pool_token.total_supply()
            balances = self._sync_reserve_balances(value) if supply > 0 else (0, 0)
            result = compute_add_liquidity(supply, balances, offered)
            if result.issued == 0 or result.issued < min_return:
                raise ReturnTooLowError(f"Issuance {result.issued} below minimum {min_return}")

            for slot, token in enumerate(self._reserve_tokens):
                if not token.is_native:
                    self._pull(journal, token, caller, result.used[slot])
            self._reserves.set_both(*result.new_balances)
            self._issue(journal, caller, result.issued)
            self._refund_native(journal, caller, offered, result.used)

            logger.info(
                "liquidity added by %s: deposits=%s issued=%d supply=%d%s",
                caller, result.used, result.issued, supply + result.issued,
                " (bootstrap)" if result.bootstrap else "",
            )
            return result.issued

    def remove_liquidity(
        self,
        caller: Holder,
        amount: Amount,
        tokens: Sequence[AssetId],
        min_return_amounts: Sequence[Amount],
    ) -> List[Amount]:
        """
        Redeem `amount` pool tokens for a proportional share of both reserves.

        Returns:
            Payouts in `tokens` order
        """
        with self._operation("remove_liquidity") as journal:
            self._require_active()
            slots = resolve_reserve_slots(self.reserve_tokens, tokens)
            minimums = resolve_reserve_amounts(self.reserve_tokens, tokens, min_return_amounts)
            result = self._redeem(journal, caller, amount, minimums)
            return [result[slot] for slot in slots]

    # -- Legacy equal-weighted liquidity ------------------------------------

    def fund(self, caller: Holder, amount: Amount, *, value: Amount = 0) -> Amount:
        """
        Issue exactly `amount` pool tokens, pulling the matching deposit of every reserve.

        Returns:
            The issued amount
        """
        with self._operation("fund") as journal:
            self._require_active()
            _require_amount("amount", amount)
            _require_amount("value", value)
            native_slot = self._native_slot()
            if native_slot is None and value != 0:
                raise EthAmountMismatchError(f"Pool has no native reserve; attached value {value}")
            self._receive_value(journal, caller, value)

            balances = self._sync_reserve_balances(value)
            supply = self.pool_token.total_supply()
            result = compute_fund(supply, balances, amount)

            if native_slot is not None and value < result.required[native_slot]:
                raise EthAmountMismatchError(
                    f"Attached value {value} below required {result.required[native_slot]}"
                )
            for slot, token in enumerate(self._reserve_tokens):
                if not token.is_native:
                    self._pull(journal, token, caller, result.required[slot])
            self._reserves.set_both(*result.new_balances)
            self._issue(journal, caller, amount)
            if native_slot is not None:
                self._refund_native(
                    journal, caller, self._offered_native(native_slot, value), result.required
                )

            logger.info("pool funded by %s: deposits=%s issued=%d", caller, result.required, amount)
            return amount

    def liquidate(self, caller: Holder, amount: Amount) -> List[Amount]:
        """
        Redeem `amount` pool tokens for both reserves (each payout must be non-zero).

        Returns:
            Payouts in reserve slot order
        """
        with self._operation("liquidate") as journal:
            self._require_active()
            result = self._redeem(journal, caller, amount, (1, 1))
            return [result[0], result[1]]

    # -- Maintenance --------------------------------------------------------

    def sync_reserve_balances(self) -> Pair:
        """Re-read both reserve balances from the token ledgers."""
        with self._operation("sync_reserve_balances"):
            self._require_active()
            return self._sync_reserve_balances()

    # -- Internals ----------------------------------------------------------

    @contextmanager
    def _operation(self, name: str) -> Iterator[_Journal]:
        with self._guard:
            reserves = self._reserves.copy()
            average_rate = self._average_rate
            journal = _Journal()
            try:
                yield journal
            except Exception:
                self._reserves = reserves
                self._average_rate = average_rate
                journal.rollback()
                logger.debug("%s aborted on pool %s; state restored", name, self.address)
                raise

    def _redeem(self, journal: _Journal, caller: Holder, amount: Amount, minimums: Pair) -> Pair:
        _require_amount("amount", amount)
        balances = self._sync_reserve_balances()
        supply = self.pool_token.total_supply()
        if amount == 0:
            raise InvalidAmountError("Redeem amount must be positive")
        if amount > supply:
            raise InvalidAmountError(f"Cannot redeem more than supply: {amount} > {supply}")

        self.pool_token.destroy(self.address, caller, amount)
        journal.record(lambda: self.pool_token.issue(self.address, caller, amount))

        result = compute_remove_liquidity(supply, balances, amount)
        for slot in Slot:
            if result.payouts[slot] < minimums[slot]:
                raise ZeroTargetAmountError(
                    f"Payout {result.payouts[slot]} below minimum {minimums[slot]} for slot {slot.name}"
                )

        self._reserves.set_both(*result.new_balances)
        for slot, token in enumerate(self._reserve_tokens):
            self._push(journal, token, caller, result.payouts[slot])

        logger.info(
            "liquidity removed by %s: redeemed=%d payouts=%s supply=%d",
            caller, amount, result.payouts, supply - amount,
        )
        return result.payouts

    def _calc_recent_average_rate(self, now: int) -> AverageRate:
        balance0, balance1 = self._reserves.get_both()
        return calc_recent_average_rate(
            self._average_rate,
            balance0,
            balance1,
            now,
            period=self.config.average_rate_period,
            max_rate_factor=self.config.rate_factor_lower_bound,
        )

    def _sync_reserve_balances(self, value: Amount = 0) -> Pair:
        balances = []
        for token in self._reserve_tokens:
            balance = token.balance_of(self.address)
            if token.is_native:
                balance -= value
            balances.append(balance)
        self._reserves.set_both(balances[0], balances[1])
        return balances[0], balances[1]

    def _set_balances(self, by_slot: Dict[Slot, Amount]) -> None:
        current = list(self._reserves.get_both())
        for slot, balance in by_slot.items():
            current[slot] = balance
        self._reserves.set_both(current[0], current[1])

    def _slot(self, token: AssetId) -> Slot:
        try:
            return self._reserve_ids[token]
        except KeyError:
            raise InvalidReserveError(f"Token {token} is not a reserve of this pool") from None

    def _native_slot(self) -> Optional[Slot]:
        for slot, token in enumerate(self._reserve_tokens):
            if token.is_native:
                return Slot(slot)
        return None

    def _offered_native(self, native_slot: Slot, value: Amount) -> Pair:
        offered = [0, 0]
        offered[native_slot] = value
        return offered[0], offered[1]

    def _check_attached_value(self, offered: Pair, value: Amount) -> None:
        native_slot = self._native_slot()
        expected = 0 if native_slot is None else offered[native_slot]
        if value != expected:
            raise EthAmountMismatchError(f"Attached value {value} != native deposit {expected}")

    def _receive_value(self, journal: _Journal, sender: Holder, value: Amount) -> None:
        if value == 0:
            return
        native_slot = self._native_slot()
        if native_slot is None:
            raise EthAmountMismatchError(f"Pool has no native reserve; attached value {value}")
        native = self._reserve_tokens[native_slot]
        native.transfer(sender, self.address, value)
        journal.record(lambda: native.transfer(self.address, sender, value))

    def _pull(self, journal: _Journal, token: ReserveToken, sender: Holder, amount: Amount) -> None:
        if amount == 0:
            return
        allowance = token.allowance(sender, self.address)
        token.transfer_from(self.address, sender, self.address, amount)

        def undo() -> None:
            token.transfer(self.address, sender, amount)
            token.approve(sender, self.address, allowance)

        journal.record(undo)

    def _push(self, journal: _Journal, token: ReserveToken, recipient: Holder, amount: Amount) -> None:
        if amount == 0:
            return
        token.transfer(self.address, recipient, amount)
        journal.record(lambda: token.transfer(recipient, self.address, amount))

    def _issue(self, journal: _Journal, holder: Holder, amount: Amount) -> None:
        self.pool_token.issue(self.address, holder, amount)
        journal.record(lambda: self.pool_token.destroy(self.address, holder, amount))

    def _refund_native(self, journal: _Journal, recipient: Holder, offered: Pair, used: Pair) -> None:
        native_slot = self._native_slot()
        if native_slot is None:
            return
        excess = offered[native_slot] - used[native_slot]
        if excess > 0:
            self._push(journal, self._reserve_tokens[native_slot], recipient, excess)

    def _require_active(self) -> None:
        if not self.is_active():
            raise InactivePoolError(f"Pool {self.address} is not active")

    def __repr__(self) -> str:
        return (
            f"StandardPool({self.address}, reserves={self.reserve_tokens}, "
            f"balances={self._reserves.get_both()}, supply={self.pool_token.total_supply()})"
        )
