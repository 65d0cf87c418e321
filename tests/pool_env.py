"""Shared pool fixture environment: two reserves, an injected clock and named holders."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Union

from src.core.clock import ManualClock
from src.core.config import PoolConfig
from src.core.pool import StandardPool
from src.state.balances import BalanceTable
from src.state.lp import PoolToken
from src.state.tokens import LedgerToken, NativeAsset

OWNER = "owner"
ROUTER = "router"
ALICE = "alice"
BOB = "bob"
POOL = "pool"

TOKEN_A = "0x" + "aa" * 20
TOKEN_B = "0x" + "bb" * 20
POOL_TOKEN = "0x" + "cc" * 20

START_TIME = 1_700_000_000


@dataclass
class PoolEnv:
    pool: StandardPool
    ledger: BalanceTable
    token0: LedgerToken
    token1: Union[LedgerToken, NativeAsset]
    pool_token: PoolToken
    clock: ManualClock

    @property
    def tokens(self) -> List[str]:
        return [self.token0.token_id, self.token1.token_id]

    def give(self, holder: str, amount0: int, amount1: int) -> None:
        """Mint reserve tokens to `holder` and approve the pool to pull them."""
        for token, amount in ((self.token0, amount0), (self.token1, amount1)):
            token.mint(holder, amount)
            if not token.is_native:
                token.approve(holder, POOL, token.allowance(holder, POOL) + amount)

    def seed(self, amount0: int, amount1: int, holder: str = ALICE) -> int:
        self.give(holder, amount0, amount1)
        value = amount1 if self.token1.is_native else 0
        return self.pool.add_liquidity(holder, self.tokens, [amount0, amount1], 1, value=value)

    def swap(self, source_index: int, amount: int, beneficiary: str = BOB) -> int:
        """Router-driven conversion: tokens are moved to the pool, then converted."""
        source = self.token0 if source_index == 0 else self.token1
        target = self.token1 if source_index == 0 else self.token0
        source.mint(ROUTER, amount)
        value = 0
        if source.is_native:
            value = amount
        else:
            source.transfer(ROUTER, POOL, amount)
        return self.pool.convert(
            ROUTER, source.token_id, target.token_id, amount, ROUTER, beneficiary, value=value
        )


def build_pool(
    *,
    fee_ppm: int = 0,
    native: bool = False,
    activate: bool = True,
    config: Optional[PoolConfig] = None,
    token0: Optional[LedgerToken] = None,
    token1: Optional[Union[LedgerToken, NativeAsset]] = None,
    ledger: Optional[BalanceTable] = None,
) -> PoolEnv:
    ledger = ledger if ledger is not None else BalanceTable()
    token0 = token0 if token0 is not None else LedgerToken(TOKEN_A, ledger)
    if token1 is None:
        token1 = NativeAsset(ledger) if native else LedgerToken(TOKEN_B, ledger)
    pool_token = PoolToken(POOL_TOKEN, owner=OWNER)
    clock = ManualClock(START_TIME)
    pool = StandardPool(
        address=POOL,
        pool_token=pool_token,
        owner=OWNER,
        router=ROUTER,
        config=config if config is not None else PoolConfig(conversion_fee_ppm=fee_ppm),
        clock=clock,
    )
    pool.add_reserve(OWNER, token0)
    pool.add_reserve(OWNER, token1)
    if activate:
        pool_token.transfer_ownership(OWNER, POOL)
    return PoolEnv(pool, ledger, token0, token1, pool_token, clock)
