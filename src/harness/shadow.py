"""
Shadow model of the pool.

`ShadowPool` keeps its own copy of (reserve0, reserve1, total_supply),
seeded from the first snapshot and advanced only by the amounts the harness
recorded for each successful operation. If the pair ever reports one thing
and stores another (a swap that moves more than it returns, a mint that
inflates supply beyond the shares it reports), the next snapshot disagrees
with the shadow.

The module-level `predict_*` helpers give the share math the harness uses to
decide whether a mint or burn should succeed at all.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

from ..core.cpmm import compute_lp_burn, compute_lp_mint
from ..state.balances import Amount, Token
from .types import BurnResult, MintResult, OperationRecord, PoolSnapshot, SwapResult


def predict_mint(snapshot: PoolSnapshot, amount0: Amount, amount1: Amount, minimum_liquidity: Amount) -> Amount:
    """Shares a deposit should issue at `snapshot`; non-positive means it must not mint."""
    return compute_lp_mint(
        snapshot.reserve0,
        snapshot.reserve1,
        amount0,
        amount1,
        snapshot.total_supply,
        minimum_liquidity,
    )


def predict_burn(snapshot: PoolSnapshot, shares: Amount) -> Tuple[Amount, Amount]:
    """Token amounts a burn of `shares` should pay out at `snapshot`; (0, 0) when unbacked."""
    if shares > snapshot.total_supply:
        return 0, 0
    return compute_lp_burn(shares, snapshot.reserve0, snapshot.reserve1, snapshot.total_supply)


@dataclass
class ShadowPool:
    reserve0: Amount
    reserve1: Amount
    total_supply: Amount
    minimum_liquidity: Amount

    @classmethod
    def from_snapshot(cls, snapshot: PoolSnapshot, minimum_liquidity: Amount) -> "ShadowPool":
        return cls(
            reserve0=snapshot.reserve0,
            reserve1=snapshot.reserve1,
            total_supply=snapshot.total_supply,
            minimum_liquidity=minimum_liquidity,
        )

    def state(self) -> Tuple[Amount, Amount, Amount]:
        return (self.reserve0, self.reserve1, self.total_supply)

    def apply(self, record: OperationRecord) -> None:
        """Advance by the amounts recorded for a successful, state-changing operation."""
        if record.reverted or record.result is None:
            return
        result = record.result
        if isinstance(result, SwapResult):
            args = record.clamped
            if args.token_in is Token.TOKEN0:
                self.reserve0 += args.amount_in
                self.reserve1 -= result.amount_out
            else:
                self.reserve1 += args.amount_in
                self.reserve0 -= result.amount_out
        elif isinstance(result, MintResult):
            args = record.clamped
            if self.total_supply == 0 and result.shares > 0:
                self.total_supply += self.minimum_liquidity
            self.reserve0 += args.amount0
            self.reserve1 += args.amount1
            self.total_supply += result.shares
        elif isinstance(result, BurnResult):
            self.reserve0 -= result.amount0
            self.reserve1 -= result.amount1
            self.total_supply -= record.clamped.shares

    def mismatch(self, snapshot: PoolSnapshot) -> Optional[str]:
        """Describe the divergence from `snapshot`, or None if they agree."""
        if self.state() == snapshot.pool_state():
            return None
        return f"shadow (r0, r1, S)={self.state()} observed={snapshot.pool_state()}"
