"""
System-under-test boundary.

The harness only talks to a pair through this capability set
(swap, quote, mint, burn, state reads). A live deployment adapter or the
in-memory reference pair both subclass `PairSUT`; the harness never assumes a
particular storage mechanism.

Contract:
- Every mutating call is atomic: it either completes or raises `Revert`
  leaving all observable state unchanged.
- Read calls never mutate state.
- Any exception other than `Revert` is treated as a harness-fatal SUT crash.
"""

from __future__ import annotations

from typing import Tuple

from ..state.balances import Actor, Amount, Token


class Revert(Exception):
    """Raised by a SUT entry point that rejected the call."""

    def __init__(self, reason: str) -> None:
        self.reason = str(reason)
        super().__init__(self.reason)


class PairSUT:
    """Interface for a two-token constant-product pair."""

    def swap(self, token_in: Token, amount_in: Amount, actor: Actor) -> Amount:
        """Sell exactly `amount_in` of `token_in`; returns the amount of the other token received."""
        raise NotImplementedError

    def get_amount_out(self, token_in: Token, amount_in: Amount) -> Amount:
        """The pair's own quote for an exact-in swap at current reserves."""
        raise NotImplementedError

    def mint(self, amount0: Amount, amount1: Amount, actor: Actor) -> Amount:
        """Deposit both tokens from `actor`; returns the shares issued to `actor`."""
        raise NotImplementedError

    def burn(self, shares: Amount, actor: Actor) -> Tuple[Amount, Amount]:
        """Redeem `shares` held by `actor`; returns (amount0, amount1) paid out."""
        raise NotImplementedError

    def get_reserves(self) -> Tuple[Amount, Amount]:
        raise NotImplementedError

    def total_supply(self) -> Amount:
        raise NotImplementedError

    def balance_of(self, actor: Actor, token: Token) -> Amount:
        raise NotImplementedError
