"""
In-memory reference pair (imperative shell around `src.core.cpmm`).

A two-token constant-product pair with Uniswap-v2 style behaviour:
- fee charged on the gross input (ceil), output rounded down;
- first mint issues `isqrt(a0 * a1) - minimum_liquidity` and locks
  `minimum_liquidity` shares with the burn address;
- later mints issue `min(a0 * S / r0, a1 * S / r1)` and keep any excess as a
  donation to the pool;
- burns pay out `shares * r / S` of each token, rounded down;
- reserves are capped at `max_reserve` (uint112 by default).

Every entry point validates first and mutates last, so a `Revert` always
leaves the pair untouched.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, Optional, Tuple

from ..core.cpmm import BPS_DENOM, compute_lp_burn, compute_lp_mint, get_amount_out
from ..harness.config import UINT112_MAX
from ..harness.sut import PairSUT, Revert
from ..state.balances import Actor, Amount, BalanceTable, Token
from ..state.lp import LOCK_HOLDER, ShareTable

# Address holding the pair's own token balances.
PAIR_ADDRESS: Actor = "0x" + "ff" * 20


@dataclass(frozen=True)
class PairConfig:
    fee_bps: int = 30
    minimum_liquidity: int = 1000
    max_reserve: int = UINT112_MAX

    def __post_init__(self) -> None:
        if not (0 <= self.fee_bps < BPS_DENOM):
            raise ValueError(f"fee_bps must be in [0, {BPS_DENOM}): {self.fee_bps}")
        if self.minimum_liquidity < 0:
            raise ValueError(f"minimum_liquidity must be non-negative: {self.minimum_liquidity}")
        if self.max_reserve <= 0:
            raise ValueError(f"max_reserve must be positive: {self.max_reserve}")


def _require_amount(name: str, value: object) -> int:
    if not isinstance(value, int) or isinstance(value, bool):
        raise Revert(f"{name.upper()}_NOT_INTEGER")
    if value < 0:
        raise Revert(f"NEGATIVE_{name.upper()}")
    return value


def _require_pair_token(token: object) -> Token:
    if token not in (Token.TOKEN0, Token.TOKEN1):
        raise Revert("INVALID_TOKEN")
    return token


class ReferencePair(PairSUT):
    """Reference constant-product pair backed by `BalanceTable` and `ShareTable`."""

    def __init__(
        self,
        config: Optional[PairConfig] = None,
        initial_balances: Optional[Mapping[Actor, Tuple[Amount, Amount]]] = None,
    ) -> None:
        self.config = config or PairConfig()
        self._tokens = BalanceTable()
        self._shares = ShareTable()
        self._reserve0: Amount = 0
        self._reserve1: Amount = 0
        for actor, (amount0, amount1) in (initial_balances or {}).items():
            self._tokens.set(actor, Token.TOKEN0, amount0)
            self._tokens.set(actor, Token.TOKEN1, amount1)

    # -- reads --------------------------------------------------------------

    def get_reserves(self) -> Tuple[Amount, Amount]:
        return self._reserve0, self._reserve1

    def total_supply(self) -> Amount:
        return self._shares.total_supply

    def balance_of(self, actor: Actor, token: Token) -> Amount:
        if token is Token.LP:
            return self._shares.get(actor)
        return self._tokens.get(actor, token)

    def get_amount_out(self, token_in: Token, amount_in: Amount) -> Amount:
        token_in = _require_pair_token(token_in)
        amount_in = _require_amount("amount_in", amount_in)
        reserve_in, reserve_out = self._oriented(token_in)
        return get_amount_out(reserve_in, reserve_out, amount_in, self.config.fee_bps)

    # -- writes -------------------------------------------------------------

    def swap(self, token_in: Token, amount_in: Amount, actor: Actor) -> Amount:
        token_in = _require_pair_token(token_in)
        amount_in = _require_amount("amount_in", amount_in)
        if amount_in == 0:
            raise Revert("INSUFFICIENT_INPUT_AMOUNT")
        reserve_in, reserve_out = self._oriented(token_in)
        if reserve_in == 0 or reserve_out == 0:
            raise Revert("INSUFFICIENT_LIQUIDITY")
        if self._tokens.get(actor, token_in) < amount_in:
            raise Revert("TRANSFER_FAILED")

        amount_out = get_amount_out(reserve_in, reserve_out, amount_in, self.config.fee_bps)
        if amount_out == 0:
            raise Revert("INSUFFICIENT_OUTPUT_AMOUNT")
        if amount_out >= reserve_out:
            raise Revert("INSUFFICIENT_LIQUIDITY")
        new_in = reserve_in + amount_in
        new_out = reserve_out - amount_out
        if new_in > self.config.max_reserve:
            raise Revert("OVERFLOW")
        if new_in * new_out < reserve_in * reserve_out:
            raise Revert("K")

        token_out = token_in.other
        self._tokens.transfer(actor, PAIR_ADDRESS, token_in, amount_in)
        self._tokens.transfer(PAIR_ADDRESS, actor, token_out, amount_out)
        self._set_oriented(token_in, new_in, new_out)
        return amount_out

    def mint(self, amount0: Amount, amount1: Amount, actor: Actor) -> Amount:
        amount0 = _require_amount("amount0", amount0)
        amount1 = _require_amount("amount1", amount1)
        if self._tokens.get(actor, Token.TOKEN0) < amount0 or self._tokens.get(actor, Token.TOKEN1) < amount1:
            raise Revert("TRANSFER_FAILED")
        new0 = self._reserve0 + amount0
        new1 = self._reserve1 + amount1
        if new0 > self.config.max_reserve or new1 > self.config.max_reserve:
            raise Revert("OVERFLOW")

        supply = self._shares.total_supply
        shares = compute_lp_mint(
            self._reserve0,
            self._reserve1,
            amount0,
            amount1,
            supply,
            self.config.minimum_liquidity,
        )
        if shares <= 0:
            raise Revert("INSUFFICIENT_LIQUIDITY_MINTED")

        self._tokens.transfer(actor, PAIR_ADDRESS, Token.TOKEN0, amount0)
        self._tokens.transfer(actor, PAIR_ADDRESS, Token.TOKEN1, amount1)
        if supply == 0:
            self._shares.mint(LOCK_HOLDER, self.config.minimum_liquidity)
        self._shares.mint(actor, shares)
        self._reserve0, self._reserve1 = new0, new1
        return shares

    def burn(self, shares: Amount, actor: Actor) -> Tuple[Amount, Amount]:
        shares = _require_amount("shares", shares)
        if shares == 0:
            raise Revert("INSUFFICIENT_LIQUIDITY_BURNED")
        if self._shares.get(actor) < shares:
            raise Revert("INSUFFICIENT_SHARES")

        amount0, amount1 = compute_lp_burn(
            shares, self._reserve0, self._reserve1, self._shares.total_supply
        )
        if amount0 == 0 or amount1 == 0:
            raise Revert("INSUFFICIENT_LIQUIDITY_BURNED")

        self._shares.burn(actor, shares)
        self._tokens.transfer(PAIR_ADDRESS, actor, Token.TOKEN0, amount0)
        self._tokens.transfer(PAIR_ADDRESS, actor, Token.TOKEN1, amount1)
        self._reserve0 -= amount0
        self._reserve1 -= amount1
        return amount0, amount1

    # -- helpers ------------------------------------------------------------

    def _oriented(self, token_in: Token) -> Tuple[Amount, Amount]:
        if token_in is Token.TOKEN0:
            return self._reserve0, self._reserve1
        return self._reserve1, self._reserve0

    def _set_oriented(self, token_in: Token, reserve_in: Amount, reserve_out: Amount) -> None:
        if token_in is Token.TOKEN0:
            self._reserve0, self._reserve1 = reserve_in, reserve_out
        else:
            self._reserve1, self._reserve0 = reserve_in, reserve_out

    def __repr__(self) -> str:
        return (
            f"ReferencePair(reserves=({self._reserve0}, {self._reserve1}), "
            f"supply={self._shares.total_supply}, fee_bps={self.config.fee_bps})"
        )


def make_reference_pair(
    config: PairConfig,
    actors: Tuple[Actor, ...],
    initial_balance: Amount,
) -> ReferencePair:
    """Fresh pair with every actor pre-funded with `initial_balance` of both tokens."""
    return ReferencePair(config, {actor: (initial_balance, initial_balance) for actor in actors})
