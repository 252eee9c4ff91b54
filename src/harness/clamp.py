"""
Input clamp: raw driver values -> per-operation valid domain.

Raw arguments are arbitrary integers (negative and oversized included) and
are first folded into the 256-bit word range. `bound` then maps a word into
`[lo, hi]` the way Foundry's `bound()` does: in-range values pass through
unchanged, values adjacent to 0 land adjacent to `lo`, values adjacent to
2**256-1 land adjacent to `hi`, everything else wraps. This keeps the
zero-adjacent, balance-adjacent and overflow-adjacent edges reachable with
ordinary driver entropy.

None of the clamp functions raise for any integer input; a clamp that cannot
satisfy its domain (e.g. an actor with no balance) returns zero and sets
`expect_revert`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence, Tuple

from ..core.cpmm import first_mint_threshold
from ..state.balances import Actor, Amount, Token
from .types import AddArgs, ClampedArgs, PoolSnapshot, RemoveArgs, SwapArgs

RAW_MODULUS = 1 << 256
RAW_MAX = RAW_MODULUS - 1


@dataclass(frozen=True)
class Clamped:
    args: ClampedArgs
    # The clamped inputs are a known boundary case the pair should reject.
    expect_revert: bool = False


def normalize_raw(raw: int) -> int:
    return int(raw) % RAW_MODULUS


def bound(raw: int, lo: int, hi: int) -> int:
    """Map `raw` into `[lo, hi]`, preserving in-range values and both edges."""
    if lo > hi:
        raise ValueError(f"empty range [{lo}, {hi}]")
    x = normalize_raw(raw)
    if lo <= x <= hi:
        return x

    size = hi - lo + 1
    if x <= 3 and size > x:
        return lo + x
    if x >= RAW_MAX - 3 and size > RAW_MAX - x:
        return hi - (RAW_MAX - x)

    if x > hi:
        rem = (x - hi) % size
        return hi if rem == 0 else lo + rem - 1
    rem = (lo - x) % size
    return lo if rem == 0 else hi - rem + 1


def clamp_actor(raw: int, actors: Sequence[Actor]) -> Actor:
    return actors[normalize_raw(raw) % len(actors)]


def clamp_token(raw: int) -> Token:
    return Token.TOKEN0 if normalize_raw(raw) % 2 == 0 else Token.TOKEN1


def _headroom(reserve: Amount, max_reserve: Amount) -> Amount:
    return max(0, max_reserve - reserve)


def clamp_swap(
    raw_actor: int,
    raw_token: int,
    raw_amount: int,
    snapshot: PoolSnapshot,
    actors: Sequence[Actor],
    max_reserve: Amount,
) -> Clamped:
    """Amount in `[1, min(balance, reserve headroom)]`; 0 (expected revert) if that range is empty."""
    actor = clamp_actor(raw_actor, actors)
    token_in = clamp_token(raw_token)
    balance = snapshot.balance_of(actor).of(token_in)
    cap = min(balance, _headroom(snapshot.reserve(token_in), max_reserve))
    if cap == 0:
        return Clamped(SwapArgs(actor, token_in, 0), expect_revert=True)
    return Clamped(SwapArgs(actor, token_in, bound(raw_amount, 1, cap)))


def clamp_swap_overdraw(
    raw_actor: int,
    raw_token: int,
    raw_amount: int,
    snapshot: PoolSnapshot,
    actors: Sequence[Actor],
) -> Clamped:
    """Amount strictly above the actor's balance of the input token."""
    actor = clamp_actor(raw_actor, actors)
    token_in = clamp_token(raw_token)
    balance = snapshot.balance_of(actor).of(token_in)
    return Clamped(SwapArgs(actor, token_in, bound(raw_amount, balance + 1, balance + RAW_MODULUS)), expect_revert=True)


def _lift_first_mint(
    amount0: Amount, amount1: Amount, cap0: Amount, cap1: Amount, threshold: int
) -> Tuple[Amount, Amount]:
    # Raise the smaller side(s) just enough that amount0 * amount1 >= threshold.
    if cap0 * cap1 < threshold:
        return amount0, amount1
    a0 = max(amount0, 1)
    a1 = max(amount1, -(-threshold // a0))
    if a1 > cap1:
        a1 = cap1
        a0 = max(a0, -(-threshold // cap1))
    return a0, a1


def clamp_add(
    raw_actor: int,
    raw_amount0: int,
    raw_amount1: int,
    snapshot: PoolSnapshot,
    actors: Sequence[Actor],
    *,
    minimum_liquidity: Amount,
    max_reserve: Amount,
    enforce_minimum: bool = True,
) -> Clamped:
    """
    Each amount in `[0, min(balance, reserve headroom)]`, independently.

    On the very first deposit (`total_supply == 0`) with `enforce_minimum`,
    amounts are raised (within the caps) until the initial mint issues at
    least one share; without it the degenerate first mint stays reachable.
    """
    actor = clamp_actor(raw_actor, actors)
    held = snapshot.balance_of(actor)
    cap0 = min(held.token0, _headroom(snapshot.reserve0, max_reserve))
    cap1 = min(held.token1, _headroom(snapshot.reserve1, max_reserve))
    amount0 = bound(raw_amount0, 0, cap0)
    amount1 = bound(raw_amount1, 0, cap1)

    first_mint = snapshot.total_supply == 0
    threshold = first_mint_threshold(minimum_liquidity)
    if first_mint and enforce_minimum and amount0 * amount1 < threshold:
        amount0, amount1 = _lift_first_mint(amount0, amount1, cap0, cap1, threshold)

    expect_revert = (amount0 == 0 and amount1 == 0) or (first_mint and amount0 * amount1 < threshold)
    return Clamped(AddArgs(actor, amount0, amount1), expect_revert=expect_revert)


def clamp_remove(
    raw_actor: int,
    raw_shares: int,
    snapshot: PoolSnapshot,
    actors: Sequence[Actor],
) -> Clamped:
    """Shares in `[0, owned]`."""
    actor = clamp_actor(raw_actor, actors)
    owned = snapshot.balance_of(actor).shares
    shares = bound(raw_shares, 0, owned)
    return Clamped(RemoveArgs(actor, shares), expect_revert=shares == 0)


def clamp_remove_overdraw(
    raw_actor: int,
    raw_shares: int,
    snapshot: PoolSnapshot,
    actors: Sequence[Actor],
) -> Clamped:
    """Shares strictly above what the actor owns."""
    actor = clamp_actor(raw_actor, actors)
    owned = snapshot.balance_of(actor).shares
    return Clamped(RemoveArgs(actor, bound(raw_shares, owned + 1, owned + RAW_MODULUS)), expect_revert=True)


def in_domain(args: ClampedArgs, snapshot: PoolSnapshot) -> bool:
    """True if in-range clamped arguments respect the acting actor's holdings."""
    held = snapshot.balance_of(args.actor)
    if isinstance(args, SwapArgs):
        return args.token_in in (Token.TOKEN0, Token.TOKEN1) and 0 <= args.amount_in <= held.of(args.token_in)
    if isinstance(args, AddArgs):
        return 0 <= args.amount0 <= held.token0 and 0 <= args.amount1 <= held.token1
    return 0 <= args.shares <= held.shares
