"""Property checkers for the constant-product pair.

Each step property is a predicate over `(before, after, record, config)` and
returns True when it holds. Properties are grouped per operation kind in a
closed dispatch table; `check_all()` returns the violated property names
(empty = all pass).

Zero-input operations are not skipped: every kind-specific property falls
back to its equality variant (reserves and supply unchanged) when the clamped
amounts are all zero.
"""

from __future__ import annotations

from typing import Callable, List

from ..core.cpmm import compute_lp_mint
from ..state.balances import Token
from .config import HarnessConfig
from .types import (
    AddArgs,
    BurnResult,
    MintResult,
    OperationRecord,
    OpKind,
    PoolSnapshot,
    RemoveArgs,
    RevertExpectation,
    SwapArgs,
    SwapResult,
)

StepProperty = Callable[[PoolSnapshot, PoolSnapshot, OperationRecord, HarnessConfig], bool]
StateProperty = Callable[[PoolSnapshot, HarnessConfig], bool]


def _unchanged(before: PoolSnapshot, after: PoolSnapshot) -> bool:
    return before.pool_state() == after.pool_state()


# ---------------------------------------------------------------------------
# State properties (hold for every snapshot)
# ---------------------------------------------------------------------------


def prop_no_reserve_underflow(s: PoolSnapshot, config: HarnessConfig) -> bool:
    return 0 <= s.reserve0 <= config.max_reserve and 0 <= s.reserve1 <= config.max_reserve


def prop_reserve_supply_coupling(s: PoolSnapshot, config: HarnessConfig) -> bool:
    if s.total_supply < 0:
        return False
    if s.total_supply == 0:
        return s.reserve0 == 0 and s.reserve1 == 0
    return s.reserve0 > 0 and s.reserve1 > 0


STATE_PROPERTIES: dict[str, StateProperty] = {
    "no_reserve_underflow": prop_no_reserve_underflow,
    "reserve_supply_coupling": prop_reserve_supply_coupling,
}


def check_state(snapshot: PoolSnapshot, config: HarnessConfig) -> List[str]:
    return [name for name, fn in STATE_PROPERTIES.items() if not fn(snapshot, config)]


# ---------------------------------------------------------------------------
# SWAP
# ---------------------------------------------------------------------------


def prop_k_monotonic_on_swap(before, after, record, config) -> bool:
    if record.is_zero_input:
        return _unchanged(before, after)
    if config.fee_bps > 0:
        return after.k > before.k
    return after.k >= before.k


def prop_reserve_conservation_on_swap(before, after, record, config) -> bool:
    if record.is_zero_input:
        return _unchanged(before, after)
    args: SwapArgs = record.clamped
    result: SwapResult = record.result
    gained = after.reserve(args.token_in) - before.reserve(args.token_in)
    paid = before.reserve(args.token_out) - after.reserve(args.token_out)
    return (
        gained == args.amount_in > 0
        and paid == result.amount_out > 0
    )


def prop_price_direction_on_swap(before, after, record, config) -> bool:
    if record.is_zero_input:
        return _unchanged(before, after)
    # Compare r1/r0 across the swap without division.
    lhs = after.reserve1 * before.reserve0
    rhs = before.reserve1 * after.reserve0
    if record.clamped.token_in is Token.TOKEN0:
        return lhs < rhs
    return lhs > rhs


def prop_swap_matches_quote(before, after, record, config) -> bool:
    result: SwapResult = record.result
    return result.amount_out == result.quoted_out


# ---------------------------------------------------------------------------
# ADD
# ---------------------------------------------------------------------------


def prop_k_increases_on_add(before, after, record, config) -> bool:
    if record.is_zero_input:
        return _unchanged(before, after)
    return after.k > before.k


def prop_mint_no_excess_shares(before, after, record, config) -> bool:
    args: AddArgs = record.clamped
    result: MintResult = record.result
    entitled = compute_lp_mint(
        before.reserve0,
        before.reserve1,
        args.amount0,
        args.amount1,
        before.total_supply,
        config.minimum_liquidity,
    )
    return result.shares <= max(entitled, 0)


# ---------------------------------------------------------------------------
# REMOVE
# ---------------------------------------------------------------------------


def prop_k_decreases_on_remove(before, after, record, config) -> bool:
    if record.is_zero_input:
        return _unchanged(before, after)
    return after.k < before.k


def prop_burn_no_excess_withdrawal(before, after, record, config) -> bool:
    args: RemoveArgs = record.clamped
    result: BurnResult = record.result
    if before.total_supply == 0:
        return result.amount0 == 0 and result.amount1 == 0
    return (
        result.amount0 * before.total_supply <= args.shares * before.reserve0
        and result.amount1 * before.total_supply <= args.shares * before.reserve1
    )


# ---------------------------------------------------------------------------
# All kinds
# ---------------------------------------------------------------------------


def prop_supply_consistency(before, after, record, config) -> bool:
    if after.total_supply < 0:
        return False
    delta = after.total_supply - before.total_supply
    result = record.result
    if isinstance(result, MintResult):
        lock = config.minimum_liquidity if before.total_supply == 0 and result.shares > 0 else 0
        return delta == result.shares + lock
    if isinstance(result, BurnResult):
        return delta == -record.clamped.shares
    return delta == 0


def prop_actor_balance_accounting(before, after, record, config) -> bool:
    expected = {Token.TOKEN0: 0, Token.TOKEN1: 0, Token.LP: 0}
    args, result = record.clamped, record.result
    if isinstance(result, SwapResult):
        expected[args.token_in] -= args.amount_in
        expected[args.token_out] += result.amount_out
    elif isinstance(result, MintResult):
        expected[Token.TOKEN0] -= args.amount0
        expected[Token.TOKEN1] -= args.amount1
        expected[Token.LP] += result.shares
    elif isinstance(result, BurnResult):
        expected[Token.TOKEN0] += result.amount0
        expected[Token.TOKEN1] += result.amount1
        expected[Token.LP] -= args.shares

    for (actor, b), (_, a) in zip(before.balances, after.balances):
        for token in (Token.TOKEN0, Token.TOKEN1, Token.LP):
            want = expected[token] if actor == record.actor else 0
            if a.of(token) - b.of(token) != want:
                return False
    return True


def _state_after(fn: StateProperty) -> StepProperty:
    return lambda before, after, record, config: fn(after, config)


# ---------------------------------------------------------------------------
# Registry + check_all
# ---------------------------------------------------------------------------

PROPERTY_REGISTRY: dict[str, StepProperty] = {
    "k_monotonic_on_swap": prop_k_monotonic_on_swap,
    "reserve_conservation_on_swap": prop_reserve_conservation_on_swap,
    "price_direction_on_swap": prop_price_direction_on_swap,
    "swap_matches_quote": prop_swap_matches_quote,
    "k_increases_on_add": prop_k_increases_on_add,
    "mint_no_excess_shares": prop_mint_no_excess_shares,
    "k_decreases_on_remove": prop_k_decreases_on_remove,
    "burn_no_excess_withdrawal": prop_burn_no_excess_withdrawal,
    "supply_consistency": prop_supply_consistency,
    "actor_balance_accounting": prop_actor_balance_accounting,
    "no_reserve_underflow": _state_after(prop_no_reserve_underflow),
    "reserve_supply_coupling": _state_after(prop_reserve_supply_coupling),
}

_COMMON = ("supply_consistency", "actor_balance_accounting", "no_reserve_underflow", "reserve_supply_coupling")

PROPERTIES_BY_KIND: dict[OpKind, tuple[str, ...]] = {
    OpKind.SWAP: (
        "k_monotonic_on_swap",
        "reserve_conservation_on_swap",
        "price_direction_on_swap",
        "swap_matches_quote",
    ) + _COMMON,
    OpKind.ADD: ("k_increases_on_add", "mint_no_excess_shares") + _COMMON,
    OpKind.REMOVE: ("k_decreases_on_remove", "burn_no_excess_withdrawal") + _COMMON,
}


def check_all(
    before: PoolSnapshot,
    after: PoolSnapshot,
    record: OperationRecord,
    config: HarnessConfig,
) -> List[str]:
    """Return the properties violated by a successful operation (empty = all pass)."""
    return [
        name
        for name in PROPERTIES_BY_KIND[record.kind]
        if not PROPERTY_REGISTRY[name](before, after, record, config)
    ]


def check_revert_expectation(before: PoolSnapshot, after: PoolSnapshot, record: OperationRecord) -> List[str]:
    """Compare the observed revert/success with what the harness predicted."""
    unchanged = before.ledger_state() == after.ledger_state()
    if record.reverted:
        violations = []
        if record.expectation is RevertExpectation.SUCCEED:
            violations.append("unexpected_revert")
        if not unchanged:
            violations.append("revert_not_atomic")
        return violations
    if record.expectation is RevertExpectation.REVERT:
        return ["expected_revert_missing"]
    if record.expectation is RevertExpectation.REVERT_OR_NOOP and not unchanged:
        return ["boundary_input_not_noop"]
    return []


def check_step(
    before: PoolSnapshot,
    after: PoolSnapshot,
    record: OperationRecord,
    config: HarnessConfig,
) -> List[str]:
    """
    Every check that applies to one executed operation.

    Reverted calls are judged only against the revert expectation. Successful
    calls also run the kind's properties when the harness expected success,
    or when the input was all-zero (equality variants).
    """
    violations = check_revert_expectation(before, after, record)
    if record.reverted or violations:
        return violations
    if record.expectation is RevertExpectation.SUCCEED or record.is_zero_input:
        violations.extend(check_all(before, after, record, config))
    else:
        violations.extend(check_state(after, config))
    return violations


def check_roundtrip(add: OperationRecord, remove: OperationRecord) -> List[str]:
    """Minting then burning the minted shares never returns more than was deposited."""
    deposit: AddArgs = add.clamped
    result: BurnResult = remove.result
    if result.amount0 <= deposit.amount0 and result.amount1 <= deposit.amount1:
        return []
    return ["mint_burn_symmetry"]


def check_campaign_end(initial: PoolSnapshot, final: PoolSnapshot, config: HarnessConfig) -> List[str]:
    """
    Whole-campaign conservation laws.

    - token_conservation: tokens only move between tracked actors and the
      reserves, so actor totals plus reserves are constant per token.
    - share_accounting: supply not held by tracked actors only grows by the
      minimum-liquidity lock, once, on the first mint.
    """
    violations = check_state(final, config)

    for token, reserve_of in ((Token.TOKEN0, "reserve0"), (Token.TOKEN1, "reserve1")):
        start = sum(b.of(token) for _, b in initial.balances) + getattr(initial, reserve_of)
        end = sum(b.of(token) for _, b in final.balances) + getattr(final, reserve_of)
        if start != end:
            violations.append("token_conservation")
            break

    untracked_start = initial.total_supply - sum(b.shares for _, b in initial.balances)
    untracked_end = final.total_supply - sum(b.shares for _, b in final.balances)
    lock = config.minimum_liquidity if initial.total_supply == 0 and final.total_supply > 0 else 0
    if untracked_end != untracked_start + lock:
        violations.append("share_accounting")
    return violations
