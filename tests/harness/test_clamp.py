# [TESTER] v1

from __future__ import annotations

import pytest

from src.harness.clamp import (
    RAW_MAX,
    bound,
    clamp_actor,
    clamp_add,
    clamp_remove,
    clamp_remove_overdraw,
    clamp_swap,
    clamp_swap_overdraw,
    clamp_token,
    in_domain,
)
from src.harness.config import DEFAULT_ACTORS, UINT112_MAX
from src.harness.types import ActorBalances, AddArgs, PoolSnapshot, RemoveArgs, SwapArgs
from src.state import Token

ALICE, BOB, CAROL = DEFAULT_ACTORS


def snap(r0=0, r1=0, supply=0, **holdings) -> PoolSnapshot:
    by_name = {"alice": ALICE, "bob": BOB, "carol": CAROL}
    held = {by_name[k]: v for k, v in holdings.items()}
    return PoolSnapshot(
        reserve0=r0,
        reserve1=r1,
        total_supply=supply,
        balances=tuple((a, ActorBalances(*held.get(a, (0, 0, 0)))) for a in DEFAULT_ACTORS),
        block_timestamp=0,
    )


def test_bound_passes_in_range_values_through() -> None:
    assert bound(5, 0, 10) == 5
    assert bound(10, 10, 10) == 10


def test_bound_keeps_edges_reachable() -> None:
    assert bound(0, 5, 10) == 5
    assert bound(1, 5, 10) == 6
    assert bound(RAW_MAX, 5, 10) == 10
    assert bound(RAW_MAX - 1, 5, 10) == 9
    # Negative raw values fold into the top of the word range.
    assert bound(-1, 5, 10) == 10


def test_bound_wraps_everything_else_into_range() -> None:
    assert bound(11, 0, 9) == 1
    for raw in (7, 2**64, 2**255 + 17, 2**300, -(2**200), RAW_MAX - 4):
        for lo, hi in ((0, 0), (1, 1), (0, 9), (3, 1000), (2**200, 2**200 + 5)):
            assert lo <= bound(raw, lo, hi) <= hi


def test_bound_rejects_empty_range() -> None:
    with pytest.raises(ValueError):
        bound(0, 2, 1)


def test_actor_and_token_selection() -> None:
    assert clamp_actor(4, DEFAULT_ACTORS) == BOB
    assert clamp_actor(-1, DEFAULT_ACTORS) in DEFAULT_ACTORS
    assert clamp_token(0) is Token.TOKEN0
    assert clamp_token(7) is Token.TOKEN1


def test_swap_amount_is_capped_by_balance() -> None:
    s = snap(1000, 1000, 1000, alice=(50, 0, 0))
    c = clamp_swap(0, 0, 10**9, s, DEFAULT_ACTORS, UINT112_MAX)
    assert 1 <= c.args.amount_in <= 50
    assert not c.expect_revert
    assert in_domain(c.args, s)


def test_swap_amount_is_capped_by_reserve_headroom() -> None:
    s = snap(UINT112_MAX - 5, 1000, 1000, alice=(10**40, 0, 0))
    c = clamp_swap(0, 0, RAW_MAX, s, DEFAULT_ACTORS, UINT112_MAX)
    assert c.args.amount_in == 5


def test_swap_with_empty_balance_expects_revert() -> None:
    s = snap(1000, 1000, 1000, alice=(0, 7, 0))
    c = clamp_swap(0, 0, 123, s, DEFAULT_ACTORS, UINT112_MAX)
    assert c.args == SwapArgs(ALICE, Token.TOKEN0, 0)
    assert c.expect_revert


def test_swap_overdraw_exceeds_balance() -> None:
    s = snap(1000, 1000, 1000, alice=(50, 0, 0))
    c = clamp_swap_overdraw(0, 0, 0, s, DEFAULT_ACTORS)
    assert c.args.amount_in == 51
    assert c.expect_revert
    assert not in_domain(c.args, s)


def test_first_deposit_is_lifted_to_the_minimum() -> None:
    s = snap(alice=(10**6, 10**6, 0))
    c = clamp_add(0, 1, 1, s, DEFAULT_ACTORS, minimum_liquidity=10, max_reserve=UINT112_MAX)
    assert c.args == AddArgs(ALICE, 1, 121)
    assert not c.expect_revert


def test_first_deposit_stays_degenerate_without_enforcement() -> None:
    s = snap(alice=(10**6, 10**6, 0))
    c = clamp_add(
        0, 1, 1, s, DEFAULT_ACTORS, minimum_liquidity=10, max_reserve=UINT112_MAX, enforce_minimum=False
    )
    assert c.args == AddArgs(ALICE, 1, 1)
    assert c.expect_revert


def test_first_deposit_too_poor_to_lift() -> None:
    s = snap(alice=(5, 5, 0))
    c = clamp_add(0, 1, 1, s, DEFAULT_ACTORS, minimum_liquidity=10, max_reserve=UINT112_MAX)
    assert in_domain(c.args, s)
    assert c.expect_revert


def test_zero_deposit_expects_revert() -> None:
    s = snap(1000, 1000, 1000, alice=(10, 10, 0))
    c = clamp_add(0, 0, 0, s, DEFAULT_ACTORS, minimum_liquidity=10, max_reserve=UINT112_MAX)
    assert c.args == AddArgs(ALICE, 0, 0)
    assert c.expect_revert


def test_remove_shares_are_capped_by_holdings() -> None:
    s = snap(1000, 1000, 1000, alice=(0, 0, 990))
    assert clamp_remove(0, 990, s, DEFAULT_ACTORS).args == RemoveArgs(ALICE, 990)
    assert clamp_remove(0, RAW_MAX, s, DEFAULT_ACTORS).args == RemoveArgs(ALICE, 990)
    empty = clamp_remove(1, 5, s, DEFAULT_ACTORS)
    assert empty.args == RemoveArgs(BOB, 0)
    assert empty.expect_revert


def test_remove_overdraw_exceeds_holdings() -> None:
    s = snap(1000, 1000, 1000, alice=(0, 0, 990))
    c = clamp_remove_overdraw(0, 0, s, DEFAULT_ACTORS)
    assert c.args == RemoveArgs(ALICE, 991)
    assert c.expect_revert
