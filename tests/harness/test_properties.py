# [TESTER] v1

from __future__ import annotations

from dataclasses import replace

from src.harness.config import DEFAULT_ACTORS, HarnessConfig
from src.harness.properties import (
    PROPERTIES_BY_KIND,
    PROPERTY_REGISTRY,
    check_all,
    check_campaign_end,
    check_revert_expectation,
    check_roundtrip,
    check_state,
    check_step,
)
from src.harness.types import (
    ActorBalances,
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
from src.state import Token

ALICE, BOB, CAROL = DEFAULT_ACTORS
CONFIG = HarnessConfig(fee_bps=30, minimum_liquidity=10)
START = 10**6


def snap(r0, r1, supply, alice=(START, START, 0)) -> PoolSnapshot:
    rest = ActorBalances(START, START, 0)
    return PoolSnapshot(
        reserve0=r0,
        reserve1=r1,
        total_supply=supply,
        balances=((ALICE, ActorBalances(*alice)), (BOB, rest), (CAROL, rest)),
        block_timestamp=0,
    )


def record(kind, clamped, result=None, expectation=RevertExpectation.SUCCEED, reverted=False) -> OperationRecord:
    return OperationRecord(
        index=0,
        entry=kind.value,
        kind=kind,
        actor=clamped.actor,
        raw_args=(0,),
        clamped=clamped,
        expectation=expectation,
        reverted=reverted,
        result=result,
    )


# Pool after mint(1000, 1000) by alice with a 10-share lock.
MINTED = snap(1000, 1000, 1000, alice=(START - 1000, START - 1000, 990))


def test_every_kind_dispatches_to_registered_properties() -> None:
    for kind in OpKind:
        assert PROPERTIES_BY_KIND[kind]
        for name in PROPERTIES_BY_KIND[kind]:
            assert name in PROPERTY_REGISTRY


def test_honest_swap_passes() -> None:
    after = snap(1100, 910, 1000, alice=(START - 1100, START - 910, 990))
    rec = record(OpKind.SWAP, SwapArgs(ALICE, Token.TOKEN0, 100), SwapResult(90, 90))
    assert check_step(MINTED, after, rec, CONFIG) == []


def test_swap_that_lowers_k_is_caught() -> None:
    after = snap(1100, 900, 1000, alice=(START - 1100, START - 900, 990))
    rec = record(OpKind.SWAP, SwapArgs(ALICE, Token.TOKEN0, 100), SwapResult(100, 90))
    violations = check_all(MINTED, after, rec, CONFIG)
    assert "k_monotonic_on_swap" in violations
    assert "swap_matches_quote" in violations


def test_swap_that_keeps_k_flat_with_a_fee_is_caught() -> None:
    # 1000 * 1000 == 1250 * 800
    after = snap(1250, 800, 1000, alice=(START - 1250, START - 800, 990))
    rec = record(OpKind.SWAP, SwapArgs(ALICE, Token.TOKEN0, 250), SwapResult(200, 200))
    assert "k_monotonic_on_swap" in check_all(MINTED, after, rec, CONFIG)
    assert "k_monotonic_on_swap" not in check_all(MINTED, after, rec, replace(CONFIG, fee_bps=0))


def test_swap_that_pays_more_than_it_reports_is_caught() -> None:
    after = snap(1100, 909, 1000, alice=(START - 1100, START - 909, 990))
    rec = record(OpKind.SWAP, SwapArgs(ALICE, Token.TOKEN0, 100), SwapResult(90, 90))
    violations = check_all(MINTED, after, rec, CONFIG)
    assert "reserve_conservation_on_swap" in violations
    assert "actor_balance_accounting" in violations


def test_first_mint_accounts_for_the_lock() -> None:
    before = snap(0, 0, 0)
    rec = record(OpKind.ADD, AddArgs(ALICE, 1000, 1000), MintResult(990))
    assert check_step(before, MINTED, rec, CONFIG) == []

    inflated = replace(MINTED, total_supply=1001)
    assert "supply_consistency" in check_step(before, inflated, rec, CONFIG)


def test_mint_issuing_more_than_entitled_is_caught() -> None:
    after = snap(1100, 1100, 1101, alice=(START - 1100, START - 1100, 1091))
    rec = record(OpKind.ADD, AddArgs(ALICE, 100, 100), MintResult(101))
    assert check_all(MINTED, after, rec, CONFIG) == ["mint_no_excess_shares"]


def test_burn_paying_out_too_much_is_caught() -> None:
    before = snap(1100, 910, 1000, alice=(START - 1100, START - 910, 990))
    honest = snap(11, 10, 10, alice=(START - 11, START - 10, 0))
    rec = record(OpKind.REMOVE, RemoveArgs(ALICE, 990), BurnResult(1089, 900))
    assert check_step(before, honest, rec, CONFIG) == []

    greedy_after = snap(11, 9, 10, alice=(START - 11, START - 9, 0))
    greedy = record(OpKind.REMOVE, RemoveArgs(ALICE, 990), BurnResult(1089, 901))
    assert "burn_no_excess_withdrawal" in check_all(before, greedy_after, greedy, CONFIG)


def test_zero_input_uses_equality_variants() -> None:
    rec = record(
        OpKind.REMOVE, RemoveArgs(BOB, 0), BurnResult(0, 0), expectation=RevertExpectation.REVERT_OR_NOOP
    )
    assert check_step(MINTED, MINTED, rec, CONFIG) == []

    moved = replace(MINTED, reserve0=999)
    violations = check_step(MINTED, moved, rec, CONFIG)
    assert "boundary_input_not_noop" in violations


def test_revert_expectations() -> None:
    swap = SwapArgs(ALICE, Token.TOKEN0, 100)
    unexpected = record(OpKind.SWAP, swap, reverted=True)
    assert check_revert_expectation(MINTED, MINTED, unexpected) == ["unexpected_revert"]

    leaky = record(OpKind.SWAP, swap, expectation=RevertExpectation.REVERT_OR_NOOP, reverted=True)
    assert check_revert_expectation(MINTED, replace(MINTED, reserve0=1100), leaky) == ["revert_not_atomic"]

    missing = record(OpKind.SWAP, swap, SwapResult(90, 90), expectation=RevertExpectation.REVERT)
    assert check_revert_expectation(MINTED, MINTED, missing) == ["expected_revert_missing"]

    fine = record(OpKind.SWAP, swap, expectation=RevertExpectation.REVERT, reverted=True)
    assert check_revert_expectation(MINTED, MINTED, fine) == []


def test_state_properties() -> None:
    assert check_state(MINTED, CONFIG) == []
    assert check_state(snap(0, 0, 0), CONFIG) == []
    assert check_state(snap(5, 0, 10), CONFIG) == ["reserve_supply_coupling"]
    assert check_state(snap(5, 5, 0), CONFIG) == ["reserve_supply_coupling"]
    assert "no_reserve_underflow" in check_state(snap(-1, 5, 10), CONFIG)
    assert "no_reserve_underflow" in check_state(snap(CONFIG.max_reserve + 1, 5, 10), CONFIG)


def test_roundtrip_symmetry() -> None:
    add = record(OpKind.ADD, AddArgs(BOB, 100, 50), MintResult(50))
    fair = record(OpKind.REMOVE, RemoveArgs(BOB, 50), BurnResult(52, 50))
    greedy = record(OpKind.REMOVE, RemoveArgs(BOB, 50), BurnResult(101, 50))
    assert check_roundtrip(add, fair) == []
    assert check_roundtrip(add, greedy) == ["mint_burn_symmetry"]


def test_campaign_end_conservation() -> None:
    initial = snap(0, 0, 0)
    final = snap(11, 10, 10, alice=(START - 11, START - 10, 0))
    assert check_campaign_end(initial, final, CONFIG) == []

    leaked = snap(11, 10, 10, alice=(START - 10, START - 10, 0))
    assert check_campaign_end(initial, leaked, CONFIG) == ["token_conservation"]

    unbacked = snap(11, 10, 11, alice=(START - 11, START - 10, 0))
    assert check_campaign_end(initial, unbacked, CONFIG) == ["share_accounting"]
