# [TESTER] v1

from __future__ import annotations

from src.harness.config import DEFAULT_ACTORS
from src.harness.shadow import ShadowPool, predict_burn, predict_mint
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

ALICE = DEFAULT_ACTORS[0]


def snap(r0, r1, supply) -> PoolSnapshot:
    return PoolSnapshot(r0, r1, supply, ((ALICE, ActorBalances(0, 0, 0)),), 0)


def rec(kind, clamped, result, reverted=False) -> OperationRecord:
    return OperationRecord(0, kind.value, kind, ALICE, (), clamped, RevertExpectation.SUCCEED, reverted, None, result)


def test_predictions_follow_pair_math() -> None:
    assert predict_mint(snap(0, 0, 0), 1000, 1000, 10) == 990
    assert predict_mint(snap(0, 0, 0), 10, 10, 10) == 0
    assert predict_mint(snap(1000, 1000, 1000), 100, 50, 10) == 50
    assert predict_burn(snap(1100, 910, 1000), 990) == (1089, 900)
    assert predict_burn(snap(1100, 910, 1000), 1001) == (0, 0)


def test_shadow_tracks_a_mint_swap_burn_sequence() -> None:
    shadow = ShadowPool.from_snapshot(snap(0, 0, 0), minimum_liquidity=10)

    shadow.apply(rec(OpKind.ADD, AddArgs(ALICE, 1000, 1000), MintResult(990)))
    assert shadow.state() == (1000, 1000, 1000)

    shadow.apply(rec(OpKind.SWAP, SwapArgs(ALICE, Token.TOKEN0, 100), SwapResult(90, 90)))
    assert shadow.state() == (1100, 910, 1000)

    shadow.apply(rec(OpKind.REMOVE, RemoveArgs(ALICE, 990), BurnResult(1089, 900)))
    assert shadow.state() == (11, 10, 10)
    assert shadow.mismatch(snap(11, 10, 10)) is None


def test_shadow_ignores_reverts_and_reports_divergence() -> None:
    shadow = ShadowPool.from_snapshot(snap(1000, 1000, 1000), minimum_liquidity=10)
    shadow.apply(rec(OpKind.SWAP, SwapArgs(ALICE, Token.TOKEN1, 100), None, reverted=True))
    assert shadow.state() == (1000, 1000, 1000)

    shadow.apply(rec(OpKind.SWAP, SwapArgs(ALICE, Token.TOKEN1, 100), SwapResult(90, 90)))
    assert shadow.state() == (910, 1100, 1000)
    assert "observed=(910, 1100, 1001)" in shadow.mismatch(snap(910, 1100, 1001))
