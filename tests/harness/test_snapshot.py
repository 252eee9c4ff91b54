# [TESTER] v1

from __future__ import annotations

import pytest

from src.harness.config import DEFAULT_ACTORS
from src.harness.errors import HarnessInternalError
from src.harness.snapshot import capture_snapshot
from src.state import Token
from tests.harness.faulty_pairs import FlakyReadPair, NegativeBalancePair, funded

ALICE = DEFAULT_ACTORS[0]


def test_snapshot_reads_pool_and_every_actor() -> None:
    pair = funded()
    pair.mint(1000, 1000, ALICE)
    s = capture_snapshot(pair, DEFAULT_ACTORS, 24)

    assert s.pool_state() == (1000, 1000, 1000)
    assert s.k == 1000 * 1000
    assert s.block_timestamp == 24
    assert [a for a, _ in s.balances] == list(DEFAULT_ACTORS)
    assert s.balance_of(ALICE).shares == 990
    assert s.balance_of(ALICE).of(Token.TOKEN0) == pair.balance_of(ALICE, Token.TOKEN0)
    with pytest.raises(KeyError):
        s.balance_of("0xnobody")


def test_snapshot_is_json_ready() -> None:
    s = capture_snapshot(funded(), DEFAULT_ACTORS, 0)
    d = s.to_dict()
    assert d["reserve0"] == 0
    assert set(d["balances"]) == set(DEFAULT_ACTORS)


def test_state_changing_reads_are_rejected() -> None:
    with pytest.raises(HarnessInternalError):
        capture_snapshot(funded(FlakyReadPair), DEFAULT_ACTORS, 0)


def test_non_integer_reads_are_rejected() -> None:
    pair = funded()
    pair.total_supply = lambda: 1.0
    with pytest.raises(HarnessInternalError):
        capture_snapshot(pair, DEFAULT_ACTORS, 0)


def test_negative_reads_are_rejected() -> None:
    pair = funded(NegativeBalancePair)
    capture_snapshot(pair, DEFAULT_ACTORS, 0)
    pair.broken = True
    with pytest.raises(HarnessInternalError, match="negative"):
        capture_snapshot(pair, DEFAULT_ACTORS, 0)
