# [TESTER] v1
"""Hypothesis as the driver: rule-based walks over every harness entry point.

Any InvariantViolation raised by the harness fails the walk, and Hypothesis
shrinks the failing rule sequence.
"""

from __future__ import annotations

import importlib.util

import pytest

if importlib.util.find_spec("hypothesis") is None:  # pragma: no cover
    pytest.skip("hypothesis not installed", allow_module_level=True)

import hypothesis.strategies as st
from hypothesis import HealthCheck, settings
from hypothesis.stateful import RuleBasedStateMachine, initialize, invariant, rule

from src.harness.clamp import RAW_MAX
from src.harness.config import UINT112_MAX
from src.harness.handlers import PairHarness
from tests.harness.faulty_pairs import funded, harness_config

words = st.one_of(
    st.integers(min_value=0, max_value=3),
    st.integers(min_value=RAW_MAX - 3, max_value=RAW_MAX),
    st.integers(min_value=UINT112_MAX - 2, max_value=UINT112_MAX + 2),
    st.integers(min_value=0, max_value=1 << 24),
    st.integers(min_value=0, max_value=RAW_MAX),
    st.integers(min_value=-(1 << 64), max_value=-1),
)


class ReferencePairMachine(RuleBasedStateMachine):
    @initialize(seed_liquidity=st.booleans())
    def setup(self, seed_liquidity: bool) -> None:
        self.harness = PairHarness(funded(), harness_config())
        if seed_liquidity:
            self.harness.add(0, 10**6, 10**6)

    @rule(actor=words, token=words, amount=words)
    def swap(self, actor, token, amount) -> None:
        out = self.harness.swap(actor, token, amount)
        if not out.record.reverted:
            assert out.after.k >= out.before.k

    @rule(actor=words, token=words, amount=words)
    def swap_overdraw(self, actor, token, amount) -> None:
        assert self.harness.swap_overdraw(actor, token, amount).record.reverted

    @rule(actor=words, amount0=words, amount1=words)
    def add(self, actor, amount0, amount1) -> None:
        self.harness.add(actor, amount0, amount1)

    @rule(actor=words, amount0=words, amount1=words)
    def add_unchecked(self, actor, amount0, amount1) -> None:
        self.harness.add_unchecked(actor, amount0, amount1)

    @rule(actor=words, shares=words)
    def remove(self, actor, shares) -> None:
        self.harness.remove(actor, shares)

    @rule(actor=words, shares=words)
    def remove_overdraw(self, actor, shares) -> None:
        assert self.harness.remove_overdraw(actor, shares).record.reverted

    @rule(actor=words, amount0=words, amount1=words)
    def roundtrip(self, actor, amount0, amount1) -> None:
        added, removed = self.harness.roundtrip(actor, amount0, amount1)
        if removed is not None and not removed.record.reverted:
            assert removed.after.total_supply == added.after.total_supply - added.record.result.shares

    @invariant()
    def shadow_matches_last_snapshot(self) -> None:
        if hasattr(self, "harness"):
            assert self.harness.shadow.mismatch(self.harness.last_snapshot) is None

    def teardown(self) -> None:
        if hasattr(self, "harness") and not self.harness.halted:
            self.harness.finish()


ReferencePairMachine.TestCase.settings = settings(
    max_examples=40,
    stateful_step_count=30,
    deadline=None,
    suppress_health_check=[HealthCheck.too_slow],
)
TestReferencePairMachine = ReferencePairMachine.TestCase
