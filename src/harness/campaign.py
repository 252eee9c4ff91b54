"""
Reference campaign driver: seeded random walks, replay and minimization.

The harness itself is driver-agnostic; this module is the small in-repo
driver used by the CLI and the tests. Everything is a pure function of the
seed, so a failing campaign reproduces exactly from its trace.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from .clamp import RAW_MAX
from .config import UINT112_MAX, HarnessConfig
from .errors import HarnessInternalError, InvariantViolation
from .handlers import ENTRY_POINTS, HarnessStats, PairHarness, driver_calls
from .sut import PairSUT
from .types import Counterexample, OperationRecord

logger = logging.getLogger(__name__)

SutFactory = Callable[[], PairSUT]
DriverCall = Tuple[str, Tuple[int, ...]]

# Reported in place of property names when the harness itself failed.
HARNESS_INTERNAL_ERROR = "harness_internal_error"

DEFAULT_WEIGHTS: Dict[str, int] = {
    "swap": 8,
    "swap_overdraw": 1,
    "add": 4,
    "add_unchecked": 1,
    "remove": 3,
    "remove_overdraw": 1,
    "roundtrip": 2,
}

_ARITY: Dict[str, int] = {
    "swap": 3,
    "swap_overdraw": 3,
    "add": 3,
    "add_unchecked": 3,
    "remove": 2,
    "remove_overdraw": 2,
    "roundtrip": 3,
}


@dataclass(frozen=True)
class CampaignConfig:
    steps: int = 256
    seed: int = 0
    weights: Dict[str, int] = field(default_factory=lambda: dict(DEFAULT_WEIGHTS))
    minimize: bool = True

    def __post_init__(self) -> None:
        if self.steps < 0:
            raise ValueError(f"steps must be non-negative: {self.steps}")
        unknown = set(self.weights) - set(ENTRY_POINTS)
        if unknown:
            raise ValueError(f"unknown entry points in weights: {sorted(unknown)}")
        if not any(w > 0 for w in self.weights.values()):
            raise ValueError("at least one entry point needs a positive weight")


@dataclass(frozen=True)
class CampaignResult:
    passed: bool
    steps: int
    stats: HarnessStats
    counterexample: Optional[Counterexample] = None
    minimized: Optional[Counterexample] = None
    internal_error: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "passed": self.passed,
            "steps": self.steps,
            "stats": self.stats.to_dict(),
            "counterexample": None if self.counterexample is None else self.counterexample.to_dict(),
            "minimized": None if self.minimized is None else self.minimized.to_dict(),
            "internal_error": self.internal_error,
        }


@dataclass(frozen=True)
class ReplayResult:
    outcomes: tuple
    trace: Tuple[OperationRecord, ...]
    violation: Optional[InvariantViolation] = None
    internal_error: Optional[HarnessInternalError] = None


def raw_word(rng: random.Random) -> int:
    """A 256-bit driver word biased toward the edges clamps care about."""
    pick = rng.random()
    if pick < 0.15:
        return rng.randrange(4)
    if pick < 0.25:
        return RAW_MAX - rng.randrange(4)
    if pick < 0.35:
        return UINT112_MAX + rng.randrange(-2, 3)
    if pick < 0.65:
        return rng.randrange(1 << 24)
    return rng.getrandbits(256)


def generate_calls(campaign_config: CampaignConfig) -> List[DriverCall]:
    """The driver call sequence a campaign issues for its seed."""
    rng = random.Random(campaign_config.seed)
    entries = [e for e in ENTRY_POINTS if campaign_config.weights.get(e, 0) > 0]
    weights = [campaign_config.weights[e] for e in entries]
    calls = []
    for _ in range(campaign_config.steps):
        entry = rng.choices(entries, weights=weights)[0]
        calls.append((entry, tuple(raw_word(rng) for _ in range(_ARITY[entry]))))
    return calls


def _execute(
    calls: Sequence[DriverCall],
    sut_factory: SutFactory,
    harness_config: HarnessConfig,
) -> Tuple[PairHarness, list, Optional[InvariantViolation], Optional[HarnessInternalError]]:
    harness = PairHarness(sut_factory(), harness_config)
    outcomes = []
    try:
        for entry, raw_args in calls:
            outcomes.append(harness.call(entry, raw_args))
        harness.finish()
    except InvariantViolation as exc:
        return harness, outcomes, exc, None
    except HarnessInternalError as exc:
        return harness, outcomes, None, exc
    return harness, outcomes, None, None


def replay(
    trace: Sequence[OperationRecord],
    sut_factory: SutFactory,
    harness_config: HarnessConfig,
) -> ReplayResult:
    """
    Re-run the driver calls behind `trace` on a fresh pair.

    Same raw arguments on a fresh pair give the same clamped arguments and
    outcomes, so a counterexample trace reproduces its violation.
    """
    harness, outcomes, violation, error = _execute(driver_calls(trace), sut_factory, harness_config)
    return ReplayResult(
        outcomes=tuple(outcomes),
        trace=harness.trace,
        violation=violation,
        internal_error=error,
    )


def _reproduces(
    calls: Sequence[DriverCall],
    target: Sequence[str],
    sut_factory: SutFactory,
    harness_config: HarnessConfig,
) -> Optional[InvariantViolation]:
    _, _, violation, _ = _execute(calls, sut_factory, harness_config)
    if violation is None or not set(target) <= set(violation.violations):
        return None
    return violation


def minimize_trace(
    counterexample: Counterexample,
    sut_factory: SutFactory,
    harness_config: HarnessConfig,
) -> Counterexample:
    """
    Shrink a counterexample by chunk-halving removal of driver calls.

    A removal is kept while replaying the shorter sequence still reports
    every originally violated property. Returns the input unchanged if it no
    longer reproduces.
    """
    calls = driver_calls(counterexample.trace)
    best = _reproduces(calls, counterexample.violations, sut_factory, harness_config)
    if best is None:
        logger.warning("counterexample did not reproduce; skipping minimization")
        return counterexample

    chunk = max(len(calls) // 2, 1)
    while chunk >= 1 and calls:
        i = 0
        while i < len(calls):
            candidate = calls[:i] + calls[i + chunk:]
            found = _reproduces(candidate, counterexample.violations, sut_factory, harness_config)
            if found is not None:
                calls, best = candidate, found
            else:
                i += chunk
        chunk //= 2

    logger.info(
        "minimized counterexample from %d to %d driver calls",
        len(driver_calls(counterexample.trace)), len(calls),
    )
    return best.counterexample


def run_campaign(
    sut_factory: SutFactory,
    harness_config: HarnessConfig,
    campaign_config: CampaignConfig,
) -> CampaignResult:
    """
    Run one seeded campaign on a fresh pair; halts at the first failure.

    A harness internal error (a crashing pair, an impossible read) fails the
    campaign like a violation does, with the trace up to and including the
    offending call. Such traces are reported as-is, never minimized.
    """
    calls = generate_calls(campaign_config)
    harness, outcomes, violation, error = _execute(calls, sut_factory, harness_config)
    if error is not None:
        logger.warning("campaign seed=%d aborted: %s", campaign_config.seed, error)
        return CampaignResult(
            passed=False,
            steps=len(outcomes),
            stats=harness.stats,
            counterexample=Counterexample(violations=(HARNESS_INTERNAL_ERROR,), trace=error.trace),
            internal_error=str(error),
        )
    if violation is None:
        logger.info("campaign seed=%d passed after %d steps", campaign_config.seed, len(outcomes))
        return CampaignResult(passed=True, steps=len(outcomes), stats=harness.stats)

    logger.warning("campaign seed=%d failed: %s", campaign_config.seed, violation)
    counterexample = violation.counterexample
    minimized = None
    if campaign_config.minimize:
        minimized = minimize_trace(counterexample, sut_factory, harness_config)
    return CampaignResult(
        passed=False,
        steps=len(outcomes),
        stats=harness.stats,
        counterexample=counterexample,
        minimized=minimized,
    )
