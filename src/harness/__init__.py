"""
Stateful invariant harness for constant-product pairs.

`PairHarness` is the driver-facing surface; `run_campaign`, `replay` and
`minimize_trace` are the in-repo reference driver.
"""

from .campaign import (
    CampaignConfig,
    CampaignResult,
    ReplayResult,
    minimize_trace,
    replay,
    run_campaign,
)
from .config import DEFAULT_ACTORS, UINT112_MAX, HarnessConfig
from .errors import HarnessError, HarnessHalted, HarnessInternalError, InvariantViolation
from .handlers import ENTRY_POINTS, HarnessStats, PairHarness, driver_calls
from .snapshot import capture_snapshot
from .sut import PairSUT, Revert
from .types import (
    Counterexample,
    OperationRecord,
    OpKind,
    PoolSnapshot,
    RevertExpectation,
    StepOutcome,
)

__all__ = [
    "CampaignConfig",
    "CampaignResult",
    "ReplayResult",
    "minimize_trace",
    "replay",
    "run_campaign",
    "DEFAULT_ACTORS",
    "UINT112_MAX",
    "HarnessConfig",
    "HarnessError",
    "HarnessHalted",
    "HarnessInternalError",
    "InvariantViolation",
    "ENTRY_POINTS",
    "HarnessStats",
    "PairHarness",
    "driver_calls",
    "capture_snapshot",
    "PairSUT",
    "Revert",
    "Counterexample",
    "OperationRecord",
    "OpKind",
    "PoolSnapshot",
    "RevertExpectation",
    "StepOutcome",
]
