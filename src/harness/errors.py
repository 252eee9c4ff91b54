"""Exception types for the pair harness.

Three outcomes leave a harness step:
- a SUT `Revert` (see ``sut.py``) is a recorded outcome, never raised here;
- ``InvariantViolation`` is the primary failure signal;
- ``HarnessInternalError`` means the harness itself can no longer be trusted.
Both failures carry the full operation trace since the pair was created.
"""

from __future__ import annotations

from typing import Optional, Sequence, Tuple

from .types import Counterexample, OperationRecord, PoolSnapshot


class HarnessError(Exception):
    """Base class; `trace` is every record executed on this pair so far."""

    def __init__(self, message: str, trace: Sequence[OperationRecord] = ()) -> None:
        self.trace: Tuple[OperationRecord, ...] = tuple(trace)
        super().__init__(message)


class InvariantViolation(HarnessError):
    """Raised when a step (or campaign end) violates one or more properties."""

    def __init__(
        self,
        violations: Sequence[str],
        *,
        record: Optional[OperationRecord] = None,
        before: Optional[PoolSnapshot] = None,
        after: Optional[PoolSnapshot] = None,
        trace: Sequence[OperationRecord] = (),
    ) -> None:
        self.violations: Tuple[str, ...] = tuple(violations)
        self.record = record
        self.before = before
        self.after = after
        where = "campaign end" if record is None else f"step {record.index} ({record.entry})"
        super().__init__(f"invariant violations at {where}: {', '.join(self.violations)}", trace)

    @property
    def counterexample(self) -> Counterexample:
        return Counterexample(
            violations=self.violations,
            trace=self.trace,
            before=self.before,
            after=self.after,
        )


class HarnessInternalError(HarnessError):
    """Snapshot inconsistency, out-of-domain clamp, re-entrancy or a crashing SUT."""


class HarnessHalted(HarnessInternalError):
    """Raised for any call issued after the harness reported a failure."""
