"""
Operation handlers: the driver-facing entry points of the harness.

`PairHarness` wraps one pair instance. Each entry point takes raw,
unconstrained integers from the driver and runs one step:

1. snapshot the pair (and confirm nothing changed since the last step),
2. clamp the raw arguments and predict whether the call should succeed,
3. call the pair; a `Revert` is a recorded outcome, not a failure,
4. snapshot again, append the `OperationRecord` to the trace,
5. check revert expectations, step properties and the shadow pool.

Any violation halts the harness and raises `InvariantViolation` carrying the
whole trace; later calls raise `HarnessHalted`. Steps are strictly
sequential: a call that arrives while another step is in flight (e.g. a pair
calling back into the harness) is a `HarnessInternalError`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from .clamp import (
    Clamped,
    clamp_add,
    clamp_remove,
    clamp_remove_overdraw,
    clamp_swap,
    clamp_swap_overdraw,
    in_domain,
)
from .config import HarnessConfig
from .errors import HarnessError, HarnessHalted, HarnessInternalError, InvariantViolation
from .properties import check_campaign_end, check_roundtrip, check_state, check_step
from .shadow import ShadowPool, predict_burn, predict_mint
from .snapshot import capture_snapshot
from .sut import PairSUT, Revert
from .types import (
    AddArgs,
    BurnResult,
    ClampedArgs,
    MintResult,
    OperationRecord,
    OpKind,
    OpResult,
    PoolSnapshot,
    RemoveArgs,
    RevertExpectation,
    StepOutcome,
    SwapArgs,
    SwapResult,
)

logger = logging.getLogger(__name__)

ENTRY_POINTS: Tuple[str, ...] = (
    "swap",
    "swap_overdraw",
    "add",
    "add_unchecked",
    "remove",
    "remove_overdraw",
    "roundtrip",
)


@dataclass(frozen=True)
class _Plan:
    kind: OpKind
    args: ClampedArgs
    expectation: RevertExpectation
    checked: bool  # clamped into the actor's holdings (not an overdraw variant)
    quote: int = 0


@dataclass
class EntryStats:
    calls: int = 0
    successes: int = 0
    reverts: int = 0
    expected_reverts: int = 0


@dataclass
class HarnessStats:
    """Per-entry-point outcome counters for coverage reporting."""

    entries: Dict[str, EntryStats] = field(default_factory=dict)

    def observe(self, record: OperationRecord) -> None:
        stats = self.entries.setdefault(record.entry, EntryStats())
        stats.calls += 1
        if record.reverted:
            stats.reverts += 1
            if record.expectation is not RevertExpectation.SUCCEED:
                stats.expected_reverts += 1
        else:
            stats.successes += 1

    @property
    def steps(self) -> int:
        return sum(s.calls for s in self.entries.values())

    @property
    def reverts(self) -> int:
        return sum(s.reverts for s in self.entries.values())

    def to_dict(self) -> Dict[str, Dict[str, int]]:
        return {name: dict(vars(s)) for name, s in sorted(self.entries.items())}


def _call_swap(sut: PairSUT, plan: _Plan) -> OpResult:
    args: SwapArgs = plan.args
    amount_out = sut.swap(args.token_in, args.amount_in, args.actor)
    return SwapResult(amount_out=amount_out, quoted_out=plan.quote)


def _call_mint(sut: PairSUT, plan: _Plan) -> OpResult:
    args: AddArgs = plan.args
    return MintResult(shares=sut.mint(args.amount0, args.amount1, args.actor))


def _call_burn(sut: PairSUT, plan: _Plan) -> OpResult:
    args: RemoveArgs = plan.args
    amount0, amount1 = sut.burn(args.shares, args.actor)
    return BurnResult(amount0=amount0, amount1=amount1)


_SUT_CALLS: Dict[OpKind, Callable[[PairSUT, _Plan], OpResult]] = {
    OpKind.SWAP: _call_swap,
    OpKind.ADD: _call_mint,
    OpKind.REMOVE: _call_burn,
}


def _result_is_well_formed(result: OpResult) -> bool:
    return all(isinstance(v, int) and not isinstance(v, bool) for v in vars(result).values())


def driver_calls(trace: Sequence[OperationRecord]) -> List[Tuple[str, Tuple[int, ...]]]:
    """
    The (entry, raw_args) calls that regenerate `trace` on a fresh pair.

    A roundtrip issues its burn itself, so the burn half of a roundtrip is
    not a separate driver call.
    """
    calls = []
    for record in trace:
        if record.entry == "roundtrip" and record.kind is OpKind.REMOVE:
            continue
        calls.append((record.entry, record.raw_args))
    return calls


class PairHarness:
    """Stateful harness around a single pair instance."""

    def __init__(self, sut: PairSUT, config: HarnessConfig) -> None:
        self._sut = sut
        self._config = config
        self._clock = 0
        self._trace: List[OperationRecord] = []
        self._busy = False
        self._failure: Optional[HarnessError] = None
        self.stats = HarnessStats()

        self._initial = self._capture()
        self._last = self._initial
        self._shadow = ShadowPool.from_snapshot(self._initial, config.minimum_liquidity)

        violations = check_state(self._initial, config)
        if violations:
            raise self._fail(InvariantViolation(violations, after=self._initial))

    # -- accessors ----------------------------------------------------------

    @property
    def config(self) -> HarnessConfig:
        return self._config

    @property
    def trace(self) -> Tuple[OperationRecord, ...]:
        return tuple(self._trace)

    @property
    def initial_snapshot(self) -> PoolSnapshot:
        return self._initial

    @property
    def last_snapshot(self) -> PoolSnapshot:
        return self._last

    @property
    def shadow(self) -> ShadowPool:
        return self._shadow

    @property
    def halted(self) -> bool:
        return self._failure is not None

    # -- driver entry points ------------------------------------------------

    def swap(self, actor: int, token: int, amount: int) -> StepOutcome:
        return self._step("swap", (actor, token, amount), self._plan_swap)

    def swap_overdraw(self, actor: int, token: int, amount: int) -> StepOutcome:
        return self._step("swap_overdraw", (actor, token, amount), self._plan_swap_overdraw)

    def add(self, actor: int, amount0: int, amount1: int) -> StepOutcome:
        return self._step("add", (actor, amount0, amount1), self._plan_add)

    def add_unchecked(self, actor: int, amount0: int, amount1: int) -> StepOutcome:
        """Like `add`, but never lifts a first deposit to the minimum-liquidity threshold."""
        return self._step("add_unchecked", (actor, amount0, amount1), self._plan_add_unchecked)

    def remove(self, actor: int, shares: int) -> StepOutcome:
        return self._step("remove", (actor, shares), self._plan_remove)

    def remove_overdraw(self, actor: int, shares: int) -> StepOutcome:
        return self._step("remove_overdraw", (actor, shares), self._plan_remove_overdraw)

    def roundtrip(self, actor: int, amount0: int, amount1: int) -> Tuple[StepOutcome, Optional[StepOutcome]]:
        """Mint, then immediately burn exactly the minted shares."""
        added = self._step("roundtrip", (actor, amount0, amount1), self._plan_add)
        minted = added.record.result
        if added.record.reverted or not isinstance(minted, MintResult) or minted.shares == 0:
            return added, None

        removed = self._step("roundtrip", (actor, minted.shares), self._plan_remove)
        if removed.record.reverted:
            return added, removed

        violations = check_roundtrip(added.record, removed.record)
        if violations:
            raise self._fail(
                InvariantViolation(
                    violations,
                    record=removed.record,
                    before=added.before,
                    after=removed.after,
                    trace=self._trace,
                )
            )
        return added, removed

    def call(self, entry: str, raw_args: Sequence[int]):
        """Dispatch a driver call by entry-point name (used by replay)."""
        methods = {
            "swap": self.swap,
            "swap_overdraw": self.swap_overdraw,
            "add": self.add,
            "add_unchecked": self.add_unchecked,
            "remove": self.remove,
            "remove_overdraw": self.remove_overdraw,
            "roundtrip": self.roundtrip,
        }
        method = methods.get(entry)
        if method is None:
            raise ValueError(f"unknown entry point: {entry!r}")
        return method(*raw_args)

    def finish(self) -> PoolSnapshot:
        """
        Run the campaign-end checks and return the final snapshot.

        Raises:
            InvariantViolation: if a conservation law or the shadow pool fails
        """
        self._enter()
        try:
            final = self._capture()
            violations = check_campaign_end(self._initial, final, self._config)
            if self._config.check_shadow and self._shadow.mismatch(final) is not None:
                violations.append("shadow_consistency")
            if violations:
                raise self._fail(
                    InvariantViolation(violations, before=self._initial, after=final, trace=self._trace)
                )
            logger.info(
                "campaign end: %d steps, %d reverts, reserves=(%d, %d), supply=%d",
                self.stats.steps, self.stats.reverts, final.reserve0, final.reserve1, final.total_supply,
            )
            return final
        finally:
            self._busy = False

    # -- planning -----------------------------------------------------------

    def _quote(self, args: SwapArgs) -> int:
        try:
            quote = self._sut.get_amount_out(args.token_in, args.amount_in)
        except Revert:
            return 0
        except HarnessError:
            raise
        except Exception as exc:
            raise self._fail(
                HarnessInternalError(f"get_amount_out crashed: {type(exc).__name__}: {exc}", self._trace)
            ) from exc
        if not isinstance(quote, int) or isinstance(quote, bool):
            raise self._fail(HarnessInternalError(f"get_amount_out returned {quote!r}", self._trace))
        return quote

    def _plan_swap(self, raw: Tuple[int, ...], before: PoolSnapshot) -> _Plan:
        clamped = clamp_swap(*raw, before, self._config.actors, self._config.max_reserve)
        args: SwapArgs = clamped.args
        quote = self._quote(args) if args.amount_in > 0 else 0
        reserve_out = before.reserve(args.token_out)
        if clamped.expect_revert or not (0 < quote < reserve_out):
            expectation = RevertExpectation.REVERT_OR_NOOP
        else:
            expectation = RevertExpectation.SUCCEED
        return _Plan(OpKind.SWAP, args, expectation, checked=True, quote=quote)

    def _plan_swap_overdraw(self, raw: Tuple[int, ...], before: PoolSnapshot) -> _Plan:
        clamped = clamp_swap_overdraw(*raw, before, self._config.actors)
        return _Plan(OpKind.SWAP, clamped.args, RevertExpectation.REVERT, checked=False, quote=self._quote(clamped.args))

    def _plan_add_with(self, raw: Tuple[int, ...], before: PoolSnapshot, enforce_minimum: bool) -> _Plan:
        clamped: Clamped = clamp_add(
            *raw,
            before,
            self._config.actors,
            minimum_liquidity=self._config.minimum_liquidity,
            max_reserve=self._config.max_reserve,
            enforce_minimum=enforce_minimum,
        )
        args: AddArgs = clamped.args
        predicted = predict_mint(before, args.amount0, args.amount1, self._config.minimum_liquidity)
        if clamped.expect_revert or predicted <= 0:
            expectation = RevertExpectation.REVERT_OR_NOOP
        else:
            expectation = RevertExpectation.SUCCEED
        return _Plan(OpKind.ADD, args, expectation, checked=True)

    def _plan_add(self, raw: Tuple[int, ...], before: PoolSnapshot) -> _Plan:
        return self._plan_add_with(raw, before, enforce_minimum=True)

    def _plan_add_unchecked(self, raw: Tuple[int, ...], before: PoolSnapshot) -> _Plan:
        return self._plan_add_with(raw, before, enforce_minimum=False)

    def _plan_remove(self, raw: Tuple[int, ...], before: PoolSnapshot) -> _Plan:
        clamped = clamp_remove(*raw, before, self._config.actors)
        args: RemoveArgs = clamped.args
        amount0, amount1 = predict_burn(before, args.shares)
        if clamped.expect_revert or amount0 == 0 or amount1 == 0:
            expectation = RevertExpectation.REVERT_OR_NOOP
        else:
            expectation = RevertExpectation.SUCCEED
        return _Plan(OpKind.REMOVE, args, expectation, checked=True)

    def _plan_remove_overdraw(self, raw: Tuple[int, ...], before: PoolSnapshot) -> _Plan:
        clamped = clamp_remove_overdraw(*raw, before, self._config.actors)
        return _Plan(OpKind.REMOVE, clamped.args, RevertExpectation.REVERT, checked=False)

    # -- step machinery -----------------------------------------------------

    def _enter(self) -> None:
        if self._failure is not None:
            raise HarnessHalted(f"harness halted after failure: {self._failure}", self._trace)
        if self._busy:
            raise self._fail(
                HarnessInternalError("re-entrant harness call while a step is in flight", self._trace)
            )
        self._busy = True

    def _fail(self, error: HarnessError) -> HarnessError:
        if self._failure is None:
            self._failure = error
            logger.warning("harness failure after %d steps: %s", len(self._trace), error)
        return error

    def _capture(self) -> PoolSnapshot:
        try:
            return capture_snapshot(self._sut, self._config.actors, self._clock)
        except HarnessInternalError as exc:
            raise self._fail(HarnessInternalError(str(exc), self._trace)) from exc
        except HarnessError:
            raise
        except Exception as exc:
            raise self._fail(
                HarnessInternalError(f"state read crashed: {type(exc).__name__}: {exc}", self._trace)
            ) from exc

    def _invoke(self, plan: _Plan) -> Tuple[Optional[OpResult], Optional[str]]:
        try:
            result = _SUT_CALLS[plan.kind](self._sut, plan)
        except Revert as exc:
            return None, exc.reason
        if not _result_is_well_formed(result):
            raise self._fail(HarnessInternalError(f"{plan.kind.value} returned malformed result {result!r}", self._trace))
        return result, None

    def _step(
        self,
        entry: str,
        raw_args: Tuple[int, ...],
        planner: Callable[[Tuple[int, ...], PoolSnapshot], _Plan],
    ) -> StepOutcome:
        self._enter()
        try:
            return self._run_step(entry, raw_args, planner)
        finally:
            self._busy = False

    def _run_step(
        self,
        entry: str,
        raw_args: Tuple[int, ...],
        planner: Callable[[Tuple[int, ...], PoolSnapshot], _Plan],
    ) -> StepOutcome:
        before = self._capture()
        if before.ledger_state() != self._last.ledger_state():
            raise self._fail(
                InvariantViolation(["out_of_band_mutation"], before=self._last, after=before, trace=self._trace)
            )

        plan = planner(raw_args, before)
        if plan.checked and not in_domain(plan.args, before):
            raise self._fail(
                HarnessInternalError(f"clamp produced out-of-domain arguments for {entry}: {plan.args}", self._trace)
            )

        index = len(self._trace)
        try:
            result, reason = self._invoke(plan)
        except HarnessError:
            raise
        except Exception as exc:
            crashed = OperationRecord(
                index=index,
                entry=entry,
                kind=plan.kind,
                actor=plan.args.actor,
                raw_args=tuple(raw_args),
                clamped=plan.args,
                expectation=plan.expectation,
                reverted=True,
                revert_reason=f"crash: {type(exc).__name__}: {exc}",
            )
            self._trace.append(crashed)
            self.stats.observe(crashed)
            raise self._fail(
                HarnessInternalError(f"pair crashed during {entry}: {type(exc).__name__}: {exc}", self._trace)
            ) from exc

        self._clock += self._config.seconds_per_step
        after = self._capture()
        record = OperationRecord(
            index=index,
            entry=entry,
            kind=plan.kind,
            actor=plan.args.actor,
            raw_args=tuple(raw_args),
            clamped=plan.args,
            expectation=plan.expectation,
            reverted=reason is not None,
            revert_reason=reason,
            result=result,
        )
        self._trace.append(record)
        self.stats.observe(record)

        violations = check_step(before, after, record, self._config)
        if not record.reverted and record.expectation is RevertExpectation.SUCCEED:
            self._shadow.apply(record)
        if self._config.check_shadow:
            mismatch = self._shadow.mismatch(after)
            if mismatch is not None:
                logger.warning("step %d (%s): %s", index, entry, mismatch)
                violations.append("shadow_consistency")

        if violations:
            raise self._fail(
                InvariantViolation(violations, record=record, before=before, after=after, trace=self._trace)
            )

        if record.reverted:
            logger.debug("step %d %s %s reverted (%s, expected %s)", index, entry, plan.args, reason, plan.expectation.value)
        else:
            logger.debug("step %d %s %s -> %s", index, entry, plan.args, result)
        self._last = after
        return StepOutcome(record=record, before=before, after=after)
