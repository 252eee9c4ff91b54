"""Data types for the pair harness.

All records are frozen dataclasses (immutable). Amounts are unbounded Python
ints; raw driver arguments are kept verbatim so a trace can be replayed.

Operation kinds form a closed set (SWAP / ADD / REMOVE); several driver entry
points map onto the same kind (e.g. `add` and `add_unchecked` are both ADD).
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, unique
from typing import Any, Dict, Optional, Tuple, Union

from ..core.cpmm import constant_product
from ..state.balances import Actor, Amount, Token


@unique
class OpKind(Enum):
    SWAP = "swap"
    ADD = "add"
    REMOVE = "remove"


@unique
class RevertExpectation(Enum):
    """What the harness predicts about a call before issuing it."""
    SUCCEED = "succeed"
    REVERT_OR_NOOP = "revert_or_noop"  # boundary input: revert, or succeed without changing state
    REVERT = "revert"                  # adversarial input the pair must reject


@dataclass(frozen=True)
class SwapArgs:
    actor: Actor
    token_in: Token
    amount_in: Amount

    @property
    def token_out(self) -> Token:
        return self.token_in.other


@dataclass(frozen=True)
class AddArgs:
    actor: Actor
    amount0: Amount
    amount1: Amount


@dataclass(frozen=True)
class RemoveArgs:
    actor: Actor
    shares: Amount


ClampedArgs = Union[SwapArgs, AddArgs, RemoveArgs]


@dataclass(frozen=True)
class SwapResult:
    amount_out: Amount
    quoted_out: Amount  # pair's own quote taken just before the call


@dataclass(frozen=True)
class MintResult:
    shares: Amount


@dataclass(frozen=True)
class BurnResult:
    amount0: Amount
    amount1: Amount


OpResult = Union[SwapResult, MintResult, BurnResult]


@dataclass(frozen=True)
class ActorBalances:
    token0: Amount
    token1: Amount
    shares: Amount

    def of(self, token: Token) -> Amount:
        if token is Token.TOKEN0:
            return self.token0
        if token is Token.TOKEN1:
            return self.token1
        return self.shares


@dataclass(frozen=True)
class PoolSnapshot:
    """Point-in-time view of everything the harness can observe."""

    reserve0: Amount
    reserve1: Amount
    total_supply: Amount
    balances: Tuple[Tuple[Actor, ActorBalances], ...]
    block_timestamp: int

    @property
    def k(self) -> int:
        return constant_product(self.reserve0, self.reserve1)

    def reserve(self, token: Token) -> Amount:
        if token is Token.TOKEN0:
            return self.reserve0
        if token is Token.TOKEN1:
            return self.reserve1
        raise ValueError("LP is not a reserve token")

    def balance_of(self, actor: Actor) -> ActorBalances:
        for who, bal in self.balances:
            if who == actor:
                return bal
        raise KeyError(f"actor not tracked by snapshot: {actor}")

    def pool_state(self) -> Tuple[Amount, Amount, Amount]:
        """(reserve0, reserve1, total_supply): the fields zero-input ops must not touch."""
        return (self.reserve0, self.reserve1, self.total_supply)

    def ledger_state(self) -> Tuple[Any, ...]:
        """Pool fields plus every balance; ignores the timestamp."""
        return (self.reserve0, self.reserve1, self.total_supply, self.balances)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "reserve0": self.reserve0,
            "reserve1": self.reserve1,
            "total_supply": self.total_supply,
            "block_timestamp": self.block_timestamp,
            "balances": {
                actor: {"token0": b.token0, "token1": b.token1, "shares": b.shares}
                for actor, b in self.balances
            },
        }


@dataclass(frozen=True)
class OperationRecord:
    """One executed driver call: what was asked, what was sent, what happened."""

    index: int
    entry: str
    kind: OpKind
    actor: Actor
    raw_args: Tuple[int, ...]
    clamped: ClampedArgs
    expectation: RevertExpectation
    reverted: bool
    revert_reason: Optional[str] = None
    result: Optional[OpResult] = None

    @property
    def is_zero_input(self) -> bool:
        c = self.clamped
        if isinstance(c, SwapArgs):
            return c.amount_in == 0
        if isinstance(c, AddArgs):
            return c.amount0 == 0 and c.amount1 == 0
        return c.shares == 0

    def to_dict(self) -> Dict[str, Any]:
        clamped = {k: (v.value if isinstance(v, Token) else v) for k, v in vars(self.clamped).items()}
        result = None if self.result is None else dict(vars(self.result))
        return {
            "index": self.index,
            "entry": self.entry,
            "kind": self.kind.value,
            "actor": self.actor,
            "raw_args": list(self.raw_args),
            "clamped": clamped,
            "expectation": self.expectation.value,
            "reverted": self.reverted,
            "revert_reason": self.revert_reason,
            "result": result,
        }


@dataclass(frozen=True)
class StepOutcome:
    """Returned by a harness entry point when every check passed."""

    record: OperationRecord
    before: PoolSnapshot
    after: PoolSnapshot


@dataclass(frozen=True)
class Counterexample:
    """Violated property names plus the trace that reproduces them from a fresh pair."""

    violations: Tuple[str, ...]
    trace: Tuple[OperationRecord, ...]
    before: Optional[PoolSnapshot] = None
    after: Optional[PoolSnapshot] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "violations": list(self.violations),
            "trace": [r.to_dict() for r in self.trace],
            "before": None if self.before is None else self.before.to_dict(),
            "after": None if self.after is None else self.after.to_dict(),
        }
