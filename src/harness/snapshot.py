"""
Point-in-time capture of SUT-observable state.

A snapshot is read between operations, never during one. To catch a pair
whose reads are not side-effect free (or state mutated behind the harness'
back mid-capture), reserves and supply are read once before and once after
the balance sweep; any difference aborts the campaign.
"""

from __future__ import annotations

from typing import Sequence, Tuple

from ..state.balances import Actor, Token
from .errors import HarnessInternalError
from .sut import PairSUT
from .types import ActorBalances, PoolSnapshot


def _read_int(name: str, value: object) -> int:
    if not isinstance(value, int) or isinstance(value, bool):
        raise HarnessInternalError(f"snapshot read {name} returned non-integer {value!r}")
    if value < 0:
        raise HarnessInternalError(f"snapshot read {name} returned negative {value}")
    return value


def _read_pool(sut: PairSUT) -> Tuple[int, int, int]:
    reserves = sut.get_reserves()
    if not isinstance(reserves, tuple) or len(reserves) != 2:
        raise HarnessInternalError(f"get_reserves() must return a 2-tuple, got {reserves!r}")
    r0 = _read_int("reserve0", reserves[0])
    r1 = _read_int("reserve1", reserves[1])
    supply = _read_int("total_supply", sut.total_supply())
    return r0, r1, supply


def capture_snapshot(sut: PairSUT, actors: Sequence[Actor], block_timestamp: int) -> PoolSnapshot:
    """
    Read reserves, supply and every tracked actor's balances as one snapshot.

    Raises:
        HarnessInternalError: if a read returns a non-integer or a negative value, or the
            pool state changes while the snapshot is being taken
    """
    first = _read_pool(sut)
    balances = tuple(
        (
            actor,
            ActorBalances(
                token0=_read_int(f"balance_of({actor}, token0)", sut.balance_of(actor, Token.TOKEN0)),
                token1=_read_int(f"balance_of({actor}, token1)", sut.balance_of(actor, Token.TOKEN1)),
                shares=_read_int(f"balance_of({actor}, lp)", sut.balance_of(actor, Token.LP)),
            ),
        )
        for actor in actors
    )
    second = _read_pool(sut)
    if first != second:
        raise HarnessInternalError(
            f"pool state changed during snapshot capture: {first} -> {second}"
        )

    r0, r1, supply = first
    return PoolSnapshot(
        reserve0=r0,
        reserve1=r1,
        total_supply=supply,
        balances=balances,
        block_timestamp=block_timestamp,
    )
