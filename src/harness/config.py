"""
Harness configuration.

Pool parameters (fee rate, minimum-liquidity lock) belong to the pair under
test and are supplied by the integration layer; the harness has no defaults
for them.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Tuple

from ..core.cpmm import BPS_DENOM

UINT112_MAX = (1 << 112) - 1

# Pre-funded synthetic senders.
DEFAULT_ACTORS: Tuple[str, ...] = (
    "0x0000000000000000000000000000000000010000",
    "0x0000000000000000000000000000000000020000",
    "0x0000000000000000000000000000000000030000",
)


@dataclass(frozen=True)
class HarnessConfig:
    fee_bps: int
    minimum_liquidity: int
    actors: Tuple[str, ...] = DEFAULT_ACTORS
    # Reserves above this are treated as silent wraparound/overflow.
    max_reserve: int = UINT112_MAX
    # Logical clock advance recorded in snapshots per executed operation.
    seconds_per_step: int = 12
    # Compare every snapshot with the independently tracked shadow pool.
    check_shadow: bool = True

    def __post_init__(self) -> None:
        for name in ("fee_bps", "minimum_liquidity", "max_reserve", "seconds_per_step"):
            value = getattr(self, name)
            if not isinstance(value, int) or isinstance(value, bool):
                raise TypeError(f"{name} must be an int")
        if not (0 <= self.fee_bps <= BPS_DENOM):
            raise ValueError(f"fee_bps must be in [0, {BPS_DENOM}]: {self.fee_bps}")
        if self.minimum_liquidity < 0:
            raise ValueError(f"minimum_liquidity must be non-negative: {self.minimum_liquidity}")
        if self.max_reserve <= 0:
            raise ValueError(f"max_reserve must be positive: {self.max_reserve}")
        if self.seconds_per_step < 0:
            raise ValueError(f"seconds_per_step must be non-negative: {self.seconds_per_step}")
        if not self.actors:
            raise ValueError("at least one actor is required")
        if len(set(self.actors)) != len(self.actors):
            raise ValueError("actors must be distinct")

    @classmethod
    def for_pair(cls, pair: Any, **overrides: Any) -> "HarnessConfig":
        """Build a config from a pair exposing `config.fee_bps` / `config.minimum_liquidity`."""
        params = {
            "fee_bps": pair.config.fee_bps,
            "minimum_liquidity": pair.config.minimum_liquidity,
            "max_reserve": pair.config.max_reserve,
        }
        params.update(overrides)
        return cls(**params)
