"""
Liquidity share tracking for the reference pair.

Shares are tracked separately from token balances. The minimum-liquidity lock
is held by `LOCK_HOLDER` so that `total_supply()` always equals the sum of all
holdings, locked shares included.
"""

from __future__ import annotations

from typing import Dict

from .balances import Actor, Amount

# Burn address that receives the permanently locked minimum liquidity.
LOCK_HOLDER: Actor = "0x" + "00" * 20


class ShareTable:
    """
    Share table mapping actor -> share amount.

    Notes:
    - Share balances are always non-negative.
    - Zero balances are omitted to keep the table sparse.
    - `total_supply` is maintained alongside the balances, never recomputed.
    """

    def __init__(self) -> None:
        self._balances: Dict[Actor, Amount] = {}
        self._total_supply: Amount = 0

    @property
    def total_supply(self) -> Amount:
        return self._total_supply

    def get(self, actor: Actor) -> Amount:
        """Get share balance for `actor`. Returns 0 if not found."""
        return self._balances.get(actor, 0)

    def mint(self, actor: Actor, amount: Amount) -> None:
        """Issue new shares to `actor`, growing the supply."""
        if amount < 0:
            raise ValueError(f"Mint amount must be non-negative: {amount}")
        if amount == 0:
            return
        self._balances[actor] = self.get(actor) + amount
        self._total_supply += amount

    def burn(self, actor: Actor, amount: Amount) -> None:
        """Destroy shares held by `actor`, shrinking the supply."""
        if amount < 0:
            raise ValueError(f"Burn amount must be non-negative: {amount}")
        current = self.get(actor)
        if amount > current:
            raise ValueError(f"Insufficient shares: {current} < {amount}")
        remaining = current - amount
        if remaining == 0:
            self._balances.pop(actor, None)
        else:
            self._balances[actor] = remaining
        self._total_supply -= amount

    def __repr__(self) -> str:
        return f"ShareTable({len(self._balances)} holders, supply={self._total_supply})"
