"""
Per-actor token balance tracking for the reference pair.

Implements BalanceTable[Actor, Token] -> Amount
"""

from enum import Enum, unique
from typing import Dict, Tuple


# Type aliases
Actor = str  # synthetic 20-byte address as hex string
Amount = int  # Non-negative integer (arbitrary precision)


@unique
class Token(Enum):
    """Assets addressable through `balance_of`.

    Only TOKEN0 and TOKEN1 are swappable; LP is the pair's liquidity share.
    """

    TOKEN0 = "token0"
    TOKEN1 = "token1"
    LP = "lp"

    @property
    def other(self) -> "Token":
        if self is Token.TOKEN0:
            return Token.TOKEN1
        if self is Token.TOKEN1:
            return Token.TOKEN0
        raise ValueError("LP has no counterpart token")


class BalanceTable:
    """
    Balance table mapping (actor, token) -> amount.

    Zero balances are dropped to keep the table sparse. Iteration order is
    insertion order; callers that need a stable order sort explicitly.
    """

    def __init__(self):
        self._balances: Dict[Tuple[Actor, Token], Amount] = {}

    def get(self, actor: Actor, token: Token) -> Amount:
        """Get balance for (actor, token). Returns 0 if not found."""
        return self._balances.get((actor, token), 0)

    def set(self, actor: Actor, token: Token, amount: Amount) -> None:
        """
        Set balance for (actor, token).

        Raises:
            ValueError: If amount is negative
        """
        if amount < 0:
            raise ValueError(f"Balance cannot be negative: {amount}")
        if amount == 0:
            self._balances.pop((actor, token), None)
        else:
            self._balances[(actor, token)] = amount

    def add(self, actor: Actor, token: Token, delta: Amount) -> None:
        """
        Add delta to balance (delta may be negative for subtraction).

        Raises:
            ValueError: If resulting balance would be negative
        """
        current = self.get(actor, token)
        new_balance = current + delta
        if new_balance < 0:
            raise ValueError(
                f"Insufficient balance: {current} + {delta} = {new_balance} < 0"
            )
        self.set(actor, token, new_balance)

    def subtract(self, actor: Actor, token: Token, delta: Amount) -> None:
        """
        Subtract a non-negative delta from a balance.

        Raises:
            ValueError: If delta is negative or insufficient balance
        """
        if delta < 0:
            raise ValueError(f"Delta must be non-negative: {delta}")
        self.add(actor, token, -delta)

    def transfer(self, sender: Actor, recipient: Actor, token: Token, amount: Amount) -> None:
        """Move `amount` of `token` from sender to recipient (all-or-nothing)."""
        if amount < 0:
            raise ValueError(f"Transfer amount must be non-negative: {amount}")
        if self.get(sender, token) < amount:
            raise ValueError(
                f"Insufficient balance for transfer: {self.get(sender, token)} < {amount}"
            )
        self.subtract(sender, token, amount)
        self.add(recipient, token, amount)

    def __repr__(self) -> str:
        return f"BalanceTable({len(self._balances)} entries)"
