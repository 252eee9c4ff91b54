"""
Ledger state for the reference constant-product pair
"""

from .balances import Actor, Amount, BalanceTable, Token
from .lp import LOCK_HOLDER, ShareTable

__all__ = [
    "Actor",
    "Amount",
    "BalanceTable",
    "Token",
    "LOCK_HOLDER",
    "ShareTable",
]
