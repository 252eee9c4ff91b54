"""
Core constant-product algorithms
"""

from .cpmm import (
    BPS_DENOM,
    compute_fee_total,
    compute_lp_burn,
    compute_lp_mint,
    constant_product,
    first_mint_threshold,
    get_amount_out,
)

__all__ = [
    "BPS_DENOM",
    "compute_fee_total",
    "compute_lp_burn",
    "compute_lp_mint",
    "constant_product",
    "first_mint_threshold",
    "get_amount_out",
]
