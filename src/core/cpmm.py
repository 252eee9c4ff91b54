"""
Constant Product Market Maker (CPMM) math.

Integer-only pricing and share math used by the reference pair and by the
harness' shadow model. Every function is pure.

Algorithm Design:
- Type: Fixed-Point Integer Arithmetic / Deterministic Rounding
- Time Complexity: O(1) per operation
- Rounding: fees round up, outputs and shares round down (pool-favourable)
- Invariant: after each swap, x' * y' >= x * y
"""

import math
from typing import Tuple

BPS_DENOM = 10_000

Amount = int


def _require_int(name: str, value: int) -> None:
    if not isinstance(value, int) or isinstance(value, bool):
        raise TypeError(f"{name} must be an int")


def _ceil_div_nonneg(numerator: int, denominator: int) -> int:
    if denominator <= 0:
        raise ValueError("denominator must be positive")
    if numerator < 0:
        raise ValueError("numerator must be non-negative")
    return (numerator + denominator - 1) // denominator


def constant_product(reserve0: Amount, reserve1: Amount) -> int:
    """k = reserve0 * reserve1."""
    return reserve0 * reserve1


def compute_fee_total(gross_in: Amount, fee_bps: int) -> Amount:
    """
    Fee charged on the gross input (ceil rounding).

        fee_total = ceil(gross_in * fee_bps / 10_000)
    """
    _require_int("gross_in", gross_in)
    _require_int("fee_bps", fee_bps)
    if gross_in < 0:
        raise ValueError(f"gross_in must be non-negative: {gross_in}")
    if not (0 <= fee_bps <= BPS_DENOM):
        raise ValueError(f"fee_bps must be in [0, {BPS_DENOM}]: {fee_bps}")
    return _ceil_div_nonneg(gross_in * fee_bps, BPS_DENOM)


def get_amount_out(
    reserve_in: Amount,
    reserve_out: Amount,
    amount_in: Amount,
    fee_bps: int,
) -> Amount:
    """
    Exact-in quote.

        fee = ceil(amount_in * fee_bps / 10_000)
        net_in = amount_in - fee
        amount_out = floor(reserve_out * net_in / (reserve_in + net_in))

    Returns 0 for trades that are too small, for empty pools and for zero
    input; callers decide whether 0 means revert.

    Raises:
        ValueError: on negative inputs or an out-of-range fee
    """
    for name, v in (
        ("reserve_in", reserve_in),
        ("reserve_out", reserve_out),
        ("amount_in", amount_in),
    ):
        _require_int(name, v)
        if v < 0:
            raise ValueError(f"{name} must be non-negative: {v}")

    if reserve_in == 0 or reserve_out == 0 or amount_in == 0:
        return 0

    fee_total = compute_fee_total(amount_in, fee_bps)
    net_in = amount_in - fee_total
    if net_in <= 0:
        return 0
    return (reserve_out * net_in) // (reserve_in + net_in)


def compute_lp_mint(
    reserve0: Amount,
    reserve1: Amount,
    amount0: Amount,
    amount1: Amount,
    lp_supply: Amount,
    minimum_liquidity: Amount,
) -> Amount:
    """
    Shares issued to the depositor for a liquidity deposit.

    For first deposit (lp_supply == 0):
        lp = floor(sqrt(amount0 * amount1)) - minimum_liquidity
    (the lock itself is minted to the burn address by the caller)

    For subsequent deposits:
        lp = min(floor(amount0 * lp_supply / reserve0), floor(amount1 * lp_supply / reserve1))

    The result may be zero or negative for degenerate deposits; callers treat
    a non-positive result as "insufficient liquidity minted".
    """
    for name, v in (
        ("reserve0", reserve0),
        ("reserve1", reserve1),
        ("amount0", amount0),
        ("amount1", amount1),
        ("lp_supply", lp_supply),
        ("minimum_liquidity", minimum_liquidity),
    ):
        _require_int(name, v)
        if v < 0:
            raise ValueError(f"{name} must be non-negative: {v}")

    if lp_supply == 0:
        return math.isqrt(amount0 * amount1) - minimum_liquidity

    if reserve0 == 0 or reserve1 == 0:
        # Supply without reserves: nothing backs new shares.
        return 0

    lp0 = (amount0 * lp_supply) // reserve0
    lp1 = (amount1 * lp_supply) // reserve1
    return min(lp0, lp1)


def compute_lp_burn(
    lp_amount: Amount,
    reserve0: Amount,
    reserve1: Amount,
    lp_supply: Amount,
) -> Tuple[Amount, Amount]:
    """
    Token amounts returned for burning `lp_amount` shares (round down).

        amount0 = floor(lp_amount * reserve0 / lp_supply)
        amount1 = floor(lp_amount * reserve1 / lp_supply)

    Raises:
        ValueError: If inputs are invalid
    """
    for name, v in (
        ("lp_amount", lp_amount),
        ("reserve0", reserve0),
        ("reserve1", reserve1),
        ("lp_supply", lp_supply),
    ):
        _require_int(name, v)
        if v < 0:
            raise ValueError(f"{name} must be non-negative: {v}")
    if lp_supply == 0:
        return 0, 0
    if lp_amount > lp_supply:
        raise ValueError(f"Cannot burn more LP than supply: {lp_amount} > {lp_supply}")

    amount0 = (lp_amount * reserve0) // lp_supply
    amount1 = (lp_amount * reserve1) // lp_supply
    return amount0, amount1


def first_mint_threshold(minimum_liquidity: Amount) -> Amount:
    """Smallest `amount0 * amount1` whose first mint issues at least one share."""
    _require_int("minimum_liquidity", minimum_liquidity)
    if minimum_liquidity < 0:
        raise ValueError(f"minimum_liquidity must be non-negative: {minimum_liquidity}")
    return (minimum_liquidity + 1) ** 2
