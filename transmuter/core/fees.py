"""
Exposure-dependent fee kernel (deterministic, integer-only).

A collateral's fee is a piecewise-linear function of its *exposure*: the share
of the stablecoin supply it backs. A swap moves the exposure while it executes,
so the fee is integrated over the swap instead of being sampled once:

- Inside one segment of the curve the fee is treated as linear in the amount of
  stablecoins issued (or burnt). The fee paid on a sub-span is then the average
  of the fees at both ends of the sub-span (trapezoid rule, exact for a linear
  integrand).
- The amount needed to reach the next breakpoint is computed in closed form
  from the exposure definition: with ``s`` the stablecoins issued from the
  collateral and ``o`` those issued from every other collateral, exposure ``x``
  is reached when ``s == o * x / (1 - x)``.

Amounts are stablecoin amounts (18 decimals). Collateral-side amounts have
already been converted to their stablecoin value by the caller.
"""

from __future__ import annotations

import math
from enum import Enum, unique

from ..state.ledger import Curve
from .curves import find_lower_bound
from .errors import InvalidParams
from .math import (
    BASE_9,
    BASE_27,
    apply_fee,
    apply_fee_mint,
    checked_sub,
    invert_fee,
    invert_fee_mint,
    isqrt_up,
    mul_div,
)


@unique
class QuoteType(Enum):
    MINT_EXACT_INPUT = "mint_exact_input"
    MINT_EXACT_OUTPUT = "mint_exact_output"
    BURN_EXACT_INPUT = "burn_exact_input"
    BURN_EXACT_OUTPUT = "burn_exact_output"

    @property
    def is_mint(self) -> bool:
        return self in (QuoteType.MINT_EXACT_INPUT, QuoteType.MINT_EXACT_OUTPUT)

    @property
    def is_exact(self) -> bool:
        """True when the known amount is the stablecoin side, which moves the exposure."""
        return self in (QuoteType.MINT_EXACT_OUTPUT, QuoteType.BURN_EXACT_INPUT)


def compute_fee(quote_type: QuoteType, amount: int, fee: int) -> int:
    """Apply (or invert) a single fee rate to *amount* for the given quote type."""
    if quote_type is QuoteType.MINT_EXACT_INPUT:
        return apply_fee_mint(amount, fee)
    if quote_type is QuoteType.MINT_EXACT_OUTPUT:
        return invert_fee_mint(amount, fee)
    if quote_type is QuoteType.BURN_EXACT_INPUT:
        return apply_fee(amount, fee)
    return invert_fee(amount, fee)


def _stables_to_value(is_mint: bool, stables: int, fee: int) -> int:
    # Collateral value exchanged against `stables` at a constant `fee`.
    return invert_fee_mint(stables, fee) if is_mint else apply_fee(stables, fee)


def _blended_fee(
    quote_type: QuoteType,
    amount: int,
    current_fee: int,
    upper_fee: int,
    to_next: int,
) -> int:
    """
    Average fee over the part of a segment consumed by *amount*.

    With ``g(t) = g0 + (f - g0) * t / b`` the fee after ``t`` stablecoins of a
    segment of capacity ``b``, the average over ``[0, m]`` is
    ``g0 + (f - g0) * m / (2b)``.

    Exact quotes know ``m`` directly. Otherwise *amount* is the collateral-side
    value and ``m`` solves ``amount = m * (1 ± avg(m))``, a quadratic in the
    average fee itself; the relevant root is taken, with the linear term
    rounded up so the blended fee never favours the caller.
    """
    slope = upper_fee - current_fee
    if quote_type.is_exact:
        return current_fee + mul_div(slope, amount, 2 * to_next, round_up=True)

    ac4 = mul_div(2 * BASE_9 * amount, slope, to_next, round_up=True)
    if quote_type.is_mint:
        return (isqrt_up((BASE_9 + current_fee) ** 2 + ac4) + current_fee - BASE_9) // 2

    base_minus_current_sq = (BASE_9 - current_fee) ** 2
    # Always false in exact arithmetic; rounding can flip it.
    if base_minus_current_sq < ac4:
        return (current_fee + BASE_9) // 2
    return (current_fee + BASE_9 - math.isqrt(base_minus_current_sq - ac4)) // 2


def quote_fees(
    quote_type: QuoteType,
    amount: int,
    *,
    collateral_normalized: int,
    total_normalized: int,
    normalizer: int,
    curve: Curve,
) -> int:
    """
    Counter-amount of a swap of *amount*, with the fee integrated over the curve.

    Exact quotes walk the stablecoin amount and accumulate collateral value;
    the other two walk collateral value and accumulate stablecoins.

    Args:
        quote_type: Direction and mode of the swap.
        amount: Known side of the swap, in stablecoin units.
        collateral_normalized: Normalized stablecoins issued from this collateral.
        total_normalized: Normalized stablecoins issued from all collaterals.
        normalizer: Ledger normalizer (1e27 == 1.0).
        curve: The mint curve for mints, the burn curve for burns.

    Raises:
        InvalidParams: The curve is not set.
        MathOverflowError: A segment capacity went negative (ledger inconsistent
            with the curve); the quote fails closed.
    """
    if not curve.is_set:
        raise InvalidParams("fee curve is not set")
    xs, ys = curve.xs, curve.ys
    n = len(xs)

    # No history to interpolate over on the very first swap.
    if total_normalized == 0:
        return compute_fee(quote_type, amount, ys[0])
    if n == 1:
        return compute_fee(quote_type, amount, ys[0])
    if amount == 0:
        return 0

    is_mint = quote_type.is_mint
    is_exact = quote_type.is_exact

    exposure = (collateral_normalized * BASE_9) // total_normalized
    issued = (normalizer * collateral_normalized) // BASE_27
    other = (normalizer * checked_sub(total_normalized, collateral_normalized, "other supply")) // BASE_27

    i = find_lower_bound(is_mint, xs, exposure)
    accumulated = 0
    on_breakpoint = False

    while i < n - 1:
        lower_exposure, upper_exposure = xs[i], xs[i + 1]
        lower_fee, upper_fee = ys[i], ys[i + 1]

        target = (other * upper_exposure) // (BASE_9 - upper_exposure)
        if is_mint:
            to_next = checked_sub(target, issued, "segment capacity")
        else:
            to_next = checked_sub(issued, target, "segment capacity")

        if on_breakpoint or exposure == lower_exposure or lower_fee == upper_fee:
            current_fee = lower_fee
        else:
            current_fee = lower_fee + mul_div(
                upper_fee - lower_fee,
                abs(exposure - lower_exposure),
                abs(upper_exposure - lower_exposure),
            )

        avg_fee = (current_fee + upper_fee) // 2
        segment_value = _stables_to_value(is_mint, to_next, avg_fee)
        capacity = to_next if is_exact else segment_value
        segment_counter = segment_value if is_exact else to_next

        if capacity == amount:
            # Lands exactly on the breakpoint: same as consuming the segment.
            return accumulated + segment_counter
        if capacity > amount:
            mid_fee = _blended_fee(quote_type, amount, current_fee, upper_fee, to_next)
            return accumulated + compute_fee(quote_type, amount, mid_fee)

        amount -= capacity
        accumulated += segment_counter
        issued = issued + to_next if is_mint else issued - to_next
        on_breakpoint = True
        i += 1

    # Past the last breakpoint the fee is constant.
    return accumulated + compute_fee(quote_type, amount, ys[n - 1])
