"""
Fee curve validation and segment lookup.

Mint curves are read with increasing exposure (``xs[0] == 0``), burn curves
with decreasing exposure (``xs[0] == 1e9``). The curve evaluator relies on
these conventions, so they are enforced here, when a curve is set, and never
re-checked at quote time.
"""

from __future__ import annotations

from bisect import bisect_right
from typing import Iterable, Sequence

from ..state.ledger import ActionType
from .errors import InvalidParams
from .math import BASE_9, MAX_BURN_FEE, MAX_MINT_FEE, MAX_UINT64, require_int, to_int64


def find_lower_bound(increasing: bool, xs: Sequence[int], exposure: int) -> int:
    """
    Index of the breakpoint that starts the segment containing *exposure*.

    For an increasing array this is the last ``i`` with ``xs[i] <= exposure``;
    for a decreasing array the last ``i`` with ``xs[i] >= exposure``. The
    result is clamped to ``[0, len(xs) - 1]``; ``len(xs) - 1`` means the
    exposure is past the last breakpoint.
    """
    if not xs:
        return 0
    if increasing:
        idx = bisect_right(xs, exposure)
    else:
        idx = bisect_right([-x for x in xs], -exposure)
    return min(max(idx - 1, 0), len(xs) - 1)


def check_fees(
    xs: Sequence[int],
    ys: Sequence[int],
    action: ActionType,
    opposite_first_fees: Iterable[int] = (),
) -> None:
    """
    Validate a fee curve before it is stored.

    *opposite_first_fees* are the first fees of the opposite-direction curves
    of every registered collateral. A negative first fee is only allowed if
    minting then burning (or the reverse) can never pay out more than it took.

    Raises:
        InvalidParams: on any violation.
    """
    n = len(xs)
    if n == 0 or n != len(ys):
        raise InvalidParams("fee curve must have matching, non-empty xs and ys")
    for i in range(n):
        try:
            require_int(xs[i], f"xs[{i}]")
            require_int(ys[i], f"ys[{i}]")
            to_int64(ys[i], f"ys[{i}]")
        except (TypeError, ArithmeticError) as exc:
            raise InvalidParams(str(exc)) from exc
        if not (0 <= xs[i] <= MAX_UINT64):
            raise InvalidParams(f"xs[{i}] out of range: {xs[i]}")
        if ys[i] <= -BASE_9:
            raise InvalidParams(f"ys[{i}] must be above {-BASE_9}: {ys[i]}")

    is_mint = action is ActionType.MINT
    for i in range(n - 1):
        if is_mint and xs[i] >= xs[i + 1]:
            raise InvalidParams("mint breakpoints must be strictly increasing")
        if not is_mint and xs[i] <= xs[i + 1]:
            raise InvalidParams("burn breakpoints must be strictly decreasing")
        if ys[i + 1] < ys[i]:
            raise InvalidParams("fees must be non-decreasing along the curve")

    if is_mint:
        if xs[0] != 0:
            raise InvalidParams("first mint breakpoint must be 0")
        if xs[-1] >= BASE_9:
            raise InvalidParams(f"mint breakpoints must be below {BASE_9}")
        if ys[-1] > MAX_MINT_FEE:
            raise InvalidParams(f"mint fee exceeds {MAX_MINT_FEE}: {ys[-1]}")
    else:
        if xs[0] != BASE_9:
            raise InvalidParams(f"first burn breakpoint must be {BASE_9}")
        if ys[-1] > MAX_BURN_FEE:
            raise InvalidParams(f"burn fee exceeds {MAX_BURN_FEE}: {ys[-1]}")

    if ys[0] < 0:
        for other in opposite_first_fees:
            if other + ys[0] < 0:
                raise InvalidParams(
                    f"negative fee {ys[0]} makes a mint/burn round trip profitable against fee {other}"
                )
