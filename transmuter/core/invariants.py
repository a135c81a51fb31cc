"""Ledger invariants.

Each function returns True when the invariant holds, and ``check_all()``
returns the list of violated invariant IDs (empty = all pass). Settlement and
every administrative update run ``check_all`` on the post-state before
returning it.
"""

from __future__ import annotations

from typing import Callable

from ..state.ledger import LedgerState
from .math import BASE_18, BASE_36, MAX_UINT128, MAX_UINT216

MAX_DECIMALS = 48


def inv_reserve_sum(s: LedgerState) -> bool:
    return sum(s.collaterals[a].normalized_stables for a in s.collateral_list) == s.normalized_stables


def inv_registry_consistent(s: LedgerState) -> bool:
    listed = set(s.collateral_list)
    return len(listed) == len(s.collateral_list) and listed == set(s.collaterals)


def inv_registered_decimals(s: LedgerState) -> bool:
    return all(1 <= s.collaterals[a].decimals <= MAX_DECIMALS for a in s.collateral_list)


def inv_normalizer_range(s: LedgerState) -> bool:
    return BASE_18 < s.normalizer < BASE_36


def inv_counter_bounds(s: LedgerState) -> bool:
    if not 0 <= s.normalized_stables <= MAX_UINT128:
        return False
    return all(0 <= record.normalized_stables <= MAX_UINT216 for record in s.collaterals.values())


def inv_live_requires_curve(s: LedgerState) -> bool:
    for record in s.collaterals.values():
        if record.is_mint_live and not record.mint_curve.is_set:
            return False
        if record.is_burn_live and not record.burn_curve.is_set:
            return False
    return True


# ---------------------------------------------------------------------------
# Registry + check_all
# ---------------------------------------------------------------------------

INVARIANT_REGISTRY: dict[str, Callable[[LedgerState], bool]] = {
    "inv_reserve_sum": inv_reserve_sum,
    "inv_registry_consistent": inv_registry_consistent,
    "inv_registered_decimals": inv_registered_decimals,
    "inv_normalizer_range": inv_normalizer_range,
    "inv_counter_bounds": inv_counter_bounds,
    "inv_live_requires_curve": inv_live_requires_curve,
}


def check_all(state: LedgerState) -> list[str]:
    """Return list of violated invariant IDs (empty = all pass)."""
    return [
        inv_id
        for inv_id, check_fn in INVARIANT_REGISTRY.items()
        if not check_fn(state)
    ]
