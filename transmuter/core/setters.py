"""Administrative state transitions.

One pure function per governance action. Each returns a new ``LedgerState``
(updates go through ``dataclasses.replace()`` on the frozen records) and runs
the ledger invariants on the post-state. Who may call them is decided by the
caller; only ``update_normalizer`` checks its caller, against the trusted sets
stored in the ledger.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Optional, Sequence

from ..state.ledger import EMPTY_COLLATERAL, ActionType, Address, AssetId, Collateral, Curve, LedgerState, TrustedType
from .curves import check_fees
from .errors import (
    AlreadyAdded,
    CollateralBacked,
    InvalidParams,
    InvalidTokens,
    LedgerInvariantError,
    NotCollateral,
    NotTrusted,
)
from .invariants import MAX_DECIMALS, check_all
from .math import BASE_18, BASE_27, BASE_36, checked_sub, mul_div, require_int, to_uint


def _checked(state: LedgerState) -> LedgerState:
    violations = check_all(state)
    if violations:
        raise LedgerInvariantError(violations)
    return state


def _registered(state: LedgerState, asset: AssetId) -> Collateral:
    record = state.collateral(asset)
    if record.decimals == 0:
        raise NotCollateral(asset)
    return record


def add_collateral(
    state: LedgerState,
    asset: AssetId,
    decimals: int,
    *,
    oracle_config: bytes = b"",
    oracle_storage: bytes = b"",
) -> LedgerState:
    """Register *asset*, paused in both directions and with no fee curves."""
    if asset == state.stablecoin:
        raise InvalidTokens(f"{asset} is the stablecoin")
    if state.collateral(asset).decimals != 0:
        raise AlreadyAdded(asset)
    require_int(decimals, "decimals")
    if not 1 <= decimals <= MAX_DECIMALS:
        raise InvalidParams(f"decimals must be in [1, {MAX_DECIMALS}]: {decimals}")

    record = replace(
        EMPTY_COLLATERAL,
        decimals=decimals,
        oracle_config=bytes(oracle_config),
        oracle_storage=bytes(oracle_storage),
    )
    post = state.with_collateral(asset, record)
    return _checked(replace(post, collateral_list=state.collateral_list + (asset,)))


def revoke_collateral(state: LedgerState, asset: AssetId) -> LedgerState:
    """
    Remove *asset* from the registry.

    Only a collateral that no longer backs any stablecoin can be removed. The
    last entry of the collateral list takes the removed entry's slot.
    """
    record = _registered(state, asset)
    if record.normalized_stables != 0:
        raise CollateralBacked(f"{asset} still backs {record.normalized_stables} normalized stablecoins")

    listed = list(state.collateral_list)
    idx = listed.index(asset)
    listed[idx] = listed[-1]
    listed.pop()

    collaterals = dict(state.collaterals)
    del collaterals[asset]
    return _checked(replace(state, collateral_list=tuple(listed), collaterals=collaterals))


def set_fees(state: LedgerState, asset: AssetId, xs: Sequence[int], ys: Sequence[int], is_mint: bool) -> LedgerState:
    """Validate and store the mint (``is_mint``) or burn fee curve of *asset*."""
    record = _registered(state, asset)
    action = ActionType.MINT if is_mint else ActionType.BURN
    opposite = ActionType.BURN if is_mint else ActionType.MINT
    opposite_first_fees = [
        state.collaterals[a].curve(opposite).ys[0]
        for a in state.collateral_list
        if state.collaterals[a].curve(opposite).is_set
    ]
    check_fees(xs, ys, action, opposite_first_fees)

    curve = Curve(xs=tuple(xs), ys=tuple(ys))
    if is_mint:
        record = replace(record, mint_curve=curve)
    else:
        record = replace(record, burn_curve=curve)
    return _checked(state.with_collateral(asset, record))


def toggle_pause(state: LedgerState, asset: AssetId, action: ActionType) -> LedgerState:
    """Flip the liveness of one direction. Unpausing needs a fee curve."""
    record = _registered(state, asset)
    live = not record.is_live(action)
    if live and not record.curve(action).is_set:
        raise InvalidParams(f"cannot unpause {action.value} for {asset}: no fee curve")
    if action is ActionType.MINT:
        record = replace(record, is_mint_live=live)
    else:
        record = replace(record, is_burn_live=live)
    return _checked(state.with_collateral(asset, record))


def set_oracle(state: LedgerState, asset: AssetId, config: bytes, storage: bytes) -> LedgerState:
    record = _registered(state, asset)
    record = replace(record, oracle_config=bytes(config), oracle_storage=bytes(storage))
    return _checked(state.with_collateral(asset, record))


def set_collateral_manager(state: LedgerState, asset: AssetId, manager_config: Optional[bytes]) -> LedgerState:
    """Attach a manager configuration, or detach with ``None``."""
    record = _registered(state, asset)
    if manager_config is None:
        record = replace(record, is_managed=False, manager_config=b"")
    else:
        record = replace(record, is_managed=True, manager_config=bytes(manager_config))
    return _checked(state.with_collateral(asset, record))


def adjust_stablecoins(state: LedgerState, asset: AssetId, amount: int, increase: bool) -> LedgerState:
    """
    Governance correction of the reserves backed by *asset*.

    *amount* is in stablecoins; the same normalized delta is applied to the
    collateral's counter and the global one.
    """
    record = _registered(state, asset)
    require_int(amount, "amount")
    change = mul_div(amount, BASE_27, state.normalizer)
    if increase:
        collateral_stables = to_uint(record.normalized_stables + change, 216, "collateral normalized stables")
        total = to_uint(state.normalized_stables + change, 128, "normalized stables")
    else:
        collateral_stables = checked_sub(record.normalized_stables, change, "collateral normalized stables")
        total = checked_sub(state.normalized_stables, change, "normalized stables")
    post = state.with_collateral(asset, replace(record, normalized_stables=collateral_stables))
    return _checked(replace(post, normalized_stables=total))


def toggle_trusted(state: LedgerState, address: Address, trust_type: TrustedType) -> LedgerState:
    if trust_type is TrustedType.UPDATER:
        return _checked(replace(state, trusted=state.trusted ^ {address}))
    return _checked(replace(state, seller_trusted=state.seller_trusted ^ {address}))


def update_normalizer(state: LedgerState, caller: Address, amount: int, increase: bool) -> LedgerState:
    """
    Rebase every holder's claim by *amount* stablecoins at once.

    The normalizer moves by ``amount * 1e27 / normalized_stables``. When it
    leaves ``(1e18, 1e36)`` the counters absorb its value and it is reset to
    1e27, so normalized amounts keep their precision.
    """
    if caller not in state.trusted and caller not in state.seller_trusted:
        raise NotTrusted(caller)
    require_int(amount, "amount")
    to_uint(amount, 256, "amount")

    total = state.normalized_stables
    if total == 0:
        return _checked(replace(state, normalizer=BASE_27))

    delta = (amount * BASE_27) // total
    if increase:
        normalizer = state.normalizer + delta
    else:
        normalizer = checked_sub(state.normalizer, delta, "normalizer")

    if BASE_18 < normalizer < BASE_36:
        return _checked(replace(state, normalizer=normalizer))

    collaterals = dict(state.collaterals)
    new_total = 0
    for asset in state.collateral_list:
        record = collaterals[asset]
        rescaled = (record.normalized_stables * normalizer) // BASE_27
        collaterals[asset] = replace(record, normalized_stables=rescaled)
        new_total += rescaled
    return _checked(
        replace(
            state,
            collaterals=collaterals,
            normalized_stables=new_total,
            normalizer=BASE_27,
        )
    )
