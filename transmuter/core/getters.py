"""Read-only views over the ledger."""

from __future__ import annotations

from ..state.ledger import ActionType, Address, AssetId, Collateral, LedgerState
from .errors import NotCollateral
from .math import BASE_27


def _registered(state: LedgerState, asset: AssetId) -> Collateral:
    record = state.collateral(asset)
    if record.decimals == 0:
        raise NotCollateral(asset)
    return record


def get_collateral_list(state: LedgerState) -> list[AssetId]:
    return list(state.collateral_list)


def get_collateral_info(state: LedgerState, asset: AssetId) -> Collateral:
    return _registered(state, asset)


def get_collateral_decimals(state: LedgerState, asset: AssetId) -> int:
    return _registered(state, asset).decimals


def get_collateral_mint_fees(state: LedgerState, asset: AssetId) -> tuple[tuple[int, ...], tuple[int, ...]]:
    curve = _registered(state, asset).mint_curve
    return curve.xs, curve.ys


def get_collateral_burn_fees(state: LedgerState, asset: AssetId) -> tuple[tuple[int, ...], tuple[int, ...]]:
    curve = _registered(state, asset).burn_curve
    return curve.xs, curve.ys


def get_issued_by_collateral(state: LedgerState, asset: AssetId) -> tuple[int, int]:
    """``(issued from asset, issued in total)``, in stablecoins."""
    record = _registered(state, asset)
    return (
        (record.normalized_stables * state.normalizer) // BASE_27,
        (state.normalized_stables * state.normalizer) // BASE_27,
    )


def get_total_issued(state: LedgerState) -> int:
    return (state.normalized_stables * state.normalizer) // BASE_27


def is_paused(state: LedgerState, asset: AssetId, action: ActionType) -> bool:
    return not _registered(state, asset).is_live(action)


def is_trusted(state: LedgerState, address: Address) -> bool:
    return address in state.trusted


def is_trusted_seller(state: LedgerState, address: Address) -> bool:
    return address in state.seller_trusted
