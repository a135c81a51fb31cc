"""Snapshot (de)serialization for ``LedgerState``.

Round-trip property (tested): ``state_from_dict(state_to_dict(s)) == s`` for
all valid states. Bytes fields are hex-encoded; collateral records are emitted
in registration order so snapshots hash deterministically.
"""

from __future__ import annotations

from typing import Any, Mapping

from .canonical import bytes_to_hex, canonical_json_bytes, hex_to_bytes, sha256_hex
from .ledger import Collateral, Curve, LedgerState

_BYTES_FIELDS: tuple[str, ...] = ("oracle_config", "oracle_storage", "manager_config")
_INT_FIELDS: tuple[str, ...] = ("decimals", "normalized_stables")
_BOOL_FIELDS: tuple[str, ...] = ("is_mint_live", "is_burn_live", "is_managed")


def _curve_to_dict(curve: Curve) -> dict[str, list[int]]:
    return {"x": list(curve.xs), "y": list(curve.ys)}


def _curve_from_dict(d: Mapping[str, Any]) -> Curve:
    return Curve(xs=tuple(int(v) for v in d["x"]), ys=tuple(int(v) for v in d["y"]))


def collateral_to_dict(record: Collateral) -> dict[str, Any]:
    out: dict[str, Any] = {name: getattr(record, name) for name in _INT_FIELDS + _BOOL_FIELDS}
    for name in _BYTES_FIELDS:
        out[name] = bytes_to_hex(getattr(record, name))
    out["mint_curve"] = _curve_to_dict(record.mint_curve)
    out["burn_curve"] = _curve_to_dict(record.burn_curve)
    return out


def collateral_from_dict(d: Mapping[str, Any]) -> Collateral:
    kwargs: dict[str, Any] = {}
    for name in _INT_FIELDS:
        val = d[name]
        if not isinstance(val, int) or isinstance(val, bool):
            raise TypeError(f"collateral field {name!r} must be int, got {type(val).__name__}")
        kwargs[name] = val
    for name in _BOOL_FIELDS:
        val = d[name]
        if not isinstance(val, bool):
            raise TypeError(f"collateral field {name!r} must be bool, got {type(val).__name__}")
        kwargs[name] = val
    for name in _BYTES_FIELDS:
        kwargs[name] = hex_to_bytes(d[name], name=name)
    kwargs["mint_curve"] = _curve_from_dict(d["mint_curve"])
    kwargs["burn_curve"] = _curve_from_dict(d["burn_curve"])
    return Collateral(**kwargs)


def state_to_dict(state: LedgerState) -> dict[str, Any]:
    """Serialize a LedgerState to plain JSON-compatible data."""
    return {
        "stablecoin": state.stablecoin,
        "normalized_stables": state.normalized_stables,
        "normalizer": state.normalizer,
        "collateral_list": list(state.collateral_list),
        "collaterals": {asset: collateral_to_dict(state.collaterals[asset]) for asset in state.collateral_list},
        "trusted": sorted(state.trusted),
        "seller_trusted": sorted(state.seller_trusted),
    }


def state_from_dict(d: Mapping[str, Any]) -> LedgerState:
    """Deserialize a dict to a LedgerState. Raises KeyError on missing fields."""
    collateral_list = tuple(d["collateral_list"])
    raw = d["collaterals"]
    if set(raw) != set(collateral_list):
        raise ValueError("collaterals must match collateral_list")
    return LedgerState(
        stablecoin=d["stablecoin"],
        normalized_stables=int(d["normalized_stables"]),
        normalizer=int(d["normalizer"]),
        collateral_list=collateral_list,
        collaterals={asset: collateral_from_dict(raw[asset]) for asset in collateral_list},
        trusted=frozenset(d["trusted"]),
        seller_trusted=frozenset(d["seller_trusted"]),
    )


def state_hash(state: LedgerState) -> str:
    """sha256 over the canonical snapshot; equal states hash equal."""
    return sha256_hex(canonical_json_bytes(state_to_dict(state)))
