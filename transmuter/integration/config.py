"""
YAML configuration for an initial ledger.

The document is validated fail-closed and the ledger is built through the
administrative setters, so every fee curve goes through the same checks as a
live governance update:

    stablecoin: agEUR
    trusted: [keeper]
    collaterals:
      EUROC:
        decimals: 6
        oracle: {config: {kind: chainlink}, storage: {feed: EUROC}}
        fees:
          mint: {x: [0, 400000000], y: [1000000, 5000000]}
          burn: {x: [1000000000, 300000000], y: [1000000, 10000000]}
        live: {mint: true, burn: true}

Mappings under ``oracle.config``, ``oracle.storage`` and ``manager`` are opaque
to the ledger; they are stored as canonical JSON bytes.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from pathlib import Path
from typing import Any, Union

import yaml

from ..core.errors import ConfigError, TransmuterError
from ..core.invariants import check_all
from ..core.math import BASE_27
from ..core.setters import (
    add_collateral,
    set_collateral_manager,
    set_fees,
    toggle_pause,
    toggle_trusted,
)
from ..state.canonical import canonical_json_bytes
from ..state.ledger import ActionType, LedgerState, TrustedType, initial_state

logger = logging.getLogger(__name__)


def _require_mapping(obj: Any, *, name: str) -> dict[str, Any]:
    if not isinstance(obj, dict):
        raise ConfigError(f"{name} must be a mapping")
    return obj


def _require_list(obj: Any, *, name: str) -> list[Any]:
    if not isinstance(obj, list):
        raise ConfigError(f"{name} must be a list")
    return obj


def _require_str(obj: Any, *, name: str) -> str:
    if not isinstance(obj, str) or not obj.strip():
        raise ConfigError(f"{name} must be a non-empty string")
    return obj.strip()


def _require_int(obj: Any, *, name: str) -> int:
    if not isinstance(obj, int) or isinstance(obj, bool):
        raise ConfigError(f"{name} must be an integer")
    return obj


def _require_bool(obj: Any, *, name: str) -> bool:
    if not isinstance(obj, bool):
        raise ConfigError(f"{name} must be a boolean")
    return obj


def _opaque_bytes(obj: Any, *, name: str) -> bytes:
    """Mapping -> canonical JSON bytes; strings are taken as UTF-8."""
    if obj is None:
        return b""
    if isinstance(obj, str):
        return obj.encode("utf-8")
    try:
        return canonical_json_bytes(_require_mapping(obj, name=name))
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"{name}: {exc}") from exc


def _curve(obj: Any, *, name: str) -> tuple[list[int], list[int]]:
    curve = _require_mapping(obj, name=name)
    xs = [_require_int(v, name=f"{name}.x[{i}]") for i, v in enumerate(_require_list(curve.get("x"), name=f"{name}.x"))]
    ys = [_require_int(v, name=f"{name}.y[{i}]") for i, v in enumerate(_require_list(curve.get("y"), name=f"{name}.y"))]
    return xs, ys


def _add_collateral(state: LedgerState, asset: str, entry: dict[str, Any]) -> LedgerState:
    prefix = f"collaterals.{asset}"
    decimals = _require_int(entry.get("decimals"), name=f"{prefix}.decimals")
    oracle = _require_mapping(entry.get("oracle", {}), name=f"{prefix}.oracle")
    state = add_collateral(
        state,
        asset,
        decimals,
        oracle_config=_opaque_bytes(oracle.get("config"), name=f"{prefix}.oracle.config"),
        oracle_storage=_opaque_bytes(oracle.get("storage"), name=f"{prefix}.oracle.storage"),
    )

    fees = _require_mapping(entry.get("fees", {}), name=f"{prefix}.fees")
    for direction, is_mint in (("mint", True), ("burn", False)):
        if direction in fees:
            xs, ys = _curve(fees[direction], name=f"{prefix}.fees.{direction}")
            state = set_fees(state, asset, xs, ys, is_mint)

    if entry.get("manager") is not None:
        state = set_collateral_manager(state, asset, _opaque_bytes(entry["manager"], name=f"{prefix}.manager"))

    live = _require_mapping(entry.get("live", {}), name=f"{prefix}.live")
    for direction, action in (("mint", ActionType.MINT), ("burn", ActionType.BURN)):
        if _require_bool(live.get(direction, False), name=f"{prefix}.live.{direction}"):
            state = toggle_pause(state, asset, action)
    return state


def _seed_reserves(state: LedgerState, asset: str, normalized: int) -> LedgerState:
    # Counters are seeded in normalized units, as they appear in snapshots.
    if normalized < 0:
        raise ConfigError(f"collaterals.{asset}.normalized_stables must be non-negative")
    if normalized == 0:
        return state
    record = state.collaterals[asset]
    state = state.with_collateral(asset, replace(record, normalized_stables=record.normalized_stables + normalized))
    return replace(state, normalized_stables=state.normalized_stables + normalized)


def build_state(root: Any) -> LedgerState:
    """Build a ``LedgerState`` from an already-parsed configuration mapping."""
    root = _require_mapping(root, name="config")
    state = initial_state(_require_str(root.get("stablecoin"), name="config.stablecoin"))

    normalizer = _require_int(root.get("normalizer", BASE_27), name="config.normalizer")
    state = replace(state, normalizer=normalizer)

    collaterals = _require_mapping(root.get("collaterals", {}), name="config.collaterals")
    try:
        for asset, entry in collaterals.items():
            asset = _require_str(asset, name="collateral id")
            state = _add_collateral(state, asset, _require_mapping(entry, name=f"collaterals.{asset}"))

        for asset, entry in collaterals.items():
            seeded = _require_int(entry.get("normalized_stables", 0), name=f"collaterals.{asset}.normalized_stables")
            state = _seed_reserves(state, asset, seeded)

        for idx, address in enumerate(_require_list(root.get("trusted", []), name="config.trusted")):
            state = toggle_trusted(state, _require_str(address, name=f"config.trusted[{idx}]"), TrustedType.UPDATER)
        for idx, address in enumerate(_require_list(root.get("seller_trusted", []), name="config.seller_trusted")):
            state = toggle_trusted(
                state, _require_str(address, name=f"config.seller_trusted[{idx}]"), TrustedType.SELLER
            )
    except ConfigError:
        raise
    except TransmuterError as exc:
        raise ConfigError(f"{type(exc).__name__}: {exc}") from exc

    violations = check_all(state)
    if violations:
        raise ConfigError(f"configured ledger violates: {', '.join(violations)}")

    logger.info(
        "built ledger for %s with %d collateral(s)",
        state.stablecoin,
        len(state.collateral_list),
    )
    return state


def load_config(path: Union[str, Path]) -> LedgerState:
    """Read a YAML configuration file and build the ledger it describes."""
    path = Path(path)
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"cannot read {path}: {exc}") from exc
    try:
        doc = yaml.safe_load(raw)
    except yaml.YAMLError as exc:
        raise ConfigError(f"invalid YAML in {path}: {exc}") from exc
    logger.debug("loaded config %s", path)
    return build_state(doc)
