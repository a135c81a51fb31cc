"""Ledger data types.

All types are frozen dataclasses. Updates go through ``dataclasses.replace``
and produce a new ``LedgerState``; the previous state is never touched, which
is what makes a rejected settlement leave no trace.

Units/conventions:
- ``xs`` are exposures and ``ys`` signed fees, both scaled by 1e9.
- ``normalized_stables`` counters are in normalized units: stablecoin amount
  ``= normalized * normalizer / 1e27``.
- ``oracle_config``, ``oracle_storage`` and ``manager_config`` are opaque
  bytes owned by the respective collaborators.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum, unique
from typing import Mapping

# 1e27 (same value as core.math.BASE_27)
UNIT_NORMALIZER = 10**27


AssetId = str
Address = str


@unique
class ActionType(Enum):
    MINT = "mint"
    BURN = "burn"


@unique
class TrustedType(Enum):
    UPDATER = "updater"
    SELLER = "seller"


@dataclass(frozen=True)
class Curve:
    """Piecewise-linear fee curve: breakpoints ``(xs[i], ys[i])`` in walk order."""

    xs: tuple[int, ...] = ()
    ys: tuple[int, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "xs", tuple(self.xs))
        object.__setattr__(self, "ys", tuple(self.ys))
        if len(self.xs) != len(self.ys):
            raise ValueError(f"curve arity mismatch: {len(self.xs)} xs vs {len(self.ys)} ys")

    def __len__(self) -> int:
        return len(self.xs)

    @property
    def is_set(self) -> bool:
        return len(self.xs) > 0


@dataclass(frozen=True)
class Collateral:
    """Per-asset record. ``decimals == 0`` means the asset is not registered."""

    decimals: int = 0
    normalized_stables: int = 0
    oracle_config: bytes = b""
    oracle_storage: bytes = b""
    mint_curve: Curve = field(default_factory=Curve)
    burn_curve: Curve = field(default_factory=Curve)
    is_mint_live: bool = False
    is_burn_live: bool = False
    is_managed: bool = False
    manager_config: bytes = b""

    def curve(self, action: ActionType) -> Curve:
        return self.mint_curve if action is ActionType.MINT else self.burn_curve

    def is_live(self, action: ActionType) -> bool:
        return self.is_mint_live if action is ActionType.MINT else self.is_burn_live


EMPTY_COLLATERAL = Collateral()


@dataclass(frozen=True)
class LedgerState:
    """The whole engine state; the normalizer and both counters move together."""

    stablecoin: AssetId
    normalized_stables: int = 0
    normalizer: int = UNIT_NORMALIZER
    collateral_list: tuple[AssetId, ...] = ()
    collaterals: Mapping[AssetId, Collateral] = field(default_factory=dict)
    trusted: frozenset[Address] = frozenset()
    seller_trusted: frozenset[Address] = frozenset()

    def collateral(self, asset: AssetId) -> Collateral:
        """Record for *asset*, or the zero-decimals sentinel when unregistered."""
        return self.collaterals.get(asset, EMPTY_COLLATERAL)

    def with_collateral(self, asset: AssetId, record: Collateral) -> "LedgerState":
        collaterals = dict(self.collaterals)
        collaterals[asset] = record
        return replace(self, collaterals=collaterals)


def initial_state(stablecoin: AssetId) -> LedgerState:
    """Empty ledger: zero reserves, unit normalizer, no collateral."""
    return LedgerState(stablecoin=stablecoin)
