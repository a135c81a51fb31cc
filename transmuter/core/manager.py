"""
Availability guard for collateral deployed by an external manager.

A managed collateral may have most of its balance deployed to yield
strategies. A burn must be payable from what the manager can release
immediately; there is no partial fill.
"""

from __future__ import annotations

from typing import Optional, Protocol

from ..state.ledger import AssetId, Collateral
from .errors import InvalidSwap


class Manager(Protocol):
    """Idle-capital manager collaborator."""

    def max_available(self, asset: AssetId) -> int:
        """Collateral that can be released right now, in collateral units."""
        ...

    def pull_all(self, asset: AssetId, manager_config: bytes) -> None:
        """Bring every deployed unit of *asset* back (used when detaching)."""
        ...


def check_amounts(record: Collateral, asset: AssetId, amount_out: int, manager: Optional[Manager]) -> None:
    """Raise ``InvalidSwap`` if a managed *asset* cannot pay *amount_out* now."""
    if not record.is_managed:
        return
    if manager is None:
        raise InvalidSwap(f"{asset} is managed but no manager is attached")
    available = manager.max_available(asset)
    if available < amount_out:
        raise InvalidSwap(f"insufficient managed liquidity for {asset}: {available} < {amount_out}")
