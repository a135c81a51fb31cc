"""
Ledger state for the transmuter core
"""

from .ledger import (
    ActionType,
    Collateral,
    Curve,
    LedgerState,
    TrustedType,
    initial_state,
)
from .snapshot import state_from_dict, state_hash, state_to_dict

__all__ = [
    "ActionType",
    "Collateral",
    "Curve",
    "LedgerState",
    "TrustedType",
    "initial_state",
    "state_from_dict",
    "state_hash",
    "state_to_dict",
]
