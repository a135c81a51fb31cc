"""
Imperative shell: configuration loading and the stateful engine
"""

from .config import build_state, load_config
from .engine import Stablecoin, TokenTransfer, TransmuterEngine
from .memory import InMemoryManager, InMemoryStablecoin, InMemoryToken

__all__ = [
    "build_state",
    "InMemoryManager",
    "InMemoryStablecoin",
    "InMemoryToken",
    "load_config",
    "Stablecoin",
    "TokenTransfer",
    "TransmuterEngine",
]
