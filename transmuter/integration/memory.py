"""In-memory collaborators for the engine (CLI replays and tests)."""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from typing import Optional

from ..state.ledger import Address, AssetId


class InsufficientBalance(Exception):
    pass


def _debit(balances: dict[Address, int], account: Address, amount: int, what: str) -> None:
    if balances[account] < amount:
        raise InsufficientBalance(f"{account} holds {balances[account]} {what}, needs {amount}")
    balances[account] -= amount


@dataclass
class InMemoryToken:
    """Collateral balances per asset and account; the reserve account holds the backing."""

    reserve: Address = "transmuter"
    balances: dict[AssetId, dict[Address, int]] = field(default_factory=lambda: defaultdict(lambda: defaultdict(int)))

    def credit(self, asset: AssetId, account: Address, amount: int) -> None:
        self.balances[asset][account] += amount

    def balance_of(self, asset: AssetId, account: Address) -> int:
        return self.balances[asset][account]

    def transfer_collateral(
        self,
        asset: AssetId,
        manager_target: Optional[bytes],
        account: Address,
        amount: int,
        is_mint: bool,
    ) -> None:
        book = self.balances[asset]
        if is_mint:
            _debit(book, account, amount, asset)
            book[self.reserve] += amount
        else:
            _debit(book, self.reserve, amount, asset)
            book[account] += amount


@dataclass
class InMemoryStablecoin:
    balances: dict[Address, int] = field(default_factory=lambda: defaultdict(int))
    total_supply: int = 0

    def mint(self, to: Address, amount: int) -> None:
        self.balances[to] += amount
        self.total_supply += amount

    def burn_self(self, amount: int, from_: Address) -> None:
        _debit(self.balances, from_, amount, "stablecoins")
        self.total_supply -= amount


@dataclass
class InMemoryManager:
    """Manager reporting a fixed idle amount per asset."""

    available: dict[AssetId, int] = field(default_factory=dict)
    pulled: list[tuple[AssetId, bytes]] = field(default_factory=list)

    def max_available(self, asset: AssetId) -> int:
        return self.available.get(asset, 0)

    def pull_all(self, asset: AssetId, manager_config: bytes) -> None:
        self.pulled.append((asset, manager_config))
