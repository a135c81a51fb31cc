"""
Oracle reads and the conservative burn price.

The oracle itself is an external collaborator; this module only decides which
readings a quote uses:
- Mints use the collateral's own mint price.
- Burns use the collateral's own burn price scaled down by the worst deviation
  reported by any collateral sharing its oracle configuration. If one
  correlated collateral has de-pegged, redemptions through the others are
  priced as if they had too.

Prices and deviations are scaled by 1e18 (deviation 1e18 == on peg).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping, Protocol

from ..state.canonical import sha256_hex
from ..state.ledger import AssetId, LedgerState
from .errors import NotCollateral
from .math import BASE_18


class Oracle(Protocol):
    """Price-feed collaborator."""

    def read_mint(self, config: bytes, storage: bytes) -> int:
        """Price of one collateral unit in stablecoins, scaled by 1e18."""
        ...

    def read_burn(self, config: bytes, storage: bytes) -> tuple[int, int]:
        """``(price, deviation)``, both scaled by 1e18; deviation <= 1e18."""
        ...


def oracle_config_hash(config: bytes) -> str:
    return sha256_hex(bytes(config))


def get_mint_oracle(state: LedgerState, asset: AssetId, oracle: Oracle) -> int:
    record = state.collateral(asset)
    if record.decimals == 0:
        raise NotCollateral(asset)
    return oracle.read_mint(record.oracle_config, record.oracle_storage)


def get_burn_oracle(state: LedgerState, asset: AssetId, oracle: Oracle) -> tuple[int, int]:
    """
    Burn price of *asset* and the minimum deviation across its oracle group.

    Every registered collateral whose oracle config hashes like *asset*'s is
    read; there is no caching since deviations change between calls. A peer
    whose read raises aborts the quote.

    Returns:
        ``(price, min_deviation)`` with ``min_deviation <= 1e18``.
    """
    record = state.collateral(asset)
    if record.decimals == 0:
        raise NotCollateral(asset)
    group = oracle_config_hash(record.oracle_config)

    value, min_deviation = oracle.read_burn(record.oracle_config, record.oracle_storage)
    min_deviation = min(min_deviation, BASE_18)
    for peer_asset in state.collateral_list:
        if peer_asset == asset:
            continue
        peer = state.collaterals[peer_asset]
        if oracle_config_hash(peer.oracle_config) != group:
            continue
        _, deviation = oracle.read_burn(peer.oracle_config, peer.oracle_storage)
        if deviation < min_deviation:
            min_deviation = deviation
    return value, min_deviation


@dataclass
class StaticOracle:
    """
    In-memory oracle keyed by a collateral's ``oracle_storage`` bytes.

    Burn prices default to the mint price and deviations to 1e18 (on peg).
    """

    prices: Mapping[bytes, int] = field(default_factory=dict)
    burn_prices: Mapping[bytes, int] = field(default_factory=dict)
    deviations: Mapping[bytes, int] = field(default_factory=dict)

    def read_mint(self, config: bytes, storage: bytes) -> int:
        try:
            return self.prices[storage]
        except KeyError:
            raise KeyError(f"no price for oracle storage {storage!r}") from None

    def read_burn(self, config: bytes, storage: bytes) -> tuple[int, int]:
        price = self.burn_prices.get(storage)
        if price is None:
            price = self.read_mint(config, storage)
        return price, self.deviations.get(storage, BASE_18)
