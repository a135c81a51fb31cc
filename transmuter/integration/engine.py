"""
Imperative shell around the pure kernels.

``TransmuterEngine`` owns the current ``LedgerState`` and the collaborators.
Every state-changing call follows the same sequence:

1. run the pure kernel on the current state (raises on rejection),
2. execute the resulting effects against the token collaborators,
3. commit the post-state.

If step 1 or 2 raises, the committed state is unchanged. Collaborators are
called synchronously; a collaborator calling back into a state-changing method
of the same engine is rejected.
"""

from __future__ import annotations

import logging
import time
from contextlib import contextmanager
from typing import Callable, Iterator, Optional, Protocol, Sequence

from ..core import getters, setters
from ..core.errors import InvalidSwap, TransmuterError
from ..core.manager import Manager
from ..core.oracle import Oracle
from ..core.quotes import quote_in, quote_out
from ..core.settlement import (
    CollateralTransfer,
    Effect,
    StablecoinBurn,
    StablecoinMint,
    SwapResult,
    swap_exact_input,
    swap_exact_output,
)
from ..state.ledger import ActionType, Address, AssetId, LedgerState, TrustedType

logger = logging.getLogger(__name__)


class TokenTransfer(Protocol):
    def transfer_collateral(
        self,
        asset: AssetId,
        manager_target: Optional[bytes],
        account: Address,
        amount: int,
        is_mint: bool,
    ) -> None:
        """Pull collateral from *account* (mint) or push it to *account* (burn)."""
        ...


class Stablecoin(Protocol):
    def mint(self, to: Address, amount: int) -> None:
        ...

    def burn_self(self, amount: int, from_: Address) -> None:
        ...


def _wall_clock() -> int:
    return int(time.time())


class TransmuterEngine:
    def __init__(
        self,
        state: LedgerState,
        *,
        oracle: Oracle,
        token: TokenTransfer,
        stablecoin: Stablecoin,
        manager: Optional[Manager] = None,
        clock: Callable[[], int] = _wall_clock,
    ) -> None:
        self._state = state
        self.oracle = oracle
        self.token = token
        self.stablecoin = stablecoin
        self.manager = manager
        self.clock = clock
        self._entered = False

    @property
    def state(self) -> LedgerState:
        return self._state

    @contextmanager
    def _operation(self, name: str) -> Iterator[None]:
        if self._entered:
            raise InvalidSwap(f"reentrant call to {name}")
        self._entered = True
        try:
            yield
        except TransmuterError as exc:
            logger.warning("%s rejected: %s: %s", name, type(exc).__name__, exc)
            raise
        finally:
            self._entered = False

    def _execute(self, effects: Sequence[Effect]) -> None:
        for effect in effects:
            logger.debug("executing %r", effect)
            if isinstance(effect, CollateralTransfer):
                self.token.transfer_collateral(
                    effect.asset, effect.manager_target, effect.account, effect.amount, effect.is_mint
                )
            elif isinstance(effect, StablecoinMint):
                self.stablecoin.mint(effect.to, effect.amount)
            elif isinstance(effect, StablecoinBurn):
                self.stablecoin.burn_self(effect.amount, effect.from_)
            else:
                raise TypeError(f"unknown effect: {effect!r}")

    def _commit_swap(self, result: SwapResult) -> SwapResult:
        self._execute(result.effects)
        self._state = result.state
        logger.info(
            "%s %s: in=%d out=%d normalized_change=%d",
            "mint" if result.is_mint else "burn",
            result.asset,
            result.amount_in,
            result.amount_out,
            result.normalized_change,
        )
        return result

    # -- quotes ------------------------------------------------------------

    def quote_in(self, amount_in: int, token_in: AssetId, token_out: AssetId) -> int:
        return quote_in(self._state, amount_in, token_in, token_out, oracle=self.oracle, manager=self.manager)

    def quote_out(self, amount_out: int, token_in: AssetId, token_out: AssetId) -> int:
        return quote_out(self._state, amount_out, token_in, token_out, oracle=self.oracle, manager=self.manager)

    # -- swaps -------------------------------------------------------------

    def swap_exact_input(
        self,
        amount_in: int,
        amount_out_min: int,
        token_in: AssetId,
        token_out: AssetId,
        to: Address,
        deadline: int,
        *,
        sender: Address,
    ) -> SwapResult:
        with self._operation("swap_exact_input"):
            result = swap_exact_input(
                self._state,
                amount_in,
                amount_out_min,
                token_in,
                token_out,
                to,
                deadline,
                sender=sender,
                now=self.clock(),
                oracle=self.oracle,
                manager=self.manager,
            )
            return self._commit_swap(result)

    def swap_exact_output(
        self,
        amount_out: int,
        amount_in_max: int,
        token_in: AssetId,
        token_out: AssetId,
        to: Address,
        deadline: int,
        *,
        sender: Address,
    ) -> SwapResult:
        with self._operation("swap_exact_output"):
            result = swap_exact_output(
                self._state,
                amount_out,
                amount_in_max,
                token_in,
                token_out,
                to,
                deadline,
                sender=sender,
                now=self.clock(),
                oracle=self.oracle,
                manager=self.manager,
            )
            return self._commit_swap(result)

    # -- administration ----------------------------------------------------

    def _admin(self, name: str, update: Callable[[LedgerState], LedgerState], detail: str) -> LedgerState:
        with self._operation(name):
            self._state = update(self._state)
            logger.info("%s: %s", name, detail)
            return self._state

    def update_normalizer(self, caller: Address, amount: int, increase: bool) -> int:
        """Rebase the supply by *amount* stablecoins; returns the new normalizer."""
        self._admin(
            "update_normalizer",
            lambda s: setters.update_normalizer(s, caller, amount, increase),
            f"{'+' if increase else '-'}{amount} by {caller}",
        )
        return self._state.normalizer

    def add_collateral(
        self, asset: AssetId, decimals: int, *, oracle_config: bytes = b"", oracle_storage: bytes = b""
    ) -> LedgerState:
        return self._admin(
            "add_collateral",
            lambda s: setters.add_collateral(
                s, asset, decimals, oracle_config=oracle_config, oracle_storage=oracle_storage
            ),
            f"{asset} ({decimals} decimals)",
        )

    def revoke_collateral(self, asset: AssetId) -> LedgerState:
        """Remove *asset*; deployed capital is pulled back first when it is managed."""
        with self._operation("revoke_collateral"):
            record = getters.get_collateral_info(self._state, asset)
            post = setters.revoke_collateral(self._state, asset)
            if record.is_managed:
                self._pull_all(asset, record.manager_config)
            self._state = post
            logger.info("revoke_collateral: %s", asset)
            return post

    def set_fees(self, asset: AssetId, xs: Sequence[int], ys: Sequence[int], is_mint: bool) -> LedgerState:
        return self._admin(
            "set_fees",
            lambda s: setters.set_fees(s, asset, xs, ys, is_mint),
            f"{asset} {'mint' if is_mint else 'burn'} curve with {len(xs)} breakpoint(s)",
        )

    def toggle_pause(self, asset: AssetId, action: ActionType) -> LedgerState:
        return self._admin(
            "toggle_pause",
            lambda s: setters.toggle_pause(s, asset, action),
            f"{asset} {action.value}",
        )

    def set_oracle(self, asset: AssetId, config: bytes, storage: bytes) -> LedgerState:
        return self._admin(
            "set_oracle",
            lambda s: setters.set_oracle(s, asset, config, storage),
            asset,
        )

    def set_collateral_manager(self, asset: AssetId, manager_config: Optional[bytes]) -> LedgerState:
        """Attach, replace or detach (``None``) the manager of *asset*."""
        with self._operation("set_collateral_manager"):
            previous = getters.get_collateral_info(self._state, asset)
            post = setters.set_collateral_manager(self._state, asset, manager_config)
            if previous.is_managed:
                self._pull_all(asset, previous.manager_config)
            self._state = post
            logger.info("set_collateral_manager: %s %s", asset, "detached" if manager_config is None else "attached")
            return post

    def adjust_stablecoins(self, asset: AssetId, amount: int, increase: bool) -> LedgerState:
        return self._admin(
            "adjust_stablecoins",
            lambda s: setters.adjust_stablecoins(s, asset, amount, increase),
            f"{asset} {'+' if increase else '-'}{amount}",
        )

    def toggle_trusted(self, address: Address, trust_type: TrustedType) -> LedgerState:
        return self._admin(
            "toggle_trusted",
            lambda s: setters.toggle_trusted(s, address, trust_type),
            f"{address} {trust_type.value}",
        )

    def _pull_all(self, asset: AssetId, manager_config: bytes) -> None:
        if self.manager is None:
            raise InvalidSwap(f"{asset} is managed but no manager is attached")
        logger.debug("pulling all deployed %s", asset)
        self.manager.pull_all(asset, manager_config)
