"""
Swap settlement: quote, guard, and ledger mutation in one pure step.

``swap_exact_input`` / ``swap_exact_output`` never touch tokens themselves.
They return the post-state together with the ordered list of transfers the
shell must execute; the shell commits the post-state only when every transfer
succeeded. A rejected swap raises before any state is produced.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Optional, Union

from ..state.ledger import Address, AssetId, Collateral, LedgerState
from .errors import LedgerInvariantError, TooBigAmountIn, TooLate, TooSmallAmountOut, ZeroAmount
from .invariants import check_all
from .manager import Manager
from .math import BASE_27, checked_sub, mul_div, require_int, to_uint
from .oracle import Oracle
from .quotes import (
    get_mint_burn,
    quote_burn_exact_input,
    quote_burn_exact_output,
    quote_mint_exact_input,
    quote_mint_exact_output,
)


@dataclass(frozen=True)
class CollateralTransfer:
    """Move collateral in (``is_mint``) from *account* or out to *account*."""

    asset: AssetId
    manager_target: Optional[bytes]
    account: Address
    amount: int
    is_mint: bool


@dataclass(frozen=True)
class StablecoinMint:
    to: Address
    amount: int


@dataclass(frozen=True)
class StablecoinBurn:
    amount: int
    from_: Address


Effect = Union[CollateralTransfer, StablecoinMint, StablecoinBurn]


@dataclass(frozen=True)
class SwapResult:
    state: LedgerState
    is_mint: bool
    asset: AssetId
    amount_in: int
    amount_out: int
    normalized_change: int
    effects: tuple[Effect, ...]


def _check_deadline(deadline: int, now: int) -> None:
    if now > deadline:
        raise TooLate(f"deadline {deadline} passed (now {now})")


def _apply_mint(state: LedgerState, asset: AssetId, record: Collateral, amount_out: int) -> tuple[LedgerState, int]:
    change = mul_div(amount_out, BASE_27, state.normalizer, round_up=True)
    new_record = replace(
        record,
        normalized_stables=to_uint(record.normalized_stables + change, 216, "collateral normalized stables"),
    )
    new_total = to_uint(state.normalized_stables + change, 128, "normalized stables")
    return replace(state.with_collateral(asset, new_record), normalized_stables=new_total), change


def _apply_burn(state: LedgerState, asset: AssetId, record: Collateral, amount_in: int) -> tuple[LedgerState, int]:
    change = mul_div(amount_in, BASE_27, state.normalizer)
    new_record = replace(
        record,
        normalized_stables=checked_sub(record.normalized_stables, change, "collateral normalized stables"),
    )
    new_total = checked_sub(state.normalized_stables, change, "normalized stables")
    return replace(state.with_collateral(asset, new_record), normalized_stables=new_total), change


def _settle(
    state: LedgerState,
    *,
    is_mint: bool,
    asset: AssetId,
    record: Collateral,
    amount_in: int,
    amount_out: int,
    to: Address,
    sender: Address,
) -> SwapResult:
    if amount_in == 0 or amount_out == 0:
        raise ZeroAmount(f"amount_in={amount_in} amount_out={amount_out}")

    manager_target = record.manager_config if record.is_managed else None
    if is_mint:
        post, change = _apply_mint(state, asset, record, amount_out)
        effects: tuple[Effect, ...] = (
            CollateralTransfer(asset, manager_target, sender, amount_in, True),
            StablecoinMint(to, amount_out),
        )
    else:
        post, change = _apply_burn(state, asset, record, amount_in)
        effects = (
            StablecoinBurn(amount_in, sender),
            CollateralTransfer(asset, manager_target, to, amount_out, False),
        )

    violations = check_all(post)
    if violations:
        raise LedgerInvariantError(violations)

    return SwapResult(
        state=post,
        is_mint=is_mint,
        asset=asset,
        amount_in=amount_in,
        amount_out=amount_out,
        normalized_change=change,
        effects=effects,
    )


def swap_exact_input(
    state: LedgerState,
    amount_in: int,
    amount_out_min: int,
    token_in: AssetId,
    token_out: AssetId,
    to: Address,
    deadline: int,
    *,
    sender: Address,
    now: int,
    oracle: Oracle,
    manager: Optional[Manager] = None,
) -> SwapResult:
    """
    Swap exactly *amount_in* of *token_in* for at least *amount_out_min* of *token_out*.

    Raises:
        InvalidTokens, NotCollateral, Paused: see ``get_mint_burn``.
        TooLate: ``now > deadline``.
        TooSmallAmountOut: the quote is below *amount_out_min*.
        ZeroAmount: either side settles to zero.
        InvalidSwap: managed collateral cannot pay out immediately.
        LedgerInvariantError: the post-state is inconsistent.
    """
    require_int(amount_in, "amount_in")
    to_uint(amount_in, 256, "amount_in")
    is_mint, asset, record = get_mint_burn(state, token_in, token_out)
    _check_deadline(deadline, now)

    if is_mint:
        amount_out = quote_mint_exact_input(state, asset, amount_in, oracle=oracle)
    else:
        amount_out = quote_burn_exact_input(state, asset, amount_in, oracle=oracle, manager=manager)
    if amount_out < amount_out_min:
        raise TooSmallAmountOut(f"{amount_out} < {amount_out_min}")

    return _settle(
        state,
        is_mint=is_mint,
        asset=asset,
        record=record,
        amount_in=amount_in,
        amount_out=amount_out,
        to=to,
        sender=sender,
    )


def swap_exact_output(
    state: LedgerState,
    amount_out: int,
    amount_in_max: int,
    token_in: AssetId,
    token_out: AssetId,
    to: Address,
    deadline: int,
    *,
    sender: Address,
    now: int,
    oracle: Oracle,
    manager: Optional[Manager] = None,
) -> SwapResult:
    """Receive exactly *amount_out* of *token_out* for at most *amount_in_max* of *token_in*."""
    require_int(amount_out, "amount_out")
    to_uint(amount_out, 256, "amount_out")
    is_mint, asset, record = get_mint_burn(state, token_in, token_out)
    _check_deadline(deadline, now)

    if is_mint:
        amount_in = quote_mint_exact_output(state, asset, amount_out, oracle=oracle)
    else:
        amount_in = quote_burn_exact_output(state, asset, amount_out, oracle=oracle, manager=manager)
    if amount_in > amount_in_max:
        raise TooBigAmountIn(f"{amount_in} > {amount_in_max}")

    return _settle(
        state,
        is_mint=is_mint,
        asset=asset,
        record=record,
        amount_in=amount_in,
        amount_out=amount_out,
        to=to,
        sender=sender,
    )


__all__ = [
    "CollateralTransfer",
    "Effect",
    "StablecoinBurn",
    "StablecoinMint",
    "SwapResult",
    "get_mint_burn",
    "swap_exact_input",
    "swap_exact_output",
]
