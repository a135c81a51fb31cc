"""
Read-only quotes.

Each quote normalizes the collateral amount to 18 decimals, converts it to
stablecoin value with the oracle price, and runs the fee kernel. Fees are
defined on stablecoin amounts, so the price conversion always happens on the
collateral side of the fee step:

    mint exact-in:   collateral -> value -> fees -> stablecoins out
    mint exact-out:  stablecoins out -> fees -> value -> collateral in
    burn exact-in:   stablecoins in -> fees -> value -> collateral out
    burn exact-out:  collateral out -> value -> fees -> stablecoins in

Burn values are additionally scaled by the conservative deviation (see
``oracle.get_burn_oracle``). Amounts the caller pays are rounded up.
"""

from __future__ import annotations

from typing import Optional

from ..state.ledger import AssetId, Collateral, LedgerState
from .errors import InvalidSwap, InvalidTokens, NotCollateral, Paused
from .fees import QuoteType, quote_fees
from .manager import Manager, check_amounts
from .math import BASE_18, STABLECOIN_DECIMALS, convert_decimal_to, mul_div
from .oracle import Oracle, get_burn_oracle, get_mint_oracle


def _registered(state: LedgerState, asset: AssetId) -> Collateral:
    record = state.collateral(asset)
    if record.decimals == 0:
        raise NotCollateral(asset)
    return record


def _require_price(value: int, what: str) -> int:
    if value <= 0:
        raise InvalidSwap(f"oracle returned a non-positive {what}: {value}")
    return value


def _fees(state: LedgerState, record: Collateral, quote_type: QuoteType, amount: int) -> int:
    return quote_fees(
        quote_type,
        amount,
        collateral_normalized=record.normalized_stables,
        total_normalized=state.normalized_stables,
        normalizer=state.normalizer,
        curve=record.mint_curve if quote_type.is_mint else record.burn_curve,
    )


def get_mint_burn(state: LedgerState, token_in: AssetId, token_out: AssetId) -> tuple[bool, AssetId, Collateral]:
    """
    Resolve the swap direction from the token pair.

    Returns:
        ``(is_mint, collateral_asset, collateral_record)``

    Raises:
        InvalidTokens: Neither token is the stablecoin.
        NotCollateral: The other token is not registered.
        Paused: The resolved direction is disabled for the collateral.
    """
    if token_in == state.stablecoin and token_out != state.stablecoin:
        is_mint, asset = False, token_out
    elif token_out == state.stablecoin and token_in != state.stablecoin:
        is_mint, asset = True, token_in
    else:
        raise InvalidTokens(f"{token_in} -> {token_out}")

    record = _registered(state, asset)
    if not (record.is_mint_live if is_mint else record.is_burn_live):
        raise Paused(f"{'mint' if is_mint else 'burn'} paused for {asset}")
    return is_mint, asset, record


def quote_mint_exact_input(state: LedgerState, asset: AssetId, amount_in: int, *, oracle: Oracle) -> int:
    """Stablecoins minted for exactly *amount_in* collateral."""
    record = _registered(state, asset)
    price = _require_price(get_mint_oracle(state, asset, oracle), "mint price")
    value = convert_decimal_to(amount_in, record.decimals, STABLECOIN_DECIMALS)
    value = mul_div(value, price, BASE_18)
    return _fees(state, record, QuoteType.MINT_EXACT_INPUT, value)


def quote_mint_exact_output(state: LedgerState, asset: AssetId, amount_out: int, *, oracle: Oracle) -> int:
    """Collateral required to mint exactly *amount_out* stablecoins."""
    record = _registered(state, asset)
    price = _require_price(get_mint_oracle(state, asset, oracle), "mint price")
    value = _fees(state, record, QuoteType.MINT_EXACT_OUTPUT, amount_out)
    amount_in = mul_div(value, BASE_18, price, round_up=True)
    return convert_decimal_to(amount_in, STABLECOIN_DECIMALS, record.decimals, round_up=True)


def quote_burn_exact_input(
    state: LedgerState,
    asset: AssetId,
    amount_in: int,
    *,
    oracle: Oracle,
    manager: Optional[Manager] = None,
) -> int:
    """Collateral paid out for burning exactly *amount_in* stablecoins."""
    record = _registered(state, asset)
    price, deviation = get_burn_oracle(state, asset, oracle)
    _require_price(price, "burn price")
    _require_price(deviation, "deviation")
    value = mul_div(_fees(state, record, QuoteType.BURN_EXACT_INPUT, amount_in), deviation, BASE_18)
    amount_out = convert_decimal_to(mul_div(value, BASE_18, price), STABLECOIN_DECIMALS, record.decimals)
    check_amounts(record, asset, amount_out, manager)
    return amount_out


def quote_burn_exact_output(
    state: LedgerState,
    asset: AssetId,
    amount_out: int,
    *,
    oracle: Oracle,
    manager: Optional[Manager] = None,
) -> int:
    """Stablecoins to burn to receive exactly *amount_out* collateral."""
    record = _registered(state, asset)
    check_amounts(record, asset, amount_out, manager)
    price, deviation = get_burn_oracle(state, asset, oracle)
    _require_price(price, "burn price")
    _require_price(deviation, "deviation")
    value = convert_decimal_to(amount_out, record.decimals, STABLECOIN_DECIMALS)
    value = mul_div(value, price, deviation, round_up=True)
    return _fees(state, record, QuoteType.BURN_EXACT_OUTPUT, value)


def quote_in(
    state: LedgerState,
    amount_in: int,
    token_in: AssetId,
    token_out: AssetId,
    *,
    oracle: Oracle,
    manager: Optional[Manager] = None,
) -> int:
    """Amount of *token_out* received for exactly *amount_in* of *token_in*."""
    is_mint, asset, _ = get_mint_burn(state, token_in, token_out)
    if is_mint:
        return quote_mint_exact_input(state, asset, amount_in, oracle=oracle)
    return quote_burn_exact_input(state, asset, amount_in, oracle=oracle, manager=manager)


def quote_out(
    state: LedgerState,
    amount_out: int,
    token_in: AssetId,
    token_out: AssetId,
    *,
    oracle: Oracle,
    manager: Optional[Manager] = None,
) -> int:
    """Amount of *token_in* required to receive exactly *amount_out* of *token_out*."""
    is_mint, asset, _ = get_mint_burn(state, token_in, token_out)
    if is_mint:
        return quote_mint_exact_output(state, asset, amount_out, oracle=oracle)
    return quote_burn_exact_output(state, asset, amount_out, oracle=oracle, manager=manager)
