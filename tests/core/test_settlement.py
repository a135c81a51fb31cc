"""Tests for transmuter/core/settlement.py: swaps, ledger deltas and effects."""

from dataclasses import replace

import pytest

from transmuter.core.errors import (
    InvalidSwap,
    LedgerInvariantError,
    MathOverflowError,
    Paused,
    TooBigAmountIn,
    TooLate,
    TooSmallAmountOut,
    ZeroAmount,
)
from transmuter.core.invariants import check_all
from transmuter.core.math import BASE_9, BASE_18, BASE_27, MAX_UINT128
from transmuter.core.oracle import StaticOracle
from transmuter.core.settlement import (
    CollateralTransfer,
    StablecoinBurn,
    StablecoinMint,
    swap_exact_input,
    swap_exact_output,
)
from transmuter.core.setters import add_collateral, set_collateral_manager, set_fees, toggle_pause
from transmuter.integration.memory import InMemoryManager
from transmuter.state.ledger import ActionType, initial_state

E18 = BASE_18
ORACLE = StaticOracle(prices={b"EUROC": E18, b"bERNX": E18})


def _ledger():
    s = initial_state("agEUR")
    for asset, decimals in (("EUROC", 6), ("bERNX", 18)):
        s = add_collateral(s, asset, decimals, oracle_storage=asset.encode())
        s = set_fees(s, asset, [0, 500_000_000], [1_000_000, 5_000_000], True)
        s = set_fees(s, asset, [BASE_9], [2_000_000], False)
        s = toggle_pause(s, asset, ActionType.MINT)
        s = toggle_pause(s, asset, ActionType.BURN)
    return s


def _swap_in(state, amount, token_in, token_out, *, min_out=0, deadline=100, now=10, manager=None):
    return swap_exact_input(
        state, amount, min_out, token_in, token_out, "bob", deadline,
        sender="alice", now=now, oracle=ORACLE, manager=manager,
    )


def _swap_out(state, amount, token_in, token_out, *, max_in=2**200, deadline=100, now=10, manager=None):
    return swap_exact_output(
        state, amount, max_in, token_in, token_out, "bob", deadline,
        sender="alice", now=now, oracle=ORACLE, manager=manager,
    )


class TestMint:
    def test_first_mint_uses_first_fee(self):
        r = _swap_in(_ledger(), 1_001_000, "EUROC", "agEUR")
        # 1.001 EUR of value at a 0.1% fee.
        assert r.is_mint and r.asset == "EUROC"
        assert r.amount_out == E18
        assert r.normalized_change == E18

    def test_counters_move_together(self):
        r = _swap_in(_ledger(), 1_001_000, "EUROC", "agEUR")
        assert r.state.normalized_stables == E18
        assert r.state.collaterals["EUROC"].normalized_stables == E18
        assert r.state.collaterals["bERNX"].normalized_stables == 0
        assert check_all(r.state) == []

    def test_effects_in_order(self):
        r = _swap_in(_ledger(), 1_001_000, "EUROC", "agEUR")
        assert r.effects == (
            CollateralTransfer("EUROC", None, "alice", 1_001_000, True),
            StablecoinMint("bob", E18),
        )

    def test_exact_output(self):
        r = _swap_out(_ledger(), E18, "EUROC", "agEUR")
        assert r.amount_in == 1_001_000
        assert r.amount_out == E18

    def test_normalized_change_rounds_up(self):
        s = replace(_ledger(), normalizer=3 * BASE_27)
        r = _swap_out(s, 10, "bERNX", "agEUR")
        # ceil(10 / 3)
        assert r.normalized_change == 4

    def test_input_state_untouched(self):
        s = _ledger()
        _swap_in(s, 1_001_000, "EUROC", "agEUR")
        assert s.normalized_stables == 0


def _funded():
    """100 agEUR minted against each collateral."""
    s = _swap_out(_ledger(), 100 * E18, "EUROC", "agEUR").state
    return _swap_out(s, 100 * E18, "bERNX", "agEUR").state


class TestBurn:
    def test_exact_input(self):
        s = _funded()
        r = _swap_in(s, 10 * E18, "agEUR", "EUROC")
        assert not r.is_mint
        assert r.amount_out == 9_980_000
        assert r.state.collaterals["EUROC"].normalized_stables == 90 * E18
        assert r.state.normalized_stables == 190 * E18

    def test_effects_in_order(self):
        r = _swap_in(_funded(), 10 * E18, "agEUR", "EUROC")
        assert r.effects == (
            StablecoinBurn(10 * E18, "alice"),
            CollateralTransfer("EUROC", None, "bob", 9_980_000, False),
        )

    def test_normalized_change_rounds_down(self):
        s = replace(_funded(), normalizer=3 * BASE_27)
        r = _swap_out(s, 998, "agEUR", "bERNX")
        # 1000 stablecoins in, floor(1000 / 3) normalized out
        assert r.amount_in == 1000
        assert r.normalized_change == 333

    def test_cannot_burn_more_than_backed(self):
        s = _funded()
        with pytest.raises(MathOverflowError):
            _swap_in(s, 150 * E18, "agEUR", "EUROC")

    def test_managed_target_in_effects(self):
        s = set_collateral_manager(_funded(), "EUROC", b"vault")
        r = _swap_in(s, 10 * E18, "agEUR", "EUROC", manager=InMemoryManager(available={"EUROC": 10**9}))
        assert r.effects[1] == CollateralTransfer("EUROC", b"vault", "bob", 9_980_000, False)

    def test_managed_shortfall_rejected(self):
        s = set_collateral_manager(_funded(), "EUROC", b"vault")
        with pytest.raises(InvalidSwap):
            _swap_in(s, 10 * E18, "agEUR", "EUROC", manager=InMemoryManager(available={"EUROC": 1}))


class TestRejections:
    def test_deadline(self):
        with pytest.raises(TooLate):
            _swap_in(_ledger(), 1_001_000, "EUROC", "agEUR", deadline=9, now=10)

    def test_deadline_inclusive(self):
        _swap_in(_ledger(), 1_001_000, "EUROC", "agEUR", deadline=10, now=10)

    def test_slippage_exact_input(self):
        with pytest.raises(TooSmallAmountOut):
            _swap_in(_ledger(), 1_001_000, "EUROC", "agEUR", min_out=E18 + 1)

    def test_slippage_exact_output(self):
        with pytest.raises(TooBigAmountIn):
            _swap_out(_ledger(), E18, "EUROC", "agEUR", max_in=1_000_999)

    def test_zero_amount(self):
        with pytest.raises(ZeroAmount):
            _swap_in(_ledger(), 0, "EUROC", "agEUR")

    def test_dust_rounds_to_zero(self):
        # 1 wei of stablecoin is worth less than one 6-decimal unit.
        s = _funded()
        with pytest.raises(ZeroAmount):
            _swap_in(s, 1, "agEUR", "EUROC")

    def test_paused_direction(self):
        s = toggle_pause(_ledger(), "EUROC", ActionType.MINT)
        with pytest.raises(Paused):
            _swap_in(s, 1_001_000, "EUROC", "agEUR")

    def test_inconsistent_post_state_rejected(self):
        s = replace(_ledger(), normalized_stables=5)
        with pytest.raises(LedgerInvariantError) as exc_info:
            _swap_in(s, 1_001_000, "EUROC", "agEUR")
        assert "inv_reserve_sum" in exc_info.value.violations


class TestCounterBounds:
    def _flat(self):
        s = initial_state("agEUR")
        s = add_collateral(s, "bERNX", 18, oracle_storage=b"bERNX")
        s = set_fees(s, "bERNX", [0], [0], True)
        return toggle_pause(s, "bERNX", ActionType.MINT)

    def test_global_counter_overflow_fails_closed(self):
        # Fits the 216-bit per-asset counter but not the 128-bit global one.
        with pytest.raises(MathOverflowError, match="normalized stables"):
            _swap_out(self._flat(), 2**130, "bERNX", "agEUR", max_in=2**255)

    def test_largest_global_counter_accepted(self):
        r = _swap_out(self._flat(), MAX_UINT128, "bERNX", "agEUR", max_in=2**255)
        assert r.state.normalized_stables == MAX_UINT128
