"""Tests for transmuter/core/math.py: fixed-point helpers and fee conventions."""

import pytest

from transmuter.core.errors import InvalidSwap, MathOverflowError
from transmuter.core.math import (
    BASE_9,
    BASE_12,
    BASE_18,
    MAX_UINT256,
    apply_fee,
    apply_fee_mint,
    checked_sub,
    convert_decimal_to,
    invert_fee,
    invert_fee_mint,
    isqrt_up,
    mul_div,
    to_int64,
    to_uint,
)


class TestMulDiv:
    def test_floor(self):
        assert mul_div(7, 3, 2) == 10

    def test_round_up(self):
        assert mul_div(7, 3, 2, round_up=True) == 11

    def test_exact_division_not_bumped(self):
        assert mul_div(6, 3, 2, round_up=True) == 9

    def test_zero_divisor_fails_closed(self):
        with pytest.raises(MathOverflowError):
            mul_div(1, 1, 0)

    def test_negative_operand_rejected(self):
        with pytest.raises(MathOverflowError):
            mul_div(-1, 1, 1)

    def test_result_bounded_by_uint256(self):
        assert mul_div(MAX_UINT256, 1, 1) == MAX_UINT256
        with pytest.raises(MathOverflowError):
            mul_div(MAX_UINT256, 2, 1)


class TestBounds:
    def test_to_uint(self):
        assert to_uint(0, 8) == 0
        assert to_uint(255, 8) == 255
        with pytest.raises(MathOverflowError):
            to_uint(256, 8)
        with pytest.raises(MathOverflowError):
            to_uint(-1, 8)

    def test_to_uint_rejects_bool(self):
        with pytest.raises(TypeError):
            to_uint(True, 8)

    def test_to_int64(self):
        assert to_int64(-(2**63)) == -(2**63)
        with pytest.raises(MathOverflowError):
            to_int64(2**63)

    def test_checked_sub_underflow(self):
        assert checked_sub(5, 5) == 0
        with pytest.raises(MathOverflowError, match="reserve underflow"):
            checked_sub(4, 5, "reserve")


def test_isqrt_up() -> None:
    assert isqrt_up(0) == 0
    assert isqrt_up(16) == 4
    assert isqrt_up(17) == 5
    assert isqrt_up(24) == 5


class TestConvertDecimal:
    def test_scale_up(self):
        assert convert_decimal_to(1_500_000, 6, 18) == 1_500_000 * 10**12

    def test_scale_down_floor(self):
        assert convert_decimal_to(10**12 + 1, 18, 6) == 1

    def test_scale_down_round_up(self):
        assert convert_decimal_to(10**12 + 1, 18, 6, round_up=True) == 2
        assert convert_decimal_to(10**12, 18, 6, round_up=True) == 1

    def test_identity(self):
        assert convert_decimal_to(123, 18, 18) == 123


class TestBurnFee:
    def test_apply_positive(self):
        # 1% fee
        assert apply_fee(BASE_18, 10_000_000) == BASE_18 * 99 // 100

    def test_apply_negative_is_rebate(self):
        assert apply_fee(BASE_18, -10_000_000) == BASE_18 * 101 // 100

    def test_invert_rounds_up(self):
        amount = invert_fee(99, 10_000_000)
        assert apply_fee(amount, 10_000_000) >= 99
        assert apply_fee(amount - 1, 10_000_000) < 99

    def test_fee_at_full_scale_rejected(self):
        with pytest.raises(InvalidSwap):
            apply_fee(100, BASE_9)
        with pytest.raises(InvalidSwap):
            invert_fee(100, -BASE_9)


class TestMintFee:
    def test_apply_divides_by_one_plus_fee(self):
        # 25% fee: 125 of value buys 100 stablecoins.
        assert apply_fee_mint(125 * BASE_18, 250_000_000) == 100 * BASE_18

    def test_invert(self):
        assert invert_fee_mint(100 * BASE_18, 250_000_000) == 125 * BASE_18

    def test_fee_above_100_percent_allowed(self):
        assert apply_fee_mint(3 * BASE_18, 2 * BASE_9) == BASE_18

    def test_infinite_fee_rejected(self):
        with pytest.raises(InvalidSwap, match="infinite"):
            apply_fee_mint(BASE_18, BASE_12)
        with pytest.raises(InvalidSwap, match="infinite"):
            invert_fee_mint(BASE_18, BASE_12)

    def test_negative_fee(self):
        assert apply_fee_mint(99, -10_000_000) == 100

    def test_round_trip_is_conservative(self):
        fee = 1_234_567
        for amount in (1, 17, 10**6, 10**18 + 3, 987_654_321_987_654_321):
            value = invert_fee_mint(amount, fee)
            assert apply_fee_mint(value, fee) >= amount
