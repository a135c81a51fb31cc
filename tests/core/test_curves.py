"""Tests for transmuter/core/curves.py: segment lookup and curve validation."""

import pytest

from transmuter.core.curves import check_fees, find_lower_bound
from transmuter.core.errors import InvalidParams
from transmuter.core.math import BASE_9, MAX_BURN_FEE, MAX_MINT_FEE
from transmuter.state.ledger import ActionType

MINT_XS = [0, 500_000_000, 900_000_000]
MINT_YS = [0, 2_000_000, 10_000_000]
BURN_XS = [BASE_9, 500_000_000, 100_000_000]
BURN_YS = [0, 2_000_000, 10_000_000]


class TestFindLowerBound:
    @pytest.mark.parametrize(
        "exposure,expected",
        [(0, 0), (400_000_000, 0), (500_000_000, 1), (899_999_999, 1), (900_000_000, 2), (BASE_9, 2)],
    )
    def test_increasing(self, exposure, expected):
        assert find_lower_bound(True, MINT_XS, exposure) == expected

    @pytest.mark.parametrize(
        "exposure,expected",
        [(BASE_9, 0), (700_000_000, 0), (500_000_000, 1), (100_000_001, 1), (100_000_000, 2), (0, 2)],
    )
    def test_decreasing(self, exposure, expected):
        assert find_lower_bound(False, BURN_XS, exposure) == expected

    def test_single_point(self):
        assert find_lower_bound(True, [0], 123) == 0
        assert find_lower_bound(False, [BASE_9], 123) == 0


class TestCheckFees:
    def test_valid_mint_curve(self):
        check_fees(MINT_XS, MINT_YS, ActionType.MINT)

    def test_valid_burn_curve(self):
        check_fees(BURN_XS, BURN_YS, ActionType.BURN)

    def test_single_breakpoint(self):
        check_fees([0], [3_000_000], ActionType.MINT)
        check_fees([BASE_9], [3_000_000], ActionType.BURN)

    def test_empty_rejected(self):
        with pytest.raises(InvalidParams):
            check_fees([], [], ActionType.MINT)

    def test_arity_mismatch_rejected(self):
        with pytest.raises(InvalidParams):
            check_fees([0, 1], [0], ActionType.MINT)

    def test_mint_must_start_at_zero(self):
        with pytest.raises(InvalidParams, match="first mint breakpoint"):
            check_fees([1, 500_000_000], [0, 1], ActionType.MINT)

    def test_burn_must_start_at_full_exposure(self):
        with pytest.raises(InvalidParams, match="first burn breakpoint"):
            check_fees([900_000_000, 100_000_000], [0, 1], ActionType.BURN)

    def test_mint_breakpoints_strictly_increasing(self):
        with pytest.raises(InvalidParams, match="strictly increasing"):
            check_fees([0, 500_000_000, 500_000_000], [0, 1, 2], ActionType.MINT)

    def test_burn_breakpoints_strictly_decreasing(self):
        with pytest.raises(InvalidParams, match="strictly decreasing"):
            check_fees([BASE_9, 100_000_000, 200_000_000], [0, 1, 2], ActionType.BURN)

    def test_mint_breakpoint_at_full_exposure_rejected(self):
        with pytest.raises(InvalidParams):
            check_fees([0, BASE_9], [0, 1], ActionType.MINT)

    def test_fees_non_decreasing(self):
        with pytest.raises(InvalidParams, match="non-decreasing"):
            check_fees([0, 500_000_000], [5, 4], ActionType.MINT)

    def test_fee_caps(self):
        check_fees([0], [MAX_MINT_FEE], ActionType.MINT)
        with pytest.raises(InvalidParams):
            check_fees([0], [MAX_MINT_FEE + 1], ActionType.MINT)
        check_fees([BASE_9], [MAX_BURN_FEE], ActionType.BURN)
        with pytest.raises(InvalidParams):
            check_fees([BASE_9], [MAX_BURN_FEE + 1], ActionType.BURN)

    def test_fee_floor(self):
        with pytest.raises(InvalidParams):
            check_fees([0], [-BASE_9], ActionType.MINT)

    def test_negative_first_fee_needs_opposite_cover(self):
        check_fees([0], [-1_000_000], ActionType.MINT, opposite_first_fees=[1_000_000, 3_000_000])
        with pytest.raises(InvalidParams, match="round trip"):
            check_fees([0], [-1_000_000], ActionType.MINT, opposite_first_fees=[999_999])

    def test_non_int_rejected(self):
        with pytest.raises(InvalidParams):
            check_fees([0], [1.5], ActionType.MINT)
