"""Fixed-point arithmetic for the transmuter core.

Every function is stateless and operates on plain Python ints. Python ints do
not wrap, so the storage domains of the ledger are enforced explicitly: any
value leaving its domain raises ``MathOverflowError`` instead of being
truncated.

Rounding is explicit. ``//`` floors; ``round_up=True`` rounds toward +inf.
Quantities the protocol receives are rounded up, quantities it pays out are
rounded down.
"""

from __future__ import annotations

import math

from .errors import InvalidSwap, MathOverflowError

# Fixed-point bases
BASE_9: int = 10**9  # fees and exposures
BASE_12: int = 10**12
BASE_18: int = 10**18  # oracle prices and deviations
BASE_27: int = 10**27  # normalizer
BASE_36: int = 10**36

# Fee bounds
MAX_MINT_FEE: int = BASE_12 - 1
MAX_BURN_FEE: int = 999_000_000

# Storage domains
MAX_UINT64: int = 2**64 - 1
MAX_UINT128: int = 2**128 - 1
MAX_UINT216: int = 2**216 - 1
MAX_UINT256: int = 2**256 - 1
MIN_INT64: int = -(2**63)
MAX_INT64: int = 2**63 - 1

STABLECOIN_DECIMALS: int = 18


# -- Basic helpers -----------------------------------------------------------

def require_int(value: object, name: str) -> int:
    if not isinstance(value, int) or isinstance(value, bool):
        raise TypeError(f"{name} must be an int, got {type(value).__name__}")
    return value


def to_uint(value: int, bits: int, name: str = "value") -> int:
    """Return *value* if it fits an unsigned *bits*-wide slot, else fail closed."""
    require_int(value, name)
    if value < 0 or value >= 1 << bits:
        raise MathOverflowError(f"{name} out of uint{bits} range: {value}")
    return value


def to_int64(value: int, name: str = "value") -> int:
    require_int(value, name)
    if not (MIN_INT64 <= value <= MAX_INT64):
        raise MathOverflowError(f"{name} out of int64 range: {value}")
    return value


def checked_sub(a: int, b: int, name: str = "value") -> int:
    """``a - b`` for unsigned quantities; underflow raises."""
    if b > a:
        raise MathOverflowError(f"{name} underflow: {a} - {b}")
    return a - b


def mul_div(x: int, y: int, d: int, round_up: bool = False) -> int:
    """``floor(x * y / d)`` (or the ceiling) on non-negative ints."""
    if x < 0 or y < 0:
        raise MathOverflowError(f"mul_div operands must be non-negative: ({x}, {y})")
    if d <= 0:
        raise MathOverflowError(f"mul_div divisor must be positive: {d}")
    q, r = divmod(x * y, d)
    if round_up and r:
        q += 1
    if q > MAX_UINT256:
        raise MathOverflowError(f"mul_div result exceeds uint256: {q}")
    return q


def isqrt_up(x: int) -> int:
    """Integer square root rounded up."""
    r = math.isqrt(x)
    return r + 1 if r * r < x else r


def convert_decimal_to(amount: int, from_decimals: int, to_decimals: int, round_up: bool = False) -> int:
    """Rescale *amount* between two decimal precisions."""
    if from_decimals > to_decimals:
        factor = 10 ** (from_decimals - to_decimals)
        q, r = divmod(amount, factor)
        return q + 1 if round_up and r else q
    if from_decimals < to_decimals:
        return amount * 10 ** (to_decimals - from_decimals)
    return amount


# -- Burn-side fee convention: out = amount * (1 - fee) ----------------------

def apply_fee(amount: int, fee: int) -> int:
    """Scale *amount* by ``1 - fee`` (a negative fee is a rebate: ``1 + |fee|``)."""
    if fee >= BASE_9:
        raise InvalidSwap(f"fee must be below {BASE_9}: {fee}")
    if fee <= -BASE_9:
        raise InvalidSwap(f"fee must be above {-BASE_9}: {fee}")
    if fee >= 0:
        return ((BASE_9 - fee) * amount) // BASE_9
    return ((BASE_9 + (-fee)) * amount) // BASE_9


def invert_fee(amount: int, fee: int) -> int:
    """Inverse of :func:`apply_fee`: the smallest input whose fee'd value covers *amount*."""
    if fee >= BASE_9:
        raise InvalidSwap(f"fee must be below {BASE_9}: {fee}")
    if fee <= -BASE_9:
        raise InvalidSwap(f"fee must be above {-BASE_9}: {fee}")
    if fee >= 0:
        return mul_div(amount, BASE_9, BASE_9 - fee, round_up=True)
    return mul_div(amount, BASE_9, BASE_9 + (-fee), round_up=True)


# -- Mint-side fee convention: out = amount / (1 + fee) ----------------------

def apply_fee_mint(amount: int, fee: int) -> int:
    """Stablecoins received for *amount* of collateral value.

    Mint fees are charged on top of the stablecoins issued, so they may exceed
    100%; a fee at or above ``BASE_12`` is treated as infinite.
    """
    if fee >= BASE_12:
        raise InvalidSwap(f"mint fee is infinite: {fee}")
    if fee <= -BASE_9:
        raise InvalidSwap(f"fee must be above {-BASE_9}: {fee}")
    if fee >= 0:
        return (amount * BASE_9) // (BASE_9 + fee)
    return (amount * BASE_9) // (BASE_9 - (-fee))


def invert_fee_mint(amount: int, fee: int) -> int:
    """Collateral value required to receive *amount* stablecoins."""
    if fee >= BASE_12:
        raise InvalidSwap(f"mint fee is infinite: {fee}")
    if fee <= -BASE_9:
        raise InvalidSwap(f"fee must be above {-BASE_9}: {fee}")
    if fee >= 0:
        return mul_div(amount, BASE_9 + fee, BASE_9, round_up=True)
    return mul_div(amount, BASE_9 - (-fee), BASE_9, round_up=True)
