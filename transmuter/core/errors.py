"""Exception types for the transmuter core.

Every kernel fails closed by raising one of these; nothing is partially
applied. Callers that want a result object instead of an exception wrap the
call (see ``transmuter.integration.engine``).
"""

from __future__ import annotations


class TransmuterError(Exception):
    """Base class for all rejections raised by the core."""


class Paused(TransmuterError):
    """The requested direction is disabled for this collateral."""


class InvalidTokens(TransmuterError):
    """Neither side of the token pair is the stablecoin."""


class NotCollateral(TransmuterError):
    """The asset is not registered (zero-decimals sentinel)."""


class TooLate(TransmuterError):
    """The swap deadline has passed."""


class TooSmallAmountOut(TransmuterError):
    """Exact-input swap would pay out less than the caller's minimum."""


class TooBigAmountIn(TransmuterError):
    """Exact-output swap would charge more than the caller's maximum."""


class InvalidSwap(TransmuterError):
    """The swap cannot be served (e.g. managed liquidity is insufficient)."""


class NotTrusted(TransmuterError):
    """The caller may not rebase the normalizer."""


class ZeroAmount(TransmuterError):
    """One side of the swap settles to zero tokens."""


class InvalidParams(TransmuterError):
    """An administrative update carries invalid parameters."""


class AlreadyAdded(TransmuterError):
    """The collateral is already registered."""


class CollateralBacked(TransmuterError):
    """The collateral still backs part of the supply and cannot be revoked."""


class MathOverflowError(TransmuterError, ArithmeticError):
    """A fixed-point value left its storage domain (overflow or underflow)."""


class ConfigError(TransmuterError, ValueError):
    """The configuration document is malformed."""


class LedgerInvariantError(TransmuterError):
    """Raised when a post-state violates one or more ledger invariants."""

    def __init__(self, violations: list[str]) -> None:
        self.violations = violations
        super().__init__(f"invariant violations: {', '.join(violations)}")
