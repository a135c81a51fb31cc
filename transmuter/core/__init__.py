"""`transmuter.core`: pure, integer-only pricing and accounting kernels.

- deterministic transitions over an immutable ``LedgerState``,
- fail-closed: every rejection raises, nothing is partially applied,
- collaborators (oracle, manager) are passed in and only read.

Public API:
- `quote_in` / `quote_out` and the four directional quotes
- `swap_exact_input` / `swap_exact_output -> SwapResult`
- the administrative setters and read-only getters
- `check_all(state) -> list[str]`
"""

from .errors import (
    AlreadyAdded,
    CollateralBacked,
    ConfigError,
    InvalidParams,
    InvalidSwap,
    InvalidTokens,
    LedgerInvariantError,
    MathOverflowError,
    NotCollateral,
    NotTrusted,
    Paused,
    TooBigAmountIn,
    TooLate,
    TooSmallAmountOut,
    TransmuterError,
    ZeroAmount,
)
from .fees import QuoteType, quote_fees
from .invariants import check_all
from .manager import Manager, check_amounts
from .oracle import Oracle, StaticOracle, get_burn_oracle, get_mint_oracle
from .quotes import (
    get_mint_burn,
    quote_burn_exact_input,
    quote_burn_exact_output,
    quote_in,
    quote_mint_exact_input,
    quote_mint_exact_output,
    quote_out,
)
from .settlement import (
    CollateralTransfer,
    StablecoinBurn,
    StablecoinMint,
    SwapResult,
    swap_exact_input,
    swap_exact_output,
)

__all__ = [
    "quote_in",
    "quote_out",
    "quote_mint_exact_input",
    "quote_mint_exact_output",
    "quote_burn_exact_input",
    "quote_burn_exact_output",
    "quote_fees",
    "QuoteType",
    "get_mint_burn",
    "get_mint_oracle",
    "get_burn_oracle",
    "check_amounts",
    "check_all",
    "swap_exact_input",
    "swap_exact_output",
    "SwapResult",
    "CollateralTransfer",
    "StablecoinMint",
    "StablecoinBurn",
    "Oracle",
    "StaticOracle",
    "Manager",
    "TransmuterError",
    "Paused",
    "InvalidTokens",
    "NotCollateral",
    "TooLate",
    "TooSmallAmountOut",
    "TooBigAmountIn",
    "InvalidSwap",
    "NotTrusted",
    "ZeroAmount",
    "InvalidParams",
    "AlreadyAdded",
    "CollateralBacked",
    "MathOverflowError",
    "ConfigError",
    "LedgerInvariantError",
]
