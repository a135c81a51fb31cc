"""`transmuter`: exposure-priced mint/burn engine for a multi-collateral stablecoin.

- `transmuter.state`: the immutable ledger and its snapshots,
- `transmuter.core`: pure quoting, settlement and administration kernels,
- `transmuter.integration`: YAML configuration and the stateful engine.
"""

__version__ = "0.1.0"
