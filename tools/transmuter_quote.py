#!/usr/bin/env python3
"""
Quote or replay swaps against a ledger described by a YAML config.

Quote (prints one JSON object):

    tools/transmuter_quote.py --config ledger.yaml --price EUROC=1000000000000000000 \
        --amount 1000000 --token-in EUROC --token-out agEUR

Replay a YAML list of operations through the engine with in-memory tokens
(prints one JSON object per step):

    - {op: fund, asset: EUROC, account: alice, amount: 1000000}
    - {op: swap_exact_input, amount: 1000000, limit: 0, token_in: EUROC, token_out: agEUR, sender: alice}
    - {op: swap_exact_output, amount: 500000, limit: 10000000000000000000, token_in: agEUR, token_out: EUROC, sender: alice}
    - {op: update_normalizer, caller: keeper, amount: 1000000000000000000, increase: true}

Rejected steps are reported with their error class and the replay continues.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any

import yaml

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from transmuter.core.errors import ConfigError, TransmuterError
from transmuter.core.getters import get_total_issued
from transmuter.core.oracle import StaticOracle
from transmuter.integration.config import load_config
from transmuter.integration.engine import TransmuterEngine
from transmuter.integration.memory import InMemoryManager, InMemoryStablecoin, InMemoryToken, InsufficientBalance
from transmuter.state.ledger import LedgerState

logger = logging.getLogger("transmuter_quote")

FAR_DEADLINE = 2**63 - 1


def _parse_assignments(items: list[str], *, flag: str) -> dict[str, int]:
    out: dict[str, int] = {}
    for item in items:
        asset, sep, value = item.partition("=")
        if not sep or not asset:
            raise SystemExit(f"{flag} expects ASSET=VALUE, got {item!r}")
        try:
            out[asset] = int(value)
        except ValueError:
            raise SystemExit(f"{flag} value must be an integer: {item!r}") from None
    return out


def _build_oracle(state: LedgerState, prices: dict[str, int], deviations: dict[str, int]) -> StaticOracle:
    by_storage: dict[bytes, int] = {}
    dev_by_storage: dict[bytes, int] = {}
    for asset in state.collateral_list:
        storage = state.collaterals[asset].oracle_storage
        if asset in prices:
            by_storage[storage] = prices[asset]
        if asset in deviations:
            dev_by_storage[storage] = deviations[asset]
    return StaticOracle(prices=by_storage, deviations=dev_by_storage)


def _replay(engine: TransmuterEngine, token: InMemoryToken, steps: Any) -> int:
    if not isinstance(steps, list):
        raise SystemExit("replay file must contain a list of operations")
    failures = 0
    for idx, step in enumerate(steps):
        if not isinstance(step, dict):
            raise SystemExit(f"replay step {idx} must be a mapping")
        op = step.get("op")
        record: dict[str, Any] = {"step": idx, "op": op}
        try:
            if op == "fund":
                token.credit(step["asset"], step["account"], int(step["amount"]))
            elif op in ("swap_exact_input", "swap_exact_output"):
                swap = getattr(engine, op)
                sender = step.get("sender", "user")
                result = swap(
                    int(step["amount"]),
                    int(step["limit"]),
                    step["token_in"],
                    step["token_out"],
                    step.get("to", sender),
                    int(step.get("deadline", FAR_DEADLINE)),
                    sender=sender,
                )
                record.update(amount_in=result.amount_in, amount_out=result.amount_out)
            elif op == "update_normalizer":
                record["normalizer"] = engine.update_normalizer(
                    step["caller"], int(step["amount"]), bool(step.get("increase", True))
                )
            else:
                raise SystemExit(f"replay step {idx}: unknown op {op!r}")
            record["ok"] = True
        except (TransmuterError, InsufficientBalance) as exc:
            failures += 1
            record.update(ok=False, error=type(exc).__name__, detail=str(exc))
        except KeyError as exc:
            raise SystemExit(f"replay step {idx}: missing field {exc}") from None
        except (TypeError, ValueError) as exc:
            raise SystemExit(f"replay step {idx}: invalid field value: {exc}") from None
        record["total_issued"] = get_total_issued(engine.state)
        record["normalized_stables"] = engine.state.normalized_stables
        print(json.dumps(record, sort_keys=True))
    return 1 if failures else 0


def main() -> int:
    ap = argparse.ArgumentParser(description="Quote or replay transmuter swaps from a YAML ledger config.")
    ap.add_argument("--config", type=Path, required=True, help="YAML ledger configuration")
    ap.add_argument("--price", action="append", default=[], metavar="ASSET=VALUE", help="oracle price (1e18 scale)")
    ap.add_argument(
        "--deviation", action="append", default=[], metavar="ASSET=VALUE", help="burn deviation (1e18 scale)"
    )
    ap.add_argument("--available", action="append", default=[], metavar="ASSET=VALUE", help="managed liquidity")
    ap.add_argument("--amount", type=int, help="amount to quote")
    ap.add_argument("--token-in", type=str)
    ap.add_argument("--token-out", type=str)
    ap.add_argument("--exact-output", action="store_true", help="treat --amount as the output amount")
    ap.add_argument("--replay", type=Path, help="YAML list of operations to replay")
    ap.add_argument("--debug", action="store_true")
    args = ap.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        stream=sys.stderr,
    )

    try:
        state = load_config(args.config)
    except ConfigError as exc:
        logger.error("%s", exc)
        return 2

    oracle = _build_oracle(
        state,
        _parse_assignments(args.price, flag="--price"),
        _parse_assignments(args.deviation, flag="--deviation"),
    )
    manager = InMemoryManager(available=_parse_assignments(args.available, flag="--available"))
    token = InMemoryToken()
    engine = TransmuterEngine(
        state,
        oracle=oracle,
        token=token,
        stablecoin=InMemoryStablecoin(),
        manager=manager,
        clock=lambda: 0,
    )

    if args.replay is not None:
        return _replay(engine, token, yaml.safe_load(args.replay.read_text(encoding="utf-8")))

    if args.amount is None or not args.token_in or not args.token_out:
        ap.error("--amount, --token-in and --token-out are required without --replay")

    try:
        if args.exact_output:
            quoted = engine.quote_out(args.amount, args.token_in, args.token_out)
        else:
            quoted = engine.quote_in(args.amount, args.token_in, args.token_out)
    except (TransmuterError, KeyError) as exc:
        print(json.dumps({"ok": False, "error": type(exc).__name__, "detail": str(exc)}, sort_keys=True))
        return 1

    out = {
        "ok": True,
        "token_in": args.token_in,
        "token_out": args.token_out,
        "amount_in": quoted if args.exact_output else args.amount,
        "amount_out": args.amount if args.exact_output else quoted,
    }
    print(json.dumps(out, sort_keys=True))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
