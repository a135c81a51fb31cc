"""
Deterministic canonical encoding primitives.

Used to turn configuration mappings into the opaque byte blobs stored on the
ledger (oracle and manager configs) and to hash ledger snapshots.
"""

from __future__ import annotations

import hashlib
import json
import re
from typing import Any


_HEX_CHARS_RE = re.compile(r"^[0-9a-fA-F]*$")


def _reject_non_canonical(value: Any) -> None:
    if isinstance(value, float):
        raise TypeError("floats are not allowed in canonical encoding")
    if isinstance(value, str):
        for ch in value:
            if 0xD800 <= ord(ch) <= 0xDFFF:
                raise TypeError("surrogate code points are not allowed in canonical encoding")
        return
    if isinstance(value, dict):
        for k, v in value.items():
            if not isinstance(k, str):
                raise TypeError("dict keys must be str for canonical encoding")
            _reject_non_canonical(k)
            _reject_non_canonical(v)
        return
    if isinstance(value, (list, tuple)):
        for item in value:
            _reject_non_canonical(item)


def canonical_json_bytes(value: Any) -> bytes:
    """
    Canonical JSON encoding for hashing and opaque config blobs.

    Rules:
    - UTF-8, sorted keys, no whitespace
    - allow_nan=False
    - floats rejected (to avoid representation ambiguity)
    """
    _reject_non_canonical(value)
    text = json.dumps(
        value,
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
        allow_nan=False,
    )
    return text.encode("utf-8")


def sha256_hex(data: bytes) -> str:
    return "0x" + hashlib.sha256(data).hexdigest()


def bytes_to_hex(data: bytes) -> str:
    return "0x" + bytes(data).hex()


def hex_to_bytes(hex_str: str, *, name: str) -> bytes:
    """Decode a 0x-prefixed hex string of any even length (``"0x"`` is empty)."""
    if not isinstance(hex_str, str):
        raise TypeError(f"{name} must be a str")
    if not hex_str.startswith("0x"):
        raise ValueError(f"{name} must be 0x-prefixed hex")
    body = hex_str[2:]
    if len(body) % 2 != 0 or not _HEX_CHARS_RE.fullmatch(body):
        raise ValueError(f"{name} must be valid hex")
    return bytes.fromhex(body)
