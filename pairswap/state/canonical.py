"""
Canonical bytes for snapshots and state-root hashing.

A pairswap snapshot is a JSON tree of objects, lists, strings and integers.
`canonical_json_bytes` pins key order, separators and UTF-8 output so that one
logical snapshot has exactly one byte form; `tagged_digest` hashes that form
behind a versioned domain tag so digests of different record kinds never
collide.
"""

from __future__ import annotations

import hashlib
import json
import re
from typing import Any

DOMAIN = "pairswap"

_LABEL_RE = re.compile(r"^[a-z][a-z0-9_]*$")


def _is_surrogate(ch: str) -> bool:
    return 0xD800 <= ord(ch) <= 0xDFFF


def _check_tree(value: Any, path: str) -> None:
    """Reject anything that has no single JSON spelling."""
    if value is None or isinstance(value, int):
        return
    if isinstance(value, str):
        if any(_is_surrogate(ch) for ch in value):
            raise TypeError(f"{path}: surrogate code points are not allowed")
        return
    if isinstance(value, float):
        raise TypeError(f"{path}: floats are not allowed")
    if isinstance(value, dict):
        for key, item in value.items():
            if not isinstance(key, str):
                raise TypeError(f"{path}: object keys must be str, got {type(key).__name__}")
            _check_tree(key, f"{path}.<key>")
            _check_tree(item, f"{path}.{key}")
        return
    if isinstance(value, (list, tuple)):
        for i, item in enumerate(value):
            _check_tree(item, f"{path}[{i}]")
        return
    raise TypeError(f"{path}: unsupported type {type(value).__name__}")


def canonical_json_bytes(value: Any) -> bytes:
    """Sorted keys, no whitespace, UTF-8. Integers keep full precision."""
    _check_tree(value, "$")
    return json.dumps(value, sort_keys=True, separators=(",", ":"), ensure_ascii=False).encode("utf-8")


def domain_tag(label: str, version: int = 1) -> bytes:
    """`pairswap:<label>:v<version>` followed by a NUL terminator."""
    if not isinstance(label, str) or not _LABEL_RE.match(label):
        raise ValueError(f"label must match {_LABEL_RE.pattern}: {label!r}")
    if not isinstance(version, int) or isinstance(version, bool) or version <= 0:
        raise ValueError(f"version must be a positive int: {version!r}")
    return f"{DOMAIN}:{label}:v{version}".encode("ascii") + b"\x00"


def tagged_digest(label: str, value: Any, *, version: int = 1) -> str:
    """0x-prefixed sha256 of `domain_tag(label, version) + canonical_json_bytes(value)`."""
    payload = domain_tag(label, version) + canonical_json_bytes(value)
    return "0x" + hashlib.sha256(payload).hexdigest()
