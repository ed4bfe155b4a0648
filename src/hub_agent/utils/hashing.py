"""Content hashing used to detect changes in synchronized resources.

The hash is a diffing aid exposed in resource status. It is unrelated to the
name hashing in :mod:`hub_agent.utils.naming` and must not be used for security.
"""

from __future__ import annotations

import base64
import json
from typing import Any, Mapping

FNV128_OFFSET_BASIS = 0x6C62272E07BB014262B821756295C58D
FNV128_PRIME = 0x0000000001000000000000000000013B
_MASK_128 = (1 << 128) - 1


def fnv128a(data: bytes) -> bytes:
    """Compute the 128-bit FNV-1a digest of data, big-endian."""
    h = FNV128_OFFSET_BASIS
    for byte in data:
        h ^= byte
        h = (h * FNV128_PRIME) & _MASK_128
    return h.to_bytes(16, "big")


def sorted_pairs(source: Mapping[str, Any] | None) -> list[list[Any]]:
    """Convert a map to a key-sorted list of [key, value] pairs."""
    return [[key, source[key]] for key in sorted(source or {})]


def canonical_encode(value: Any) -> bytes:
    """Encode a value into a canonical, order-independent JSON document."""
    return json.dumps(value, sort_keys=True, separators=(",", ":"), ensure_ascii=False).encode("utf-8")


def content_hash(fields: Mapping[str, Any]) -> str:
    """Hash the hash-relevant subset of a resource.

    Args:
        fields: Fields affecting the resource content. Map-typed values must
            already be converted with :func:`sorted_pairs`.

    Returns:
        Base64 rendering of the 128-bit digest
    """
    return base64.b64encode(fnv128a(canonical_encode(fields))).decode("ascii")
