"""Representation-independent hashing of request content.

A request id is computed from a field mapping as follows: every field name
and every field value is hashed on its own, the ``(name_hash, value_hash)``
pairs are sorted by ``name_hash`` and the concatenation of the sorted pairs
is hashed once more. The id therefore does not depend on the order in which
fields were inserted, and nested mappings are hashed with the same rule.

Value hashing:

- bytes-like values: ``sha256(value)``
- strings: ``sha256(utf8(value))``
- natural numbers (and :class:`Expiry`): ``sha256(leb128(value))``
- principals: ``sha256(principal bytes)``
- lists and tuples: ``sha256(concat(hash(item) for item in value))``
- mappings: the request id of the mapping
"""

from __future__ import annotations

import hashlib
from collections.abc import Mapping
from enum import Enum
from typing import Any

from . import leb128
from .clock import Expiry
from .errors import RequestIdError
from .principal import Principal

IC_REQUEST_DOMAIN_SEPARATOR = b"\x0aic-request"
IC_REQUEST_AUTH_DELEGATION_DOMAIN_SEPARATOR = b"\x1aic-request-auth-delegation"


def _sha256(data: bytes) -> bytes:
    return hashlib.sha256(data).digest()


def hash_value(value: Any) -> bytes:
    """Return the 32-byte content hash of a single field value."""
    if isinstance(value, (bytes, bytearray, memoryview)):
        return _sha256(bytes(value))
    if isinstance(value, Enum):
        return hash_value(value.value)
    if isinstance(value, str):
        return _sha256(value.encode("utf-8"))
    if isinstance(value, Principal):
        return _sha256(bytes(value))
    if isinstance(value, Expiry):
        return _sha256(leb128.encode(int(value)))
    if isinstance(value, bool):
        raise RequestIdError("Attempt to hash a boolean value")
    if isinstance(value, int):
        if value < 0:
            raise RequestIdError(f"Attempt to hash a negative integer: {value}")
        return _sha256(leb128.encode(value))
    if isinstance(value, (list, tuple)):
        return _sha256(b"".join(hash_value(item) for item in value))
    if isinstance(value, Mapping):
        return request_id_of(value)
    raise RequestIdError(
        f"Attempt to hash a value of unsupported type: {type(value).__name__}"
    )


def request_id_of(content: Mapping[str, Any]) -> bytes:
    """Compute the 32-byte request id of a field mapping.

    Fields whose value is ``None`` are treated as absent.

    Raises:
        RequestIdError: If a field name is not a string or a value cannot
            be hashed.
    """
    pairs = []
    for key, value in content.items():
        if value is None:
            continue
        if not isinstance(key, str):
            raise RequestIdError(f"Field names must be strings, got {type(key).__name__}")
        pairs.append((hash_value(key), hash_value(value)))
    pairs.sort(key=lambda pair: pair[0])
    return _sha256(b"".join(k + v for k, v in pairs))
