"""CBOR wire codec for envelopes and replica responses.

Delegates to ``cbor2``. Principals travel as their raw bytes and expiries as
unsigned integers; encoded bodies carry the self-describe tag (55799).
"""

from __future__ import annotations

from enum import Enum
from typing import Any

import cbor2

from .clock import Expiry
from .errors import DecodeError
from .principal import Principal

SELF_DESCRIBE_TAG = 55799


def _encode_default(encoder: cbor2.CBOREncoder, value: Any) -> None:
    if isinstance(value, Principal):
        encoder.encode(bytes(value))
    elif isinstance(value, Expiry):
        encoder.encode(int(value))
    elif isinstance(value, Enum):
        encoder.encode(value.value)
    else:
        raise cbor2.CBOREncodeTypeError(
            f"cannot serialize type {type(value).__name__}"
        )


def encode(value: Any) -> bytes:
    """Encode *value* as tagged canonical CBOR."""
    return cbor2.dumps(
        cbor2.CBORTag(SELF_DESCRIBE_TAG, value),
        default=_encode_default,
        canonical=True,
    )


def decode(data: bytes) -> Any:
    """Decode CBOR bytes, stripping the self-describe tag.

    Raises:
        DecodeError: If *data* is not well-formed CBOR.
    """
    try:
        value = cbor2.loads(data)
    except (cbor2.CBORDecodeError, ValueError) as e:
        raise DecodeError(f"Failed to decode CBOR: {e}") from e
    while isinstance(value, cbor2.CBORTag) and value.tag == SELF_DESCRIBE_TAG:
        value = value.value
    return value
