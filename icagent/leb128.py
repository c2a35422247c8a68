"""Unsigned LEB128 encoding of natural numbers."""

from __future__ import annotations


def encode(value: int) -> bytes:
    """Encode a non-negative integer as unsigned LEB128."""
    if value < 0:
        raise ValueError("Cannot LEB128-encode a negative number")
    out = bytearray()
    while True:
        byte = value & 0x7F
        value >>= 7
        if value:
            out.append(byte | 0x80)
        else:
            out.append(byte)
            return bytes(out)


def decode(data: bytes) -> int:
    """Decode unsigned LEB128 bytes. Trailing bytes are rejected."""
    result = 0
    shift = 0
    for i, byte in enumerate(data):
        result |= (byte & 0x7F) << shift
        shift += 7
        if not byte & 0x80:
            if i != len(data) - 1:
                raise ValueError("Trailing bytes after LEB128 value")
            return result
    raise ValueError("Truncated LEB128 value")
