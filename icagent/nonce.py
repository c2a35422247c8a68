"""Nonces for state-changing requests.

A nonce is 8 bytes: two independent random 32-bit words packed big-endian.
The packing is done either with one 64-bit write or, where the ``struct``
implementation lacks the ``Q`` format, with two 32-bit writes. Both produce
the same bytes for the same words.
"""

from __future__ import annotations

import secrets
import struct
from typing import Callable

NONCE_LENGTH = 8

_WIDE = struct.Struct(">Q")
_NARROW = ">I"


def _random_word() -> int:
    return secrets.randbits(32)


def _supports_wide_write() -> bool:
    try:
        struct.pack(">Q", 0xFFFFFFFFFFFFFFFF)
    except struct.error:
        return False
    return True


class WideWriteStrategy:
    """Pack both words with a single unsigned 64-bit write."""

    def pack(self, high: int, low: int) -> bytes:
        buffer = bytearray(NONCE_LENGTH)
        _WIDE.pack_into(buffer, 0, (high << 32) | low)
        return bytes(buffer)


class NarrowWriteStrategy:
    """Pack the words with two sequential unsigned 32-bit writes."""

    def pack(self, high: int, low: int) -> bytes:
        buffer = bytearray(NONCE_LENGTH)
        struct.pack_into(_NARROW, buffer, 0, high)
        struct.pack_into(_NARROW, buffer, 4, low)
        return bytes(buffer)


class NonceGenerator:
    """Produce 8-byte nonces; the packing strategy is chosen once, here."""

    def __init__(self, random_word: Callable[[], int] = _random_word):
        self._random_word = random_word
        if _supports_wide_write():
            self._strategy = WideWriteStrategy()
        else:
            self._strategy = NarrowWriteStrategy()

    @property
    def strategy(self):
        return self._strategy

    def __call__(self) -> bytes:
        high = self._random_word() & 0xFFFFFFFF
        low = self._random_word() & 0xFFFFFFFF
        return self._strategy.pack(high, low)


_default_generator = NonceGenerator()


def make_nonce() -> bytes:
    """Return a fresh 8-byte nonce from the process-wide generator."""
    return _default_generator()
