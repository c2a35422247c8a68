"""Reconcile the local wall clock with the replica's reported time.

Ingress expiries are checked by the replica against its own clock, so a
client whose clock is off by more than the permitted drift would produce
requests that are rejected as expired (or as too far in the future). The
offset learned by :meth:`ClockSync.sync` is applied to every expiry computed
afterwards.
"""

from __future__ import annotations

import logging
import time
from typing import Callable

_LOG = logging.getLogger(__name__)

DEFAULT_INGRESS_EXPIRY_DELTA_MS = 5 * 60 * 1000
REPLICA_PERMITTED_DRIFT_MS = 60 * 1000
NANOSECONDS_PER_MILLISECOND = 1_000_000


def now_ms() -> int:
    """Local wall-clock time in whole milliseconds since the epoch."""
    return time.time_ns() // NANOSECONDS_PER_MILLISECOND


class Expiry:
    """Ingress expiry in nanoseconds since the epoch."""

    __slots__ = ("_ns",)

    def __init__(self, nanoseconds: int):
        if nanoseconds < 0:
            raise ValueError("Expiry must be non-negative")
        self._ns = int(nanoseconds)

    @classmethod
    def from_ms(cls, milliseconds: int) -> "Expiry":
        return cls(milliseconds * NANOSECONDS_PER_MILLISECOND)

    @property
    def nanoseconds(self) -> int:
        return self._ns

    def __int__(self) -> int:
        return self._ns

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Expiry):
            return NotImplemented
        return self._ns == other._ns

    def __hash__(self) -> int:
        return hash(self._ns)

    def __repr__(self) -> str:
        return f"Expiry({self._ns})"


class ClockSync:
    """Holds the replica-minus-local clock offset, in milliseconds."""

    def __init__(self):
        self._offset_ms = 0

    @property
    def offset_ms(self) -> int:
        return self._offset_ms

    def sync(self, remote_time_ms: Callable[[], int]) -> bool:
        """Query *remote_time_ms* and store ``remote - local``.

        A failing query is not an error: the previous offset (0 before the
        first successful sync) stays in effect.

        Returns:
            True if the offset was updated.
        """
        local = now_ms()
        try:
            remote = int(remote_time_ms())
        except Exception as e:
            _LOG.warning("clock sync failed, keeping offset=%sms: %s", self._offset_ms, e)
            return False
        offset = remote - local
        if offset != self._offset_ms:
            _LOG.info("clock offset changed from %sms to %sms", self._offset_ms, offset)
        self._offset_ms = offset
        return True

    def compute_expiry(self, ingress_delta_ms: int = DEFAULT_INGRESS_EXPIRY_DELTA_MS) -> Expiry:
        """Expiry ``ingress_delta_ms`` from now on the replica's clock.

        The permitted drift is subtracted so the expiry stays inside the
        window the replica accepts. The result is never earlier than 1ms
        after the (offset-adjusted) current time.
        """
        adjusted_now = now_ms() + self._offset_ms
        expiry_ms = adjusted_now + ingress_delta_ms - REPLICA_PERMITTED_DRIFT_MS
        return Expiry.from_ms(max(expiry_ms, adjusted_now + 1))
