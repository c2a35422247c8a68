"""The agent's mutable identity cell."""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Future
from enum import Enum

from .errors import IdentityError, IdentityExpiredError
from .identity import AnonymousIdentity, Identity

_LOG = logging.getLogger(__name__)


class IdentityState(Enum):
    ACTIVE = "active"
    INVALIDATED = "invalidated"


class IdentityHolder:
    """Owns the active identity.

    ``replace`` is allowed in any state and makes the holder active again;
    ``invalidate`` is terminal until the next ``replace``. Each request reads
    the holder once, so a replacement is seen by every request built after it.
    """

    def __init__(self, identity: Identity | Future | None = None):
        self._lock = threading.Lock()
        self._identity = identity if identity is not None else AnonymousIdentity()
        self._state = IdentityState.ACTIVE

    @property
    def state(self) -> IdentityState:
        with self._lock:
            return self._state

    def replace(self, identity: Identity | Future) -> None:
        with self._lock:
            self._identity = identity
            self._state = IdentityState.ACTIVE
        _LOG.info("identity replaced")

    def invalidate(self) -> None:
        with self._lock:
            if self._state is IdentityState.INVALIDATED:
                return
            self._identity = None
            self._state = IdentityState.INVALIDATED
        _LOG.info("identity invalidated")

    def current(self) -> Identity:
        """Return the active identity, resolving a pending future.

        Raises:
            IdentityExpiredError: If the holder has been invalidated.
        """
        with self._lock:
            if self._state is IdentityState.INVALIDATED:
                raise IdentityExpiredError()
            identity = self._identity
        if isinstance(identity, Future):
            identity = identity.result()
            if identity is None:
                return AnonymousIdentity()
        if not isinstance(identity, Identity):
            raise IdentityError(f"Not an identity: {type(identity).__name__}")
        return identity
