"""Agent configuration.

Environment variables (all overridable via constructor args):
    ICAGENT_HOST               – replica or boundary node URL (default https://icp-api.io)
    ICAGENT_DISABLE_NONCE      – 1/true/yes to send calls without a nonce
    ICAGENT_INGRESS_EXPIRY_MS  – ingress expiry delta in ms (default 300000, must exceed 60000)
    ICAGENT_HTTP_TIMEOUT       – timeout of the default fetch in seconds (default 30)
"""

from __future__ import annotations

import os
from concurrent.futures import Future
from dataclasses import dataclass
from typing import Any, Callable

from .clock import DEFAULT_INGRESS_EXPIRY_DELTA_MS, REPLICA_PERMITTED_DRIFT_MS
from .errors import ConfigurationError
from .host import DEFAULT_HOST
from .identity import Identity

_TRUE_VALUES = frozenset({"1", "true", "yes", "on"})


@dataclass
class AgentConfig:
    host: str = DEFAULT_HOST
    fetch: Callable[..., Any] | None = None
    identity: Identity | Future | None = None
    disable_nonce: bool = False
    ingress_expiry_delta_ms: int = DEFAULT_INGRESS_EXPIRY_DELTA_MS

    def __post_init__(self):
        if (
            isinstance(self.ingress_expiry_delta_ms, bool)
            or not isinstance(self.ingress_expiry_delta_ms, int)
            or self.ingress_expiry_delta_ms <= 0
        ):
            raise ConfigurationError(
                "ingress_expiry_delta_ms must be a positive integer, "
                f"got {self.ingress_expiry_delta_ms!r}"
            )
        # compute_expiry subtracts the drift from the delta.
        if self.ingress_expiry_delta_ms <= REPLICA_PERMITTED_DRIFT_MS:
            raise ConfigurationError(
                f"ingress_expiry_delta_ms must exceed the {REPLICA_PERMITTED_DRIFT_MS}ms "
                f"permitted drift, got {self.ingress_expiry_delta_ms}"
            )

    @classmethod
    def from_env(
        cls,
        host: str | None = None,
        fetch: Callable[..., Any] | None = None,
        identity: Identity | Future | None = None,
        disable_nonce: bool | None = None,
        ingress_expiry_delta_ms: int | None = None,
    ) -> "AgentConfig":
        """Build a config from arguments, falling back to the environment."""
        if disable_nonce is None:
            disable_nonce = (
                os.environ.get("ICAGENT_DISABLE_NONCE", "").strip().lower() in _TRUE_VALUES
            )
        if ingress_expiry_delta_ms is None:
            raw = os.environ.get(
                "ICAGENT_INGRESS_EXPIRY_MS", str(DEFAULT_INGRESS_EXPIRY_DELTA_MS)
            )
            try:
                ingress_expiry_delta_ms = int(raw)
            except ValueError:
                raise ConfigurationError(
                    f"ICAGENT_INGRESS_EXPIRY_MS must be an integer, got {raw!r}"
                ) from None
        return cls(
            host=host or os.environ.get("ICAGENT_HOST", DEFAULT_HOST),
            fetch=fetch,
            identity=identity,
            disable_nonce=disable_nonce,
            ingress_expiry_delta_ms=ingress_expiry_delta_ms,
        )
