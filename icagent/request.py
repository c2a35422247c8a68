"""Assemble unsigned request content from caller parameters."""

from __future__ import annotations

from typing import Any, Sequence

from .clock import ClockSync
from .principal import Principal
from .types import CallRequest, Endpoint, QueryRequest, ReadStateRequest


class RequestBuilder:
    """Fill in ``ingress_expiry`` (and the variant tag) for each request kind.

    Nonces are not set here; they come from the transform pipeline.
    """

    def __init__(self, clock: ClockSync, ingress_expiry_delta_ms: int):
        self._clock = clock
        self._ingress_expiry_delta_ms = ingress_expiry_delta_ms

    def _expiry(self):
        return self._clock.compute_expiry(self._ingress_expiry_delta_ms)

    def call(
        self,
        canister_id: Principal,
        method_name: str,
        arg: bytes,
        sender: Principal | None = None,
    ) -> CallRequest:
        return {
            "request_type": Endpoint.CALL.value,
            "canister_id": canister_id,
            "method_name": method_name,
            "arg": bytes(arg),
            "sender": sender or Principal.anonymous(),
            "ingress_expiry": self._expiry(),
        }

    def query(
        self,
        canister_id: Principal,
        method_name: str,
        arg: bytes,
        sender: Principal | None = None,
    ) -> QueryRequest:
        return {
            "request_type": Endpoint.QUERY.value,
            "canister_id": canister_id,
            "method_name": method_name,
            "arg": bytes(arg),
            "sender": sender or Principal.anonymous(),
            "ingress_expiry": self._expiry(),
        }

    def read_state(
        self,
        paths: Sequence[Sequence[Any]],
        sender: Principal | None = None,
    ) -> ReadStateRequest:
        return {
            "request_type": Endpoint.READ_STATE.value,
            "paths": [[_path_label(label) for label in path] for path in paths],
            "sender": sender or Principal.anonymous(),
            "ingress_expiry": self._expiry(),
        }


def _path_label(label: Any) -> bytes:
    if isinstance(label, str):
        return label.encode("utf-8")
    return bytes(label)
