"""HTTP transport boundary: fetch resolution and CBOR POSTs to the replica."""

from __future__ import annotations

import logging
import os
from typing import Any, Callable

import requests

from .errors import ConfigurationError, TransportError
from .host import ResolvedHost
from .principal import Principal
from .types import Endpoint

_LOG = logging.getLogger(__name__)

CBOR_HEADERS = {"Content-Type": "application/cbor"}
API_PREFIX = "/api/v2/canister"

Fetch = Callable[..., Any]


def _http_timeout() -> float:
    raw = os.environ.get("ICAGENT_HTTP_TIMEOUT", "30")
    try:
        return float(raw)
    except ValueError:
        raise ConfigurationError(f"ICAGENT_HTTP_TIMEOUT must be a number, got {raw!r}") from None


def requests_fetch(url: str, method: str = "POST", headers: dict | None = None, body: bytes | None = None):
    """Fetch implementation backed by ``requests``."""
    try:
        return requests.request(
            method, url, headers=headers, data=body, timeout=_http_timeout()
        )
    except requests.RequestException as e:
        raise TransportError(f"{method} {url} failed: {e}") from e


# Set to None to make agents require an explicit fetch.
default_fetch: Fetch | None = requests_fetch


def resolve_fetch(fetch: Fetch | None = None) -> Fetch:
    """Pick the explicit *fetch*, else the library default.

    Raises:
        ConfigurationError: If no callable fetch is available.
    """
    if fetch is not None:
        if not callable(fetch):
            raise ConfigurationError("fetch must be callable")
        return fetch
    if callable(default_fetch):
        return default_fetch
    raise ConfigurationError(
        "Fetch implementation was not available. Pass a fetch function "
        "to the agent or set icagent.transport.default_fetch."
    )


def endpoint_url(host: ResolvedHost, canister_id: Principal, endpoint: Endpoint) -> str:
    return f"{host.origin}{API_PREFIX}/{canister_id.to_text()}/{endpoint.value}"


def _response_bytes(url: str, response) -> bytes:
    content = getattr(response, "content", None)
    if content is None:
        return b""
    if not isinstance(content, (bytes, bytearray, memoryview)):
        raise TransportError(
            f"POST {url} returned a malformed response: content is {type(content).__name__}"
        )
    return bytes(content)


def post_cbor(fetch: Fetch, url: str, body: bytes):
    """POST an encoded envelope; return the response and its body on a 2xx status.

    Raises:
        TransportError: On a non-2xx status, or a response without a status
            or with a body that is not bytes.
    """
    response = fetch(url, method="POST", headers=dict(CBOR_HEADERS), body=body)
    status = getattr(response, "status_code", None)
    if not isinstance(status, int):
        raise TransportError(f"POST {url} returned a malformed response: {response!r}")
    content = _response_bytes(url, response)
    if 200 <= status < 300:
        return response, content

    reason = getattr(response, "reason", "") or ""
    text = content.decode("utf-8", errors="replace")
    _LOG.debug("POST %s rejected status=%s", url, status)
    raise TransportError(
        f"Server returned an error:\n  Code: {status} ({reason})\n  Body: {text}",
        status_code=status,
        body=content,
    )
