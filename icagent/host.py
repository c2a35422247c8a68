"""Resolve a user-supplied host to the origin requests are sent to.

Boundary nodes serve the API under a handful of root domains. Any subdomain
of one of them (``foo.ic0.app``) is routed to the root itself, which avoids a
redirect on every request. Matching is done on label boundaries, so
``fooic0.app`` is left alone.
"""

from __future__ import annotations

from dataclasses import dataclass
from urllib.parse import urlsplit

CANONICAL_ROOT_DOMAINS = ("ic0.app", "icp0.io", "icp-api.io")
DEFAULT_HOST = "https://icp-api.io"
_LOCAL_HOSTNAMES = frozenset({"localhost", "127.0.0.1", "[::1]"})


@dataclass(frozen=True)
class ResolvedHost:
    scheme: str
    hostname: str
    port: int | None = None

    @property
    def origin(self) -> str:
        if self.port is None:
            return f"{self.scheme}://{self.hostname}"
        return f"{self.scheme}://{self.hostname}:{self.port}"


def _canonical_root(hostname: str) -> str | None:
    """Return the rightmost canonical root *hostname* belongs to, if any."""
    labels = hostname.lower().split(".")
    for start in range(len(labels) - 1, -1, -1):
        suffix = ".".join(labels[start:])
        if suffix in CANONICAL_ROOT_DOMAINS:
            return suffix
    return None


def _split_netloc(netloc: str) -> tuple[str, int | None]:
    hostport = netloc.rpartition("@")[2]
    if hostport.startswith("["):
        host, _, rest = hostport.partition("]")
        host += "]"
        port = rest[1:] if rest.startswith(":") else ""
    else:
        host, _, port = hostport.partition(":")
    if not port:
        return host, None
    try:
        return host, int(port)
    except ValueError:
        raise ValueError(f"Invalid port in host: {netloc!r}") from None


def resolve_host(host: str | None = None) -> ResolvedHost:
    """Canonicalize *host* (``scheme://domain[:port][/path]``).

    The path is discarded. A hostname under a canonical root becomes the
    lowercase root; any other hostname keeps its original casing. Hosts
    without a scheme get ``http`` for local addresses, ``https`` otherwise.
    """
    host = (host or DEFAULT_HOST).strip()
    if "://" not in host:
        bare = host.split("/", 1)[0]
        hostname, _ = _split_netloc(bare)
        scheme = "http" if hostname.lower() in _LOCAL_HOSTNAMES else "https"
        host = f"{scheme}://{host}"

    parts = urlsplit(host)
    hostname, port = _split_netloc(parts.netloc)
    if not hostname:
        raise ValueError(f"Host has no hostname: {host!r}")

    root = _canonical_root(hostname)
    return ResolvedHost(
        scheme=parts.scheme.lower(),
        hostname=root if root is not None else hostname,
        port=port,
    )
