"""Read-state certificates and hash tree lookups.

Only the tree structure is interpreted here. The BLS signature over the
tree root is not checked.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Sequence

from . import codec, leb128
from .clock import NANOSECONDS_PER_MILLISECOND
from .errors import CertificateError, DecodeError

EMPTY = 0
FORK = 1
LABELED = 2
LEAF = 3
PRUNED = 4


def _label(value: Any) -> bytes:
    if isinstance(value, str):
        return value.encode("utf-8")
    return bytes(value)


def _flatten_forks(tree: Sequence) -> list:
    if tree[0] == EMPTY:
        return []
    if tree[0] == FORK:
        return _flatten_forks(tree[1]) + _flatten_forks(tree[2])
    return [tree]


def _find_label(label: bytes, trees: list):
    for tree in trees:
        if tree[0] == LABELED and bytes(tree[1]) == label:
            return tree[2]
    return None


def lookup_path(path: Sequence[Any], tree: Sequence) -> bytes | None:
    """Return the leaf at *path*, or None if the path is absent."""
    if not isinstance(tree, (list, tuple)) or not tree:
        raise CertificateError(f"Malformed hash tree node: {tree!r}")
    if not path:
        if tree[0] == LEAF:
            return bytes(tree[1])
        return None
    subtree = _find_label(_label(path[0]), _flatten_forks(tree))
    if subtree is None:
        return None
    return lookup_path(path[1:], subtree)


@dataclass
class Certificate:
    tree: list
    signature: bytes
    delegation: dict | None = None

    @classmethod
    def from_bytes(cls, data: bytes) -> "Certificate":
        if not isinstance(data, (bytes, bytearray)):
            raise CertificateError("Response carries no certificate")
        try:
            raw = codec.decode(data)
        except DecodeError as e:
            raise CertificateError(f"Certificate is not valid CBOR: {e}") from e
        if not isinstance(raw, dict) or "tree" not in raw or "signature" not in raw:
            raise CertificateError("Certificate must have 'tree' and 'signature'")
        return cls(raw["tree"], bytes(raw["signature"]), raw.get("delegation"))

    def lookup(self, path: Sequence[Any]) -> bytes | None:
        return lookup_path(path, self.tree)

    def time_ms(self) -> int:
        """The certified replica time, in milliseconds."""
        leaf = self.lookup(["time"])
        if leaf is None:
            raise CertificateError("Certificate has no 'time' leaf")
        try:
            return leb128.decode(leaf) // NANOSECONDS_PER_MILLISECOND
        except ValueError as e:
            raise CertificateError(f"Malformed 'time' leaf: {e}") from e


@dataclass
class RequestStatus:
    status: str
    reply: bytes | None = None
    reject_code: int | None = None
    reject_message: str | None = None

    @classmethod
    def from_certificate(cls, certificate: Certificate, request_id: bytes) -> "RequestStatus":
        def leaf(name: str) -> bytes | None:
            return certificate.lookup(["request_status", request_id, name])

        status = leaf("status")
        if status is None:
            return cls("unknown")
        status_text = status.decode("utf-8")
        if status_text == "replied":
            return cls(status_text, reply=leaf("reply"))
        if status_text == "rejected":
            code = leaf("reject_code")
            message = leaf("reject_message")
            return cls(
                status_text,
                reject_code=leb128.decode(code) if code is not None else None,
                reject_message=message.decode("utf-8") if message is not None else None,
            )
        return cls(status_text)
