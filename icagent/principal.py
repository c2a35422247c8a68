"""Principal identifiers for canisters and senders."""

from __future__ import annotations

import base64
import hashlib
import zlib

from .errors import PrincipalError

_SELF_AUTHENTICATING_SUFFIX = b"\x02"
_ANONYMOUS_SUFFIX = b"\x04"
MAX_PRINCIPAL_LENGTH = 29


class Principal:
    """An opaque principal id (up to 29 bytes) with the textual checksum form."""

    __slots__ = ("_raw",)

    def __init__(self, raw: bytes):
        raw = bytes(raw)
        if len(raw) > MAX_PRINCIPAL_LENGTH:
            raise PrincipalError(
                f"Principal too long: {len(raw)} bytes (max {MAX_PRINCIPAL_LENGTH})"
            )
        self._raw = raw

    @classmethod
    def anonymous(cls) -> "Principal":
        return cls(_ANONYMOUS_SUFFIX)

    @classmethod
    def management_canister(cls) -> "Principal":
        return cls(b"")

    @classmethod
    def self_authenticating(cls, der_public_key: bytes) -> "Principal":
        """Principal derived from a DER-encoded public key."""
        digest = hashlib.sha224(der_public_key).digest()
        return cls(digest + _SELF_AUTHENTICATING_SUFFIX)

    @classmethod
    def from_hex(cls, value: str) -> "Principal":
        try:
            return cls(bytes.fromhex(value))
        except ValueError as e:
            raise PrincipalError(f"Invalid principal hex: {value!r}") from e

    @classmethod
    def from_text(cls, text: str) -> "Principal":
        """Parse the dashed base32 form, validating the CRC32 checksum."""
        canonical = text.lower()
        ungrouped = canonical.replace("-", "").upper()
        padding = "=" * (-len(ungrouped) % 8)
        try:
            decoded = base64.b32decode(ungrouped + padding)
        except ValueError as e:
            raise PrincipalError(f"Invalid principal text: {text!r}") from e
        if len(decoded) < 4:
            raise PrincipalError(f"Invalid principal text: {text!r}")
        principal = cls(decoded[4:])
        if principal.to_text() != canonical:
            raise PrincipalError(
                f"Principal {text!r} does not have a valid checksum"
            )
        return principal

    @classmethod
    def from_(cls, value: "Principal | str | bytes") -> "Principal":
        """Coerce a principal, its text form, or its raw bytes."""
        if isinstance(value, Principal):
            return value
        if isinstance(value, str):
            return cls.from_text(value)
        if isinstance(value, (bytes, bytearray, memoryview)):
            return cls(bytes(value))
        raise PrincipalError(f"Cannot build a principal from {type(value).__name__}")

    def to_text(self) -> str:
        checksum = zlib.crc32(self._raw).to_bytes(4, "big")
        encoded = base64.b32encode(checksum + self._raw).decode("ascii")
        encoded = encoded.lower().rstrip("=")
        return "-".join(encoded[i:i + 5] for i in range(0, len(encoded), 5))

    def to_hex(self) -> str:
        return self._raw.hex().upper()

    def is_anonymous(self) -> bool:
        return self._raw == _ANONYMOUS_SUFFIX

    def __bytes__(self) -> bytes:
        return self._raw

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Principal):
            return NotImplemented
        return self._raw == other._raw

    def __hash__(self) -> int:
        return hash(self._raw)

    def __str__(self) -> str:
        return self.to_text()

    def __repr__(self) -> str:
        return f"Principal({self.to_text()!r})"
