"""Signing identities: anonymous, Ed25519, secp256k1 and delegated."""

from __future__ import annotations

import hashlib
import secrets
from abc import ABC, abstractmethod
from dataclasses import dataclass, field

from eth_keys import keys as eth_keys
from eth_utils import ValidationError as EthValidationError
from nacl.exceptions import BadSignatureError
from nacl.signing import SigningKey, VerifyKey

from .errors import IdentityError, SignatureError
from .principal import Principal
from .request_id import IC_REQUEST_AUTH_DELEGATION_DOMAIN_SEPARATOR, request_id_of
from .types import DelegationContent, SignedDelegation

ED25519_DER_PREFIX = bytes.fromhex("302a300506032b6570032100")
SECP256K1_DER_PREFIX = bytes.fromhex(
    "3056301006072a8648ce3d020106052b8104000a034200"
)


class Identity(ABC):
    """Capabilities every identity offers to the envelope signer.

    Subclasses that hold key material override :meth:`get_public_key` and
    :meth:`sign`; a delegated identity also returns its chain from
    :meth:`get_delegation`.
    """

    def get_public_key(self) -> bytes | None:
        """DER-encoded public key, or None for identities without keys."""
        return None

    def get_principal(self) -> Principal:
        return Principal.self_authenticating(self.get_public_key())

    @abstractmethod
    def sign(self, blob: bytes) -> bytes:
        """Sign *blob* with the identity's key."""

    def get_delegation(self) -> "DelegationChain | None":
        return None


class AnonymousIdentity(Identity):
    """No key material; requests are sent unsigned as the anonymous principal."""

    def get_principal(self) -> Principal:
        return Principal.anonymous()

    def sign(self, blob: bytes) -> bytes:
        raise IdentityError("The anonymous identity cannot sign")


class Ed25519KeyIdentity(Identity):
    """An ed25519 signing identity backed by a private key."""

    def __init__(self, signing_key: SigningKey):
        self._signing_key = signing_key

    @classmethod
    def generate(cls, seed: bytes | None = None) -> "Ed25519KeyIdentity":
        """Generate a keypair, deterministically when a 32-byte *seed* is given."""
        if seed is None:
            return cls(SigningKey.generate())
        if len(seed) != 32:
            raise IdentityError(f"Ed25519 seed must be 32 bytes, got {len(seed)}")
        return cls(SigningKey(bytes(seed)))

    @property
    def public_key_bytes(self) -> bytes:
        """Raw 32-byte ed25519 public key."""
        return bytes(self._signing_key.verify_key)

    def get_public_key(self) -> bytes:
        return ED25519_DER_PREFIX + self.public_key_bytes

    def sign(self, blob: bytes) -> bytes:
        """Sign *blob*, returning the 64-byte ed25519 signature."""
        return self._signing_key.sign(blob).signature

    @staticmethod
    def verify(der_public_key: bytes, signature: bytes, message: bytes) -> None:
        """Verify an ed25519 signature made by a DER-encoded public key.

        Raises:
            SignatureError: If verification fails.
        """
        if not der_public_key.startswith(ED25519_DER_PREFIX):
            raise SignatureError("Public key is not a DER-encoded ed25519 key")
        try:
            vk = VerifyKey(der_public_key[len(ED25519_DER_PREFIX):])
            vk.verify(message, signature)
        except BadSignatureError as e:
            raise SignatureError(f"Signature verification failed: {e}") from e
        except Exception as e:
            raise SignatureError(f"Verification error: {e}") from e


class Secp256k1KeyIdentity(Identity):
    """A secp256k1 identity; signs ``sha256(blob)`` and returns ``r || s``."""

    def __init__(self, private_key: eth_keys.PrivateKey):
        self._private_key = private_key

    @classmethod
    def generate(cls, secret: bytes | None = None) -> "Secp256k1KeyIdentity":
        secret = secrets.token_bytes(32) if secret is None else bytes(secret)
        try:
            return cls(eth_keys.PrivateKey(secret))
        except (EthValidationError, ValueError) as e:
            raise IdentityError(f"Invalid secp256k1 secret: {e}") from e

    def get_public_key(self) -> bytes:
        # eth_keys drops the 0x04 marker of the uncompressed point.
        point = b"\x04" + self._private_key.public_key.to_bytes()
        return SECP256K1_DER_PREFIX + point

    def sign(self, blob: bytes) -> bytes:
        signature = self._private_key.sign_msg_hash(hashlib.sha256(blob).digest())
        return signature.r.to_bytes(32, "big") + signature.s.to_bytes(32, "big")


@dataclass
class Delegation:
    pubkey: bytes
    expiration: int
    targets: list[Principal] | None = None

    def to_content(self) -> DelegationContent:
        content: DelegationContent = {"pubkey": self.pubkey, "expiration": self.expiration}
        if self.targets is not None:
            content["targets"] = list(self.targets)
        return content


@dataclass
class DelegationChain:
    """Delegations from ``public_key`` down to a session key."""

    public_key: bytes
    delegations: list[tuple[Delegation, bytes]] = field(default_factory=list)

    @classmethod
    def create(
        cls,
        from_identity: Identity,
        to_public_key: bytes,
        expiration_ns: int,
        targets: list[Principal] | None = None,
        previous: "DelegationChain | None" = None,
    ) -> "DelegationChain":
        """Sign a delegation from *from_identity* to *to_public_key*.

        When *previous* is given the new delegation is appended to it and
        the chain keeps the previous root key.
        """
        delegation = Delegation(to_public_key, expiration_ns, targets)
        blob = IC_REQUEST_AUTH_DELEGATION_DOMAIN_SEPARATOR + request_id_of(
            delegation.to_content()
        )
        signature = from_identity.sign(blob)
        if previous is None:
            return cls(from_identity.get_public_key(), [(delegation, signature)])
        return cls(previous.public_key, previous.delegations + [(delegation, signature)])

    def to_wire(self) -> list[SignedDelegation]:
        return [
            {"delegation": delegation.to_content(), "signature": signature}
            for delegation, signature in self.delegations
        ]


class DelegationIdentity(Identity):
    """Signs with a session identity on behalf of the chain's root key."""

    def __init__(self, inner: Identity, chain: DelegationChain):
        if not chain.delegations:
            raise IdentityError("Delegation chain is empty")
        if chain.delegations[-1][0].pubkey != inner.get_public_key():
            raise IdentityError("Delegation chain does not end at the session key")
        self._inner = inner
        self._chain = chain

    def get_public_key(self) -> bytes:
        return self._chain.public_key

    def sign(self, blob: bytes) -> bytes:
        return self._inner.sign(blob)

    def get_delegation(self) -> DelegationChain:
        return self._chain
