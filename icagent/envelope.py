"""Envelope construction, signing, and verification."""

from __future__ import annotations

from typing import Any

from .errors import EnvelopeError
from .identity import ED25519_DER_PREFIX, Ed25519KeyIdentity, Identity
from .principal import Principal
from .request_id import IC_REQUEST_DOMAIN_SEPARATOR, request_id_of
from .types import Envelope


def build_preimage(request_id: bytes) -> bytes:
    """Signing preimage: the domain separator followed by the request id."""
    return IC_REQUEST_DOMAIN_SEPARATOR + request_id


def build_envelope(content: dict[str, Any], request_id: bytes, identity: Identity) -> Envelope:
    """Wrap *content* and sign *request_id* with *identity*.

    The content is not copied or modified. Identities without a public key
    (anonymous) produce an envelope with no signature fields.

    Args:
        content: Fully transformed request content.
        request_id: ``request_id_of(content)``.
        identity: The active identity.

    Returns:
        The envelope dict.
    """
    if len(request_id) != 32:
        raise EnvelopeError(f"request id must be 32 bytes, got {len(request_id)}")

    envelope: Envelope = {"content": content}
    pubkey = identity.get_public_key()
    if pubkey is None:
        return envelope

    envelope["sender_pubkey"] = pubkey
    envelope["sender_sig"] = identity.sign(build_preimage(request_id))
    chain = identity.get_delegation()
    if chain is not None:
        envelope["sender_delegation"] = chain.to_wire()
    return envelope


def verify_envelope(envelope: Envelope) -> bytes:
    """Check the envelope's sender fields against its content.

    Ed25519 signatures are verified; other key types are only checked for
    consistency with the sender principal.

    Returns:
        The request id of the content.

    Raises:
        EnvelopeError: On structural violations.
        SignatureError: On signature verification failure.
    """
    content = envelope.get("content")
    if not isinstance(content, dict):
        raise EnvelopeError("Envelope content must be a mapping")
    request_id = request_id_of(content)
    sender = Principal.from_(content.get("sender", Principal.anonymous()))

    pubkey = envelope.get("sender_pubkey")
    sig = envelope.get("sender_sig")
    if sender.is_anonymous():
        if pubkey is not None or sig is not None:
            raise EnvelopeError("Anonymous envelope must not carry signature fields")
        return request_id

    if pubkey is None or sig is None:
        raise EnvelopeError("Missing sender_pubkey or sender_sig")
    if Principal.self_authenticating(pubkey) != sender:
        raise EnvelopeError("sender does not match sender_pubkey")
    if "sender_delegation" not in envelope and pubkey.startswith(ED25519_DER_PREFIX):
        Ed25519KeyIdentity.verify(pubkey, sig, build_preimage(request_id))
    return request_id
