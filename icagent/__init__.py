"""Python agent for submitting signed requests to canisters."""

from .agent import HttpAgent
from .clock import ClockSync, Expiry
from .config import AgentConfig
from .envelope import build_envelope, verify_envelope
from .host import resolve_host
from .identity import (
    AnonymousIdentity,
    DelegationChain,
    DelegationIdentity,
    Ed25519KeyIdentity,
    Identity,
    Secp256k1KeyIdentity,
)
from .identity_holder import IdentityHolder
from .nonce import NonceGenerator, make_nonce
from .principal import Principal
from .request_id import request_id_of
from .transforms import TransformPipeline, make_nonce_transform
from .errors import (
    AgentError,
    ConfigurationError,
    IdentityExpiredError,
    TransformError,
    TransportError,
    DecodeError,
    RequestIdError,
    PrincipalError,
    IdentityError,
    SignatureError,
    EnvelopeError,
    CertificateError,
)

__all__ = [
    "HttpAgent",
    "AgentConfig",
    "ClockSync",
    "Expiry",
    "build_envelope",
    "verify_envelope",
    "resolve_host",
    "Identity",
    "AnonymousIdentity",
    "Ed25519KeyIdentity",
    "Secp256k1KeyIdentity",
    "DelegationChain",
    "DelegationIdentity",
    "IdentityHolder",
    "NonceGenerator",
    "make_nonce",
    "Principal",
    "request_id_of",
    "TransformPipeline",
    "make_nonce_transform",
    "AgentError",
    "ConfigurationError",
    "IdentityExpiredError",
    "TransformError",
    "TransportError",
    "DecodeError",
    "RequestIdError",
    "PrincipalError",
    "IdentityError",
    "SignatureError",
    "EnvelopeError",
    "CertificateError",
]
