"""Machine-readable error categories for replica agent failures."""

from __future__ import annotations


class AgentError(Exception):
    """Base exception for all agent errors."""


class ConfigurationError(AgentError):
    """Agent cannot be constructed (no transport, bad option values)."""


class IdentityExpiredError(AgentError):
    """The agent's identity was invalidated; no request may be made."""

    MESSAGE = (
        "This identity has expired due this application's security policy. "
        "Please refresh your authentication."
    )

    def __init__(self, message: str = MESSAGE):
        super().__init__(message)


class TransformError(AgentError):
    """A request transform produced an unusable request."""


class TransportError(AgentError):
    """Transport call failed or the replica rejected the HTTP request."""

    def __init__(self, message: str, status_code: int | None = None, body: bytes = b""):
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class DecodeError(AgentError):
    """Response body could not be decoded."""


class RequestIdError(AgentError):
    """A request field holds a value that cannot be content-hashed."""


class PrincipalError(AgentError, ValueError):
    """Malformed principal text or bytes."""


class IdentityError(AgentError):
    """Identity key loading or generation error."""


class SignatureError(AgentError):
    """Signature verification failed."""


class EnvelopeError(AgentError):
    """Invalid envelope structure."""


class CertificateError(AgentError):
    """Certificate is malformed or a tree lookup hit an invalid node."""
