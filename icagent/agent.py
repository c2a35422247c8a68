"""High-level HTTP agent for submitting requests to canisters."""

from __future__ import annotations

import logging
from concurrent.futures import Future
from typing import Any, Callable, Sequence

from . import codec
from .certificate import Certificate, RequestStatus
from .clock import ClockSync
from .config import AgentConfig
from .errors import ConfigurationError, DecodeError
from .envelope import build_envelope
from .host import ResolvedHost, resolve_host
from .identity import Identity
from .identity_holder import IdentityHolder
from .principal import Principal
from .request import RequestBuilder
from .request_id import request_id_of
from .transforms import Transform, TransformPipeline, make_nonce_transform
from .transport import endpoint_url, post_cbor, resolve_fetch
from .types import CallResult, Endpoint, Envelope

_LOG = logging.getLogger(__name__)

# Any canister certifies the replica time; the ledger always exists on mainnet.
DEFAULT_TIME_CANISTER = "ryjl3-tyaaa-aaaaa-aaaba-cai"


class HttpAgent:
    """Builds, signs and submits call, query and read_state requests.

    Every request goes through the same steps: check the identity, build the
    content, run the transform pipeline, compute the request id, sign, encode
    and POST. The identity check happens first, so an invalidated agent never
    touches the network.
    """

    def __init__(
        self,
        host: str | None = None,
        fetch: Callable[..., Any] | None = None,
        identity: Identity | Future | None = None,
        disable_nonce: bool | None = None,
        ingress_expiry_delta_ms: int | None = None,
        *,
        config: AgentConfig | None = None,
    ):
        """Initialize the agent.

        Args:
            host: Replica or boundary node URL.
            fetch: Transport function; defaults to the ``requests`` fetch.
            identity: Identity, or a future resolving to one. Anonymous if omitted.
            disable_nonce: Do not install the default nonce transform.
            ingress_expiry_delta_ms: Lifetime of each request.
            config: A prepared config; the other arguments are then ignored.

        Raises:
            ConfigurationError: If no fetch is available or an option is invalid.
        """
        if config is None:
            config = AgentConfig.from_env(
                host=host,
                fetch=fetch,
                identity=identity,
                disable_nonce=disable_nonce,
                ingress_expiry_delta_ms=ingress_expiry_delta_ms,
            )
        self._fetch = resolve_fetch(config.fetch)
        try:
            self._host = resolve_host(config.host)
        except ValueError as e:
            raise ConfigurationError(f"Invalid host {config.host!r}: {e}") from e

        self._identity = IdentityHolder(config.identity)
        self._clock = ClockSync()
        self._builder = RequestBuilder(self._clock, config.ingress_expiry_delta_ms)
        self._transforms = TransformPipeline()
        if not config.disable_nonce:
            self._transforms.add(make_nonce_transform())

    @classmethod
    def from_env(cls, **kwargs) -> "HttpAgent":
        """Build an agent from environment variables."""
        return cls(config=AgentConfig.from_env(**kwargs))

    @property
    def host(self) -> ResolvedHost:
        return self._host

    @property
    def clock(self) -> ClockSync:
        return self._clock

    def add_transform(self, transform: Transform) -> None:
        """Register a transform to run after those already registered."""
        self._transforms.add(transform)

    def get_principal(self) -> Principal:
        return self._identity.current().get_principal()

    def replace_identity(self, identity: Identity | Future) -> None:
        self._identity.replace(identity)

    def invalidate_identity(self) -> None:
        self._identity.invalidate()

    # -- requests --

    def call(
        self,
        canister_id: Principal | str,
        method_name: str,
        arg: bytes,
        effective_canister_id: Principal | str | None = None,
    ) -> CallResult:
        """Submit an update call.

        Returns:
            The request id (for status polling) and the HTTP status.
        """
        identity = self._identity.current()
        canister = Principal.from_(canister_id)
        content = self._builder.call(canister, method_name, arg, identity.get_principal())
        envelope, request_id = self._sign(self._transforms.apply(content), identity)

        target = Principal.from_(effective_canister_id or canister)
        response, _ = self._post(target, Endpoint.CALL, envelope, request_id)
        return CallResult(
            request_id=request_id,
            status_code=response.status_code,
            reason=getattr(response, "reason", "") or "",
        )

    def query(
        self,
        canister_id: Principal | str,
        method_name: str,
        arg: bytes,
        effective_canister_id: Principal | str | None = None,
    ) -> dict:
        """Run a query and return the decoded response."""
        identity = self._identity.current()
        canister = Principal.from_(canister_id)
        content = self._builder.query(canister, method_name, arg, identity.get_principal())
        envelope, request_id = self._sign(self._transforms.apply(content), identity)

        target = Principal.from_(effective_canister_id or canister)
        _, body = self._post(target, Endpoint.QUERY, envelope, request_id)
        return self._decode_mapping(body)

    def create_read_state_request(self, paths: Sequence[Sequence[Any]]) -> Envelope:
        """Build, transform and sign a read_state request without sending it."""
        identity = self._identity.current()
        content = self._builder.read_state(paths, identity.get_principal())
        envelope, _ = self._sign(self._transforms.apply(content), identity)
        return envelope

    def read_state(
        self,
        canister_id: Principal | str,
        paths: Sequence[Sequence[Any]] | None = None,
        request: Envelope | None = None,
    ) -> dict:
        """Read certified state.

        A *request* from :meth:`create_read_state_request` is sent as is;
        no transform runs on it.

        Returns:
            The decoded response, ``{"certificate": bytes}``.
        """
        identity = self._identity.current()
        if request is None:
            if paths is None:
                raise ValueError("read_state needs either paths or a prepared request")
            content = self._builder.read_state(paths, identity.get_principal())
            request, request_id = self._sign(self._transforms.apply(content), identity)
        else:
            request_id = request_id_of(request["content"])

        _, body = self._post(Principal.from_(canister_id), Endpoint.READ_STATE, request, request_id)
        return self._decode_mapping(body)

    def request_status(self, canister_id: Principal | str, request_id: bytes) -> RequestStatus:
        """Read the current status of a submitted call (one read, no polling)."""
        result = self.read_state(canister_id, [["request_status", request_id]])
        return RequestStatus.from_certificate(
            Certificate.from_bytes(result.get("certificate")), request_id
        )

    def sync_time(self, canister_id: Principal | str | None = None) -> bool:
        """Align expiries with the replica clock.

        Failures are logged and leave the previous offset in place.

        Returns:
            True if the offset was updated.
        """
        target = canister_id or DEFAULT_TIME_CANISTER

        def replica_time_ms() -> int:
            result = self.read_state(target, [["time"]])
            return Certificate.from_bytes(result.get("certificate")).time_ms()

        return self._clock.sync(replica_time_ms)

    # -- internal helpers --

    def _sign(self, content: dict, identity: Identity) -> tuple[Envelope, bytes]:
        request_id = request_id_of(content)
        return build_envelope(content, request_id, identity), request_id

    def _post(self, canister_id: Principal, endpoint: Endpoint, envelope: Envelope, request_id: bytes):
        url = endpoint_url(self._host, canister_id, endpoint)
        _LOG.debug("POST %s request_id=%s", url, request_id.hex())
        return post_cbor(self._fetch, url, codec.encode(envelope))

    @staticmethod
    def _decode_mapping(body: bytes) -> dict:
        decoded = codec.decode(body)
        if not isinstance(decoded, dict):
            raise DecodeError(f"Expected a CBOR map, got {type(decoded).__name__}")
        return decoded
