"""Typed dictionaries and enums for replica request objects."""

from dataclasses import dataclass
from enum import Enum
from typing import Any, NotRequired, TypedDict

from .principal import Principal


class Endpoint(str, Enum):
    CALL = "call"
    QUERY = "query"
    READ_STATE = "read_state"


class CallRequest(TypedDict):
    request_type: str
    canister_id: Principal
    method_name: str
    arg: bytes
    sender: Principal
    ingress_expiry: Any  # clock.Expiry
    nonce: NotRequired[bytes]


class QueryRequest(TypedDict):
    request_type: str
    canister_id: Principal
    method_name: str
    arg: bytes
    sender: Principal
    ingress_expiry: Any
    nonce: NotRequired[bytes]


class ReadStateRequest(TypedDict):
    request_type: str
    paths: list[list[bytes]]
    sender: Principal
    ingress_expiry: Any
    nonce: NotRequired[bytes]


class DelegationContent(TypedDict):
    pubkey: bytes
    expiration: int
    targets: NotRequired[list[Principal]]


class SignedDelegation(TypedDict):
    delegation: DelegationContent
    signature: bytes


class Envelope(TypedDict):
    content: dict[str, Any]
    sender_pubkey: NotRequired[bytes]
    sender_sig: NotRequired[bytes]
    sender_delegation: NotRequired[list[SignedDelegation]]


@dataclass
class CallResult:
    request_id: bytes
    status_code: int
    reason: str
