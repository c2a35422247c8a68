"""Ordered request-content transforms run between building and hashing."""

from __future__ import annotations

import threading
from collections.abc import Mapping
from typing import Any, Callable

from .errors import TransformError
from .nonce import NONCE_LENGTH, make_nonce
from .types import Endpoint

Transform = Callable[[dict[str, Any]], "dict[str, Any] | None"]


class TransformPipeline:
    """Append-only sequence of transforms, applied in registration order."""

    def __init__(self, transforms: list[Transform] | None = None):
        self._lock = threading.Lock()
        self._transforms: list[Transform] = list(transforms or [])

    def add(self, transform: Transform) -> None:
        if not callable(transform):
            raise TypeError("transform must be callable")
        with self._lock:
            self._transforms.append(transform)

    def __len__(self) -> int:
        with self._lock:
            return len(self._transforms)

    def apply(self, content: dict[str, Any]) -> dict[str, Any]:
        """Run each transform on the output of the previous one.

        A transform may mutate the content in place and return None, or
        return replacement content. Errors propagate unchanged and abort the
        whole request.

        Raises:
            TransformError: If a transform returns something other than a mapping.
        """
        with self._lock:
            transforms = list(self._transforms)
        for transform in transforms:
            result = transform(content)
            if result is None:
                continue
            if not isinstance(result, Mapping):
                raise TransformError(
                    f"transform {transform!r} returned {type(result).__name__}, expected a mapping"
                )
            content = result
        return content


def make_nonce_transform(nonce_fn: Callable[[], bytes] = make_nonce) -> Transform:
    """Transform that sets a fresh nonce on call requests."""

    def nonce_transform(content: dict[str, Any]) -> dict[str, Any]:
        if content.get("request_type") != Endpoint.CALL.value:
            return content
        nonce = nonce_fn()
        if not isinstance(nonce, (bytes, bytearray)) or len(nonce) != NONCE_LENGTH:
            raise TransformError(f"Nonce must be {NONCE_LENGTH} bytes")
        return {**content, "nonce": bytes(nonce)}

    return nonce_transform
