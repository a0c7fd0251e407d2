"""HTTP transport: executes one immutable request descriptor per call."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import httpx

from copycloud.core.constants import DEFAULT_TIMEOUT_SECONDS
from copycloud.core.errors import TransportError


@dataclass(frozen=True)
class HttpRequest:
    """Everything needed to perform one request; built fresh for every call."""

    url: str
    body: bytes
    headers: Dict[str, str] = field(default_factory=dict)
    method: str = "POST"

    def __repr__(self) -> str:
        return f"HttpRequest({self.method} {self.url}, body=<{len(self.body)} bytes>)"


class Transport(ABC):
    """Performs a request and returns the raw response body."""

    @abstractmethod
    def execute(self, request: HttpRequest) -> bytes:
        """
        Raises:
            TransportError: Connection failure or non-success HTTP status
        """
        pass

    def close(self) -> None:
        """Release underlying resources."""
        pass


class HttpTransport(Transport):
    """httpx backed transport; the client is reused serially across calls."""

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        client: Optional[httpx.Client] = None,
    ) -> None:
        """
        Args:
            timeout: Per request timeout in seconds (ignored when client is given)
            client: Optional preconfigured httpx.Client (tests, proxies)
        """
        self._owns_client = client is None
        self._client = client or httpx.Client(timeout=timeout)

    def execute(self, request: HttpRequest) -> bytes:
        try:
            response = self._client.request(
                request.method,
                request.url,
                headers=request.headers,
                content=request.body,
            )
        except httpx.HTTPError as exc:
            raise TransportError(
                f"HTTP request to {request.url} failed: {type(exc).__name__}: {exc}"
            ) from exc

        if not response.is_success:
            snippet = response.text[:200] if response.content else ""
            raise TransportError(
                f"HTTP {response.status_code} from {request.url}"
                + (f": {snippet}" if snippet else ""),
                status_code=response.status_code,
            )
        return response.content

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> "HttpTransport":
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()


__all__ = ["HttpRequest", "Transport", "HttpTransport"]
