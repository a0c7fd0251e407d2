"""Builds signed request descriptors and runs them through the transport."""

from __future__ import annotations

import time
from typing import Any, Callable, Dict

from copycloud.core.constants import (
    API_VERSION,
    BINARY_CONTENT_TYPE,
    BINARY_ENDPOINTS,
    CLIENT_TYPE,
    JSONRPC_ENDPOINT,
)
from copycloud.core.envelope import RpcResult, decode_response, encode_request
from copycloud.core.errors import CloudApiError
from copycloud.monitoring.metrics import API_LATENCY, API_REQUESTS
from copycloud.transport.http import HttpRequest, Transport
from copycloud.transport.signing import Signer
from copycloud.utils.logging import get_logger

logger = get_logger(__name__)


class ApiSession:
    """
    Stateless request pipeline shared by the part, object and listing clients.

    Every call builds a new immutable ``HttpRequest`` (URL, headers, body), so
    nothing configured for one call leaks into the next.
    """

    def __init__(
        self,
        base_url: str,
        transport: Transport,
        signer: Signer,
        api_version: str = API_VERSION,
        client_type: str = CLIENT_TYPE,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.transport = transport
        self.signer = signer
        self.api_version = api_version
        self.client_type = client_type
        self._clock = clock

    def url_for(self, endpoint: str) -> str:
        return f"{self.base_url}/{endpoint}"

    def headers_for(self, endpoint: str) -> Dict[str, str]:
        url = self.url_for(endpoint)
        headers: Dict[str, str] = {}
        if endpoint in BINARY_ENDPOINTS:
            headers["Content-Type"] = BINARY_CONTENT_TYPE
        headers["X-Api-Version"] = self.api_version
        headers["X-Client-Type"] = self.client_type
        headers["X-Client-Time"] = str(int(self._clock()))
        headers["Authorization"] = self.signer.sign("POST", url)
        return headers

    def build_request(self, endpoint: str, body: bytes) -> HttpRequest:
        return HttpRequest(
            url=self.url_for(endpoint),
            body=body,
            headers=self.headers_for(endpoint),
        )

    def post(self, endpoint: str, body: bytes) -> bytes:
        """POST ``body`` to ``endpoint`` and return the raw reply."""
        request = self.build_request(endpoint, body)
        started = time.perf_counter()
        try:
            raw = self.transport.execute(request)
        except CloudApiError as exc:
            API_REQUESTS.labels(endpoint=endpoint, outcome="error").inc()
            logger.warning("api_request_failed", endpoint=endpoint, error=str(exc))
            raise
        elapsed = time.perf_counter() - started

        API_REQUESTS.labels(endpoint=endpoint, outcome="ok").inc()
        API_LATENCY.labels(endpoint=endpoint).observe(elapsed)
        logger.debug(
            "api_request",
            endpoint=endpoint,
            request_bytes=len(body),
            response_bytes=len(raw),
            elapsed_seconds=round(elapsed, 4),
        )
        return raw

    def call(self, method: str, params: Any) -> RpcResult:
        """Run a JSON-RPC control method and decode the tagged result."""
        logger.debug("rpc_call", method=method)
        raw = self.post(JSONRPC_ENDPOINT, encode_request(method, params))
        return decode_response(raw)


__all__ = ["ApiSession"]
