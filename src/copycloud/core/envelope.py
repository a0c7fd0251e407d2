"""JSON-RPC request/response envelope."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Optional, Union

from copycloud.core.constants import JSONRPC_REQUEST_ID, JSONRPC_VERSION
from copycloud.core.errors import CodecError, RemoteError


@dataclass(frozen=True)
class RpcOk:
    result: Any

    def unwrap(self, context: str = "") -> Any:
        return self.result


@dataclass(frozen=True)
class RpcError:
    message: str
    code: Optional[int] = None
    data: Any = None

    def unwrap(self, context: str = "") -> Any:
        """Raise the server error, optionally prefixed with what was attempted."""
        message = f"{context} '{self.message}'" if context else self.message
        raise RemoteError(message, code=self.code)


RpcResult = Union[RpcOk, RpcError]


def encode_request(method: str, params: Any) -> bytes:
    """
    Build the request envelope.

    Python's encoder never escapes ``/``, which the server requires.
    """
    request = {
        "jsonrpc": JSONRPC_VERSION,
        "id": JSONRPC_REQUEST_ID,
        "method": method,
        "params": params,
    }
    return json.dumps(request, separators=(",", ":")).encode("utf-8")


def decode_document(raw: bytes) -> dict[str, Any]:
    try:
        document = json.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise CodecError(f"Invalid JSON-RPC reply: {exc}") from exc
    if not isinstance(document, dict):
        raise CodecError(f"Invalid JSON-RPC reply: expected object, got {type(document).__name__}")
    return document


def decode_response(raw: bytes) -> RpcResult:
    """
    Decode a reply into ``RpcOk`` or ``RpcError``.

    A present, non-null ``error`` member decides the outcome; its ``message``
    is kept verbatim.
    """
    document = decode_document(raw)
    error = document.get("error")
    if error is not None:
        if isinstance(error, dict):
            code = error.get("code")
            return RpcError(
                message=str(error.get("message", "")),
                code=code if isinstance(code, int) else None,
                data=error.get("data"),
            )
        return RpcError(message=str(error))
    return RpcOk(result=document.get("result"))


__all__ = ["RpcOk", "RpcError", "RpcResult", "encode_request", "decode_document", "decode_response"]
