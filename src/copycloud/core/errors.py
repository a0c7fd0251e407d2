"""Exception hierarchy for cloud API operations."""

from __future__ import annotations

from typing import Optional


class CloudApiError(Exception):
    """Base class for every failure raised by the client."""


class TransportError(CloudApiError):
    """Connection or HTTP level failure."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class CodecError(CloudApiError):
    """Malformed or short response, or a violated framing invariant."""


class RemoteError(CloudApiError):
    """
    Error reported by the server.

    Raised for a non-null JSON-RPC ``error`` object and for a non-zero
    request-level error code in binary framing. ``message`` is the server's
    text, verbatim.
    """

    def __init__(self, message: str, code: Optional[int] = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code

    def __str__(self) -> str:
        if self.code is not None:
            return f"{self.message} (code {self.code})"
        return self.message


class PartError(RemoteError):
    """Non-zero error code on an individual part record."""


class ChecksumError(CloudApiError):
    """Recomputed fingerprint (or size) disagrees with the expected one."""


class EmptyPayloadError(CloudApiError):
    """Server reported success but returned no bytes for a fetched part."""


__all__ = [
    "CloudApiError",
    "TransportError",
    "CodecError",
    "RemoteError",
    "PartError",
    "ChecksumError",
    "EmptyPayloadError",
]
