"""copycloud - client for a content-addressed, chunked cloud file store."""

__version__ = "0.1.0"

from .client import ApiSession, CloudApi, ObjectManager, Paginator, PartTransferClient  # noqa: E402
from .config import CloudApiConfig  # noqa: E402
from .core import (  # noqa: E402
    ChecksumError,
    CloudApiError,
    CodecError,
    EmptyPayloadError,
    FileManifest,
    Listing,
    ObjectMeta,
    PartError,
    PartRef,
    RemoteError,
    TransportError,
    fingerprint,
)

__all__ = [
    "CloudApi",
    "CloudApiConfig",
    "ApiSession",
    "PartTransferClient",
    "ObjectManager",
    "Paginator",
    "fingerprint",
    "PartRef",
    "FileManifest",
    "ObjectMeta",
    "Listing",
    "CloudApiError",
    "TransportError",
    "CodecError",
    "RemoteError",
    "PartError",
    "ChecksumError",
    "EmptyPayloadError",
]
