"""Protocol core: fingerprints, wire codecs and the JSON-RPC envelope."""

from .codecs import BinaryPartCodec, BinaryTailCodec, PartCodec, build_codec
from .errors import (
    ChecksumError,
    CloudApiError,
    CodecError,
    EmptyPayloadError,
    PartError,
    RemoteError,
    TransportError,
)
from .fingerprint import fingerprint, verify_fingerprint
from .models import FileManifest, Listing, ObjectMeta, Part, PartRef

__all__ = [
    "fingerprint",
    "verify_fingerprint",
    "PartCodec",
    "BinaryPartCodec",
    "BinaryTailCodec",
    "build_codec",
    "PartRef",
    "Part",
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
