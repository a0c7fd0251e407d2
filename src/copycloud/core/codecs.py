"""
Part codecs: one strategy per wire generation.

Both strategies turn a part operation into an endpoint + body and parse the
raw reply. The transfer client never branches on the generation itself.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Tuple

from copycloud.core.constants import (
    BINARY_DATA_MARKER,
    BINARY_SEPARATOR,
    GET_PARTS_ENDPOINT,
    GET_PARTS_V2_METHOD,
    HAS_PARTS_ENDPOINT,
    HAS_PARTS_V2_METHOD,
    JSONRPC_BINARY_ENDPOINT,
    SEND_PARTS_ENDPOINT,
    SEND_PARTS_V2_METHOD,
)
from copycloud.core.envelope import decode_response, encode_request
from copycloud.core.errors import CodecError, EmptyPayloadError
from copycloud.core.models import PartRecord, PartRef
from copycloud.core.wire import decode_message, encode_message


@dataclass(frozen=True)
class PartRequest:
    endpoint: str
    body: bytes


class PartCodec(ABC):
    """Encodes part operations and decodes their replies for one wire generation."""

    generation: int

    @abstractmethod
    def has_part_request(self, part: PartRef) -> PartRequest:
        pass

    @abstractmethod
    def parse_has_part(self, raw: bytes, part: PartRef) -> bool:
        """Return True when the store already holds ``part``."""
        pass

    @abstractmethod
    def send_part_request(self, part: PartRef, data: bytes) -> PartRequest:
        pass

    @abstractmethod
    def parse_send_part(self, raw: bytes, part: PartRef) -> None:
        """Raise if the store rejected the upload."""
        pass

    @abstractmethod
    def get_part_request(self, part: PartRef) -> PartRequest:
        pass

    @abstractmethod
    def parse_get_part(self, raw: bytes, part: PartRef) -> bytes:
        """Return the raw payload (not yet checksum verified)."""
        pass


class BinaryPartCodec(PartCodec):
    """Generation 1: fixed binary header + part record over dedicated endpoints."""

    generation = 1

    def has_part_request(self, part: PartRef) -> PartRequest:
        return PartRequest(HAS_PARTS_ENDPOINT, encode_message([PartRecord.for_part(part)]))

    def parse_has_part(self, raw: bytes, part: PartRef) -> bool:
        _, record = decode_message(raw)
        # The store zeroes the size field when it does not have the part
        return record.size != 0

    def send_part_request(self, part: PartRef, data: bytes) -> PartRequest:
        return PartRequest(
            SEND_PARTS_ENDPOINT, encode_message([PartRecord.for_part(part, data)])
        )

    def parse_send_part(self, raw: bytes, part: PartRef) -> None:
        decode_message(raw)

    def get_part_request(self, part: PartRef) -> PartRequest:
        return PartRequest(GET_PARTS_ENDPOINT, encode_message([PartRecord.for_part(part)]))

    def parse_get_part(self, raw: bytes, part: PartRef) -> bytes:
        _, record = decode_message(raw)
        if record.payload_size == 0:
            raise EmptyPayloadError(f"No data sent for part {part.fingerprint}")
        return record.payload


def split_binary_tail(raw: bytes) -> Tuple[bytes, Optional[bytes]]:
    """
    Split a generation 2 body at its first NUL byte.

    Returns:
        (json_bytes, tail) where tail is None when no separator is present
    """
    index = raw.find(BINARY_SEPARATOR)
    if index < 0:
        return raw, None
    return raw[:index], raw[index + 1 :]


class BinaryTailCodec(PartCodec):
    """Generation 2: JSON-RPC envelope, then one NUL byte, then the raw payload."""

    generation = 2

    @staticmethod
    def _entry(part: PartRef) -> Dict[str, Any]:
        return {
            "fingerprint": part.fingerprint,
            "size": part.size,
            "share_id": part.share_id,
        }

    @staticmethod
    def _result(raw: bytes, context: str) -> Tuple[Mapping[str, Any], Optional[bytes]]:
        head, tail = split_binary_tail(raw)
        result = decode_response(head).unwrap(context)
        if result is None:
            result = {}
        if not isinstance(result, Mapping):
            raise CodecError(f"{context}: unexpected result type {type(result).__name__}")
        return result, tail

    def has_part_request(self, part: PartRef) -> PartRequest:
        body = encode_request(HAS_PARTS_V2_METHOD, {"parts": [self._entry(part)]})
        return PartRequest(JSONRPC_BINARY_ENDPOINT, body)

    def parse_has_part(self, raw: bytes, part: PartRef) -> bool:
        result, _ = self._result(raw, "Error checking part")
        needed = result.get("needed_parts") or []
        return not any(
            isinstance(entry, Mapping) and entry.get("fingerprint") == part.fingerprint
            for entry in needed
        )

    def send_part_request(self, part: PartRef, data: bytes) -> PartRequest:
        entry = self._entry(part)
        entry["data"] = BINARY_DATA_MARKER.format(offset=0, size=len(data))
        body = encode_request(SEND_PARTS_V2_METHOD, {"parts": [entry]})
        return PartRequest(JSONRPC_BINARY_ENDPOINT, body + BINARY_SEPARATOR + data)

    def parse_send_part(self, raw: bytes, part: PartRef) -> None:
        self._result(raw, "Error sending part")

    def get_part_request(self, part: PartRef) -> PartRequest:
        body = encode_request(GET_PARTS_V2_METHOD, {"parts": [self._entry(part)]})
        return PartRequest(JSONRPC_BINARY_ENDPOINT, body)

    def parse_get_part(self, raw: bytes, part: PartRef) -> bytes:
        _, tail = self._result(raw, "Error getting part")
        if tail is None:
            raise CodecError("Binary reply has no NUL separator before the payload")
        if not tail:
            raise EmptyPayloadError(f"No data sent for part {part.fingerprint}")
        if len(tail) != part.size:
            raise CodecError(
                f"Server did not provide the correct size: got {len(tail)} bytes, "
                f"expected {part.size}"
            )
        return tail


_CODECS = {
    BinaryPartCodec.generation: BinaryPartCodec,
    BinaryTailCodec.generation: BinaryTailCodec,
}


def build_codec(generation: int) -> PartCodec:
    """Return the codec for a wire generation (1 or 2)."""
    try:
        return _CODECS[generation]()
    except KeyError:
        raise ValueError(f"Unsupported wire generation: {generation}") from None


__all__ = [
    "PartRequest",
    "PartCodec",
    "BinaryPartCodec",
    "BinaryTailCodec",
    "split_binary_tail",
    "build_codec",
]
