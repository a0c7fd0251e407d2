"""Generation 1 binary framing: a fixed header followed by part records."""

from __future__ import annotations

from typing import NamedTuple, Sequence, Tuple

from copycloud.core.constants import (
    FINGERPRINT_FIELD_SIZE,
    HEADER_SIGNATURE,
    HEADER_SIZE,
    HEADER_STRUCT,
    HEADER_VERSION,
    PART_FIXED_SIZE,
    PART_SIGNATURE,
    PART_STRUCT,
    UINT32_MAX,
)
from copycloud.core.errors import CodecError, PartError, RemoteError
from copycloud.core.models import Header, PartRecord


class _PartFields(NamedTuple):
    signature: int
    struct_size: int
    version: int
    share_id: int
    fingerprint: bytes
    size: int
    payload_size: int
    error_code: int
    reserved: int


def encode_fingerprint(value: str) -> bytes:
    """Encode a fingerprint into its fixed-width, NUL padded slot."""
    try:
        raw = value.encode("ascii")
    except UnicodeEncodeError as exc:
        raise CodecError(f"Fingerprint is not ASCII: {value!r}") from exc
    if len(raw) > FINGERPRINT_FIELD_SIZE:
        raise CodecError(
            f"Fingerprint too long: {len(raw)} bytes (max {FINGERPRINT_FIELD_SIZE})"
        )
    return raw.ljust(FINGERPRINT_FIELD_SIZE, b"\x00")


def decode_fingerprint(raw: bytes) -> str:
    try:
        return raw.rstrip(b"\x00 ").decode("ascii")
    except UnicodeDecodeError as exc:
        raise CodecError(f"Fingerprint field is not ASCII: {raw!r}") from exc


def encode_header(header: Header) -> bytes:
    return HEADER_STRUCT.pack(
        header.signature,
        header.struct_size,
        header.version,
        header.total_size,
        header.part_count,
        header.error_code,
    )


def _check_uint32(name: str, value: int) -> None:
    if not 0 <= value <= UINT32_MAX:
        raise CodecError(f"Part {name} out of uint32 range: {value}")


def encode_part_record(record: PartRecord) -> bytes:
    for name in ("share_id", "size", "version", "error_code", "reserved", "struct_size"):
        _check_uint32(name, getattr(record, name))
    fixed = PART_STRUCT.pack(
        record.signature,
        record.struct_size,
        record.version,
        record.share_id,
        encode_fingerprint(record.fingerprint),
        record.size,
        record.payload_size,
        record.error_code,
        record.reserved,
    )
    return fixed + record.payload


def encode_message(
    records: Sequence[PartRecord],
    version: int = HEADER_VERSION,
    error_code: int = 0,
) -> bytes:
    """
    Serialize a header followed by ``records``.

    Header sizes and counts are computed from the records.
    """
    header = Header.for_records(records, version=version, error_code=error_code)
    return encode_header(header) + b"".join(encode_part_record(r) for r in records)


def encode_error_reply(message: str, error_code: int, version: int = HEADER_VERSION) -> bytes:
    """Request-level error: a header with ``error_code`` set, then the message text."""
    body = message.encode("utf-8")
    header = Header(
        signature=HEADER_SIGNATURE,
        struct_size=HEADER_SIZE,
        version=version,
        total_size=len(body),
        part_count=0,
        error_code=error_code,
    )
    return encode_header(header) + body


def decode_header(raw: bytes) -> Header:
    """
    Parse and validate the fixed header at the start of ``raw``.

    Raises:
        CodecError: If the buffer is too short or the header is corrupted
    """
    if len(raw) < HEADER_SIZE:
        raise CodecError(
            f"Failed to parse binary part reply: {len(raw)} bytes "
            f"(header needs {HEADER_SIZE})"
        )
    header = Header(*HEADER_STRUCT.unpack_from(raw, 0))
    if header.signature != HEADER_SIGNATURE:
        raise CodecError(
            f"Invalid header signature: {header.signature:#010x} "
            f"(expected {HEADER_SIGNATURE:#010x})"
        )
    if header.struct_size != HEADER_SIZE:
        raise CodecError(
            f"Invalid header size: {header.struct_size} (expected {HEADER_SIZE})"
        )
    return header


def _unpack_part(raw: bytes, offset: int) -> _PartFields:
    if len(raw) - offset < PART_FIXED_SIZE:
        raise CodecError(
            f"Truncated part record: {max(len(raw) - offset, 0)} bytes "
            f"(record needs {PART_FIXED_SIZE})"
        )
    fields = _PartFields(*PART_STRUCT.unpack_from(raw, offset))
    if fields.signature != PART_SIGNATURE:
        raise CodecError(
            f"Invalid part signature: {fields.signature:#010x} "
            f"(expected {PART_SIGNATURE:#010x})"
        )
    return fields


def _build_record(raw: bytes, offset: int, fields: _PartFields) -> PartRecord:
    if fields.struct_size != PART_FIXED_SIZE + fields.payload_size:
        raise CodecError(
            f"Invalid part struct size: {fields.struct_size} "
            f"(expected {PART_FIXED_SIZE + fields.payload_size})"
        )
    start = offset + PART_FIXED_SIZE
    payload = raw[start : start + fields.payload_size]
    if len(payload) != fields.payload_size:
        raise CodecError(
            f"Truncated part payload: got {len(payload)} bytes, "
            f"expected {fields.payload_size}"
        )
    return PartRecord(
        share_id=fields.share_id,
        fingerprint=decode_fingerprint(fields.fingerprint),
        size=fields.size,
        payload=payload,
        error_code=fields.error_code,
        version=fields.version,
        reserved=fields.reserved,
    )


def decode_part_record(raw: bytes, offset: int = HEADER_SIZE) -> PartRecord:
    """Parse one part record starting at ``offset`` (no error-code handling)."""
    return _build_record(raw, offset, _unpack_part(raw, offset))


def _trailing_text(raw: bytes, offset: int) -> str:
    return raw[offset:].decode("utf-8", errors="replace").rstrip("\x00")


def decode_message(raw: bytes) -> Tuple[Header, PartRecord]:
    """
    Decode a reply carrying exactly one part record.

    Raises:
        CodecError: Malformed header or part record, or ``total_size``
            disagrees with the reply length
        RemoteError: Header error code set; the rest of the reply is the message
        PartError: Part error code set; bytes after the fixed fields are the message
    """
    header = decode_header(raw)
    if header.error_code:
        raise RemoteError(
            f"Cloud returned part error '{_trailing_text(raw, HEADER_SIZE)}'",
            code=header.error_code,
        )
    if header.part_count < 1:
        raise CodecError("Binary part reply carries no part records")

    fields = _unpack_part(raw, HEADER_SIZE)
    if fields.error_code:
        raise PartError(
            f"Got part error '{_trailing_text(raw, HEADER_SIZE + PART_FIXED_SIZE)}'",
            code=fields.error_code,
        )
    record = _build_record(raw, HEADER_SIZE, fields)
    if len(raw) - HEADER_SIZE != header.total_size:
        raise CodecError(
            f"Header declares {header.total_size} bytes of part records, "
            f"reply carries {len(raw) - HEADER_SIZE}"
        )
    return header, record


__all__ = [
    "encode_fingerprint",
    "decode_fingerprint",
    "encode_header",
    "encode_part_record",
    "encode_message",
    "encode_error_reply",
    "decode_header",
    "decode_part_record",
    "decode_message",
]
