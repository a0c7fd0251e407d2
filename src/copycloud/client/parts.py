"""Part transfer: existence checks, uploads and verified downloads."""

from __future__ import annotations

from copycloud.client.session import ApiSession
from copycloud.core.codecs import BinaryPartCodec, PartCodec
from copycloud.core.constants import DEFAULT_SHARE_ID
from copycloud.core.errors import ChecksumError, CodecError
from copycloud.core.fingerprint import fingerprint as compute_fingerprint
from copycloud.core.fingerprint import verify_fingerprint
from copycloud.core.models import PartRef
from copycloud.monitoring.metrics import (
    BYTES_RECEIVED,
    BYTES_SENT,
    CHECKSUM_FAILURES,
    PART_DEDUP_HITS,
    PARTS_SENT,
)
from copycloud.utils.logging import get_logger, log_context

logger = get_logger(__name__)


class PartTransferClient:
    """
    Moves individual parts between the caller and the store.

    Each public method performs exactly one round trip (``send_data`` at most
    two) and either completes fully or raises. Nothing is retried here.
    """

    def __init__(self, session: ApiSession, codec: PartCodec | None = None) -> None:
        self.session = session
        self.codec = codec or BinaryPartCodec()

    @property
    def _generation(self) -> str:
        return str(self.codec.generation)

    def has_part(
        self, fingerprint: str, size: int, share_id: int = DEFAULT_SHARE_ID
    ) -> bool:
        """Ask the store whether it already holds the part."""
        part = PartRef(fingerprint, size, share_id)
        request = self.codec.has_part_request(part)
        raw = self.session.post(request.endpoint, request.body)
        present = self.codec.parse_has_part(raw, part)
        logger.debug("has_part", fingerprint=fingerprint, size=size, present=present)
        return present

    def send_part(
        self,
        fingerprint: str,
        size: int,
        data: bytes,
        share_id: int = DEFAULT_SHARE_ID,
    ) -> None:
        """
        Upload one part.

        The data is re-fingerprinted before anything goes on the wire.

        Raises:
            ChecksumError: ``data`` does not match ``fingerprint`` or ``size``
        """
        if len(data) != size:
            CHECKSUM_FAILURES.labels(direction="send").inc()
            raise ChecksumError(
                f"Part size mismatch: data is {len(data)} bytes, declared {size}"
            )
        try:
            verify_fingerprint(data, fingerprint)
        except ChecksumError:
            CHECKSUM_FAILURES.labels(direction="send").inc()
            raise

        part = PartRef(fingerprint, size, share_id)
        request = self.codec.send_part_request(part, data)
        raw = self.session.post(request.endpoint, request.body)
        self.codec.parse_send_part(raw, part)

        PARTS_SENT.labels(generation=self._generation).inc()
        BYTES_SENT.inc(size)
        logger.info("part_sent", fingerprint=fingerprint, size=size, share_id=share_id)

    def get_part(
        self, fingerprint: str, size: int, share_id: int = DEFAULT_SHARE_ID
    ) -> bytes:
        """
        Download one part and verify it against its fingerprint.

        Raises:
            RemoteError: The store reported an error (e.g. unknown part)
            EmptyPayloadError: The store returned no data
            CodecError: Malformed reply or wrong payload length
            ChecksumError: Payload does not match the requested fingerprint
        """
        part = PartRef(fingerprint, size, share_id)
        request = self.codec.get_part_request(part)
        raw = self.session.post(request.endpoint, request.body)
        data = self.codec.parse_get_part(raw, part)

        if len(data) != size:
            raise CodecError(
                f"Part {fingerprint} has {len(data)} bytes, expected {size}"
            )
        try:
            verify_fingerprint(data, fingerprint)
        except ChecksumError:
            CHECKSUM_FAILURES.labels(direction="receive").inc()
            logger.error("part_checksum_mismatch", fingerprint=fingerprint, size=size)
            raise

        BYTES_RECEIVED.inc(size)
        logger.debug("part_received", fingerprint=fingerprint, size=size)
        return data

    def send_data(self, data: bytes, share_id: int = DEFAULT_SHARE_ID) -> PartRef:
        """
        Fingerprint ``data`` and upload it unless the store already has it.

        Returns:
            The part reference needed to build a file manifest
        """
        part_fingerprint = compute_fingerprint(data)
        size = len(data)
        with log_context(fingerprint=part_fingerprint):
            if self.has_part(part_fingerprint, size, share_id):
                PART_DEDUP_HITS.labels(generation=self._generation).inc()
                logger.debug("part_dedup_hit", size=size)
            else:
                self.send_part(part_fingerprint, size, data, share_id)
        return PartRef(part_fingerprint, size, share_id)


__all__ = ["PartTransferClient"]
