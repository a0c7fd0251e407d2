"""
CloudApi: one object wiring the session, part transfer, object and listing
clients together from a CloudApiConfig.
"""

from __future__ import annotations

import os
from typing import Any, Iterable, List, Optional

from copycloud.client.listing import Paginator
from copycloud.client.objects import ObjectManager
from copycloud.client.parts import PartTransferClient
from copycloud.client.session import ApiSession
from copycloud.config.config import CloudApiConfig
from copycloud.core.codecs import build_codec
from copycloud.core.constants import DEFAULT_SHARE_ID
from copycloud.core.errors import CodecError
from copycloud.core.models import FileManifest, Listing, ObjectMeta, PartLike, PartRef
from copycloud.transport.http import HttpTransport, Transport
from copycloud.transport.signing import OAuth1Signer, Signer
from copycloud.utils.logging import get_logger, log_context

logger = get_logger(__name__)


class CloudApi:
    """
    Synchronous client for the chunked file store.

    One request is in flight at a time; the instance must not be shared
    between threads without external locking.
    """

    def __init__(
        self,
        config: CloudApiConfig,
        transport: Optional[Transport] = None,
        signer: Optional[Signer] = None,
    ) -> None:
        """
        Args:
            config: Connection and transfer settings
            transport: Optional transport (defaults to HttpTransport)
            signer: Optional signer (defaults to OAuth1Signer from config credentials)
        """
        self.config = config
        self._owns_transport = transport is None
        self.transport = transport or HttpTransport(timeout=config.timeout)
        self.session = ApiSession(
            base_url=config.base_url,
            transport=self.transport,
            signer=signer or OAuth1Signer.from_config(config),
            api_version=config.api_version,
            client_type=config.client_type,
        )
        self.parts = PartTransferClient(self.session, build_codec(config.wire_generation))
        self.objects = ObjectManager(self.session)
        self.paginator = Paginator(self.session, page_size=config.page_size)

    @classmethod
    def from_env(cls) -> "CloudApi":
        return cls(CloudApiConfig.from_env())

    # Parts

    def send_data(self, data: bytes, share_id: int = DEFAULT_SHARE_ID) -> PartRef:
        return self.parts.send_data(data, share_id)

    def has_part(self, fingerprint: str, size: int, share_id: int = DEFAULT_SHARE_ID) -> bool:
        return self.parts.has_part(fingerprint, size, share_id)

    def send_part(
        self, fingerprint: str, size: int, data: bytes, share_id: int = DEFAULT_SHARE_ID
    ) -> None:
        self.parts.send_part(fingerprint, size, data, share_id)

    def get_part(self, fingerprint: str, size: int, share_id: int = DEFAULT_SHARE_ID) -> bytes:
        return self.parts.get_part(fingerprint, size, share_id)

    # Objects

    def create_file(self, path: str, parts: Iterable[PartLike]) -> FileManifest:
        return self.objects.create_file(path, parts)

    def remove_file(self, path: str) -> None:
        self.objects.remove_file(path)

    def rename(self, source: str, destination: str) -> ObjectMeta:
        return self.objects.rename(source, destination)

    def list_path(self, path: str, **options: Any) -> Listing:
        return self.paginator.list_path(path, **options)

    # Whole files

    def upload_file(
        self,
        local_path: str,
        remote_path: str,
        chunk_size: Optional[int] = None,
        share_id: int = DEFAULT_SHARE_ID,
    ) -> FileManifest:
        """
        Upload a local file part by part, then create it at ``remote_path``.

        Parts already present in the store are not sent again.
        """
        chunk_size = chunk_size or self.config.chunk_size
        parts: List[PartRef] = []
        with log_context(path=remote_path):
            with open(local_path, "rb") as f:
                while True:
                    chunk = f.read(chunk_size)
                    if not chunk:
                        break
                    parts.append(self.parts.send_data(chunk, share_id))
            return self.objects.create_file(remote_path, parts)

    def find_file(self, remote_path: str) -> ObjectMeta:
        """
        Look up a file together with its part list.

        Raises:
            FileNotFoundError: No file object at ``remote_path``
        """
        listing = self.list_path(remote_path, include_parts=True)
        candidates = [item for item in listing if item.is_file]
        for item in candidates:
            if item.path == remote_path:
                return item
        if len(candidates) == 1:
            return candidates[0]
        raise FileNotFoundError(f"No file at {remote_path}")

    def download_file(
        self, remote_path: str, local_path: str, share_id: int = DEFAULT_SHARE_ID
    ) -> int:
        """
        Download a file's latest revision, verifying every part.

        Returns:
            Number of bytes written

        Raises:
            CodecError: Written size differs from the object's size
        """
        meta = self.find_file(remote_path)
        written = 0
        with log_context(path=remote_path):
            # Only a file this call opened is removed on failure
            f = open(local_path, "wb")
            try:
                with f:
                    for part in meta.latest_parts():
                        data = self.parts.get_part(part.fingerprint, part.size, share_id)
                        f.write(data)
                        written += len(data)
                if meta.size is not None and written != meta.size:
                    raise CodecError(
                        f"Downloaded {written} bytes for {remote_path}, "
                        f"object size is {meta.size}"
                    )
            except BaseException:
                os.remove(local_path)
                raise
        logger.info("file_downloaded", path=remote_path, size=written)
        return written

    def close(self) -> None:
        if self._owns_transport:
            self.transport.close()

    def __enter__(self) -> "CloudApi":
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()


__all__ = ["CloudApi"]
