"""Content fingerprints used as part addressing keys."""

import hashlib

from copycloud.core.errors import ChecksumError


def fingerprint(data: bytes) -> str:
    """
    Content identifier for a byte buffer.

    The identifier is the md5 hex digest followed by the sha1 hex digest of
    the same bytes (72 lowercase hex characters). Any compliant client must
    produce the same string for the same input, so the layout is fixed.

    Args:
        data: Raw bytes (may be empty)

    Returns:
        Fingerprint string
    """
    return hashlib.md5(data).hexdigest() + hashlib.sha1(data).hexdigest()


def verify_fingerprint(data: bytes, expected: str) -> None:
    """
    Raise ChecksumError unless ``data`` fingerprints to ``expected``.
    """
    actual = fingerprint(data)
    if actual != expected:
        raise ChecksumError(
            f"Failed to validate part hash: expected {expected}, got {actual}"
        )


__all__ = ["fingerprint", "verify_fingerprint"]
