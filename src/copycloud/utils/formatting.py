"""Formatting helpers for command output."""

from typing import Optional


def human_size(size_bytes: Optional[int]) -> str:
    """
    Format a byte count as a short human readable string.

    Unknown sizes (directories) render as an empty string.
    """
    if size_bytes is None:
        return ""
    if size_bytes >= 1 << 30:
        return f"{size_bytes / (1 << 30):,.2f}GB"
    if size_bytes >= 1 << 20:
        return f"{size_bytes / (1 << 20):,.2f}MB"
    if size_bytes >= 1 << 10:
        return f"{size_bytes / (1 << 10):,.2f}kB"
    return f"{size_bytes:,}B"


__all__ = ["human_size"]
