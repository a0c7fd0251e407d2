"""
Monitoring utilities for copycloud.
"""

from copycloud.monitoring.metrics import (
    API_LATENCY,
    API_REQUESTS,
    BYTES_RECEIVED,
    BYTES_SENT,
    CHECKSUM_FAILURES,
    LIST_PAGES,
    PART_DEDUP_HITS,
    PARTS_SENT,
    generate_latest,
)

__all__ = [
    "API_REQUESTS",
    "API_LATENCY",
    "PARTS_SENT",
    "PART_DEDUP_HITS",
    "BYTES_SENT",
    "BYTES_RECEIVED",
    "CHECKSUM_FAILURES",
    "LIST_PAGES",
    "generate_latest",
]
