"""Prometheus metrics for cloud API clients."""

from prometheus_client import (
    Counter,
    Histogram,
    generate_latest,
)

# Requests
API_REQUESTS = Counter(
    "copycloud_requests_total",
    "Requests issued to the cloud API",
    ["endpoint", "outcome"],
)
API_LATENCY = Histogram(
    "copycloud_request_latency_seconds",
    "Round trip latency of cloud API requests",
    ["endpoint"],
    buckets=(0.05, 0.1, 0.25, 0.5, 1, 2, 5, 10, 30),
)

# Part transfer
PARTS_SENT = Counter(
    "copycloud_parts_sent_total",
    "Parts uploaded to the store",
    ["generation"],
)
PART_DEDUP_HITS = Counter(
    "copycloud_part_dedup_hits_total",
    "Parts skipped because the store already had them",
    ["generation"],
)
BYTES_SENT = Counter(
    "copycloud_bytes_sent_total",
    "Payload bytes uploaded",
)
BYTES_RECEIVED = Counter(
    "copycloud_bytes_received_total",
    "Payload bytes downloaded and verified",
)
CHECKSUM_FAILURES = Counter(
    "copycloud_checksum_failures_total",
    "Fingerprint verification failures",
    ["direction"],
)

# Listing
LIST_PAGES = Counter(
    "copycloud_list_pages_total",
    "list_objects pages fetched",
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
