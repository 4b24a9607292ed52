"""Remote directory client library.

Architecture:
- client.py: HTTP client with fixed-delay retry and failure classification
- merge.py: Merge-on-update of partial requests against the live record

Usage:
    from directory_gateway.core.directory import DirectoryClient

    client = DirectoryClient("http://directory:8081/api")
    outcome = client.get_by_id(7)
"""
from .client import (
    DirectoryClient,
    RetryPolicy,
    build_session,
    REQUEST_TIMEOUT,
    MAX_RETRY_ATTEMPTS,
    DELAY_SECONDS,
)
from .merge import merge_update

__all__ = [
    "DirectoryClient",
    "RetryPolicy",
    "build_session",
    "REQUEST_TIMEOUT",
    "MAX_RETRY_ATTEMPTS",
    "DELAY_SECONDS",
    "merge_update",
]
