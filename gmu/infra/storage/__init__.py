"""Object storage abstraction layer.

This module provides the ``S3Path`` location type and a protocol-based
client for S3 and S3-compatible services.
"""

from .client import DeleteFailure, StorageClient, StorageError
from .path import ParseError, S3Path

__all__ = [
    "DeleteFailure",
    "ParseError",
    "S3Path",
    "StorageClient",
    "StorageError",
]
