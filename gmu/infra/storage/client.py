"""Storage client protocol.

This module defines the interface for object storage operations on
``S3Path`` locations: listing, transfers, deletion and bucket administration.
Implementations forward each call to the backing SDK and let its errors
propagate unchanged.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import BinaryIO, Mapping, Protocol, Sequence

from gmu.infra.storage.path import S3Path


@dataclass(frozen=True, slots=True)
class DeleteFailure:
    """One key that a batch delete request reported as not deleted."""

    key: str | None
    code: str | None
    message: str | None


class StorageError(RuntimeError):
    """Raised when a batch delete reports keys it could not remove."""

    def __init__(self, bucket: str, failures: Sequence[DeleteFailure]) -> None:
        self.bucket = bucket
        self.failures = tuple(failures)
        super().__init__(
            f"failed to delete {len(self.failures)} object(s) from bucket {bucket}"
        )


class StorageClient(Protocol):
    """Protocol defining the interface for object storage backends."""

    def list_directories(self, path: S3Path) -> list[S3Path]:
        """List the common prefixes directly under ``path``.

        S3 has no directories, only keys that may contain ``/``. Listing with
        ``/`` as delimiter groups keys into "common prefixes", which is what
        consoles show as directories.

        Args:
            path: Bucket and key prefix to list. An empty key lists the bucket root.

        Returns:
            One path per common prefix; keys keep their trailing ``/``.
        """
        ...

    def list(self, path: S3Path) -> list[S3Path]:
        """List the objects directly under ``path``.

        Args:
            path: Bucket and key prefix to list. An empty key lists the bucket root.

        Returns:
            One path per object key.
        """
        ...

    def download(self, path: S3Path) -> bytes:
        """Read the whole object at ``path`` into memory."""
        ...

    def download_to_file(self, path: S3Path, fileobj: BinaryIO) -> int:
        """Stream the object at ``path`` into ``fileobj``.

        Args:
            path: Object to download.
            fileobj: Writable binary file object.

        Returns:
            Number of bytes written.
        """
        ...

    def copy(self, source: S3Path, target: S3Path) -> None:
        """Server-side copy of ``source`` to ``target``."""
        ...

    def upload(self, data: bytes, path: S3Path) -> None:
        """Write ``data`` to the object at ``path``."""
        ...

    def delete_recursive(self, path: S3Path) -> None:
        """Delete every object whose key starts with ``path.key + "/"``.

        Raises:
            StorageError: If any listed key could not be deleted.
        """
        ...

    def delete_bucket(self, name: str) -> None:
        """Delete every object in bucket ``name``, then the bucket itself.

        Raises:
            StorageError: If any object could not be deleted; the bucket is kept.
        """
        ...

    def delete_object(self, path: S3Path) -> None:
        """Delete the single object at ``path``."""
        ...

    def exists(self, path: S3Path) -> bool:
        """Return True if object metadata can be read at ``path``."""
        ...

    def create_bucket(self, name: str) -> None:
        """Create bucket ``name``.

        Fails if the bucket name is already owned by someone else.
        """
        ...

    def add_bucket_tags(
        self,
        name: str,
        tags: Mapping[str, str],
        overwrite: bool = False,
    ) -> None:
        """Merge ``tags`` into the tag set of bucket ``name``.

        Args:
            name: Bucket name.
            tags: Tags to add.
            overwrite: When True, values in ``tags`` replace existing values
                for the same key; otherwise existing values are kept.
        """
        ...

    def block_bucket_public_access(self, name: str) -> None:
        """Block every form of public access to bucket ``name``."""
        ...

    def bucket_server_side_encryption(self, name: str) -> None:
        """Enable default KMS server-side encryption on bucket ``name``."""
        ...
