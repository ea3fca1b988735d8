"""S3-compatible storage client implementation.

This module provides an S3 storage client that works with AWS S3, MinIO,
and other S3-compatible object storage services. Each operation forwards to
a single boto3 call (or a single boto3 paginator); SDK errors propagate
unchanged.

Dependencies:
    - boto3
    - botocore
"""

from __future__ import annotations

import functools
import logging
import time
from typing import TYPE_CHECKING, Any, BinaryIO, Callable, Mapping, TypeVar

import boto3
from botocore.config import Config
from botocore.exceptions import ClientError

from gmu.infra.observability.metrics import record_operation
from gmu.infra.storage.client import DeleteFailure, StorageError
from gmu.infra.storage.path import SEPARATOR, S3Path

if TYPE_CHECKING:
    from gmu.common.config import Settings

logger = logging.getLogger("storage")

NO_SUCH_TAG_SET = "NoSuchTagSet"
SSE_KMS = "aws:kms"

F = TypeVar("F", bound=Callable[..., Any])


def _observed(operation: str) -> Callable[[F], F]:
    """Time a client method, log it at DEBUG and record it in the metrics."""

    def decorator(func: F) -> F:
        @functools.wraps(func)
        def wrapper(self: "S3StorageClient", *args: Any, **kwargs: Any) -> Any:
            start = time.perf_counter()
            status = "error"
            try:
                result = func(self, *args, **kwargs)
                status = "ok"
                return result
            finally:
                elapsed = time.perf_counter() - start
                logger.debug(
                    "storage_call operation=%s status=%s duration_ms=%.3f",
                    operation,
                    status,
                    elapsed * 1000,
                    extra={
                        "extra": {
                            "operation": operation,
                            "status": status,
                            "duration_ms": round(elapsed * 1000, 3),
                        }
                    },
                )
                if self._settings.ENABLE_METRICS:
                    record_operation(operation, status, elapsed)

        return wrapper  # type: ignore[return-value]

    return decorator


def _directory_prefix(key: str) -> str:
    return key.rstrip(SEPARATOR) + SEPARATOR


class S3StorageClient:
    """S3-compatible object storage client.

    Supports AWS S3, MinIO, and other S3-compatible services.
    Uses boto3 for all storage operations.
    """

    def __init__(self, *, settings: "Settings") -> None:
        """Initialize the S3 client with configuration from settings.

        Args:
            settings: Settings containing S3 configuration.
        """
        self._settings = settings
        self._client = self._build_client(settings)

    @staticmethod
    def _build_client(settings: "Settings") -> Any:
        """Create a boto3 S3 client from settings."""
        config = Config(s3={"addressing_style": settings.s3_addressing_style})

        return boto3.client(
            "s3",
            endpoint_url=settings.S3_ENDPOINT_URL,
            region_name=settings.S3_REGION,
            aws_access_key_id=settings.S3_ACCESS_KEY_ID,
            aws_secret_access_key=settings.S3_SECRET_ACCESS_KEY,
            aws_session_token=settings.S3_SESSION_TOKEN,
            use_ssl=bool(settings.S3_USE_SSL),
            config=config,
        )

    def _list_base(self, path: S3Path) -> dict[str, Any]:
        prefix = _directory_prefix(path.key) if path.key.strip(SEPARATOR) else ""
        return self._client.list_objects_v2(
            Bucket=path.bucket,
            Prefix=prefix,
            Delimiter=SEPARATOR,
        )

    @_observed("list_directories")
    def list_directories(self, path: S3Path) -> list[S3Path]:
        """List the common prefixes directly under ``path``."""
        response = self._list_base(path)
        return [
            S3Path(bucket=path.bucket, key=prefix["Prefix"])
            for prefix in response.get("CommonPrefixes", [])
        ]

    @_observed("list")
    def list(self, path: S3Path) -> list[S3Path]:
        """List the objects directly under ``path``."""
        response = self._list_base(path)
        return [
            S3Path(bucket=path.bucket, key=content["Key"])
            for content in response.get("Contents", [])
        ]

    @_observed("download")
    def download(self, path: S3Path) -> bytes:
        """Read the whole object at ``path`` into memory."""
        response = self._client.get_object(Bucket=path.bucket, Key=path.key)
        body = response["Body"]
        try:
            return body.read()
        finally:
            body.close()

    @_observed("download_to_file")
    def download_to_file(self, path: S3Path, fileobj: BinaryIO) -> int:
        """Stream the object at ``path`` into ``fileobj`` using a managed transfer."""
        written = 0

        def _progress(amount: int) -> None:
            nonlocal written
            written += amount

        self._client.download_fileobj(
            Bucket=path.bucket,
            Key=path.key,
            Fileobj=fileobj,
            Callback=_progress,
        )
        return written

    @_observed("copy")
    def copy(self, source: S3Path, target: S3Path) -> None:
        """Server-side copy of ``source`` to ``target``."""
        self._client.copy_object(
            Bucket=target.bucket,
            Key=target.key,
            CopySource=source.join(),
        )

    @_observed("upload")
    def upload(self, data: bytes, path: S3Path) -> None:
        """Write ``data`` to the object at ``path``."""
        self._client.put_object(Bucket=path.bucket, Key=path.key, Body=data)

    def _delete_listed(self, bucket: str, prefix: str | None = None) -> None:
        """Delete every object listed under ``prefix``, one request per page.

        Every page is attempted; keys S3 reports as not deleted are logged and
        raised together afterwards.

        Raises:
            StorageError: If any key could not be deleted.
        """
        failures: list[DeleteFailure] = []
        params: dict[str, Any] = {"Bucket": bucket}
        if prefix is not None:
            params["Prefix"] = prefix

        paginator = self._client.get_paginator("list_objects_v2")
        for page in paginator.paginate(**params):
            objects = [{"Key": item["Key"]} for item in page.get("Contents", [])]
            if not objects:
                continue
            response = self._client.delete_objects(
                Bucket=bucket,
                Delete={"Objects": objects, "Quiet": True},
            )
            for error in response.get("Errors", []):
                failures.append(
                    DeleteFailure(
                        key=error.get("Key"),
                        code=error.get("Code"),
                        message=error.get("Message"),
                    )
                )
                logger.error(
                    "delete_object_failed bucket=%s key=%s code=%s",
                    bucket,
                    error.get("Key"),
                    error.get("Code"),
                    extra={
                        "extra": {
                            "bucket": bucket,
                            "key": error.get("Key"),
                            "code": error.get("Code"),
                            "error_message": error.get("Message"),
                        }
                    },
                )

        if failures:
            raise StorageError(bucket, failures)

    @_observed("delete_recursive")
    def delete_recursive(self, path: S3Path) -> None:
        """Delete every object whose key starts with ``path.key + "/"``."""
        self._delete_listed(path.bucket, prefix=_directory_prefix(path.key))

    @_observed("delete_bucket")
    def delete_bucket(self, name: str) -> None:
        """Delete every object in bucket ``name``, then the bucket itself."""
        try:
            self._delete_listed(name)
        except Exception:
            logger.exception(
                "unable to remove objects from bucket for deletion bucket=%s",
                name,
                extra={"extra": {"bucket": name}},
            )
            raise

        logger.info(
            "removed all object(s) from bucket for deletion bucket=%s",
            name,
            extra={"extra": {"bucket": name}},
        )
        self._client.delete_bucket(Bucket=name)

    @_observed("delete_object")
    def delete_object(self, path: S3Path) -> None:
        """Delete the single object at ``path``."""
        self._client.delete_object(Bucket=path.bucket, Key=path.key)

    @_observed("exists")
    def exists(self, path: S3Path) -> bool:
        """Return True if object metadata can be read at ``path``."""
        try:
            self._client.head_object(Bucket=path.bucket, Key=path.key)
        except ClientError:
            return False
        return True

    @_observed("create_bucket")
    def create_bucket(self, name: str) -> None:
        """Create bucket ``name``."""
        self._client.create_bucket(Bucket=name)

    @_observed("add_bucket_tags")
    def add_bucket_tags(
        self,
        name: str,
        tags: Mapping[str, str],
        overwrite: bool = False,
    ) -> None:
        """Merge ``tags`` into the tag set of bucket ``name``.

        A bucket without tags reports ``NoSuchTagSet``; that is read as an
        empty tag set. With ``overwrite`` the new values win on conflict,
        otherwise the existing ones do.
        """
        merged = dict(tags)
        try:
            response = self._client.get_bucket_tagging(Bucket=name)
        except ClientError as exc:
            if exc.response.get("Error", {}).get("Code") != NO_SUCH_TAG_SET:
                raise
            existing = []
        else:
            existing = response.get("TagSet", [])

        for tag in existing:
            key, value = tag.get("Key"), tag.get("Value")
            if key is None or value is None:
                continue
            if overwrite and key in merged:
                continue
            merged[key] = value

        self._client.put_bucket_tagging(
            Bucket=name,
            Tagging={
                "TagSet": [
                    {"Key": key, "Value": value} for key, value in merged.items()
                ]
            },
        )

    @_observed("block_bucket_public_access")
    def block_bucket_public_access(self, name: str) -> None:
        """Block every form of public access to bucket ``name``."""
        self._client.put_public_access_block(
            Bucket=name,
            PublicAccessBlockConfiguration={
                "BlockPublicAcls": True,
                "BlockPublicPolicy": True,
                "IgnorePublicAcls": True,
                "RestrictPublicBuckets": True,
            },
        )

    @_observed("bucket_server_side_encryption")
    def bucket_server_side_encryption(self, name: str) -> None:
        """Enable default server-side encryption with the AWS managed KMS key."""
        self._client.put_bucket_encryption(
            Bucket=name,
            ServerSideEncryptionConfiguration={
                "Rules": [
                    {
                        "ApplyServerSideEncryptionByDefault": {
                            "SSEAlgorithm": SSE_KMS
                        },
                        "BucketKeyEnabled": True,
                    }
                ]
            },
        )
