"""S3 location value type.

``S3Path`` pairs a bucket with a key and converts between that pair and
``s3://<bucket>/<key>`` URIs.
"""

from __future__ import annotations

import posixpath
from dataclasses import dataclass
from urllib.parse import quote, unquote, urlsplit

SCHEME = "s3"
SEPARATOR = "/"


def _has_control_characters(value: str) -> bool:
    return any(ord(char) < 0x20 or ord(char) == 0x7F for char in value)


class ParseError(ValueError):
    """Raised when a string is not a usable ``s3://`` URI."""

    def __init__(self, uri: str) -> None:
        self.uri = uri
        super().__init__(f"s3 uri must be of form 's3://<bucket>', got: {uri}")


def _join(*parts: str) -> str:
    """Join path elements and clean the result.

    Empty elements are dropped, repeated separators collapse and ``.``/``..``
    elements are resolved. Joining only empty elements yields ``""``.
    """
    joined = SEPARATOR.join(part for part in parts if part)
    if not joined:
        return ""
    cleaned = posixpath.normpath(joined)
    # normpath keeps exactly two leading separators
    if cleaned.startswith("//"):
        cleaned = cleaned[1:]
    return cleaned


@dataclass(frozen=True, slots=True)
class S3Path:
    """A bucket and key identifying a location in S3."""

    bucket: str
    key: str = ""

    def join(self) -> str:
        """Return ``bucket/key`` with surrounding separators removed from both."""
        return _join(self.bucket.strip(SEPARATOR), self.key.strip(SEPARATOR))

    def to_uri(self) -> str:
        """Return the ``s3://`` URI for this location, percent-escaping the path."""
        return f"{SCHEME}://{quote(self.join(), safe=SEPARATOR)}"

    def append(self, suffix: str) -> "S3Path":
        """Return a new path in the same bucket with ``suffix`` joined onto the key."""
        return S3Path(bucket=self.bucket, key=_join(self.key, suffix))

    @classmethod
    def from_uri(cls, uri: str) -> "S3Path":
        """Parse ``s3://<bucket>[/<key>]``.

        Raises:
            ParseError: If the scheme is not ``s3``, the bucket is missing or
                the URI contains control characters.
        """
        if _has_control_characters(uri):
            raise ParseError(uri)
        try:
            parts = urlsplit(uri)
        except ValueError as exc:
            raise ParseError(uri) from exc

        # host keeps its port but not the userinfo
        bucket = parts.netloc.rpartition("@")[2]
        if parts.scheme != SCHEME or not bucket:
            raise ParseError(uri)

        path = unquote(parts.path)
        key = path[1:] if len(path) > 1 else ""
        return cls(bucket=bucket, key=key)
