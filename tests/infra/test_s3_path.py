"""Tests for S3Path joining and URI parsing."""

from __future__ import annotations

import pytest

from gmu.infra.storage.path import ParseError, S3Path


@pytest.mark.parametrize(
    ("path", "expected"),
    [
        pytest.param(S3Path("test_bucket", "test_key"), "test_bucket/test_key", id="simple"),
        pytest.param(
            S3Path("test_bucket", "test_key/dir1/dir2"),
            "test_bucket/test_key/dir1/dir2",
            id="long key",
        ),
        pytest.param(S3Path("/test_bucket", "/test_key"), "test_bucket/test_key", id="leading slashes"),
        pytest.param(S3Path("test_bucket/", "test_key/"), "test_bucket/test_key", id="trailing slashes"),
        pytest.param(
            S3Path("/test_bucket/", "/test_key/"),
            "test_bucket/test_key",
            id="slashes everywhere",
        ),
        pytest.param(S3Path("//test_bucket//", "//test_key//"), "test_bucket/test_key", id="repeated slashes"),
        pytest.param(S3Path("test_bucket", "a//b"), "test_bucket/a/b", id="inner double slash"),
        pytest.param(S3Path("test_bucket", ""), "test_bucket", id="no key"),
    ],
)
def test_join(path: S3Path, expected: str) -> None:
    assert path.join() == expected


@pytest.mark.parametrize(
    ("path", "expected"),
    [
        pytest.param(S3Path("test_bucket", "test_key"), "s3://test_bucket/test_key", id="simple"),
        pytest.param(
            S3Path("test_bucket", "test_key/dir1/dir2"),
            "s3://test_bucket/test_key/dir1/dir2",
            id="long key",
        ),
        pytest.param(S3Path("/test_bucket", "/test_key"), "s3://test_bucket/test_key", id="leading slashes"),
        pytest.param(S3Path("test_bucket/", "test_key/"), "s3://test_bucket/test_key", id="trailing slashes"),
        pytest.param(
            S3Path("/test_bucket/", "/test_key/"),
            "s3://test_bucket/test_key",
            id="slashes everywhere",
        ),
        pytest.param(S3Path("test_bucket", ""), "s3://test_bucket", id="no key"),
    ],
)
def test_to_uri(path: S3Path, expected: str) -> None:
    assert path.to_uri() == expected


@pytest.mark.parametrize(
    ("uri", "expected"),
    [
        pytest.param("s3://test_bucket/test_key", S3Path("test_bucket", "test_key"), id="top level key"),
        pytest.param(
            "s3://test_bucket/test_dir/test_key",
            S3Path("test_bucket", "test_dir/test_key"),
            id="nested key",
        ),
        pytest.param("s3://test_bucket", S3Path("test_bucket", ""), id="missing key"),
        pytest.param("s3://test_bucket/", S3Path("test_bucket", ""), id="missing key with slash"),
    ],
)
def test_from_uri(uri: str, expected: S3Path) -> None:
    assert S3Path.from_uri(uri) == expected


@pytest.mark.parametrize(
    "uri",
    [
        pytest.param("test_bucket/test_key", id="missing scheme"),
        pytest.param("s3:/test_bucket/test_key", id="missing slash in scheme"),
        pytest.param("https://test_bucket/test_key", id="scheme other than s3"),
        pytest.param("s3:///test_key", id="empty bucket"),
        pytest.param("", id="empty string"),
    ],
)
def test_from_uri_rejects_invalid(uri: str) -> None:
    with pytest.raises(ParseError) as excinfo:
        S3Path.from_uri(uri)

    assert excinfo.value.uri == uri
    assert str(excinfo.value) == f"s3 uri must be of form 's3://<bucket>', got: {uri}"


def test_from_uri_unsplittable_raises_parse_error() -> None:
    uri = "s3://[test_bucket/test_key"

    with pytest.raises(ParseError) as excinfo:
        S3Path.from_uri(uri)

    assert excinfo.value.uri == uri
    assert isinstance(excinfo.value.__cause__, ValueError)


def test_parse_error_is_value_error() -> None:
    assert issubclass(ParseError, ValueError)


@pytest.mark.parametrize(
    "path",
    [
        S3Path("test_bucket", "test_key"),
        S3Path("test_bucket", "test_dir/test_key"),
        S3Path("test_bucket", ""),
        S3Path("test_bucket", "a?b"),
        S3Path("test_bucket", "a#b"),
        S3Path("test_bucket", "a b"),
        S3Path("test_bucket", "a%b"),
        S3Path("test_bucket", "a\tb"),
        S3Path("test_bucket", "dir/caf\u00e9.txt"),
    ],
)
def test_uri_round_trip(path: S3Path) -> None:
    assert S3Path.from_uri(path.to_uri()) == path


class TestAppend:
    """Test S3Path.append."""

    def test_appends_to_key(self) -> None:
        base = S3Path("test_bucket", "test_dir")
        assert base.append("test_key") == S3Path("test_bucket", "test_dir/test_key")

    def test_appends_to_empty_key(self) -> None:
        base = S3Path("test_bucket", "")
        assert base.append("test_key") == S3Path("test_bucket", "test_key")

    def test_collapses_separators(self) -> None:
        base = S3Path("test_bucket", "test_dir/")
        assert base.append("/test_key") == S3Path("test_bucket", "test_dir/test_key")

    def test_keeps_original_untouched(self) -> None:
        base = S3Path("test_bucket", "test_dir")
        base.append("test_key")
        assert base == S3Path("test_bucket", "test_dir")

    def test_path_is_immutable(self) -> None:
        base = S3Path("test_bucket", "test_dir")
        with pytest.raises(AttributeError):
            base.key = "other"  # type: ignore[misc]


def test_to_uri_escapes_key():
    assert S3Path("test_bucket", "dir/a b?c#d%e").to_uri() == (
        "s3://test_bucket/dir/a%20b%3Fc%23d%25e"
    )


def test_from_uri_unescapes_key():
    assert S3Path.from_uri("s3://test_bucket/dir/a%20b%3Fc") == S3Path(
        "test_bucket", "dir/a b?c"
    )


@pytest.mark.parametrize(
    "uri",
    [
        pytest.param("s3://test_bucket/a\tb", id="tab"),
        pytest.param("s3://test_bucket/a\nb", id="newline"),
        pytest.param("s3://test_bucket/a\rb", id="carriage return"),
        pytest.param("s3://test_bucket/a\x7fb", id="delete"),
    ],
)
def test_from_uri_rejects_control_characters(uri: str) -> None:
    with pytest.raises(ParseError) as excinfo:
        S3Path.from_uri(uri)

    assert excinfo.value.uri == uri


def test_from_uri_drops_userinfo():
    assert S3Path.from_uri("s3://user:secret@test_bucket/test_key") == S3Path(
        "test_bucket", "test_key"
    )


def test_from_uri_keeps_port():
    assert S3Path.from_uri("s3://test_bucket:9000/test_key") == S3Path(
        "test_bucket:9000", "test_key"
    )


def test_from_uri_rejects_userinfo_without_host():
    with pytest.raises(ParseError):
        S3Path.from_uri("s3://user@/test_key")
