"""Tests for relphase.artifacts.location module."""

from __future__ import annotations

from pathlib import Path

from relphase.artifacts.location import (
    FilesystemLocation,
    ObjectStoreLocation,
    archive_name,
    parse_location,
    parse_s3_host,
    release_id_from_name,
)
from relphase.core.result import Err, Ok


class TestArchiveName:
    def test_name(self) -> None:
        assert archive_name("rel-42") == "release-rel-42.tgz"

    def test_inverse(self) -> None:
        assert release_id_from_name("release-rel-42.tgz") == "rel-42"
        assert release_id_from_name("release-.tgz") is None
        assert release_id_from_name("other.tgz") is None
        assert release_id_from_name("release-1.tar") is None


class TestParseS3Host:
    def test_virtual_hosted(self) -> None:
        assert parse_s3_host("assets.s3.eu-west-1.amazonaws.com") == ("assets", "eu-west-1")

    def test_plain_bucket(self) -> None:
        assert parse_s3_host("assets") == ("assets", None)

    def test_dotted_bucket(self) -> None:
        assert parse_s3_host("my.assets.s3.eu-west-1.amazonaws.com") == ("my.assets", "eu-west-1")


class TestParseLocation:
    def test_file_url(self) -> None:
        assert parse_location("file:///var/artifacts") == Ok(
            FilesystemLocation(root=Path("/var/artifacts"))
        )

    def test_file_localhost(self) -> None:
        result = parse_location("file://localhost/var/artifacts")
        assert result == Ok(FilesystemLocation(root=Path("/var/artifacts")))

    def test_relative_file_url(self) -> None:
        result = parse_location("file://relative/dir")
        assert isinstance(result, Err)
        assert "absolute" in result.error.message

    def test_s3_bucket_and_prefix(self) -> None:
        result = parse_location("s3://assets/app/static", region="us-west-2")
        assert isinstance(result, Ok)
        location = result.value
        assert isinstance(location, ObjectStoreLocation)
        assert location.bucket == "assets"
        assert location.prefix == "app/static"
        assert location.region == "us-west-2"
        assert location.object_key("v1") == "app/static/release-v1.tgz"

    def test_s3_without_prefix(self) -> None:
        result = parse_location("s3://assets")
        assert isinstance(result, Ok)
        assert isinstance(result.value, ObjectStoreLocation)
        assert result.value.prefix is None
        assert result.value.region == "us-east-1"
        assert result.value.object_key("v1") == "release-v1.tgz"

    def test_region_in_host_overrides_setting(self) -> None:
        result = parse_location("s3://assets.s3.eu-west-1.amazonaws.com/p", region="us-east-1")
        assert isinstance(result, Ok)
        location = result.value
        assert isinstance(location, ObjectStoreLocation)
        assert location.bucket == "assets"
        assert location.region == "eu-west-1"

    def test_dotted_bucket_region_in_host(self) -> None:
        result = parse_location("s3://my.assets.s3.eu-west-1.amazonaws.com/p", region="us-east-1")
        assert isinstance(result, Ok)
        assert result.value == ObjectStoreLocation(
            bucket="my.assets", prefix="p", region="eu-west-1", endpoint_style="virtual-hosted"
        )

    def test_unsupported_scheme(self) -> None:
        result = parse_location("ftp://example.com/x")
        assert isinstance(result, Err)

    def test_describe(self) -> None:
        assert FilesystemLocation(Path("/a")).describe() == "file:///a"
        assert ObjectStoreLocation("b", "p", "us-east-1").describe() == "s3://b/p/"
