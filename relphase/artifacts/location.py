"""Artifact locations and naming.

``STATIC_ARTIFACTS_URL`` is parsed once into an ``ArtifactLocation``:

- ``file:///abs/dir`` -> ``FilesystemLocation(root=/abs/dir)``
- ``s3://bucket/prefix`` -> ``ObjectStoreLocation(bucket, prefix, region)``
- ``s3://bucket.s3.eu-west-1.amazonaws.com/prefix`` -> same, with the
  region taken from the hostname (it overrides the configured region)

Archives are always named ``release-<id>.tgz`` and placed directly under
the root or prefix.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Literal
from urllib.parse import unquote, urlsplit

from relphase.core.result import Err, Ok, Result
from relphase.core.settings import DEFAULT_REGION, ENV_URL, ConfigError

__all__ = [
    "ArtifactLocation",
    "EndpointStyle",
    "FilesystemLocation",
    "ObjectStoreLocation",
    "archive_name",
    "parse_location",
    "parse_s3_host",
    "release_id_from_name",
]

ARCHIVE_PREFIX = "release-"
ARCHIVE_SUFFIX = ".tgz"

_AWS_VIRTUAL_HOST_RE = re.compile(r"^(.+)\.s3\.([^.]+)\.amazonaws\.com$")

type EndpointStyle = Literal["virtual-hosted", "bucket"]


def archive_name(release_id: str) -> str:
    return f"{ARCHIVE_PREFIX}{release_id}{ARCHIVE_SUFFIX}"


def release_id_from_name(name: str) -> str | None:
    """Inverse of ``archive_name``; None for names that are not archives."""
    if not (name.startswith(ARCHIVE_PREFIX) and name.endswith(ARCHIVE_SUFFIX)):
        return None
    release_id = name[len(ARCHIVE_PREFIX) : -len(ARCHIVE_SUFFIX)]
    if not release_id or "/" in release_id:
        return None
    return release_id


@dataclass(frozen=True, slots=True)
class FilesystemLocation:
    root: Path

    def archive_path(self, release_id: str) -> Path:
        return self.root / archive_name(release_id)

    def describe(self) -> str:
        return f"file://{self.root}"


@dataclass(frozen=True, slots=True)
class ObjectStoreLocation:
    """An S3 bucket (and optional key prefix) in a resolved region."""

    bucket: str
    prefix: str | None
    region: str
    endpoint_style: EndpointStyle = "bucket"

    @property
    def key_prefix(self) -> str:
        return f"{self.prefix}/" if self.prefix else ""

    def object_key(self, release_id: str) -> str:
        return self.key_prefix + archive_name(release_id)

    def describe(self) -> str:
        return f"s3://{self.bucket}/{self.key_prefix}"


ArtifactLocation = FilesystemLocation | ObjectStoreLocation


def parse_s3_host(host: str) -> tuple[str, str | None]:
    """Split an S3 host into (bucket, region embedded in the host or None)."""
    match = _AWS_VIRTUAL_HOST_RE.match(host)
    if match:
        return match.group(1), match.group(2)
    return host, None


def parse_location(url: str, *, region: str = DEFAULT_REGION) -> Result[ArtifactLocation, ConfigError]:
    """Parse a storage URL.

    Args:
        url: Value of STATIC_ARTIFACTS_URL
        region: Configured region, used unless the host names one

    Returns:
        Ok(ArtifactLocation), or Err(ConfigError) for unsupported schemes,
        relative file paths, or S3 URLs without a bucket.
    """
    try:
        parts = urlsplit(url.strip())
    except ValueError as e:
        return Err(ConfigError(f"invalid {ENV_URL}: {e}"))

    scheme = parts.scheme.lower()
    if scheme == "file":
        if parts.netloc not in ("", "localhost"):
            return Err(
                ConfigError(
                    f"{ENV_URL} file path must be absolute: {url}",
                    hint="use three slashes, e.g. file:///var/artifacts",
                )
            )
        path = Path(unquote(parts.path))
        if not parts.path or not path.is_absolute():
            return Err(ConfigError(f"{ENV_URL} file path must be absolute: {url}"))
        return Ok(FilesystemLocation(root=path))

    if scheme == "s3":
        host = parts.hostname
        if not host:
            return Err(ConfigError(f"{ENV_URL} is missing the bucket host: {url}"))
        bucket, host_region = parse_s3_host(host)
        prefix = unquote(parts.path).strip("/") or None
        return Ok(
            ObjectStoreLocation(
                bucket=bucket,
                prefix=prefix,
                region=host_region or region or DEFAULT_REGION,
                endpoint_style="virtual-hosted" if host_region else "bucket",
            )
        )

    if not scheme:
        return Err(ConfigError(f"invalid {ENV_URL}: {url!r} has no scheme"))
    return Err(
        ConfigError(f"unsupported {ENV_URL} scheme: {scheme}", hint="supported: file://, s3://")
    )
