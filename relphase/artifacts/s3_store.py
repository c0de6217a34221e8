"""S3 artifact store (``s3://`` URLs).

Uses a boto3 ``s3`` client built from the configured credentials and the
resolved bucket region. Uploads and downloads go through boto3's transfer
manager (``upload_file`` / ``download_file``), which switches to parallel
multipart transfers for large archives.

Tests inject a fake client with the same four methods.
"""

from __future__ import annotations

import tempfile
from datetime import UTC, datetime
from pathlib import Path
from typing import Any, Protocol

import boto3
from boto3.exceptions import S3UploadFailedError
from botocore.config import Config as BotoConfig
from botocore.exceptions import BotoCoreError, ClientError

from relphase.artifacts.archive import pack_directory, unpack_archive
from relphase.artifacts.errors import StoreError
from relphase.artifacts.location import ObjectStoreLocation, archive_name, release_id_from_name
from relphase.artifacts.store import (
    DEFAULT_GC_KEEP,
    ArtifactInfo,
    StoredArtifact,
    checked_release_id,
    select_stale,
)
from relphase.core.result import Err, Ok, Result
from relphase.core.settings import Credentials

__all__ = ["S3Client", "S3Store", "make_s3_client"]

_NOT_FOUND_CODES = {"404", "NoSuchKey", "NotFound", "NoSuchBucket"}
_DENIED_CODES = {"403", "AccessDenied", "InvalidAccessKeyId", "SignatureDoesNotMatch"}


class S3Client(Protocol):
    """The subset of the boto3 S3 client this store uses."""

    def upload_file(self, Filename: str, Bucket: str, Key: str) -> None: ...

    def download_file(self, Bucket: str, Key: str, Filename: str) -> None: ...

    def get_paginator(self, operation_name: str) -> Any: ...

    def delete_object(self, *, Bucket: str, Key: str) -> Any: ...


def make_s3_client(location: ObjectStoreLocation, credentials: Credentials) -> S3Client:
    """Create a boto3 client for the location's region with explicit credentials."""
    return boto3.client(
        "s3",
        region_name=location.region,
        aws_access_key_id=credentials.access_key_id,
        aws_secret_access_key=credentials.secret_access_key,
        config=BotoConfig(
            signature_version="s3v4",
            s3={"addressing_style": "virtual" if location.endpoint_style == "virtual-hosted" else "auto"},
        ),
    )


def _storage_error(operation: str, key: str | None, error: Exception) -> StoreError:
    cause: BaseException = error
    if isinstance(error, S3UploadFailedError) and isinstance(error.__cause__, ClientError):
        cause = error.__cause__

    if isinstance(cause, ClientError):
        details = cause.response.get("Error", {})
        code = str(details.get("Code", ""))
        message = str(details.get("Message") or cause)
        if code in _NOT_FOUND_CODES:
            return StoreError(kind="not_found", operation=operation, message=f"{code}: {message}", location=key)
        if code in _DENIED_CODES:
            return StoreError(kind="permission", operation=operation, message=f"{code}: {message}", location=key)
        return StoreError(kind="network", operation=operation, message=f"{code}: {message}", location=key)

    return StoreError(kind="network", operation=operation, message=str(error), location=key)


class S3Store:
    """Archives stored flat under a bucket prefix."""

    def __init__(
        self,
        location: ObjectStoreLocation,
        credentials: Credentials,
        *,
        client: S3Client | None = None,
    ) -> None:
        self._location = location
        self._client = client if client is not None else make_s3_client(location, credentials)

    @property
    def location(self) -> ObjectStoreLocation:
        return self._location

    def put(self, source_dir: Path, release_id: str) -> Result[StoredArtifact, StoreError]:
        checked = checked_release_id("put", release_id)
        if isinstance(checked, Err):
            return checked
        key = self._location.object_key(checked.value)

        with tempfile.TemporaryDirectory(prefix="relphase-") as tmp:
            archive = Path(tmp) / archive_name(checked.value)
            packed = pack_directory(source_dir, archive)
            if isinstance(packed, Err):
                return Err(StoreError.from_archive("put", packed.error))

            try:
                self._client.upload_file(str(archive), self._location.bucket, key)
            except (ClientError, BotoCoreError, S3UploadFailedError) as e:
                return Err(_storage_error("put", key, e))

        return Ok(
            StoredArtifact(
                release_id=checked.value,
                key=key,
                location=self._location,
                files_count=packed.value.files_count,
                size=packed.value.size,
            )
        )

    def get(self, release_id: str, dest_dir: Path) -> Result[StoredArtifact, StoreError]:
        checked = checked_release_id("get", release_id)
        if isinstance(checked, Err):
            return checked
        key = self._location.object_key(checked.value)

        with tempfile.TemporaryDirectory(prefix="relphase-") as tmp:
            archive = Path(tmp) / archive_name(checked.value)
            try:
                self._client.download_file(self._location.bucket, key, str(archive))
            except (ClientError, BotoCoreError) as e:
                return Err(_storage_error("get", key, e))
            except OSError as e:
                return Err(StoreError(kind="io", operation="get", message=str(e), location=key))

            unpacked = unpack_archive(archive, dest_dir)
            if isinstance(unpacked, Err):
                return Err(StoreError.from_archive("get", unpacked.error))
            size = archive.stat().st_size

        return Ok(
            StoredArtifact(
                release_id=checked.value,
                key=key,
                location=self._location,
                files_count=unpacked.value.files_count,
                size=size,
            )
        )

    def list(self) -> Result[list[ArtifactInfo], StoreError]:
        prefix = self._location.key_prefix
        infos: list[ArtifactInfo] = []
        try:
            paginator = self._client.get_paginator("list_objects_v2")
            for page in paginator.paginate(Bucket=self._location.bucket, Prefix=prefix):
                for obj in page.get("Contents", []):
                    key = str(obj["Key"])
                    release_id = release_id_from_name(key[len(prefix) :])
                    if release_id is None:
                        continue
                    modified = obj.get("LastModified")
                    if not isinstance(modified, datetime):
                        modified = datetime.fromtimestamp(0, tz=UTC)
                    infos.append(
                        ArtifactInfo(
                            key=key,
                            release_id=release_id,
                            size=int(obj.get("Size", 0)),
                            modified=modified,
                        )
                    )
        except (ClientError, BotoCoreError) as e:
            return Err(_storage_error("list", self._location.describe(), e))

        infos.sort(key=lambda i: i.modified, reverse=True)
        return Ok(infos)

    def gc(self, keep: int = DEFAULT_GC_KEEP) -> Result[list[ArtifactInfo], StoreError]:
        listed = self.list()
        if isinstance(listed, Err):
            return Err(StoreError(kind=listed.error.kind, operation="gc", message=listed.error.message))

        deleted: list[ArtifactInfo] = []
        for info in select_stale(listed.value, keep):
            try:
                self._client.delete_object(Bucket=self._location.bucket, Key=info.key)
            except (ClientError, BotoCoreError) as e:
                return Err(_storage_error("gc", info.key, e))
            deleted.append(info)
        return Ok(deleted)
