from __future__ import annotations

from relphase.artifacts.fs_store import FilesystemStore
from relphase.artifacts.location import FilesystemLocation, ObjectStoreLocation, parse_location
from relphase.artifacts.s3_store import S3Client, S3Store
from relphase.artifacts.store import ArtifactStore
from relphase.core.result import Err, Ok, Result
from relphase.core.settings import ENV_ACCESS_KEY_ID, ENV_SECRET_ACCESS_KEY, ConfigError, Settings

__all__ = ["open_store"]


def open_store(
    settings: Settings,
    *,
    s3_client: S3Client | None = None,
) -> Result[ArtifactStore, ConfigError]:
    """Select the store backend for the configured URL.

    Every configuration problem (no URL, bad URL, missing S3 credentials) is
    reported here, before any file or network access.
    """
    url = settings.require_url()
    if isinstance(url, Err):
        return url

    parsed = parse_location(url.value, region=settings.region)
    if isinstance(parsed, Err):
        return parsed

    match parsed.value:
        case FilesystemLocation() as location:
            return Ok(FilesystemStore(location))
        case ObjectStoreLocation() as location:
            if settings.credentials is None:
                return Err(
                    ConfigError(
                        f"{ENV_ACCESS_KEY_ID} and {ENV_SECRET_ACCESS_KEY} are required for s3:// storage"
                    )
                )
            return Ok(S3Store(location, settings.credentials, client=s3_client))
