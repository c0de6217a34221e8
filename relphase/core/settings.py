"""Environment-derived settings.

The process environment (plus the release id file dropped by the platform)
is read exactly once, by ``capture_env``, and turned into a frozen
``Settings`` by ``load_settings``. Everything downstream receives the
``Settings`` value explicitly.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from .result import Err, Ok, Result

__all__ = [
    "ConfigError",
    "Credentials",
    "Settings",
    "capture_env",
    "load_settings",
    "validate_release_id",
    "DEFAULT_METADATA_DIR",
    "DEFAULT_REGION",
    "ENV_ACCESS_KEY_ID",
    "ENV_REGION",
    "ENV_RELEASE_ID",
    "ENV_SECRET_ACCESS_KEY",
    "ENV_URL",
]

ENV_RELEASE_ID = "RELEASE_ID"
ENV_URL = "STATIC_ARTIFACTS_URL"
ENV_REGION = "STATIC_ARTIFACTS_REGION"
ENV_ACCESS_KEY_ID = "STATIC_ARTIFACTS_ACCESS_KEY_ID"
ENV_SECRET_ACCESS_KEY = "STATIC_ARTIFACTS_SECRET_ACCESS_KEY"

ENV_PREFIX = "STATIC_ARTIFACTS_"

DEFAULT_REGION = "us-east-1"

# Directory where the platform writes per-dyno metadata such as release_id.
DEFAULT_METADATA_DIR = Path("/etc/heroku")

RELEASE_ID_FILE = "release_id"

_RELEASE_ID_RE = re.compile(r"^[A-Za-z0-9._-]{1,200}$")


@dataclass(frozen=True, slots=True)
class ConfigError:
    """Missing or invalid configuration, detected before any work starts."""

    message: str
    hint: str | None = None


@dataclass(frozen=True, slots=True)
class Credentials:
    """Object store credentials. Kept in memory only."""

    access_key_id: str
    secret_access_key: str = field(repr=False)


@dataclass(frozen=True, slots=True)
class Settings:
    """Artifact storage settings for one process.

    Attributes:
        release_id: Release identifier, already validated (None if unset)
        artifacts_url: Raw STATIC_ARTIFACTS_URL (None if unset)
        region: Configured region, before hostname inference
        credentials: Access key pair, only when both halves are set
    """

    release_id: str | None = None
    artifacts_url: str | None = None
    region: str = DEFAULT_REGION
    credentials: Credentials | None = None

    def require_release_id(self) -> Result[str, ConfigError]:
        if self.release_id is None:
            return Err(
                ConfigError(
                    f"{ENV_RELEASE_ID} is required",
                    hint=f"set {ENV_RELEASE_ID} or write {DEFAULT_METADATA_DIR / RELEASE_ID_FILE}",
                )
            )
        return Ok(self.release_id)

    def require_url(self) -> Result[str, ConfigError]:
        if self.artifacts_url is None:
            return Err(ConfigError(f"{ENV_URL} is required", hint="file:///abs/path or s3://bucket"))
        return Ok(self.artifacts_url)


def capture_env(
    environ: Mapping[str, str],
    metadata_dir: Path = DEFAULT_METADATA_DIR,
) -> dict[str, str]:
    """Collect the variables we care about from ``environ``.

    Only ``STATIC_ARTIFACTS_*`` and ``RELEASE_ID`` are kept. A non-empty
    ``<metadata_dir>/release_id`` file overrides ``RELEASE_ID``.
    """
    env = {k: v for k, v in environ.items() if k.startswith(ENV_PREFIX) or k == ENV_RELEASE_ID}

    try:
        from_file = (metadata_dir / RELEASE_ID_FILE).read_text(encoding="utf-8").strip()
    except (OSError, UnicodeDecodeError):
        from_file = ""
    if from_file:
        env[ENV_RELEASE_ID] = from_file

    return env


def validate_release_id(value: str) -> Result[str, ConfigError]:
    """Check that a release id is safe to embed in a key or file name.

    Allowed: 1-200 characters from ``A-Z a-z 0-9 . _ -``, excluding the
    path components ``.`` and ``..``.
    """
    if not value:
        return Err(ConfigError(f"{ENV_RELEASE_ID} must not be empty"))
    if value in (".", "..") or not _RELEASE_ID_RE.match(value):
        return Err(
            ConfigError(
                f"invalid {ENV_RELEASE_ID}: {value!r}",
                hint="allowed characters: letters, digits, '.', '_' and '-'",
            )
        )
    return Ok(value)


def _get(env: Mapping[str, str], key: str) -> str | None:
    value = env.get(key, "").strip()
    return value or None


def load_settings(env: Mapping[str, str]) -> Result[Settings, ConfigError]:
    """Build Settings from a captured environment.

    Args:
        env: Output of ``capture_env`` (or any mapping with the same keys)

    Returns:
        Ok(Settings), or Err(ConfigError) for an invalid release id or a
        half-configured credential pair.
    """
    release_id: str | None = None
    raw_id = _get(env, ENV_RELEASE_ID)
    if raw_id is not None:
        checked = validate_release_id(raw_id)
        if isinstance(checked, Err):
            return checked
        release_id = checked.value

    access_key = _get(env, ENV_ACCESS_KEY_ID)
    secret_key = _get(env, ENV_SECRET_ACCESS_KEY)
    credentials: Credentials | None = None
    if access_key and secret_key:
        credentials = Credentials(access_key_id=access_key, secret_access_key=secret_key)
    elif access_key or secret_key:
        missing = ENV_SECRET_ACCESS_KEY if access_key else ENV_ACCESS_KEY_ID
        return Err(ConfigError(f"{missing} is required when the other credential is set"))

    return Ok(
        Settings(
            release_id=release_id,
            artifacts_url=_get(env, ENV_URL),
            region=_get(env, ENV_REGION) or DEFAULT_REGION,
            credentials=credentials,
        )
    )
