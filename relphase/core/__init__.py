"""Core types: results, error codes, settings."""

from .errors import ErrorCode
from .result import Err, Ok, Result
from .settings import (
    ConfigError,
    Credentials,
    Settings,
    capture_env,
    load_settings,
    validate_release_id,
)

__all__ = [
    # errors
    "ErrorCode",
    # result
    "Err",
    "Ok",
    "Result",
    # settings
    "ConfigError",
    "Credentials",
    "Settings",
    "capture_env",
    "load_settings",
    "validate_release_id",
]
