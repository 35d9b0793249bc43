from __future__ import annotations

import os
from dataclasses import dataclass, field, replace
from datetime import timedelta
from enum import Enum

from s3config.errors import MissingCredentials, MissingLocation, MissingRegion, UnknownAuthMode

MIN_REFRESH_INTERVAL = timedelta(seconds=30)


class AuthMode(str, Enum):
    ROLE = "role"
    ENV = "env"
    KEY = "key"

    @classmethod
    def parse(cls, value: AuthMode | str) -> AuthMode:
        if isinstance(value, cls):
            return value
        try:
            return cls(value.strip().lower()) if isinstance(value, str) else cls(value)
        except ValueError:
            raise UnknownAuthMode(value) from None


@dataclass(frozen=True)
class StaticCredentials:
    access_key: str
    secret_key: str = field(repr=False)

    @property
    def complete(self) -> bool:
        return bool(self.access_key and self.access_key.strip()) and bool(self.secret_key and self.secret_key.strip())


def object_key(folder: str | None, object_name: str) -> str:
    if folder:
        return f"{folder}/{object_name}"
    return object_name


@dataclass(frozen=True)
class SyncConfig:
    """Where the config document lives and how to reach it.

    Construction does not check anything; pass the result through
    ``validate`` (``bind`` does this for you).
    """

    auth_mode: AuthMode | str
    region: str | None
    bucket: str
    object_name: str
    folder: str = ""
    static_credentials: StaticCredentials | None = None
    refresh_interval: timedelta = MIN_REFRESH_INTERVAL
    endpoint: str | None = None

    @property
    def object_key(self) -> str:
        return object_key(self.folder, self.object_name)


def _is_blank(value: str | None) -> bool:
    return not value or not value.strip()


def _normalize_interval(interval: timedelta | float | int) -> timedelta:
    if not isinstance(interval, timedelta):
        interval = timedelta(seconds=interval)
    floor = MIN_REFRESH_INTERVAL
    return interval if interval >= floor else floor


def validate(config: SyncConfig) -> SyncConfig:
    """Check ``config`` and return a normalized copy.

    Raises UnknownAuthMode, MissingLocation, MissingRegion or
    MissingCredentials. A refresh interval below MIN_REFRESH_INTERVAL is
    raised to it rather than rejected.
    """
    auth_mode = AuthMode.parse(config.auth_mode)

    if _is_blank(config.bucket) or _is_blank(config.object_name):
        raise MissingLocation(
            f"bucket and object name are required: bucket={config.bucket!r} object_name={config.object_name!r}"
        )
    if _is_blank(config.region):
        raise MissingRegion(f"region is required for auth mode {auth_mode.value!r}")
    if auth_mode is AuthMode.KEY and (config.static_credentials is None or not config.static_credentials.complete):
        raise MissingCredentials("auth mode 'key' requires both access_key and secret_key")

    return replace(
        config,
        auth_mode=auth_mode,
        refresh_interval=_normalize_interval(config.refresh_interval),
    )


def require_env(var_name: str) -> str:
    value = os.getenv(var_name)
    if value is None or not value.strip():
        raise ValueError(f"Environment variable '{var_name}' is required but not set.")
    return value


def load_sync_config_from_env(prefix: str = "S3CONFIG_") -> SyncConfig:
    access_key = os.getenv(f"{prefix}ACCESS_KEY") or None
    secret_key = os.getenv(f"{prefix}SECRET_KEY") or None
    static_credentials = None
    if access_key or secret_key:
        static_credentials = StaticCredentials(access_key=access_key or "", secret_key=secret_key or "")

    raw_interval = os.getenv(f"{prefix}INTERVAL_SECONDS")
    try:
        interval = timedelta(seconds=float(raw_interval)) if raw_interval else MIN_REFRESH_INTERVAL
    except ValueError as exc:
        raise ValueError(f"{prefix}INTERVAL_SECONDS must be a number, got: {raw_interval!r}") from exc

    return SyncConfig(
        auth_mode=require_env(f"{prefix}AUTH_MODE"),
        region=os.getenv(f"{prefix}REGION") or os.getenv("AWS_REGION") or os.getenv("AWS_DEFAULT_REGION") or None,
        bucket=require_env(f"{prefix}BUCKET"),
        folder=os.getenv(f"{prefix}FOLDER", ""),
        object_name=require_env(f"{prefix}FILE"),
        static_credentials=static_credentials,
        refresh_interval=interval,
        endpoint=os.getenv(f"{prefix}ENDPOINT") or None,
    )
