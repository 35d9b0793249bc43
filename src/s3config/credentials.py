"""Credential sources, one per AuthMode.

Each source only knows how to build a boto3 session. Nothing here talks to
the network or checks that credentials exist; a bad credential shows up as
an ObjectNotFound from the first fetch.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field

import boto3
import botocore.session
from botocore.credentials import CredentialResolver as BotocoreCredentialResolver
from botocore.credentials import EnvProvider, InstanceMetadataProvider
from botocore.utils import InstanceMetadataFetcher

from s3config.config.sync_config import AuthMode, StaticCredentials
from s3config.errors import MissingCredentials
from s3config.logging_config import get_logger

METADATA_TIMEOUT_SECONDS = 30.0

logger = get_logger(__name__)


class CredentialSource(ABC):
    mode: AuthMode

    @abstractmethod
    def session(self, region: str) -> boto3.Session: ...


def _session_with_providers(region: str, *providers) -> boto3.Session:
    # replaces botocore's default chain so only the chosen providers are consulted
    core_session = botocore.session.Session()
    core_session.register_component("credential_provider", BotocoreCredentialResolver(providers=list(providers)))
    return boto3.Session(botocore_session=core_session, region_name=region)


@dataclass(frozen=True)
class RoleCredentialSource(CredentialSource):
    timeout: float = METADATA_TIMEOUT_SECONDS
    num_attempts: int = 1
    mode: AuthMode = field(default=AuthMode.ROLE, init=False)

    def session(self, region: str) -> boto3.Session:
        fetcher = InstanceMetadataFetcher(timeout=self.timeout, num_attempts=self.num_attempts)
        return _session_with_providers(region, InstanceMetadataProvider(iam_role_fetcher=fetcher))


@dataclass(frozen=True)
class EnvironmentCredentialSource(CredentialSource):
    mode: AuthMode = field(default=AuthMode.ENV, init=False)

    def session(self, region: str) -> boto3.Session:
        return _session_with_providers(region, EnvProvider())


@dataclass(frozen=True)
class StaticKeyCredentialSource(CredentialSource):
    access_key: str
    secret_key: str = field(repr=False)
    mode: AuthMode = field(default=AuthMode.KEY, init=False)

    def __post_init__(self) -> None:
        if not StaticCredentials(self.access_key, self.secret_key).complete:
            raise MissingCredentials("static key credentials require both access_key and secret_key")

    def session(self, region: str) -> boto3.Session:
        return boto3.Session(
            aws_access_key_id=self.access_key,
            aws_secret_access_key=self.secret_key,
            region_name=region,
        )


def resolve_credentials(
    auth_mode: AuthMode | str,
    static_credentials: StaticCredentials | None = None,
) -> CredentialSource:
    mode = AuthMode.parse(auth_mode)
    if mode is AuthMode.ROLE:
        source: CredentialSource = RoleCredentialSource()
    elif mode is AuthMode.ENV:
        source = EnvironmentCredentialSource()
    else:
        if static_credentials is None:
            raise MissingCredentials("auth mode 'key' requires static credentials")
        source = StaticKeyCredentialSource(static_credentials.access_key, static_credentials.secret_key)
    logger.debug("Resolved credential source: mode=%s", mode.value)
    return source
