"""
Shared pytest fixtures and configuration for all tests.
"""

from datetime import timedelta

import pytest

from s3config.config import sync_config
from s3config.config.sync_config import AuthMode, StaticCredentials, SyncConfig
from tests.utils.factories import CONFIG_YAML, FAST_INTERVAL
from tests.utils.mocks import FakeObjectStore


# ============= Config fixtures =============


@pytest.fixture
def env_config():
    """Environment-credential config pointing at bucket/folder/config.yml."""
    return SyncConfig(
        auth_mode=AuthMode.ENV,
        region="ap-northeast-1",
        bucket="bucket",
        folder="folder",
        object_name="config.yml",
        refresh_interval=timedelta(seconds=10),
    )


@pytest.fixture
def key_config():
    """Static-key config with the object at the bucket root."""
    return SyncConfig(
        auth_mode=AuthMode.KEY,
        region="ap-northeast-1",
        bucket="bucket",
        object_name="config.yml",
        static_credentials=StaticCredentials(access_key="access_key", secret_key="secret_key"),
    )


@pytest.fixture
def fast_refresh(monkeypatch):
    """Lower the interval floor so the refresh loop runs in milliseconds."""
    monkeypatch.setattr(sync_config, "MIN_REFRESH_INTERVAL", FAST_INTERVAL)
    return FAST_INTERVAL


# ============= Store fixtures =============


@pytest.fixture
def fake_store():
    """Object store holding CONFIG_YAML at bucket/folder/config.yml."""
    return FakeObjectStore({("bucket", "folder/config.yml"): CONFIG_YAML})


@pytest.fixture
def aws_env(monkeypatch):
    """Static AWS credentials in the process environment."""
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", "env-access")
    monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "env-secret")
    monkeypatch.delenv("AWS_SESSION_TOKEN", raising=False)
    monkeypatch.delenv("AWS_SECURITY_TOKEN", raising=False)
