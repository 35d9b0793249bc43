"""Bind a YAML document in S3 to a typed config value and keep it fresh.

``bind`` does one fetch+decode on the calling thread and raises on any
failure. Only after that succeeds does it start a daemon thread that repeats
the cycle every ``refresh_interval``. Errors in the background are logged and
kept on ``SyncSession.last_error``; the previous value stays published.

Readers never see a half-updated value: each cycle decodes into a new object
and swaps it in under a lock.
"""

from __future__ import annotations

import threading
from collections.abc import Callable
from datetime import datetime, timezone
from typing import Generic, TypeVar

import boto3

from s3config.config.sync_config import SyncConfig, validate
from s3config.credentials import resolve_credentials
from s3config.decoding import decode, target_adapter
from s3config.logging_config import get_logger, with_context
from s3config.storage.object_store import ObjectStore

T = TypeVar("T")

logger = get_logger(__name__)


class SyncSession(Generic[T]):
    def __init__(self, config: SyncConfig, target: type[T], store: ObjectStore, name: str | None = None) -> None:
        self.config = config
        self.target = target
        self.name = name or f"s3config:{config.bucket}/{config.object_key}"
        self.last_error: Exception | None = None
        self.last_refreshed_at: datetime | None = None
        self.refresh_count = 0

        self._store = store
        self._value: T | None = None
        self._payload: bytes | None = None
        self._value_lock = threading.Lock()
        self._cycle_lock = threading.Lock()
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None
        self._log = with_context(logger, session=self.name, bucket=config.bucket, key=config.object_key)

    @property
    def current(self) -> T:
        with self._value_lock:
            if self._value is None:
                raise RuntimeError(f"Session {self.name!r} has no value yet")
            return self._value

    def get(self) -> T:
        return self.current

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def _load(self) -> None:
        payload = self._store.fetch_object(self.config.bucket, self.config.object_key)
        if payload == self._payload:
            self._log.debug("Config unchanged: bytes=%s", len(payload))
        else:
            value = decode(payload, self.target)
            with self._value_lock:
                self._value = value
                self._payload = payload
            self._log.info("Config updated: bytes=%s", len(payload))
        self.last_refreshed_at = datetime.now(timezone.utc)
        self.last_error = None
        self.refresh_count += 1

    def refresh(self) -> bool:
        """Run one fetch+decode cycle now. Returns False if it failed.

        Failures are logged, never raised. Cycles never overlap, whether
        triggered here or by the background thread.
        """
        with self._cycle_lock:
            try:
                self._load()
                return True
            except Exception as exc:
                self.last_error = exc
                self._log.exception("Config refresh failed, keeping previous value")
                return False

    def _run(self) -> None:
        interval = self.config.refresh_interval.total_seconds()
        self._log.info("Refresh loop started: interval_seconds=%s", interval)
        while not self._stop_event.wait(interval):
            self.refresh()
        self._log.info("Refresh loop stopped: refresh_count=%s", self.refresh_count)

    def start(self) -> None:
        if self.running:
            return
        self._stop_event.clear()
        self._thread = threading.Thread(target=self._run, name=self.name, daemon=True)
        self._thread.start()

    def stop(self, timeout: float | None = None) -> None:
        self._stop_event.set()
        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout)

    def __enter__(self) -> SyncSession[T]:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.stop()


class ConfigBinder:
    def __init__(self, store_factory: Callable[[boto3.Session, str | None], ObjectStore] | None = None) -> None:
        self.store_factory = store_factory or ObjectStore

    def bind(self, config: SyncConfig, target: type[T], *, name: str | None = None) -> SyncSession[T]:
        """Fetch and decode once, then keep refreshing in the background.

        Raises ValidationError, FetchError or DecodeError (all BindError); in
        that case no background thread is started. A target pydantic cannot
        build a schema for raises UnsupportedTarget before anything is fetched.
        """
        config = validate(config)
        target_adapter(target)
        source = resolve_credentials(config.auth_mode, config.static_credentials)
        store = self.store_factory(source.session(config.region), config.endpoint)

        session = SyncSession(config, target, store, name=name)
        try:
            session._load()
        except Exception:
            logger.error(
                "Initial bind failed: bucket=%s key=%s auth_mode=%s",
                config.bucket,
                config.object_key,
                config.auth_mode.value,
            )
            raise
        session.start()
        logger.info(
            "Config bound: bucket=%s key=%s auth_mode=%s interval_seconds=%s",
            config.bucket,
            config.object_key,
            config.auth_mode.value,
            config.refresh_interval.total_seconds(),
        )
        return session


def bind(config: SyncConfig, target: type[T], *, name: str | None = None) -> SyncSession[T]:
    return ConfigBinder().bind(config, target, name=name)
