"""
Unit tests for logging setup and formatters.
"""

import json
import logging

import pytest

from s3config.logging_config import JsonFormatter, TextFormatter, configure_logging, get_logger, with_context


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    botocore_level = logging.getLogger("botocore").level
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)
    logging.getLogger("botocore").setLevel(botocore_level)


def _record(**extra):
    fields = {"name": "s3config.binder", "msg": "Config updated: bytes=%s", "args": (42,), "levelname": "INFO"}
    fields.update(extra)
    return logging.makeLogRecord(fields)


@pytest.mark.unit
class TestFormatters:
    """Test text and JSON formatters."""

    def test_text_format(self):
        line = TextFormatter(service="svc").format(_record(bucket="bucket"))

        assert "INFO s3config.binder" in line
        assert "service=svc" in line
        assert "message=Config updated: bytes=42" in line
        assert "bucket='bucket'" in line

    def test_json_format(self):
        payload = json.loads(JsonFormatter(service="svc").format(_record(key="folder/config.yml")))

        assert payload["level"] == "INFO"
        assert payload["logger"] == "s3config.binder"
        assert payload["service"] == "svc"
        assert payload["message"] == "Config updated: bytes=42"
        assert payload["context"] == {"key": "folder/config.yml"}

    def test_json_without_extras_has_no_context(self):
        payload = json.loads(JsonFormatter(service="svc").format(_record()))
        assert "context" not in payload


@pytest.mark.unit
class TestConfigureLogging:
    """Test configure_logging."""

    def test_level_from_argument(self, restore_root_logger, monkeypatch):
        monkeypatch.delenv("S3CONFIG_LOG_JSON", raising=False)

        configure_logging(level="debug", service="test")

        assert restore_root_logger.level == logging.DEBUG
        assert len(restore_root_logger.handlers) == 1
        assert isinstance(restore_root_logger.handlers[0].formatter, TextFormatter)
        assert logging.getLogger("botocore").level == logging.WARNING

    def test_env_selects_json_and_level(self, restore_root_logger, monkeypatch):
        monkeypatch.setenv("S3CONFIG_LOG_LEVEL", "error")
        monkeypatch.setenv("S3CONFIG_LOG_JSON", "true")

        configure_logging()

        assert restore_root_logger.level == logging.ERROR
        assert isinstance(restore_root_logger.handlers[0].formatter, JsonFormatter)

    @pytest.mark.parametrize("value", ["0", "false", "", "off"])
    def test_json_off_keeps_text(self, restore_root_logger, monkeypatch, value):
        monkeypatch.setenv("S3CONFIG_LOG_JSON", value)

        configure_logging(level="info")

        assert isinstance(restore_root_logger.handlers[0].formatter, TextFormatter)

    def test_context_adapter(self, caplog):
        log = with_context(get_logger("s3config.test"), bucket="bucket")

        with caplog.at_level(logging.INFO, logger="s3config.test"):
            log.info("hello")

        assert caplog.records[-1].bucket == "bucket"
