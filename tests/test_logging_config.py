"""Tests for structured logging configuration."""

import json
import logging

import structlog

from cli.logging_config import _redact_sensitive, setup_logging


class TestLoggingConfig:
    """Test structlog setup modes."""

    def test_level_filtering(self):
        setup_logging(json_mode=False, level="WARNING")
        assert logging.getLogger().level == logging.WARNING

    def test_default_level_is_info(self):
        setup_logging()
        assert logging.getLogger().level == logging.INFO

    def test_httpx_quieted(self):
        setup_logging(level="DEBUG")
        assert logging.getLogger("httpx").level == logging.WARNING

    def test_processor_chain(self):
        setup_logging(json_mode=True, level="DEBUG")
        config = structlog.get_config()
        assert _redact_sensitive in config["processors"]
        assert structlog.contextvars.merge_contextvars in config["processors"]

    def test_log_file_gets_json(self, tmp_path):
        log_file = tmp_path / "logs" / "versionwatch.log"
        setup_logging(level="INFO", log_file=log_file)
        logging.getLogger("test_file").info("check finished")
        for handler in logging.getLogger().handlers:
            handler.flush()

        line = log_file.read_text().strip().splitlines()[-1]
        record = json.loads(line)
        assert record["event"] == "check finished"
        assert record["level"] == "info"


class TestRedaction:
    def test_anthropic_key(self):
        out = _redact_sensitive(None, None, {"event": "key sk-ant-REDACTED"})
        assert "abcdefghijklmnop" not in out["event"]
        assert "REDACTED" in out["event"]

    def test_bearer_token(self):
        out = _redact_sensitive(None, None, {"header": "Authorization: Bearer s3cret-value"})
        assert out["header"] == "Authorization: Bearer REDACTED"

    def test_cron_secret(self):
        out = _redact_sensitive(None, None, {"event": "cron_secret=hunter2"})
        assert "hunter2" not in out["event"]

    def test_non_strings_untouched(self):
        out = _redact_sensitive(None, None, {"count": 3})
        assert out["count"] == 3
