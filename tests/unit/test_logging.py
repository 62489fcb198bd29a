"""Tests for structured logging."""

from __future__ import annotations

import json
import logging

from s3_website_operator.logging import JsonFormatter, log_resource_event


def _record(message: str, **extra) -> logging.LogRecord:
    record = logging.LogRecord("s3_website_operator.test", logging.WARNING, __file__, 1, message, None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestJsonFormatter:
    """Test cases for JsonFormatter."""

    def test_plain_message(self):
        """Test plain messages are wrapped in a JSON object."""
        entry = json.loads(JsonFormatter().format(_record("kopf started")))
        assert entry["message"] == "kopf started"
        assert entry["level"] == "WARNING"
        assert entry["logger"] == "s3_website_operator.test"
        assert "timestamp" in entry

    def test_json_message_merged(self):
        """Test JSON payloads are merged into the entry."""
        entry = json.loads(JsonFormatter().format(_record('{"event": "create", "name": "docs"}')))
        assert entry["event"] == "create"
        assert entry["name"] == "docs"

    def test_extra_fields_sanitized(self):
        """Test extra fields are included with secrets redacted."""
        entry = json.loads(JsonFormatter().format(_record("x", bucket="my-site", secret_key="abc")))
        assert entry["bucket"] == "my-site"
        assert entry["secret_key"] == "[REDACTED]"


class TestLogResourceEvent:
    """Test cases for log_resource_event."""

    def test_structured_fields(self, caplog):
        """Test the resource coordinates and extra fields are logged."""
        logger = logging.getLogger("s3_website_operator.test")
        with caplog.at_level(logging.INFO, logger="s3_website_operator.test"):
            log_resource_event(
                logger,
                controller="s3-website-operator",
                resource_kind="BucketWebsite",
                resource_name="docs",
                namespace="web",
                uid="u-1",
                event="update",
                reason="Updated",
                message="Website configuration updated",
                identifier="my-site",
                access_key="AKIATEST",
            )

        data = json.loads(caplog.records[-1].getMessage())
        assert data["resource"] == "BucketWebsite"
        assert data["name"] == "docs"
        assert data["identifier"] == "my-site"
        assert data["access_key"] == "[REDACTED]"

    def test_level(self, caplog):
        """Test the requested level is used."""
        logger = logging.getLogger("s3_website_operator.test")
        with caplog.at_level(logging.INFO, logger="s3_website_operator.test"):
            log_resource_event(
                logger, "c", "BucketWebsite", "docs", "web", "u-1", "error", "Failed", "boom", level=logging.ERROR
            )
        assert caplog.records[-1].levelno == logging.ERROR
