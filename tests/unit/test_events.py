"""Tests for Kubernetes event utilities."""

from __future__ import annotations

from unittest.mock import patch

import pytest

from s3_website_operator.utils.events import (
    emit_drift_detected,
    emit_event,
    emit_reconcile_failed,
    emit_reconcile_started,
    emit_validate_failed,
    emit_validate_succeeded,
    emit_website_created,
    emit_website_deleted,
    emit_website_imported,
    emit_website_updated,
)


@pytest.fixture
def meta():
    return {"name": "docs-site", "namespace": "web"}


@pytest.fixture
def mock_event():
    with patch("s3_website_operator.utils.events.kopf.event") as mock:
        yield mock


class TestEmitEvent:
    """Test cases for emit_event function."""

    def test_emit_event_normal(self, meta, mock_event):
        """Test emitting normal event."""
        emit_event(meta, "TestReason", "Test message")
        mock_event.assert_called_once_with(meta, reason="TestReason", message="Test message", type="Normal")

    def test_emit_event_warning(self, meta, mock_event):
        """Test emitting warning event."""
        emit_event(meta, "ErrorReason", "Error occurred", type_="Warning")
        mock_event.assert_called_once_with(meta, reason="ErrorReason", message="Error occurred", type="Warning")


class TestLifecycleEvents:
    """Test cases for reconciliation and validation events."""

    def test_reconcile_started(self, meta, mock_event):
        """Test the started event."""
        emit_reconcile_started(meta)
        assert mock_event.call_args.kwargs == {"reason": "ReconcileStarted", "message": "Reconciliation started", "type": "Normal"}

    def test_reconcile_failed_is_warning(self, meta, mock_event):
        """Test failures are warnings."""
        emit_reconcile_failed(meta, "Reconciliation failed: boom")
        assert mock_event.call_args.kwargs["reason"] == "ReconcileFailed"
        assert mock_event.call_args.kwargs["type"] == "Warning"

    def test_validation_events(self, meta, mock_event):
        """Test validation succeeded and failed events."""
        emit_validate_succeeded(meta)
        emit_validate_failed(meta, "bucket is required")
        reasons = [call.kwargs["reason"] for call in mock_event.call_args_list]
        types = [call.kwargs["type"] for call in mock_event.call_args_list]
        assert reasons == ["ValidateSucceeded", "ValidateFailed"]
        assert types == ["Normal", "Warning"]


class TestWebsiteEvents:
    """Test cases for website configuration events."""

    def test_created(self, meta, mock_event):
        """Test the created event names the identifier."""
        emit_website_created(meta, "my-site")
        assert mock_event.call_args.kwargs["message"] == "Website configuration my-site created"
        assert mock_event.call_args.kwargs["reason"] == "WebsiteCreated"

    def test_updated_lists_attributes(self, meta, mock_event):
        """Test the updated event lists changed attributes sorted."""
        emit_website_updated(meta, "my-site", ["routing_rules", "error_document"])
        assert mock_event.call_args.kwargs["message"] == (
            "Website configuration my-site updated (error_document, routing_rules)"
        )

    def test_deleted_and_imported(self, meta, mock_event):
        """Test deletion and import events."""
        emit_website_deleted(meta, "my-site,123456789012")
        emit_website_imported(meta, "my-site")
        messages = [call.kwargs["message"] for call in mock_event.call_args_list]
        assert messages == [
            "Website configuration my-site,123456789012 deleted",
            "Website configuration my-site imported",
        ]

    def test_drift_is_warning(self, meta, mock_event):
        """Test drift is reported as a warning."""
        emit_drift_detected(meta, ["index_document"])
        assert mock_event.call_args.kwargs == {
            "reason": "DriftDetected",
            "message": "Drift detected on: index_document",
            "type": "Warning",
        }
