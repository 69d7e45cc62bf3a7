"""Tests for base handler functionality."""

from __future__ import annotations

import json
import logging
from unittest.mock import Mock, patch

import pytest

from quobject_operator.handlers.base import BaseHandler
from quobject_operator.utils.errors import DeadlineExceeded

BODY = {"metadata": {"name": "test-resource", "namespace": "default", "uid": "uid-1"}}


class TestBaseHandler:
    """Test cases for BaseHandler class."""

    def test_init(self):
        """Test handler initialization."""
        handler = BaseHandler(kind="TestKind")
        assert handler.kind == "TestKind"
        assert handler.logger is not None

    def test_resource_context_defaults(self):
        """Test missing metadata fields get placeholders."""
        handler = BaseHandler(kind="TestKind")
        assert handler._get_resource_context({}) == {"name": "unknown", "namespace": "default", "uid": "unknown"}

    def test_log_levels(self, caplog):
        """Test each helper logs at its own level with resource context."""
        handler = BaseHandler(kind="TestKind")
        caplog.set_level(logging.DEBUG, logger="quobject_operator.handlers.base")

        handler.log_info(BODY["metadata"], "info message")
        handler.log_warning(BODY["metadata"], "warning message")
        handler.log_error(BODY["metadata"], "error message", error=ValueError("password=hunter2"))

        assert [r.levelno for r in caplog.records] == [logging.INFO, logging.WARNING, logging.ERROR]
        payload = json.loads(caplog.records[2].getMessage())
        assert payload["controller"] == "quobject-operator"
        assert payload["resource"] == "TestKind"
        assert payload["name"] == "test-resource"
        assert payload["error_type"] == "ValueError"
        assert "hunter2" not in payload["error"]

    @patch("quobject_operator.handlers.base.emit_reconcile_started")
    @patch("quobject_operator.handlers.base.metrics")
    def test_reconcile_with_metrics_success(self, mock_metrics, mock_emit_started):
        """Test successful reconciliation with metrics."""
        handler = BaseHandler(kind="TestKind")
        reconcile_fn = Mock()

        handler.reconcile_with_metrics(BODY, reconcile_fn)

        reconcile_fn.assert_called_once()
        mock_emit_started.assert_called_once_with(BODY)
        mock_metrics.reconcile_total.labels.assert_any_call(kind="TestKind", result="started")
        mock_metrics.reconcile_total.labels.assert_any_call(kind="TestKind", result="success")
        assert mock_metrics.reconcile_duration_seconds.labels.called

    @patch("quobject_operator.handlers.base.emit_reconcile_failed")
    @patch("quobject_operator.handlers.base.emit_reconcile_started")
    @patch("quobject_operator.handlers.base.metrics")
    def test_reconcile_with_metrics_failure(self, mock_metrics, mock_emit_started, mock_emit_failed):
        """Test failed reconciliation with metrics and error handling."""
        handler = BaseHandler(kind="TestKind")

        def failing_fn():
            raise ValueError("Test error")

        with pytest.raises(ValueError):
            handler.reconcile_with_metrics(BODY, failing_fn)

        mock_emit_started.assert_called_once_with(BODY)
        mock_emit_failed.assert_called_once_with(BODY, "Reconciliation failed: Test error")
        mock_metrics.error_total.labels.assert_called_with(kind="TestKind", error_type="ValueError")
        mock_metrics.reconcile_total.labels.assert_any_call(kind="TestKind", result="error")

    @patch("quobject_operator.handlers.base.emit_reconcile_failed")
    @patch("quobject_operator.handlers.base.emit_reconcile_started")
    def test_deadline_logged_as_warning(self, mock_emit_started, mock_emit_failed, caplog):
        """Test a deadline cut is a warning, not an error."""
        handler = BaseHandler(kind="TestKind")
        caplog.set_level(logging.DEBUG, logger="quobject_operator.handlers.base")

        def slow_fn():
            raise DeadlineExceeded("Reconcile deadline exceeded before head_bucket")

        with pytest.raises(DeadlineExceeded):
            handler.reconcile_with_metrics(BODY, slow_fn)

        assert [r.levelno for r in caplog.records] == [logging.WARNING]

    @patch("quobject_operator.handlers.base.metrics")
    def test_record_resource_status(self, mock_metrics):
        """Test the phase is recorded in lower case."""
        BaseHandler(kind="TestKind").record_resource_status("Bound")

        mock_metrics.resource_status_total.labels.assert_called_with(kind="TestKind", status="bound")
