"""Tests for tracing helpers."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

from quobject_operator import tracing


class TestTracing:
    """Test cases for tracing helpers."""

    def test_disabled_by_default(self, monkeypatch):
        """Test tracing stays off unless enabled."""
        monkeypatch.delenv("OTEL_TRACES_ENABLED", raising=False)
        with patch.object(tracing, "_tracer", None):
            tracing.initialize_tracing()
            assert tracing.get_tracer() is None

    def test_span_without_tracer(self):
        """Test spans are no-ops without a tracer."""
        with patch.object(tracing, "_tracer", None):
            with tracing.trace_span("reconcile_bucket_claim") as span:
                assert span is None

    def test_span_with_tracer(self):
        """Test the resource kind is added to span attributes."""
        tracer = MagicMock()
        with patch.object(tracing, "_tracer", tracer):
            with tracing.trace_span("reconcile_bucket_claim", kind="QuObjectBucketClaim", attributes={"a": 1}):
                pass

        tracer.start_as_current_span.assert_called_once_with(
            "reconcile_bucket_claim",
            attributes={"a": 1, "resource.kind": "QuObjectBucketClaim"},
        )
