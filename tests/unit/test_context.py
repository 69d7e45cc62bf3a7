"""Tests for correlation ID and deadline context utilities."""

from __future__ import annotations

from unittest.mock import patch

import pytest

from quobject_operator.utils.context import (
    check_deadline,
    get_context_dict,
    get_correlation_id,
    reconcile_deadline,
    remaining_time,
    with_correlation_id,
)
from quobject_operator.utils.errors import DeadlineExceeded


class TestCorrelationId:
    """Test cases for correlation ID propagation."""

    def test_scoped_to_block(self):
        """Test the ID is only visible inside the block."""
        assert get_correlation_id() is None
        with with_correlation_id("abc123") as corr_id:
            assert corr_id == "abc123"
            assert get_context_dict() == {"correlation_id": "abc123"}
        assert get_correlation_id() is None

    def test_context_dict_additional(self):
        """Test extra values are merged."""
        assert get_context_dict({"pass": 1}) == {"pass": 1}


class TestReconcileDeadline:
    """Test cases for reconcile deadlines."""

    def test_no_deadline_by_default(self):
        """Test nothing expires outside a deadline block."""
        assert remaining_time() is None
        check_deadline("head_bucket")

    def test_disabled_with_zero_or_none(self):
        """Test zero and None disable the deadline."""
        with reconcile_deadline(0) as expires_at:
            assert expires_at is None
        with reconcile_deadline(None) as expires_at:
            assert expires_at is None

    @patch("quobject_operator.utils.context.time.monotonic")
    def test_expired_deadline_raises(self, mock_monotonic):
        """Test operations are refused after expiry."""
        mock_monotonic.return_value = 100.0
        with reconcile_deadline(5):
            check_deadline("head_bucket")
            mock_monotonic.return_value = 105.0
            with pytest.raises(DeadlineExceeded, match="head_bucket"):
                check_deadline("head_bucket")

    @patch("quobject_operator.utils.context.time.monotonic")
    def test_nested_keeps_earlier_expiry(self, mock_monotonic):
        """Test an inner deadline cannot extend the outer one."""
        mock_monotonic.return_value = 0.0
        with reconcile_deadline(10):
            with reconcile_deadline(60) as inner:
                assert inner == 10.0
            with reconcile_deadline(3) as inner:
                assert inner == 3.0

    @patch("quobject_operator.utils.context.time.monotonic")
    def test_none_lifts_outer_deadline(self, mock_monotonic):
        """Test a None block runs without the outer deadline."""
        mock_monotonic.return_value = 0.0
        with reconcile_deadline(1):
            mock_monotonic.return_value = 50.0
            with reconcile_deadline(None):
                check_deadline("patch_claim_status")
            with pytest.raises(DeadlineExceeded):
                check_deadline("patch_claim_status")
