"""Tests for rate limiting utilities."""

from __future__ import annotations

import time
from unittest.mock import patch

from hub_agent.utils import rate_limit
from hub_agent.utils.rate_limit import rate_limit_k8s


class TestRateLimitK8s:
    """Test cases for Kubernetes API rate limiting."""

    def test_decorator_returns_result(self):
        """Test that the decorated function result is returned."""
        @rate_limit_k8s
        def create(a, b, c=None):
            return f"{a}-{b}-{c}"

        assert create("x", "y", c="z") == "x-y-z"

    def test_preserves_metadata(self):
        """Test that the decorator keeps the function name."""
        @rate_limit_k8s
        def update():
            """Update an object."""

        assert update.__name__ == "update"
        assert update.__doc__ == "Update an object."

    @patch("hub_agent.utils.rate_limit._K8S_RATE_LIMIT_PER_SECOND", 50.0)
    def test_enforces_minimum_interval(self):
        """Test that calls are spaced by the configured interval."""
        call_times = []

        @rate_limit_k8s
        def delete():
            call_times.append(time.monotonic())

        for _ in range(3):
            delete()

        # 50 calls/sec gives a 20ms interval, allow for timer granularity
        assert call_times[1] - call_times[0] >= 0.015
        assert call_times[2] - call_times[1] >= 0.015

    @patch("hub_agent.utils.rate_limit._K8S_RATE_LIMIT_PER_SECOND", 50.0)
    @patch("hub_agent.utils.rate_limit.metrics")
    def test_counts_waits(self, mock_metrics):
        """Test that waiting for the limiter is counted."""
        @rate_limit_k8s
        def create():
            pass

        create()
        create()

        mock_metrics.rate_limit_hits_total.labels.assert_called_with(api_type="k8s")

    def test_propagates_errors(self):
        """Test that errors of the decorated function propagate."""
        @rate_limit_k8s
        def create():
            raise RuntimeError("boom")

        try:
            create()
        except RuntimeError as e:
            assert str(e) == "boom"
        else:
            raise AssertionError("expected RuntimeError")

    def test_default_rate(self):
        """Test the default configured rate."""
        assert rate_limit._K8S_RATE_LIMIT_PER_SECOND > 0
