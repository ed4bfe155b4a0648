"""Tests for base handler functionality."""

from __future__ import annotations

import json
import logging
from unittest.mock import MagicMock, patch

import pytest

from hub_agent.handlers.base import BaseHandler


def _gateway(uid: str | None = "uid-1") -> dict:
    meta = {"name": "gateway"}
    if uid:
        meta["uid"] = uid
    return {"apiVersion": "hub.traefik.io/v1alpha1", "kind": "APIGateway", "metadata": meta}


class TestBaseHandler:
    """Test cases for BaseHandler class."""

    def test_init(self):
        """Test handler initialization."""
        handler = BaseHandler(kind="APIGateway")
        assert handler.kind == "APIGateway"
        assert handler.logger is not None

    def test_log_info_is_structured(self, caplog):
        """Test that log lines are JSON documents describing the resource."""
        handler = BaseHandler(kind="APIGateway")
        with caplog.at_level(logging.INFO, logger=handler.logger.name):
            handler.log_info(_gateway(), "Created", event="create", reason="Created")

        data = json.loads(caplog.records[-1].getMessage())
        assert data["resource"] == "APIGateway"
        assert data["name"] == "gateway"
        assert data["event"] == "create"
        assert data["message"] == "Created"

    def test_log_kind_override(self, caplog):
        """Test that a log line can be about a different kind."""
        handler = BaseHandler(kind="APIGateway")
        obj = {"metadata": {"name": "ing", "namespace": "default"}}
        with caplog.at_level(logging.INFO, logger=handler.logger.name):
            handler.log_info(obj, "Deleted", kind="Ingress")

        data = json.loads(caplog.records[-1].getMessage())
        assert data["resource"] == "Ingress"
        assert data["namespace"] == "default"

    def test_log_error_sanitizes(self, caplog):
        """Test that error details are sanitized."""
        handler = BaseHandler(kind="APIGateway")
        with caplog.at_level(logging.ERROR, logger=handler.logger.name):
            handler.log_error(_gateway(), "Failed", error=ValueError("token=abc123"))

        data = json.loads(caplog.records[-1].getMessage())
        assert data["error_type"] == "ValueError"
        assert "abc123" not in data["error"]

    def test_handle_sync_error_emits_event(self, kopf_event):
        """Test that a sync failure is reported on the object."""
        handler = BaseHandler(kind="APIGateway")
        handler.handle_sync_error(_gateway(), "Unable to sync", RuntimeError("boom"))

        kopf_event.assert_called_once()
        assert kopf_event.call_args.kwargs["reason"] == "Failed"
        assert kopf_event.call_args.kwargs["type"] == "Warning"
        assert "boom" in kopf_event.call_args.kwargs["message"]

    def test_handle_sync_error_without_uid(self, kopf_event):
        """Test that no event is posted for an object absent from the cluster."""
        handler = BaseHandler(kind="APIGateway")
        handler.handle_sync_error(_gateway(uid=None), "Unable to create", RuntimeError("boom"))

        kopf_event.assert_not_called()


class TestReconcileWithMetrics:
    """Test cases for reconcile_with_metrics."""

    @patch("hub_agent.handlers.base.metrics")
    def test_success(self, mock_metrics):
        """Test that a successful pass is counted."""
        handler = BaseHandler(kind="APIGateway")
        fn = MagicMock()

        handler.reconcile_with_metrics(fn)

        fn.assert_called_once()
        results = [c.kwargs["result"] for c in mock_metrics.reconcile_total.labels.call_args_list]
        assert results == ["started", "success"]
        mock_metrics.reconcile_duration_seconds.labels.return_value.observe.assert_called_once()

    @patch("hub_agent.handlers.base.metrics")
    def test_failure_propagates(self, mock_metrics):
        """Test that a failed pass is counted and re-raised."""
        handler = BaseHandler(kind="APIGateway")

        with pytest.raises(RuntimeError):
            handler.reconcile_with_metrics(MagicMock(side_effect=RuntimeError("boom")))

        results = [c.kwargs["result"] for c in mock_metrics.reconcile_total.labels.call_args_list]
        assert results == ["started", "error"]


class TestStructuredLogging:
    """Test cases for log_resource_event."""

    def test_extra_fields_are_sanitized(self, caplog):
        """Test that sensitive extra fields never reach the logs."""
        from hub_agent.logging import log_resource_event

        logger = logging.getLogger("hub_agent.test")
        with caplog.at_level(logging.INFO, logger=logger.name):
            log_resource_event(
                logger, "hub-agent", "Secret", "hub-certificate", "default", "created", "Created", "Secret created",
                private_key="PEM", gateway_name="gateway",
            )

        data = json.loads(caplog.records[-1].getMessage())
        assert data["private_key"] == "[REDACTED]"
        assert data["gateway_name"] == "gateway"

    def test_correlation_id(self, caplog):
        """Test that log lines of a pass carry its correlation ID."""
        from hub_agent.logging import log_resource_event
        from hub_agent.utils.context import sync_pass

        logger = logging.getLogger("hub_agent.test")
        with caplog.at_level(logging.INFO, logger=logger.name), sync_pass(5) as ctx:
            log_resource_event(logger, "hub-agent", "APIGateway", "gateway", "", "info", "Info", "hello")

        data = json.loads(caplog.records[-1].getMessage())
        assert data["correlation_id"] == ctx.correlation_id
