"""Base handler class with common functionality for all reconcilers."""

from __future__ import annotations

import logging
import time
from typing import Any, Callable

from .. import metrics
from ..constants import CONTROLLER_NAME
from ..logging import log_resource_event
from ..tracing import trace_span
from ..utils.errors import sanitize_exception
from ..utils.events import emit_sync_failed


class BaseHandler:
    """Base class for all reconcilers with common functionality."""

    def __init__(self, kind: str):
        """Initialize base handler.

        Args:
            kind: The Kubernetes resource kind (e.g., "APIGateway", "Ingress")
        """
        self.kind = kind
        self.logger = logging.getLogger(self.__class__.__module__)

    def _get_resource_context(self, obj: dict[str, Any]) -> dict[str, Any]:
        """Extract common resource context from an object.

        Args:
            obj: Kubernetes object, or its metadata

        Returns:
            Dictionary with resource context fields
        """
        meta = obj.get("metadata", obj)
        return {
            "name": meta.get("name", "unknown"),
            "namespace": meta.get("namespace", ""),
        }

    def _log(
        self,
        level: int,
        obj: dict[str, Any],
        message: str,
        event: str,
        reason: str,
        kind: str | None = None,
        **kwargs: Any,
    ) -> None:
        ctx = self._get_resource_context(obj)
        log_resource_event(
            self.logger,
            controller=CONTROLLER_NAME,
            resource_kind=kind or self.kind,
            resource_name=ctx["name"],
            namespace=ctx["namespace"],
            event=event,
            reason=reason,
            message=message,
            level=level,
            **kwargs,
        )

    def log_debug(self, obj: dict[str, Any], message: str, event: str = "debug", reason: str = "Debug", **kwargs: Any) -> None:
        """Log a debug-level structured log message."""
        self._log(logging.DEBUG, obj, message, event, reason, **kwargs)

    def log_info(self, obj: dict[str, Any], message: str, event: str = "info", reason: str = "Info", **kwargs: Any) -> None:
        """Log an info-level structured log message.

        Args:
            obj: Kubernetes object the message is about
            message: Log message
            event: Event type (default: "info")
            reason: Reason for the event (default: "Info")
            **kwargs: Additional fields to include in the log
        """
        self._log(logging.INFO, obj, message, event, reason, **kwargs)

    def log_warning(self, obj: dict[str, Any], message: str, event: str = "warning", reason: str = "Warning", **kwargs: Any) -> None:
        """Log a warning-level structured log message."""
        self._log(logging.WARNING, obj, message, event, reason, **kwargs)

    def log_error(
        self,
        obj: dict[str, Any],
        message: str,
        error: Exception | None = None,
        event: str = "error",
        reason: str = "Error",
        **kwargs: Any,
    ) -> None:
        """Log an error-level structured log message.

        Args:
            obj: Kubernetes object the message is about
            message: Log message
            error: Optional exception to include sanitized error details
            event: Event type (default: "error")
            reason: Reason for the event (default: "Error")
            **kwargs: Additional fields to include in the log
        """
        log_data = kwargs.copy()

        if error is not None:
            log_data["error"] = sanitize_exception(error)
            log_data["error_type"] = type(error).__name__
            metrics.error_total.labels(kind=kwargs.get("kind", self.kind), error_type=type(error).__name__).inc()

        self._log(logging.ERROR, obj, message, event, reason, **log_data)

    def handle_sync_error(self, obj: dict[str, Any], message: str, error: Exception) -> None:
        """Log a failed synchronization and report it on the object.

        Args:
            obj: Object which could not be synchronized
            message: Log message
            error: Exception that occurred
        """
        self.log_error(obj, message, error=error, reason="SyncFailed")
        if (obj.get("metadata") or {}).get("uid"):
            emit_sync_failed(obj, sanitize_exception(error))

    def reconcile_with_metrics(self, reconcile_fn: Callable[[], None]) -> None:
        """Execute a reconciliation pass with metrics and tracing.

        Args:
            reconcile_fn: Function to execute for reconciliation
        """
        metrics.reconcile_total.labels(kind=self.kind, result="started").inc()

        start_time = time.time()
        try:
            with trace_span(f"reconcile.{self.kind}", kind=self.kind):
                reconcile_fn()
            metrics.reconcile_total.labels(kind=self.kind, result="success").inc()
        except Exception:
            metrics.reconcile_total.labels(kind=self.kind, result="error").inc()
            raise
        finally:
            duration = time.time() - start_time
            metrics.reconcile_duration_seconds.labels(kind=self.kind).observe(duration)
