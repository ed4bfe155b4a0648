"""Utilities for emitting Kubernetes events."""

from __future__ import annotations

from typing import Any

import kopf

from ..constants import EVENT_REASON_SYNC_FAILED, EVENT_REASON_SYNCED


def emit_event(
    body: dict[str, Any],
    reason: str,
    message: str,
    type_: str = "Normal",
) -> None:
    """Emit a Kubernetes event.

    Args:
        body: Resource the event is about (apiVersion, kind and metadata)
        reason: Event reason
        message: Event message
        type_: Event type (Normal or Warning)
    """
    kopf.event(
        body,
        reason=reason,
        message=message,
        type=type_,
    )


def emit_synced(body: dict[str, Any]) -> None:
    """Emit synced event."""
    emit_event(body, EVENT_REASON_SYNCED, "Synced successfully with the Hub platform")


def emit_sync_failed(body: dict[str, Any], message: str) -> None:
    """Emit sync failed event."""
    emit_event(
        body,
        EVENT_REASON_SYNC_FAILED,
        f"Unable to synchronize with the Hub platform: {message}",
        type_="Warning",
    )
