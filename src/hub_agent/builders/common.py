"""Helpers shared by the resource builders."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Iterable, Optional

from ..constants import API_GROUP_VERSION
from ..services.platform.models import CustomDomain


def synced_at() -> str:
    """Current time in the RFC 3339 form used by Kubernetes."""
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def hub_resource(
    kind: str,
    name: str,
    spec: dict[str, Any],
    status: dict[str, Any],
    labels: Optional[dict[str, str]] = None,
    namespace: Optional[str] = None,
) -> dict[str, Any]:
    """Build a hub.traefik.io resource."""
    metadata: dict[str, Any] = {"name": name}
    if namespace is not None:
        metadata["namespace"] = namespace
    if labels:
        metadata["labels"] = dict(labels)

    return {
        "apiVersion": API_GROUP_VERSION,
        "kind": kind,
        "metadata": metadata,
        "spec": spec,
        "status": status,
    }


def domain_names(domains: Iterable[CustomDomain]) -> list[str]:
    return [d.name for d in domains]


def verified_domain_names(domains: Iterable[CustomDomain]) -> list[str]:
    return [d.name for d in domains if d.verified]


def https_urls(domains: Iterable[str]) -> list[str]:
    return [f"https://{domain}" for domain in domains]
