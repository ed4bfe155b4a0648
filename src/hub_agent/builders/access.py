"""Builder for APIAccess resources."""

from __future__ import annotations

from typing import Any

from ..constants import KIND_ACCESS
from ..services.platform.models import Access
from ..utils.hashing import content_hash, sorted_pairs
from .common import hub_resource, synced_at


def build_access(access: Access) -> dict[str, Any]:
    """Build the APIAccess resource of a platform access."""
    spec: dict[str, Any] = {"groups": list(access.groups)}
    if access.api_selector is not None:
        spec["apiSelector"] = access.api_selector
    if access.api_collection_selector is not None:
        spec["apiCollectionSelector"] = access.api_collection_selector

    resource = hub_resource(
        KIND_ACCESS,
        access.name,
        labels=access.labels,
        spec=spec,
        status={"version": access.version, "syncedAt": synced_at()},
    )
    resource["status"]["hash"] = hash_access(resource)
    return resource


def hash_access(resource: dict[str, Any]) -> str:
    spec = resource.get("spec") or {}
    return content_hash({
        "groups": spec.get("groups") or [],
        "apiSelector": spec.get("apiSelector"),
        "apiCollectionSelector": spec.get("apiCollectionSelector"),
        "labels": sorted_pairs((resource.get("metadata") or {}).get("labels")),
    })
