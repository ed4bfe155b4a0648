"""Builder for APICollection resources."""

from __future__ import annotations

from typing import Any

from ..constants import KIND_COLLECTION
from ..services.platform.models import Collection
from ..utils.hashing import content_hash, sorted_pairs
from .common import hub_resource, synced_at


def build_collection(collection: Collection) -> dict[str, Any]:
    """Build the APICollection resource of a platform collection."""
    spec: dict[str, Any] = {"apiSelector": dict(collection.api_selector)}
    if collection.path_prefix:
        spec["pathPrefix"] = collection.path_prefix

    resource = hub_resource(
        KIND_COLLECTION,
        collection.name,
        labels=collection.labels,
        spec=spec,
        status={"version": collection.version, "syncedAt": synced_at()},
    )
    resource["status"]["hash"] = hash_collection(resource)
    return resource


def hash_collection(resource: dict[str, Any]) -> str:
    spec = resource.get("spec") or {}
    return content_hash({
        "pathPrefix": spec.get("pathPrefix", ""),
        "apiSelector": spec.get("apiSelector") or {},
        "labels": sorted_pairs((resource.get("metadata") or {}).get("labels")),
    })
