"""Builder for API resources."""

from __future__ import annotations

from typing import Any

from ..constants import KIND_API
from ..services.platform.models import API
from ..utils.hashing import content_hash
from .common import hub_resource, synced_at


def build_api(api: API) -> dict[str, Any]:
    """Build the namespaced API resource of a platform API."""
    resource = hub_resource(
        KIND_API,
        api.name,
        namespace=api.namespace,
        labels=api.labels,
        spec={
            "pathPrefix": api.path_prefix,
            "service": {"name": api.service_name, "port": dict(api.service_port)},
        },
        status={"version": api.version, "syncedAt": synced_at()},
    )
    resource["status"]["hash"] = hash_api(resource)
    return resource


def hash_api(resource: dict[str, Any]) -> str:
    spec = resource.get("spec") or {}
    return content_hash({
        "pathPrefix": spec.get("pathPrefix", ""),
        "service": spec.get("service") or {},
    })
