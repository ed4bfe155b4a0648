"""Builder for APIGateway resources."""

from __future__ import annotations

from typing import Any

from ..constants import KIND_GATEWAY
from ..services.platform.models import Gateway
from ..utils.hashing import content_hash, sorted_pairs
from .common import domain_names, https_urls, hub_resource, synced_at, verified_domain_names


def build_gateway(gateway: Gateway) -> dict[str, Any]:
    """Build the APIGateway resource of a platform gateway.

    Every custom domain is listed in spec.customDomains, but only verified ones are
    reported in the status and exposed through URLs.

    Args:
        gateway: Gateway served by the platform

    Returns:
        APIGateway resource
    """
    verified = verified_domain_names(gateway.custom_domains)
    urls = https_urls([*verified, gateway.hub_domain])

    resource = hub_resource(
        KIND_GATEWAY,
        gateway.name,
        labels=gateway.labels,
        spec={
            "apiAccesses": list(gateway.accesses),
            "customDomains": domain_names(gateway.custom_domains),
        },
        status={
            "version": gateway.version,
            "syncedAt": synced_at(),
            "hubDomain": gateway.hub_domain,
            "customDomains": verified,
            "urls": ",".join(urls),
        },
    )
    resource["status"]["hash"] = hash_gateway(resource)
    return resource


def hash_gateway(resource: dict[str, Any]) -> str:
    """Hash the fields of an APIGateway affecting its derived objects."""
    spec = resource.get("spec") or {}
    return content_hash({
        "labels": sorted_pairs((resource.get("metadata") or {}).get("labels")),
        "accesses": spec.get("apiAccesses") or [],
        "hubDomain": (resource.get("status") or {}).get("hubDomain", ""),
        "customDomains": spec.get("customDomains") or [],
    })
