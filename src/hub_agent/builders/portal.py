"""Builders for APIPortal resources and the ingress serving the portal UI."""

from __future__ import annotations

from typing import Any

from ..constants import (
    ANNOTATION_ROUTER_ENTRYPOINTS,
    ANNOTATION_ROUTER_TLS,
    KIND_INGRESS,
    KIND_PORTAL,
    LABEL_MANAGED_BY,
    MANAGED_BY_VALUE,
)
from ..services.platform.models import Portal
from ..utils.hashing import content_hash
from .common import domain_names, https_urls, hub_resource, synced_at, verified_domain_names


def build_portal(portal: Portal) -> dict[str, Any]:
    """Build the APIPortal resource of a platform portal.

    The portal UI is reachable on its hub domain, when it has one, and on its
    verified custom domains. Its unified API is reachable the same way on the
    API domains.
    """
    verified = verified_domain_names(portal.custom_domains)
    urls = https_urls(verified)
    if portal.hub_domain:
        urls.extend(https_urls([portal.hub_domain]))

    api_verified = verified_domain_names(portal.api_custom_domains)
    api_urls = https_urls([*api_verified, portal.api_hub_domain])

    resource = hub_resource(
        KIND_PORTAL,
        portal.name,
        spec={
            "description": portal.description,
            "customDomains": domain_names(portal.custom_domains),
            "apiCustomDomains": domain_names(portal.api_custom_domains),
        },
        status={
            "version": portal.version,
            "syncedAt": synced_at(),
            "hubDomain": portal.hub_domain,
            "apiHubDomain": portal.api_hub_domain,
            "customDomains": verified,
            "apiCustomDomains": api_verified,
            "urls": ",".join(urls),
            "apiUrls": ",".join(api_urls),
        },
    )
    resource["status"]["hash"] = hash_portal(resource)
    return resource


def hash_portal(resource: dict[str, Any]) -> str:
    spec = resource.get("spec") or {}
    status = resource.get("status") or {}
    return content_hash({
        "description": spec.get("description", ""),
        "customDomains": spec.get("customDomains") or [],
        "apiCustomDomains": spec.get("apiCustomDomains") or [],
        "hubDomain": status.get("hubDomain", ""),
        "apiHubDomain": status.get("apiHubDomain", ""),
    })


def build_portal_ingress(
    *,
    name: str,
    namespace: str,
    hosts: list[str],
    service_name: str,
    service_port: int,
    entrypoint: str,
    secret_name: str,
    ingress_class_name: str,
    owner_reference: dict[str, Any],
) -> dict[str, Any]:
    """Build the ingress routing the custom domains of a portal to the portal UI.

    Args:
        name: Name of the ingress
        namespace: Namespace of the ingress, the agent namespace
        hosts: Verified custom domains of the portal, one rule each
        service_name: Service serving the portal UI
        service_port: Port of that service
        entrypoint: Traefik entrypoint serving the ingress
        secret_name: Secret holding the certificate of the custom domains
        ingress_class_name: Ingress class
        owner_reference: Reference to the owning APIPortal

    Returns:
        Ingress resource
    """
    paths = [{
        "path": "/",
        "pathType": "Prefix",
        "backend": {"service": {"name": service_name, "port": {"number": service_port}}},
    }]
    return {
        "apiVersion": "networking.k8s.io/v1",
        "kind": KIND_INGRESS,
        "metadata": {
            "name": name,
            "namespace": namespace,
            "annotations": {
                ANNOTATION_ROUTER_TLS: "true",
                ANNOTATION_ROUTER_ENTRYPOINTS: entrypoint,
            },
            "labels": {LABEL_MANAGED_BY: MANAGED_BY_VALUE},
            "ownerReferences": [owner_reference],
        },
        "spec": {
            "ingressClassName": ingress_class_name,
            "rules": [{"host": host, "http": {"paths": paths}} for host in hosts],
            "tls": [{"hosts": list(hosts), "secretName": secret_name}],
        },
    }
