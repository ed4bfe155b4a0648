"""Builder for the ingresses exposing the APIs of a gateway."""

from __future__ import annotations

from typing import Any, Iterable

from ..constants import (
    ANNOTATION_HUB_AUTH,
    ANNOTATION_HUB_AUTH_GROUP,
    ANNOTATION_ROUTER_ENTRYPOINTS,
    ANNOTATION_ROUTER_MIDDLEWARES,
    ANNOTATION_ROUTER_TLS,
    HUB_AUTH_POLICY_NAME,
    KIND_INGRESS,
    LABEL_MANAGED_BY,
    MANAGED_BY_VALUE,
)


def build_ingress_paths(apis: Iterable[Any]) -> list[dict[str, Any]]:
    """Build one Prefix path per API, pointing at the API's service.

    Args:
        apis: Resolved APIs, exposing path_prefix and service

    Returns:
        HTTP ingress paths
    """
    return [
        {
            "path": api.path_prefix,
            "pathType": "Prefix",
            "backend": {
                "service": {
                    "name": api.service["name"],
                    "port": dict(api.service.get("port") or {}),
                },
            },
        }
        for api in apis
    ]


def build_ingress(
    *,
    name: str,
    namespace: str,
    hosts: list[str],
    paths: list[dict[str, Any]],
    entrypoint: str,
    middleware: str,
    groups: str,
    secret_name: str,
    ingress_class_name: str,
    owner_reference: dict[str, Any],
) -> dict[str, Any]:
    """Build an ingress routing every host to the same set of paths.

    Args:
        name: Name of the ingress
        namespace: Namespace of the ingress
        hosts: Hosts to route, one rule each
        paths: Paths shared by every rule
        entrypoint: Traefik entrypoint serving the ingress
        middleware: Traefik reference of the stripPrefix middleware
        groups: Comma separated groups allowed to reach the APIs
        secret_name: Secret holding the certificate of the hosts
        ingress_class_name: Ingress class
        owner_reference: Reference to the owning APIGateway

    Returns:
        Ingress resource
    """
    return {
        "apiVersion": "networking.k8s.io/v1",
        "kind": KIND_INGRESS,
        "metadata": {
            "name": name,
            "namespace": namespace,
            "annotations": {
                ANNOTATION_ROUTER_TLS: "true",
                ANNOTATION_ROUTER_ENTRYPOINTS: entrypoint,
                ANNOTATION_ROUTER_MIDDLEWARES: middleware,
                ANNOTATION_HUB_AUTH: HUB_AUTH_POLICY_NAME,
                ANNOTATION_HUB_AUTH_GROUP: groups,
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
