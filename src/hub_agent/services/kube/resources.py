"""Descriptors of the Kubernetes resources handled by the agent."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from ...constants import (
    API_GROUP_VERSION,
    KIND_ACCESS,
    KIND_API,
    KIND_COLLECTION,
    KIND_GATEWAY,
    KIND_INGRESS,
    KIND_MIDDLEWARE,
    KIND_PORTAL,
    KIND_SECRET,
    TRAEFIK_API_GROUP_VERSION,
)


@dataclass(frozen=True)
class ResourceKind:
    """Identifies a resource type of the cluster."""

    kind: str
    api_version: str
    plural: str
    namespaced: bool

    @property
    def group(self) -> str:
        return self.api_version.rpartition("/")[0]

    @property
    def version(self) -> str:
        return self.api_version.rpartition("/")[2]

    @property
    def is_custom(self) -> bool:
        """Whether the resource is served through the custom objects API."""
        return self.group not in ("", "networking.k8s.io")


GATEWAYS = ResourceKind(KIND_GATEWAY, API_GROUP_VERSION, "apigateways", namespaced=False)
ACCESSES = ResourceKind(KIND_ACCESS, API_GROUP_VERSION, "apiaccesses", namespaced=False)
COLLECTIONS = ResourceKind(KIND_COLLECTION, API_GROUP_VERSION, "apicollections", namespaced=False)
APIS = ResourceKind(KIND_API, API_GROUP_VERSION, "apis", namespaced=True)
PORTALS = ResourceKind(KIND_PORTAL, API_GROUP_VERSION, "apiportals", namespaced=False)
MIDDLEWARES = ResourceKind(KIND_MIDDLEWARE, TRAEFIK_API_GROUP_VERSION, "middlewares", namespaced=True)
INGRESSES = ResourceKind(KIND_INGRESS, "networking.k8s.io/v1", "ingresses", namespaced=True)
SECRETS = ResourceKind(KIND_SECRET, "v1", "secrets", namespaced=True)


def object_key(obj: dict[str, Any]) -> tuple[str, str]:
    """Get the (namespace, name) key of an object; namespace is empty for cluster scoped objects."""
    meta = obj.get("metadata") or {}
    return meta.get("namespace") or "", meta.get("name", "")


def owner_reference(obj: dict[str, Any]) -> dict[str, Any]:
    """Build an owner reference pointing to the given object."""
    meta = obj.get("metadata") or {}
    return {
        "apiVersion": obj.get("apiVersion", ""),
        "kind": obj.get("kind", ""),
        "name": meta.get("name", ""),
        "uid": meta.get("uid", ""),
    }
