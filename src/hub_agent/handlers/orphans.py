"""Garbage collection of the objects a gateway no longer needs."""

from __future__ import annotations

from typing import Any, Mapping

from ..constants import KIND_INGRESS, LABEL_MANAGED_BY, MANAGED_BY_VALUE
from ..services.kube.client import ClusterClient
from ..services.kube.resources import INGRESSES, MIDDLEWARES, SECRETS, ResourceKind
from ..services.kube.store import ObjectStore
from ..utils.context import PassContext
from ..utils.errors import is_not_found
from ..utils.naming import is_gateway_ingress, strip_prefix_middleware_name
from ..utils.secrets import remove_owner_reference
from ..utils.selectors import OP_IN, Requirement, Selector
from .base import BaseHandler

MANAGED_BY_HUB = Selector((Requirement(LABEL_MANAGED_BY, OP_IN, frozenset([MANAGED_BY_VALUE])),))


class OrphanCollector(BaseHandler):
    """Delete the derived objects whose inputs disappeared.

    Collection happens at two levels: whole namespaces which no longer hold
    any API of the gateway, then single ingresses whose group key lost all
    its APIs within a namespace still in use. Only ingresses labeled as
    managed by the agent and named after the gateway are considered.

    Deletions are independent: a failure is logged and the next object is
    processed.
    """

    def __init__(self, cluster: ClusterClient, ingresses: ObjectStore) -> None:
        super().__init__(KIND_INGRESS)
        self.cluster = cluster
        self.ingresses = ingresses

    def gateway_ingresses(self, gateway_name: str, namespace: str | None = None) -> list[dict[str, Any]]:
        return [
            ingress
            for ingress in self.ingresses.list(namespace=namespace, selector=MANAGED_BY_HUB)
            if is_gateway_ingress(ingress["metadata"]["name"], gateway_name)
        ]

    def cleanup_namespaces(
        self,
        ctx: PassContext,
        gateway: dict[str, Any],
        apis_by_namespace: Mapping[str, Any],
    ) -> None:
        """Clean the namespaces no longer holding any API of the gateway.

        Removes the ingress and the stripPrefix middleware, and releases the
        ingress TLS secrets.
        """
        gateway_name = gateway["metadata"]["name"]
        for ingress in self.gateway_ingresses(gateway_name):
            namespace = ingress["metadata"].get("namespace", "")
            if namespace in apis_by_namespace:
                continue

            for tls in (ingress.get("spec") or {}).get("tls") or []:
                if tls.get("secretName"):
                    self.release_secret(ctx, gateway, tls["secretName"], namespace)
            self._delete(ctx, MIDDLEWARES, strip_prefix_middleware_name(gateway_name), namespace, gateway_name)
            self._delete(ctx, INGRESSES, ingress["metadata"]["name"], namespace, gateway_name)

    def cleanup_groups(
        self,
        ctx: PassContext,
        gateway: dict[str, Any],
        namespace: str,
        upserted: set[str],
    ) -> None:
        """Delete the gateway's ingresses of a namespace which were not upserted in this pass."""
        gateway_name = gateway["metadata"]["name"]
        for ingress in self.gateway_ingresses(gateway_name, namespace):
            name = ingress["metadata"]["name"]
            if name not in upserted:
                self._delete(ctx, INGRESSES, name, namespace, gateway_name)

    def release_secret(self, ctx: PassContext, gateway: dict[str, Any], name: str, namespace: str) -> None:
        """Release a gateway's hold on a TLS secret.

        Secrets such as hub-certificate are shared by every gateway exposing
        APIs in the namespace. The secret is deleted once no other gateway
        owns it, otherwise only this gateway's owner reference is removed.
        Secrets owned by other gateways only are left untouched.
        """
        gateway_name = gateway["metadata"]["name"]
        obj = {"name": name, "namespace": namespace}
        try:
            secret = self.cluster.get(ctx, SECRETS, name, namespace)
        except Exception as e:
            if is_not_found(e):
                return
            self.log_error(
                obj,
                "Unable to clean APIGateway's child Secret",
                error=e,
                reason="CleanupFailed",
                kind=SECRETS.kind,
                gateway_name=gateway_name,
            )
            return

        meta = secret.setdefault("metadata", {})
        owners = list(meta.get("ownerReferences") or [])
        remaining = remove_owner_reference(owners, gateway["metadata"].get("uid", ""))
        if not remaining:
            self._delete(ctx, SECRETS, name, namespace, gateway_name)
            return
        if len(remaining) == len(owners):
            return

        meta["ownerReferences"] = remaining
        try:
            self.cluster.update(ctx, SECRETS, secret)
        except Exception as e:
            self.log_error(
                obj,
                "Unable to release APIGateway's child Secret",
                error=e,
                reason="CleanupFailed",
                kind=SECRETS.kind,
                gateway_name=gateway_name,
            )
            return
        self.log_debug(obj, "Secret released", event="updated", reason="Released", gateway_name=gateway_name)

    def _delete(self, ctx: PassContext, kind: ResourceKind, name: str, namespace: str, gateway_name: str) -> None:
        obj = {"name": name, "namespace": namespace}
        try:
            self.cluster.delete(ctx, kind, name, namespace)
        except Exception as e:
            if is_not_found(e):
                return
            self.log_error(
                obj,
                f"Unable to clean APIGateway's child {kind.kind}",
                error=e,
                reason="CleanupFailed",
                kind=kind.kind,
                gateway_name=gateway_name,
            )
            return
        self.log_debug(obj, f"{kind.kind} deleted", event="deleted", reason="Deleted", kind=kind.kind, gateway_name=gateway_name)
