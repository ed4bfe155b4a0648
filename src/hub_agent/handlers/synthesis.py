"""Synthesis of the ingresses and middlewares exposing a gateway's APIs."""

from __future__ import annotations

from typing import Any, Optional

from ..builders.ingress import build_ingress, build_ingress_paths
from ..builders.middleware import build_strip_prefix_middleware
from ..config import AgentConfig
from ..constants import HUB_DOMAIN_SECRET_NAME, KIND_INGRESS
from ..services.kube.client import ClusterClient
from ..services.kube.resources import INGRESSES, MIDDLEWARES, ResourceKind, owner_reference
from ..utils.context import PassContext
from ..utils.errors import is_not_found
from ..utils.naming import (
    custom_domain_secret_name,
    custom_domains_ingress_name,
    hub_domain_ingress_name,
    strip_prefix_middleware_name,
    traefik_middleware_reference,
)
from .base import BaseHandler
from .resolution import ResolvedAPI


def group_apis(apis: list[ResolvedAPI]) -> dict[str, list[ResolvedAPI]]:
    """Partition resolved APIs by group key, keeping their order."""
    by_groups: dict[str, list[ResolvedAPI]] = {}
    for api in apis:
        by_groups.setdefault(api.groups, []).append(api)
    return by_groups


def _metadata_field(obj: dict[str, Any], key: str) -> Any:
    return (obj.get("metadata") or {}).get(key) or {}


def needs_update(live: dict[str, Any], desired: dict[str, Any]) -> bool:
    """Check whether a live object drifted from its desired state."""
    if live.get("spec") != desired.get("spec"):
        return True
    for key in ("labels", "annotations"):
        if _metadata_field(live, key) != _metadata_field(desired, key):
            return True
    return (_metadata_field(live, "ownerReferences") or []) != (_metadata_field(desired, "ownerReferences") or [])


def upsert_object(
    cluster: ClusterClient,
    ctx: PassContext,
    kind: ResourceKind,
    desired: dict[str, Any],
) -> Optional[str]:
    """Create an object, or update it when it drifted from its desired state.

    Labels and annotations are overwritten on update so that newly
    introduced keys reach existing objects. Metadata keys the desired object
    does not carry are removed from the live one.

    Returns:
        "created" or "updated", None when nothing was written
    """
    meta = desired["metadata"]
    try:
        live = cluster.get(ctx, kind, meta["name"], meta["namespace"])
    except Exception as e:
        if not is_not_found(e):
            raise
        cluster.create(ctx, kind, desired)
        return "created"

    if not needs_update(live, desired):
        return None

    live["spec"] = desired["spec"]
    live_meta = live.setdefault("metadata", {})
    for key in ("labels", "annotations", "ownerReferences"):
        if key in meta:
            live_meta[key] = meta[key]
        else:
            live_meta.pop(key, None)

    cluster.update(ctx, kind, live)
    return "updated"


class ResourceSynthesizer(BaseHandler):
    """Build and upsert the objects routing a gateway's APIs in one namespace.

    A namespace gets one stripPrefix middleware, then per group key one
    ingress on the hub domain and, when the gateway has verified custom
    domains, one ingress on those domains.
    """

    def __init__(self, cluster: ClusterClient, config: AgentConfig) -> None:
        super().__init__(KIND_INGRESS)
        self.cluster = cluster
        self.config = config

    def upsert_namespace(
        self,
        ctx: PassContext,
        gateway: dict[str, Any],
        namespace: str,
        apis: list[ResolvedAPI],
    ) -> set[str]:
        """Upsert the middleware and the ingresses of a gateway in a namespace.

        Returns:
            Names of the ingresses the namespace must hold
        """
        middleware = self.setup_strip_prefix_middleware(ctx, gateway, namespace, apis)

        upserted: set[str] = set()
        for ingress in self.build_ingresses(gateway, namespace, apis, middleware):
            self.upsert(ctx, INGRESSES, ingress)
            upserted.add(ingress["metadata"]["name"])

        self.log_debug(
            {"name": gateway["metadata"]["name"], "namespace": namespace},
            "Upserted ingresses",
            upserted_ingresses=sorted(upserted),
            upserted_ingresses_count=len(upserted),
        )
        return upserted

    def setup_strip_prefix_middleware(
        self,
        ctx: PassContext,
        gateway: dict[str, Any],
        namespace: str,
        apis: list[ResolvedAPI],
    ) -> str:
        """Upsert the stripPrefix middleware of a namespace.

        Returns:
            Reference to the middleware, as used in ingress annotations
        """
        gateway_name = gateway["metadata"]["name"]
        middleware = build_strip_prefix_middleware(
            strip_prefix_middleware_name(gateway_name),
            namespace,
            [api.path_prefix for api in apis],
            owner_reference(gateway),
        )
        self.upsert(ctx, MIDDLEWARES, middleware)
        return traefik_middleware_reference(namespace, gateway_name)

    def build_ingresses(
        self,
        gateway: dict[str, Any],
        namespace: str,
        apis: list[ResolvedAPI],
        middleware: str,
    ) -> list[dict[str, Any]]:
        """Build the ingresses of a gateway in a namespace."""
        gateway_name = gateway["metadata"]["name"]
        status = gateway.get("status") or {}
        hub_domain = status.get("hubDomain", "")
        custom_domains = list(status.get("customDomains") or [])
        owner = owner_reference(gateway)

        ingresses = []
        for groups, group in group_apis(apis).items():
            paths = build_ingress_paths(group)
            ingresses.append(build_ingress(
                name=hub_domain_ingress_name(gateway_name, groups),
                namespace=namespace,
                hosts=[hub_domain],
                paths=paths,
                entrypoint=self.config.traefik_tunnel_entrypoint,
                middleware=middleware,
                groups=groups,
                secret_name=HUB_DOMAIN_SECRET_NAME,
                ingress_class_name=self.config.ingress_class_name,
                owner_reference=owner,
            ))

            if not custom_domains:
                continue

            ingresses.append(build_ingress(
                name=custom_domains_ingress_name(gateway_name, groups),
                namespace=namespace,
                hosts=custom_domains,
                paths=paths,
                entrypoint=self.config.traefik_api_entrypoint,
                middleware=middleware,
                groups=groups,
                secret_name=custom_domain_secret_name(gateway_name),
                ingress_class_name=self.config.ingress_class_name,
                owner_reference=owner,
            ))
        return ingresses

    def upsert(self, ctx: PassContext, kind: ResourceKind, desired: dict[str, Any]) -> None:
        """Create an object, or update it when it drifted from its desired state."""
        outcome = upsert_object(self.cluster, ctx, kind, desired)
        if outcome is not None:
            self.log_debug(
                desired, f"{kind.kind} {outcome}", event=outcome, reason=outcome.capitalize(), kind=kind.kind
            )
