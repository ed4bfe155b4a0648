"""Reconciler of the API gateways and of the objects derived from them."""

from __future__ import annotations

from typing import Any

from ..builders.gateway import build_gateway
from ..config import AgentConfig
from ..constants import KIND_GATEWAY
from ..services.kube.client import ClusterClient
from ..services.kube.resources import GATEWAYS
from ..services.kube.store import ObjectStore
from ..services.platform.base import Platform
from ..services.platform.models import Gateway
from ..utils.context import PassContext
from ..utils.errors import HubAgentError
from .base import BaseHandler
from .certificates import CertificateManager, WildcardCertificateHolder
from .mirror import MirrorReconciler, SimpleCapability
from .orphans import OrphanCollector
from .resolution import AccessResolver
from .synthesis import ResourceSynthesizer


class GatewayReconciler(BaseHandler):
    """Mirror the platform gateways and expose their APIs.

    Each gateway pass mirrors the APIGateway resources, then for every gateway
    resolves the APIs reachable through its accesses, writes their
    certificates, collects the objects of namespaces it left and upserts one
    stripPrefix middleware and a set of ingresses per namespace.

    The certificate pass runs on its own timer and shares the wildcard
    certificate with the gateway pass through a locked holder.
    """

    def __init__(
        self,
        platform: Platform,
        cluster: ClusterClient,
        config: AgentConfig,
        gateways: ObjectStore,
        accesses: ObjectStore,
        collections: ObjectStore,
        apis: ObjectStore,
        ingresses: ObjectStore,
        holder: WildcardCertificateHolder | None = None,
    ) -> None:
        super().__init__(KIND_GATEWAY)
        self.holder = holder or WildcardCertificateHolder()
        self.resolver = AccessResolver(accesses, collections, apis)
        self.synthesizer = ResourceSynthesizer(cluster, config)
        self.orphans = OrphanCollector(cluster, ingresses)
        self.certificates = CertificateManager(
            platform, cluster, config, self.holder, gateways, self.resolver.apis_by_namespace
        )
        self.mirror: MirrorReconciler[Gateway] = MirrorReconciler(
            SimpleCapability(GATEWAYS, platform.get_gateways, build_gateway),
            cluster,
            gateways,
            after_sync=self.sync_child_resources,
        )

    def sync_gateways(self, ctx: PassContext) -> None:
        """Run one gateway pass."""
        self.mirror.sync(ctx)

    def sync_certificates(self, ctx: PassContext) -> None:
        """Run one certificate pass."""
        self.certificates.sync_certificates(ctx)

    def sync_child_resources(self, ctx: PassContext, gateway: dict[str, Any]) -> None:
        """Converge the objects derived from a gateway.

        Raises:
            SelectorError: If the gateway's APIs cannot be resolved
            HubAgentError: If the objects of some namespaces could not be upserted
        """
        apis_by_namespace = self.resolver.apis_by_namespace(gateway)

        self.certificates.setup_certificates(ctx, gateway, apis_by_namespace, self.holder.get())
        self.orphans.cleanup_namespaces(ctx, gateway, apis_by_namespace)

        failed = []
        for namespace in sorted(apis_by_namespace):
            try:
                upserted = self.synthesizer.upsert_namespace(ctx, gateway, namespace, apis_by_namespace[namespace])
            except Exception as e:
                self.log_error(
                    {"name": gateway["metadata"]["name"], "namespace": namespace},
                    "Unable to upsert APIGateway's child resources",
                    error=e,
                    reason="UpsertFailed",
                )
                failed.append(namespace)
                continue
            self.orphans.cleanup_groups(ctx, gateway, namespace, upserted)

        if failed:
            raise HubAgentError(f"upsert resources in namespaces: {', '.join(failed)}")
