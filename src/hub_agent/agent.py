"""Assembly of the reconcilers run by the agent."""

from __future__ import annotations

from dataclasses import dataclass, field

from .config import AgentConfig
from .constants import LABEL_MANAGED_BY, MANAGED_BY_VALUE
from .handlers.access import new_access_reconciler
from .handlers.api import new_api_reconciler
from .handlers.collection import new_collection_reconciler
from .handlers.gateway import GatewayReconciler
from .handlers.portal import PortalChildResources, new_portal_reconciler
from .runner import Job, ReconcilerRunner
from .services.kube.client import ClusterClient
from .services.kube.resources import ACCESSES, APIS, COLLECTIONS, GATEWAYS, INGRESSES, PORTALS
from .services.kube.store import ObjectStore
from .services.platform.base import Platform
from .utils.context import sync_pass


@dataclass
class Stores:
    """Object stores of every watched kind."""

    gateways: ObjectStore = field(default_factory=lambda: ObjectStore(GATEWAYS))
    accesses: ObjectStore = field(default_factory=lambda: ObjectStore(ACCESSES))
    collections: ObjectStore = field(default_factory=lambda: ObjectStore(COLLECTIONS))
    apis: ObjectStore = field(default_factory=lambda: ObjectStore(APIS))
    portals: ObjectStore = field(default_factory=lambda: ObjectStore(PORTALS))
    ingresses: ObjectStore = field(
        default_factory=lambda: ObjectStore(INGRESSES, label_selector=f"{LABEL_MANAGED_BY}={MANAGED_BY_VALUE}")
    )

    def all(self) -> list[ObjectStore]:
        return [self.gateways, self.accesses, self.collections, self.apis, self.portals, self.ingresses]

    def prime(self, cluster: ClusterClient, timeout: float) -> None:
        """Fill every store with a list call."""
        for store in self.all():
            with sync_pass(timeout) as ctx:
                store.prime(cluster, ctx)


def build_runners(
    config: AgentConfig,
    platform: Platform,
    cluster: ClusterClient,
    stores: Stores,
) -> list[ReconcilerRunner]:
    """Create one runner per reconciler.

    The gateway runner synchronizes certificates then gateways as soon as it
    starts. The other reconcilers first run after one interval. The portal
    runner also refreshes the portal certificates on the certificate interval.
    """
    gateway = GatewayReconciler(
        platform,
        cluster,
        config,
        gateways=stores.gateways,
        accesses=stores.accesses,
        collections=stores.collections,
        apis=stores.apis,
        ingresses=stores.ingresses,
    )

    runners = [
        ReconcilerRunner(
            "gateway",
            [
                Job(
                    "certificates",
                    gateway.sync_certificates,
                    interval=config.cert_sync_interval,
                    retry_interval=config.cert_retry_interval,
                    run_at_start=True,
                ),
                Job("gateways", gateway.sync_gateways, interval=config.gateway_sync_interval, run_at_start=True),
            ],
            config.sync_timeout,
        ),
    ]

    mirrors = {
        "access": new_access_reconciler(platform, cluster, stores.accesses),
        "api": new_api_reconciler(platform, cluster, stores.apis),
        "collection": new_collection_reconciler(platform, cluster, stores.collections),
    }
    for name, reconciler in mirrors.items():
        runners.append(
            ReconcilerRunner(
                name,
                [Job(f"{name}s", reconciler.sync, interval=config.mirror_sync_interval)],
                config.sync_timeout,
            )
        )

    portal_children = PortalChildResources(platform, cluster, config, stores.portals, stores.ingresses)
    portal = new_portal_reconciler(platform, cluster, stores.portals, portal_children)
    runners.append(
        ReconcilerRunner(
            "portal",
            [
                Job("portals", portal.sync, interval=config.mirror_sync_interval),
                Job(
                    "portal-certificates",
                    portal_children.sync_certificates,
                    interval=config.cert_sync_interval,
                    retry_interval=config.cert_retry_interval,
                ),
            ],
            config.sync_timeout,
        )
    )
    return runners
