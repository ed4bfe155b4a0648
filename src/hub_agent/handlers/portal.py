"""Reconciler mirroring the platform portals into APIPortal resources.

Every APIPortal with verified custom domains also gets the ingress serving
its UI on those domains, in the agent namespace, and the secret holding the
certificate of those domains.
"""

from __future__ import annotations

from typing import Any, Optional

from ..builders.portal import build_portal, build_portal_ingress
from ..config import AgentConfig
from ..services.kube.client import ClusterClient
from ..services.kube.resources import INGRESSES, PORTALS, owner_reference
from ..services.kube.store import ObjectStore
from ..services.platform.base import Platform
from ..services.platform.models import Portal
from ..utils.context import PassContext
from ..utils.errors import CertificatePropagationError, is_not_found
from ..utils.naming import portal_custom_domain_secret_name, portal_ingress_name
from .certificates import TLSSecretWriter
from .mirror import MirrorReconciler, SimpleCapability
from .synthesis import upsert_object


def _custom_domains(portal: dict[str, Any]) -> list[str]:
    return list((portal.get("status") or {}).get("customDomains") or [])


class PortalChildResources(TLSSecretWriter):
    """Keep the UI ingress and the custom domains certificate of the portals up to date."""

    def __init__(
        self,
        platform: Platform,
        cluster: ClusterClient,
        config: AgentConfig,
        portals: ObjectStore,
        ingresses: ObjectStore,
    ) -> None:
        super().__init__(cluster)
        self.platform = platform
        self.config = config
        self.portals = portals
        self.ingresses = ingresses

    def sync_child_resources(self, ctx: PassContext, portal: dict[str, Any]) -> None:
        """Upsert the certificate and the UI ingress of a portal.

        A portal without verified custom domains has no UI ingress; a stale one
        is deleted.
        """
        name = portal["metadata"]["name"]
        if not _custom_domains(portal):
            self._delete_ingress(ctx, portal_ingress_name(name))
            return

        self.setup_certificates(ctx, portal)

        ingress = build_portal_ingress(
            name=portal_ingress_name(name),
            namespace=self.config.agent_namespace,
            hosts=_custom_domains(portal),
            service_name=self.config.dev_portal_service_name,
            service_port=self.config.dev_portal_port,
            entrypoint=self.config.traefik_api_entrypoint,
            secret_name=portal_custom_domain_secret_name(name),
            ingress_class_name=self.config.ingress_class_name,
            owner_reference=owner_reference(portal),
        )
        outcome = upsert_object(self.cluster, ctx, INGRESSES, ingress)
        if outcome is not None:
            self.log_debug(ingress, f"Portal ingress {outcome}", event=outcome, reason=outcome.capitalize())

    def setup_certificates(self, ctx: PassContext, portal: dict[str, Any]) -> None:
        """Write the certificate of a portal's verified custom domains to the agent namespace."""
        certificate = self.platform.get_certificate_by_domains(ctx, _custom_domains(portal))
        secret_name = portal_custom_domain_secret_name(portal["metadata"]["name"])
        self.upsert_secret(ctx, certificate, secret_name, self.config.agent_namespace, portal)

    def sync_certificates(self, ctx: PassContext) -> None:
        """Refresh the custom domains certificate of every portal.

        Raises:
            CertificatePropagationError: If some portals could not be updated
        """
        failed = []
        for portal in self.portals.list():
            if not _custom_domains(portal):
                continue
            try:
                self.setup_certificates(ctx, portal)
            except Exception as e:
                self.log_error(portal, "Unable to setup portal certificates", error=e, reason="CertificateSetupFailed")
                failed.append(portal["metadata"]["name"])

        if failed:
            raise CertificatePropagationError(failed, kind="portals")

    def _delete_ingress(self, ctx: PassContext, name: str) -> None:
        namespace = self.config.agent_namespace
        if self.ingresses.get(name, namespace) is None:
            return
        try:
            self.cluster.delete(ctx, INGRESSES, name, namespace)
        except Exception as e:
            if is_not_found(e):
                return
            raise
        self.log_debug({"name": name, "namespace": namespace}, "Portal ingress deleted", event="deleted", reason="Deleted")


def new_portal_reconciler(
    platform: Platform,
    cluster: ClusterClient,
    store: ObjectStore,
    children: Optional[PortalChildResources] = None,
) -> MirrorReconciler[Portal]:
    """Create the APIPortal reconciler.

    Args:
        platform: Hub platform client
        cluster: Cluster client
        store: Store of the APIPortals
        children: Child resources synchronized after each portal, if any
    """
    capability = SimpleCapability(PORTALS, platform.get_portals, build_portal)
    after_sync = children.sync_child_resources if children is not None else None
    return MirrorReconciler(capability, cluster, store, after_sync=after_sync)
