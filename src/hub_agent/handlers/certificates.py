"""Lifecycle of the certificates used by the gateway ingresses."""

from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Any, Callable, Iterator, Mapping, Optional

from .. import metrics
from ..config import AgentConfig
from ..constants import HUB_DOMAIN_SECRET_NAME, KIND_SECRET
from ..services.kube.client import ClusterClient
from ..services.kube.resources import SECRETS, owner_reference
from ..services.kube.store import ObjectStore
from ..services.platform.base import Platform
from ..services.platform.models import Certificate
from ..utils.context import PassContext
from ..utils.errors import CertificatePropagationError, is_not_found
from ..utils.naming import custom_domain_secret_name
from ..utils.secrets import append_owner_reference, build_tls_secret, encode_tls_data
from .base import BaseHandler


class ReadWriteLock:
    """Lock allowing many readers or a single writer."""

    def __init__(self) -> None:
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writing = False

    @contextmanager
    def read(self) -> Iterator[None]:
        with self._cond:
            while self._writing:
                self._cond.wait()
            self._readers += 1
        try:
            yield
        finally:
            with self._cond:
                self._readers -= 1
                if self._readers == 0:
                    self._cond.notify_all()

    @contextmanager
    def write(self) -> Iterator[None]:
        with self._cond:
            while self._writing or self._readers:
                self._cond.wait()
            self._writing = True
        try:
            yield
        finally:
            with self._cond:
                self._writing = False
                self._cond.notify_all()


class WildcardCertificateHolder:
    """Current wildcard certificate, shared by the gateway and certificate passes.

    Only the certificate pass writes it.
    """

    def __init__(self) -> None:
        self._lock = ReadWriteLock()
        self._certificate = Certificate()

    def get(self) -> Certificate:
        with self._lock.read():
            return self._certificate

    def set(self, certificate: Certificate) -> None:
        with self._lock.write():
            self._certificate = certificate

    def matches(self, certificate: Certificate) -> bool:
        """Compare byte for byte with the held certificate."""
        with self._lock.read():
            return (
                self._certificate.certificate == certificate.certificate
                and self._certificate.private_key == certificate.private_key
            )


ApisByNamespace = Callable[[dict[str, Any]], Mapping[str, Any]]


class TLSSecretWriter(BaseHandler):
    """Write TLS secrets shared by the resources owning them."""

    def __init__(self, cluster: ClusterClient) -> None:
        super().__init__(KIND_SECRET)
        self.cluster = cluster

    def upsert_secret(
        self,
        ctx: PassContext,
        certificate: Certificate,
        name: str,
        namespace: str,
        owner: Optional[dict[str, Any]] = None,
    ) -> None:
        """Create or update a TLS secret.

        An existing secret is only updated when its certificate or key differ
        or when the owner is not one of its owners yet.
        """
        reference = owner_reference(owner) if owner is not None else None
        try:
            secret = self.cluster.get(ctx, SECRETS, name, namespace)
        except Exception as e:
            if not is_not_found(e):
                raise
            secret = build_tls_secret(name, namespace, certificate.certificate, certificate.private_key, reference)
            self.cluster.create(ctx, SECRETS, secret)
            self.log_debug(secret, "Secret created", event="created", reason="Created")
            return

        meta = secret.setdefault("metadata", {})
        owners = list(meta.get("ownerReferences") or [])
        new_owners = append_owner_reference(owners, reference) if reference is not None else owners
        data = encode_tls_data(certificate.certificate, certificate.private_key)
        if (secret.get("data") or {}) == data and len(owners) == len(new_owners):
            return

        secret["data"] = data
        meta["ownerReferences"] = new_owners
        self.cluster.update(ctx, SECRETS, secret)
        self.log_debug(secret, "Secret updated", event="updated", reason="Updated")


class CertificateManager(TLSSecretWriter):
    """Keep the TLS secrets of the gateways up to date.

    The wildcard certificate of the hub domains is written to the agent
    namespace and to every namespace holding APIs of a gateway. The custom
    domains certificate of a gateway is fetched for its verified domains and
    written to the namespaces holding its APIs.
    """

    def __init__(
        self,
        platform: Platform,
        cluster: ClusterClient,
        config: AgentConfig,
        holder: WildcardCertificateHolder,
        gateways: ObjectStore,
        apis_by_namespace: ApisByNamespace,
    ) -> None:
        super().__init__(cluster)
        self.platform = platform
        self.config = config
        self.holder = holder
        self.gateways = gateways
        self.apis_by_namespace = apis_by_namespace
        # Set while a new wildcard certificate has not reached every gateway
        self._pending = False

    def sync_certificates(self, ctx: PassContext) -> None:
        """Refresh the wildcard certificate and propagate it to every gateway.

        A wildcard certificate equal to the held one is not written again. The
        custom domains certificates of every gateway are refreshed on each call.

        Raises:
            CertificatePropagationError: If some gateways could not be updated
        """
        try:
            self._sync_certificates(ctx)
        except Exception:
            metrics.certificate_sync_total.labels(result="error").inc()
            raise
        metrics.certificate_sync_total.labels(result="success").inc()

    def _sync_certificates(self, ctx: PassContext) -> None:
        wildcard = self.platform.get_wildcard_certificate(ctx)

        if not self.holder.matches(wildcard):
            self.upsert_secret(ctx, wildcard, HUB_DOMAIN_SECRET_NAME, self.config.agent_namespace)
            self.holder.set(wildcard)
            self._pending = True
            self.log_info(
                {"name": HUB_DOMAIN_SECRET_NAME, "namespace": self.config.agent_namespace},
                "Wildcard certificate refreshed",
                event="refreshed",
                reason="CertificateRefreshed",
            )

        failed = []
        for gateway in self.gateways.list():
            try:
                namespaces = self.apis_by_namespace(gateway)
                self.setup_certificates(ctx, gateway, namespaces, wildcard if self._pending else None)
            except Exception as e:
                self.log_error(gateway, "Unable to setup gateway certificates", error=e, reason="CertificateSetupFailed")
                failed.append(gateway["metadata"]["name"])

        if failed:
            raise CertificatePropagationError(failed)
        self._pending = False

    def setup_certificates(
        self,
        ctx: PassContext,
        gateway: dict[str, Any],
        apis_by_namespace: Mapping[str, Any],
        wildcard: Optional[Certificate],
    ) -> None:
        """Write the certificates of a gateway to the namespaces holding its APIs.

        Args:
            ctx: Pass context
            gateway: APIGateway resource
            apis_by_namespace: Resolved APIs of the gateway, keyed by namespace
            wildcard: Wildcard certificate to propagate, None or empty to skip it
        """
        if wildcard is not None and not wildcard.is_empty():
            for namespace in sorted(apis_by_namespace):
                self.upsert_secret(ctx, wildcard, HUB_DOMAIN_SECRET_NAME, namespace, gateway)

        domains = list((gateway.get("status") or {}).get("customDomains") or [])
        if not domains or not apis_by_namespace:
            return

        certificate = self.platform.get_certificate_by_domains(ctx, domains)
        secret_name = custom_domain_secret_name(gateway["metadata"]["name"])
        for namespace in sorted(apis_by_namespace):
            self.upsert_secret(ctx, certificate, secret_name, namespace, gateway)

