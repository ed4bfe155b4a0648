"""Kubernetes client facade working on plain dict objects."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Iterator, Optional

from kubernetes import client, config

from ... import metrics
from ...constants import FIELD_MANAGER
from ...utils.context import PassContext
from ...utils.rate_limit import rate_limit_k8s
from .resources import INGRESSES, SECRETS, ResourceKind

logger = logging.getLogger(__name__)


@contextmanager
def _track(kind: ResourceKind, operation: str) -> Iterator[None]:
    try:
        yield
        metrics.object_operations_total.labels(kind=kind.kind, operation=operation, result="success").inc()
    except Exception:
        metrics.object_operations_total.labels(kind=kind.kind, operation=operation, result="error").inc()
        raise


class ClusterClient:
    """Typed get/list/create/update/delete over every kind handled by the agent.

    Objects are exchanged as dicts in their wire form, whatever API group serves
    them. Every call is bounded by the remaining time of the pass context.
    """

    def __init__(self, api_client: Optional[client.ApiClient] = None) -> None:
        self.api_client = api_client or client.ApiClient()
        self.core = client.CoreV1Api(self.api_client)
        self.networking = client.NetworkingV1Api(self.api_client)
        self.custom = client.CustomObjectsApi(self.api_client)

    @classmethod
    def from_environment(cls) -> "ClusterClient":
        """Build a client from the in-cluster configuration, or the kube config outside a cluster."""
        try:
            config.load_incluster_config()
        except config.ConfigException:
            config.load_kube_config()
        return cls()

    def get(self, ctx: PassContext, kind: ResourceKind, name: str, namespace: str = "") -> dict[str, Any]:
        """Get an object.

        Raises:
            ApiException: With status 404 when the object does not exist
        """
        timeout = ctx.remaining()
        if kind.is_custom:
            if kind.namespaced:
                return self.custom.get_namespaced_custom_object(
                    kind.group, kind.version, namespace, kind.plural, name, _request_timeout=timeout
                )
            return self.custom.get_cluster_custom_object(
                kind.group, kind.version, kind.plural, name, _request_timeout=timeout
            )

        if kind == INGRESSES:
            obj = self.networking.read_namespaced_ingress(name, namespace, _request_timeout=timeout)
        elif kind == SECRETS:
            obj = self.core.read_namespaced_secret(name, namespace, _request_timeout=timeout)
        else:
            raise ValueError(f"unsupported kind {kind.kind}")
        return self._to_dict(kind, obj)

    def list(
        self,
        ctx: PassContext,
        kind: ResourceKind,
        namespace: Optional[str] = None,
        label_selector: Optional[str] = None,
    ) -> list[dict[str, Any]]:
        """List objects, across all namespaces unless one is given."""
        timeout = ctx.remaining()
        kwargs: dict[str, Any] = {"_request_timeout": timeout}
        if label_selector:
            kwargs["label_selector"] = label_selector

        if kind.is_custom:
            if kind.namespaced and namespace:
                resp = self.custom.list_namespaced_custom_object(
                    kind.group, kind.version, namespace, kind.plural, **kwargs
                )
            else:
                resp = self.custom.list_cluster_custom_object(kind.group, kind.version, kind.plural, **kwargs)
            return [self._with_type(kind, item) for item in resp.get("items", [])]

        if kind == INGRESSES:
            if namespace:
                resp = self.networking.list_namespaced_ingress(namespace, **kwargs)
            else:
                resp = self.networking.list_ingress_for_all_namespaces(**kwargs)
        elif kind == SECRETS:
            if namespace:
                resp = self.core.list_namespaced_secret(namespace, **kwargs)
            else:
                resp = self.core.list_secret_for_all_namespaces(**kwargs)
        else:
            raise ValueError(f"unsupported kind {kind.kind}")
        return [self._to_dict(kind, item) for item in resp.items]

    @rate_limit_k8s
    def create(self, ctx: PassContext, kind: ResourceKind, body: dict[str, Any]) -> dict[str, Any]:
        """Create an object."""
        timeout = ctx.remaining()
        namespace = body["metadata"].get("namespace", "")
        with _track(kind, "create"):
            if kind.is_custom:
                if kind.namespaced:
                    return self.custom.create_namespaced_custom_object(
                        kind.group, kind.version, namespace, kind.plural, body,
                        field_manager=FIELD_MANAGER, _request_timeout=timeout,
                    )
                return self.custom.create_cluster_custom_object(
                    kind.group, kind.version, kind.plural, body,
                    field_manager=FIELD_MANAGER, _request_timeout=timeout,
                )

            if kind == INGRESSES:
                obj = self.networking.create_namespaced_ingress(
                    namespace, body, field_manager=FIELD_MANAGER, _request_timeout=timeout
                )
            elif kind == SECRETS:
                obj = self.core.create_namespaced_secret(
                    namespace, body, field_manager=FIELD_MANAGER, _request_timeout=timeout
                )
            else:
                raise ValueError(f"unsupported kind {kind.kind}")
            return self._to_dict(kind, obj)

    @rate_limit_k8s
    def update(self, ctx: PassContext, kind: ResourceKind, body: dict[str, Any]) -> dict[str, Any]:
        """Replace an object. The body must carry the resourceVersion it was read with."""
        timeout = ctx.remaining()
        name = body["metadata"]["name"]
        namespace = body["metadata"].get("namespace", "")
        with _track(kind, "update"):
            if kind.is_custom:
                if kind.namespaced:
                    return self.custom.replace_namespaced_custom_object(
                        kind.group, kind.version, namespace, kind.plural, name, body,
                        field_manager=FIELD_MANAGER, _request_timeout=timeout,
                    )
                return self.custom.replace_cluster_custom_object(
                    kind.group, kind.version, kind.plural, name, body,
                    field_manager=FIELD_MANAGER, _request_timeout=timeout,
                )

            if kind == INGRESSES:
                obj = self.networking.replace_namespaced_ingress(
                    name, namespace, body, field_manager=FIELD_MANAGER, _request_timeout=timeout
                )
            elif kind == SECRETS:
                obj = self.core.replace_namespaced_secret(
                    name, namespace, body, field_manager=FIELD_MANAGER, _request_timeout=timeout
                )
            else:
                raise ValueError(f"unsupported kind {kind.kind}")
            return self._to_dict(kind, obj)

    @rate_limit_k8s
    def delete(
        self,
        ctx: PassContext,
        kind: ResourceKind,
        name: str,
        namespace: str = "",
        propagation_policy: Optional[str] = None,
    ) -> None:
        """Delete an object.

        Raises:
            ApiException: With status 404 when the object does not exist
        """
        kwargs: dict[str, Any] = {"_request_timeout": ctx.remaining()}
        if propagation_policy:
            kwargs["propagation_policy"] = propagation_policy

        with _track(kind, "delete"):
            if kind.is_custom:
                if kind.namespaced:
                    self.custom.delete_namespaced_custom_object(
                        kind.group, kind.version, namespace, kind.plural, name, **kwargs
                    )
                else:
                    self.custom.delete_cluster_custom_object(kind.group, kind.version, kind.plural, name, **kwargs)
            elif kind == INGRESSES:
                self.networking.delete_namespaced_ingress(name, namespace, **kwargs)
            elif kind == SECRETS:
                self.core.delete_namespaced_secret(name, namespace, **kwargs)
            else:
                raise ValueError(f"unsupported kind {kind.kind}")

    def _to_dict(self, kind: ResourceKind, obj: Any) -> dict[str, Any]:
        return self._with_type(kind, self.api_client.sanitize_for_serialization(obj))

    @staticmethod
    def _with_type(kind: ResourceKind, obj: dict[str, Any]) -> dict[str, Any]:
        # List responses omit the type of their items
        obj.setdefault("apiVersion", kind.api_version)
        obj.setdefault("kind", kind.kind)
        return obj
