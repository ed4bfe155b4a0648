"""Generic reconciler mirroring platform objects into cluster resources."""

from __future__ import annotations

import copy
from typing import Any, Callable, Generic, Optional, Protocol, TypeVar

from ..constants import PROPAGATION_FOREGROUND
from ..services.kube.client import ClusterClient
from ..services.kube.resources import ResourceKind, object_key
from ..services.kube.store import ObjectStore
from ..utils.context import PassContext
from ..utils.errors import is_not_found
from ..utils.events import emit_synced
from .base import BaseHandler

_T = TypeVar("_T")

AfterSync = Callable[[PassContext, dict[str, Any]], None]


class MirrorCapability(Protocol[_T]):
    """What a reconciler needs to know about the kind it mirrors."""

    kind: ResourceKind

    def fetch_desired(self, ctx: PassContext) -> list[_T]:
        """Fetch the desired objects from the platform."""
        ...

    def build_resource(self, item: _T) -> dict[str, Any]:
        """Build the cluster resource of a desired object."""
        ...

    def version_of(self, resource: dict[str, Any]) -> str:
        """Get the platform version recorded on a cluster resource."""
        ...


def status_version(resource: dict[str, Any]) -> str:
    return (resource.get("status") or {}).get("version", "")


def merge_metadata(current: dict[str, Any], desired: dict[str, Any]) -> dict[str, Any]:
    """Keep the cluster assigned metadata of a resource, with the desired labels."""
    metadata = copy.deepcopy(current.get("metadata") or {})
    labels = (desired.get("metadata") or {}).get("labels")
    if labels:
        metadata["labels"] = dict(labels)
    else:
        metadata.pop("labels", None)
    return metadata


class MirrorReconciler(BaseHandler, Generic[_T]):
    """Converge the cluster resources of one kind on the platform's list.

    Resources missing from the cluster are created. Existing ones are rebuilt
    on top of their cluster metadata and only updated when the platform
    version changed. Resources the platform no longer lists are deleted in
    the foreground, so that their children go first.
    """

    def __init__(
        self,
        capability: MirrorCapability[_T],
        cluster: ClusterClient,
        store: ObjectStore,
        after_sync: Optional[AfterSync] = None,
    ) -> None:
        super().__init__(capability.kind.kind)
        self.capability = capability
        self.cluster = cluster
        self.store = store
        self.after_sync = after_sync

    def sync(self, ctx: PassContext) -> None:
        """Run one reconciliation pass."""
        self.reconcile_with_metrics(lambda: self._sync(ctx))

    def _sync(self, ctx: PassContext) -> None:
        kind = self.capability.kind
        try:
            desired = self.capability.fetch_desired(ctx)
        except Exception as e:
            self.log_error({"name": kind.plural}, f"Unable to fetch {kind.kind} objects", error=e, reason="FetchFailed")
            raise

        existing = {object_key(obj): obj for obj in self.store.list()}

        for item in desired:
            resource = self.capability.build_resource(item)
            current = existing.pop(object_key(resource), None)
            try:
                if current is None:
                    resource = self._create(ctx, resource)
                else:
                    resource = self._update(ctx, current, resource)
            except Exception as e:
                self.handle_sync_error(current or resource, f"Unable to synchronize {kind.kind}", e)
                continue

            if self.after_sync is None:
                continue
            try:
                self.after_sync(ctx, resource)
            except Exception as e:
                self.handle_sync_error(resource, f"Unable to synchronize {kind.kind} child resources", e)

        for obj in existing.values():
            self._delete(ctx, obj)

    def _create(self, ctx: PassContext, resource: dict[str, Any]) -> dict[str, Any]:
        created = self.cluster.create(ctx, self.capability.kind, resource)
        self.log_debug(created, f"{self.kind} created", event="created", reason="Created")
        emit_synced(created)
        return created

    def _update(self, ctx: PassContext, current: dict[str, Any], resource: dict[str, Any]) -> dict[str, Any]:
        resource["metadata"] = merge_metadata(current, resource)
        if self.capability.version_of(resource) == self.capability.version_of(current):
            return resource

        updated = self.cluster.update(ctx, self.capability.kind, resource)
        self.log_debug(updated, f"{self.kind} updated", event="updated", reason="Updated")
        emit_synced(updated)
        return updated

    def _delete(self, ctx: PassContext, obj: dict[str, Any]) -> None:
        namespace, name = object_key(obj)
        try:
            self.cluster.delete(
                ctx, self.capability.kind, name, namespace, propagation_policy=PROPAGATION_FOREGROUND
            )
        except Exception as e:
            if is_not_found(e):
                return
            self.log_error(obj, f"Unable to delete {self.kind}", error=e, reason="DeleteFailed")
            return
        self.log_debug(obj, f"{self.kind} deleted", event="deleted", reason="Deleted")


class SimpleCapability(Generic[_T]):
    """Capability built from a platform fetch function and a resource builder."""

    def __init__(
        self,
        kind: ResourceKind,
        fetch: Callable[[PassContext], list[_T]],
        build: Callable[[_T], dict[str, Any]],
    ) -> None:
        self.kind = kind
        self._fetch = fetch
        self._build = build

    def fetch_desired(self, ctx: PassContext) -> list[_T]:
        return self._fetch(ctx)

    def build_resource(self, item: _T) -> dict[str, Any]:
        return self._build(item)

    def version_of(self, resource: dict[str, Any]) -> str:
        return status_version(resource)
