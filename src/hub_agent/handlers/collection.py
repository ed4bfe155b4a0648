"""Reconciler mirroring the platform collections into APICollection resources."""

from __future__ import annotations

from ..builders.collection import build_collection
from ..services.kube.client import ClusterClient
from ..services.kube.resources import COLLECTIONS
from ..services.kube.store import ObjectStore
from ..services.platform.base import Platform
from ..services.platform.models import Collection
from .mirror import MirrorReconciler, SimpleCapability


def new_collection_reconciler(
    platform: Platform,
    cluster: ClusterClient,
    store: ObjectStore,
) -> MirrorReconciler[Collection]:
    """Create the APICollection reconciler."""
    capability = SimpleCapability(COLLECTIONS, platform.get_collections, build_collection)
    return MirrorReconciler(capability, cluster, store)
