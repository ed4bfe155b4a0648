"""Reconciler mirroring the platform accesses into APIAccess resources."""

from __future__ import annotations

from ..builders.access import build_access
from ..services.kube.client import ClusterClient
from ..services.kube.resources import ACCESSES
from ..services.kube.store import ObjectStore
from ..services.platform.base import Platform
from ..services.platform.models import Access
from .mirror import MirrorReconciler, SimpleCapability


def new_access_reconciler(
    platform: Platform,
    cluster: ClusterClient,
    store: ObjectStore,
) -> MirrorReconciler[Access]:
    """Create the APIAccess reconciler."""
    capability = SimpleCapability(ACCESSES, platform.get_accesses, build_access)
    return MirrorReconciler(capability, cluster, store)
