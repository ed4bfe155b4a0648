"""Reconciler mirroring the platform apis into API resources."""

from __future__ import annotations

from ..builders.api import build_api
from ..services.kube.client import ClusterClient
from ..services.kube.resources import APIS
from ..services.kube.store import ObjectStore
from ..services.platform.base import Platform
from ..services.platform.models import API
from .mirror import MirrorReconciler, SimpleCapability


def new_api_reconciler(
    platform: Platform,
    cluster: ClusterClient,
    store: ObjectStore,
) -> MirrorReconciler[API]:
    """Create the API reconciler."""
    capability = SimpleCapability(APIS, platform.get_apis, build_api)
    return MirrorReconciler(capability, cluster, store)
