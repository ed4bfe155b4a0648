"""Reconcilers of the resources synchronized with the Hub platform."""

from .gateway import GatewayReconciler
from .mirror import MirrorReconciler, SimpleCapability

__all__ = ["GatewayReconciler", "MirrorReconciler", "SimpleCapability"]
