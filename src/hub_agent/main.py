"""Main entry point for the Hub agent."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

import kopf

from . import health
from . import logging as structured_logging
from . import tracing
from .agent import Stores, build_runners
from .config import AgentConfig
from .constants import API_GROUP, LABEL_MANAGED_BY, MANAGED_BY_VALUE
from .services.kube.client import ClusterClient
from .services.kube.store import ObjectStore
from .services.platform.client import PlatformClient

logger = logging.getLogger(__name__)


@kopf.on.startup()
async def configure(settings: kopf.OperatorSettings, memo: kopf.Memo, **_: Any) -> None:
    """Configure the operator and start the reconcilers."""
    # Set up structured JSON logging
    structured_logging.setup_structured_logging()

    settings.posting.level = logging.INFO
    settings.networking.request_timeout = 30.0
    settings.persistence.progress_storage = kopf.AnnotationsProgressStorage()
    settings.persistence.diffbase_storage = kopf.AnnotationsDiffBaseStorage()

    config = AgentConfig.from_env()
    tracing.initialize_tracing()
    health.start_metrics_server(config.metrics_port)

    cluster = ClusterClient.from_environment()
    platform = PlatformClient(config.platform_url, config.token)

    stores = Stores()
    await asyncio.to_thread(stores.prime, cluster, config.sync_timeout)
    memo.stores = stores

    memo.stop = asyncio.Event()
    memo.tasks = [
        asyncio.create_task(runner.run(memo.stop), name=f"reconciler-{runner.name}")
        for runner in build_runners(config, platform, cluster, stores)
    ]
    health.set_ready()
    logger.info("Hub agent started")


@kopf.on.cleanup()
async def shutdown(memo: kopf.Memo, **_: Any) -> None:
    """Stop the reconcilers, letting running passes finish."""
    health.set_ready(False)
    memo.stop.set()
    await asyncio.gather(*memo.tasks, return_exceptions=True)


def _apply(store: ObjectStore, event: dict[str, Any]) -> None:
    obj = event.get("object")
    if obj:
        store.apply_event(event.get("type"), obj)


@kopf.on.event(API_GROUP, "v1alpha1", "apigateways")
def watch_gateways(event: dict[str, Any], memo: kopf.Memo, **_: Any) -> None:
    _apply(memo.stores.gateways, event)


@kopf.on.event(API_GROUP, "v1alpha1", "apiaccesses")
def watch_accesses(event: dict[str, Any], memo: kopf.Memo, **_: Any) -> None:
    _apply(memo.stores.accesses, event)


@kopf.on.event(API_GROUP, "v1alpha1", "apicollections")
def watch_collections(event: dict[str, Any], memo: kopf.Memo, **_: Any) -> None:
    _apply(memo.stores.collections, event)


@kopf.on.event(API_GROUP, "v1alpha1", "apis")
def watch_apis(event: dict[str, Any], memo: kopf.Memo, **_: Any) -> None:
    _apply(memo.stores.apis, event)


@kopf.on.event(API_GROUP, "v1alpha1", "apiportals")
def watch_portals(event: dict[str, Any], memo: kopf.Memo, **_: Any) -> None:
    _apply(memo.stores.portals, event)


@kopf.on.event("networking.k8s.io", "v1", "ingresses", labels={LABEL_MANAGED_BY: MANAGED_BY_VALUE})
def watch_ingresses(event: dict[str, Any], memo: kopf.Memo, **_: Any) -> None:
    _apply(memo.stores.ingresses, event)
