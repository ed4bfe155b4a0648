"""In-memory view of cluster objects, fed by watch events."""

from __future__ import annotations

import copy
import logging
import threading
from typing import TYPE_CHECKING, Any, Optional

from ...utils.context import PassContext
from ...utils.selectors import Selector
from .resources import ResourceKind, object_key

if TYPE_CHECKING:
    from .client import ClusterClient

logger = logging.getLogger(__name__)


class ObjectStore:
    """Cached list of the objects of one kind.

    Reads are served from memory. The store is primed with a list call and
    then kept current by watch events, so listing never hits the API server.
    """

    def __init__(self, kind: ResourceKind, label_selector: Optional[str] = None) -> None:
        """Initialize the store.

        Args:
            kind: Kind of the stored objects
            label_selector: Selector restricting the stored objects, used when priming
        """
        self.kind = kind
        self.label_selector = label_selector
        self._objects: dict[tuple[str, str], dict[str, Any]] = {}
        self._lock = threading.Lock()
        self._primed = False

    @property
    def primed(self) -> bool:
        return self._primed

    def prime(self, cluster: "ClusterClient", ctx: PassContext) -> None:
        """Replace the content of the store with a fresh list from the cluster."""
        objects = cluster.list(ctx, self.kind, label_selector=self.label_selector)
        self.replace_all(objects)
        logger.debug(f"Primed {self.kind.kind} store with {len(objects)} objects")

    def replace_all(self, objects: list[dict[str, Any]]) -> None:
        with self._lock:
            self._objects = {object_key(obj): copy.deepcopy(obj) for obj in objects}
            self._primed = True

    def apply_event(self, event_type: Optional[str], obj: dict[str, Any]) -> None:
        """Apply a watch event.

        Args:
            event_type: ADDED, MODIFIED or DELETED; None for objects of the initial listing
            obj: Object carried by the event
        """
        key = object_key(obj)
        with self._lock:
            if event_type == "DELETED":
                self._objects.pop(key, None)
            else:
                self._objects[key] = copy.deepcopy(obj)

    def get(self, name: str, namespace: str = "") -> Optional[dict[str, Any]]:
        with self._lock:
            obj = self._objects.get((namespace, name))
        return copy.deepcopy(obj) if obj is not None else None

    def list(
        self,
        namespace: Optional[str] = None,
        selector: Optional[Selector] = None,
    ) -> list[dict[str, Any]]:
        """List stored objects.

        Args:
            namespace: Only return objects of this namespace
            selector: Only return objects whose labels match

        Returns:
            Copies of the matching objects, sorted by namespace and name
        """
        with self._lock:
            items = sorted(self._objects.items())

        result = []
        for (obj_namespace, _), obj in items:
            if namespace is not None and obj_namespace != namespace:
                continue
            labels = (obj.get("metadata") or {}).get("labels") or {}
            if selector is not None and not selector.matches(labels):
                continue
            result.append(copy.deepcopy(obj))
        return result

    def __len__(self) -> int:
        with self._lock:
            return len(self._objects)
