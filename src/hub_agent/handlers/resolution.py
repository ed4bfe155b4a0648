"""Resolution of the APIs exposed by a gateway."""

from __future__ import annotations

import logging
import posixpath
import re
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Any, Optional

from ..services.kube.store import ObjectStore
from ..utils.errors import SelectorError
from ..utils.selectors import label_selector_as_selector

logger = logging.getLogger(__name__)

_SEPARATORS = re.compile(r"/+")


@dataclass(frozen=True)
class ResolvedAPI:
    """An API reachable through a gateway by the given groups.

    Attributes:
        groups: Sorted, comma separated groups of the access exposing the API
        name: Name of the API
        namespace: Namespace of the API
        path_prefix: Path of the API, prefixed by its collection's path if any
        service: Backend service of the API (name and port)
    """

    groups: str
    name: str
    namespace: str
    path_prefix: str
    service: dict[str, Any] = field(hash=False, compare=False)


def join_path_prefix(prefix: str, path: str) -> str:
    """Join a collection prefix and an API path, collapsing duplicate separators.

    An empty prefix leaves the path untouched.
    """
    if not prefix:
        return path
    joined = _SEPARATORS.sub("/", f"{prefix}/{path}")
    return posixpath.normpath(joined)


def group_key(groups: list[str]) -> str:
    """Sorted, comma separated form of a group list."""
    return ",".join(sorted(groups))


class AccessResolver:
    """Resolve a gateway's accesses into the APIs they expose.

    Reads the cached accesses, collections and APIs. Nothing is deduplicated:
    an API reachable through two accesses with different groups is returned
    twice, once per group key, since each group key gets its own ingress.
    """

    def __init__(self, accesses: ObjectStore, collections: ObjectStore, apis: ObjectStore) -> None:
        self.accesses = accesses
        self.collections = collections
        self.apis = apis

    def apis_by_namespace(self, gateway: dict[str, Any]) -> dict[str, list[ResolvedAPI]]:
        """Resolve the APIs of a gateway, partitioned by namespace.

        Args:
            gateway: APIGateway resource

        Returns:
            Resolved APIs keyed by namespace

        Raises:
            SelectorError: If a selector of an access or collection is malformed
        """
        resolved: list[ResolvedAPI] = []
        for access_name in (gateway.get("spec") or {}).get("apiAccesses") or []:
            access = self.accesses.get(access_name)
            if access is None:
                logger.debug(f"APIAccess {access_name} of APIGateway {gateway['metadata']['name']} not found")
                continue
            resolved.extend(self._resolve_access(access))

        by_namespace: dict[str, list[ResolvedAPI]] = defaultdict(list)
        for api in resolved:
            by_namespace[api.namespace].append(api)
        return dict(by_namespace)

    def _resolve_access(self, access: dict[str, Any]) -> list[ResolvedAPI]:
        spec = access.get("spec") or {}
        groups = group_key(spec.get("groups") or [])

        resolved = [
            _resolve(api, groups)
            for api in self._find(self.apis, spec.get("apiSelector"), "APIs")
        ]

        for collection in self._find(self.collections, spec.get("apiCollectionSelector"), "collections"):
            collection_spec = collection.get("spec") or {}
            prefix = collection_spec.get("pathPrefix", "")
            for api in self._find(self.apis, collection_spec.get("apiSelector") or {}, "APIs"):
                resolved.append(_resolve(api, groups, prefix))

        return resolved

    @staticmethod
    def _find(store: ObjectStore, selector: Optional[dict[str, Any]], what: str) -> list[dict[str, Any]]:
        try:
            label_selector = label_selector_as_selector(selector)
        except SelectorError as e:
            raise SelectorError(f"convert {what} label selector: {e}") from e
        if label_selector is None:
            return []
        return store.list(selector=label_selector)


def _resolve(api: dict[str, Any], groups: str, prefix: str = "") -> ResolvedAPI:
    spec = api.get("spec") or {}
    meta = api.get("metadata") or {}
    return ResolvedAPI(
        groups=groups,
        name=meta.get("name", ""),
        namespace=meta.get("namespace", ""),
        path_prefix=join_path_prefix(prefix, spec.get("pathPrefix", "")),
        service=dict(spec.get("service") or {}),
    )
