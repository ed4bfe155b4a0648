"""Builder for the Traefik stripPrefix middleware of a gateway."""

from __future__ import annotations

from typing import Any, Iterable

from ..constants import KIND_MIDDLEWARE, LABEL_MANAGED_BY, MANAGED_BY_VALUE, TRAEFIK_API_GROUP_VERSION


def sort_prefixes(prefixes: Iterable[str]) -> list[str]:
    """Sort prefixes longest first, keeping the input order of equally long ones.

    Traefik strips the first matching prefix, so /api/v2 must come before /api.
    """
    return sorted(prefixes, key=len, reverse=True)


def build_strip_prefix_middleware(
    name: str,
    namespace: str,
    prefixes: Iterable[str],
    owner_reference: dict[str, Any],
) -> dict[str, Any]:
    """Build a stripPrefix middleware.

    Args:
        name: Name of the middleware
        namespace: Namespace of the middleware
        prefixes: Path prefixes of the APIs exposed in the namespace
        owner_reference: Reference to the owning APIGateway

    Returns:
        Middleware resource
    """
    return {
        "apiVersion": TRAEFIK_API_GROUP_VERSION,
        "kind": KIND_MIDDLEWARE,
        "metadata": {
            "name": name,
            "namespace": namespace,
            "labels": {LABEL_MANAGED_BY: MANAGED_BY_VALUE},
            "ownerReferences": [owner_reference],
        },
        "spec": {
            "stripPrefix": {
                "prefixes": sort_prefixes(prefixes),
                "forceSlash": False,
            },
        },
    }
