"""Deterministic names for the objects derived from APIGateways and APIPortals.

Every derived name embeds a 32-bit FNV-1 hash of its inputs. The hash keeps the
name stable from one reconciliation to the next and reduces the chance of
colliding with an object the agent does not own, while staying under the
63 characters limit of Kubernetes names.
"""

from __future__ import annotations

import re

from ..constants import CUSTOM_DOMAIN_SECRET_NAME_PREFIX, PORTAL_CUSTOM_DOMAIN_SECRET_NAME_PREFIX

FNV32_OFFSET_BASIS = 0x811C9DC5
FNV32_PRIME = 0x01000193

_GROUP_SUFFIX = re.compile(r"\d+(-hub)?")


def fnv32(value: str) -> int:
    """Compute the 32-bit FNV-1 hash of a string.

    Used for collision avoidance in names only, never for security.
    """
    h = FNV32_OFFSET_BASIS
    for byte in value.encode("utf-8"):
        h = (h * FNV32_PRIME) & 0xFFFFFFFF
        h ^= byte
    return h


def ingress_base_name(gateway_name: str) -> str:
    """Prefix shared by every ingress of a gateway: {gateway}-{hash(gateway)}."""
    return f"{gateway_name}-{fnv32(gateway_name)}"


def hub_domain_ingress_name(gateway_name: str, groups: str) -> str:
    """Name of the hub domain ingress: {gateway}-{hash(gateway)}-{hash(groups)}-hub."""
    return f"{ingress_base_name(gateway_name)}-{fnv32(groups)}-hub"


def custom_domains_ingress_name(gateway_name: str, groups: str) -> str:
    """Name of the custom domains ingress: {gateway}-{hash(gateway)}-{hash(groups)}."""
    return f"{ingress_base_name(gateway_name)}-{fnv32(groups)}"


def strip_prefix_middleware_name(gateway_name: str) -> str:
    """Name of the stripPrefix middleware: {gateway}-{hash(gateway)}-stripprefix."""
    return f"{gateway_name}-{fnv32(gateway_name)}-stripprefix"


def traefik_middleware_reference(namespace: str, gateway_name: str) -> str:
    """Reference to the stripPrefix middleware as understood by Traefik."""
    return f"{namespace}-{strip_prefix_middleware_name(gateway_name)}@kubernetescrd"


def custom_domain_secret_name(gateway_name: str) -> str:
    """Name of the secret holding the custom domains certificate of a gateway."""
    return f"{CUSTOM_DOMAIN_SECRET_NAME_PREFIX}-{fnv32(gateway_name)}"


def is_gateway_ingress(ingress_name: str, gateway_name: str) -> bool:
    """Check whether an ingress name was derived from the given gateway.

    Only group ingress names match, the portal ingress of a portal sharing
    the gateway name does not.
    """
    prefix = f"{ingress_base_name(gateway_name)}-"
    if not ingress_name.startswith(prefix):
        return False
    return _GROUP_SUFFIX.fullmatch(ingress_name[len(prefix):]) is not None


def portal_ingress_name(portal_name: str) -> str:
    """Name of the ingress serving a portal UI: {portal}-{hash(portal)}-portal-ing."""
    return f"{portal_name}-{fnv32(portal_name)}-portal-ing"


def portal_custom_domain_secret_name(portal_name: str) -> str:
    """Name of the secret holding the custom domains certificate of a portal."""
    return f"{PORTAL_CUSTOM_DOMAIN_SECRET_NAME_PREFIX}-{fnv32(portal_name)}"
