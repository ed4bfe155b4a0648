"""Hub platform interface."""

from __future__ import annotations

from typing import Protocol

from ...utils.context import PassContext
from .models import API, Access, Certificate, Collection, Gateway, Portal


class Platform(Protocol):
    """Protocol defining the desired state served by the Hub platform."""

    def get_gateways(self, ctx: PassContext) -> list[Gateway]:
        """Get the gateways of the cluster."""
        ...

    def get_apis(self, ctx: PassContext) -> list[API]:
        """Get the APIs of the cluster."""
        ...

    def get_collections(self, ctx: PassContext) -> list[Collection]:
        """Get the API collections of the cluster."""
        ...

    def get_accesses(self, ctx: PassContext) -> list[Access]:
        """Get the API accesses of the cluster."""
        ...

    def get_portals(self, ctx: PassContext) -> list[Portal]:
        """Get the API portals of the cluster."""
        ...

    def get_wildcard_certificate(self, ctx: PassContext) -> Certificate:
        """Get the certificate covering every hub domain."""
        ...

    def get_certificate_by_domains(self, ctx: PassContext, domains: list[str]) -> Certificate:
        """Get a certificate for the given domains."""
        ...
