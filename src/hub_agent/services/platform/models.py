"""Models of the resources served by the Hub platform."""

from __future__ import annotations

import base64
from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class CustomDomain:
    """A custom domain and its verification state."""

    name: str
    verified: bool = False

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CustomDomain":
        return cls(name=data["name"], verified=bool(data.get("verified", False)))


@dataclass
class Gateway:
    """A gateway exposing a set of APIs through its accesses."""

    name: str
    version: str = ""
    labels: dict[str, str] = field(default_factory=dict)
    accesses: list[str] = field(default_factory=list)
    hub_domain: str = ""
    custom_domains: list[CustomDomain] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Gateway":
        return cls(
            name=data["name"],
            version=data.get("version", ""),
            labels=dict(data.get("labels") or {}),
            accesses=list(data.get("accesses") or []),
            hub_domain=data.get("hubDomain", ""),
            custom_domains=[CustomDomain.from_dict(d) for d in data.get("customDomains") or []],
        )

    @property
    def verified_custom_domains(self) -> list[str]:
        return [d.name for d in self.custom_domains if d.verified]


@dataclass
class Access:
    """Defines which groups can reach a set of APIs and collections."""

    name: str
    version: str = ""
    labels: dict[str, str] = field(default_factory=dict)
    groups: list[str] = field(default_factory=list)
    api_selector: dict[str, Any] | None = None
    api_collection_selector: dict[str, Any] | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Access":
        return cls(
            name=data["name"],
            version=data.get("version", ""),
            labels=dict(data.get("labels") or {}),
            groups=list(data.get("groups") or []),
            api_selector=data.get("apiSelector"),
            api_collection_selector=data.get("apiCollectionSelector"),
        )


@dataclass
class Collection:
    """A named group of APIs sharing a path prefix."""

    name: str
    version: str = ""
    labels: dict[str, str] = field(default_factory=dict)
    path_prefix: str = ""
    api_selector: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Collection":
        return cls(
            name=data["name"],
            version=data.get("version", ""),
            labels=dict(data.get("labels") or {}),
            path_prefix=data.get("pathPrefix", ""),
            api_selector=dict(data.get("apiSelector") or {}),
        )


@dataclass
class API:
    """An API backed by a service of the cluster."""

    name: str
    namespace: str
    path_prefix: str
    service_name: str
    service_port: dict[str, Any]
    version: str = ""
    labels: dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "API":
        service = data.get("service") or {}
        return cls(
            name=data["name"],
            namespace=data.get("namespace", "default"),
            path_prefix=data.get("pathPrefix", ""),
            service_name=service.get("name", ""),
            service_port=dict(service.get("port") or {}),
            version=data.get("version", ""),
            labels=dict(data.get("labels") or {}),
        )


@dataclass
class Portal:
    """A developer portal exposing a set of APIs."""

    name: str
    version: str = ""
    description: str = ""
    hub_domain: str = ""
    custom_domains: list[CustomDomain] = field(default_factory=list)
    api_hub_domain: str = ""
    api_custom_domains: list[CustomDomain] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Portal":
        return cls(
            name=data["name"],
            version=data.get("version", ""),
            description=data.get("description", ""),
            hub_domain=data.get("hubDomain", ""),
            custom_domains=[CustomDomain.from_dict(d) for d in data.get("customDomains") or []],
            api_hub_domain=data.get("apiHubDomain", ""),
            api_custom_domains=[CustomDomain.from_dict(d) for d in data.get("apiCustomDomains") or []],
        )


@dataclass(frozen=True)
class Certificate:
    """A certificate and its private key, PEM encoded."""

    certificate: bytes = b""
    private_key: bytes = b""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Certificate":
        return cls(
            certificate=base64.b64decode(data.get("certificate") or ""),
            private_key=base64.b64decode(data.get("privateKey") or ""),
        )

    def is_empty(self) -> bool:
        return not self.certificate and not self.private_key

    def __repr__(self) -> str:
        return f"Certificate(certificate=<{len(self.certificate)} bytes>, private_key=<redacted>)"
