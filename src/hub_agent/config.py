"""Agent configuration loaded from the environment."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping

from .utils.errors import ConfigError

DEFAULT_PLATFORM_URL = "https://platform.hub.traefik.io/agent"


@dataclass(frozen=True)
class AgentConfig:
    """Runtime configuration of the agent.

    Intervals and timeouts are expressed in seconds.
    """

    platform_url: str
    token: str
    agent_namespace: str = "hub-agent"
    ingress_class_name: str = "traefik-hub"
    traefik_api_entrypoint: str = "traefikhub-api"
    traefik_tunnel_entrypoint: str = "traefikhub-tunl"
    dev_portal_service_name: str = "hub-agent-dev-portal"
    dev_portal_port: int = 80
    gateway_sync_interval: float = 60.0
    mirror_sync_interval: float = 60.0
    cert_sync_interval: float = 3600.0
    cert_retry_interval: float = 300.0
    sync_timeout: float = 20.0
    metrics_port: int = 8080

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "AgentConfig":
        """Build the configuration from environment variables.

        Args:
            environ: Mapping to read from (defaults to os.environ)

        Returns:
            Validated configuration

        Raises:
            ConfigError: If a required variable is missing or a value is invalid
        """
        env = os.environ if environ is None else environ

        token = env.get("HUB_TOKEN", "")
        if not token:
            raise ConfigError("HUB_TOKEN is required")

        platform_url = env.get("HUB_PLATFORM_URL", DEFAULT_PLATFORM_URL)
        if not platform_url.startswith(("http://", "https://")):
            raise ConfigError(f"HUB_PLATFORM_URL must be an http(s) URL, got {platform_url!r}")

        return cls(
            platform_url=platform_url,
            token=token,
            agent_namespace=env.get("AGENT_NAMESPACE", "hub-agent"),
            ingress_class_name=env.get("INGRESS_CLASS_NAME", "traefik-hub"),
            traefik_api_entrypoint=env.get("TRAEFIK_API_ENTRYPOINT", "traefikhub-api"),
            traefik_tunnel_entrypoint=env.get("TRAEFIK_TUNNEL_ENTRYPOINT", "traefikhub-tunl"),
            dev_portal_service_name=env.get("DEV_PORTAL_SERVICE_NAME", "hub-agent-dev-portal"),
            dev_portal_port=int(_positive_float(env, "DEV_PORTAL_PORT", 80)),
            gateway_sync_interval=_positive_float(env, "GATEWAY_SYNC_INTERVAL", 60.0),
            mirror_sync_interval=_positive_float(env, "MIRROR_SYNC_INTERVAL", 60.0),
            cert_sync_interval=_positive_float(env, "CERT_SYNC_INTERVAL", 3600.0),
            cert_retry_interval=_positive_float(env, "CERT_RETRY_INTERVAL", 300.0),
            sync_timeout=_positive_float(env, "SYNC_TIMEOUT", 20.0),
            metrics_port=int(_positive_float(env, "METRICS_PORT", 8080)),
        )


def _positive_float(env: Mapping[str, str], key: str, default: float) -> float:
    raw = env.get(key)
    if raw is None or raw == "":
        return default
    try:
        value = float(raw)
    except ValueError as e:
        raise ConfigError(f"{key} must be a number, got {raw!r}") from e
    if value <= 0:
        raise ConfigError(f"{key} must be positive, got {raw!r}")
    return value
