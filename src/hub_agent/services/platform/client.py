"""Hub platform client."""

from __future__ import annotations

import logging
import time
from typing import Any, Callable, TypeVar
from urllib.parse import urljoin

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from ... import metrics
from ...utils.context import PassContext
from ...utils.errors import PlatformAPIError
from .models import API, Access, Certificate, Collection, Gateway, Portal

logger = logging.getLogger(__name__)

_T = TypeVar("_T")


class PlatformClient:
    """Client fetching the desired state from the Hub platform."""

    def __init__(
        self,
        base_url: str,
        token: str,
        session: requests.Session | None = None,
        max_retries: int = 4,
    ) -> None:
        """Initialize the platform client.

        Args:
            base_url: Base URL of the agent API of the platform
            token: Agent token
            session: Optional preconfigured session
            max_retries: Retries on connection errors and 5xx responses
        """
        self.base_url = base_url.rstrip("/") + "/"
        self.token = token

        if session is None:
            session = requests.Session()
            retry = Retry(
                total=max_retries,
                backoff_factor=0.5,
                status_forcelist=(500, 502, 503, 504),
                allowed_methods=frozenset(["GET"]),
                raise_on_status=False,
            )
            session.mount("http://", HTTPAdapter(max_retries=retry))
            session.mount("https://", HTTPAdapter(max_retries=retry))
        self.session = session

    def get_gateways(self, ctx: PassContext) -> list[Gateway]:
        """Get the gateways of the cluster."""
        return self._get_list(ctx, "gateways", Gateway.from_dict)

    def get_apis(self, ctx: PassContext) -> list[API]:
        """Get the APIs of the cluster."""
        return self._get_list(ctx, "apis", API.from_dict)

    def get_collections(self, ctx: PassContext) -> list[Collection]:
        """Get the API collections of the cluster."""
        return self._get_list(ctx, "collections", Collection.from_dict)

    def get_accesses(self, ctx: PassContext) -> list[Access]:
        """Get the API accesses of the cluster."""
        return self._get_list(ctx, "accesses", Access.from_dict)

    def get_portals(self, ctx: PassContext) -> list[Portal]:
        """Get the API portals of the cluster."""
        return self._get_list(ctx, "portals", Portal.from_dict)

    def get_wildcard_certificate(self, ctx: PassContext) -> Certificate:
        """Get the certificate covering every hub domain."""
        return Certificate.from_dict(self._get(ctx, "wildcard-certificate"))

    def get_certificate_by_domains(self, ctx: PassContext, domains: list[str]) -> Certificate:
        """Get a certificate for the given domains.

        Args:
            ctx: Pass context
            domains: Domains the certificate must cover

        Returns:
            The certificate
        """
        return Certificate.from_dict(self._get(ctx, "certificate", params={"domains": list(domains)}))

    def _get_list(self, ctx: PassContext, path: str, decode: Callable[[dict[str, Any]], _T]) -> list[_T]:
        return [decode(item) for item in self._get(ctx, path) or []]

    def _get(self, ctx: PassContext, path: str, params: dict[str, Any] | None = None) -> Any:
        """Perform an authenticated GET and decode its JSON body.

        Raises:
            PlatformAPIError: If the platform answers with a non 200 status
            requests.RequestException: On transport errors
            DeadlineExceeded: If the pass has no time left
        """
        operation = path.replace("-", "_")
        start_time = time.time()
        try:
            resp = self.session.get(
                urljoin(self.base_url, path),
                params=params,
                headers={"Authorization": f"Bearer {self.token}"},
                timeout=ctx.remaining(),
            )
            if resp.status_code != 200:
                raise PlatformAPIError(resp.status_code, _error_message(resp))
            body = resp.json()
            metrics.platform_call_total.labels(operation=operation, result="success").inc()
            return body
        except Exception:
            metrics.platform_call_total.labels(operation=operation, result="error").inc()
            raise
        finally:
            duration = time.time() - start_time
            metrics.platform_call_duration_seconds.labels(operation=operation).observe(duration)


def _error_message(resp: requests.Response) -> str:
    try:
        body = resp.json()
    except ValueError:
        return resp.text
    if isinstance(body, dict) and "error" in body:
        return str(body["error"])
    return resp.text
