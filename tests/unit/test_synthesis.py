"""Tests for the synthesis of ingresses and middlewares."""

from __future__ import annotations

import pytest
from kubernetes.client.exceptions import ApiException

from hub_agent.handlers.resolution import ResolvedAPI
from hub_agent.handlers.synthesis import ResourceSynthesizer, group_apis, needs_update
from hub_agent.services.kube.resources import INGRESSES, MIDDLEWARES

SERVICE = {"name": "petstore-svc", "port": {"number": 80}}
HUB_INGRESS = "gateway-3056690829-4249197200-hub"
CUSTOM_INGRESS = "gateway-3056690829-4249197200"
MIDDLEWARE = "gateway-3056690829-stripprefix"


def _gateway(custom_domains: list[str] | None = None) -> dict:
    return {
        "apiVersion": "hub.traefik.io/v1alpha1",
        "kind": "APIGateway",
        "metadata": {"name": "gateway", "uid": "uid-gw"},
        "spec": {"apiAccesses": ["products"]},
        "status": {"hubDomain": "brave-lion-123.hub-traefik.io", "customDomains": custom_domains or []},
    }


def _api(name: str, prefix: str, groups: str = "suppliers") -> ResolvedAPI:
    return ResolvedAPI(groups, name, "default", prefix, SERVICE)


@pytest.fixture
def synthesizer(cluster, config) -> ResourceSynthesizer:
    return ResourceSynthesizer(cluster, config)


class TestHelpers:
    """Test cases for the synthesis helpers."""

    def test_group_apis_keeps_order(self):
        """Test that grouping keeps the first seen order."""
        apis = [_api("a", "/a", "x"), _api("b", "/b", "y"), _api("c", "/c", "x")]

        grouped = group_apis(apis)

        assert list(grouped) == ["x", "y"]
        assert [api.name for api in grouped["x"]] == ["a", "c"]

    def test_needs_update(self):
        """Test drift detection."""
        desired = {"metadata": {"labels": {"a": "1"}, "annotations": {}, "ownerReferences": []}, "spec": {"x": 1}}
        live = {"metadata": {"labels": {"a": "1"}, "uid": "u", "resourceVersion": "3"}, "spec": {"x": 1}}

        assert not needs_update(live, desired)
        assert needs_update({**live, "spec": {"x": 2}}, desired)
        assert needs_update({**live, "metadata": {"labels": {}}}, desired)


class TestResourceSynthesizer:
    """Test cases for ResourceSynthesizer."""

    def test_hub_domain_only(self, synthesizer, cluster, ctx):
        """Test the objects of a gateway without verified custom domains."""
        upserted = synthesizer.upsert_namespace(ctx, _gateway(), "default", [_api("petstore", "/petstore")])

        assert upserted == {HUB_INGRESS}
        assert cluster.writes == [
            ("create", "Middleware", "default", MIDDLEWARE),
            ("create", "Ingress", "default", HUB_INGRESS),
        ]
        ingress = cluster.find(INGRESSES, HUB_INGRESS, "default")
        annotations = ingress["metadata"]["annotations"]
        assert annotations["traefik.ingress.kubernetes.io/router.entrypoints"] == "traefikhub-tunl"
        assert annotations["traefik.ingress.kubernetes.io/router.middlewares"] == (
            "default-gateway-3056690829-stripprefix@kubernetescrd"
        )
        assert ingress["spec"]["tls"] == [{"hosts": ["brave-lion-123.hub-traefik.io"], "secretName": "hub-certificate"}]
        assert ingress["metadata"]["ownerReferences"][0]["uid"] == "uid-gw"

    def test_custom_domains_ingress(self, synthesizer, cluster, ctx):
        """Test that verified custom domains get their own ingress."""
        gateway = _gateway(["api.hello.example.com"])

        upserted = synthesizer.upsert_namespace(ctx, gateway, "default", [_api("petstore", "/petstore")])

        assert upserted == {HUB_INGRESS, CUSTOM_INGRESS}
        ingress = cluster.find(INGRESSES, CUSTOM_INGRESS, "default")
        assert [rule["host"] for rule in ingress["spec"]["rules"]] == ["api.hello.example.com"]
        assert ingress["spec"]["tls"][0]["secretName"] == "hub-certificate-custom-domains-3056690829"
        assert ingress["metadata"]["annotations"]["traefik.ingress.kubernetes.io/router.entrypoints"] == "traefikhub-api"

    def test_one_ingress_per_group_key(self, synthesizer, cluster, ctx):
        """Test that each group key gets its ingress, sharing the middleware."""
        apis = [_api("petstore", "/petstore", "suppliers"), _api("catalog", "/catalog/v2", "supply-chain")]

        upserted = synthesizer.upsert_namespace(ctx, _gateway(), "default", apis)

        assert upserted == {HUB_INGRESS, "gateway-3056690829-3477267184-hub"}
        middleware = cluster.find(MIDDLEWARES, MIDDLEWARE, "default")
        assert middleware["spec"]["stripPrefix"]["prefixes"] == ["/catalog/v2", "/petstore"]

    def test_second_pass_writes_nothing(self, synthesizer, cluster, ctx):
        """Test that unchanged objects are not updated."""
        apis = [_api("petstore", "/petstore")]
        synthesizer.upsert_namespace(ctx, _gateway(["api.hello.example.com"]), "default", apis)
        writes = len(cluster.writes)

        synthesizer.upsert_namespace(ctx, _gateway(["api.hello.example.com"]), "default", apis)

        assert len(cluster.writes) == writes

    def test_drift_is_corrected(self, synthesizer, cluster, ctx):
        """Test that an edited ingress is restored and foreign metadata replaced."""
        apis = [_api("petstore", "/petstore")]
        synthesizer.upsert_namespace(ctx, _gateway(), "default", apis)
        live = cluster.find(INGRESSES, HUB_INGRESS, "default")
        live["spec"]["ingressClassName"] = "nginx"
        live["metadata"]["annotations"]["extra"] = "x"
        cluster.objects[("Ingress", "default", HUB_INGRESS)] = live

        synthesizer.upsert_namespace(ctx, _gateway(), "default", apis)

        ingress = cluster.find(INGRESSES, HUB_INGRESS, "default")
        assert cluster.writes[-1] == ("update", "Ingress", "default", HUB_INGRESS)
        assert ingress["spec"]["ingressClassName"] == "traefik-hub"
        assert "extra" not in ingress["metadata"]["annotations"]

    def test_middleware_prefixes_updated(self, synthesizer, cluster, ctx):
        """Test that a namespace gaining an API updates its middleware prefixes."""
        synthesizer.upsert_namespace(ctx, _gateway(), "default", [_api("a", "/a")])

        synthesizer.upsert_namespace(ctx, _gateway(), "default", [_api("a", "/a"), _api("b", "/bb")])

        middleware = cluster.find(MIDDLEWARES, MIDDLEWARE, "default")
        assert ("update", "Middleware", "default", MIDDLEWARE) in cluster.writes
        assert middleware["spec"]["stripPrefix"]["prefixes"] == ["/bb", "/a"]
        assert "annotations" not in middleware["metadata"]

    def test_middleware_drift_is_corrected(self, synthesizer, cluster, ctx):
        """Test that foreign annotations and edited prefixes on a middleware are removed."""
        apis = [_api("petstore", "/petstore")]
        synthesizer.upsert_namespace(ctx, _gateway(), "default", apis)
        live = cluster.find(MIDDLEWARES, MIDDLEWARE, "default")
        live["spec"]["stripPrefix"]["prefixes"] = ["/other"]
        live["metadata"]["annotations"] = {"extra": "x"}
        cluster.objects[("Middleware", "default", MIDDLEWARE)] = live

        synthesizer.upsert_namespace(ctx, _gateway(), "default", apis)

        middleware = cluster.find(MIDDLEWARES, MIDDLEWARE, "default")
        assert middleware["spec"]["stripPrefix"]["prefixes"] == ["/petstore"]
        assert "annotations" not in middleware["metadata"]

    def test_owner_references_change_updates(self, synthesizer, cluster, ctx):
        """Test that objects are updated when only their owner references differ."""
        apis = [_api("petstore", "/petstore")]
        synthesizer.upsert_namespace(ctx, _gateway(), "default", apis)
        writes = len(cluster.writes)
        gateway = _gateway()
        gateway["metadata"]["uid"] = "uid-gw-recreated"

        synthesizer.upsert_namespace(ctx, gateway, "default", apis)

        assert cluster.writes[writes:] == [
            ("update", "Middleware", "default", MIDDLEWARE),
            ("update", "Ingress", "default", HUB_INGRESS),
        ]
        for kind, name in ((MIDDLEWARES, MIDDLEWARE), (INGRESSES, HUB_INGRESS)):
            owners = cluster.find(kind, name, "default")["metadata"]["ownerReferences"]
            assert [ref["uid"] for ref in owners] == ["uid-gw-recreated"]

    def test_middleware_failure_stops_namespace(self, synthesizer, cluster, ctx):
        """Test that no ingress is written when the middleware cannot be."""
        cluster.fail("create", MIDDLEWARES, MIDDLEWARE)

        with pytest.raises(ApiException):
            synthesizer.upsert_namespace(ctx, _gateway(), "default", [_api("petstore", "/petstore")])

        assert cluster.names(INGRESSES) == []

    def test_get_error_propagates(self, synthesizer, cluster, ctx):
        """Test that errors other than not found are raised."""
        cluster.fail("get", INGRESSES, HUB_INGRESS, ApiException(status=403, reason="Forbidden"))

        with pytest.raises(ApiException) as exc_info:
            synthesizer.upsert_namespace(ctx, _gateway(), "default", [_api("petstore", "/petstore")])

        assert exc_info.value.status == 403
