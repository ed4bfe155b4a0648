"""Tests for the Kubernetes client facade."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest

from hub_agent.services.kube.client import ClusterClient
from hub_agent.services.kube.resources import APIS, GATEWAYS, INGRESSES, MIDDLEWARES, SECRETS


@pytest.fixture(autouse=True)
def no_rate_limit():
    with patch("hub_agent.utils.rate_limit._K8S_RATE_LIMIT_PER_SECOND", 10000.0):
        yield


@pytest.fixture
def kube() -> ClusterClient:
    kube = ClusterClient(api_client=MagicMock())
    kube.core = MagicMock()
    kube.networking = MagicMock()
    kube.custom = MagicMock()
    kube.api_client.sanitize_for_serialization.side_effect = lambda obj: dict(obj)
    return kube


class TestResourceKinds:
    """Test cases for resource kind descriptors."""

    def test_groups(self):
        """Test which kinds are served by the custom objects API."""
        assert GATEWAYS.group == "hub.traefik.io"
        assert GATEWAYS.version == "v1alpha1"
        assert GATEWAYS.is_custom
        assert MIDDLEWARES.is_custom
        assert not INGRESSES.is_custom
        assert SECRETS.group == ""
        assert not SECRETS.is_custom


class TestClusterClient:
    """Test cases for ClusterClient."""

    def test_get_cluster_scoped_custom_object(self, kube, ctx):
        """Test that cluster scoped custom objects are read without namespace."""
        kube.custom.get_cluster_custom_object.return_value = {"metadata": {"name": "gateway"}}

        obj = kube.get(ctx, GATEWAYS, "gateway")

        assert obj["metadata"]["name"] == "gateway"
        args = kube.custom.get_cluster_custom_object.call_args
        assert args[0] == ("hub.traefik.io", "v1alpha1", "apigateways", "gateway")
        assert 0 < args.kwargs["_request_timeout"] <= 20

    def test_list_namespaced_custom_objects_everywhere(self, kube, ctx):
        """Test that listing without namespace lists the whole cluster and sets item types."""
        kube.custom.list_cluster_custom_object.return_value = {"items": [{"metadata": {"name": "petstore"}}]}

        items = kube.list(ctx, APIS)

        assert items == [{"metadata": {"name": "petstore"}, "apiVersion": "hub.traefik.io/v1alpha1", "kind": "API"}]

    def test_list_ingresses_with_selector(self, kube, ctx):
        """Test that label selectors are forwarded."""
        kube.networking.list_ingress_for_all_namespaces.return_value = MagicMock(items=[{"metadata": {"name": "a"}}])

        items = kube.list(ctx, INGRESSES, label_selector="app.kubernetes.io/managed-by=traefik-hub")

        kwargs = kube.networking.list_ingress_for_all_namespaces.call_args.kwargs
        assert kwargs["label_selector"] == "app.kubernetes.io/managed-by=traefik-hub"
        assert items[0]["kind"] == "Ingress"

    def test_create_secret(self, kube, ctx):
        """Test that writes carry the field manager."""
        body = {"metadata": {"name": "hub-certificate", "namespace": "default"}}
        kube.core.create_namespaced_secret.return_value = body

        kube.create(ctx, SECRETS, body)

        args = kube.core.create_namespaced_secret.call_args
        assert args[0] == ("default", body)
        assert args.kwargs["field_manager"] == "hub-agent"

    def test_update_namespaced_custom_object(self, kube, ctx):
        """Test that custom objects are replaced by name."""
        body = {"metadata": {"name": "strip", "namespace": "default", "resourceVersion": "3"}}

        kube.update(ctx, MIDDLEWARES, body)

        args = kube.custom.replace_namespaced_custom_object.call_args
        assert args[0] == ("traefik.containo.us", "v1alpha1", "default", "middlewares", "strip", body)

    def test_delete_with_propagation(self, kube, ctx):
        """Test that the propagation policy is forwarded."""
        kube.delete(ctx, GATEWAYS, "gateway", propagation_policy="Foreground")

        kwargs = kube.custom.delete_cluster_custom_object.call_args.kwargs
        assert kwargs["propagation_policy"] == "Foreground"

    @patch("hub_agent.services.kube.client.metrics")
    def test_write_errors_are_counted(self, mock_metrics, kube, ctx):
        """Test that failed writes are counted and raised."""
        kube.networking.delete_namespaced_ingress.side_effect = RuntimeError("boom")

        with pytest.raises(RuntimeError):
            kube.delete(ctx, INGRESSES, "a", "default")

        mock_metrics.object_operations_total.labels.assert_called_with(
            kind="Ingress", operation="delete", result="error"
        )
