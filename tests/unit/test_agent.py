"""Tests for the assembly of the reconcilers."""

from __future__ import annotations

from hub_agent.agent import Stores, build_runners
from hub_agent.services.kube.resources import GATEWAYS, INGRESSES


class TestStores:
    """Test cases for Stores."""

    def test_prime(self, cluster):
        """Test that every store is primed, managed ingresses only."""
        cluster.seed(GATEWAYS, {"metadata": {"name": "gateway"}})
        cluster.seed(INGRESSES, {"metadata": {"name": "managed", "namespace": "default",
                                              "labels": {"app.kubernetes.io/managed-by": "traefik-hub"}}})
        cluster.seed(INGRESSES, {"metadata": {"name": "foreign", "namespace": "default"}})
        stores = Stores()

        stores.prime(cluster, timeout=5)

        assert all(store.primed for store in stores.all())
        assert stores.gateways.get("gateway") is not None
        assert [i["metadata"]["name"] for i in stores.ingresses.list()] == ["managed"]


class TestBuildRunners:
    """Test cases for build_runners."""

    def test_runners(self, config, platform, cluster):
        """Test the runners and their jobs."""
        runners = build_runners(config, platform, cluster, Stores())

        assert [r.name for r in runners] == ["gateway", "access", "api", "collection", "portal"]

        certificates, gateways = runners[0].jobs
        assert certificates.name == "certificates"
        assert certificates.run_at_start
        assert certificates.interval == config.cert_sync_interval
        assert certificates.retry_interval == config.cert_retry_interval
        assert gateways.name == "gateways"
        assert gateways.run_at_start
        assert gateways.interval == config.gateway_sync_interval

        for runner in runners[1:4]:
            (job,) = runner.jobs
            assert not job.run_at_start
            assert job.interval == config.mirror_sync_interval
            assert runner.sync_timeout == config.sync_timeout

        portals, portal_certificates = runners[4].jobs
        assert portals.name == "portals"
        assert not portals.run_at_start
        assert portals.interval == config.mirror_sync_interval
        assert portal_certificates.name == "portal-certificates"
        assert not portal_certificates.run_at_start
        assert portal_certificates.interval == config.cert_sync_interval
        assert portal_certificates.retry_interval == config.cert_retry_interval

    def test_gateway_jobs_share_holder(self, config, platform, cluster):
        """Test that the certificate and gateway passes share the reconciler."""
        runners = build_runners(config, platform, cluster, Stores())

        certificates, gateways = runners[0].jobs
        assert certificates.run.__self__ is gateways.run.__self__
