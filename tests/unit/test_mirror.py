"""Tests for the mirroring reconciler."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest
from kubernetes.client.exceptions import ApiException

from hub_agent.builders.access import build_access
from hub_agent.handlers.access import new_access_reconciler
from hub_agent.handlers.api import new_api_reconciler
from hub_agent.handlers.mirror import MirrorReconciler, SimpleCapability, merge_metadata
from hub_agent.handlers.portal import new_portal_reconciler
from hub_agent.services.kube.resources import ACCESSES, APIS, PORTALS
from hub_agent.services.platform.models import API, Access, Portal
from hub_agent.utils.errors import PlatformAPIError


@pytest.fixture
def reconciler(platform, cluster, stores):
    return new_access_reconciler(platform, cluster, stores.accesses)


class TestMergeMetadata:
    """Test cases for merge_metadata."""

    def test_keeps_cluster_fields_and_overwrites_labels(self):
        """Test that cluster assigned fields survive and labels are replaced."""
        current = {"metadata": {"name": "a", "uid": "u", "resourceVersion": "7", "labels": {"old": "1"}}}
        desired = {"metadata": {"name": "a", "labels": {"new": "2"}}}

        assert merge_metadata(current, desired) == {
            "name": "a", "uid": "u", "resourceVersion": "7", "labels": {"new": "2"},
        }

    def test_drops_removed_labels(self):
        """Test that labels are removed when the platform drops them all."""
        current = {"metadata": {"name": "a", "labels": {"old": "1"}}}
        assert "labels" not in merge_metadata(current, {"metadata": {"name": "a"}})


class TestMirrorReconciler:
    """Test cases for MirrorReconciler."""

    def test_creates_missing(self, reconciler, platform, cluster, ctx, kopf_event):
        """Test that platform objects missing from the cluster are created."""
        platform.accesses = [Access(name="products", version="1", groups=["suppliers"])]

        reconciler.sync(ctx)

        assert cluster.writes == [("create", "APIAccess", "", "products")]
        assert cluster.find(ACCESSES, "products")["spec"]["groups"] == ["suppliers"]
        assert kopf_event.call_args.kwargs["reason"] == "Synced"

    def test_skips_same_version(self, reconciler, platform, cluster, ctx):
        """Test that an object is not written again while its version is unchanged."""
        platform.accesses = [Access(name="products", version="1", groups=["suppliers"])]
        reconciler.sync(ctx)
        platform.accesses[0].groups = ["everyone"]

        reconciler.sync(ctx)

        assert len(cluster.writes) == 1
        assert cluster.find(ACCESSES, "products")["spec"]["groups"] == ["suppliers"]

    def test_updates_new_version(self, reconciler, platform, cluster, ctx):
        """Test that a new version is written over the cluster metadata."""
        platform.accesses = [Access(name="products", version="1", labels={"old": "1"})]
        reconciler.sync(ctx)
        uid = cluster.find(ACCESSES, "products")["metadata"]["uid"]

        platform.accesses = [Access(name="products", version="2", labels={"new": "2"}, groups=["everyone"])]
        reconciler.sync(ctx)

        access = cluster.find(ACCESSES, "products")
        assert cluster.writes[-1] == ("update", "APIAccess", "", "products")
        assert access["metadata"]["uid"] == uid
        assert access["metadata"]["labels"] == {"new": "2"}
        assert access["spec"]["groups"] == ["everyone"]
        assert access["status"]["version"] == "2"

    def test_deletes_leftovers_in_foreground(self, reconciler, platform, cluster, ctx):
        """Test that objects the platform no longer lists are deleted."""
        cluster.seed(ACCESSES, build_access(Access(name="stale", version="1")))
        platform.accesses = [Access(name="products", version="1")]

        reconciler.sync(ctx)

        assert cluster.deletions == [("APIAccess", "", "stale", "Foreground")]
        assert cluster.names(ACCESSES) == ["products"]

    def test_delete_not_found_ignored(self, reconciler, cluster, ctx):
        """Test that an object already gone is not an error."""
        cluster.seed(ACCESSES, build_access(Access(name="stale", version="1")))
        cluster.fail("delete", ACCESSES, "stale", ApiException(status=404, reason="Not Found"))

        reconciler.sync(ctx)

    def test_item_error_does_not_stop_pass(self, reconciler, platform, cluster, ctx, kopf_event):
        """Test that one failing object does not prevent the others."""
        cluster.seed(ACCESSES, build_access(Access(name="broken", version="1")))
        cluster.fail("update", ACCESSES, "broken")
        platform.accesses = [Access(name="broken", version="2"), Access(name="products", version="1")]

        reconciler.sync(ctx)

        assert cluster.names(ACCESSES) == ["broken", "products"]
        reasons = [c.kwargs["reason"] for c in kopf_event.call_args_list]
        assert "Failed" in reasons

    def test_fetch_error_raises(self, reconciler, platform, cluster, ctx):
        """Test that nothing is deleted when the platform cannot be reached."""
        cluster.seed(ACCESSES, build_access(Access(name="products", version="1")))
        platform.errors["accesses"] = PlatformAPIError(500, "internal")

        with pytest.raises(PlatformAPIError):
            reconciler.sync(ctx)

        assert cluster.deletions == []

    def test_after_sync_receives_written_resource(self, platform, cluster, stores, ctx):
        """Test that the hook gets the resource with its cluster metadata."""
        after_sync = MagicMock(side_effect=[RuntimeError("child failure"), None])
        reconciler = MirrorReconciler(
            SimpleCapability(ACCESSES, platform.get_accesses, build_access), cluster, stores.accesses, after_sync
        )
        platform.accesses = [Access(name="a", version="1"), Access(name="b", version="1")]

        reconciler.sync(ctx)

        assert after_sync.call_count == 2
        resources = [call.args[1] for call in after_sync.call_args_list]
        assert [r["metadata"]["name"] for r in resources] == ["a", "b"]
        assert all(r["metadata"]["uid"] for r in resources)


class TestMirroredKinds:
    """Test cases for the reconcilers of the mirrored kinds."""

    def test_apis_are_namespaced(self, platform, cluster, stores, ctx):
        """Test that APIs are written to their namespace."""
        platform.apis = [API("petstore", "team", "/petstore", "petstore-svc", {"number": 80}, version="1")]

        new_api_reconciler(platform, cluster, stores.apis).sync(ctx)

        assert cluster.names(APIS, "team") == ["petstore"]

    def test_portals(self, platform, cluster, stores, ctx):
        """Test that portals are mirrored."""
        platform.portals = [Portal(name="portal", version="1", api_hub_domain="api.hub-traefik.io")]

        new_portal_reconciler(platform, cluster, stores.portals).sync(ctx)

        assert cluster.find(PORTALS, "portal")["status"]["apiUrls"] == "https://api.hub-traefik.io"
