"""Shared fixtures for unit tests."""

from __future__ import annotations

from typing import Iterator
from unittest.mock import MagicMock, patch

import pytest

from fakes import FakeCluster, FakePlatform
from hub_agent.agent import Stores
from hub_agent.config import AgentConfig
from hub_agent.utils.context import PassContext


@pytest.fixture(autouse=True)
def kopf_event() -> Iterator[MagicMock]:
    """Capture Kubernetes events instead of posting them."""
    with patch("hub_agent.utils.events.kopf.event") as mock_event:
        yield mock_event


@pytest.fixture
def ctx() -> PassContext:
    return PassContext.with_timeout(20)


@pytest.fixture
def config() -> AgentConfig:
    return AgentConfig(platform_url="https://platform.example.com/agent", token="secret-token")


@pytest.fixture
def cluster() -> FakeCluster:
    return FakeCluster()


@pytest.fixture
def platform() -> FakePlatform:
    return FakePlatform()


@pytest.fixture
def stores(cluster: FakeCluster) -> Stores:
    stores = Stores()
    cluster.attach(*stores.all())
    return stores
