"""
Pytest fixtures for vision-risk tests: fake upstream, clients, config, dispatcher.
"""

from __future__ import annotations

import httpx
import pytest

from fakes import API_BASE, FakeClock, FakeUpstream, RecordingSleep
from vision_risk.agent_worker.dispatcher import Dispatcher
from vision_risk.clients import UpstreamClients
from vision_risk.config.settings import WorkerConfig


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch):
    """Keep a developer's VISION_* environment out of the tests."""
    for name in ("VISION_API_BASE", "VISION_NETWORK", "VISION_HEURISTICS_PATH", "VISION_BATCH_PAUSE_MS"):
        monkeypatch.setenv(name, "")


@pytest.fixture
def upstream() -> FakeUpstream:
    return FakeUpstream()


@pytest.fixture
def clients(upstream: FakeUpstream) -> UpstreamClients:
    client = httpx.AsyncClient(transport=httpx.MockTransport(upstream.handler))
    return UpstreamClients.create(client)


@pytest.fixture
def config() -> WorkerConfig:
    return WorkerConfig(api_base=API_BASE, network="eth", batch_pause_sec=0.075)


@pytest.fixture
def sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def dispatcher(config, clients, sleep, clock) -> Dispatcher:
    return Dispatcher(config, clients, clock=clock, sleep=sleep)
