"""
Tests for the FastAPI surface (vision_risk.api_server) via TestClient.

The app is built with a dispatcher factory so upstreams are the MockTransport fake.
"""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from fakes import CENTER, addr, star_graph
from vision_risk.agent_worker.dispatcher import Dispatcher
from vision_risk.api_server.app import create_app


@pytest.fixture
def api(config, clients, sleep, clock):
    app = create_app(lambda: Dispatcher(config, clients, clock=clock, sleep=sleep))
    with TestClient(app) as client:
        yield client


def test_health(api):
    r = api.get("/health")
    assert r.status_code == 200
    data = r.json()
    assert data["status"] == "ok"
    assert data["network"] == "eth"
    assert data["upstream"] is True


def test_score_address(api, upstream):
    upstream.policies["0xabc"] = {"block": True, "reasons": ["OFAC"]}
    r = api.get("/score/0xABC", params={"network": "eth"})
    assert r.status_code == 200
    data = r.json()
    assert data["risk_score"] == 100
    assert data["breakdown"][0] == {"label": "sanctioned Counterparty", "delta": 40}


def test_score_blank_address_is_400(api):
    r = api.get("/score/%20")
    assert r.status_code == 400


def test_score_batch(api):
    r = api.post("/score/batch", json={"items": [{"id": addr(1)}, {"id": addr(2), "network": "eth"}]})
    assert r.status_code == 200
    data = r.json()
    assert data["scored"] == 2
    assert data["failed"] == 0
    assert [x["id"] for x in data["results"]] == [addr(1), addr(2)]


def test_neighbors(api, upstream):
    upstream.neighbors[CENTER] = star_graph(CENTER, [addr(i) for i in range(12)])
    r = api.get(f"/neighbors/{CENTER}", params={"limit": 100, "cap": 5})
    assert r.status_code == 200
    data = r.json()
    assert data["graph"]["nodes"][0]["id"] == CENTER
    assert len(data["graph"]["nodes"]) == 6
    assert data["stats"]["overflow"] == 7
    assert data["stats"]["source"] == "network"

    again = api.get(f"/neighbors/{CENTER}", params={"limit": 100, "cap": 5}).json()
    assert again["stats"]["source"] == "cache"


def test_neighbors_invalid_limit_is_400(api):
    r = api.get(f"/neighbors/{CENTER}", params={"limit": 0})
    assert r.status_code == 400
