"""
Tests for the neighbor resolver fallback chain (vision_risk.graph.resolver).

primary → single larger retry when sparse → transaction counterparties when
empty → stub graph. Upstream is an httpx.MockTransport fake.
"""

from __future__ import annotations

import asyncio
from dataclasses import replace

from fakes import CENTER, Sequence, addr, star_graph, tx_rows
from vision_risk.graph.resolver import NeighborResolver, ResolveBranch, retry_limit


def _resolve(clients, config, limit=10):
    resolver = NeighborResolver(clients)
    return asyncio.run(resolver.resolve(config, CENTER, "eth", hop=1, limit=limit))


def test_retry_limit():
    assert retry_limit(10, 50) == 50
    assert retry_limit(40, 50) == 80
    assert retry_limit(60, 50) == 120


def test_dense_primary_is_used_without_retry(upstream, clients, config):
    upstream.neighbors[CENTER] = star_graph(CENTER, [addr(i) for i in range(6)])
    outcome = _resolve(clients, config)
    assert outcome.branch == ResolveBranch.PRIMARY
    assert outcome.graph.neighbor_count == 6
    assert upstream.count("/neighbors") == 1
    assert upstream.count("/txs") == 0


def test_sparse_primary_retries_exactly_once_with_larger_limit(upstream, clients, config):
    """Fewer than 5 neighbors → one more /neighbors call with limit max(2*limit, 50)."""
    upstream.neighbors[CENTER] = Sequence(
        [
            star_graph(CENTER, [addr(1), addr(2)]),
            star_graph(CENTER, [addr(i) for i in range(8)]),
        ]
    )
    outcome = _resolve(clients, config, limit=10)
    calls = upstream.calls("/neighbors")
    assert len(calls) == 2
    assert calls[0].url.params["limit"] == "10"
    assert calls[1].url.params["limit"] == "50"
    assert outcome.branch == ResolveBranch.RETRY
    assert outcome.graph.neighbor_count == 8
    assert outcome.primary_calls == 2
    assert "retry" in outcome.timings


def test_retry_kept_only_when_strictly_larger(upstream, clients, config):
    upstream.neighbors[CENTER] = star_graph(CENTER, [addr(1), addr(2)])
    outcome = _resolve(clients, config)
    assert upstream.count("/neighbors") == 2
    assert outcome.branch == ResolveBranch.PRIMARY
    assert outcome.graph.neighbor_count == 2


def test_empty_primary_falls_back_to_transaction_counterparties(upstream, clients, config):
    """Empty /neighbors twice, 4 distinct counterparties in /txs → center + 4 nodes."""
    cps = [addr(i) for i in range(4)]
    upstream.txs[(CENTER, "desc")] = tx_rows(CENTER, cps)
    upstream.txs[(CENTER, "asc")] = tx_rows(CENTER, cps[:2])
    outcome = _resolve(clients, config)
    assert upstream.count("/neighbors") == 2
    assert [c.url.params["sort"] for c in upstream.calls("/txs")] == ["desc", "asc"]
    assert outcome.branch == ResolveBranch.TRANSACTIONS
    assert [n.id for n in outcome.graph.nodes] == [CENTER] + cps
    weights = {link.b: link.weight for link in outcome.graph.links}
    assert weights == {cps[0]: 2, cps[1]: 2, cps[2]: 1, cps[3]: 1}
    assert "fallback_txs" in outcome.timings


def test_transaction_fallback_respects_limit(upstream, clients, config):
    upstream.txs[CENTER] = tx_rows(CENTER, [addr(i) for i in range(12)])
    outcome = _resolve(clients, config, limit=5)
    assert outcome.graph.neighbor_count == 5


def test_primary_failure_then_stub(upstream, clients, config):
    """5xx from /neighbors and no transactions → stub graph with 10 random neighbors."""
    upstream.neighbors[CENTER] = 503
    outcome = _resolve(clients, config)
    assert outcome.branch == ResolveBranch.STUB
    assert outcome.degraded
    nodes = outcome.graph.nodes
    assert len(nodes) == 11
    assert nodes[0].id == CENTER
    assert "stub" not in nodes[0].extra
    assert all(n.extra.get("stub") is True for n in nodes[1:])
    assert all(n.id.startswith("0x") and len(n.id) == 42 for n in nodes[1:])
    assert len(outcome.graph.links) == 10


def test_no_api_base_goes_straight_to_stub(upstream, clients, config):
    outcome = _resolve(clients, replace(config, api_base=""))
    assert outcome.branch == ResolveBranch.STUB
    assert upstream.count() == 0


def test_center_is_moved_to_index_zero(upstream, clients, config):
    neighbors = [addr(i) for i in range(6)]
    payload = star_graph(CENTER, neighbors)
    payload["nodes"] = payload["nodes"][1:] + payload["nodes"][:1]
    upstream.neighbors[CENTER] = payload
    outcome = _resolve(clients, config)
    assert outcome.graph.nodes[0].id == CENTER
    assert [n.id for n in outcome.graph.nodes[1:]] == neighbors


def test_center_only_primary_counts_as_empty(upstream, clients, config):
    """A graph holding just the center retries once, then uses transaction counterparties."""
    upstream.neighbors[CENTER] = {"nodes": [{"id": CENTER}], "links": []}
    cps = [addr(i) for i in range(3)]
    upstream.txs[CENTER] = tx_rows(CENTER, cps)
    outcome = _resolve(clients, config)
    assert upstream.count("/neighbors") == 2
    assert outcome.branch == ResolveBranch.TRANSACTIONS
    assert [n.id for n in outcome.graph.nodes] == [CENTER] + cps


def test_malformed_primary_payload_falls_back_to_transactions(upstream, clients, config):
    upstream.neighbors[CENTER] = {"nodes": 7}
    upstream.txs[CENTER] = tx_rows(CENTER, [addr(1), addr(2)])
    outcome = _resolve(clients, config)
    assert outcome.branch == ResolveBranch.TRANSACTIONS
    assert outcome.graph.neighbor_count == 2
