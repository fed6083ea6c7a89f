"""
Tests for graph types and deterministic capping (vision_risk.graph).
"""

from __future__ import annotations

from fakes import CENTER, addr
from vision_risk.graph import Link, NeighborGraph, Node, cap_graph, merge_graphs


def _star(n: int) -> NeighborGraph:
    nodes = [Node(id=CENTER, address=CENTER, network="eth")]
    links = []
    for i in range(n):
        a = addr(i)
        nodes.append(Node(id=a, address=a, network="eth"))
        links.append(Link(a=CENTER, b=a))
    # one neighbor-to-neighbor link near the end of the list
    if n >= 2:
        links.append(Link(a=addr(n - 2), b=addr(n - 1)))
    return NeighborGraph.build(nodes, links)


def test_cap_keeps_center_and_first_neighbors():
    """Capped graph is center + first cap neighbors in order; links only among kept nodes."""
    capped = cap_graph(_star(30), 10)
    kept = [n.id for n in capped.graph.nodes]
    assert kept[0] == CENTER
    assert kept[1:] == [addr(i) for i in range(10)]
    assert capped.total_neighbors == 30
    assert capped.kept_neighbors == 10
    assert capped.overflow == 20
    ids = set(kept)
    assert all(link.a in ids and link.b in ids for link in capped.graph.links)
    assert len(capped.graph.links) == 10


def test_cap_is_deterministic_and_noop_when_small():
    graph = _star(5)
    assert cap_graph(graph, 10) == cap_graph(graph, 10)
    capped = cap_graph(graph, 10)
    assert capped.graph.nodes == graph.nodes
    assert capped.overflow == 0


def test_cap_negative_counts_as_zero():
    capped = cap_graph(_star(3), -4)
    assert [n.id for n in capped.graph.nodes] == [CENTER]
    assert capped.graph.links == ()
    assert capped.overflow == 3


def test_cap_empty_graph():
    capped = cap_graph(NeighborGraph(), 5)
    assert capped.graph.is_empty
    assert capped.overflow == 0


def test_with_center_first_moves_or_inserts():
    """The center becomes node 0 whether it was listed later or missing."""
    a, b = addr(1), addr(2)
    listed_later = NeighborGraph.build(
        [Node(id=a, address=a, network="eth"), Node(id=CENTER, address=CENTER, network="eth")], []
    )
    assert [n.id for n in listed_later.with_center_first(CENTER, "eth").nodes] == [CENTER, a]
    missing = NeighborGraph.build([Node(id=a, address=a, network="eth"), Node(id=b, address=b, network="eth")], [])
    moved = missing.with_center_first(CENTER, "eth")
    assert [n.id for n in moved.nodes] == [CENTER, a, b]
    assert moved.neighbor_count == 2


def test_merge_graphs_dedupes_nodes_and_reversed_links():
    a, b = addr(1), addr(2)
    base = NeighborGraph.build(
        [Node(id=CENTER, address=CENTER, network="eth"), Node(id=a, address=a, network="eth")],
        [Link(a=CENTER, b=a)],
    )
    incoming = NeighborGraph.build(
        [Node(id=a, address=a, network="eth"), Node(id=b, address=b, network="eth")],
        [Link(a=a, b=CENTER), Link(a=a, b=b)],
    )
    merged = merge_graphs(base, incoming)
    assert [n.id for n in merged.nodes] == [CENTER, a, b]
    assert len(merged.links) == 2


def test_graph_to_dict_shape():
    graph = _star(1)
    out = graph.to_dict()
    assert out["nodes"][0] == {"id": CENTER, "address": CENTER, "network": "eth"}
    assert out["links"][0] == {"a": CENTER, "b": addr(0), "weight": 1}
