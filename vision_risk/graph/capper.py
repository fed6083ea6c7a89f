"""
Deterministic graph capping.

Keeps node 0 (the center), then the first `cap` remaining nodes in their
existing order, then only the links whose endpoints both survived. The same
graph and cap always give the same output, which keeps cached graphs
reproducible. Overflow is reported, never silently dropped.
"""

from __future__ import annotations

from dataclasses import dataclass

from vision_risk.graph.models import NeighborGraph


@dataclass(frozen=True)
class CappedGraph:
    graph: NeighborGraph
    total_neighbors: int
    kept_neighbors: int

    @property
    def overflow(self) -> int:
        return self.total_neighbors - self.kept_neighbors


def cap_graph(graph: NeighborGraph, cap: int) -> CappedGraph:
    """Truncate graph to the center plus at most cap neighbors. Negative cap counts as 0."""
    cap = max(0, int(cap))
    total = graph.neighbor_count
    if graph.is_empty:
        return CappedGraph(graph=graph, total_neighbors=0, kept_neighbors=0)
    kept_nodes = graph.nodes[: cap + 1]
    kept_ids = {n.id for n in kept_nodes}
    kept_links = tuple(link for link in graph.links if link.a in kept_ids and link.b in kept_ids)
    return CappedGraph(
        graph=NeighborGraph(nodes=kept_nodes, links=kept_links),
        total_neighbors=total,
        kept_neighbors=len(kept_nodes) - 1,
    )
