"""
Neighbor graph types.

Graphs are immutable once built: nodes and links are tuples so a graph stored
in the neighbor cache can be handed out again verbatim. The center address is
node index 0 of every graph produced by the resolver or the capper.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable


@dataclass(frozen=True)
class Node:
    id: str
    address: str
    network: str
    extra: dict[str, Any] = field(default_factory=dict, compare=False)
    """Upstream attributes kept for display (txCount, createdAt, stub, ...)."""

    def to_dict(self) -> dict[str, Any]:
        out = dict(self.extra)
        out.update({"id": self.id, "address": self.address, "network": self.network})
        return out


@dataclass(frozen=True)
class Link:
    a: str
    b: str
    weight: float = 1

    def to_dict(self) -> dict[str, Any]:
        return {"a": self.a, "b": self.b, "weight": self.weight}

    def key(self) -> frozenset[str]:
        """Direction-independent identity used to drop duplicate links."""
        return frozenset((self.a, self.b))


@dataclass(frozen=True)
class NeighborGraph:
    nodes: tuple[Node, ...] = ()
    links: tuple[Link, ...] = ()

    @classmethod
    def build(cls, nodes: Iterable[Node], links: Iterable[Link]) -> "NeighborGraph":
        """Build a graph, dropping nodes whose id was already seen."""
        seen: set[str] = set()
        unique: list[Node] = []
        for node in nodes:
            if node.id in seen:
                continue
            seen.add(node.id)
            unique.append(node)
        return cls(nodes=tuple(unique), links=tuple(links))

    @property
    def is_empty(self) -> bool:
        return not self.nodes

    @property
    def neighbor_count(self) -> int:
        """Node count excluding the center (index 0)."""
        return max(0, len(self.nodes) - 1)

    @property
    def center(self) -> Node | None:
        return self.nodes[0] if self.nodes else None

    def neighbor_addresses(self) -> list[str]:
        return [n.address for n in self.nodes[1:]]

    def with_center_first(self, center: str, network: str) -> "NeighborGraph":
        """Return a graph whose node 0 is center, moving or inserting it as needed."""
        if self.nodes and self.nodes[0].id == center:
            return self
        center_node = next((n for n in self.nodes if n.id == center), None)
        if center_node is None:
            center_node = Node(id=center, address=center, network=network)
        rest = tuple(n for n in self.nodes if n.id != center)
        return NeighborGraph(nodes=(center_node,) + rest, links=self.links)

    def to_dict(self) -> dict[str, Any]:
        return {
            "nodes": [n.to_dict() for n in self.nodes],
            "links": [link.to_dict() for link in self.links],
        }


def merge_graphs(base: NeighborGraph, incoming: NeighborGraph) -> NeighborGraph:
    """
    Merge incoming into base for display: new nodes appended after existing ones,
    links deduplicated in either direction. Base order (and its center) is kept.
    """
    existing_ids = {n.id for n in base.nodes}
    nodes = list(base.nodes) + [n for n in incoming.nodes if n.id not in existing_ids]
    seen = {link.key() for link in base.links}
    links = list(base.links)
    for link in incoming.links:
        k = link.key()
        if k in seen:
            continue
        seen.add(k)
        links.append(link)
    return NeighborGraph(nodes=tuple(nodes), links=tuple(links))
