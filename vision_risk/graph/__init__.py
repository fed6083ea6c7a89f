"""
Neighbor graph package: types, payload normalization, capping.

The resolver lives in vision_risk.graph.resolver and is imported from there
directly (it depends on the clients, which depend on this package's models).
"""

from vision_risk.graph.capper import CappedGraph, cap_graph
from vision_risk.graph.models import Link, NeighborGraph, Node, merge_graphs
from vision_risk.graph.normalize import (
    TxRecord,
    parse_graph,
    parse_link,
    parse_node,
    parse_timestamp_ms,
    parse_transaction,
)

__all__ = [
    "CappedGraph",
    "Link",
    "NeighborGraph",
    "Node",
    "TxRecord",
    "cap_graph",
    "merge_graphs",
    "parse_graph",
    "parse_link",
    "parse_node",
    "parse_timestamp_ms",
    "parse_transaction",
]
