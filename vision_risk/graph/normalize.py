"""
Normalization of upstream payload shapes into typed records.

Upstream proxies use many alternate field names for the same concept
(a/source/from/idA, id/address/addr, timeStamp/timestamp/blockTime, nested
raw/metadata objects). Each entity has one parse function here that accepts
any of those shapes and returns a canonical record, or None when the payload
has no usable address-like field.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Iterable

from vision_risk.core.addresses import normalize_address
from vision_risk.graph.models import Link, NeighborGraph, Node

NODE_ID_KEYS = ("id", "address", "addr")
LINK_A_KEYS = ("a", "source", "from", "idA")
LINK_B_KEYS = ("b", "target", "to", "idB")
TX_FROM_KEYS = ("from", "fromAddress")
TX_TO_KEYS = ("to", "toAddress")
TX_ISO_KEYS = ("blockTimestamp",)
TX_EPOCH_KEYS = ("timeStamp", "timestamp", "blockTime")

# Epoch values below this are seconds, at or above it milliseconds
SECONDS_MS_BOUNDARY = 2_000_000_000


@dataclass(frozen=True)
class TxRecord:
    """One transaction reduced to counterparties and a timestamp."""

    from_address: str | None
    to_address: str | None
    timestamp_ms: int | None

    def counterparty(self, center: str) -> str | None:
        """The side of the transaction that is not center, preferring the sender."""
        if self.from_address and self.from_address != center:
            return self.from_address
        if self.to_address and self.to_address != center:
            return self.to_address
        return None


def _first(mapping: Any, keys: Iterable[str]) -> Any:
    if not isinstance(mapping, dict):
        return None
    for k in keys:
        v = mapping.get(k)
        if v is not None and v != "":
            return v
    return None


def _as_list(value: Any) -> list[Any]:
    return value if isinstance(value, list) else []


def _nested(tx: dict[str, Any]) -> list[dict[str, Any]]:
    """The tx itself plus its raw / metadata / raw.metadata sub-objects."""
    out = [tx]
    raw = tx.get("raw")
    if isinstance(raw, dict):
        out.append(raw)
        if isinstance(raw.get("metadata"), dict):
            out.append(raw["metadata"])
    if isinstance(tx.get("metadata"), dict):
        out.append(tx["metadata"])
    return out


def parse_timestamp_ms(value: Any) -> int | None:
    """
    Epoch seconds, epoch milliseconds or ISO-8601 string → epoch milliseconds.

    Numeric values below 2e9 are seconds. Non-positive, non-finite or
    unparseable → None.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        try:
            n = float(value)
        except OverflowError:
            return None
    else:
        text = str(value).strip()
        if not text:
            return None
        try:
            n = float(text)
        except ValueError:
            try:
                dt = datetime.fromisoformat(text.replace("Z", "+00:00"))
            except ValueError:
                return None
            if dt.tzinfo is None:
                return None
            return int(dt.timestamp() * 1000)
    if not math.isfinite(n) or n <= 0:
        return None
    return int(n * 1000) if n < SECONDS_MS_BOUNDARY else int(n)


def parse_node(raw: Any, network: str) -> Node | None:
    if isinstance(raw, str):
        node_id = normalize_address(raw)
        return Node(id=node_id, address=node_id, network=network) if node_id else None
    node_id = normalize_address(_first(raw, NODE_ID_KEYS))
    if not node_id:
        return None
    extra = {k: v for k, v in raw.items() if k not in ("id", "address", "network")}
    return Node(id=node_id, address=node_id, network=network, extra=extra)


def parse_link(raw: Any) -> Link | None:
    """Parse an edge; self-loops and edges missing an endpoint are rejected."""
    a = normalize_address(_first(raw, LINK_A_KEYS))
    b = normalize_address(_first(raw, LINK_B_KEYS))
    if not a or not b or a == b:
        return None
    try:
        weight = float(raw.get("weight", 1))
    except (TypeError, ValueError, OverflowError):
        weight = 1.0
    if not weight or not math.isfinite(weight):
        weight = 1.0
    return Link(a=a, b=b, weight=int(weight) if weight.is_integer() else weight)


def parse_transaction(raw: Any) -> TxRecord | None:
    """Parse one /txs row; None when it names neither a sender nor a receiver."""
    if not isinstance(raw, dict):
        return None
    layers = _nested(raw)
    sender = next((v for v in (_first(m, TX_FROM_KEYS) for m in layers) if v), None)
    receiver = next((v for v in (_first(m, TX_TO_KEYS) for m in layers) if v), None)
    from_address = normalize_address(sender) or None
    to_address = normalize_address(receiver) or None
    if not from_address and not to_address:
        return None
    ts: int | None = None
    for layer in reversed(layers):
        ts = parse_timestamp_ms(_first(layer, TX_ISO_KEYS))
        if ts is not None:
            break
    if ts is None:
        ts = parse_timestamp_ms(_first(raw, TX_EPOCH_KEYS))
    return TxRecord(from_address=from_address, to_address=to_address, timestamp_ms=ts)


def parse_graph(raw: Any, network: str) -> NeighborGraph:
    """
    Parse a /neighbors payload: {nodes, links} or a bare edge list.

    For a bare edge list, nodes are the distinct endpoints in first-seen order.
    """
    nodes: list[Node] = []
    links: list[Link] = []
    if isinstance(raw, dict):
        for item in _as_list(raw.get("nodes")):
            node = parse_node(item, network)
            if node is not None:
                nodes.append(node)
        for item in _as_list(raw.get("links") or raw.get("edges")):
            link = parse_link(item)
            if link is not None:
                links.append(link)
    elif isinstance(raw, list):
        seen: dict[str, None] = {}
        for item in raw:
            a = normalize_address(_first(item, LINK_A_KEYS))
            b = normalize_address(_first(item, LINK_B_KEYS))
            for endpoint in (a, b):
                if endpoint:
                    seen.setdefault(endpoint)
            link = parse_link(item)
            if link is not None:
                links.append(link)
        nodes = [Node(id=x, address=x, network=network) for x in seen]
    return NeighborGraph.build(nodes, links)
