"""
Neighbor resolution with a fixed fallback chain.

    TRY_PRIMARY → CHECK_SPARSE → (RETRY_LARGER | ·) → CHECK_EMPTY
        → (FALLBACK_TXS | ·) → CHECK_EMPTY2 → (STUB | ·) → DONE

The primary /neighbors source is authoritative. A sparse answer (fewer than
sparse_threshold neighbors) gets exactly one retry with a larger limit; the
retry is kept only when it has strictly more nodes. If there are still no
neighbors, they are derived from transaction counterparties (most recent and
earliest samples). If that is empty too, a stub graph with random addresses
is returned so consumers always get a non-empty shape; its branch is "stub".

Every step awaits the previous one; nothing runs concurrently.
"""

from __future__ import annotations

import secrets
import time
from dataclasses import dataclass, field
from enum import Enum

from vision_risk.clients import UpstreamClients
from vision_risk.clients.transactions import SORT_ASC, SORT_DESC
from vision_risk.config.settings import WorkerConfig
from vision_risk.core.addresses import short_address
from vision_risk.graph.models import Link, NeighborGraph, Node
from vision_risk.vision_logging import get_logger

logger = get_logger(__name__)


class ResolveBranch(str, Enum):
    PRIMARY = "primary"
    RETRY = "retry"
    TRANSACTIONS = "transactions"
    STUB = "stub"


@dataclass(frozen=True)
class ResolveOutcome:
    """Best available graph (center at index 0) plus how it was obtained."""

    graph: NeighborGraph
    branch: ResolveBranch
    timings: dict[str, float] = field(default_factory=dict)
    """Milliseconds per step: primary, retry, fallback_txs, total."""
    primary_calls: int = 0

    @property
    def degraded(self) -> bool:
        return self.branch == ResolveBranch.STUB


def _ms(started: float) -> float:
    return round((time.perf_counter() - started) * 1000, 2)


def retry_limit(limit: int, floor: int) -> int:
    """Limit for the larger-radius retry: at least floor and always above limit."""
    return max(limit * 2, floor, limit + 1)


def stub_graph(center: str, network: str, count: int) -> NeighborGraph:
    """Center plus count random 0x-addresses, each linked to the center."""
    nodes = [Node(id=center, address=center, network=network)]
    links: list[Link] = []
    for _ in range(count):
        addr = "0x" + secrets.token_hex(20)
        nodes.append(Node(id=addr, address=addr, network=network, extra={"stub": True}))
        links.append(Link(a=center, b=addr, weight=1))
    return NeighborGraph.build(nodes, links)


class NeighborResolver:
    def __init__(self, clients: UpstreamClients) -> None:
        self.clients = clients

    async def _primary(
        self, config: WorkerConfig, address: str, network: str, hop: int, limit: int
    ) -> NeighborGraph | None:
        result = await self.clients.neighbors.fetch(config, address, network, hop=hop, limit=limit)
        if not result.ok:
            logger.info(
                "neighbors_primary_failed",
                address=short_address(address),
                network=network,
                limit=limit,
                error=result.error,
            )
            return None
        graph = result.value
        if graph is None or graph.is_empty:
            return graph
        return graph.with_center_first(address, network)

    async def neighbors_from_transactions(
        self, config: WorkerConfig, address: str, network: str, limit: int
    ) -> NeighborGraph | None:
        """
        Distinct counterparties from the most recent and the earliest transactions,
        capped at limit. Link weight counts sampled interactions.
        """
        weights: dict[str, int] = {}
        any_ok = False
        for sort in (SORT_DESC, SORT_ASC):
            result = await self.clients.transactions.fetch(config, address, network, limit=limit, sort=sort)
            if not result.ok or result.value is None:
                continue
            any_ok = True
            for tx in result.value.txs:
                other = tx.counterparty(address)
                if other is None:
                    continue
                if other in weights:
                    weights[other] += 1
                elif len(weights) < limit:
                    weights[other] = 1
        if not any_ok or not weights:
            return None
        nodes = [Node(id=address, address=address, network=network)]
        links: list[Link] = []
        for other, count in weights.items():
            nodes.append(Node(id=other, address=other, network=network))
            links.append(Link(a=address, b=other, weight=count))
        return NeighborGraph.build(nodes, links)

    async def resolve(
        self,
        config: WorkerConfig,
        address: str,
        network: str,
        *,
        hop: int,
        limit: int,
    ) -> ResolveOutcome:
        heur = config.heuristics
        timings: dict[str, float] = {}
        started_total = time.perf_counter()

        # TRY_PRIMARY
        started = time.perf_counter()
        graph = await self._primary(config, address, network, hop, limit)
        timings["primary"] = _ms(started)
        primary_calls = 1
        branch = ResolveBranch.PRIMARY

        # CHECK_SPARSE → RETRY_LARGER
        current = graph.neighbor_count if graph is not None else 0
        if current < heur.sparse_threshold:
            bigger_limit = retry_limit(limit, heur.retry_limit_floor)
            started = time.perf_counter()
            retried = await self._primary(config, address, network, hop, bigger_limit)
            timings["retry"] = _ms(started)
            primary_calls += 1
            before = len(graph.nodes) if graph is not None else 0
            if retried is not None and len(retried.nodes) > before:
                graph = retried
                branch = ResolveBranch.RETRY
            logger.info(
                "neighbors_sparse_retry",
                address=short_address(address),
                network=network,
                neighbors=current,
                retry_limit=bigger_limit,
                improved=branch == ResolveBranch.RETRY,
            )

        # CHECK_EMPTY → FALLBACK_TXS
        if graph is None or graph.neighbor_count == 0:
            started = time.perf_counter()
            graph = await self.neighbors_from_transactions(config, address, network, limit)
            timings["fallback_txs"] = _ms(started)
            branch = ResolveBranch.TRANSACTIONS

        # CHECK_EMPTY2 → STUB
        if graph is None or graph.neighbor_count == 0:
            graph = stub_graph(address, network, heur.stub_neighbor_count)
            branch = ResolveBranch.STUB
            logger.warning("neighbors_stub_graph", address=short_address(address), network=network)

        timings["total"] = _ms(started_total)
        logger.info(
            "neighbors_resolved",
            address=short_address(address),
            network=network,
            branch=branch.value,
            nodes=len(graph.nodes),
            links=len(graph.links),
            duration_ms=timings["total"],
        )
        return ResolveOutcome(graph=graph, branch=branch, timings=timings, primary_calls=primary_calls)
