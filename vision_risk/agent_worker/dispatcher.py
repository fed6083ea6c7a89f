"""
Request dispatcher: routes typed requests by kind and yields outbound events.

    INIT         → INIT_OK
    SCORE_ONE    → RESULT
    SCORE_BATCH  → RESULT_STREAM per item (or one RESULT), then DONE
    NEIGHBORS    → RESULT (capped graph), then NEIGHBOR_STATS
    anything else→ ERROR

The dispatcher owns the WorkerConfig and both caches. Every request is
handled to completion before the caller takes the next one (see worker.py),
so the caches need no locking. Failures never escape handle(): they become
an ERROR response with the request id.
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass, replace
from typing import Any, AsyncIterator, Callable

from vision_risk.agent_worker.messages import Request, RequestKind, Response, ResponseKind
from vision_risk.cache import NeighborCache, ScoreCache
from vision_risk.clients import UpstreamClients
from vision_risk.config.settings import DEFAULT_CAP, DEFAULT_HOP, DEFAULT_LIMIT, WorkerConfig
from vision_risk.core.addresses import normalize_address, require_address, short_address
from vision_risk.core.exceptions import InvalidRequestError, UnknownRequestKindError
from vision_risk.graph.capper import cap_graph
from vision_risk.graph.models import NeighborGraph
from vision_risk.graph.resolver import NeighborResolver
from vision_risk.scoring.batch import BatchScorer, SleepFn
from vision_risk.scoring.models import ScoreResult, Stats
from vision_risk.scoring.scorer import Scorer
from vision_risk.scoring.stats import aggregate_stats
from vision_risk.vision_logging import bind_request, get_logger

logger = get_logger(__name__)

SOURCE_CACHE = "cache"
SOURCE_NETWORK = "network"

# Neighborhood context is per address, whatever limit produced it
ANY_LIMIT = 0


@dataclass(frozen=True)
class NeighborsQuery:
    address: str
    network: str
    hop: int = DEFAULT_HOP
    limit: int = DEFAULT_LIMIT
    cap: int = DEFAULT_CAP


@dataclass(frozen=True)
class NeighborsResult:
    graph: NeighborGraph
    stats: Stats | None
    """None when neighbor stats are disabled by flags."""

    def to_dict(self) -> dict[str, Any]:
        return {
            "graph": self.graph.to_dict(),
            "stats": self.stats.to_dict() if self.stats is not None else None,
        }


def _int_param(payload: dict[str, Any], key: str, default: int) -> int:
    value = payload.get(key)
    if value is None or value == "":
        return default
    if isinstance(value, bool):
        raise InvalidRequestError(f"{key} must be an integer")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise InvalidRequestError(f"{key} must be an integer") from None


def _pick(payload: dict[str, Any], camel: str, snake: str, default: Any) -> Any:
    if camel in payload:
        return payload[camel]
    return payload.get(snake, default)


def _ms(started: float) -> float:
    return round((time.perf_counter() - started) * 1000, 2)


class Dispatcher:
    def __init__(
        self,
        config: WorkerConfig | None = None,
        clients: UpstreamClients | None = None,
        *,
        clock: Callable[[], float] = time.monotonic,
        sleep: SleepFn = asyncio.sleep,
    ) -> None:
        self.config = config or WorkerConfig()
        self.clients = clients or UpstreamClients.create()
        self.score_cache = ScoreCache()
        self.neighbor_cache: NeighborCache[NeighborsResult] = NeighborCache(self.config.neighbor_ttl_sec, clock)
        self.resolver = NeighborResolver(self.clients)
        self.scorer = Scorer(self.clients, self.score_cache)
        self.batch_scorer = BatchScorer(self.scorer, sleep)
        # Stats of each address's own neighborhood, used as single-score context
        self._neighborhoods: NeighborCache[Stats] = NeighborCache(self.config.neighbor_ttl_sec, clock)

    async def aclose(self) -> None:
        await self.clients.aclose()

    # -- typed operations -------------------------------------------------

    def init(self, payload: dict[str, Any]) -> WorkerConfig:
        """Replace the configuration with payload fields applied over the current one."""
        flags = payload.get("flags")
        self.config = replace(
            self.config,
            api_base=str(_pick(payload, "apiBase", "api_base", self.config.api_base) or ""),
            network=str(payload.get("network") or self.config.network),
            concurrency=_int_param(payload, "concurrency", self.config.concurrency),
            flags=self.config.flags.merged(flags if isinstance(flags, dict) else {}),
        )
        self.neighbor_cache.ttl_sec = self.config.neighbor_ttl_sec
        self._neighborhoods.ttl_sec = self.config.neighbor_ttl_sec
        logger.info(
            "worker_initialized",
            api_base=self.config.api_base or None,
            network=self.config.network,
            concurrency=self.config.concurrency,
            flags=self._flags_dict(),
        )
        return self.config

    async def score_one(self, item: dict[str, Any]) -> ScoreResult:
        address = require_address(item.get("id") or item.get("address"), context="scoreOne")
        network = normalize_address(item.get("network")) or self.config.network
        context = None
        if self.config.flags.graph_signals:
            context = self._neighborhoods.get(network, address, ANY_LIMIT)
        return await self.scorer.score_one(self.config, address, network, neighbor_context=context)

    def parse_neighbors_query(self, payload: dict[str, Any]) -> NeighborsQuery:
        address = require_address(payload.get("id") or payload.get("address"), context="neighbors")
        return NeighborsQuery(
            address=address,
            network=normalize_address(payload.get("network")) or self.config.network,
            hop=max(1, _int_param(payload, "hop", DEFAULT_HOP)),
            limit=max(1, _int_param(payload, "limit", DEFAULT_LIMIT)),
            cap=_int_param(payload, "cap", DEFAULT_CAP),
        )

    async def iter_neighbors(self, query: NeighborsQuery) -> AsyncIterator[NeighborGraph | Stats]:
        """
        Yield the capped graph as soon as it is known, then its stats.

        A fresh neighbor-cache hit is replayed verbatim (stats.source='cache')
        without any upstream call or scoring.
        """
        config = self.config
        cached = self.neighbor_cache.get(query.network, query.address, query.limit)
        if cached is not None:
            logger.info(
                "neighbors_cache_hit",
                address=short_address(query.address),
                network=query.network,
                limit=query.limit,
            )
            yield cached.graph
            if cached.stats is not None:
                yield replace(cached.stats, source=SOURCE_CACHE)
            return

        outcome = await self.resolver.resolve(
            config, query.address, query.network, hop=query.hop, limit=query.limit
        )
        capped = cap_graph(outcome.graph, query.cap)
        yield capped.graph

        stats: Stats | None = None
        if config.flags.neighbor_stats:
            timings = dict(outcome.timings)
            started = time.perf_counter()
            # Stub addresses are placeholders and never go to the upstream services
            neighbors = [] if outcome.degraded else capped.graph.neighbor_addresses()
            if neighbors:
                await self.batch_scorer.score_all(config, neighbors, query.network)
            timings["scoring"] = _ms(started)
            stats = aggregate_stats(
                self.score_cache,
                query.network,
                neighbors,
                total_neighbors=capped.total_neighbors,
                overflow=capped.overflow,
                heuristics=config.heuristics,
                timings=timings,
                branch=outcome.branch.value,
                source=SOURCE_NETWORK,
            )
            self._neighborhoods.put(query.network, query.address, ANY_LIMIT, stats)
            yield stats

        self.neighbor_cache.put(
            query.network, query.address, query.limit, NeighborsResult(graph=capped.graph, stats=stats)
        )

    async def neighbors(self, payload: dict[str, Any]) -> NeighborsResult:
        """Collect iter_neighbors into one result (used by the HTTP API)."""
        query = self.parse_neighbors_query(payload)
        graph = NeighborGraph()
        stats: Stats | None = None
        async for event in self.iter_neighbors(query):
            if isinstance(event, NeighborGraph):
                graph = event
            else:
                stats = event
        return NeighborsResult(graph=graph, stats=stats)

    # -- message routing --------------------------------------------------

    async def handle(self, request: Request) -> AsyncIterator[Response]:
        """Yield every response for request; errors become a final ERROR response."""
        log = bind_request(request.id, request.kind)
        started = time.perf_counter()
        try:
            try:
                kind = RequestKind(request.kind)
            except ValueError:
                raise UnknownRequestKindError(request.kind) from None
            if kind == RequestKind.INIT:
                self.init(request.payload)
                yield Response(request.id, ResponseKind.INIT_OK, data=self._config_dict())
            elif kind == RequestKind.SCORE_ONE:
                item = request.payload.get("item")
                if not isinstance(item, dict):
                    item = request.payload
                result = await self.score_one(item)
                yield Response(request.id, ResponseKind.RESULT, data=result.to_dict())
            elif kind == RequestKind.SCORE_BATCH:
                async for response in self._score_batch(request, log):
                    yield response
            elif kind == RequestKind.NEIGHBORS:
                query = self.parse_neighbors_query(request.payload)
                async for event in self.iter_neighbors(query):
                    if isinstance(event, NeighborGraph):
                        yield Response(request.id, ResponseKind.RESULT, data=event.to_dict())
                    else:
                        yield Response(request.id, ResponseKind.NEIGHBOR_STATS, data=event.to_dict())
        except (UnknownRequestKindError, InvalidRequestError) as e:
            log.info("request_rejected", code=e.code, error=e.message)
            yield Response.failure(request.id, e)
        except Exception as e:
            log.exception("request_failed", error=str(e))
            yield Response.failure(request.id, e)
        else:
            log.debug("request_done", duration_ms=_ms(started))

    async def _score_batch(self, request: Request, log: Any) -> AsyncIterator[Response]:
        items = request.payload.get("items")
        if items is None:
            items = []
        if not isinstance(items, list):
            raise InvalidRequestError("items must be a list")
        stream = self.config.flags.stream_batch
        collected: list[dict[str, Any]] = []
        scored = failed = 0
        for item in items:
            try:
                result = await self.score_one(item if isinstance(item, dict) else {"id": item})
            except Exception as e:
                failed += 1
                log.warning("score_batch_item_failed", error=str(e))
                continue
            scored += 1
            if stream:
                yield Response(request.id, ResponseKind.RESULT_STREAM, data=result.to_dict())
            else:
                collected.append(result.to_dict())
        if not stream:
            yield Response(request.id, ResponseKind.RESULT, data=collected)
        yield Response(request.id, ResponseKind.DONE, data={"scored": scored, "failed": failed})

    def _flags_dict(self) -> dict[str, bool]:
        flags = self.config.flags
        return {
            "graphSignals": flags.graph_signals,
            "streamBatch": flags.stream_batch,
            "neighborStats": flags.neighbor_stats,
        }

    def _config_dict(self) -> dict[str, Any]:
        return {
            "apiBase": self.config.api_base,
            "network": self.config.network,
            "concurrency": self.config.concurrency,
            "flags": self._flags_dict(),
        }
