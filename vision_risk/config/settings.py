"""
Worker settings: one explicit configuration value owned by the dispatcher.

The dispatcher passes its WorkerConfig into every component call; an INIT
request replaces it with an updated copy. Several independent workers (e.g.
in tests) can therefore run side by side with different settings.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from vision_risk.config.env import (
    DEFAULT_NETWORK,
    get_api_base,
    get_default_network,
    get_float,
    get_heuristics_path,
    get_int,
)
from vision_risk.config.heuristics import HeuristicsConfig, load_heuristics

DEFAULT_REQUEST_TIMEOUT_SEC = 15.0
DEFAULT_NEIGHBOR_TTL_SEC = 600.0
DEFAULT_BATCH_SIZE = 25
DEFAULT_BATCH_PAUSE_SEC = 0.075
DEFAULT_CONCURRENCY = 8
DEFAULT_HOP = 1
DEFAULT_LIMIT = 250
DEFAULT_CAP = 120


@dataclass(frozen=True)
class WorkerFlags:
    """Feature flags accepted by INIT."""

    graph_signals: bool = True
    """Attach known neighbor stats to single-address scores."""
    stream_batch: bool = True
    """SCORE_BATCH emits one RESULT_STREAM per item instead of one RESULT."""
    neighbor_stats: bool = True
    """NEIGHBORS scores the neighbor set and emits NEIGHBOR_STATS."""

    def merged(self, raw: dict[str, Any]) -> "WorkerFlags":
        """Return a copy with camelCase or snake_case keys from raw applied."""
        def pick(snake: str, camel: str, current: bool) -> bool:
            if camel in raw:
                return bool(raw[camel])
            if snake in raw:
                return bool(raw[snake])
            return current

        return WorkerFlags(
            graph_signals=pick("graph_signals", "graphSignals", self.graph_signals),
            stream_batch=pick("stream_batch", "streamBatch", self.stream_batch),
            neighbor_stats=pick("neighbor_stats", "neighborStats", self.neighbor_stats),
        )


@dataclass(frozen=True)
class WorkerConfig:
    """
    Configuration for the risk worker.

    api_base: Upstream proxy base URL; empty disables all upstream calls.
    network: Network used when a request does not name one.
    concurrency: Accepted from INIT for compatibility; scoring stays sequential.
    request_timeout_sec: Upper bound on each upstream call.
    neighbor_ttl_sec: Freshness window of the neighbor cache.
    batch_size / batch_pause_sec: Batch scorer pacing.
    """

    api_base: str = ""
    network: str = DEFAULT_NETWORK
    concurrency: int = DEFAULT_CONCURRENCY
    flags: WorkerFlags = field(default_factory=WorkerFlags)
    request_timeout_sec: float = DEFAULT_REQUEST_TIMEOUT_SEC
    neighbor_ttl_sec: float = DEFAULT_NEIGHBOR_TTL_SEC
    batch_size: int = DEFAULT_BATCH_SIZE
    batch_pause_sec: float = DEFAULT_BATCH_PAUSE_SEC
    heuristics: HeuristicsConfig = field(default_factory=HeuristicsConfig)

    def __post_init__(self) -> None:
        object.__setattr__(self, "api_base", (self.api_base or "").strip().rstrip("/"))
        object.__setattr__(self, "network", (self.network or DEFAULT_NETWORK).strip().lower())
        object.__setattr__(self, "concurrency", max(1, int(self.concurrency)))
        object.__setattr__(self, "request_timeout_sec", max(0.1, float(self.request_timeout_sec)))
        object.__setattr__(self, "neighbor_ttl_sec", max(0.0, float(self.neighbor_ttl_sec)))
        object.__setattr__(self, "batch_size", max(1, int(self.batch_size)))
        object.__setattr__(self, "batch_pause_sec", max(0.0, float(self.batch_pause_sec)))


def get_settings() -> WorkerConfig:
    """Build WorkerConfig from environment with defaults."""
    return WorkerConfig(
        api_base=get_api_base(),
        network=get_default_network(),
        request_timeout_sec=get_float("VISION_REQUEST_TIMEOUT_SEC", DEFAULT_REQUEST_TIMEOUT_SEC),
        neighbor_ttl_sec=get_float("VISION_NEIGHBOR_TTL_SEC", DEFAULT_NEIGHBOR_TTL_SEC),
        batch_size=get_int("VISION_BATCH_SIZE", DEFAULT_BATCH_SIZE),
        batch_pause_sec=get_float("VISION_BATCH_PAUSE_MS", DEFAULT_BATCH_PAUSE_SEC * 1000) / 1000.0,
        heuristics=load_heuristics(get_heuristics_path()),
    )
