"""Neighbor-set summary computed from the score cache alone (no I/O)."""

from __future__ import annotations

from typing import Iterable

from vision_risk.cache.score_cache import ScoreCache
from vision_risk.config.heuristics import HeuristicsConfig
from vision_risk.scoring.models import ScoreResult, Stats


def _is_number(value: object) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _mean(values: list[float]) -> float | None:
    return sum(values) / len(values) if values else None


def is_dormant(result: ScoreResult, heuristics: HeuristicsConfig) -> bool:
    """Older than the dormancy age with no positive transaction count."""
    tx = result.explain.tx_count
    has_activity = _is_number(tx) and tx > 0
    return result.feats.age_days > heuristics.dormant_age_days and not has_activity


def aggregate_stats(
    score_cache: ScoreCache,
    network: str,
    addresses: Iterable[str],
    *,
    total_neighbors: int,
    overflow: int,
    heuristics: HeuristicsConfig,
    timings: dict[str, float] | None = None,
    branch: str = "primary",
    source: str = "network",
) -> Stats:
    """
    Summarize the cached results for addresses.

    n counts only addresses with a cached score; a neighbor whose scoring
    failed simply does not contribute. sparseNeighborhood uses the pre-cap
    total so capping never makes a neighborhood look sparse.
    """
    results = score_cache.get_many(network, addresses)
    n = len(results)
    days = [r.feats.age_days for r in results if _is_number(r.feats.age_days)]
    txs = [r.explain.tx_count for r in results if _is_number(r.explain.tx_count)]
    dormant = sum(1 for r in results if is_dormant(r, heuristics))
    return Stats(
        n=n,
        avg_days=_mean(days),
        avg_tx=_mean(txs),
        inactive_ratio=dormant / n if n else 0.0,
        total_neighbors=total_neighbors,
        overflow=overflow,
        sparse_neighborhood=total_neighbors < heuristics.sparse_threshold,
        timings=dict(timings or {}),
        source=source,
        branch=branch,
    )
