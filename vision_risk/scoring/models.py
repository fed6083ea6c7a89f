"""
Score and stats result types.

ScoreResult is frozen: once placed in the score cache it is never mutated,
only replaced by a later scoring of the same key. to_dict() produces the wire
shape of the message contract (camelCase keys as consumed by the UI).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class BreakdownEntry:
    label: str
    delta: int

    def to_dict(self) -> dict[str, Any]:
        return {"label": self.label, "delta": self.delta}


@dataclass(frozen=True)
class LocalFeats:
    """Neighborhood signals; populated when stats for the address's own neighbors are known."""

    risky_neighbor_ratio: float = 0.0
    neighbor_avg_tx: float | None = None
    neighbor_avg_age_days: float | None = None
    neighbor_count: int | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "riskyNeighborRatio": self.risky_neighbor_ratio,
            "neighborAvgTx": self.neighbor_avg_tx,
            "neighborAvgAgeDays": self.neighbor_avg_age_days,
            "neighborCount": self.neighbor_count,
        }


@dataclass(frozen=True)
class Feats:
    age_days: int = 0
    mixer_taint: float = 0.0
    local: LocalFeats = field(default_factory=LocalFeats)

    def to_dict(self) -> dict[str, Any]:
        return {
            "ageDays": self.age_days,
            "mixerTaint": self.mixer_taint,
            "local": self.local.to_dict(),
        }


@dataclass(frozen=True)
class Explain:
    reasons: tuple[str, ...] = ()
    blocked: bool = False
    ofac_hit: bool = False
    tx_count: int | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "reasons": list(self.reasons),
            "blocked": self.blocked,
            "ofacHit": self.ofac_hit,
            "txCount": self.tx_count,
        }


@dataclass(frozen=True)
class ScoreResult:
    """
    Merged risk score for one address.

    Invariant: block is True implies risk_score == 100.
    """

    id: str
    network: str
    block: bool
    risk_score: float
    reasons: tuple[str, ...]
    breakdown: tuple[BreakdownEntry, ...]
    feats: Feats
    explain: Explain
    band: str = ""

    def __post_init__(self) -> None:
        if self.block and self.risk_score != 100:
            raise ValueError("blocked result must have risk_score 100")

    @property
    def address(self) -> str:
        return self.id

    @property
    def score(self) -> float:
        return self.risk_score

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": "address",
            "id": self.id,
            "address": self.id,
            "network": self.network,
            "block": self.block,
            "risk_score": self.risk_score,
            "score": self.risk_score,
            "band": self.band,
            "reasons": list(self.reasons),
            "breakdown": [b.to_dict() for b in self.breakdown],
            "feats": self.feats.to_dict(),
            "explain": self.explain.to_dict(),
        }


@dataclass(frozen=True)
class Stats:
    """Summary of a neighbor set, derived from the score cache."""

    n: int
    avg_days: float | None
    avg_tx: float | None
    inactive_ratio: float
    total_neighbors: int
    overflow: int
    sparse_neighborhood: bool
    timings: dict[str, float] = field(default_factory=dict)
    source: str = "network"
    """'network' when freshly computed, 'cache' when served from the neighbor cache."""
    branch: str = "primary"
    """Resolver branch that produced the graph; 'stub' means no real source answered."""

    def to_dict(self) -> dict[str, Any]:
        return {
            "n": self.n,
            "avgDays": self.avg_days,
            "avgTx": self.avg_tx,
            "inactiveRatio": self.inactive_ratio,
            "totalNeighbors": self.total_neighbors,
            "overflow": self.overflow,
            "sparseNeighborhood": self.sparse_neighborhood,
            "timings": dict(self.timings),
            "source": self.source,
            "branch": self.branch,
        }
