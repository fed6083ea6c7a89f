"""
Tunable scoring heuristics: reason weights, reason aliases, dormancy and sparsity.

These are product heuristics rather than invariants, so they live in a config
object that can be overridden from a JSON file (VISION_HEURISTICS_PATH):

    {
      "reason_weights": {"fan In High": 12},
      "reason_aliases": {"Tornado": "known Mixer Proximity"},
      "dormant_age_days": 400,
      "sparse_threshold": 5
    }

Mappings in the file are merged over the defaults; scalars replace them.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any

from vision_risk.vision_logging import get_logger

logger = get_logger(__name__)

SANCTION_LABEL = "sanctioned Counterparty"
SANCTION_WEIGHT = 40

DEFAULT_REASON_WEIGHTS: dict[str, int] = {
    SANCTION_LABEL: SANCTION_WEIGHT,
    "fan In High": 9,
    "shortest Path To Sanctioned": 6,
    "burst Anomaly": 0,
    "known Mixer Proximity": 0,
}

# Upstream reason strings that name the same factor as a canonical label
DEFAULT_REASON_ALIASES: dict[str, str] = {
    "OFAC": SANCTION_LABEL,
    "OFAC/sanctions list match": SANCTION_LABEL,
}


@dataclass(frozen=True)
class HeuristicsConfig:
    """Heuristic tables and thresholds used by scoring and stats aggregation."""

    reason_weights: dict[str, int] = field(default_factory=lambda: dict(DEFAULT_REASON_WEIGHTS))
    reason_aliases: dict[str, str] = field(default_factory=lambda: dict(DEFAULT_REASON_ALIASES))
    sanction_label: str = SANCTION_LABEL
    sanction_weight: int = SANCTION_WEIGHT
    local_baseline_score: int = 55
    """Score used when the policy check gives no numeric risk_score."""
    dormant_age_days: int = 365
    """A neighbor older than this with no positive tx count is dormant."""
    sparse_threshold: int = 5
    """Fewer neighbors than this is a sparse neighborhood."""
    retry_limit_floor: int = 50
    """Minimum limit for the single larger-radius retry of the primary source."""
    stub_neighbor_count: int = 10

    def weight_for(self, label: str) -> int:
        return int(self.reason_weights.get(label, 0))

    def canonical_label(self, reason: str) -> str:
        return self.reason_aliases.get(reason, reason)


def _merge(base: HeuristicsConfig, overrides: dict[str, Any]) -> HeuristicsConfig:
    known = {f.name for f in fields(HeuristicsConfig)}
    changes: dict[str, Any] = {}
    for key, value in overrides.items():
        if key not in known:
            logger.warning("heuristics_unknown_key", key=key)
            continue
        current = getattr(base, key)
        if isinstance(current, dict):
            if not isinstance(value, dict):
                logger.warning("heuristics_invalid_value", key=key)
                continue
            changes[key] = {**current, **value}
        else:
            changes[key] = type(current)(value)
    return replace(base, **changes)


def load_heuristics(path: Path | None = None) -> HeuristicsConfig:
    """
    Load heuristics from a JSON file merged over the defaults.

    Returns the defaults when path is None, missing, or unreadable.
    """
    base = HeuristicsConfig()
    if path is None:
        return base
    if not path.is_file():
        logger.debug("heuristics_file_missing", path=str(path))
        return base
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        logger.warning("heuristics_load_failed", path=str(path), error=str(e))
        return base
    if not isinstance(data, dict):
        logger.warning("heuristics_not_an_object", path=str(path))
        return base
    return _merge(base, data)
