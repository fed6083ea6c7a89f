"""Scoring: single-address merge, paced batch scoring and neighbor stats."""

from vision_risk.scoring.batch import BatchReport, BatchScorer
from vision_risk.scoring.bands import band_for_score
from vision_risk.scoring.models import BreakdownEntry, Explain, Feats, LocalFeats, ScoreResult, Stats
from vision_risk.scoring.scorer import Scorer
from vision_risk.scoring.stats import aggregate_stats

__all__ = [
    "BatchReport",
    "BatchScorer",
    "BreakdownEntry",
    "Explain",
    "Feats",
    "LocalFeats",
    "ScoreResult",
    "Scorer",
    "Stats",
    "aggregate_stats",
    "band_for_score",
]
