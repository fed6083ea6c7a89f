"""
Explainable breakdown of a policy verdict into weighted factors.

Each upstream reason is mapped to a canonical label (alias table) and a weight
(weight table); both tables come from HeuristicsConfig. Labels are
deduplicated, first occurrence wins. A blocked verdict always carries a
sanction entry so the breakdown agrees with the blocking decision.
"""

from __future__ import annotations

import re
from typing import Iterable

from vision_risk.config.heuristics import HeuristicsConfig
from vision_risk.scoring.models import BreakdownEntry

SANCTION_RE = re.compile(r"sanction|ofac", re.IGNORECASE)


def is_sanction_reason(text: str) -> bool:
    return bool(SANCTION_RE.search(text))


def make_breakdown(
    reasons: Iterable[str],
    blocked: bool,
    heuristics: HeuristicsConfig,
) -> tuple[BreakdownEntry, ...]:
    """Weighted entries sorted by delta descending (stable for equal deltas)."""
    entries: list[BreakdownEntry] = []
    seen: set[str] = set()
    for reason in reasons:
        label = heuristics.canonical_label(str(reason))
        if label in seen:
            continue
        seen.add(label)
        delta = heuristics.weight_for(label) or heuristics.weight_for(str(reason))
        entries.append(BreakdownEntry(label=label, delta=delta))
    if blocked and heuristics.sanction_label not in seen:
        entries.insert(0, BreakdownEntry(label=heuristics.sanction_label, delta=heuristics.sanction_weight))
    return tuple(sorted(entries, key=lambda e: e.delta, reverse=True))
