"""
Single-address scoring: policy verdict merged with local heuristics.

    blocked = policy.block or policy.risk_score == 100
    score   = 100 if blocked else clamp(policy.risk_score) or local baseline

Upstream failures degrade to "no signal" (baseline score, age 0, no
reasons); only a missing address is an error. Each result is written to the
score cache, replacing any earlier result for the same key.
"""

from __future__ import annotations

import time
from typing import Callable

from vision_risk.cache.score_cache import ScoreCache
from vision_risk.clients import UpstreamClients
from vision_risk.clients.policy import PolicyResult
from vision_risk.config.settings import WorkerConfig
from vision_risk.core.addresses import normalize_address, require_address, short_address
from vision_risk.scoring.age import age_days, fetch_age_sample
from vision_risk.scoring.bands import band_for_score
from vision_risk.scoring.breakdown import is_sanction_reason, make_breakdown
from vision_risk.scoring.models import Explain, Feats, LocalFeats, ScoreResult, Stats
from vision_risk.vision_logging import get_logger

logger = get_logger(__name__)


def is_blocked(policy: PolicyResult | None) -> bool:
    if policy is None:
        return False
    return policy.block or policy.risk_score == 100


def merged_score(policy: PolicyResult | None, blocked: bool, baseline: float) -> float:
    if blocked:
        return 100
    if policy is not None and policy.risk_score is not None:
        return max(0, min(100, policy.risk_score))
    return baseline


def local_feats(context: Stats | None) -> LocalFeats:
    """Neighborhood features from known stats, or the neutral default."""
    if context is None:
        return LocalFeats()
    return LocalFeats(
        risky_neighbor_ratio=context.inactive_ratio,
        neighbor_avg_tx=context.avg_tx,
        neighbor_avg_age_days=context.avg_days,
        neighbor_count=context.n,
    )


class Scorer:
    def __init__(
        self,
        clients: UpstreamClients,
        score_cache: ScoreCache,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.clients = clients
        self.score_cache = score_cache
        self._clock = clock

    async def score_one(
        self,
        config: WorkerConfig,
        address: str,
        network: str | None = None,
        neighbor_context: Stats | None = None,
    ) -> ScoreResult:
        """Score one address and store the result in the score cache."""
        address = require_address(address, context="score_one")
        network = normalize_address(network) or config.network
        heur = config.heuristics

        check = await self.clients.policy.check(config, address, network)
        policy = check.value if check.ok else None

        blocked = is_blocked(policy)
        score = merged_score(policy, blocked, heur.local_baseline_score)
        reasons = policy.reasons if policy is not None else ()
        breakdown = make_breakdown(reasons, blocked, heur)
        ofac_hit = blocked or any(is_sanction_reason(r) for r in reasons)

        sample = await fetch_age_sample(self.clients, config, address, network)
        days = age_days(sample.first_seen_ms, int(self._clock() * 1000))
        tx_count = policy.tx_count if policy is not None and policy.tx_count is not None else sample.tx_count

        result = ScoreResult(
            id=address,
            network=network,
            block=blocked,
            risk_score=score,
            reasons=reasons,
            breakdown=breakdown,
            feats=Feats(age_days=days, local=local_feats(neighbor_context)),
            explain=Explain(reasons=reasons, blocked=blocked, ofac_hit=ofac_hit, tx_count=tx_count),
            band=band_for_score(score, blocked),
        )
        self.score_cache.put(result)
        logger.debug(
            "address_scored",
            address=short_address(address),
            network=network,
            score=score,
            blocked=blocked,
            policy=check.ok,
        )
        return result
