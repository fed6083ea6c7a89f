"""
Paced batch scoring of a neighbor set.

Addresses already in the score cache are skipped for the process lifetime.
The rest are split into consecutive batches of config.batch_size; items are
scored strictly one after another and the worker pauses for
config.batch_pause_sec between batches (not after the last one) so the
upstream services are not flooded. A failing item is logged and counted, and
never aborts the batch.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Awaitable, Callable, Iterable

from vision_risk.config.settings import WorkerConfig
from vision_risk.core.addresses import normalize_address, short_address
from vision_risk.scoring.scorer import Scorer
from vision_risk.vision_logging import get_logger

logger = get_logger(__name__)

SleepFn = Callable[[float], Awaitable[None]]


@dataclass(frozen=True)
class BatchReport:
    scored: int = 0
    skipped: int = 0
    """Addresses already present in the score cache."""
    failed: int = 0
    batches: int = 0
    pauses: int = 0


def unique_addresses(addresses: Iterable[str]) -> list[str]:
    """Normalized, non-empty, first occurrence order."""
    seen: dict[str, None] = {}
    for a in addresses:
        key = normalize_address(a)
        if key:
            seen.setdefault(key)
    return list(seen)


def split_batches(items: list[str], size: int) -> list[list[str]]:
    size = max(1, size)
    return [items[i : i + size] for i in range(0, len(items), size)]


class BatchScorer:
    def __init__(self, scorer: Scorer, sleep: SleepFn = asyncio.sleep) -> None:
        self.scorer = scorer
        self._sleep = sleep

    async def score_all(
        self, config: WorkerConfig, addresses: Iterable[str], network: str
    ) -> BatchReport:
        cache = self.scorer.score_cache
        unique = unique_addresses(addresses)
        pending = [a for a in unique if not cache.contains(network, a)]
        skipped = len(unique) - len(pending)
        batches = split_batches(pending, config.batch_size)

        scored = failed = pauses = 0
        for index, batch in enumerate(batches):
            for address in batch:
                try:
                    await self.scorer.score_one(config, address, network)
                    scored += 1
                except Exception as e:
                    failed += 1
                    logger.warning(
                        "batch_item_failed",
                        address=short_address(address),
                        network=network,
                        error=str(e),
                    )
            if index < len(batches) - 1:
                await self._sleep(config.batch_pause_sec)
                pauses += 1

        report = BatchReport(
            scored=scored, skipped=skipped, failed=failed, batches=len(batches), pauses=pauses
        )
        logger.info(
            "batch_scoring_done",
            network=network,
            scored=scored,
            skipped=skipped,
            failed=failed,
            batches=len(batches),
        )
        return report
