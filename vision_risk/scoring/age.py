"""Wallet age from the earliest known transaction timestamp."""

from __future__ import annotations

from dataclasses import dataclass

from vision_risk.clients import UpstreamClients
from vision_risk.clients.transactions import SORT_ASC
from vision_risk.config.settings import WorkerConfig

MS_PER_DAY = 86_400_000


@dataclass(frozen=True)
class AgeSample:
    first_seen_ms: int | None = None
    tx_count: int | None = None


def age_days(first_seen_ms: int | None, now_ms: int) -> int:
    """Whole days between first_seen_ms and now_ms; 0 when unknown or in the future."""
    if not first_seen_ms:
        return 0
    days = (now_ms - first_seen_ms) / MS_PER_DAY
    return int(round(days)) if days > 0 else 0


async def fetch_age_sample(
    clients: UpstreamClients, config: WorkerConfig, address: str, network: str
) -> AgeSample:
    """Earliest transaction (limit=1, ascending) and the payload's total, if any."""
    result = await clients.transactions.fetch(config, address, network, limit=1, sort=SORT_ASC)
    if not result.ok or result.value is None:
        return AgeSample()
    page = result.value
    first = page.txs[0].timestamp_ms if page.txs else None
    return AgeSample(first_seen_ms=first, tx_count=page.total)
