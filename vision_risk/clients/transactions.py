"""
Transaction client: GET /txs?address&network&limit&sort → {result: [tx]}.

Rows are normalized to TxRecord; rows with no usable address are dropped.
An optional total/count field in the payload is surfaced as the address's
transaction count.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any

from vision_risk.clients.base import UpstreamHttp, UpstreamResult
from vision_risk.config.settings import WorkerConfig
from vision_risk.graph.normalize import TxRecord, parse_transaction

TXS_PATH = "/txs"
SORT_ASC = "asc"
SORT_DESC = "desc"


@dataclass(frozen=True)
class TxPage:
    txs: tuple[TxRecord, ...] = ()
    total: int | None = None


def parse_tx_page(raw: Any) -> TxPage:
    rows = raw.get("result") if isinstance(raw, dict) else raw
    if not isinstance(rows, list):
        rows = []
    txs = tuple(t for t in (parse_transaction(r) for r in rows) if t is not None)
    total = None
    if isinstance(raw, dict):
        value = raw.get("total", raw.get("count"))
        if isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value):
            total = int(value)
    return TxPage(txs=txs, total=total)


class TransactionClient:
    def __init__(self, http: UpstreamHttp) -> None:
        self.http = http

    async def fetch(
        self,
        config: WorkerConfig,
        address: str,
        network: str,
        *,
        limit: int,
        sort: str = SORT_DESC,
    ) -> UpstreamResult[TxPage]:
        result = await self.http.get_json(
            config,
            TXS_PATH,
            {"address": address, "network": network, "limit": limit, "sort": sort},
        )
        return result.map(parse_tx_page)
