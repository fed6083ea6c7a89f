"""
Policy client: GET /check?address&network → sanctions/compliance verdict.

Absence (any failure) is a distinct state from "checked, clean": callers get
UpstreamResult.failure and treat it as "no policy signal".
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any

from vision_risk.clients.base import FAILURE_BAD_PAYLOAD, UpstreamHttp, UpstreamResult
from vision_risk.config.settings import WorkerConfig
from vision_risk.vision_logging import get_logger

logger = get_logger(__name__)

CHECK_PATH = "/check"


@dataclass(frozen=True)
class PolicyResult:
    block: bool = False
    risk_score: float | None = None
    reasons: tuple[str, ...] = ()
    tx_count: int | None = None


def _numeric(value: Any) -> float | None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if not math.isfinite(value):
        return None
    return value


def parse_policy(raw: Any) -> PolicyResult | None:
    """Defaults missing fields; None when the payload is not an object."""
    if not isinstance(raw, dict):
        return None
    reasons_raw = raw.get("reasons")
    if reasons_raw is None:
        reasons_raw = raw.get("risk_factors")
    if isinstance(reasons_raw, str):
        reasons_raw = [reasons_raw]
    if not isinstance(reasons_raw, (list, tuple)):
        reasons_raw = []
    reasons = tuple(str(r) for r in reasons_raw if r is not None and str(r).strip())
    tx_count = _numeric(raw.get("tx_count", raw.get("txCount")))
    return PolicyResult(
        block=raw.get("block") is True,
        risk_score=_numeric(raw.get("risk_score")),
        reasons=reasons,
        tx_count=int(tx_count) if tx_count is not None else None,
    )


class PolicyClient:
    def __init__(self, http: UpstreamHttp) -> None:
        self.http = http

    async def check(self, config: WorkerConfig, address: str, network: str) -> UpstreamResult[PolicyResult]:
        result = await self.http.get_json(config, CHECK_PATH, {"address": address, "network": network})
        result = result.map(parse_policy)
        if not result.ok:
            return result
        policy = result.value
        if policy is None:
            logger.info("policy_payload_malformed", address=address[:16], network=network)
            return UpstreamResult.failure(FAILURE_BAD_PAYLOAD, status=result.status, elapsed_ms=result.elapsed_ms)
        return UpstreamResult.success(policy, status=result.status, elapsed_ms=result.elapsed_ms)
