"""
HTTP routes over the worker message contract.

Each endpoint submits one request to the app's RiskWorker, so HTTP callers
share the same serialized inbox, caches and pacing as any other client.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from pydantic import BaseModel, Field

from vision_risk.agent_worker.messages import Request as WorkerRequest
from vision_risk.agent_worker.messages import RequestKind, Response, ResponseKind
from vision_risk.agent_worker.worker import RiskWorker
from vision_risk.config.settings import DEFAULT_CAP, DEFAULT_HOP, DEFAULT_LIMIT
from vision_risk.vision_logging import get_logger

logger = get_logger(__name__)

router = APIRouter()

# Error codes caused by the caller rather than the worker
CLIENT_ERROR_CODES = {"invalid_request", "unknown_request_kind"}


class ScoreItem(BaseModel):
    id: str = Field(..., description="Address to score")
    network: str | None = Field(None, description="Network; defaults to the worker's network")


class ScoreBatchRequest(BaseModel):
    """POST /score/batch body."""

    items: list[ScoreItem] = Field(default_factory=list, max_length=1000)


class ScoreBatchResponse(BaseModel):
    results: list[dict[str, Any]] = Field(default_factory=list)
    scored: int = Field(0, description="Items scored successfully")
    failed: int = Field(0, description="Items that raised during scoring")


class NeighborsResponse(BaseModel):
    graph: dict[str, Any] = Field(..., description="Capped graph {nodes, links}; center is nodes[0]")
    stats: dict[str, Any] | None = Field(None, description="Neighbor stats; null when disabled")


def get_worker(request: Request) -> RiskWorker:
    """Dependency: app-scoped worker created in the lifespan handler."""
    return request.app.state.worker


async def _run(worker: RiskWorker, kind: RequestKind, payload: dict[str, Any]) -> list[Response]:
    try:
        responses = await worker.submit(WorkerRequest(kind=kind.value, payload=payload))
    except RuntimeError as e:
        # refused by a stopping worker, or failed when it stopped first
        raise HTTPException(status_code=503, detail=str(e)) from e
    for r in responses:
        if r.is_error:
            status = 400 if r.code in CLIENT_ERROR_CODES else 500
            raise HTTPException(status_code=status, detail=r.error)
    return responses


@router.get("/health")
def health(worker: RiskWorker = Depends(get_worker)) -> dict[str, Any]:
    """Liveness probe: API is up and the worker consumer is running."""
    state = worker.state
    return {
        "status": "ok" if worker.running else "degraded",
        "network": worker.dispatcher.config.network,
        "upstream": bool(worker.dispatcher.config.api_base),
        "processed_count": state.processed_count,
        "error_count": state.error_count,
    }


@router.get("/score/{address}")
async def score_address(
    address: str,
    network: str | None = Query(None),
    worker: RiskWorker = Depends(get_worker),
) -> dict[str, Any]:
    """Score one address (policy verdict merged with local heuristics)."""
    responses = await _run(worker, RequestKind.SCORE_ONE, {"item": {"id": address, "network": network}})
    return responses[0].data


@router.post("/score/batch", response_model=ScoreBatchResponse)
async def score_batch(body: ScoreBatchRequest, worker: RiskWorker = Depends(get_worker)) -> ScoreBatchResponse:
    """Score each item in order; failing items are counted, not fatal."""
    items = [item.model_dump() for item in body.items]
    responses = await _run(worker, RequestKind.SCORE_BATCH, {"items": items})
    results: list[dict[str, Any]] = []
    done: dict[str, Any] = {}
    for r in responses:
        if r.kind == ResponseKind.RESULT_STREAM:
            results.append(r.data)
        elif r.kind == ResponseKind.RESULT:
            results.extend(r.data)
        elif r.kind == ResponseKind.DONE:
            done = r.data
    return ScoreBatchResponse(results=results, scored=done.get("scored", 0), failed=done.get("failed", 0))


@router.get("/neighbors/{address}", response_model=NeighborsResponse)
async def neighbors(
    address: str,
    network: str | None = Query(None),
    hop: int = Query(DEFAULT_HOP, ge=1),
    limit: int = Query(DEFAULT_LIMIT, ge=1),
    cap: int = Query(DEFAULT_CAP),
    worker: RiskWorker = Depends(get_worker),
) -> NeighborsResponse:
    """Resolve, cap and summarize the neighbor graph of address."""
    payload = {"id": address, "network": network, "hop": hop, "limit": limit, "cap": cap}
    responses = await _run(worker, RequestKind.NEIGHBORS, payload)
    graph = next(r.data for r in responses if r.kind == ResponseKind.RESULT)
    stats = next((r.data for r in responses if r.kind == ResponseKind.NEIGHBOR_STATS), None)
    return NeighborsResponse(graph=graph, stats=stats)
