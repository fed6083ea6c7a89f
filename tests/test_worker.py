"""
Tests for the single-consumer worker actor (vision_risk.agent_worker.worker).
"""

from __future__ import annotations

import asyncio

import pytest

from fakes import CENTER, addr, star_graph
from vision_risk.agent_worker.messages import Request, ResponseKind
from vision_risk.agent_worker.worker import RiskWorker


def test_request_resolves_future_with_all_responses(dispatcher, upstream):
    upstream.neighbors[CENTER] = star_graph(CENTER, [addr(i) for i in range(6)])
    seen = []

    async def scenario():
        async with RiskWorker(dispatcher) as worker:
            return await worker.request("NEIGHBORS", {"id": CENTER}, on_event=lambda r: seen.append(r.kind))

    responses = asyncio.run(scenario())
    assert [r.kind for r in responses] == [ResponseKind.RESULT, ResponseKind.NEIGHBOR_STATS]
    assert seen == [ResponseKind.RESULT, ResponseKind.NEIGHBOR_STATS]


def test_requests_are_processed_one_at_a_time_in_order(dispatcher):
    """Concurrently submitted requests complete in submission order, never interleaved."""
    order = []

    async def scenario():
        async with RiskWorker(dispatcher) as worker:
            futures = [
                worker.submit(
                    Request(kind="SCORE_ONE", payload={"item": {"id": addr(i)}}, id=f"r{i}"),
                    on_event=lambda r: order.append(r.id),
                )
                for i in range(5)
            ]
            return await asyncio.gather(*futures)

    results = asyncio.run(scenario())
    assert order == [f"r{i}" for i in range(5)]
    assert [res[0].data["id"] for res in results] == [addr(i) for i in range(5)]


def test_error_responses_are_counted(dispatcher):
    async def scenario():
        async with RiskWorker(dispatcher) as worker:
            responses = await worker.request("NOPE")
            return worker, responses

    worker, responses = asyncio.run(scenario())
    assert responses[0].kind == ResponseKind.ERROR
    assert worker.state.processed_count == 1
    assert worker.state.error_count == 1
    assert worker.state.last_error == "unknown type: NOPE"


def test_failing_callback_does_not_break_the_request(dispatcher):
    def explode(response):
        raise ValueError("callback bug")

    async def scenario():
        async with RiskWorker(dispatcher) as worker:
            return await worker.request("SCORE_ONE", {"item": {"id": addr(1)}}, on_event=explode)

    responses = asyncio.run(scenario())
    assert responses[0].kind == ResponseKind.RESULT


def test_submit_requires_running_worker(dispatcher):
    worker = RiskWorker(dispatcher)

    async def scenario():
        worker.submit(Request(kind="INIT"))

    with pytest.raises(RuntimeError):
        asyncio.run(scenario())


def test_stop_drains_accepted_requests(dispatcher):
    async def scenario():
        worker = RiskWorker(dispatcher)
        await worker.start()
        futures = [worker.submit(Request(kind="SCORE_ONE", payload={"item": {"id": addr(i)}})) for i in range(3)]
        await worker.stop()
        return worker, futures

    worker, futures = asyncio.run(scenario())
    assert all(f.done() for f in futures)
    assert not worker.running
    assert worker.state.processed_count == 3


def test_submit_is_refused_once_stop_begins(dispatcher):
    """A request arriving while the worker shuts down fails fast instead of hanging."""

    async def scenario():
        worker = RiskWorker(dispatcher)
        await worker.start()
        stopping = asyncio.create_task(worker.stop())
        await asyncio.sleep(0)
        with pytest.raises(RuntimeError, match="stopping"):
            worker.submit(Request(kind="INIT"))
        await stopping
        return worker

    worker = asyncio.run(scenario())
    assert not worker.running


def test_worker_restarts_after_stop(dispatcher):
    async def scenario():
        worker = RiskWorker(dispatcher)
        await worker.start()
        await worker.stop()
        await worker.start()
        responses = await worker.request("INIT", {"network": "polygon"})
        await worker.stop()
        return responses

    responses = asyncio.run(scenario())
    assert [r.kind for r in responses] == [ResponseKind.INIT_OK]
