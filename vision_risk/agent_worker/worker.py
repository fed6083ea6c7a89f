"""
Single-consumer worker actor.

Requests go into an asyncio inbox and are processed strictly one at a time,
each to completion, by one background task. Every submitted request gets its
own future that resolves to the full list of responses; an optional
on_event callback sees each response as it is produced (e.g. the graph
before the stats of a NEIGHBORS request).

    async with RiskWorker(Dispatcher(config)) as worker:
        responses = await worker.request("NEIGHBORS", {"id": addr})
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any, Callable

from vision_risk.agent_worker.dispatcher import Dispatcher
from vision_risk.agent_worker.messages import Request, Response
from vision_risk.vision_logging import get_logger

logger = get_logger(__name__)

EventCallback = Callable[[Response], None]


@dataclass
class _Envelope:
    request: Request
    future: asyncio.Future
    on_event: EventCallback | None = None


@dataclass
class WorkerState:
    """Counters for health reporting."""

    processed_count: int = 0
    error_count: int = 0
    last_request_id: str | None = None
    last_error: str | None = None
    queue_size: int = 0


class RiskWorker:
    def __init__(self, dispatcher: Dispatcher) -> None:
        self.dispatcher = dispatcher
        self.state = WorkerState()
        self._inbox: asyncio.Queue[_Envelope | None] | None = None
        self._task: asyncio.Task | None = None
        self._stopping = False

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self) -> None:
        if self.running:
            return
        self._inbox = asyncio.Queue()
        self._stopping = False
        self._task = asyncio.create_task(self.run())
        logger.info("worker_started", network=self.dispatcher.config.network)

    async def stop(self) -> None:
        """
        Finish every accepted request, then stop the consumer task.

        submit() is refused from the moment stop() is called; anything still in
        the inbox after the consumer exits is failed rather than left pending.
        """
        if self._task is None or self._inbox is None:
            return
        self._stopping = True
        await self._inbox.put(None)
        await self._task
        self._task = None
        while not self._inbox.empty():
            envelope = self._inbox.get_nowait()
            if envelope is not None and not envelope.future.done():
                envelope.future.set_exception(RuntimeError("worker stopped"))
        self._stopping = False
        logger.info(
            "worker_stopped",
            processed_count=self.state.processed_count,
            error_count=self.state.error_count,
        )

    async def __aenter__(self) -> "RiskWorker":
        await self.start()
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.stop()

    def submit(self, request: Request, on_event: EventCallback | None = None) -> asyncio.Future:
        """Queue request; the returned future resolves to its list of responses."""
        if self._inbox is None or not self.running:
            raise RuntimeError("worker is not running")
        if self._stopping:
            raise RuntimeError("worker is stopping")
        future = asyncio.get_running_loop().create_future()
        self._inbox.put_nowait(_Envelope(request=request, future=future, on_event=on_event))
        return future

    async def request(
        self,
        kind: str,
        payload: dict[str, Any] | None = None,
        on_event: EventCallback | None = None,
    ) -> list[Response]:
        return await self.submit(Request(kind=kind, payload=payload or {}), on_event)

    async def run(self) -> None:
        assert self._inbox is not None
        while True:
            envelope = await self._inbox.get()
            if envelope is None:
                break
            self.state.queue_size = self._inbox.qsize()
            await self._process(envelope)

    async def _process(self, envelope: _Envelope) -> None:
        request = envelope.request
        responses: list[Response] = []
        try:
            async for response in self.dispatcher.handle(request):
                responses.append(response)
                if envelope.on_event is not None:
                    try:
                        envelope.on_event(response)
                    except Exception as e:
                        logger.warning("worker_event_callback_failed", request_id=request.id, error=str(e))
        except Exception as e:
            self.state.error_count += 1
            self.state.last_error = str(e)
            logger.exception("worker_request_failed", request_id=request.id, error=str(e))
            if not envelope.future.done():
                envelope.future.set_exception(e)
            return
        self.state.processed_count += 1
        self.state.last_request_id = request.id
        if any(r.is_error for r in responses):
            self.state.error_count += 1
            self.state.last_error = next(r.error for r in responses if r.is_error)
        if not envelope.future.done():
            envelope.future.set_result(responses)
