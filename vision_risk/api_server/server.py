"""
FastAPI server for the risk worker.

One Dispatcher and one RiskWorker per app, created in the lifespan handler
and stored on app.state. Config via env (see vision_risk.config.env).
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any, Callable

from fastapi import FastAPI, HTTPException
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from vision_risk import __version__
from vision_risk.agent_worker.dispatcher import Dispatcher
from vision_risk.agent_worker.worker import RiskWorker
from vision_risk.api_server.routes import router
from vision_risk.config.settings import get_settings
from vision_risk.vision_logging import get_logger

logger = get_logger(__name__)

DispatcherFactory = Callable[[], Dispatcher]


def default_dispatcher() -> Dispatcher:
    return Dispatcher(get_settings())


def create_app(dispatcher_factory: DispatcherFactory | None = None) -> FastAPI:
    """Build the app; dispatcher_factory lets tests inject a dispatcher with fake upstreams."""
    factory = dispatcher_factory or default_dispatcher

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Start the worker consumer; drain it and close upstream connections on shutdown."""
        dispatcher = factory()
        worker = RiskWorker(dispatcher)
        await worker.start()
        app.state.worker = worker
        logger.info(
            "api_worker_started",
            network=dispatcher.config.network,
            upstream=bool(dispatcher.config.api_base),
        )
        try:
            yield
        finally:
            await worker.stop()
            await dispatcher.aclose()
            logger.info("api_worker_stopped")

    app = FastAPI(
        title="Vision Risk API",
        description="Address risk scoring and neighbor graph resolution.",
        version=__version__,
        lifespan=lifespan,
    )
    app.include_router(router)

    @app.exception_handler(HTTPException)
    def http_exception_handler(request: Any, exc: HTTPException) -> JSONResponse:
        """Consistent JSON error response for HTTPException."""
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})

    @app.exception_handler(RequestValidationError)
    def validation_exception_handler(request: Any, exc: RequestValidationError) -> JSONResponse:
        """Invalid query or body parameters are a 400, like any other invalid request."""
        return JSONResponse(status_code=400, content={"detail": jsonable_encoder(exc.errors())})

    return app


app = create_app()
