"""
Main entrypoint: FastAPI server with the risk worker running inside it.

The worker consumer is started by the app's lifespan handler, so the API and
the worker share one event loop. On SIGINT/SIGTERM uvicorn shuts the app
down and the worker drains its inbox before exiting.

Env: VISION_API_BASE, VISION_NETWORK, API_HOST, API_PORT, LOG_LEVEL, etc.

Equivalent: uvicorn vision_risk.api_server.app:app --host 0.0.0.0 --port 8000
"""

import os

# Configure structured JSON logging before other imports that may log
from vision_risk.vision_logging import get_logger

logger = get_logger("main")


def main() -> None:
    """Run the FastAPI server (and with it the worker) in the main thread."""
    api_host = os.getenv("API_HOST", "0.0.0.0").strip()
    api_port = int(os.getenv("API_PORT", "8000").strip() or "8000")

    from vision_risk.api_server.app import app
    import uvicorn

    logger.info("main_server_starting", host=api_host, port=api_port)
    uvicorn.run(app, host=api_host, port=api_port, log_level=os.getenv("LOG_LEVEL", "info").lower())


if __name__ == "__main__":
    main()
