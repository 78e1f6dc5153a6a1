#!/usr/bin/env python3
"""
TideTime - FastAPI application serving tide curves and extremes

This module contains the FastAPI application that fetches tide predictions for
the selected location and serves the tide view built from them.
"""

# Standard library imports
import contextlib
import logging
import os
import signal
from typing import Any, AsyncGenerator, Awaitable, Callable

# Third-party imports
import aiohttp
import fastapi
import uvicorn
from fastapi import Request, Response, responses

# Local imports
from tidetime import api
from tidetime import config as config_lib
from tidetime.clients.worldtides import WorldTidesApi
from tidetime.core.manager import TideStateManager
from tidetime.logging_utils import setup_logging
from tidetime.store import LocationStore


@contextlib.asynccontextmanager
async def lifespan(app: fastapi.FastAPI) -> AsyncGenerator[None, None]:
    """Create the HTTP session and state manager, and restore the saved location.

    Args:
        app: The FastAPI application instance

    Yields:
        None when setup is complete
    """
    cfg = config_lib.get()
    if not cfg.api_key:
        logging.warning(
            f"{config_lib.ENV_API_KEY} is not set; tide requests will be rejected"
        )

    app.state.config = cfg
    app.state.http_session = aiohttp.ClientSession()
    client = WorldTidesApi(
        session=app.state.http_session,
        api_key=cfg.api_key,
        base_url=cfg.base_url,
        step=cfg.step_seconds,
        days=cfg.days,
        datum=cfg.datum,
        timeout=cfg.request_timeout,
    )
    app.state.tide_manager = TideStateManager(
        client=client, store=LocationStore(cfg.state_path)
    )
    # Don't wait for data since this would block application startup
    app.state.tide_manager.restore()
    yield

    logging.info("-----------------------------------------------")
    logging.info("Shutting down app")
    await app.state.tide_manager.stop()
    await app.state.http_session.close()


app = fastapi.FastAPI(lifespan=lifespan)


# API response headers for preventing caching
NO_CACHE_HEADERS = {
    "Cache-Control": "no-cache, no-store, must-revalidate",
    "Pragma": "no-cache",
    "Expires": "0",
}


@app.middleware("http")
async def add_cache_control_headers(
    request: Request, call_next: Callable[[Request], Awaitable[Response]]
) -> Response:
    """Add cache control headers to API responses to prevent caching."""
    response = await call_next(request)
    if request.url.path.startswith("/api/"):
        for name, value in NO_CACHE_HEADERS.items():
            response.headers[name] = value
    return response


api.register_routes(app)


@app.get("/")
async def root_index() -> responses.RedirectResponse:
    """Redirect root path to the tide view."""
    return responses.RedirectResponse("/api/tides", status_code=307)


def setup_signal_handlers() -> None:
    """Set up signal handlers to log when specific signals are received.

    Note: Only registers a handler for SIGTERM, as handling SIGINT would
    interfere with the default Ctrl+C behavior that uvicorn relies on.
    """
    original_sigterm_handler = signal.getsignal(signal.SIGTERM)

    def sigterm_handler(sig: int, frame: Any) -> None:
        logging.warning("Received SIGTERM signal, beginning shutdown")
        if callable(original_sigterm_handler):
            original_sigterm_handler(sig, frame)

    signal.signal(signal.SIGTERM, sigterm_handler)


def start_app() -> fastapi.FastAPI:
    """Initialize and return the FastAPI application.

    Sets up logging based on the environment (Google Cloud Run or local).

    Returns:
        Configured FastAPI application instance
    """
    setup_logging(config_lib.get().log_level)
    logging.info("***********************************************")
    logging.info("Starting app")
    setup_signal_handlers()
    return app


def run() -> None:
    """Run the application with uvicorn."""
    logging.info("Running uvicorn app")
    uvicorn.run(
        "tidetime.main:start_app",
        factory=True,
        host="0.0.0.0",
        port=int(os.environ.get("PORT", 8080)),
        log_level="info",
    )


if __name__ == "__main__":
    run()
