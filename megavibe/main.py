#!/usr/bin/env python3
"""
MegaVibe Sessions - Main Entry Point

This is the thin orchestration layer that:
1. Loads configuration
2. Initializes modules
3. Runs the API server

All session logic is in the modules.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Callable, Optional

import uvicorn
from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from megavibe import __version__
from megavibe.logging_config import configure_logging, get_logging_config
from megavibe.modules.api import create_session_router
from megavibe.modules.config import ConfigModule, get_config
from megavibe.modules.middleware import create_session_middleware
from megavibe.modules.session import MemorySessionStore, SessionModule, SessionNotFound, utc_now

logger = logging.getLogger(__name__)


async def run_cleanup(session_module: SessionModule, interval: int) -> None:
    """Periodically drop expired sessions so idle ones do not hold memory."""
    while True:
        await asyncio.sleep(interval)
        session_module.cleanup_expired()


def create_app(
    config: Optional[ConfigModule] = None,
    clock: Callable[[], datetime] = utc_now,
) -> FastAPI:
    """
    Build the FastAPI application and its modules.

    Args:
        config: Configuration module (defaults to the process-wide one)
        clock: Time source shared by the store and the session module

    Returns:
        Configured FastAPI application; modules are on app.state
    """
    config = config or get_config()

    store = MemorySessionStore(maxsize=config.get("max_sessions"), clock=clock)
    session_module = SessionModule(store, default_ttl=config.get("session_ttl"), clock=clock)
    session_middleware = create_session_middleware(session_module, config)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """
        Manage application lifecycle - start and stop background cleanup.
        """
        logger.info("Starting MegaVibe session API...")
        cleanup_task = asyncio.create_task(
            run_cleanup(session_module, config.get("session_cleanup_interval", 300))
        )
        logger.info(
            f"Session API started (ttl={session_module.default_ttl}s, "
            f"max_sessions={config.get('max_sessions')})"
        )

        yield

        logger.info("Shutting down MegaVibe session API...")
        cleanup_task.cancel()
        try:
            await cleanup_task
        except asyncio.CancelledError:
            pass
        logger.info("MegaVibe session API shutdown complete")

    app = FastAPI(
        title="MegaVibe Session API",
        description="MegaVibe - cookie-backed session lifecycle service",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.config = config
    app.state.session_store = store
    app.state.session_module = session_module

    @app.middleware("http")
    async def attach_session(request: Request, call_next):
        return await session_middleware(request, call_next)

    app.include_router(
        create_session_router(session_module, config.get("session_cookie_name")),
        prefix=config.get("api_prefix", ""),
    )

    # Health/Monitoring Endpoints

    @app.get("/healthz")
    async def healthz():
        """
        Minimal health check endpoint for readiness/liveness checks.

        Returns:
            200: Service is running
        """
        return {"status": "ok"}

    @app.get("/metrics")
    async def metrics():
        """
        Prometheus-compatible metrics endpoint.
        """
        metrics_text = f"""# HELP megavibe_active_sessions Number of live sessions
# TYPE megavibe_active_sessions gauge
megavibe_active_sessions {session_module.active_session_count()}
"""
        return Response(content=metrics_text, media_type="text/plain")

    # Error handlers

    @app.exception_handler(SessionNotFound)
    async def session_not_found_handler(request: Request, exc: SessionNotFound):
        """Handle lookups of missing or expired sessions."""
        logger.debug(f"{request.method} {request.url.path}: {exc}")
        return JSONResponse(status_code=404, content={"error": "Session not found"})

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        """Render HTTP errors with the same body shape as domain errors."""
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.detail},
            headers=getattr(exc, "headers", None),
        )

    return app


_config = get_config()
configure_logging(_config.get("log_level"), _config.get("session_log_level"))
app = create_app()


def run() -> None:
    """Console entry point."""
    config = get_config()
    uvicorn.run(
        "megavibe.main:app",
        host=config.get("host"),
        port=config.get("port"),
        log_level=config.get("log_level").lower(),
        reload=config.get("debug"),
        log_config=get_logging_config(config.get("log_level"), config.get("session_log_level")),
    )


if __name__ == "__main__":
    run()
