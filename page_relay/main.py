"""
FastAPI application entrypoint for the Facebook page relay.
"""

from __future__ import annotations

import logging
import time

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware

from page_relay.api.routes import internal_router, router
from page_relay.core.config import get_settings
from page_relay.core.logging import configure_logging

logger = logging.getLogger(__name__)


async def log_requests(request: Request, call_next) -> Response:
    start_time = time.perf_counter()
    response_status = 500
    try:
        response = await call_next(request)
        response_status = response.status_code
        return response
    finally:
        duration_ms = (time.perf_counter() - start_time) * 1000
        logger.info(
            "request method=%s path=%s status=%s duration_ms=%.2f",
            request.method,
            request.url.path,
            response_status,
            duration_ms,
        )


def create_app() -> FastAPI:
    """Factory for the FastAPI application."""
    settings = get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title="Facebook Page Relay",
        version="0.1.0",
        description=(
            "Facebook login, page listing and post forwarding to an automation "
            "webhook."
        ),
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.frontend_base_url],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.middleware("http")(log_requests)

    app.include_router(router)
    if settings.automation.expose_token_endpoint:
        app.include_router(internal_router)
    return app


app = create_app()

__all__ = ["app", "create_app"]
