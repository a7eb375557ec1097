"""
FastAPI routes for the Facebook page relay.
"""

from __future__ import annotations

import hmac
import logging
import sqlite3
from http import HTTPStatus
from typing import Annotated, Any
from urllib.parse import urlencode

from fastapi import APIRouter, Depends, Header, Query, Request, Response
from fastapi.responses import JSONResponse, PlainTextResponse, RedirectResponse

from page_relay.clients import GraphAPIError, WebhookDispatchError
from page_relay.clients.automation_webhook import INTERNAL_KEY_HEADER
from page_relay.dependencies import (
    get_app_settings,
    get_facebook_graph_client,
    get_facebook_login_service,
    get_post_queue_service,
    get_user_token_service,
)
from page_relay.schemas import PageListResponse, QueuePostRequest
from page_relay.services import UserTokenNotFoundError

router = APIRouter()
internal_router = APIRouter(prefix="/internal")
logger = logging.getLogger(__name__)


def _error(status_code: HTTPStatus, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


@router.get("/", response_class=PlainTextResponse)
async def banner() -> str:
    return "Facebook Page Relay is running."


@router.get("/favicon.ico", include_in_schema=False)
async def favicon() -> Response:
    return Response(status_code=HTTPStatus.NO_CONTENT)


@router.get("/health", status_code=HTTPStatus.OK)
async def healthcheck() -> dict:
    """Simple health endpoint for monitoring."""
    return {"status": "ok"}


@router.get("/auth/login")
async def start_facebook_login(
    graph_client: Annotated[Any, Depends(get_facebook_graph_client)],
) -> RedirectResponse:
    """Send the browser to the Facebook consent dialog."""
    return RedirectResponse(
        url=graph_client.build_authorization_url(), status_code=HTTPStatus.FOUND
    )


@router.get("/auth/callback")
async def handle_facebook_callback(
    login_service: Annotated[Any, Depends(get_facebook_login_service)],
    settings: Annotated[Any, Depends(get_app_settings)],
    code: str | None = Query(default=None, description="Authorization code."),
    error: str | None = Query(default=None),
    error_description: str | None = Query(default=None),
) -> Response:
    """Complete the OAuth exchange, store the token and return to the dashboard."""
    if not code:
        logger.warning(
            "Facebook callback without a code: error=%s description=%s",
            error,
            error_description,
        )
        return PlainTextResponse(
            "Auth failed", status_code=HTTPStatus.INTERNAL_SERVER_ERROR
        )

    try:
        user = await login_service.complete_login(code)
    except GraphAPIError as exc:
        logger.error(
            "Facebook login failed (status=%s): %s", exc.status_code, exc.detail
        )
        return PlainTextResponse(
            "Auth failed", status_code=HTTPStatus.INTERNAL_SERVER_ERROR
        )
    except (sqlite3.Error, OSError):
        logger.exception("Failed to persist Facebook login")
        return PlainTextResponse(
            "Auth failed", status_code=HTTPStatus.INTERNAL_SERVER_ERROR
        )

    query = urlencode({"userId": user.id})
    return RedirectResponse(
        url=f"{settings.frontend_base_url}/dashboard?{query}",
        status_code=HTTPStatus.FOUND,
    )


@router.get("/api/pages", response_model=PageListResponse)
async def list_pages(
    token_service: Annotated[Any, Depends(get_user_token_service)],
    graph_client: Annotated[Any, Depends(get_facebook_graph_client)],
    user_id: str | None = Query(default=None, alias="userId"),
) -> Any:
    """Return the id and name of every page the user manages."""
    try:
        user = token_service.get_user_with_token(user_id)
    except UserTokenNotFoundError:
        return _error(HTTPStatus.UNAUTHORIZED, "No token")

    try:
        pages = await graph_client.list_managed_pages(user.ll_user_token)
    except GraphAPIError as exc:
        logger.error(
            "Fetching pages for user %s failed (status=%s): %s",
            user.id,
            exc.status_code,
            exc.detail,
        )
        return _error(HTTPStatus.INTERNAL_SERVER_ERROR, "Failed to fetch pages")

    return PageListResponse(data=pages)


async def _read_queue_post(request: Request) -> QueuePostRequest:
    """Parse the body, treating unreadable or mistyped input as empty."""
    try:
        return QueuePostRequest.model_validate(await request.json())
    except ValueError:
        # Covers invalid JSON and pydantic ValidationError alike.
        return QueuePostRequest()


@router.post("/api/queue-post")
async def queue_post(
    token_service: Annotated[Any, Depends(get_user_token_service)],
    queue_service: Annotated[Any, Depends(get_post_queue_service)],
    request: Request,
) -> Any:
    """Hand a post to the automation workflow, which publishes it on the page."""
    payload = await _read_queue_post(request)
    missing = payload.missing_fields()
    if missing:
        logger.info("Rejected queue-post request missing %s", ", ".join(missing))
        return _error(HTTPStatus.BAD_REQUEST, "Missing fields")

    try:
        user = token_service.get_user_with_token(payload.user_id)
    except UserTokenNotFoundError:
        return _error(HTTPStatus.UNAUTHORIZED, "No token")

    try:
        await queue_service.enqueue_post(
            user=user, page_id=payload.page_id, message=payload.message
        )
    except WebhookDispatchError as exc:
        logger.error(
            "Automation webhook failed (status=%s): %s", exc.status_code, exc.detail
        )
        return _error(HTTPStatus.INTERNAL_SERVER_ERROR, "Failed to trigger automation")

    return {"ok": True}


@internal_router.get("/user-token")
async def get_internal_user_token(
    settings: Annotated[Any, Depends(get_app_settings)],
    token_service: Annotated[Any, Depends(get_user_token_service)],
    user_id: str | None = Query(default=None, alias="userId"),
    internal_key: str | None = Header(default=None, alias=INTERNAL_KEY_HEADER),
) -> Any:
    """Let the automation workflow re-fetch a user's long-lived token."""
    expected = settings.automation.internal_api_key.encode("utf-8")
    if not internal_key or not hmac.compare_digest(
        internal_key.encode("utf-8"), expected
    ):
        logger.warning("Rejected internal token lookup with a bad key")
        return _error(HTTPStatus.UNAUTHORIZED, "Unauthorized")

    try:
        user = token_service.get_user_with_token(user_id)
    except UserTokenNotFoundError:
        return _error(HTTPStatus.NOT_FOUND, "Not found")

    return {"llUserToken": user.ll_user_token}


__all__ = ["internal_router", "router"]
