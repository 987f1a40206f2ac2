"""
Installer routes — landing page, install redirect, OAuth callback.

Mounted at the application root: ``/``, ``/install``, ``/authorize``.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Optional, TypeVar

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import HTMLResponse, RedirectResponse, Response
from sqlalchemy.ext.asyncio import AsyncSession

from connectors.dependencies import db_session, get_install_flow
from connectors.errors import InstallError
from connectors.install_flow import InstallFlow
from connectors.views import error_html, home_html

logger = logging.getLogger(__name__)

router = APIRouter(tags=["install"])

T = TypeVar("T")

# nginx's "client closed request"; nobody reads it.
_CLIENT_CLOSED_REQUEST = 499


async def _wait_for_disconnect(request: Request) -> None:
    while True:
        message = await request.receive()
        if message["type"] == "http.disconnect":
            return


async def _unless_disconnected(request: Request, work: Awaitable[T]) -> Optional[T]:
    """
    Await ``work`` but cancel it if the client goes away first.
    Returns None when the request was abandoned.
    """
    task = asyncio.ensure_future(work)
    watcher = asyncio.ensure_future(_wait_for_disconnect(request))
    done = set()
    try:
        done, _ = await asyncio.wait({task, watcher}, return_when=asyncio.FIRST_COMPLETED)
        if task not in done and watcher.exception() is not None:
            # Lost track of the client; finish the work anyway.
            logger.warning("Disconnect watcher failed: %s", type(watcher.exception()).__name__)
            done, _ = await asyncio.wait({task})
    finally:
        watcher.cancel()
        if not task.done():
            task.cancel()
        await asyncio.gather(task, watcher, return_exceptions=True)

    if task in done:
        return task.result()
    return None


# ── Routes ─────────────────────────────────────────────────────────────


@router.get("/", response_class=HTMLResponse)
async def home() -> HTMLResponse:
    return HTMLResponse(content=home_html("/install"))


@router.get("/install")
async def install(flow: InstallFlow = Depends(get_install_flow)) -> Response:
    """Redirect the browser to Slack's authorization page."""
    try:
        url = flow.build_authorize_url()
    except InstallError as exc:
        logger.error("Cannot start Slack install (%s): %s", exc.kind, exc.detail or exc.message)
        return HTMLResponse(content=error_html(exc.message), status_code=exc.status_code)
    return RedirectResponse(url, status_code=302)


@router.get("/authorize")
async def authorize(
    request: Request,
    code: Optional[str] = Query(None),
    state: Optional[str] = Query(None),
    error: Optional[str] = Query(None),
    flow: InstallFlow = Depends(get_install_flow),
    session: AsyncSession = Depends(db_session),
) -> Response:
    """
    OAuth callback — Slack redirects here after the user approves (or
    declines) the install.
    """
    outcome = await _unless_disconnected(
        request, flow.complete(session, code, state, error)
    )
    if outcome is None:
        logger.info("Client disconnected during Slack install callback; abandoned")
        return Response(status_code=_CLIENT_CLOSED_REQUEST)

    if outcome.ok:
        return RedirectResponse(outcome.redirect_url, status_code=302)
    return HTMLResponse(
        content=error_html(outcome.message or "Installation failed.", outcome.detail),
        status_code=outcome.status_code,
    )
