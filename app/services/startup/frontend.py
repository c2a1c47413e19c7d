"""Frontend strategy selection.

Exactly one of three strategies is registered: the production build, the
dev server proxy, or the inline status page. A dev server whose setup fails
at runtime is replaced by the inline page.
"""
from __future__ import annotations

import inspect
import os
from enum import Enum
from pathlib import Path

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import HTMLResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.types import Receive, Scope, Send

from app.api.v1.health import ALL_METHODS
from app.core.capabilities import CapabilityRegistry, CapabilitySnapshot
from app.core.config import Settings
from app.core.logging_config import get_logger

logger = get_logger(__name__)

PAGE_METHODS = ("GET", "HEAD")


class FrontendStrategy(str, Enum):
    PRODUCTION = "production"
    DEV_SERVER = "dev_server"
    INLINE = "inline"


def is_api_path(path: str) -> bool:
    return path == "/api" or path.startswith("/api/")


def is_reserved_path(path: str) -> bool:
    """API and uploads paths are never answered by the frontend."""
    return is_api_path(path) or path == "/uploads" or path.startswith("/uploads/")


def render_status_page(snapshot: CapabilitySnapshot) -> str:
    return f"""<!DOCTYPE html>
<html>
  <head><title>Police Management System</title></head>
  <body>
    <h1>Police Management System</h1>
    <p>Server is running! MongoDB: {'Connected' if snapshot.db_connected else 'Disconnected'}</p>
    <p>API Health Check: <a href="/api/health">/api/health</a></p>
  </body>
</html>
"""


def is_page_request(request: Request) -> bool:
    """GET/HEAD outside the API and uploads; everything else is a 404 for the frontend."""
    return request.method in PAGE_METHODS and not is_reserved_path(request.url.path)


class BuildFiles(StaticFiles):
    """Production build: real assets first, index.html for client-side routes."""

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] == "http" and (scope["method"] not in PAGE_METHODS or is_api_path(scope["path"])):
            raise StarletteHTTPException(status_code=404)
        await super().__call__(scope, receive, send)

    async def check_config(self) -> None:
        # A missing build answers 404 rather than failing every request
        if self.directory is not None and not os.path.isdir(self.directory):
            return
        await super().check_config()

    async def get_response(self, path: str, scope: Scope):
        try:
            return await super().get_response(path, scope)
        except StarletteHTTPException as exc:
            if exc.status_code != 404:
                raise
        return await super().get_response("index.html", scope)


def register_production_frontend(app: FastAPI, static_dir: str) -> None:
    build_dir = Path(static_dir).resolve()
    if not (build_dir / "index.html").exists():
        logger.warning(f"Frontend build not found at {build_dir}")

    # Mounted last so every API route takes precedence
    app.mount("/", BuildFiles(directory=str(build_dir), html=True, check_dir=False), name="spa")


def register_inline_frontend(app: FastAPI, snapshot: CapabilitySnapshot) -> None:
    page = render_status_page(snapshot)

    @app.api_route("/{full_path:path}", methods=ALL_METHODS, include_in_schema=False)
    async def status_page(full_path: str, request: Request):
        if not is_page_request(request):
            raise HTTPException(status_code=404, detail="Not Found")
        return HTMLResponse(page)


async def select_frontend(
    app: FastAPI,
    registry: CapabilityRegistry,
    snapshot: CapabilitySnapshot,
    config: Settings,
) -> FrontendStrategy:
    if snapshot.is_production:
        logger.info(f"[Startup] Serving production build from {config.STATIC_DIR}")
        register_production_frontend(app, config.STATIC_DIR)
        return FrontendStrategy.PRODUCTION

    setup = registry.get("dev_server")
    if setup is not None:
        mark = len(app.router.routes)
        try:
            logger.info("[Startup]   - Setting up dev server...")
            result = setup(app, config)
            if inspect.isawaitable(result):
                await result
            logger.info("[Startup]   Dev server setup complete")
            return FrontendStrategy.DEV_SERVER
        except Exception as e:
            # Nothing from the failed setup may stay registered next to the fallback
            del app.router.routes[mark:]
            logger.warning(f"[Startup]   Failed to setup dev server: {e}")

    logger.info("[Startup] Serving inline status page")
    register_inline_frontend(app, snapshot)
    return FrontendStrategy.INLINE
