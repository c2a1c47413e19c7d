"""Development frontend: proxy page and asset requests to the bundler dev server.

`setup_dev_server` probes the dev server once and raises when it cannot be
reached, so startup can fall back to the inline status page instead.
"""
from __future__ import annotations

import httpx
from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import Response

from app.api.v1.health import ALL_METHODS
from app.core.config import Settings
from app.core.logging_config import get_logger
from app.services.startup.frontend import is_page_request

logger = get_logger(__name__)

# Hop-by-hop and length headers are recomputed by the ASGI server
_SKIPPED_HEADERS = {"content-encoding", "content-length", "transfer-encoding", "connection"}


async def setup_dev_server(app: FastAPI, config: Settings) -> None:
    client = httpx.AsyncClient(base_url=config.DEV_SERVER_URL, timeout=10.0)
    try:
        await client.get("/", timeout=2.0)
    except httpx.HTTPError as e:
        await client.aclose()
        raise RuntimeError(f"Dev server not reachable at {config.DEV_SERVER_URL}: {e}") from e

    app.state.dev_server_client = client

    @app.api_route("/{full_path:path}", methods=ALL_METHODS, include_in_schema=False)
    async def proxy_dev_server(full_path: str, request: Request):
        if not is_page_request(request):
            raise HTTPException(status_code=404, detail="Not Found")
        try:
            upstream = await client.get(
                "/" + full_path,
                params=request.query_params,
                headers={"accept": request.headers.get("accept", "*/*")},
            )
        except httpx.HTTPError as e:
            logger.warning(f"Dev server request failed for /{full_path}: {e}")
            raise HTTPException(status_code=502, detail="Dev server unavailable")

        headers = {k: v for k, v in upstream.headers.items() if k.lower() not in _SKIPPED_HEADERS}
        return Response(content=upstream.content, status_code=upstream.status_code, headers=headers)

    logger.info(f"Proxying frontend requests to {config.DEV_SERVER_URL}")
