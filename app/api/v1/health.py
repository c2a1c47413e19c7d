"""Health check and the fallback-mode API catch-all."""
from datetime import datetime, timezone

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from app.core.capabilities import CapabilitySnapshot
from app.core.exceptions import DatabaseUnavailableError

ALL_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS", "HEAD"]


def utc_timestamp() -> str:
    """Current UTC time as `2024-05-01T12:00:00.000Z`."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def build_health_router(snapshot: CapabilitySnapshot) -> APIRouter:
    router = APIRouter(prefix="/api", tags=["system"])

    @router.get("/health")
    async def health():
        return {
            "status": "OK",
            "timestamp": utc_timestamp(),
            "mongodb": "connected" if snapshot.db_connected else "disconnected",
            "message": (
                "All systems operational"
                if snapshot.db_connected
                else "Running in fallback mode - update MongoDB URI in .env"
            ),
        }

    return router


def build_service_unavailable_router() -> APIRouter:
    """Answers every unmatched API path with 503 while the database is down."""
    router = APIRouter(prefix="/api", tags=["system"])

    @router.api_route("/{path:path}", methods=ALL_METHODS, include_in_schema=False)
    async def service_unavailable(path: str):
        error = DatabaseUnavailableError()
        return JSONResponse(error.to_dict(), status_code=error.status_code)

    return router
