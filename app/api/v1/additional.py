"""Optional extra endpoints that do not depend on the startup database check."""
from fastapi import APIRouter, FastAPI

from app.core.logging_config import get_logger
from app.repositories import CustodialRecordRepository, EvidenceRepository, GeofileRepository

logger = get_logger(__name__)

router = APIRouter(prefix="/api", tags=["stats"])


@router.get("/stats")
async def get_stats():
    """Document counts per collection; 503 while the database is unavailable."""
    return {
        "evidence": await EvidenceRepository().count(),
        "custodialRecords": await CustodialRecordRepository().count(),
        "geofiles": await GeofileRepository().count(),
    }


def register_additional_routes(app: FastAPI) -> None:
    app.include_router(router)
    logger.info("Additional routes registered")
