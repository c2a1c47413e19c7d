"""Primary database-backed routes: session auth and geofiles."""
from fastapi import FastAPI

from app.core.logging_config import get_logger
from app.services.uploads import UploadPolicies

from .auth import build_auth_router
from .geofiles import build_geofile_router

logger = get_logger(__name__)


def register_primary_routes(app: FastAPI, uploads: UploadPolicies) -> None:
    app.include_router(build_auth_router())
    app.include_router(build_geofile_router(uploads))
    logger.info("Primary routes registered (auth, geofiles)")
