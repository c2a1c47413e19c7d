"""Geofile upload and metadata endpoints (`/api/geofiles`)."""
from typing import Optional

from fastapi import APIRouter, File, Form, Request, UploadFile
from fastapi.responses import FileResponse
from pydantic import BaseModel

from app.core.exceptions import ApiError, NotFoundError
from app.core.logging_config import get_logger
from app.repositories import GeofileRepository
from app.repositories.base import serialize_document
from app.services.uploads import UploadPolicies

logger = get_logger(__name__)

NOT_FOUND = "Geofile not found"


class GeofileUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None
    tags: Optional[list[str]] = None


def build_geofile_router(uploads: UploadPolicies, repo: GeofileRepository | None = None) -> APIRouter:
    router = APIRouter(prefix="/api/geofiles", tags=["geofiles"])
    repo = repo or GeofileRepository()

    @router.get("")
    async def list_geofiles(fileType: Optional[str] = None):
        try:
            geofiles = await repo.list_by_type(fileType)
        except ApiError:
            raise
        except Exception as e:
            logger.error(f"Error fetching geofiles: {e}", exc_info=True)
            raise ApiError("Failed to fetch geofiles")
        return {"geofiles": [serialize_document(g) for g in geofiles]}

    @router.get("/{geofile_id}")
    async def get_geofile(geofile_id: str):
        geofile = await repo.get_by_id(geofile_id)
        if not geofile:
            raise NotFoundError(NOT_FOUND)
        return {"geofile": serialize_document(geofile)}

    @router.post("", status_code=201)
    async def upload_geofile(
        request: Request,
        file: UploadFile = File(...),
        name: Optional[str] = Form(None),
        description: Optional[str] = Form(None),
        category: Optional[str] = Form(None),
    ):
        stored = await uploads.geofiles.save(file, uploads.directory)
        document = {
            "name": name or stored.original_name,
            "description": description or "",
            "category": category or "general",
            "originalName": stored.original_name,
            "storedName": stored.stored_name,
            "fileType": stored.file_type,
            "fileSize": stored.size,
            "mimeType": stored.content_type,
            "url": uploads.url_for(stored.stored_name),
            "uploadedBy": request.session.get("username", "anonymous"),
        }
        try:
            geofile = await repo.create(document)
        except Exception as e:
            stored.path.unlink(missing_ok=True)
            if isinstance(e, ApiError):
                raise
            logger.error(f"Error saving geofile metadata: {e}", exc_info=True)
            raise ApiError("Failed to upload geofile")

        logger.info(f"Geofile uploaded: {stored.original_name} -> {stored.stored_name}")
        return {"success": True, "geofile": serialize_document(geofile), "message": "Geofile uploaded successfully"}

    @router.put("/{geofile_id}")
    async def update_geofile(geofile_id: str, payload: GeofileUpdate):
        if not await repo.update(geofile_id, payload.model_dump(exclude_none=True)):
            raise NotFoundError(NOT_FOUND)
        geofile = await repo.get_by_id(geofile_id)
        return {"success": True, "geofile": serialize_document(geofile)}

    @router.delete("/{geofile_id}")
    async def delete_geofile(geofile_id: str):
        geofile = await repo.get_by_id(geofile_id)
        if not geofile or not await repo.delete(geofile_id):
            raise NotFoundError(NOT_FOUND)

        stored_name = geofile.get("storedName")
        if stored_name:
            try:
                uploads.path_for(stored_name).unlink(missing_ok=True)
            except OSError as e:
                logger.warning(f"Could not remove geofile {stored_name} from disk: {e}")
        return {"success": True, "message": "Geofile deleted successfully"}

    @router.get("/{geofile_id}/download")
    async def download_geofile(geofile_id: str):
        geofile = await repo.get_by_id(geofile_id)
        if not geofile or not geofile.get("storedName"):
            raise NotFoundError(NOT_FOUND)
        path = uploads.path_for(geofile["storedName"])
        if not path.is_file():
            raise NotFoundError("Geofile data not found on disk")
        return FileResponse(
            path=str(path),
            filename=geofile.get("originalName") or geofile["storedName"],
            media_type=geofile.get("mimeType") or "application/octet-stream",
        )

    return router
