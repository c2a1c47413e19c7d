"""Custodial record endpoints (`/api/custodial-records`)."""
from typing import Optional

from fastapi import APIRouter, FastAPI, File, UploadFile
from pydantic import BaseModel, ConfigDict
from pymongo.errors import DuplicateKeyError

from app.core.exceptions import ApiError, ConflictError, NotFoundError, ValidationFailedError
from app.core.logging_config import get_logger
from app.repositories import CustodialRecordRepository
from app.repositories.base import serialize_document
from app.services.uploads import UploadPolicies

logger = get_logger(__name__)

REQUIRED_FIELDS = ("fullName", "offense")
NOT_FOUND = "Custodial record not found"


class CustodialRecordPayload(BaseModel):
    model_config = ConfigDict(extra="allow")

    fullName: Optional[str] = None
    offense: Optional[str] = None
    status: Optional[str] = None
    recordNumber: Optional[str] = None


def build_custodial_router(uploads: UploadPolicies, repo: CustodialRecordRepository | None = None) -> APIRouter:
    router = APIRouter(prefix="/api/custodial-records", tags=["custodial"])
    repo = repo or CustodialRecordRepository()

    @router.get("")
    async def list_records():
        try:
            records = await repo.list()
        except ApiError:
            raise
        except Exception as e:
            logger.error(f"Error fetching custodial records: {e}", exc_info=True)
            raise ApiError("Failed to fetch custodial records")
        return {"records": [serialize_document(r) for r in records]}

    @router.get("/{record_id}")
    async def get_record(record_id: str):
        try:
            record = await repo.get_by_id(record_id)
        except ApiError:
            raise
        except Exception as e:
            logger.error(f"Error fetching custodial record {record_id}: {e}", exc_info=True)
            raise ApiError("Failed to fetch custodial record")
        if not record:
            raise NotFoundError(NOT_FOUND)
        return {"record": serialize_document(record)}

    @router.post("", status_code=201)
    async def create_record(payload: CustodialRecordPayload):
        data = payload.model_dump(exclude_none=True)
        missing = [name for name in REQUIRED_FIELDS if not data.get(name)]
        if missing:
            raise ValidationFailedError(f"Missing required fields: {', '.join(missing)}")
        data.setdefault("status", "in_custody")

        try:
            record = await repo.create(data)
        except DuplicateKeyError:
            raise ConflictError("Record number already exists")
        except ApiError:
            raise
        except Exception as e:
            logger.error(f"Error creating custodial record: {e}", exc_info=True)
            raise ApiError("Failed to create custodial record")

        logger.info(f"Custodial record {record['recordNumber']} created")
        return {
            "success": True,
            "record": serialize_document(record),
            "message": "Custodial record created successfully",
        }

    @router.put("/{record_id}")
    async def update_record(record_id: str, payload: CustodialRecordPayload):
        try:
            if not await repo.update(record_id, payload.model_dump(exclude_none=True)):
                raise NotFoundError(NOT_FOUND)
            record = await repo.get_by_id(record_id)
        except DuplicateKeyError:
            raise ConflictError("Record number already exists")
        except ApiError:
            raise
        except Exception as e:
            logger.error(f"Error updating custodial record {record_id}: {e}", exc_info=True)
            raise ApiError("Failed to update custodial record")
        return {
            "success": True,
            "record": serialize_document(record),
            "message": "Custodial record updated successfully",
        }

    @router.delete("/{record_id}")
    async def delete_record(record_id: str):
        try:
            deleted = await repo.delete(record_id)
        except ApiError:
            raise
        except Exception as e:
            logger.error(f"Error deleting custodial record {record_id}: {e}", exc_info=True)
            raise ApiError("Failed to delete custodial record")
        if not deleted:
            raise NotFoundError(NOT_FOUND)
        return {"success": True, "message": "Custodial record deleted successfully"}

    @router.post("/{record_id}/photo")
    async def upload_photo(record_id: str, photo: UploadFile = File(...)):
        """Attach an ID photo (JPG/PNG, max 5MB) to a custodial record."""
        record = await repo.get_by_id(record_id)
        if not record:
            raise NotFoundError(NOT_FOUND)

        stored = await uploads.photos.save(photo, uploads.directory)
        photo_url = uploads.url_for(stored.stored_name)
        try:
            await repo.update(record_id, {"photoUrl": photo_url, "photoOriginalName": stored.original_name})
            record = await repo.get_by_id(record_id)
        except Exception as e:
            stored.path.unlink(missing_ok=True)
            logger.error(f"Error saving photo for custodial record {record_id}: {e}", exc_info=True)
            raise ApiError("Failed to upload photo")

        return {"success": True, "record": serialize_document(record), "photoUrl": photo_url}

    return router


def register_custodial_routes(app: FastAPI, uploads: UploadPolicies) -> None:
    app.include_router(build_custodial_router(uploads))
    logger.info("Custodial routes registered")
