"""Evidence CRUD endpoints (`/api/evidence`)."""
from typing import Optional

from fastapi import APIRouter, FastAPI
from pydantic import BaseModel, ConfigDict
from pymongo.errors import DuplicateKeyError

from app.core.exceptions import ApiError, ConflictError, NotFoundError, ValidationFailedError
from app.core.logging_config import get_logger
from app.repositories import EvidenceRepository
from app.repositories.base import serialize_document
from app.services.uploads import UploadPolicies

logger = get_logger(__name__)

REQUIRED_FIELDS = ("type", "description", "location")


class EvidencePayload(BaseModel):
    """Evidence fields; anything beyond the known ones is stored as-is."""

    model_config = ConfigDict(extra="allow")

    type: Optional[str] = None
    description: Optional[str] = None
    location: Optional[str] = None
    collectedBy: Optional[str] = None
    evidenceNumber: Optional[str] = None


def build_evidence_router(repo: EvidenceRepository | None = None) -> APIRouter:
    router = APIRouter(prefix="/api/evidence", tags=["evidence"])
    repo = repo or EvidenceRepository()

    @router.get("")
    async def list_evidence():
        logger.info("Fetching all evidence")
        try:
            items = await repo.list()
        except ApiError:
            raise
        except Exception as e:
            logger.error(f"Error fetching evidence: {e}", exc_info=True)
            raise ApiError("Failed to fetch evidence")
        return {"evidence": [serialize_document(item) for item in items]}

    @router.get("/{evidence_id}")
    async def get_evidence(evidence_id: str):
        logger.info(f"Fetching evidence by ID: {evidence_id}")
        try:
            evidence = await repo.get_by_id(evidence_id)
        except ApiError:
            raise
        except Exception as e:
            logger.error(f"Error fetching evidence {evidence_id}: {e}", exc_info=True)
            raise ApiError("Failed to fetch evidence")
        if not evidence:
            raise NotFoundError("Evidence not found")
        return {"evidence": serialize_document(evidence)}

    @router.post("", status_code=201)
    async def create_evidence(payload: EvidencePayload):
        data = payload.model_dump(exclude_none=True)
        logger.info(f"Creating new evidence: type={data.get('type')!r}")

        data["collectedBy"] = data.get("collectedBy") or "Unknown Officer"
        if any(not data.get(name) for name in REQUIRED_FIELDS):
            raise ValidationFailedError("Missing required fields: type, description, location")

        try:
            evidence = await repo.create(data)
        except DuplicateKeyError:
            raise ConflictError("Evidence number already exists")
        except ApiError:
            raise
        except Exception as e:
            logger.error(f"Error creating evidence: {e}", exc_info=True)
            raise ApiError("Failed to create evidence")

        logger.info(f"Evidence {evidence['evidenceNumber']} created")
        return {
            "success": True,
            "evidence": serialize_document(evidence),
            "message": "Evidence created successfully",
        }

    @router.put("/{evidence_id}")
    async def update_evidence(evidence_id: str, payload: EvidencePayload):
        logger.info(f"Updating evidence: {evidence_id}")
        try:
            updated = await repo.update(evidence_id, payload.model_dump(exclude_none=True))
            if not updated:
                raise NotFoundError("Evidence not found")
            evidence = await repo.get_by_id(evidence_id)
        except DuplicateKeyError:
            raise ConflictError("Evidence number already exists")
        except ApiError:
            raise
        except Exception as e:
            logger.error(f"Error updating evidence {evidence_id}: {e}", exc_info=True)
            raise ApiError("Failed to update evidence")

        return {
            "success": True,
            "evidence": serialize_document(evidence),
            "message": "Evidence updated successfully",
        }

    @router.delete("/{evidence_id}")
    async def delete_evidence(evidence_id: str):
        logger.info(f"Deleting evidence: {evidence_id}")
        try:
            deleted = await repo.delete(evidence_id)
        except ApiError:
            raise
        except Exception as e:
            logger.error(f"Error deleting evidence {evidence_id}: {e}", exc_info=True)
            raise ApiError("Failed to delete evidence")
        if not deleted:
            raise NotFoundError("Evidence not found")
        return {"success": True, "message": "Evidence deleted successfully"}

    return router


def register_evidence_routes(app: FastAPI, uploads: UploadPolicies | None = None) -> None:
    app.include_router(build_evidence_router())
    logger.info("Evidence routes registered")
