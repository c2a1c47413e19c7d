"""Shared helpers for MongoDB-backed repositories."""
from __future__ import annotations

import re
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from bson import ObjectId
from bson.errors import InvalidId
from fastapi.encoders import jsonable_encoder
from motor.motor_asyncio import AsyncIOMotorCollection, AsyncIOMotorDatabase
from pymongo.errors import DuplicateKeyError

from app.core.logging_config import get_logger
from app.db.mongo import get_database

logger = get_logger(__name__)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def parse_object_id(value: Optional[str]) -> Optional[ObjectId]:
    """Return the ObjectId for `value`, or None when it is not a valid id."""
    if value is None:
        return None
    try:
        return ObjectId(value)
    except (InvalidId, TypeError):
        return None


def format_record_number(prefix: str, sequence: int) -> str:
    return f"{prefix}-{sequence:06d}"


def strip_identifiers(data: Dict[str, Any]) -> Dict[str, Any]:
    """Drop client-supplied identifiers; `_id` is owned by MongoDB."""
    return {k: v for k, v in data.items() if k not in ("_id", "id")}


def serialize_document(doc: Dict[str, Any]) -> Dict[str, Any]:
    """JSON-ready copy of a document with a string `id` field."""
    data = {**doc, "id": str(doc["_id"])}
    return jsonable_encoder(data, custom_encoder={ObjectId: str})


class MongoRepository:
    """CRUD over a single collection.

    Subclasses that set `number_field` get a sequential human-readable number
    (`<prefix>-000001`) on create when the caller does not provide one.
    """

    collection_name: str = ""
    number_field: Optional[str] = None
    number_prefix: str = ""

    def __init__(self, database: Optional[AsyncIOMotorDatabase] = None):
        self._database = database

    def _collection(self) -> AsyncIOMotorCollection:
        database = self._database if self._database is not None else get_database()
        return database[self.collection_name]

    async def next_number(self) -> str:
        # Count-based sequence; concurrent creates may compute the same value
        count = await self._collection().count_documents({})
        return format_record_number(self.number_prefix, count + 1)

    async def highest_number(self) -> int:
        """Largest sequence in use for this prefix; client-supplied numbers in other formats are ignored."""
        pattern = re.compile(rf"^{re.escape(self.number_prefix)}-(\d+)$")
        cursor = self._collection().find({self.number_field: {"$regex": pattern.pattern}}, {self.number_field: 1})
        highest = 0
        for doc in await cursor.to_list(length=None):
            match = pattern.match(doc.get(self.number_field) or "")
            if match:
                highest = max(highest, int(match.group(1)))
        return highest

    async def create(self, data: Dict[str, Any]) -> Dict[str, Any]:
        document = strip_identifiers(data)
        generated = bool(self.number_field) and not document.get(self.number_field)
        if generated:
            document[self.number_field] = await self.next_number()

        now = utcnow()
        document["createdAt"] = now
        document["updatedAt"] = now

        try:
            result = await self._collection().insert_one(document)
        except DuplicateKeyError:
            if not generated:
                raise
            # Deletes leave the count behind the numbers in use
            document.pop("_id", None)
            document[self.number_field] = format_record_number(self.number_prefix, await self.highest_number() + 1)
            logger.info(f"{self.collection_name}: number taken, retrying as {document[self.number_field]}")
            result = await self._collection().insert_one(document)
        document["_id"] = result.inserted_id
        return document

    async def list(self, query: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        cursor = self._collection().find(query or {})
        return await cursor.to_list(length=None)

    async def get_by_id(self, record_id: str) -> Optional[Dict[str, Any]]:
        object_id = parse_object_id(record_id)
        if object_id is None:
            return None
        return await self._collection().find_one({"_id": object_id})

    async def update(self, record_id: str, data: Dict[str, Any]) -> bool:
        object_id = parse_object_id(record_id)
        if object_id is None:
            return False
        changes = strip_identifiers(data)
        changes["updatedAt"] = utcnow()
        result = await self._collection().update_one({"_id": object_id}, {"$set": changes})
        return result.matched_count > 0

    async def delete(self, record_id: str) -> bool:
        object_id = parse_object_id(record_id)
        if object_id is None:
            return False
        result = await self._collection().delete_one({"_id": object_id})
        return result.deleted_count > 0

    async def count(self, query: Optional[Dict[str, Any]] = None) -> int:
        return await self._collection().count_documents(query or {})
