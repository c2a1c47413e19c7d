"""MongoDB connection management.

The client is created once at startup by `connect_to_mongodb` and the
database handle is kept module-level so repositories can fetch it per
request through `get_database()`. Tests install a mock database with
`set_database`.
"""

from __future__ import annotations

from typing import Optional

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase

from app.core.config import mask_mongo_uri, settings
from app.core.exceptions import DatabaseUnavailableError
from app.core.logging_config import get_logger

logger = get_logger(__name__)

_client: Optional[AsyncIOMotorClient] = None
_database: Optional[AsyncIOMotorDatabase] = None


async def connect_to_mongodb(
    uri: Optional[str] = None,
    db_name: Optional[str] = None,
    timeout_ms: Optional[int] = None,
) -> AsyncIOMotorDatabase:
    """Connect, ping the server and prepare indexes.

    Raises when no URI is configured or the server cannot be reached; the
    startup sequence treats any exception as "database unavailable".
    """
    uri = uri or settings.MONGODB_URI
    if not uri:
        raise RuntimeError("MONGODB_URI environment variable is not set")

    db_name = db_name or settings.MONGODB_DB
    timeout_ms = timeout_ms if timeout_ms is not None else settings.MONGODB_TIMEOUT_MS

    logger.info(f"Connecting to MongoDB at {mask_mongo_uri(uri)} (db={db_name})")
    client = AsyncIOMotorClient(uri, serverSelectionTimeoutMS=timeout_ms)
    try:
        await client.admin.command("ping")
        database = client[db_name]
        await ensure_indexes(database)
    except Exception:
        client.close()
        raise

    set_database(database, client)
    logger.info(f"MongoDB connected: {db_name}")
    return database


async def ensure_indexes(database: AsyncIOMotorDatabase) -> None:
    await database["evidence"].create_index("evidenceNumber", unique=True)
    await database["custodial_records"].create_index("recordNumber", unique=True)
    await database["users"].create_index("username", unique=True)


def set_database(database: Optional[AsyncIOMotorDatabase], client: Optional[AsyncIOMotorClient] = None) -> None:
    global _client, _database
    _database = database
    _client = client


def get_database() -> AsyncIOMotorDatabase:
    if _database is None:
        raise DatabaseUnavailableError()
    return _database


def is_connected() -> bool:
    return _database is not None


def close_mongodb() -> None:
    global _client, _database
    if _client is not None:
        _client.close()
        logger.info("MongoDB connection closed")
    _client = None
    _database = None
