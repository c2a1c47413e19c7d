"""Default administrator account used for the first login."""
from typing import Optional

from motor.motor_asyncio import AsyncIOMotorDatabase

from app.api.v1.auth import hash_password
from app.core.config import settings
from app.core.logging_config import get_logger
from app.repositories import UserRepository

logger = get_logger(__name__)


async def seed_admin_user(
    database: Optional[AsyncIOMotorDatabase] = None,
    username: Optional[str] = None,
    password: Optional[str] = None,
) -> bool:
    """Create the admin user if missing. Returns True when a user was created."""
    username = username or settings.ADMIN_USERNAME
    password = password or settings.ADMIN_PASSWORD

    repo = UserRepository(database)
    if await repo.find_by_username(username):
        logger.info(f"Admin user '{username}' already exists")
        return False

    await repo.create(
        {
            "username": username,
            "passwordHash": hash_password(password, rounds=settings.BCRYPT_ROUNDS),
            "fullName": "System Administrator",
            "role": "admin",
        }
    )
    logger.info(f"Admin user '{username}' created")
    return True
