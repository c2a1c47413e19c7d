from typing import Any, Dict, Optional

from .base import MongoRepository


class UserRepository(MongoRepository):
    collection_name = "users"

    async def find_by_username(self, username: str) -> Optional[Dict[str, Any]]:
        return await self._collection().find_one({"username": username})


def public_user(user: Dict[str, Any]) -> Dict[str, Any]:
    """User fields safe to return to clients."""
    return {
        "id": str(user["_id"]),
        "username": user.get("username"),
        "fullName": user.get("fullName"),
        "role": user.get("role"),
    }
