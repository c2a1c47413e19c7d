"""Session login against the users collection (`/api/auth`)."""
import bcrypt
from fastapi import APIRouter, Request
from pydantic import BaseModel

from app.core.exceptions import UnauthorizedError
from app.core.logging_config import get_logger
from app.repositories import UserRepository
from app.repositories.users import public_user

logger = get_logger(__name__)


class LoginRequest(BaseModel):
    username: str
    password: str


def verify_password(plain_password: str, hashed_password: str) -> bool:
    if not hashed_password:
        return False
    # Bcrypt has a 72 byte limit
    try:
        return bcrypt.checkpw(plain_password.encode("utf-8")[:72], hashed_password.encode("utf-8"))
    except ValueError:
        # Malformed stored hash
        return False


def hash_password(password: str, rounds: int = 12) -> str:
    return bcrypt.hashpw(password.encode("utf-8")[:72], bcrypt.gensalt(rounds=rounds)).decode("utf-8")


def build_auth_router(repo: UserRepository | None = None) -> APIRouter:
    router = APIRouter(prefix="/api/auth", tags=["auth"])
    repo = repo or UserRepository()

    @router.post("/login")
    async def login(credentials: LoginRequest, request: Request):
        user = await repo.find_by_username(credentials.username)
        if not user or not verify_password(credentials.password, user.get("passwordHash", "")):
            logger.warning(f"Failed login attempt for {credentials.username!r}")
            raise UnauthorizedError("Invalid username or password")

        request.session["user_id"] = str(user["_id"])
        request.session["username"] = user["username"]
        logger.info(f"User {user['username']} logged in")
        return {"success": True, "user": public_user(user)}

    @router.post("/logout")
    async def logout(request: Request):
        request.session.clear()
        return {"success": True}

    @router.get("/me")
    async def current_user(request: Request):
        user_id = request.session.get("user_id")
        user = await repo.get_by_id(user_id) if user_id else None
        if not user:
            raise UnauthorizedError("Not authenticated")
        return {"user": public_user(user)}

    return router
