import os
import re

from dotenv import load_dotenv

load_dotenv()


class Settings:
    # API Settings
    PROJECT_NAME: str = "Police Management System"
    VERSION: str = "1.0.0"
    API_PREFIX: str = "/api"
    UPLOADS_PREFIX: str = "/uploads"

    def __init__(self) -> None:
        self.HOST: str = os.getenv("HOST", "0.0.0.0")
        self.PORT: int = int(os.getenv("PORT", 5000))
        # "production" selects the prebuilt static frontend
        self.ENVIRONMENT: str = (os.getenv("APP_ENV") or os.getenv("NODE_ENV") or "development").lower()
        self.LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

        # MongoDB Settings
        self.MONGODB_URI: str | None = os.getenv("MONGODB_URI") or None
        self.MONGODB_DB: str = os.getenv("MONGODB_DB", "police_management")
        self.MONGODB_TIMEOUT_MS: int = int(os.getenv("MONGODB_TIMEOUT_MS", 5000))

        # Session Settings
        self.SESSION_SECRET: str = os.getenv("SESSION_SECRET", "police-management-secret-key")
        self.SESSION_MAX_AGE: int = 24 * 60 * 60

        # Directory Settings
        self.UPLOAD_DIR: str = os.getenv("UPLOAD_DIR", "uploads")
        self.STATIC_DIR: str = os.getenv("STATIC_DIR", os.path.join("dist", "public"))

        # Frontend dev server (proxied in development)
        self.DEV_SERVER_URL: str = os.getenv("DEV_SERVER_URL", "http://localhost:5173")

        # Seeded administrator account
        self.ADMIN_USERNAME: str = os.getenv("ADMIN_USERNAME", "admin")
        self.ADMIN_PASSWORD: str = os.getenv("ADMIN_PASSWORD", "admin123")
        self.BCRYPT_ROUNDS: int = int(os.getenv("BCRYPT_ROUNDS", 12))

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT == "production"


settings = Settings()


def mask_mongo_uri(uri: str | None) -> str:
    """Hide the password part of a connection string (`user:***@`)."""
    if not uri:
        return "[NOT SET]"
    return re.sub(r"://([^:/@]+):([^@]+)@", r"://\1:***@", uri)
