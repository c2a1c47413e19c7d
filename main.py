"""
Police Management System API Server

REST backend over MongoDB (evidence, custodial records, geofiles) that keeps
serving health/status in fallback mode when the database is unavailable.

Environment Variables:
    MONGODB_URI: MongoDB connection string (unset = fallback mode)
    MONGODB_DB: Database name (default: police_management)
    SESSION_SECRET: Session cookie signing secret
    NODE_ENV / APP_ENV: 'production' serves the prebuilt frontend from STATIC_DIR
    DEV_SERVER_URL: Frontend dev server proxied in development (default: http://localhost:5173)
    HOST: Server host address (default: 0.0.0.0)
    PORT: Server port (default: 5000)

CLI Usage:
    python main.py

    # Production build
    NODE_ENV=production python main.py
"""

from app.core.config import settings
from app.services.startup.listener import run

if __name__ == "__main__":
    print(f"Starting {settings.PROJECT_NAME} on {settings.HOST}:{settings.PORT}")
    print(f"Environment: {settings.ENVIRONMENT}")

    run(settings)
