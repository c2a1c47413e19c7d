from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.sessions import SessionMiddleware

from app.core.config import Settings, settings
from app.core.exceptions import ApiError
from app.core.logging_config import get_logger

logger = get_logger("app")


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield

    # Shutdown
    client = getattr(app.state, "dev_server_client", None)
    if client is not None:
        await client.aclose()

    try:
        from app.db.mongo import close_mongodb
    except ImportError:
        return
    close_mongodb()


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(ApiError)
    async def api_error_handler(request: Request, exc: ApiError):
        if exc.status_code >= 500:
            logger.warning(f"{request.method} {request.url.path} -> {exc.status_code}: {exc.message}")
        return JSONResponse(exc.to_dict(), status_code=exc.status_code)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        # Report request-model errors as 400 with the same {error} body as handlers
        errors = exc.errors()
        first = errors[0] if errors else {}
        location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = first.get("msg", "Invalid request")
        return JSONResponse(
            {"error": f"{location}: {message}" if location else message},
            status_code=400,
        )


def create_app(config: Settings = settings) -> FastAPI:
    """Base application with middleware and error handling, but no routes.

    Routes and the frontend are added by the startup sequence according to
    which optional modules loaded and whether the database connected.
    """
    app = FastAPI(
        title=config.PROJECT_NAME,
        description="Police Management System API",
        version=config.VERSION,
        lifespan=lifespan,
    )

    app.add_middleware(
        SessionMiddleware,
        secret_key=config.SESSION_SECRET,
        max_age=config.SESSION_MAX_AGE,
        https_only=False,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origin_regex=".*",
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)
    return app
