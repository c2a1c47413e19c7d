"""Socket binding, uvicorn serving and the fatal-error path."""
from __future__ import annotations

import asyncio
import errno
import socket
import sys
from typing import Any, Callable

import uvicorn
from fastapi import FastAPI

from app.core.config import Settings, settings
from app.core.logging_config import get_logger
from app.services.startup.orchestrator import StartupOrchestrator

logger = get_logger(__name__)

ServerFactory = Callable[[FastAPI, Settings], Any]


def bind_socket(host: str, port: int) -> socket.socket:
    family = socket.AF_INET6 if ":" in host else socket.AF_INET
    sock = socket.socket(family, socket.SOCK_STREAM)
    sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
    try:
        sock.bind((host, port))
    except OSError:
        sock.close()
        raise
    sock.set_inheritable(True)
    return sock


def report_bind_error(exc: OSError, port: int) -> None:
    logger.error(f"Server error: {exc}")
    if exc.errno == errno.EADDRINUSE:
        logger.error(f"Port {port} is already in use")


def log_startup_summary(orchestrator: StartupOrchestrator, host: str, port: int) -> None:
    snapshot = orchestrator.snapshot
    routes = snapshot.active_route_sets()
    logger.info("=" * 60)
    logger.info(f"{orchestrator.config.PROJECT_NAME} is LIVE!")
    logger.info(f"Server URL: http://{host}:{port}")
    logger.info(f"Environment: {snapshot.environment}")
    logger.info(f"MongoDB: {'Connected' if snapshot.db_connected else 'Disconnected (Fallback Mode)'}")
    logger.info(f"Routes: {', '.join(routes) if routes else 'Limited (No Database)'}")
    logger.info(f"Frontend: {orchestrator.frontend.value if orchestrator.frontend else 'none'}")
    logger.info(f"Health Check: http://{host}:{port}/api/health")
    if not snapshot.db_connected:
        logger.info("Database Status: Update MONGODB_URI in .env to enable full functionality")
    logger.info("=" * 60)


def build_server(app: FastAPI, config: Settings) -> uvicorn.Server:
    return uvicorn.Server(uvicorn.Config(app, log_level=config.LOG_LEVEL.lower(), lifespan="on"))


async def serve(orchestrator: StartupOrchestrator, server_factory: ServerFactory = build_server) -> None:
    app = await orchestrator.assemble()
    config = orchestrator.config

    logger.info(f"Attempting to bind server to {config.HOST}:{config.PORT}...")
    try:
        sock = bind_socket(config.HOST, config.PORT)
    except OSError as exc:
        report_bind_error(exc, config.PORT)
        raise SystemExit(1)

    orchestrator.mark_listening()
    log_startup_summary(orchestrator, config.HOST, config.PORT)

    server = server_factory(app, config)
    # Runs once the loop yields to the server; never awaited here
    orchestrator.start_background_seeding()
    try:
        await server.serve(sockets=[sock])
    finally:
        sock.close()


def run(config: Settings = settings) -> None:
    logger.info("Initiating server startup...")
    try:
        asyncio.run(serve(StartupOrchestrator(config)))
    except KeyboardInterrupt:
        logger.info("Server stopped")
    except Exception as e:
        logger.critical(f"Fatal error during server startup: {e}", exc_info=True)
        logger.info("Server failed to start. Check the error above for details.")
        sys.exit(1)
