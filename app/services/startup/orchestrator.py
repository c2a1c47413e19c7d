"""Startup sequence.

    Loading -> Connecting -> Connected | Disconnected -> RoutesAssembled
            -> FrontendSelected -> Listening  (+ seeding in background)

Each phase runs once and in order. Everything before Listening degrades on
failure instead of aborting.
"""
from __future__ import annotations

import asyncio
import importlib
from enum import Enum
from typing import Iterable, List, Optional

from fastapi import FastAPI

from app.app import create_app
from app.core.capabilities import CapabilityRegistry, CapabilitySnapshot
from app.core.config import Settings, mask_mongo_uri, settings
from app.core.logging_config import get_logger
from app.services.startup.connection import negotiate_connection
from app.services.startup.frontend import FrontendStrategy, select_frontend
from app.services.startup.resolver import DEFAULT_MODULES, Importer, ModuleSpec, resolve_modules
from app.services.startup.routes import assemble_routes
from app.services.startup.seeder import BackgroundSeeder
from app.services.uploads import build_upload_policies

logger = get_logger(__name__)


class StartupPhase(str, Enum):
    LOADING = "loading"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    DISCONNECTED = "disconnected"
    ROUTES_ASSEMBLED = "routes_assembled"
    FRONTEND_SELECTED = "frontend_selected"
    LISTENING = "listening"


_PHASE_RANK = {
    StartupPhase.LOADING: 0,
    StartupPhase.CONNECTING: 1,
    StartupPhase.CONNECTED: 2,
    StartupPhase.DISCONNECTED: 2,
    StartupPhase.ROUTES_ASSEMBLED: 3,
    StartupPhase.FRONTEND_SELECTED: 4,
    StartupPhase.LISTENING: 5,
}


class StartupOrchestrator:
    def __init__(
        self,
        config: Settings = settings,
        specs: Iterable[ModuleSpec] = DEFAULT_MODULES,
        importer: Importer = importlib.import_module,
    ):
        self.config = config
        self.specs = tuple(specs)
        self.importer = importer

        self.phase: Optional[StartupPhase] = None
        self.registry: Optional[CapabilityRegistry] = None
        self.snapshot: Optional[CapabilitySnapshot] = None
        self.app: Optional[FastAPI] = None
        self.frontend: Optional[FrontendStrategy] = None
        self.registered_routes: List[str] = []
        self.seeder: Optional[BackgroundSeeder] = None

    def _enter(self, phase: StartupPhase) -> None:
        if self.phase is not None and _PHASE_RANK[phase] <= _PHASE_RANK[self.phase]:
            raise RuntimeError(f"Cannot move from {self.phase.value} to {phase.value}")
        logger.debug(f"[Startup] phase -> {phase.value}")
        self.phase = phase

    async def assemble(self) -> FastAPI:
        """Run every phase up to FrontendSelected and return the application."""
        self._enter(StartupPhase.LOADING)
        logger.info(f"[Startup] Starting {self.config.PROJECT_NAME}...")
        logger.info(f"[Startup] MONGODB_URI = {mask_mongo_uri(self.config.MONGODB_URI)}")
        if not self.config.MONGODB_URI:
            logger.warning("[Startup] MONGODB_URI environment variable is not set")
        self.registry = resolve_modules(self.specs, self.importer)

        self._enter(StartupPhase.CONNECTING)
        connected = await negotiate_connection(self.registry)
        self._enter(StartupPhase.CONNECTED if connected else StartupPhase.DISCONNECTED)

        self.snapshot = CapabilitySnapshot.from_registry(self.registry, connected, self.config.ENVIRONMENT)

        app = create_app(self.config)
        app.state.capabilities = self.snapshot
        uploads = build_upload_policies(self.config)
        self.registered_routes = assemble_routes(app, self.registry, self.snapshot, uploads)
        self._enter(StartupPhase.ROUTES_ASSEMBLED)

        self.frontend = await select_frontend(app, self.registry, self.snapshot, self.config)
        app.state.frontend = self.frontend
        self._enter(StartupPhase.FRONTEND_SELECTED)

        self.app = app
        return app

    def mark_listening(self) -> None:
        self._enter(StartupPhase.LISTENING)

    def start_background_seeding(self) -> Optional[asyncio.Task]:
        """Schedule seeding on the running loop without waiting for it."""
        if self.registry is None or self.snapshot is None:
            raise RuntimeError("Startup sequence has not been assembled")
        if self.seeder is None:
            self.seeder = BackgroundSeeder(self.registry, self.snapshot)
        return self.seeder.start()
