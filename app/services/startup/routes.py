"""Route assembly.

The precedence list is computed once from the capability snapshot by
`plan_routes` and then applied in order. Registration errors are contained
per step.
"""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List

from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles

from app.api.v1.health import build_health_router, build_service_unavailable_router
from app.core.capabilities import ROUTE_MODULES, CapabilityRegistry, CapabilitySnapshot
from app.core.logging_config import get_logger
from app.services.uploads import UploadPolicies

logger = get_logger(__name__)


@dataclass(frozen=True)
class RouteStep:
    name: str
    label: str
    register: Callable[[FastAPI], None]


def _feature_step(name: str, registrar: Callable, uploads: UploadPolicies) -> RouteStep:
    return RouteStep(name, f"{name.capitalize()} routes", lambda app: registrar(app, uploads))


def _mount_uploads(uploads: UploadPolicies) -> Callable[[FastAPI], None]:
    def register(app: FastAPI) -> None:
        directory = Path(uploads.directory)
        directory.mkdir(parents=True, exist_ok=True)
        app.mount("/uploads", StaticFiles(directory=str(directory)), name="uploads")

    return register


def plan_routes(
    registry: CapabilityRegistry,
    snapshot: CapabilitySnapshot,
    uploads: UploadPolicies,
) -> List[RouteStep]:
    """Ordered registration steps for the given capabilities."""
    steps: List[RouteStep] = []

    for name in ROUTE_MODULES:
        registrar = registry.get(name)
        if snapshot.route_enabled(name) and registrar is not None:
            steps.append(_feature_step(name, registrar, uploads))

    additional = registry.get("additional")
    if additional is not None:
        steps.append(RouteStep("additional", "Additional routes", lambda app: additional(app)))

    steps.append(RouteStep("uploads", "Uploaded files", _mount_uploads(uploads)))
    steps.append(
        RouteStep("health", "Health check", lambda app: app.include_router(build_health_router(snapshot)))
    )

    # Only in fallback mode: with a database, unmatched API paths stay 404
    if not snapshot.db_connected:
        steps.append(
            RouteStep(
                "service_unavailable",
                "Fallback API handler",
                lambda app: app.include_router(build_service_unavailable_router()),
            )
        )
    return steps


def apply_routes(app: FastAPI, steps: List[RouteStep]) -> List[str]:
    """Register each step; returns the names that registered without error."""
    registered: List[str] = []
    for step in steps:
        mark = len(app.router.routes)
        try:
            logger.info(f"[Startup]   - Registering {step.label}...")
            step.register(app)
        except Exception as e:
            # Drop whatever the failed step added before raising
            del app.router.routes[mark:]
            logger.warning(f"[Startup]   Failed to register {step.label}: {e}")
            continue
        registered.append(step.name)
    return registered


def assemble_routes(
    app: FastAPI,
    registry: CapabilityRegistry,
    snapshot: CapabilitySnapshot,
    uploads: UploadPolicies,
) -> List[str]:
    logger.info("[Startup] Setting up routes...")
    return apply_routes(app, plan_routes(registry, snapshot, uploads))
