"""Best-effort loading of optional feature modules.

Every module is attempted independently; a failure is recorded as
`Unavailable` and logged, never raised.
"""
from __future__ import annotations

import importlib
from dataclasses import dataclass
from types import ModuleType
from typing import Callable, Iterable

from app.core.capabilities import CapabilityRegistry, Loaded, LoadResult, Unavailable
from app.core.logging_config import get_logger

logger = get_logger(__name__)

Importer = Callable[[str], ModuleType]


@dataclass(frozen=True)
class ModuleSpec:
    name: str
    module_path: str
    attribute: str
    label: str


DEFAULT_MODULES = (
    ModuleSpec("connector", "app.db.mongo", "connect_to_mongodb", "MongoDB connection"),
    ModuleSpec("primary", "app.api.v1.primary", "register_primary_routes", "MongoDB routes"),
    ModuleSpec("evidence", "app.api.v1.evidence", "register_evidence_routes", "Evidence routes"),
    ModuleSpec("custodial", "app.api.v1.custodial", "register_custodial_routes", "Custodial routes"),
    ModuleSpec("dev_server", "app.frontend.dev_server", "setup_dev_server", "Dev server"),
    ModuleSpec("seed", "app.db.seed_geofiles", "seed_geofiles", "Seed geofiles"),
    ModuleSpec("admin_seed", "app.db.seed_admin", "seed_admin_user", "Seed admin"),
    ModuleSpec("additional", "app.api.v1.additional", "register_additional_routes", "Additional routes"),
)


def resolve_module(spec: ModuleSpec, importer: Importer = importlib.import_module) -> LoadResult:
    logger.info(f"[Startup]   - Loading {spec.label} module...")
    try:
        module = importer(spec.module_path)
    except Exception as e:
        # Missing file, missing dependency or an error raised at import time
        logger.warning(f"[Startup]   {spec.label} module not available: {e}")
        return Unavailable(spec.name, spec.module_path, str(e))

    handle = getattr(module, spec.attribute, None)
    if handle is None or not callable(handle):
        reason = f"{spec.module_path} has no callable '{spec.attribute}'"
        logger.warning(f"[Startup]   {spec.label} module not available: {reason}")
        return Unavailable(spec.name, spec.module_path, reason)

    logger.info(f"[Startup]   {spec.label} module loaded")
    return Loaded(spec.name, spec.module_path, handle)


def resolve_modules(
    specs: Iterable[ModuleSpec] = DEFAULT_MODULES,
    importer: Importer = importlib.import_module,
) -> CapabilityRegistry:
    logger.info("[Startup] Loading modules...")
    return CapabilityRegistry(resolve_module(spec, importer) for spec in specs)
