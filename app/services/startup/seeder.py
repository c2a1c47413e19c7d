"""Fire-and-forget seeding of sample data and the admin account."""
from __future__ import annotations

import asyncio
import inspect
from typing import Dict, Optional

from app.core.capabilities import CapabilityRegistry, CapabilitySnapshot
from app.core.logging_config import get_logger

logger = get_logger(__name__)

SEED_STEPS = (
    ("seed", "sample geofiles"),
    ("admin_seed", "admin user"),
)


class BackgroundSeeder:
    """Spawns the seeding task at most once, and only with a connected database.

    The returned task resolves to a mapping of seed step -> success; it never
    raises, so nothing reaches the loop's unhandled-exception handler.
    """

    def __init__(self, registry: CapabilityRegistry, snapshot: CapabilitySnapshot):
        self._registry = registry
        self._snapshot = snapshot
        self._task: Optional[asyncio.Task] = None

    @property
    def task(self) -> Optional[asyncio.Task]:
        return self._task

    def start(self) -> Optional[asyncio.Task]:
        if not self._snapshot.db_connected:
            logger.info("[Startup] Skipping background seeding (no database)")
            return None
        if self._task is None:
            self._task = asyncio.get_running_loop().create_task(self._run(), name="background-seeder")
        return self._task

    async def _run(self) -> Dict[str, bool]:
        results: Dict[str, bool] = {}
        for name, label in SEED_STEPS:
            results[name] = await self._run_step(name, label)
        return results

    async def _run_step(self, name: str, label: str) -> bool:
        seed = self._registry.get(name)
        if seed is None:
            logger.info(f"Seed step '{label}' not available, skipping")
            return False
        try:
            logger.info(f"Seeding {label} in background...")
            result = seed()
            if inspect.isawaitable(result):
                await result
        except Exception as e:
            logger.warning(f"Failed to seed {label}: {e}")
            return False
        return True
