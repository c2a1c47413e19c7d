"""Capability registry and the immutable snapshot derived from it.

The registry records, for every optional module, whether it loaded and which
callable it exports. The snapshot is computed once after the database
connection attempt and is handed to every later startup step.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Callable, Dict, Iterable, Iterator, List, Mapping, Optional, Union

ROUTE_MODULES = ("primary", "evidence", "custodial")


@dataclass(frozen=True)
class Loaded:
    name: str
    module_path: str
    handle: Callable[..., Any]

    @property
    def available(self) -> bool:
        return True


@dataclass(frozen=True)
class Unavailable:
    name: str
    module_path: str
    reason: str

    @property
    def available(self) -> bool:
        return False


LoadResult = Union[Loaded, Unavailable]


class CapabilityRegistry:
    """Load results keyed by capability name, in resolution order."""

    def __init__(self, results: Iterable[LoadResult] = ()):
        self._results: Dict[str, LoadResult] = {}
        for result in results:
            self._results[result.name] = result

    def __iter__(self) -> Iterator[LoadResult]:
        return iter(self._results.values())

    def __len__(self) -> int:
        return len(self._results)

    def __contains__(self, name: object) -> bool:
        return name in self._results

    def result(self, name: str) -> Optional[LoadResult]:
        return self._results.get(name)

    def is_available(self, name: str) -> bool:
        result = self._results.get(name)
        return result is not None and result.available

    def get(self, name: str) -> Optional[Callable[..., Any]]:
        """Return the exported callable, or None when the capability is unavailable."""
        result = self._results.get(name)
        if isinstance(result, Loaded):
            return result.handle
        return None

    def names(self) -> List[str]:
        return list(self._results)


@dataclass(frozen=True)
class CapabilitySnapshot:
    db_module_available: bool
    db_connected: bool
    route_modules: Mapping[str, bool] = field(default_factory=lambda: MappingProxyType({}))
    dev_server_available: bool = False
    seed_module_available: bool = False
    environment: str = "development"

    def __post_init__(self) -> None:
        # Freeze the mapping so the snapshot stays read-only after startup
        object.__setattr__(self, "route_modules", MappingProxyType(dict(self.route_modules)))

    @classmethod
    def from_registry(
        cls, registry: CapabilityRegistry, db_connected: bool, environment: str
    ) -> "CapabilitySnapshot":
        return cls(
            db_module_available=registry.is_available("connector"),
            db_connected=db_connected,
            route_modules={name: registry.is_available(name) for name in ROUTE_MODULES},
            dev_server_available=registry.is_available("dev_server"),
            seed_module_available=registry.is_available("seed"),
            environment=environment,
        )

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    def route_enabled(self, name: str) -> bool:
        """A feature's routes exist iff its module loaded and the database connected."""
        return self.db_connected and bool(self.route_modules.get(name, False))

    def active_route_sets(self) -> List[str]:
        return [name for name in ROUTE_MODULES if self.route_enabled(name)]

    def summary(self) -> Dict[str, Any]:
        return {
            "mongodb": "connected" if self.db_connected else "disconnected",
            "routes": self.active_route_sets(),
            "environment": self.environment,
            "dev_server": self.dev_server_available,
            "seed": self.seed_module_available,
        }
