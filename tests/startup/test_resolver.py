"""Tests for optional module resolution."""
import types

from app.core.capabilities import Loaded, Unavailable
from app.services.startup.resolver import DEFAULT_MODULES, ModuleSpec, resolve_module, resolve_modules


SPEC = ModuleSpec("evidence", "fake.evidence", "register_evidence_routes", "Evidence routes")


def importer_for(mapping):
    def importer(path):
        value = mapping[path]
        if isinstance(value, Exception):
            raise value
        return value

    return importer


class TestResolveModule:
    def test_loaded_module_returns_handle(self):
        def register_evidence_routes(app, uploads):
            pass

        module = types.SimpleNamespace(register_evidence_routes=register_evidence_routes)
        result = resolve_module(SPEC, importer_for({"fake.evidence": module}))

        assert isinstance(result, Loaded)
        assert result.available is True
        assert result.handle is register_evidence_routes

    def test_missing_module_is_unavailable(self):
        result = resolve_module(SPEC, importer_for({"fake.evidence": ModuleNotFoundError("No module named 'fake'")}))

        assert isinstance(result, Unavailable)
        assert result.available is False
        assert "No module named" in result.reason

    def test_module_raising_at_import_is_unavailable(self):
        result = resolve_module(SPEC, importer_for({"fake.evidence": RuntimeError("boom at import")}))

        assert isinstance(result, Unavailable)
        assert "boom at import" in result.reason

    def test_missing_export_is_unavailable(self):
        result = resolve_module(SPEC, importer_for({"fake.evidence": types.SimpleNamespace()}))

        assert isinstance(result, Unavailable)
        assert "register_evidence_routes" in result.reason

    def test_non_callable_export_is_unavailable(self):
        module = types.SimpleNamespace(register_evidence_routes="not a function")
        result = resolve_module(SPEC, importer_for({"fake.evidence": module}))

        assert isinstance(result, Unavailable)


class TestResolveModules:
    def test_failure_does_not_stop_later_modules(self):
        specs = [
            ModuleSpec("connector", "fake.connector", "connect", "Connector"),
            ModuleSpec("evidence", "fake.evidence", "register", "Evidence"),
            ModuleSpec("custodial", "fake.custodial", "register", "Custodial"),
        ]
        registry = resolve_modules(
            specs,
            importer_for({
                "fake.connector": ImportError("missing"),
                "fake.evidence": RuntimeError("broken"),
                "fake.custodial": types.SimpleNamespace(register=lambda app, uploads: None),
            }),
        )

        assert registry.names() == ["connector", "evidence", "custodial"]
        assert not registry.is_available("connector")
        assert not registry.is_available("evidence")
        assert registry.is_available("custodial")
        assert registry.get("evidence") is None
        assert callable(registry.get("custodial"))

    def test_default_modules_resolve_from_project(self):
        registry = resolve_modules(DEFAULT_MODULES)

        for name in ("connector", "primary", "evidence", "custodial", "seed", "admin_seed", "additional"):
            assert registry.is_available(name), registry.result(name)
