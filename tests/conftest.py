import asyncio
import importlib
import types

import pytest
from mongomock_motor import AsyncMongoMockClient

from app.core.config import Settings
from app.db import mongo
from app.services.startup.orchestrator import StartupOrchestrator

DEV_SERVER_MODULE = "app.frontend.dev_server"


def make_importer(overrides=None, missing=()):
    """Importer that fakes some modules and hides others, importing the rest for real."""
    overrides = overrides or {}

    def importer(path):
        if path in missing:
            raise ModuleNotFoundError(f"No module named '{path}'")
        if path in overrides:
            return overrides[path]
        return importlib.import_module(path)

    return importer


@pytest.fixture(autouse=True)
def reset_database():
    mongo.set_database(None)
    yield
    mongo.set_database(None)


@pytest.fixture
def test_settings(tmp_path, monkeypatch):
    for name in ("MONGODB_URI", "APP_ENV", "NODE_ENV"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("UPLOAD_DIR", str(tmp_path / "uploads"))
    monkeypatch.setenv("STATIC_DIR", str(tmp_path / "dist"))
    monkeypatch.setenv("DEV_SERVER_URL", "http://127.0.0.1:9")
    monkeypatch.setenv("BCRYPT_ROUNDS", "4")
    return Settings()


@pytest.fixture
def mongo_db():
    return AsyncMongoMockClient()["police_management_test"]


@pytest.fixture
def connector(mongo_db):
    """Connector module whose connect call installs the mock database."""

    async def connect_to_mongodb():
        mongo.set_database(mongo_db)

    return types.SimpleNamespace(connect_to_mongodb=connect_to_mongodb)


@pytest.fixture
def failing_connector():
    async def connect_to_mongodb():
        raise ConnectionError("connection refused")

    return types.SimpleNamespace(connect_to_mongodb=connect_to_mongodb)


@pytest.fixture
def build_app(test_settings):
    """Run the startup sequence up to frontend selection.

    The dev server module is hidden unless a test asks for it so no test
    depends on a running bundler.
    """

    def _build(overrides=None, missing=(DEV_SERVER_MODULE,), config=None):
        orchestrator = StartupOrchestrator(config or test_settings, importer=make_importer(overrides, missing))
        app = asyncio.run(orchestrator.assemble())
        return orchestrator, app

    return _build


@pytest.fixture
def connected_app(build_app, connector):
    _, app = build_app(overrides={"app.db.mongo": connector})
    return app
