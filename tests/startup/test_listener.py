"""Tests for socket binding and the fatal bind path."""
import asyncio
import errno
import logging
import socket

import pytest

from app.services.startup.listener import bind_socket, serve
from app.services.startup.orchestrator import StartupOrchestrator, StartupPhase


def no_modules(path):
    raise ModuleNotFoundError(f"No module named '{path}'")


@pytest.fixture
def occupied_port():
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    sock.bind(("127.0.0.1", 0))
    sock.listen(1)
    yield sock.getsockname()[1]
    sock.close()


class FakeServer:
    def __init__(self):
        self.sockets = None

    async def serve(self, sockets=None):
        self.sockets = sockets


def test_bind_socket_on_free_port():
    sock = bind_socket("127.0.0.1", 0)
    try:
        assert sock.getsockname()[1] > 0
    finally:
        sock.close()


def test_bind_socket_port_in_use(occupied_port):
    with pytest.raises(OSError) as exc_info:
        bind_socket("127.0.0.1", occupied_port)

    assert exc_info.value.errno == errno.EADDRINUSE


def test_serve_exits_with_status_1_when_port_in_use(test_settings, occupied_port, caplog):
    test_settings.HOST = "127.0.0.1"
    test_settings.PORT = occupied_port
    orchestrator = StartupOrchestrator(test_settings, importer=no_modules)

    with pytest.raises(SystemExit) as exc_info:
        asyncio.run(serve(orchestrator, server_factory=lambda app, config: FakeServer()))

    assert exc_info.value.code == 1
    assert f"Port {occupied_port} is already in use" in caplog.text
    assert orchestrator.phase is StartupPhase.FRONTEND_SELECTED


def test_serve_hands_bound_socket_to_server(test_settings, caplog):
    caplog.set_level(logging.INFO)
    test_settings.HOST = "127.0.0.1"
    test_settings.PORT = 0
    orchestrator = StartupOrchestrator(test_settings, importer=no_modules)
    server = FakeServer()

    asyncio.run(serve(orchestrator, server_factory=lambda app, config: server))

    assert orchestrator.phase is StartupPhase.LISTENING
    assert len(server.sockets) == 1
    assert "Disconnected (Fallback Mode)" in caplog.text
    assert "Limited (No Database)" in caplog.text
