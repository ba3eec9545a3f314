"""
Skeleton Backend - Listener Lifecycle Tests
===========================================

What:  start()/stop() against a real socket, bind failures, CLI exit status.
How:   Binds 127.0.0.1 on an ephemeral port (PORT=0) so tests never collide
       with a running server on 4000; talks to it with httpx's sync client.
"""

import logging
import socket
from contextlib import asynccontextmanager

import httpx
import pytest
from fastapi import FastAPI

from skeleton import server
from skeleton.config import Settings
from skeleton.exceptions import ServerStartupError


@asynccontextmanager
async def failing_lifespan(app):
    raise RuntimeError("cannot start")
    yield


@pytest.fixture
def occupied_port():
    """A port with a live listener on it for the duration of the test."""
    blocker = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    blocker.bind(("127.0.0.1", 0))
    blocker.listen(1)
    yield blocker.getsockname()[1]
    blocker.close()


class TestStartStop:

    def test_end_to_end_health(self, loopback):
        with server.start(loopback) as handle:
            assert handle.is_listening
            response = httpx.get(f"http://127.0.0.1:{handle.port}/health")
            assert response.status_code == 200
            assert response.json() == {"status": "ok", "message": "Backend is healthy!"}
            assert response.headers["Access-Control-Allow-Origin"] == "*"

            root = httpx.get(f"http://127.0.0.1:{handle.port}/")
            assert root.text == "Server is running!"
        assert handle.state == server.STOPPED

    def test_ephemeral_port_is_reported(self, loopback):
        handle = server.start(loopback)
        try:
            assert handle.port > 0
            assert handle.url == f"http://127.0.0.1:{handle.port}"
        finally:
            handle.stop()

    def test_startup_logs_address(self, loopback, caplog):
        caplog.set_level(logging.INFO, logger="skeleton.server")
        handle = server.start(loopback)
        handle.stop()
        assert f"Server is running at http://127.0.0.1:{handle.port}" in caplog.text

    def test_stop_releases_port_and_is_idempotent(self, loopback):
        handle = server.start(loopback)
        port = handle.port
        handle.stop()
        handle.stop()
        assert handle.state == server.STOPPED
        assert not handle.is_listening

        with pytest.raises(httpx.ConnectError):
            httpx.get(f"http://127.0.0.1:{port}/health", timeout=1.0)

        # The same port can be bound again once stopped
        again = server.start(
            Settings(_env_file=None, host="127.0.0.1", port=port, shutdown_timeout=2.0)
        )
        again.stop()

    def test_fractional_shutdown_timeout_is_kept(self):
        settings = Settings(_env_file=None, shutdown_timeout=0.5)
        uv = server._uvicorn_server(FastAPI(), settings)
        assert uv.config.timeout_graceful_shutdown == 0.5


class TestBindFailure:

    def test_port_in_use_raises(self, occupied_port):
        settings = Settings(_env_file=None, host="127.0.0.1", port=occupied_port)
        with pytest.raises(ServerStartupError) as exc_info:
            server.start(settings)
        assert exc_info.value.port == occupied_port
        assert f"127.0.0.1:{occupied_port}" in exc_info.value.message

    def test_bind_listener_wraps_os_error(self, occupied_port):
        with pytest.raises(ServerStartupError):
            server.bind_listener("127.0.0.1", occupied_port)

    def test_run_fails_fast_on_busy_port(self, occupied_port):
        settings = Settings(_env_file=None, host="127.0.0.1", port=occupied_port)
        with pytest.raises(ServerStartupError):
            server.run(settings)


class TestStartupFailure:

    def test_start_raises_when_app_startup_fails(self, loopback):
        with pytest.raises(ServerStartupError, match="application startup failed"):
            server.start(loopback, app=FastAPI(lifespan=failing_lifespan))

    def test_run_does_not_announce_a_server_that_never_started(
        self, loopback, monkeypatch, caplog
    ):
        monkeypatch.setattr(
            server, "create_app", lambda settings: FastAPI(lifespan=failing_lifespan)
        )
        caplog.set_level(logging.INFO, logger="skeleton.server")

        with pytest.raises(ServerStartupError, match="application startup failed"):
            server.run(loopback)

        assert "Server is running at" not in caplog.text


class TestMain:

    def test_main_exits_non_zero_on_startup_error(self, monkeypatch, caplog):
        def fail(settings):
            raise ServerStartupError("0.0.0.0", 4000, "Address already in use")

        monkeypatch.setattr(server, "setup_logging", lambda level: None)
        monkeypatch.setattr(server, "run", fail)

        with caplog.at_level(logging.ERROR, logger="skeleton.server"):
            with pytest.raises(SystemExit) as exc_info:
                server.main()

        assert exc_info.value.code == 1
        assert "Address already in use" in caplog.text

    def test_main_runs_with_process_settings(self, monkeypatch):
        seen = []
        monkeypatch.setattr(server, "setup_logging", lambda level: seen.append(level))
        monkeypatch.setattr(server, "run", lambda settings: seen.append(settings))

        server.main()

        assert seen == [server.default_settings.log_level, server.default_settings]
