"""
Skeleton Backend - Listener Lifecycle
=====================================

What:  Binds the TCP listener and runs the app under uvicorn.
How:   The socket is bound here, before uvicorn starts, so a busy port or a
       bad host fails immediately with ServerStartupError instead of inside
       uvicorn's startup (which calls sys.exit on its own).

Entry points:
    start(settings) → ServiceHandle   serve on a background thread; handle.stop()
    run(settings)                     serve in the foreground until SIGINT/SIGTERM
    main()                            CLI: logging + run(), exit status 1 on bind failure

States:
    Stopped ──start()──▶ Listening ──stop()──▶ Stopped (final, handle is spent)
"""

import asyncio
import logging
import socket
import sys
import threading
import time
from typing import Optional

import uvicorn
from fastapi import FastAPI

from skeleton.config import Settings, settings as default_settings
from skeleton.exceptions import ServerStartupError
from skeleton.main import create_app, setup_logging

logger = logging.getLogger(__name__)

LISTENING = "listening"
STOPPED = "stopped"


def bind_listener(host: str, port: int) -> socket.socket:
    """
    Bind a TCP socket on host:port.

    Raises:
        ServerStartupError: the address is in use, not permitted, or unknown.
    """
    family = socket.AF_INET6 if ":" in host else socket.AF_INET
    sock = socket.socket(family, socket.SOCK_STREAM)
    try:
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        sock.bind((host, port))
    except OSError as exc:
        sock.close()
        raise ServerStartupError(host, port, exc.strerror or str(exc)) from exc
    sock.set_inheritable(True)
    return sock


def _uvicorn_server(app: FastAPI, settings: Settings) -> uvicorn.Server:
    config = uvicorn.Config(
        app,
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
        log_config=None,  # keep the configuration from setup_logging()
        lifespan="on",
        timeout_graceful_shutdown=settings.shutdown_timeout,
    )
    return uvicorn.Server(config)


class ServiceHandle:
    """
    Owned handle on a running listener.

    Created by start(); the only way to reach the server afterwards. Usable
    as a context manager, which stops the server on exit.
    """

    def __init__(
        self,
        server: uvicorn.Server,
        sock: socket.socket,
        thread: threading.Thread,
        settings: Settings,
    ):
        self._server = server
        self._sock = sock
        self._thread = thread
        self._settings = settings
        self.host = settings.host
        self.port = sock.getsockname()[1]
        self.state = LISTENING

    @property
    def url(self) -> str:
        return f"http://{self._settings.display_host}:{self.port}"

    @property
    def is_listening(self) -> bool:
        return self.state == LISTENING and self._thread.is_alive()

    def stop(self, timeout: Optional[float] = None) -> None:
        """
        Shut the server down gracefully and release the port.

        Waits up to `timeout` seconds (default: settings.shutdown_timeout) for
        in-flight requests, then forces the exit. Calling stop() again is a no-op.
        """
        if self.state == STOPPED:
            return
        timeout = self._settings.shutdown_timeout if timeout is None else timeout

        self._server.should_exit = True
        self._thread.join(timeout)
        if self._thread.is_alive():
            logger.warning("Graceful shutdown exceeded %.1fs, forcing exit", timeout)
            self._server.force_exit = True
            self._thread.join(timeout)

        self._sock.close()
        self.state = STOPPED
        logger.info("Server on port %d stopped", self.port)

    def __enter__(self) -> "ServiceHandle":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.stop()

    def __repr__(self) -> str:
        return f"<ServiceHandle {self.url} {self.state}>"


def start(
    settings: Optional[Settings] = None,
    app: Optional[FastAPI] = None,
    startup_timeout: float = 10.0,
) -> ServiceHandle:
    """
    Bind the listener and serve `app` on a background thread.

    Args:
        settings:        Configuration (host, port, ...); defaults to the singleton.
        app:             ASGI app to serve; defaults to create_app(settings).
        startup_timeout: Seconds to wait for uvicorn to report it is serving.

    Returns:
        A ServiceHandle in the listening state.

    Raises:
        ServerStartupError: bind failed, or the server did not come up in time.
    """
    settings = settings or default_settings
    app = app or create_app(settings)

    sock = bind_listener(settings.host, settings.port)
    port = sock.getsockname()[1]
    server = _uvicorn_server(app, settings)

    thread = threading.Thread(
        target=server.run,
        kwargs={"sockets": [sock]},
        name=f"skeleton-server-{port}",
        daemon=True,
    )
    thread.start()

    deadline = time.monotonic() + startup_timeout
    while not server.started:
        if not thread.is_alive():
            sock.close()
            raise ServerStartupError(settings.host, port, "application startup failed")
        if time.monotonic() > deadline:
            server.should_exit = True
            thread.join(startup_timeout)
            sock.close()
            raise ServerStartupError(
                settings.host, port, f"not serving after {startup_timeout:.1f}s"
            )
        time.sleep(0.01)

    handle = ServiceHandle(server, sock, thread, settings)
    logger.info("Server is running at %s", handle.url)
    return handle


def run(settings: Optional[Settings] = None) -> None:
    """
    Serve in the foreground until interrupted.

    uvicorn installs its own SIGINT/SIGTERM handlers on the main thread and
    shuts down gracefully when either arrives.
    """
    settings = settings or default_settings
    app = create_app(settings)

    sock = bind_listener(settings.host, settings.port)
    port = sock.getsockname()[1]
    server = _uvicorn_server(app, settings)

    async def serve() -> None:
        task = asyncio.create_task(server.serve(sockets=[sock]))
        while not server.started and not task.done():
            await asyncio.sleep(0.01)
        if server.started:
            logger.info(
                "Server is running at http://%s:%d", settings.display_host, port
            )
        await task

    try:
        asyncio.run(serve())
    finally:
        sock.close()

    if not server.started:
        raise ServerStartupError(settings.host, port, "application startup failed")


def main() -> None:
    """Console entry point: no arguments, configuration from the environment."""
    setup_logging(default_settings.log_level)
    try:
        run(default_settings)
    except ServerStartupError as exc:
        logger.error("%s", exc.message)
        sys.exit(1)
