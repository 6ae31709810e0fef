"""
Noter Backend: Server Lifecycle
=================================

What:  Owns the process lifecycle: connect, migrate, bind, serve, shut down.
How:   Wraps a uvicorn.Server. The shutdown path is driven by an
       asyncio.Event (the cancellation source). SIGINT/SIGTERM handlers only
       set that event; a watcher task reacts by asking uvicorn to exit and
       forcing the exit if in-flight requests outlive the deadline.
Who:   Run by the `noter` console script (noter.__main__).

Lifecycle:
    CREATED ──initialize()──▶ INITIALIZED ──serve()──▶ SERVING
        SERVING ──signal / request_shutdown()──▶ SHUTTING_DOWN ──▶ STOPPED

    CREATED:       app built with the static routes
    INITIALIZED:   database connected, migrations applied, DB routes bound
    SERVING:       uvicorn listening on settings.host:settings.port
    SHUTTING_DOWN: no new connections; in-flight requests get
                   settings.shutdown_timeout seconds to finish
    STOPPED:       uvicorn returned; the database is closed on the way out
                   whatever the outcome

Startup failures (connect, migrate) propagate out of serve() before SERVING.
"""

import asyncio
import contextlib
import logging
import math
import signal
from enum import Enum
from typing import Generator, Optional

import uvicorn

from noter.config import Settings
from noter.database import Database, run_migrations
from noter.main import bind_database_routes, create_app

logger = logging.getLogger(__name__)

HANDLED_SIGNALS = (signal.SIGINT, signal.SIGTERM)


class ServerState(str, Enum):
    CREATED = "created"
    INITIALIZED = "initialized"
    SERVING = "serving"
    SHUTTING_DOWN = "shutting_down"
    STOPPED = "stopped"


class _HTTPServer(uvicorn.Server):
    """uvicorn server that leaves signal handling to Server."""

    def install_signal_handlers(self) -> None:
        pass

    @contextlib.contextmanager
    def capture_signals(self) -> Generator[None, None, None]:
        yield


class Server:
    """
    The Noter HTTP server.

    Usage:
        server = Server(load_settings())
        asyncio.run(server.serve())
    """

    def __init__(self, settings: Settings):
        self.settings = settings
        self.app = create_app()
        self.database: Optional[Database] = None
        self.state = ServerState.CREATED
        self._shutdown_requested = asyncio.Event()
        self._stopped = asyncio.Event()

    async def initialize(self) -> None:
        """
        Connect the database, apply migrations and bind the database routes.

        Raises:
            DatabaseError: Connection or migration failed. The connection, if
            one was made, is left on self.database for serve() to close.
        """
        self.database = await Database.connect(self.settings)
        await asyncio.to_thread(run_migrations, self.settings)
        bind_database_routes(
            self.app,
            self.database,
            db_health_timeout=self.settings.db_health_timeout,
        )
        self.state = ServerState.INITIALIZED

    def request_shutdown(self) -> None:
        """Trigger a graceful shutdown, as SIGINT/SIGTERM do."""
        self._shutdown_requested.set()

    def _build_http_server(self) -> uvicorn.Server:
        config = uvicorn.Config(
            self.app,
            host=self.settings.host,
            port=self.settings.port,
            log_config=None,
            timeout_graceful_shutdown=math.ceil(self.settings.shutdown_timeout),
        )
        return _HTTPServer(config)

    def _install_signal_handlers(self, loop: asyncio.AbstractEventLoop) -> None:
        for sig in HANDLED_SIGNALS:
            loop.add_signal_handler(sig, self._on_signal, sig)

    def _remove_signal_handlers(self, loop: asyncio.AbstractEventLoop) -> None:
        for sig in HANDLED_SIGNALS:
            loop.remove_signal_handler(sig)

    def _on_signal(self, sig: signal.Signals) -> None:
        logger.info("Received %s", sig.name)
        self.request_shutdown()

    async def _watch_shutdown(self, http_server: uvicorn.Server) -> None:
        await self._shutdown_requested.wait()
        self.state = ServerState.SHUTTING_DOWN
        logger.info("Shutting down server...")
        http_server.should_exit = True

        try:
            await asyncio.wait_for(
                self._stopped.wait(), timeout=self.settings.shutdown_timeout
            )
        except asyncio.TimeoutError:
            logger.error(
                "Server forced to shutdown: in-flight requests still running after %.1fs",
                self.settings.shutdown_timeout,
            )
            http_server.force_exit = True

    async def serve(self) -> None:
        """
        Run the server until a shutdown is requested.

        The database is closed on the way out whether startup failed,
        serving failed, or shutdown completed.
        """
        loop = asyncio.get_running_loop()
        try:
            await self.initialize()

            http_server = self._build_http_server()
            self._install_signal_handlers(loop)
            watcher = asyncio.create_task(self._watch_shutdown(http_server))
            try:
                self.state = ServerState.SERVING
                logger.info(
                    "Starting the server at %s:%d", self.settings.host, self.settings.port
                )
                await http_server.serve()
            finally:
                self._stopped.set()
                self._remove_signal_handlers(loop)
                watcher.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await watcher
        finally:
            if self.state is not ServerState.CREATED:
                self.state = ServerState.STOPPED
            if self.database is not None:
                await self.database.close()
            logger.info("Server stopped")
