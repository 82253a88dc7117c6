from __future__ import annotations

import asyncio
from typing import Optional

import uvicorn
from fastapi import FastAPI

from stillpoint.models.enums import LogCategory
from stillpoint.utils.logger import get_logger

log = get_logger().for_category(LogCategory.API)


class APIServerWrapper:
    """
    Runs uvicorn inside an asyncio task without uvicorn's own signal handlers,
    so that the ShutdownCoordinator owns SIGINT/SIGTERM.

    start() serves until stop() is called; stop() shuts the server down
    gracefully and cancels the serve task if it does not finish in time.
    """

    def __init__(self, app: FastAPI, host: str = "127.0.0.1", port: int = 8000):
        self.app = app
        self.host = host
        self.port = port
        self._server: Optional[uvicorn.Server] = None
        self._serve_task: Optional[asyncio.Task] = None
        self._stop_event = asyncio.Event()

    def _create_server(self) -> uvicorn.Server:
        config = uvicorn.Config(
            app=self.app,
            host=self.host,
            port=self.port,
            loop="asyncio",
            log_level="warning",
            access_log=False,
            server_header=False,
        )
        server = uvicorn.Server(config)
        server.install_signal_handlers = lambda: None  # type: ignore
        return server

    async def start(self) -> None:
        """
        Serve until stop() is called.

        Raises:
            RuntimeError: the server is already running
        """
        if self.is_running:
            raise RuntimeError("API server already started")

        self._server = self._create_server()
        self._stop_event.clear()

        log.info(f"Launching API server on http://{self.host}:{self.port}")
        self._serve_task = asyncio.create_task(self._server.serve(), name="UvicornServe")

        stop_waiter = asyncio.ensure_future(self._stop_event.wait())
        try:
            await asyncio.wait({self._serve_task, stop_waiter}, return_when=asyncio.FIRST_COMPLETED)
        except asyncio.CancelledError:
            await self.stop()
            raise
        finally:
            stop_waiter.cancel()

        # serve() ending on its own (bind failure) is a server failure
        if self._serve_task is not None and self._serve_task.done() and not self._stop_event.is_set():
            exc = None if self._serve_task.cancelled() else self._serve_task.exception()
            self._server = None
            raise RuntimeError(f"API server exited unexpectedly: {exc}")

    async def stop(self, *, shutdown_timeout: float = 2.0) -> None:
        """Stop the API server and release the port."""
        self._stop_event.set()
        if self._server is None:
            log.debug("API server stop() called but server was not running")
            return

        log.info("Stopping API server")
        self._server.should_exit = True
        self._server.force_exit = True

        if self._serve_task and not self._serve_task.done():
            try:
                await asyncio.wait_for(asyncio.shield(self._serve_task), timeout=shutdown_timeout)
            except asyncio.TimeoutError:
                log.warn("API server shutdown timeout, cancelling serve task")
                self._serve_task.cancel()
                await asyncio.gather(self._serve_task, return_exceptions=True)
            except Exception as e:
                log.error(f"API server serve task failed: {e}")

        self._server = None
        self._serve_task = None
        log.info("API server stopped")

    @property
    def is_running(self) -> bool:
        return self._serve_task is not None and not self._serve_task.done()
