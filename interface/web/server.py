"""uvicorn runner.

Serves the FastAPI application in a background thread with its own event
loop, so ``app.py`` keeps the main loop for signal handling.

Usage::

    server = WebServer(create_app(storage), port=8080)
    await server.startup()
    ...
    await server.shutdown()
"""
import asyncio
import threading
from typing import Optional

import uvicorn
from fastapi import FastAPI
from loguru import logger


class WebServer:
    """Background uvicorn server.

    Attributes:
        app: The FastAPI application to serve.
        host: Bind address.
        port: Bind port.
        running: True between ``startup()`` and ``shutdown()``.
    """

    def __init__(self, app: FastAPI, host: str = "0.0.0.0", port: int = 8080,
                 log_level: str = "warning"):
        self.app = app
        self.host = host
        self.port = port
        self.log_level = log_level
        self.running = False
        self._server_thread: Optional[threading.Thread] = None
        self._server: Optional[uvicorn.Server] = None
        self._server_loop: Optional[asyncio.AbstractEventLoop] = None

    def _run(self) -> None:
        """Thread body: run uvicorn on a fresh event loop."""
        loop = asyncio.new_event_loop()
        asyncio.set_event_loop(loop)
        self._server_loop = loop

        config = uvicorn.Config(
            self.app,
            host=self.host,
            port=self.port,
            log_level=self.log_level,
            loop="asyncio",
        )
        server = uvicorn.Server(config)
        # signals are handled by app.py
        server.install_signal_handlers = lambda: None
        self._server = server

        try:
            loop.run_until_complete(server.serve())
        except Exception as e:
            logger.error(f"Web server crashed: {e}")
        finally:
            pending = asyncio.all_tasks(loop)
            for task in pending:
                task.cancel()
            if pending:
                loop.run_until_complete(
                    asyncio.gather(*pending, return_exceptions=True)
                )
            loop.run_until_complete(loop.shutdown_asyncgens())
            loop.close()

    async def startup(self) -> None:
        """Start serving and wait (up to 5 s) for uvicorn to come up."""
        self.running = True
        self._server_thread = threading.Thread(target=self._run, daemon=True)
        self._server_thread.start()

        waited = 0.0
        while (self._server is None or not self._server.started) and waited < 5:
            await asyncio.sleep(0.1)
            waited += 0.1

        logger.info(f"API listening on http://{self.host}:{self.port}")

    async def shutdown(self) -> None:
        """Stop the server and release the port."""
        self.running = False
        if self._server is None:
            return

        logger.info("Stopping web server...")
        self._server.should_exit = True
        thread = self._server_thread
        if thread is not None and thread.is_alive():
            await asyncio.to_thread(thread.join, 3.0)

        if thread is not None and thread.is_alive():
            logger.warning("Web server did not stop within 3s, forcing exit")
            self._server.force_exit = True
            if self._server_loop is not None and self._server_loop.is_running():
                self._server_loop.call_soon_threadsafe(self._server_loop.stop)
            await asyncio.to_thread(thread.join, 2.0)
            if thread.is_alive():
                logger.warning("Web server thread still alive; it exits with the process")

        self._server = None
        self._server_loop = None
        self._server_thread = None
        logger.info("Web server stopped")
