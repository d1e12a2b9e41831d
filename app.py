#!/usr/bin/env python3
"""Optica POS - API server entry point

Starts the REST API of the optical store: products, patients, appointments,
sales and purchase orders, consignments, prescriptions, users and the
dashboard aggregate.

Usage:
    python app.py

    # custom port
    python app.py --port 8080

    # custom database
    python app.py --db sqlite:///data/store.db

    # throwaway in-memory store
    python app.py --storage memory

Environment (set in .env, generate it with python scripts/setup_env.py):
    STORAGE_BACKEND   sql or memory (default sql)
    DATABASE_URL      database URL for the sql backend
    WEB_HOST          bind address (default 0.0.0.0)
    WEB_PORT          bind port (default 8080)
    ADMIN_USERNAME    seeded admin account (default admin)
    ADMIN_PASSWORD    seeded admin password (default admin123)
    ADMIN_NAME        seeded admin display name
    LOG_LEVEL         loguru level (default INFO)
"""
import argparse
import asyncio
import signal
import sys

from loguru import logger

from config.settings import settings


def configure_logging(level: str) -> None:
    """Send loguru output to stderr at ``level``."""
    logger.remove()
    logger.add(
        sys.stderr,
        level=level.upper(),
        format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
               "<level>{level: <8}</level> | "
               "<cyan>{name}</cyan> - <level>{message}</level>",
    )


async def _cleanup(web, storage):
    """Stop the web server and close the storage, releasing port and files."""
    logger.info("Cleaning up...")

    if web is not None:
        try:
            await web.shutdown()
        except Exception as e:
            logger.warning(f"Error while stopping the web server: {e}")

    if storage is not None:
        try:
            storage.close()
        except Exception as e:
            logger.warning(f"Error while closing storage: {e}")

    logger.info("Service stopped")


async def main():
    parser = argparse.ArgumentParser(description="Optica POS API server")
    parser.add_argument("--host", default=settings.web_host,
                        help=f"bind address (default: {settings.web_host})")
    parser.add_argument("--port", type=int, default=settings.web_port,
                        help=f"bind port (default: {settings.web_port})")
    parser.add_argument("--db", default=None,
                        help="database URL (sql storage only)")
    parser.add_argument("--storage", choices=["sql", "memory"],
                        default=settings.storage_backend,
                        help=f"storage backend (default: {settings.storage_backend})")
    args = parser.parse_args()

    configure_logging(settings.log_level)

    web = None
    storage = None

    try:
        from database import create_storage, seed_defaults
        from interface.web import WebServer, create_app

        storage = create_storage(args.storage, args.db)
        seed_defaults(storage)

        web = WebServer(create_app(storage), host=args.host, port=args.port)
        await web.startup()

        print()
        print("=" * 60)
        print("  Optica POS API started")
        print(f"  URL:     http://localhost:{args.port}")
        print(f"  Docs:    http://localhost:{args.port}/docs")
        print(f"  Storage: {storage.backend}")
        print("=" * 60)
        print("  Press Ctrl+C to stop")
        print()

        loop = asyncio.get_running_loop()
        shutdown_event = asyncio.Event()
        _shutdown_requested = False

        def signal_handler(signum):
            nonlocal _shutdown_requested
            if _shutdown_requested:
                # second signal: stop waiting for a clean shutdown
                logger.warning("Second exit signal, forcing shutdown...")
                for task in asyncio.all_tasks(loop):
                    task.cancel()
                return
            _shutdown_requested = True
            logger.info(f"Received signal {signum}, shutting down...")
            shutdown_event.set()

        for sig in (signal.SIGINT, signal.SIGTERM):
            loop.add_signal_handler(sig, signal_handler, sig)

        await shutdown_event.wait()

    except asyncio.CancelledError:
        logger.info("Task cancelled, cleaning up...")
    except KeyboardInterrupt:
        logger.info("Keyboard interrupt")
    finally:
        await _cleanup(web, storage)


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except (KeyboardInterrupt, SystemExit):
        pass
    finally:
        print("\nStopped.")
