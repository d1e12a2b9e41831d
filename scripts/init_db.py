"""Initialise the database: create tables and seed the default users."""
import sys
import os

# project root on the import path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from database import create_storage, seed_defaults
from loguru import logger


def init_database(database_url=None):
    """Create every table and insert the seed data.

    Args:
        database_url: Target database; ``DATABASE_URL`` when None.

    Returns:
        The users created by this run.
    """
    logger.info("Initializing database...")

    storage = create_storage("sql", database_url)
    try:
        logger.info("Inserting seed data...")
        created = seed_defaults(storage)
    finally:
        storage.close()

    logger.info(f"Database initialization completed ({len(created)} users created)")
    return created


if __name__ == "__main__":
    init_database(sys.argv[1] if len(sys.argv) > 1 else None)
