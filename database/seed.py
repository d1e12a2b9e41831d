"""Seed data.

Ensures the accounts of the business profile exist. Safe to run on every
start: users that already exist (matched by username) are left untouched.
"""
from typing import List, Optional

from loguru import logger

from config.business_config import BusinessConfig, business_config
from .interfaces import Storage
from .schemas import User, UserCreate


def seed_defaults(storage: Storage,
                  config: Optional[BusinessConfig] = None) -> List[User]:
    """Create the profile's default users that are missing.

    Args:
        storage: Target storage (memory or SQL).
        config: Business profile; the global ``business_config`` when None.

    Returns:
        The users created by this call (empty when everything existed).
    """
    config = config or business_config
    created = []
    for user_data in config.get_default_users():
        data = UserCreate(**user_data)
        if storage.users.find_by("username", data.username) is not None:
            continue
        user = storage.users.create(data)
        logger.info(f"Created default user: {user.username} ({user.role})")
        created.append(user)
    return created
