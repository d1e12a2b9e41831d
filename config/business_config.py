"""
Business profile - replaceable store configuration

A new deployment can provide its own profile in place of the default one.
"""
from abc import ABC, abstractmethod
from typing import List, Dict, Any

from config.settings import settings


class BusinessConfig(ABC):
    """Abstract business profile"""

    @abstractmethod
    def get_store_name(self) -> str:
        """Display name of the store"""
        pass

    @abstractmethod
    def get_default_users(self) -> List[Dict[str, Any]]:
        """Users that must exist after seeding"""
        pass


class OpticStoreConfig(BusinessConfig):
    """Optical retail store profile"""

    def get_store_name(self) -> str:
        return "Optica POS"

    def get_default_users(self) -> List[Dict[str, Any]]:
        return [
            {
                "username": settings.admin_username,
                "password": settings.admin_password,
                "role": "admin",
                "name": settings.admin_name,
            },
        ]


# Global business profile (can be replaced in app.py)
business_config: BusinessConfig = OpticStoreConfig()
