"""Global settings.

Every user-configurable value is read from the environment or a ``.env``
file and loaded into this module at import time.

Usage:
    1. Run ``python scripts/setup_env.py`` to generate a ``.env`` file
    2. Or create ``.env`` by hand, one ``KEY=value`` per line
"""
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings - every field can be overridden by .env or env vars"""

    # ========== Storage ==========
    storage_backend: str = "sql"  # sql / memory
    database_url: str = "sqlite:///data/optica.db"

    # ========== Web API ==========
    web_host: str = "0.0.0.0"
    web_port: int = 8080

    # ========== Default admin user ==========
    admin_username: str = "admin"
    admin_password: str = "admin123"
    admin_name: str = "Administrador"

    # ========== Logging ==========
    log_level: str = "INFO"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False
        extra = "ignore"


# Global settings instance
settings = Settings()
