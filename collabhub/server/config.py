"""Server settings read from environment variables.

Values are read once when this module is imported, so set the
environment before importing it. serve() arguments override them.
Logging reads COLLABHUB_LOG_LEVEL and COLLABHUB_LOG_DIR itself, see
utils.logger.
"""
import os
from dataclasses import dataclass


@dataclass
class Settings:
    """Collaboration hub server settings."""

    host: str = os.getenv("COLLABHUB_HOST", "127.0.0.1")
    port: int = int(os.getenv("COLLABHUB_PORT", "50051"))
    # Load demo users, channels and messages on startup
    seed: bool = os.getenv("COLLABHUB_SEED", "false").lower() in {"1", "true", "yes"}


settings = Settings()
