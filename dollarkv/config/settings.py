"""
dollar-kv Configuration Settings

This module contains all configuration constants for the dollar-kv server.
Every value can be overridden through a DOLLAR_KV_* environment variable.
"""

import os
from dataclasses import dataclass


@dataclass
class Settings:
    """Server configuration settings."""

    # Network settings
    HOST: str = os.environ.get("DOLLAR_KV_HOST", "127.0.0.1")
    PORT: int = int(os.environ.get("DOLLAR_KV_PORT", "5555"))

    # Connection settings
    READ_BUFFER_SIZE: int = 4096
    # Longest incomplete request a connection may buffer before it is dropped
    MAX_REQUEST_LENGTH: int = int(os.environ.get("DOLLAR_KV_MAX_REQUEST_LENGTH", "10000"))

    # Logging settings
    DEBUG: bool = os.environ.get("DOLLAR_KV_DEBUG", "false").lower() == "true"
    LOG_LEVEL: str = os.environ.get("DOLLAR_KV_LOG_LEVEL", "INFO")


# Global settings instance
settings = Settings()
