"""Configuration module for dollar-kv."""

from .settings import Settings, settings

__all__ = ["Settings", "settings"]
