"""Cache module for dollar-kv."""

from .store import KVStore

__all__ = ["KVStore"]
