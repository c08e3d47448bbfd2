"""
Key-Value Store Module

This module implements the shared key-value mapping used by every
connection of the server.
"""

import threading
from typing import Any, Dict, Optional


class KVStore:
    """
    In-memory key-value store safe for concurrent access.

    This class provides O(1) average-case time complexity for:
    - put: Insert or update a key-value pair
    - get: Retrieve a value by key

    Concurrency:
        A single lock guards the whole mapping and is held only for the
        duration of one dictionary operation. Callers never hold it across
        network I/O, so a put is either fully visible or not visible at all
        to any concurrent get.
    """

    def __init__(self):
        """Initialize an empty store."""
        self._lock = threading.Lock()
        self._store: Dict[str, str] = {}

    def put(self, key: str, value: str) -> None:
        """
        Insert or replace the value for a key.

        Args:
            key: The key to store
            value: The value to associate with the key (may be empty)

        Time Complexity: O(1) average
        """
        with self._lock:
            self._store[key] = value

    def get(self, key: str) -> Optional[str]:
        """
        Retrieve the current value for a key.

        Args:
            key: The key to look up

        Returns:
            The stored value, or None if the key was never stored

        Time Complexity: O(1) average
        """
        with self._lock:
            return self._store.get(key)

    def size(self) -> int:
        """Get the current number of keys in the store."""
        with self._lock:
            return len(self._store)

    def clear(self) -> None:
        """Remove all keys from the store."""
        with self._lock:
            self._store.clear()

    def get_stats(self) -> Dict[str, Any]:
        """
        Get statistics about the store.

        Returns:
            Dictionary containing:
            - total_keys: Number of keys stored
            - total_value_bytes: Combined length of all stored values
        """
        with self._lock:
            return {
                "total_keys": len(self._store),
                "total_value_bytes": sum(len(value) for value in self._store.values()),
            }
