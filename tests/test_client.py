"""
Tests for the Interactive Client

These tests verify KVClient from scripts/client.py:
- Invalid keys and values are refused locally, before anything is sent
- Valid requests round-trip through a running server

Run with: python -m pytest tests/test_client.py -v
"""

import asyncio
import importlib.util
from pathlib import Path
import pytest

CLIENT_PATH = Path(__file__).resolve().parents[1] / "scripts" / "client.py"


def load_client_module():
    """Import scripts/client.py, which is not part of the installed package."""
    spec = importlib.util.spec_from_file_location("dollarkv_client_script", CLIENT_PATH)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


@pytest.fixture
def client_module():
    return load_client_module()


class TestClientValidation:
    """Test that malformed input never reaches the wire."""

    @pytest.mark.parametrize("key, value", [
        ("Key", "value"),
        ("k$x", "value"),
        ("", "value"),
        ("key", "Value"),
        ("key", "va$lue"),
        ("key", "valu3"),
    ])
    def test_store_rejects_invalid_input(self, client_module, key, value):
        client = client_module.KVClient("127.0.0.1", 1)
        assert client.store(key, value) == "ERROR: keys and values must be lowercase ASCII letters"

    @pytest.mark.parametrize("key", ["", "KEY", "k3y", "k$"])
    def test_load_rejects_invalid_key(self, client_module, key):
        client = client_module.KVClient("127.0.0.1", 1)
        assert client.load(key) == "ERROR: keys must be lowercase ASCII letters"

    def test_valid_input_reaches_send(self, client_module):
        """Test that valid input passes the guard (no socket, so 'Not connected')."""
        client = client_module.KVClient("127.0.0.1", 1)
        assert client.store("key", "") == "ERROR: Not connected"
        assert client.load("key") == "ERROR: Not connected"


@pytest.mark.asyncio
class TestClientAgainstServer:
    """Test the blocking client against a live server."""

    async def test_store_and_load(self, server, server_port, client_module):
        client = client_module.KVClient("127.0.0.1", server_port)
        assert await asyncio.to_thread(client.connect)
        try:
            assert await asyncio.to_thread(client.store, "abc", "xyz") == "DONE$"
            assert await asyncio.to_thread(client.load, "abc") == "FOUND$xyz$"
            assert await asyncio.to_thread(client.load, "missing") == "NOTFOUND$"

            # Rejected locally, so the connection stays usable
            assert (await asyncio.to_thread(client.store, "Abc", "xyz")).startswith("ERROR")
            assert await asyncio.to_thread(client.load, "abc") == "FOUND$xyz$"
        finally:
            client.disconnect()
