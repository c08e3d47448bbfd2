"""
Pytest Configuration and Fixtures

This module provides shared fixtures and configuration for all tests.
"""

import asyncio
import socket
import pytest
import pytest_asyncio
from contextlib import closing
from typing import AsyncGenerator, List, Optional

from dollarkv.cache.store import KVStore
from dollarkv.network.tcp_server import KVServer
from dollarkv.protocol.commands import Response
from dollarkv.protocol.parser import ProtocolParser


def find_free_port() -> int:
    """Find an available port for testing."""
    with closing(socket.socket(socket.AF_INET, socket.SOCK_STREAM)) as s:
        s.bind(('', 0))
        s.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        return s.getsockname()[1]


# ============================================================================
# KVStore Fixtures
# ============================================================================

@pytest.fixture
def store() -> KVStore:
    """Create a fresh, empty KVStore."""
    return KVStore()


# ============================================================================
# Protocol Fixtures
# ============================================================================

@pytest.fixture
def parser() -> ProtocolParser:
    """Create a ProtocolParser instance."""
    return ProtocolParser()


# ============================================================================
# Server Fixtures
# ============================================================================

@pytest.fixture
def server_port() -> int:
    """Get a free port for server testing."""
    return find_free_port()


@pytest_asyncio.fixture
async def server(server_port: int) -> AsyncGenerator[KVServer, None]:
    """
    Create and start a server instance for testing.

    This fixture:
    1. Creates a KVServer on a random free port
    2. Starts it in a background task
    3. Yields the server once it is listening
    4. Cleans up after the test
    """
    srv = KVServer(host='127.0.0.1', port=server_port)

    server_task = asyncio.create_task(srv.start())
    await asyncio.wait_for(srv.wait_started(), timeout=5)

    yield srv

    await srv.stop()
    server_task.cancel()
    try:
        await server_task
    except asyncio.CancelledError:
        pass


# ============================================================================
# Client Fixtures
# ============================================================================

class AsyncClient:
    """
    Helper class for testing server interactions.

    Sends raw frames and reads back exactly one decoded response per call.

    Usage:
        async with AsyncClient('127.0.0.1', 5555) as client:
            response = await client.send_command("STORE$key$value$")
            assert response == "DONE$"
    """

    def __init__(self, host: str, port: int):
        self.host = host
        self.port = port
        self.reader = None
        self.writer = None
        self.parser = ProtocolParser()
        self._buffer = b""

    async def connect(self) -> None:
        """Establish connection to server."""
        self.reader, self.writer = await asyncio.open_connection(
            self.host, self.port
        )

    async def disconnect(self) -> None:
        """Close connection to server."""
        if self.writer:
            self.writer.close()
            try:
                await self.writer.wait_closed()
            except ConnectionError:
                pass

    async def send(self, data: str) -> None:
        """Write raw protocol text without waiting for a response."""
        self.writer.write(data.encode())
        await self.writer.drain()

    async def send_eof(self) -> None:
        """Half-close the connection so the server sees end of stream."""
        try:
            self.writer.write_eof()
        except ConnectionError:
            pass

    async def read_response(self) -> Optional[Response]:
        """
        Read the next response.

        Returns:
            The decoded Response, or None if the server closed the
            connection first.
        """
        while True:
            response, consumed = self.parser.decode_response(self._buffer)
            if response is not None:
                self._buffer = self._buffer[consumed:]
                return response

            chunk = await asyncio.wait_for(self.reader.read(4096), timeout=5)
            if not chunk:
                return None
            self._buffer += chunk

    async def read_responses(self, count: int) -> str:
        """Read `count` responses and return their wire form concatenated."""
        frames: List[str] = []
        for _ in range(count):
            response = await self.read_response()
            assert response is not None, "connection closed before response"
            frames.append(self.parser.encode_response(response).decode())
        return "".join(frames)

    async def send_command(self, command: str) -> str:
        """
        Send one request and receive its response.

        Returns:
            Response in wire form, e.g. "FOUND$value$"
        """
        await self.send(command)
        return await self.read_responses(1)

    async def read_until_closed(self) -> bytes:
        """Read until the server closes the connection, returning any bytes."""
        data = self._buffer
        self._buffer = b""
        while True:
            try:
                chunk = await asyncio.wait_for(self.reader.read(4096), timeout=5)
            except ConnectionError:
                return data
            if not chunk:
                return data
            data += chunk

    async def __aenter__(self):
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.disconnect()


@pytest.fixture
def client_factory(server_port: int):
    """
    Factory fixture to create test clients.

    Usage:
        async def test_something(server, client_factory):
            async with client_factory() as client:
                response = await client.send_command("LOAD$key$")
    """
    def factory() -> AsyncClient:
        return AsyncClient('127.0.0.1', server_port)
    return factory


# ============================================================================
# Pytest Configuration
# ============================================================================

def pytest_configure(config):
    """Configure custom pytest markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )
