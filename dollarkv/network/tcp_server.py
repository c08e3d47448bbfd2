"""
Async TCP Server Module

This module implements the listener of dollar-kv: it binds the configured
endpoint, accepts connections forever and runs one ConnectionHandler task
per accepted connection. All handlers share a single KVStore.
"""

import asyncio
import logging
from asyncio import StreamReader, StreamWriter
from typing import Optional

from ..cache.store import KVStore
from ..config.settings import settings
from ..protocol.parser import ProtocolParser
from .connection import ConnectionHandler, ConnectionState

logger = logging.getLogger(__name__)


class KVServer:
    """
    Asynchronous TCP server for the dollar-kv service.

    asyncio.start_server runs handle_client as a separate task for every
    accepted connection, so a slow or failing client never blocks the
    accept loop or other clients.

    Usage:
        server = KVServer(host='127.0.0.1', port=5555)
        await server.start()  # Runs forever

    Attributes:
        host: Server bind address
        port: Server port number
        store: The KVStore instance shared by all connections
        parser: The ProtocolParser used to encode and decode frames
    """

    def __init__(
            self,
            host: str = None,
            port: int = None,
            store: KVStore = None,
            max_request_length: int = None,
    ):
        """
        Initialize the server.

        Args:
            host: Bind address (default from settings)
            port: Port number (default from settings)
            store: KVStore instance (creates new one if not provided)
            max_request_length: Cap on buffered incomplete requests
                (default from settings)
        """
        self.host = host if host is not None else settings.HOST
        self.port = port if port is not None else settings.PORT
        self.store = store if store is not None else KVStore()
        self.parser = ProtocolParser()
        self.max_request_length = (
            max_request_length if max_request_length is not None
            else settings.MAX_REQUEST_LENGTH
        )

        # Server state
        self._server: Optional[asyncio.Server] = None
        self._running = False
        self._started = asyncio.Event()
        self._connection_count = 0
        self._active_connections = 0
        self._failed_connections = 0
        self._total_requests = 0

    async def handle_client(
            self,
            reader: StreamReader,
            writer: StreamWriter
    ) -> None:
        """
        Handle a single client connection.

        Args:
            reader: StreamReader for reading from the client
            writer: StreamWriter for writing to the client
        """
        self._connection_count += 1
        self._active_connections += 1

        handler = ConnectionHandler(
            reader,
            writer,
            self.store,
            parser=self.parser,
            max_request_length=self.max_request_length,
            read_size=settings.READ_BUFFER_SIZE,
        )
        try:
            state = await handler.run()
            if state == ConnectionState.FAILED:
                self._failed_connections += 1
        finally:
            self._active_connections -= 1
            self._total_requests += handler.requests_handled

    async def start(self) -> None:
        """
        Start the server and begin accepting connections.

        Runs until cancelled or stopped.

        Raises:
            OSError: if the endpoint cannot be bound
        """
        if self._running:
            return

        self._server = await asyncio.start_server(
            self.handle_client,
            self.host,
            self.port,
        )
        self._running = True
        self._started.set()

        addrs = ', '.join(str(sock.getsockname()) for sock in self._server.sockets or [])
        logger.info(f"Serving on {addrs}")

        try:
            async with self._server:
                await self._server.serve_forever()
        except asyncio.CancelledError:
            logger.debug("Server start cancelled")
        finally:
            self._running = False
            self._started.clear()

    async def wait_started(self) -> None:
        """Wait until the listening socket is bound."""
        await self._started.wait()

    async def stop(self) -> None:
        """
        Stop accepting connections.

        Closes the listening socket; connections already accepted keep
        running until their clients disconnect.
        """
        if self._server is None:
            return

        self._server.close()
        try:
            await self._server.wait_closed()
        finally:
            self._server = None
            self._running = False

    def is_running(self) -> bool:
        """Check if the server is currently running."""
        return self._running

    def get_stats(self) -> dict:
        """
        Get server statistics.

        Returns:
            Dictionary with server stats including connection counts,
            request counts, and store statistics.
        """
        return {
            "running": self._running,
            "host": self.host,
            "port": self.port,
            "total_connections": self._connection_count,
            "active_connections": self._active_connections,
            "failed_connections": self._failed_connections,
            "total_requests": self._total_requests,
            "store_stats": self.store.get_stats(),
        }


async def run_server(host: str = None, port: int = None) -> None:
    """
    Convenience function to create and run the server.

    Usage:
        asyncio.run(run_server(port=5555))
    """
    server = KVServer(host=host, port=port)

    try:
        await server.start()
    except asyncio.CancelledError:
        logger.info("Server shutdown requested")
    finally:
        await server.stop()
