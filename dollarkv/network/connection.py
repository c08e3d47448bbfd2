"""
Connection Handler Module

This module runs the request/response loop of a single client connection.

Each connection moves through the states
    READING -> PROCESSING -> WRITING -> READING ...
and ends in CLOSED (clean end of stream) or FAILED (malformed request or
transport error). A failed connection is closed without any diagnostic
response.
"""

import logging
from asyncio import StreamReader, StreamWriter
from contextlib import aclosing
from enum import Enum

from ..cache.store import KVStore
from ..protocol.commands import Request, RequestType, Response
from ..protocol.parser import ProtocolError, ProtocolParser
from ..protocol.stream import RequestDecoder, read_requests

logger = logging.getLogger(__name__)


class ConnectionState(Enum):
    """Lifecycle states of a client connection."""
    READING = "reading"
    PROCESSING = "processing"
    WRITING = "writing"
    CLOSED = "closed"
    FAILED = "failed"


class ConnectionHandler:
    """
    Serve one client connection against the shared store.

    Responses are written in request order; the next request is not read
    until the response to the previous one has been drained to the
    transport.

    Usage:
        handler = ConnectionHandler(reader, writer, store)
        state = await handler.run()

    Attributes:
        store: The KVStore shared by all connections
        state: Current ConnectionState
        requests_handled: Number of requests answered on this connection
    """

    def __init__(
            self,
            reader: StreamReader,
            writer: StreamWriter,
            store: KVStore,
            parser: ProtocolParser = None,
            max_request_length: int = None,
            read_size: int = None,
    ):
        self.reader = reader
        self.writer = writer
        self.store = store
        self.parser = parser if parser is not None else ProtocolParser()
        self.decoder = RequestDecoder(self.parser, max_request_length)
        self.read_size = read_size
        self.peer = writer.get_extra_info('peername')

        self.state = ConnectionState.READING
        self.requests_handled = 0

    async def run(self) -> ConnectionState:
        """
        Process requests until the connection ends.

        Returns:
            The terminal state, CLOSED or FAILED.
        """
        logger.debug(f"Client connected: {self.peer}")

        try:
            requests = read_requests(self.reader, self.decoder, self.read_size)
            async with aclosing(requests):
                async for request in requests:
                    self.state = ConnectionState.PROCESSING
                    response = self.execute(request)

                    self.state = ConnectionState.WRITING
                    self.writer.write(self.parser.encode_response(response))
                    await self.writer.drain()

                    self.requests_handled += 1
                    self.state = ConnectionState.READING

            self.state = ConnectionState.CLOSED
            logger.debug(f"Client disconnected: {self.peer}")

        except ProtocolError as exc:
            self.state = ConnectionState.FAILED
            logger.info(f"Malformed request from {self.peer}, closing: {exc}")
        except ConnectionError as exc:
            self.state = ConnectionState.FAILED
            logger.debug(f"Connection lost with {self.peer}: {exc!r}")
        except Exception as exc:  # Keep the failure contained to this connection
            self.state = ConnectionState.FAILED
            logger.exception(f"Error handling client {self.peer}: {exc}")
        finally:
            await self._close()

        return self.state

    def execute(self, request: Request) -> Response:
        """
        Apply a request to the store.

        Args:
            request: The decoded Request

        Returns:
            Response to send back to the client
        """
        if request.type == RequestType.STORE:
            self.store.put(request.key, request.value)
            return Response.done()

        value = self.store.get(request.key)
        if value is None:
            return Response.not_found()
        return Response.found(value)

    async def _close(self) -> None:
        self.writer.close()
        try:
            await self.writer.wait_closed()
        except (ConnectionError, OSError) as exc:
            logger.debug(f"Error while closing {self.peer}: {exc!r}")
