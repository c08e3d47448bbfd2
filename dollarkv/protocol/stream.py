"""
Streaming request decoding.

RequestDecoder keeps the bytes of one connection that have not formed a
request yet. read_requests() drives it from an asyncio StreamReader and
yields requests lazily, reading from the transport only when the buffer
holds no complete request.
"""

import logging
from asyncio import StreamReader
from typing import AsyncIterator, Optional

from ..config.settings import settings
from .commands import Request
from .parser import ProtocolError, ProtocolParser

logger = logging.getLogger(__name__)


class RequestDecoder:
    """
    Accumulating request decoder for a single connection.

    Usage:
        decoder = RequestDecoder()
        decoder.feed(b"STORE$k")
        decoder.next_request()      # None, waiting for more bytes
        decoder.feed(b"ey$value$")
        decoder.next_request()      # Request.store("key", "value")

    Once a ProtocolError has been raised the decoder is spent: every later
    call raises again.
    """

    def __init__(self, parser: ProtocolParser = None, max_request_length: int = None):
        self.parser = parser if parser is not None else ProtocolParser()
        self.max_request_length = (
            max_request_length if max_request_length is not None
            else settings.MAX_REQUEST_LENGTH
        )
        self._buffer = b""
        self._error: Optional[ProtocolError] = None

    @property
    def pending(self) -> int:
        """Number of buffered bytes not yet decoded."""
        return len(self._buffer)

    @property
    def failed(self) -> bool:
        return self._error is not None

    def feed(self, data: bytes) -> None:
        """Append bytes read from the transport."""
        self._check_failed()
        self._buffer += data

    def next_request(self) -> Optional[Request]:
        """
        Pop the next complete request from the buffer.

        Returns:
            The decoded Request, or None if more bytes are needed.

        Raises:
            ProtocolError: if the buffered bytes are malformed or the
                request still being assembled is longer than
                max_request_length, even if it would later have completed.
        """
        self._check_failed()
        try:
            request, consumed = self.parser.decode_request(self._buffer)
            if request is None and len(self._buffer) > self.max_request_length:
                raise ProtocolError(
                    f"incomplete request exceeds {self.max_request_length} bytes"
                )
        except ProtocolError as exc:
            self._error = exc
            raise

        if request is not None:
            self._buffer = self._buffer[consumed:]
        return request

    def close(self) -> None:
        """
        Signal end of stream.

        Raises:
            ProtocolError: if a partial request is still buffered.
        """
        self._check_failed()
        if self._buffer:
            self._error = ProtocolError(
                f"stream ended inside a request ({len(self._buffer)} bytes buffered)"
            )
            raise self._error

    def _check_failed(self) -> None:
        if self._error is not None:
            raise ProtocolError(f"decoder already failed: {self._error}")


async def read_requests(
        reader: StreamReader,
        decoder: RequestDecoder = None,
        read_size: int = None,
) -> AsyncIterator[Request]:
    """
    Yield requests from a stream until the peer closes it.

    Args:
        reader: StreamReader of the client connection
        decoder: RequestDecoder to use (a fresh one if not provided)
        read_size: Maximum bytes per transport read

    Raises:
        ProtocolError: on malformed input or EOF inside a request
        ConnectionError: on transport failures
    """
    decoder = decoder if decoder is not None else RequestDecoder()
    read_size = read_size if read_size is not None else settings.READ_BUFFER_SIZE

    while True:
        request = decoder.next_request()
        if request is not None:
            yield request
            continue

        data = await reader.read(read_size)
        if not data:
            decoder.close()
            return
        logger.debug(f"Read {len(data)} bytes ({decoder.pending} already buffered)")
        decoder.feed(data)
