"""
Protocol Parser Module

This module translates between wire bytes and Request/Response objects.

Every decode method works on a buffer that may hold a partial frame, exactly
one frame, or several pipelined frames. It returns the first decoded frame
together with the number of bytes it used, or (None, 0) when the buffer does
not yet hold a complete frame.
"""

import re
from typing import Dict, List, Optional, Tuple

from .commands import Request, RequestType, Response, ResponseType

DELIMITER = b"$"

# Keyword -> one flag per field telling whether that field may be empty
_REQUEST_LAYOUTS: Dict[bytes, Tuple[bool, ...]] = {
    b"STORE": (False, True),
    b"LOAD": (False,),
}
_RESPONSE_LAYOUTS: Dict[bytes, Tuple[bool, ...]] = {
    b"DONE": (),
    b"FOUND": (True,),
    b"NOTFOUND": (),
}

_FIELD_PATTERN = re.compile(rb"[a-z]*")


class ProtocolError(ValueError):
    """Raised when bytes on the wire cannot form a valid frame."""


class ProtocolParser:
    """
    Codec for the dollar-kv text protocol.

    Protocol Format:
        Every token is terminated by '$'. Keys and values are runs of
        lowercase ASCII letters; there is no escaping and no length prefix.

    Requests:
        STORE$<key>$<value>$     -> DONE$
        LOAD$<key>$              -> FOUND$<value>$ | NOTFOUND$

    Constraints:
        - Keys: one or more of a-z
        - Values: zero or more of a-z
    """

    def decode_request(self, buffer: bytes) -> Tuple[Optional[Request], int]:
        """
        Decode the first request held in a buffer.

        Args:
            buffer: Bytes received so far and not yet consumed

        Returns:
            (request, consumed) once a full request has arrived,
            (None, 0) while more bytes are needed.

        Raises:
            ProtocolError: as soon as the buffered prefix can no longer
                become a valid request.

        Examples:
            >>> parser = ProtocolParser()
            >>> parser.decode_request(b"STORE$abc$xyz$LOAD$abc$")
            (Request(type=<RequestType.STORE: 1>, key='abc', value='xyz'), 14)
            >>> parser.decode_request(b"STORE$abc$xy")
            (None, 0)
        """
        frame, consumed = self._decode_frame(buffer, _REQUEST_LAYOUTS)
        if frame is None:
            return None, 0

        keyword, fields = frame
        if keyword == b"STORE":
            return Request.store(fields[0], fields[1]), consumed
        return Request.load(fields[0]), consumed

    def encode_response(self, response: Response) -> bytes:
        """
        Encode a Response into wire bytes.

        Examples:
            >>> parser = ProtocolParser()
            >>> parser.encode_response(Response.done())
            b'DONE$'
            >>> parser.encode_response(Response.found("abc"))
            b'FOUND$abc$'
            >>> parser.encode_response(Response.not_found())
            b'NOTFOUND$'
        """
        tokens = [response.type.value]
        if response.type == ResponseType.FOUND:
            tokens.append(response.value or "")
        return "".join(token + "$" for token in tokens).encode("ascii")

    def encode_request(self, request: Request) -> bytes:
        """Encode a Request into wire bytes (client side)."""
        tokens = [request.type.name, request.key]
        if request.type == RequestType.STORE:
            tokens.append(request.value or "")
        return "".join(token + "$" for token in tokens).encode("ascii")

    def decode_response(self, buffer: bytes) -> Tuple[Optional[Response], int]:
        """Decode the first response held in a buffer (client side)."""
        frame, consumed = self._decode_frame(buffer, _RESPONSE_LAYOUTS)
        if frame is None:
            return None, 0

        keyword, fields = frame
        if keyword == b"FOUND":
            return Response.found(fields[0]), consumed
        if keyword == b"DONE":
            return Response.done(), consumed
        return Response.not_found(), consumed

    def _decode_frame(
            self,
            buffer: bytes,
            layouts: Dict[bytes, Tuple[bool, ...]],
    ) -> Tuple[Optional[Tuple[bytes, List[str]]], int]:
        """
        Split the first frame of a buffer into its keyword and fields.

        Args:
            buffer: Bytes received so far
            layouts: Accepted keywords mapped to their field layout

        Returns:
            ((keyword, fields), consumed) or (None, 0) if incomplete
        """
        keyword_end = buffer.find(DELIMITER)
        if keyword_end < 0:
            if not any(keyword.startswith(buffer) for keyword in layouts):
                raise ProtocolError(f"unknown keyword {buffer[:16]!r}")
            return None, 0

        keyword = buffer[:keyword_end]
        if keyword not in layouts:
            raise ProtocolError(f"unknown keyword {keyword[:16]!r}")

        fields = []
        start = keyword_end + 1
        for may_be_empty in layouts[keyword]:
            end = buffer.find(DELIMITER, start)
            field = buffer[start:] if end < 0 else buffer[start:end]
            if _FIELD_PATTERN.fullmatch(field) is None:
                raise ProtocolError(f"invalid character in field {field[:16]!r}")
            if end < 0:
                return None, 0
            if not field and not may_be_empty:
                raise ProtocolError(f"empty field after {keyword!r}")
            fields.append(field.decode("ascii"))
            start = end + 1

        return (keyword, fields), start
