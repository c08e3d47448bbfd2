"""Protocol module for dollar-kv."""

from .commands import Request, RequestType, Response, ResponseType
from .parser import ProtocolError, ProtocolParser
from .stream import RequestDecoder, read_requests

__all__ = [
    "Request",
    "RequestType",
    "Response",
    "ResponseType",
    "ProtocolError",
    "ProtocolParser",
    "RequestDecoder",
    "read_requests",
]
