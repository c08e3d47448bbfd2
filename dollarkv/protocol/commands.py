"""
Protocol Request and Response Definitions

This module defines the data structures exchanged between the protocol
codec and the connection handler.
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional


class RequestType(Enum):
    """Enumeration of supported request types."""
    STORE = auto()
    LOAD = auto()


class ResponseType(Enum):
    """Enumeration of response kinds, valued by their wire keyword."""
    DONE = "DONE"
    FOUND = "FOUND"
    NOT_FOUND = "NOTFOUND"


@dataclass(frozen=True)
class Request:
    """
    Represents one decoded client request.

    Attributes:
        type: STORE or LOAD
        key: The key for the operation (never empty)
        value: The value for STORE requests (None for LOAD)
    """
    type: RequestType
    key: str
    value: Optional[str] = None

    @classmethod
    def store(cls, key: str, value: str) -> "Request":
        """Create a STORE request."""
        return cls(type=RequestType.STORE, key=key, value=value)

    @classmethod
    def load(cls, key: str) -> "Request":
        """Create a LOAD request."""
        return cls(type=RequestType.LOAD, key=key)


@dataclass(frozen=True)
class Response:
    """
    Represents a protocol response.

    Attributes:
        type: DONE, FOUND or NOT_FOUND
        value: The value returned (FOUND only)
    """
    type: ResponseType
    value: Optional[str] = None

    @classmethod
    def done(cls) -> "Response":
        """Create the acknowledgement for a STORE request."""
        return cls(type=ResponseType.DONE)

    @classmethod
    def found(cls, value: str) -> "Response":
        """Create a LOAD response carrying a value."""
        return cls(type=ResponseType.FOUND, value=value)

    @classmethod
    def not_found(cls) -> "Response":
        """Create a LOAD response for an absent key."""
        return cls(type=ResponseType.NOT_FOUND)
