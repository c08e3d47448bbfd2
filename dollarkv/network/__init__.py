"""Network module for dollar-kv."""

from .connection import ConnectionHandler, ConnectionState
from .tcp_server import KVServer, run_server

__all__ = ["ConnectionHandler", "ConnectionState", "KVServer", "run_server"]
