#!/usr/bin/env python3
"""
Interactive Test Client for dollar-kv

A simple command-line client for manually testing the dollar-kv server.

Usage:
    python scripts/client.py                  # Connect to localhost:5555
    python scripts/client.py --host 1.2.3.4   # Connect to specific host
    python scripts/client.py --port 8080      # Connect to specific port

Commands:
    store <key> <value>   - Store a key-value pair
    load <key>            - Retrieve a value
    raw <frame>           - Send raw protocol text, e.g. raw LOAD$abc$
    help                  - Show this help
    exit                  - Exit client
"""

import argparse
import re
import socket
import sys

# Enable command history with arrow keys (works on Unix systems)
try:
    import readline  # noqa: F401
except ImportError:
    pass  # readline not available on Windows by default

from dollarkv.protocol.commands import Request
from dollarkv.protocol.parser import ProtocolError, ProtocolParser

# Keys need at least one letter, values may be empty
_KEY_PATTERN = re.compile(r"[a-z]+")
_VALUE_PATTERN = re.compile(r"[a-z]*")


class KVClient:
    """Simple blocking TCP client for dollar-kv."""

    def __init__(self, host: str, port: int, timeout: float = 5.0):
        self.host = host
        self.port = port
        self.timeout = timeout
        self.socket = None
        self.parser = ProtocolParser()
        self._buffer = b""

    def connect(self) -> bool:
        """Connect to the server."""
        try:
            self.socket = socket.create_connection((self.host, self.port), self.timeout)
            return True
        except OSError as e:
            print(f"Connection error: {e}")
            return False

    def disconnect(self):
        """Disconnect from the server."""
        if self.socket:
            self.socket.close()
            self.socket = None
        self._buffer = b""

    def send_frame(self, frame: bytes) -> str:
        """Send raw bytes and receive one response in wire form."""
        if not self.socket:
            return "ERROR: Not connected"

        try:
            self.socket.sendall(frame)

            while True:
                response, consumed = self.parser.decode_response(self._buffer)
                if response is not None:
                    self._buffer = self._buffer[consumed:]
                    return self.parser.encode_response(response).decode("ascii")

                chunk = self.socket.recv(4096)
                if not chunk:
                    self.disconnect()
                    return "ERROR: Connection closed by server"
                self._buffer += chunk

        except socket.timeout:
            return "ERROR: Request timed out"
        except ProtocolError as e:
            self.disconnect()
            return f"ERROR: Unexpected response: {e}"
        except OSError as e:
            self.disconnect()
            return f"ERROR: {e}"

    def store(self, key: str, value: str) -> str:
        if not _KEY_PATTERN.fullmatch(key) or not _VALUE_PATTERN.fullmatch(value):
            return "ERROR: keys and values must be lowercase ASCII letters"
        return self.send_frame(self.parser.encode_request(Request.store(key, value)))

    def load(self, key: str) -> str:
        if not _KEY_PATTERN.fullmatch(key):
            return "ERROR: keys must be lowercase ASCII letters"
        return self.send_frame(self.parser.encode_request(Request.load(key)))

    def __enter__(self):
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.disconnect()


def print_help():
    """Print help message."""
    print("""
dollar-kv Commands:
-------------------
  store <key> <value>       Store a value (key: a-z, value: a-z or empty)
  load <key>                Retrieve the value for a key
  raw <frame>               Send protocol text as-is, e.g. raw STORE$k$v$

Client Commands:
----------------
  help                      Show this help message
  exit                      Exit the client
  reconnect                 Reconnect to the server
  status                    Show connection status

Note: a malformed request makes the server close the connection;
use 'reconnect' afterwards.
""")


def main():
    parser = argparse.ArgumentParser(
        description="Interactive test client for dollar-kv"
    )
    parser.add_argument(
        "--host",
        type=str,
        default="localhost",
        help="Server host (default: localhost)"
    )
    parser.add_argument(
        "--port",
        type=int,
        default=5555,
        help="Server port (default: 5555)"
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=5.0,
        help="Socket timeout in seconds (default: 5.0)"
    )

    args = parser.parse_args()

    print("dollar-kv Client")
    print("================")
    print(f"Connecting to {args.host}:{args.port}...")

    client = KVClient(args.host, args.port, args.timeout)

    if not client.connect():
        print("Failed to connect. Is the server running?")
        print(f"  Try: python -m dollarkv.server --port {args.port}")
        sys.exit(1)

    print("Connected! Type 'help' for commands.\n")

    try:
        while True:
            try:
                line = input(">>> ").strip()
            except EOFError:
                print("\nGoodbye!")
                break

            if not line:
                continue

            parts = line.split()
            command = parts[0].lower()

            if command == "help":
                print_help()
            elif command in ("exit", "quit"):
                print("Goodbye!")
                break
            elif command == "reconnect":
                client.disconnect()
                print("Reconnected!" if client.connect() else "Reconnection failed.")
            elif command == "status":
                status = "Connected" if client.socket else "Disconnected"
                print(f"Status: {status}")
                print(f"Server: {args.host}:{args.port}")
            elif command == "store" and len(parts) in (2, 3):
                print(client.store(parts[1], parts[2] if len(parts) == 3 else ""))
            elif command == "load" and len(parts) == 2:
                print(client.load(parts[1]))
            elif command == "raw" and len(parts) == 2:
                print(client.send_frame(parts[1].encode("ascii", errors="replace")))
            else:
                print("Unknown command. Type 'help' for usage.")

    except KeyboardInterrupt:
        print("\n\nInterrupted. Goodbye!")
    finally:
        client.disconnect()


if __name__ == "__main__":
    main()
