"""
dollar-kv: In-Memory Key-Value Store

A small key-value server built with Python asyncio that speaks a
dollar-delimited text protocol over raw TCP sockets.
"""

__version__ = "1.0.0"
