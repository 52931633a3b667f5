"""
=============================================================================
CORE NETWORKING MODULE
=============================================================================

The socket layer, below HTTP:

    socket_server.py  Listening socket and accept loop
    connection.py     One client socket: buffered reading, sendall, close

Concurrency is one thread per accepted connection, started by
tinyhttpd.server.HTTPServer. There is no pool and no queue, so every
connection starts being served immediately and a slow client only ties up
its own thread.

=============================================================================
"""

from .socket_server import SocketServer
from .connection import Connection, ConnectionState

__all__ = [
    "SocketServer",     # Accepts connections
    "Connection",       # Wraps a client socket
    "ConnectionState",  # Connection lifecycle states
]
