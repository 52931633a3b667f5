"""
=============================================================================
TINYHTTPD
=============================================================================

A small HTTP/1.1 server on raw sockets: one request per connection, one
thread per connection.

=============================================================================
ROUTES
=============================================================================

    GET  /               200, empty
    GET  /echo/<text>    200, text/plain, <text>
    GET  /user-agent     200, text/plain, the User-Agent header
    GET  /files/<name>   200 file bytes | 404 | 500
    POST /files/<name>   201 after writing the body | 500

Anything else is a 404 with no body.

=============================================================================
PACKAGE LAYOUT
=============================================================================

    tinyhttpd/
    ├── __main__.py      CLI (python -m tinyhttpd)
    ├── server.py        HTTPServer: wires everything together
    ├── config.py        ServerConfig
    ├── access_log.py    One log line per answered request
    ├── core/            Sockets: accept loop, per-connection I/O
    ├── http/            Parsing, routing, serialization
    └── handlers/        root, echo, user_agent, FileHandler

=============================================================================
"""

__version__ = "1.0.0"

from .server import HTTPServer
from .config import ServerConfig

__all__ = ["HTTPServer", "ServerConfig", "__version__"]
