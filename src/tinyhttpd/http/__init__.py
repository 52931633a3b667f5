"""
=============================================================================
HTTP PROTOCOL MODULE
=============================================================================

Everything that understands HTTP, and nothing that touches a socket:

    request.py       Line-by-line request parsing
    response.py      Response model and wire serialization
    router.py        (method, path) → handler dispatch
    status_codes.py  The four status codes the server speaks

The core/ package feeds bytes in and writes bytes out; this package turns
them into objects and back.

=============================================================================
"""

from .request import HTTPRequest, RequestParser, HTTPParseError, parse_request
from .response import (
    HTTPResponse,
    ResponseBuilder,
    ok,                 # 200 OK
    created,            # 201 Created
    not_found,          # 404 Not Found
    internal_error,     # 500 Internal Server Error
    CRLF,
    LEGACY_HEADER_ENDING,
    TEXT_PLAIN,
    OCTET_STREAM,
)
from .router import Router, Route, RouteMatch
from .status_codes import HTTPStatus

__all__ = [
    # Request parsing
    "HTTPRequest",
    "RequestParser",
    "HTTPParseError",
    "parse_request",

    # Response building
    "HTTPResponse",
    "ResponseBuilder",
    "ok",
    "created",
    "not_found",
    "internal_error",
    "CRLF",
    "LEGACY_HEADER_ENDING",
    "TEXT_PLAIN",
    "OCTET_STREAM",

    # Routing
    "Router",
    "Route",
    "RouteMatch",

    # Status codes
    "HTTPStatus",
]
