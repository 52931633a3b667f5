"""
=============================================================================
BASIC HANDLERS
=============================================================================

The three handlers that never leave memory:

    GET /              → 200, no body               (liveness probe)
    GET /echo/<text>   → 200, text/plain, <text>
    GET /user-agent    → 200, text/plain, User-Agent header value

=============================================================================
"""

from ..http.request import HTTPRequest
from ..http.response import HTTPResponse, ok


def root(request: HTTPRequest) -> HTTPResponse:
    """GET / answers 200 with no body. Handy as a probe."""
    return ok()


def echo(request: HTTPRequest) -> HTTPResponse:
    """
    GET /echo/<text>

    Echoes the path remainder after /echo/ byte for byte. No decoding,
    no escaping:

        /echo/foo/bar   → foo/bar
        /echo/a%20b     → a%20b
    """
    return ok(request.path_params.get("text", ""))


def user_agent(request: HTTPRequest) -> HTTPResponse:
    """GET /user-agent reflects the first User-Agent header ("" if absent)."""
    return ok(request.user_agent)
