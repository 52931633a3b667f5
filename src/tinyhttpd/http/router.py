"""
=============================================================================
URL ROUTER
=============================================================================

Maps (method, path) pairs to handler functions.

=============================================================================
ROUTE TABLE
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                        ROUTING FLOW                                 │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   GET /echo/foo/bar                                                  │
    │        │                                                             │
    │        ▼                                                             │
    │   ┌─────────────────────────────────────────────────────────────┐   │
    │   │  GET  /              → root                                 │   │
    │   │  GET  /echo/*text    → echo         ← MATCH!                │   │
    │   │  GET  /user-agent    → user_agent                           │   │
    │   │  GET  /files/*name   → read_file                            │   │
    │   │  POST /files/*name   → write_file                           │   │
    │   │                                                              │   │
    │   │  Extracted: path_params = {"text": "foo/bar"}               │   │
    │   └─────────────────────────────────────────────────────────────┘   │
    │        │                                                             │
    │        ▼                                                             │
    │   echo(request)                                                      │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
ROUTE PATTERNS
=============================================================================

1. STATIC PATHS: exact string match

   Pattern: /user-agent
   Matches: /user-agent
   Doesn't match: /user-agent/, /user-agent?x=1

2. WILDCARD (*param): prefix match, remainder captured verbatim

   Pattern: /echo/*text
   Matches: /echo/abc      → {"text": "abc"}
            /echo/foo/bar  → {"text": "foo/bar"}
            /echo/         → {"text": ""}
   Doesn't match: /echo
   Must be the LAST segment in the pattern.

Paths are compared exactly as they arrived: no trailing-slash folding, no
percent-decoding. Methods are compared case-sensitively. Routes are tried
in registration order and the first match wins; no match is a 404 with
no body.

=============================================================================
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional

from .request import HTTPRequest
from .response import HTTPResponse, not_found


logger = logging.getLogger(__name__)


# Handler: takes a request, returns a response
Handler = Callable[[HTTPRequest], HTTPResponse]


@dataclass
class Route:
    """
    A registered route.

        Route(
            path="/files/*name",
            method="POST",
            handler=files.write,
            _pattern=re.compile(r"/files/(?P<name>.*)"),
        )
    """

    path: str                        # Pattern as registered
    method: str                      # Exact method token
    handler: Handler

    _pattern: Optional[re.Pattern] = field(default=None, repr=False)


@dataclass
class RouteMatch:
    """The route that matched and the captured wildcard, if any."""
    route: Route
    params: Dict[str, str]


class Router:
    """
    Ordered route table with decorator registration.

        router = Router()

        @router.get("/")
        def root(request):
            return ok()

        @router.get("/echo/*text")
        def echo(request):
            return ok(request.path_params["text"])
    """

    def __init__(self):
        self._routes: List[Route] = []

    def add_route(self, path: str, handler: Handler, method: str = "GET") -> Route:
        """
        Register `handler` for `method` requests matching `path`.

        Args:
            path: Static path or prefix ending in a "*param" segment
            handler: Callable taking an HTTPRequest
            method: Method token, compared exactly

        Returns:
            The created Route
        """
        pattern = self._compile_pattern(path)
        route = Route(
            path=path,
            method=method,
            handler=handler,
            _pattern=pattern,
        )
        self._routes.append(route)
        logger.debug(f"Registered route {method} {path}")
        return route

    def _compile_pattern(self, path: str) -> re.Pattern:
        """
        Compile a route path to a regex.

            /user-agent   →  /user\\-agent
            /echo/*text   →  /echo/(?P<text>.*)

        Static segments are escaped. A "*param" segment swallows the rest of
        the path, slashes included.
        """
        segments = path.split("/")
        regex_parts = []

        for index, segment in enumerate(segments):
            if segment.startswith("*"):
                if index != len(segments) - 1:
                    raise ValueError(f"Wildcard must be the last segment: {path}")
                name = segment[1:]
                if not name.isidentifier():
                    raise ValueError(f"Invalid wildcard name in route: {path}")
                regex_parts.append(f"(?P<{name}>.*)")
            else:
                regex_parts.append(re.escape(segment))

        return re.compile("/".join(regex_parts), re.DOTALL)

    def match(self, method: str, path: str) -> Optional[RouteMatch]:
        """
        Find the first route accepting (method, path).

        Returns:
            RouteMatch, or None when nothing matches
        """
        for route in self._routes:
            if route.method != method:
                continue

            found = route._pattern.fullmatch(path)
            if found:
                return RouteMatch(route=route, params=found.groupdict())

        return None

    def handle(self, request: HTTPRequest) -> HTTPResponse:
        """
        Dispatch a request.

        The wildcard remainder is injected as request.path_params before the
        handler runs. Unmatched requests get a 404 with no body.
        """
        match = self.match(request.method, request.path)

        if match is None:
            return not_found()

        request.path_params = match.params
        return match.route.handler(request)

    # =========================================================================
    # DECORATOR-STYLE ROUTE REGISTRATION
    # =========================================================================

    def route(self, path: str, method: str = "GET") -> Callable[[Handler], Handler]:
        def decorator(handler: Handler) -> Handler:
            self.add_route(path, handler, method=method)
            return handler
        return decorator

    def get(self, path: str) -> Callable[[Handler], Handler]:
        return self.route(path, method="GET")

    def post(self, path: str) -> Callable[[Handler], Handler]:
        return self.route(path, method="POST")

    @property
    def routes(self) -> List[Route]:
        """Registered routes in match order (a copy)."""
        return list(self._routes)

    def describe(self) -> str:
        """Route table, one "METHOD path → handler" per line."""
        return "\n".join(
            f"  {route.method:<6} {route.path:<20} → {getattr(route.handler, '__qualname__', route.handler)}"
            for route in self._routes
        )
