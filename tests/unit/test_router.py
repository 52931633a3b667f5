"""
Unit tests for URL routing.
"""

import pytest

from tinyhttpd.http.request import HTTPRequest
from tinyhttpd.http.response import HTTPResponse, HTTPStatus, ok
from tinyhttpd.http.router import Router


def _named(name: str):
    """Handler that answers with its own name."""
    def handler(request: HTTPRequest) -> HTTPResponse:
        return ok(name)
    handler.__qualname__ = name
    return handler


@pytest.fixture
def router() -> Router:
    """Router with the server's route table shape."""
    router = Router()
    router.add_route("/", _named("root"), method="GET")
    router.add_route("/echo/*text", _named("echo"), method="GET")
    router.add_route("/user-agent", _named("user_agent"), method="GET")
    router.add_route("/files/*name", _named("read"), method="GET")
    router.add_route("/files/*name", _named("write"), method="POST")
    return router


class TestRouter:
    """Tests for Router class."""

    def test_static_route(self, router: Router):
        match = router.match("GET", "/user-agent")

        assert match is not None
        assert match.route.path == "/user-agent"
        assert match.params == {}

    def test_root_is_exact(self, router: Router):
        assert router.match("GET", "/").route.path == "/"
        assert router.match("GET", "/nope") is None

    @pytest.mark.parametrize("path,text", [
        ("/echo/abc", "abc"),
        ("/echo/foo/bar", "foo/bar"),
        ("/echo/", ""),
        ("/echo/a%20b?x=1", "a%20b?x=1"),
    ])
    def test_wildcard_captures_remainder(self, router: Router, path: str, text: str):
        match = router.match("GET", path)

        assert match.route.path == "/echo/*text"
        assert match.params == {"text": text}

    def test_prefix_requires_trailing_slash(self, router: Router):
        """/echo alone does not match /echo/*text."""
        assert router.match("GET", "/echo") is None
        assert router.match("GET", "/echoes/x") is None

    def test_static_route_no_trailing_slash_folding(self, router: Router):
        assert router.match("GET", "/user-agent/") is None

    def test_method_selects_route(self, router: Router):
        assert router.match("GET", "/files/a").route.handler.__qualname__ == "read"
        assert router.match("POST", "/files/a").route.handler.__qualname__ == "write"

    def test_method_case_sensitive(self, router: Router):
        assert router.match("get", "/") is None

    @pytest.mark.parametrize("method,path", [
        ("DELETE", "/"),
        ("POST", "/"),
        ("PUT", "/files/a"),
        ("POST", "/echo/x"),
        ("GET", "/unknown"),
    ])
    def test_unmatched_pairs(self, router: Router, method: str, path: str):
        assert router.match(method, path) is None

    def test_first_match_wins(self):
        router = Router()
        router.add_route("/a/*rest", _named("first"))
        router.add_route("/a/*other", _named("second"))

        match = router.match("GET", "/a/b")

        assert match.route.handler.__qualname__ == "first"
        assert match.params == {"rest": "b"}

    def test_static_segments_escaped(self):
        """Regex metacharacters in a route are literal."""
        router = Router()
        router.add_route("/a.b", _named("dot"))

        assert router.match("GET", "/a.b") is not None
        assert router.match("GET", "/axb") is None

    def test_wildcard_must_be_last(self):
        with pytest.raises(ValueError):
            Router().add_route("/files/*name/extra", _named("bad"))

    def test_wildcard_name_must_be_identifier(self):
        with pytest.raises(ValueError):
            Router().add_route("/files/*1bad", _named("bad"))

    def test_handle_injects_path_params(self, router: Router):
        captured = {}

        def handler(request: HTTPRequest) -> HTTPResponse:
            captured.update(request.path_params)
            return ok()

        r = Router()
        r.add_route("/echo/*text", handler)
        r.handle(HTTPRequest(method="GET", path="/echo/foo/bar"))

        assert captured == {"text": "foo/bar"}

    def test_handle_unmatched_is_404(self, router: Router):
        response = router.handle(HTTPRequest(method="DELETE", path="/"))

        assert response.status == HTTPStatus.NOT_FOUND
        assert response.body is None

    def test_decorator_registration(self):
        router = Router()

        @router.get("/ping")
        def ping(request):
            return ok("pong")

        @router.post("/ping")
        def ping_post(request):
            return ok("posted")

        assert router.handle(HTTPRequest(method="GET", path="/ping")).body == b"pong"
        assert router.handle(HTTPRequest(method="POST", path="/ping")).body == b"posted"

    def test_routes_in_registration_order(self, router: Router):
        assert [(r.method, r.path) for r in router.routes] == [
            ("GET", "/"),
            ("GET", "/echo/*text"),
            ("GET", "/user-agent"),
            ("GET", "/files/*name"),
            ("POST", "/files/*name"),
        ]

    def test_describe(self, router: Router):
        lines = router.describe().splitlines()

        assert len(lines) == 5
        assert "POST" in lines[-1]
        assert "write" in lines[-1]
