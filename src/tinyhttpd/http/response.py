"""
=============================================================================
HTTP RESPONSE BUILDER
=============================================================================

Structured responses and their serialization to wire bytes.

=============================================================================
HTTP RESPONSE ANATOMY
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                     HTTP RESPONSE STRUCTURE                         │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │  ┌─ STATUS LINE ──────────────────────────────────────────────────┐ │
    │  │    HTTP/1.1 200 OK\r\n                                         │ │
    │  └─────────────────────────────────────────────────────────────────┘ │
    │                                                                      │
    │  ┌─ HEADERS (only when there is a body) ──────────────────────────┐ │
    │  │    Content-Type: text/plain<EOL>                               │ │
    │  │    Content-Length: 7<EOL>                                      │ │
    │  └─────────────────────────────────────────────────────────────────┘ │
    │                                                                      │
    │  ┌─ BLANK LINE ───────────────────────────────────────────────────┐ │
    │  │    \r\n                                                        │ │
    │  └─────────────────────────────────────────────────────────────────┘ │
    │                                                                      │
    │  ┌─ BODY ─────────────────────────────────────────────────────────┐ │
    │  │    foo/bar                                                     │ │
    │  └─────────────────────────────────────────────────────────────────┘ │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

<EOL> is "\r\n". Older clients of this server were written against a
byte stream whose two header lines ended in a bare "\n"; pass
line_ending=LEGACY_HEADER_ENDING to to_bytes() to reproduce it exactly.

There is no Date, Server or Connection header. The connection is always
closed after one response, which is how the client finds the end of a
body-less message.

=============================================================================
"""

from dataclasses import dataclass
from typing import Optional, Union

from .status_codes import HTTPStatus


CRLF = "\r\n"
LEGACY_HEADER_ENDING = "\n"

TEXT_PLAIN = "text/plain"
OCTET_STREAM = "application/octet-stream"


@dataclass
class HTTPResponse:
    """
    A response to be sent to the client.

    =========================================================================
    RESPONSE LIFECYCLE
    =========================================================================

        Handler returns          to_bytes()              Connection sends
        HTTPResponse    ─────►   serializes    ─────►    with sendall()
            │                       │                        │
        HTTPResponse(            b"HTTP/1.1 200 OK\r\n       then closes
          status=OK,               Content-Type: ...
          content_type=...,        Content-Length: ...
          body=b"..."              \r\n
        )                          ..."

    =========================================================================

    content_type and body are independent fields, but the headers are only
    written when both are set. A 201 for a file write carries a content
    type and no body, and goes out as a bare status line.
    """

    status: HTTPStatus = HTTPStatus.OK
    content_type: Optional[str] = None
    body: Optional[bytes] = None
    version: str = "HTTP/1.1"

    @property
    def status_line(self) -> str:
        """e.g. "HTTP/1.1 404 Not Found" """
        return f"{self.version} {self.status.status_text}"

    @property
    def has_entity(self) -> bool:
        """True when Content-Type and Content-Length will be written."""
        return self.body is not None and self.content_type is not None

    @property
    def content_length(self) -> int:
        return len(self.body) if self.has_entity else 0

    def to_bytes(self, line_ending: str = CRLF) -> bytes:
        """
        Serialize the response.

        =====================================================================
        SERIALIZATION FORMAT
        =====================================================================

            HTTP/1.1 200 OK\r\n              ← always CRLF
            Content-Type: text/plain<EOL>    ← only with a body
            Content-Length: 7<EOL>           ← only with a body
            \r\n                             ← always CRLF
            foo/bar                          ← body bytes

        =====================================================================

        Args:
            line_ending: Terminator for the two entity headers. CRLF by
                         default, LEGACY_HEADER_ENDING for the old stream.

        Returns:
            The full response, ready for socket.sendall().
        """
        head = self.status_line + CRLF

        if self.has_entity:
            head += f"Content-Type: {self.content_type}{line_ending}"
            head += f"Content-Length: {len(self.body)}{line_ending}"

        head += CRLF

        payload = head.encode("utf-8")
        if self.has_entity:
            payload += self.body
        return payload


class ResponseBuilder:
    """
    Fluent builder for HTTPResponse.

        response = (ResponseBuilder()
            .status(HTTPStatus.OK)
            .text("hello")
            .build())

    Every method except build() returns self.
    """

    def __init__(self):
        self._status = HTTPStatus.OK
        self._content_type: Optional[str] = None
        self._body: Optional[bytes] = None

    def status(self, status: HTTPStatus) -> "ResponseBuilder":
        self._status = status
        return self

    def content_type(self, content_type: str) -> "ResponseBuilder":
        self._content_type = content_type
        return self

    def body(self, body: Union[str, bytes]) -> "ResponseBuilder":
        """Set the raw body. Strings are encoded as UTF-8."""
        if isinstance(body, str):
            self._body = body.encode("utf-8")
        else:
            self._body = body
        return self

    def text(self, text: str, content_type: str = TEXT_PLAIN) -> "ResponseBuilder":
        """Plain text body. The content type carries no charset parameter."""
        self._content_type = content_type
        return self.body(text)

    def binary(self, data: bytes) -> "ResponseBuilder":
        """Opaque bytes served as application/octet-stream."""
        self._content_type = OCTET_STREAM
        return self.body(data)

    def build(self) -> HTTPResponse:
        return HTTPResponse(
            status=self._status,
            content_type=self._content_type,
            body=self._body,
        )


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================
#
#     return ok()                              # 200, no body
#     return ok("pong")                        # 200, text/plain
#     return ok(data, content_type=OCTET_STREAM)
#     return not_found()                       # 404, no body
#
# =============================================================================

def ok(body: Union[str, bytes, None] = None, content_type: Optional[str] = None) -> HTTPResponse:
    """
    Create a 200 OK response.

    - None → no body, no headers
    - str  → text/plain unless content_type says otherwise
    - bytes → content_type (application/octet-stream if omitted)
    """
    builder = ResponseBuilder().status(HTTPStatus.OK)

    if isinstance(body, str):
        builder.text(body, content_type or TEXT_PLAIN)
    elif body is not None:
        builder.body(body).content_type(content_type or OCTET_STREAM)

    return builder.build()


def created(content_type: Optional[str] = None) -> HTTPResponse:
    """
    Create a 201 Created response.

    The content type is recorded on the response but, with no body to
    describe, never reaches the wire.
    """
    builder = ResponseBuilder().status(HTTPStatus.CREATED)
    if content_type:
        builder.content_type(content_type)
    return builder.build()


def not_found() -> HTTPResponse:
    """Create a 404 Not Found response with no body."""
    return ResponseBuilder().status(HTTPStatus.NOT_FOUND).build()


def internal_error() -> HTTPResponse:
    """
    Create a 500 Internal Server Error response with no body.

    Details go to the log, never to the client.
    """
    return ResponseBuilder().status(HTTPStatus.INTERNAL_SERVER_ERROR).build()
