"""
=============================================================================
HTTP REQUEST PARSER
=============================================================================

Reads an HTTP/1.1 request off a buffered byte stream and turns it into a
structured HTTPRequest. Framing follows RFC 2616 section 5.

=============================================================================
HTTP REQUEST ANATOMY
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                     HTTP REQUEST STRUCTURE                          │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │  ┌─ REQUEST LINE ─────────────────────────────────────────────────┐ │
    │  │    POST /files/notes.txt HTTP/1.1\r\n                          │ │
    │  │    ─┬── ───────┬──────── ────┬───                              │ │
    │  │   Method      Path        Version                              │ │
    │  └─────────────────────────────────────────────────────────────────┘ │
    │                                                                      │
    │  ┌─ HEADERS ──────────────────────────────────────────────────────┐ │
    │  │    Host: localhost:4221\r\n                                    │ │
    │  │    User-Agent: curl/8.4.0\r\n                                  │ │
    │  │    Content-Length: 5\r\n        ← presence means a body follows│ │
    │  └─────────────────────────────────────────────────────────────────┘ │
    │                                                                      │
    │  ┌─ BLANK LINE ───────────────────────────────────────────────────┐ │
    │  │    \r\n                         ← end of the header block      │ │
    │  └─────────────────────────────────────────────────────────────────┘ │
    │                                                                      │
    │  ┌─ BODY ─────────────────────────────────────────────────────────┐ │
    │  │    hello                                                       │ │
    │  └─────────────────────────────────────────────────────────────────┘ │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
LINE-BY-LINE READING
=============================================================================

The parser never looks for "\r\n\r\n" in a big buffer. It pulls one line at
a time with readline(), which splits on a single "\n":

    readline() → b"GET /echo/abc HTTP/1.1\r\n"    request line
    readline() → b"User-Agent: foo\r\n"           header
    readline() → b"\r\n"                          end of headers, stop

Each line must end in CRLF. A bare "\n" or an unterminated final line is a
parse error. Headers are kept as an ordered list of (name, value) pairs,
so duplicates survive in the order they arrived.

=============================================================================
BODY READ MODES
=============================================================================

The body is only read when a header named exactly "Content-Length" was
seen. How much is read depends on the mode:

    exact     Read exactly Content-Length bytes, blocking across TCP
              segments until they arrive. EOF before that is an error.

    buffered  Ignore the number. Take whatever bytes the reader already
              holds (one underlying read if it holds none). This is how
              the server historically behaved, and it misbehaves when a
              body straddles TCP segments.

=============================================================================
"""

import io
import re
from dataclasses import dataclass, field
from typing import BinaryIO, Dict, List, Optional, Tuple


class HTTPParseError(Exception):
    """
    Raised when a request cannot be parsed.

    The error is fatal for the connection that produced it and for nothing
    else. status_code is a hint for logging; the server only ever answers
    with 200/201/404/500, so a parse failure closes the connection without
    a response.
    """

    def __init__(self, message: str, status_code: int = 400):
        super().__init__(message)
        self.status_code = status_code


@dataclass
class HTTPRequest:
    """
    A parsed HTTP request.

    =========================================================================
    HEADER STORAGE
    =========================================================================

    Headers are a list, not a dict:

        [("Accept", "text/plain"), ("Accept", "*/*"), ("User-Agent", "x")]

    - Arrival order is preserved
    - Duplicate names are kept
    - Lookup is case-sensitive and the first match wins

    =========================================================================
    """

    method: str                                  # GET, POST, ...
    path: str                                    # Verbatim, query string included
    version: str = "HTTP/1.1"                    # Stored, never negotiated

    headers: List[Tuple[str, str]] = field(default_factory=list)
    body: Optional[bytes] = None                 # None unless Content-Length was sent

    # Router-injected wildcard remainder, e.g. {"text": "foo/bar"}
    path_params: Dict[str, str] = field(default_factory=dict)

    client_address: Tuple[str, int] = ("", 0)

    @property
    def has_body(self) -> bool:
        """True if a Content-Length header was present."""
        return self.body is not None

    @property
    def user_agent(self) -> str:
        """First User-Agent header, or an empty string."""
        return self.get_header("User-Agent", "")

    @property
    def text(self) -> str:
        """The body decoded as UTF-8 (empty string when there is no body)."""
        return (self.body or b"").decode("utf-8")

    def get_header(self, name: str, default: Optional[str] = None) -> Optional[str]:
        """
        Get the value of the first header called exactly `name`.

        Args:
            name: Header name, matched case-sensitively
            default: Returned when no header matches

        Example:
            request.get_header("User-Agent")     # "curl/8.4.0"
            request.get_header("user-agent")     # None
        """
        for key, value in self.headers:
            if key == name:
                return value
        return default

    def get_header_list(self, name: str) -> List[str]:
        """Every value of header `name`, in arrival order."""
        return [value for key, value in self.headers if key == name]


class RequestParser:
    """
    Parses HTTP requests from a buffered binary stream.

    ==========================================================================
    PARSER FLOW
    ==========================================================================

        stream (socket.makefile("rb") or io.BytesIO)
              │
              ▼
        ┌───────────────────────────────────────────────────────────────────┐
        │  1. readline() until the request line (leading CRLFs skipped)    │
        │     │  EOF before anything? → None (client went away)            │
        │     ▼                                                             │
        │  2. Split request line on " " → exactly 3 tokens                 │
        │     │  Otherwise → HTTPParseError                                 │
        │     ▼                                                             │
        │  3. readline() headers until b"\r\n" or EOF                      │
        │     │  "Name: Value" → appended, lines without ": " skipped      │
        │     ▼                                                             │
        │  4. Content-Length present? → read body (exact or buffered)      │
        │     ▼                                                             │
        │  5. Build HTTPRequest                                            │
        └───────────────────────────────────────────────────────────────────┘

    ==========================================================================
    """

    BODY_READ_MODES = ("exact", "buffered")

    CRLF = b"\r\n"
    HEADER_SEPARATOR = ": "
    CONTENT_LENGTH = "Content-Length"

    # Digits only: int() would also accept "+5", " 5" and "1_0"
    CONTENT_LENGTH_PATTERN = re.compile(r"[0-9]+")

    def __init__(
        self,
        body_read_mode: str = "exact",
        max_line_size: int = 64 * 1024,
        max_request_size: int = 10 * 1024 * 1024,
    ):
        """
        Args:
            body_read_mode: "exact" or "buffered" (see module docstring).
            max_line_size: Longest accepted request or header line, in bytes.
            max_request_size: Largest accepted request (headers + body).
        """
        if body_read_mode not in self.BODY_READ_MODES:
            raise ValueError(f"Unknown body read mode: {body_read_mode!r}")

        self.body_read_mode = body_read_mode
        self.max_line_size = max_line_size
        self.max_request_size = max_request_size

    def parse(
        self,
        stream: BinaryIO,
        client_address: Tuple[str, int] = ("", 0),
    ) -> Optional[HTTPRequest]:
        """
        Read one request from `stream`.

        Args:
            stream: Buffered binary stream supporting readline(), read()
                    and read1().
            client_address: Peer (ip, port), kept on the request for logging.

        Returns:
            The parsed HTTPRequest, or None if the stream ended before any
            request line was sent.

        Raises:
            HTTPParseError: Malformed framing, bad UTF-8, oversized request.
            OSError: The underlying read failed.
        """
        consumed = 0

        # =====================================================================
        # STEP 1: Request line
        # =====================================================================
        # Stray CRLFs before the request line are ignored (RFC 2616 4.1).
        while True:
            raw = self._read_line(stream)
            if not raw:
                return None
            consumed += len(raw)
            if raw != self.CRLF:
                break

        method, path, version = self._parse_request_line(self._decode_line(raw))

        # =====================================================================
        # STEP 2: Headers
        # =====================================================================
        headers: List[Tuple[str, str]] = []
        while True:
            raw = self._read_line(stream)
            if not raw or raw == self.CRLF:
                break  # EOF or end of header block

            consumed += len(raw)
            self._check_size(consumed)

            header = self._parse_header(self._decode_line(raw))
            if header is not None:
                headers.append(header)

        # =====================================================================
        # STEP 3: Body, only when Content-Length was sent
        # =====================================================================
        body = None
        content_length = self._find_content_length(headers)
        if content_length is not None:
            body = self._read_body(stream, content_length, consumed)

        return HTTPRequest(
            method=method,
            path=path,
            version=version,
            headers=headers,
            body=body,
            client_address=client_address,
        )

    # =========================================================================
    # LINES
    # =========================================================================

    def _read_line(self, stream: BinaryIO) -> bytes:
        """Read one "\n"-terminated line, terminator included."""
        raw = stream.readline(self.max_line_size + 1)
        if len(raw) > self.max_line_size:
            raise HTTPParseError(
                f"Line exceeds {self.max_line_size} bytes",
                status_code=431,
            )
        return raw

    def _decode_line(self, raw: bytes) -> str:
        """Check the CRLF terminator, strip it, decode as UTF-8."""
        if not raw.endswith(self.CRLF):
            raise HTTPParseError(f"Line is not terminated by CRLF: {raw!r}")
        try:
            return raw[:-2].decode("utf-8")
        except UnicodeDecodeError as e:
            raise HTTPParseError(f"Line is not valid UTF-8: {e}")

    def _parse_request_line(self, line: str) -> Tuple[str, str, str]:
        """
        Split "METHOD SP PATH SP VERSION" on single spaces.

        Exactly three tokens are required. "GET  / HTTP/1.1" (two spaces)
        yields four tokens and is rejected like any other shape.
        """
        parts = line.split(" ")
        if len(parts) != 3:
            raise HTTPParseError(f"Bad request line: {parts!r}")

        method, path, version = parts
        return method, path, version

    def _parse_header(self, line: str) -> Optional[Tuple[str, str]]:
        """
        Split a header line at the first ": ".

        Lines without the separator are skipped rather than rejected.
        """
        name, sep, value = line.partition(self.HEADER_SEPARATOR)
        if not sep:
            return None
        return name, value

    # =========================================================================
    # BODY
    # =========================================================================

    def _find_content_length(self, headers: List[Tuple[str, str]]) -> Optional[str]:
        for name, value in headers:
            if name == self.CONTENT_LENGTH:
                return value
        return None

    def _read_body(self, stream: BinaryIO, content_length: str, consumed: int) -> bytes:
        if self.body_read_mode == "exact":
            body = self._read_exact_body(stream, content_length, consumed)
        else:
            body = self._read_buffered_body(stream, consumed)

        try:
            body.decode("utf-8")
        except UnicodeDecodeError as e:
            raise HTTPParseError(f"Body is not valid UTF-8: {e}")
        return body

    def _read_exact_body(self, stream: BinaryIO, content_length: str, consumed: int) -> bytes:
        """Read exactly Content-Length bytes, however many segments that takes."""
        if not self.CONTENT_LENGTH_PATTERN.fullmatch(content_length):
            raise HTTPParseError(f"Invalid Content-Length: {content_length!r}")

        length = int(content_length)
        self._check_size(consumed + length)

        body = stream.read(length) if length else b""
        if len(body) < length:
            raise HTTPParseError(
                f"Incomplete body: expected {length} bytes, got {len(body)}"
            )
        return body

    def _read_buffered_body(self, stream: BinaryIO, consumed: int) -> bytes:
        """
        Drain what the reader is already holding.

        read1() returns the buffered bytes without touching the socket, or
        performs a single read when the buffer is empty.
        """
        body = stream.read1(self.max_request_size + 1)
        self._check_size(consumed + len(body))
        return body

    def _check_size(self, size: int) -> None:
        if size > self.max_request_size:
            raise HTTPParseError(
                f"Request too large: {size} bytes",
                status_code=413,
            )


# =============================================================================
# CONVENIENCE FUNCTION
# =============================================================================

def parse_request(
    data: bytes,
    client_address: Tuple[str, int] = ("", 0),
    body_read_mode: str = "exact",
) -> Optional[HTTPRequest]:
    """
    Parse a complete request held in memory.

    Wraps `data` in io.BytesIO and runs RequestParser over it. Handy in
    tests; the server parses straight from the socket reader instead.
    """
    parser = RequestParser(body_read_mode=body_read_mode)
    return parser.parse(io.BytesIO(data), client_address)
