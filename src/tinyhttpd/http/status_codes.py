"""
=============================================================================
HTTP STATUS CODES
=============================================================================

The server answers with one of four status codes. Nothing else is ever
written on the wire, so the enumeration stops at four.

    ┌────────┬───────────────────────────────────────────────────────────┐
    │  200   │ OK                    - root probe, echo, user-agent,     │
    │        │                         file read                         │
    │  201   │ Created               - file write                        │
    │  404   │ Not Found             - unmatched route, missing file     │
    │  500   │ Internal Server Error - no base directory, I/O failure    │
    └────────┴───────────────────────────────────────────────────────────┘

=============================================================================
"""

from enum import IntEnum


class HTTPStatus(IntEnum):
    """
    HTTP status codes used by the server.

    IntEnum, so members compare equal to their integer codes:

        >>> HTTPStatus.OK == 200
        True
        >>> HTTPStatus.NOT_FOUND.status_text
        '404 Not Found'
    """

    OK = 200                        # Request handled, optional body
    CREATED = 201                   # File written
    NOT_FOUND = 404                 # No route or no such file
    INTERNAL_SERVER_ERROR = 500     # Server-side failure

    @property
    def phrase(self) -> str:
        """Reason phrase, e.g. "Not Found"."""
        return _STATUS_PHRASES[self]

    @property
    def status_text(self) -> str:
        """
        Code and reason phrase as they appear after the version in the
        status line:

            HTTP/1.1 201 Created
                     ───────────
                     status_text
        """
        return f"{int(self)} {self.phrase}"

    @property
    def is_success(self) -> bool:
        return 200 <= self < 300

    @property
    def is_error(self) -> bool:
        return self >= 400


_STATUS_PHRASES = {
    HTTPStatus.OK: "OK",
    HTTPStatus.CREATED: "Created",
    HTTPStatus.NOT_FOUND: "Not Found",
    HTTPStatus.INTERNAL_SERVER_ERROR: "Internal Server Error",
}
