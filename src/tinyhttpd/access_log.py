"""
=============================================================================
ACCESS LOG
=============================================================================

One log line per answered request, on the "tinyhttpd.access" logger.

=============================================================================
LOG FORMATS
=============================================================================

    TEXT (default), Apache-style:
    ┌─────────────────────────────────────────────────────────────────────┐
    │ 127.0.0.1 - - [19/Oct/2026:10:55:36 +0000] "GET /echo/abc" 200 3   │
    │ 0.41ms curl/8.4.0 [a1b2c3d4]                                        │
    └─────────────────────────────────────────────────────────────────────┘

    JSON, for log aggregators:
    ┌─────────────────────────────────────────────────────────────────────┐
    │ {"request_id": "a1b2c3d4", "method": "GET", "path": "/echo/abc",    │
    │  "client_ip": "127.0.0.1", "status_code": 200, ...}                │
    └─────────────────────────────────────────────────────────────────────┘

The request id is the connection id, so access lines can be matched with
the "[a1b2c3d4] ..." lines the server logs for the same connection.

Configure it like any other logger:

    logging.getLogger("tinyhttpd.access").addHandler(file_handler)

=============================================================================
"""

import json
import logging
import time
from dataclasses import dataclass, asdict

from .http.request import HTTPRequest
from .http.response import HTTPResponse


logger = logging.getLogger("tinyhttpd.access")


@dataclass
class RequestLog:
    """
    Structured log entry for one request.

    request_id:     Connection id
    method, path:   From the request line
    client_ip:      Peer address
    user_agent:     First User-Agent header, "-" if none
    status_code:    Response status
    content_length: Response body bytes actually written
    duration_ms:    Parse-to-send time
    timestamp:      When the entry was created
    """

    request_id: str
    method: str
    path: str
    client_ip: str
    user_agent: str
    status_code: int
    content_length: int
    duration_ms: float
    timestamp: str

    def to_dict(self) -> dict:
        entry = asdict(self)
        entry["duration_ms"] = round(self.duration_ms, 2)
        return entry

    def to_text(self) -> str:
        return (
            f'{self.client_ip} - - [{self.timestamp}] '
            f'"{self.method} {self.path}" {self.status_code} '
            f'{self.content_length} {self.duration_ms:.2f}ms '
            f'{self.user_agent} [{self.request_id}]'
        )


class AccessLogger:
    """
    Emits RequestLog entries.

        access_log = AccessLogger(log_format="json")
        access_log.log(conn.id, request, response, duration_ms)
    """

    def __init__(self, log_format: str = "text", log_level: int = logging.INFO):
        """
        Args:
            log_format: "text" or "json".
            log_level: Level the entries are logged at.
        """
        self.log_format = log_format
        self.log_level = log_level

    def build_entry(
        self,
        request_id: str,
        request: HTTPRequest,
        response: HTTPResponse,
        duration_ms: float,
    ) -> RequestLog:
        return RequestLog(
            request_id=request_id,
            method=request.method,
            path=request.path,
            client_ip=request.client_address[0],
            user_agent=request.user_agent or "-",
            status_code=int(response.status),
            content_length=response.content_length,
            duration_ms=duration_ms,
            timestamp=time.strftime("%d/%b/%Y:%H:%M:%S %z"),
        )

    def log(
        self,
        request_id: str,
        request: HTTPRequest,
        response: HTTPResponse,
        duration_ms: float,
    ) -> RequestLog:
        entry = self.build_entry(request_id, request, response, duration_ms)

        if self.log_format == "json":
            logger.log(self.log_level, json.dumps(entry.to_dict()))
        else:
            logger.log(self.log_level, entry.to_text())

        return entry
