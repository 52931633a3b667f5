"""
=============================================================================
CONNECTION MANAGEMENT
=============================================================================

Wraps one accepted client socket for the single request/response exchange
it will carry.

=============================================================================
TCP IS A BYTE STREAM, NOT A MESSAGE PROTOCOL!
=============================================================================

TCP does NOT preserve message boundaries. A client that sends

    send(b"POST /files/a HTTP/1.1\r\nContent-Length: 5\r\n\r\nhello")

may be read by the server as

    recv() → b"POST /files/a HTTP/1.1\r\nCon"
    recv() → b"tent-Length: 5\r\n\r\nhel"
    recv() → b"lo"

So the socket is wrapped in a buffered reader (socket.makefile("rb")).
readline() keeps calling recv() until it sees "\n", read(n) keeps calling
it until n bytes arrived, and read1() hands back what is already buffered.
The request parser is written against exactly those three calls.

=============================================================================
ONE REQUEST PER CONNECTION
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                     Connection Lifecycle                            │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   NEW ──► READING ──► PROCESSING ──► WRITING ──► CLOSING ──► CLOSED │
    │              │                                      ▲                │
    │              └──── parse error / EOF / OSError ─────┘                │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

There is no keep-alive and no pipelining: after one response (or one
failure) the connection is closed.

=============================================================================
"""

import socket
import time
import logging
import uuid
from enum import Enum
from dataclasses import dataclass, field
from typing import BinaryIO, Optional

from ..http.request import HTTPRequest, RequestParser


logger = logging.getLogger(__name__)


class ConnectionState(Enum):
    """Where a connection is in its single exchange."""
    NEW = "new"                # Just accepted
    READING = "reading"        # Reading request line, headers, body
    PROCESSING = "processing"  # Request parsed, handler running
    WRITING = "writing"        # Sending the response
    CLOSING = "closing"        # Shutdown sequence in progress
    CLOSED = "closed"          # Socket released


@dataclass
class Connection:
    """
    A client connection.

    Attributes:
        socket: The accepted client socket.
        address: Client's (ip, port) tuple.
        id: Short identifier used as a log prefix.
        state: Current ConnectionState.
        created_at: When the connection was accepted.
        timeout: Socket timeout in seconds, None to block forever.
    """

    socket: socket.socket
    address: tuple[str, int]

    id: str = field(default_factory=lambda: str(uuid.uuid4())[:8])
    state: ConnectionState = ConnectionState.NEW
    created_at: float = field(default_factory=time.time)
    timeout: Optional[float] = None

    _reader: Optional[BinaryIO] = field(default=None, repr=False)

    def __post_init__(self):
        # settimeout(None) puts the socket in plain blocking mode
        self.socket.settimeout(self.timeout)
        self._reader = self.socket.makefile("rb")

    @property
    def client_ip(self) -> str:
        return self.address[0]

    @property
    def age(self) -> float:
        """Seconds since the connection was accepted."""
        return time.time() - self.created_at

    # =========================================================================
    # READING
    # =========================================================================

    def read_request(self, parser: RequestParser) -> Optional[HTTPRequest]:
        """
        Read and parse the request carried by this connection.

        Args:
            parser: Configured RequestParser.

        Returns:
            The request, or None if the client closed without sending one.

        Raises:
            HTTPParseError: Malformed request.
            OSError: Socket failure, including timeouts.
        """
        self.state = ConnectionState.READING
        request = parser.parse(self._reader, self.address)
        if request is not None:
            self.state = ConnectionState.PROCESSING
        return request

    # =========================================================================
    # WRITING
    # =========================================================================

    def send_response(self, data: bytes) -> bool:
        """
        Write a serialized response in a single sendall().

        sendall() loops over send() until every byte is out, so either the
        whole response leaves or the connection is reported broken.

        Returns:
            True if sent, False if the client was gone.
        """
        self.state = ConnectionState.WRITING

        try:
            self.socket.sendall(data)
            return True
        except OSError as e:
            logger.warning(f"[{self.id}] Send failed: {e}")
            return False

    # =========================================================================
    # CLOSING
    # =========================================================================

    def close(self):
        """
        Close the connection gracefully.

        1. shutdown(SHUT_WR) sends FIN so the client sees end-of-response
        2. Drain anything the client still sends, briefly, so the kernel
           does not answer unread data with RST and truncate the response
        3. Release the reader and the socket
        """
        if self.state == ConnectionState.CLOSED:
            return

        self.state = ConnectionState.CLOSING

        try:
            self.socket.shutdown(socket.SHUT_WR)
        except OSError:
            pass  # Client already gone

        try:
            self.socket.settimeout(0.5)
            while self.socket.recv(1024):
                pass
        except OSError:
            pass  # Includes socket.timeout

        for resource in (self._reader, self.socket):
            try:
                resource.close()
            except OSError:
                pass

        self.state = ConnectionState.CLOSED
        logger.debug(f"[{self.id}] Connection closed after {self.age * 1000:.2f}ms")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
