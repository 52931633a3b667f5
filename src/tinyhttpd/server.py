"""
=============================================================================
MAIN HTTP SERVER
=============================================================================

Ties the components together: one accepted connection in, one response
out, connection closed.

=============================================================================
ARCHITECTURE OVERVIEW
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    HTTP SERVER ARCHITECTURE                         │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │                        ┌─────────────────┐                          │
    │                        │   HTTPServer    │                          │
    │                        │  (Orchestrator) │                          │
    │                        └────────┬────────┘                          │
    │                                 │                                    │
    │            ┌────────────────────┼────────────────────┐              │
    │            ▼                    ▼                    ▼              │
    │    ┌──────────────┐    ┌──────────────┐    ┌──────────────┐        │
    │    │ SocketServer │    │RequestParser │    │    Router    │        │
    │    │ (accepting)  │    │  (framing)   │    │ (dispatching)│        │
    │    └──────┬───────┘    └──────────────┘    └──────┬───────┘        │
    │           ▼                                       ▼                 │
    │    ┌──────────────┐                        ┌──────────────┐        │
    │    │  Connection  │                        │   Handlers   │        │
    │    │ (one thread) │                        │ basic, files │        │
    │    └──────────────┘                        └──────────────┘        │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
REQUEST FLOW (per connection, in its own thread)
=============================================================================

    accept() ─► Thread ─► read_request() ─► router.handle() ─► to_bytes()
                               │                                  │
                               │ HTTPParseError / OSError         ▼
                               └────────► log, close      sendall(), close

Nothing is written until the whole request (headers and, if announced,
the body) has been read. Every failure is confined to its connection;
the accept loop never sees it.

=============================================================================
"""

import logging
import threading
import time
from typing import Optional, Set, Tuple

from .access_log import AccessLogger
from .config import ServerConfig
from .core import SocketServer, Connection
from .handlers import FileHandler, root, echo, user_agent
from .http import (
    HTTPRequest, HTTPResponse, RequestParser, HTTPParseError,
    Router, internal_error, CRLF, LEGACY_HEADER_ENDING,
)


logger = logging.getLogger(__name__)


class HTTPServer:
    """
    Thread-per-connection HTTP/1.1 server.

    =========================================================================
    USAGE
    =========================================================================

        server = HTTPServer(ServerConfig(port=4221, directory="/tmp"))
        server.run()            # Blocks until Ctrl+C / SIGTERM

        # From another thread:
        server.shutdown()

    =========================================================================
    """

    SHUTDOWN_JOIN_TIMEOUT = 5.0  # seconds, for in-flight connections

    def __init__(self, config: Optional[ServerConfig] = None):
        """
        Args:
            config: Server configuration. Defaults to ServerConfig().

        Raises:
            ValueError: The configuration is invalid.
        """
        self.config = config or ServerConfig()
        self.config.validate()

        self._socket_server = SocketServer(self.config)
        self._parser = RequestParser(
            body_read_mode=self.config.body_read_mode,
            max_line_size=self.config.max_line_size,
            max_request_size=self.config.max_request_size,
        )

        self._router = Router()
        self._files = FileHandler(self.config.directory)
        self._register_routes()

        self._access_log = AccessLogger(log_format=self.config.log_format)
        self._line_ending = LEGACY_HEADER_ENDING if self.config.legacy_header_endings else CRLF

        # Live connection threads, joined on shutdown
        self._threads: Set[threading.Thread] = set()
        self._threads_lock = threading.Lock()

    def _register_routes(self):
        """The fixed route table. Order matters: first match wins."""
        self._router.add_route("/", root, method="GET")
        self._router.add_route("/echo/*text", echo, method="GET")
        self._router.add_route("/user-agent", user_agent, method="GET")
        self._router.add_route("/files/*name", self._files.read, method="GET")
        self._router.add_route("/files/*name", self._files.write, method="POST")

    @property
    def router(self) -> Router:
        return self._router

    @property
    def address(self) -> Tuple[str, int]:
        """Bound (host, port); the real port once listening with port=0."""
        return self._socket_server.address

    @property
    def is_running(self) -> bool:
        return self._socket_server.is_running

    @property
    def active_connections(self) -> int:
        with self._threads_lock:
            return len(self._threads)

    # =========================================================================
    # SERVER LIFECYCLE
    # =========================================================================

    def run(self, configure_logging: bool = True):
        """
        Start the server (blocking).

        Args:
            configure_logging: Install the basicConfig handler. Pass False
                               when the embedding application owns logging.
        """
        if configure_logging:
            self._setup_logging()

        logger.info(f"Starting HTTP server on {self.config.host}:{self.config.port}")
        if self.config.directory:
            logger.info(f"Serving files from: {self.config.directory}")
        else:
            logger.info("No --directory given, /files/ requests will fail with 500")
        logger.debug("Routes:\n" + self._router.describe())

        try:
            self._socket_server.start(self._handle_connection)
        except KeyboardInterrupt:
            logger.info("Received keyboard interrupt")
        finally:
            self._shutdown()

    def shutdown(self):
        """Stop accepting connections. run() returns shortly after."""
        self._socket_server.shutdown()

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        """Block until the listening socket is up."""
        return self._socket_server.wait_until_ready(timeout)

    def _setup_logging(self):
        """Configure logging based on config."""
        level = getattr(logging, self.config.log_level.upper(), logging.INFO)

        logging.basicConfig(
            level=level,
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

        logging.getLogger("tinyhttpd").setLevel(level)

    def _shutdown(self):
        """
        Wait (bounded) for in-flight connections.

        Connection threads are daemons, so one stuck on a silent client
        cannot keep the process alive past this point.
        """
        logger.info("Shutting down server...")

        with self._threads_lock:
            pending = list(self._threads)

        deadline = time.monotonic() + self.SHUTDOWN_JOIN_TIMEOUT
        for thread in pending:
            thread.join(timeout=max(0.0, deadline - time.monotonic()))

        still_running = sum(1 for thread in pending if thread.is_alive())
        if still_running:
            logger.warning(f"{still_running} connection(s) still open at shutdown")

        logger.info("Server stopped")

    # =========================================================================
    # CONNECTION HANDLING
    # =========================================================================

    def _handle_connection(self, conn: Connection):
        """
        Start a thread for a freshly accepted connection.

        Called on the accept loop; returns as soon as the thread runs.
        """
        thread = threading.Thread(
            target=self._run_connection,
            args=(conn,),
            name=f"conn-{conn.id}",
            daemon=True,
        )

        with self._threads_lock:
            self._threads.add(thread)

        logger.debug(f"[{conn.id}] Accepted new connection ({conn.client_ip}:{conn.address[1]})")

        try:
            thread.start()
        except RuntimeError as e:
            # Usually "can't start new thread": drop this client, keep accepting
            logger.error(f"[{conn.id}] Could not start connection thread: {e}")
            with self._threads_lock:
                self._threads.discard(thread)
            conn.close()

    def _run_connection(self, conn: Connection):
        try:
            self._process_connection(conn)
        except Exception as e:
            logger.exception(f"[{conn.id}] Connection error: {e}")
        finally:
            with self._threads_lock:
                self._threads.discard(threading.current_thread())

    def _process_connection(self, conn: Connection):
        """
        Serve the single request on `conn` (runs in the connection thread).

        =====================================================================
        ERROR HANDLING
        =====================================================================

            HTTPParseError      malformed request   → log, close, no response
            OSError on read     transport failure   → log, close
            None from parser    client sent nothing → close
            handler exception                       → 500
            send failure                            → log, close

        =====================================================================
        """
        with conn:
            started = time.perf_counter()

            try:
                request = conn.read_request(self._parser)
            except HTTPParseError as e:
                logger.warning(f"[{conn.id}] Bad request ({e.status_code}) from {conn.client_ip}: {e}")
                return
            except OSError as e:
                logger.warning(f"[{conn.id}] Read failed from {conn.client_ip}: {e}")
                return

            if request is None:
                logger.debug(f"[{conn.id}] Connection closed before a request was sent")
                return

            response = self.handle(request, conn.id)

            if not conn.send_response(response.to_bytes(self._line_ending)):
                return

            duration_ms = (time.perf_counter() - started) * 1000
            self._access_log.log(conn.id, request, response, duration_ms)

    def handle(self, request: HTTPRequest, request_id: str = "-") -> HTTPResponse:
        """
        Route a parsed request and return the response.

        Unexpected handler exceptions become a 500; the details are logged.
        """
        try:
            return self._router.handle(request)
        except Exception as e:
            logger.exception(f"[{request_id}] Handler error on {request.method} {request.path}: {e}")
            return internal_error()
