"""
=============================================================================
SERVER CONFIGURATION
=============================================================================

One immutable value describes the whole server. It is built once at
startup (from CLI flags or environment variables), validated, and then
shared read-only by every connection thread. Nothing mutates it after
run() starts, so no locking is needed.

    ┌─────────────────────────────────────────────────────────────────────┐
    │   CLI flags ──┐                                                      │
    │               ├──► ServerConfig ──► validate() ──► HTTPServer        │
    │   env vars ───┘        (frozen)                        │             │
    │                                                        ▼             │
    │                                       one thread per connection,    │
    │                                       all reading the same config   │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
"""

import os
from dataclasses import dataclass, replace
from typing import Optional


def _env_bool(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _env_float(name: str) -> Optional[float]:
    value = os.getenv(name)
    return float(value) if value else None


@dataclass(frozen=True)
class ServerConfig:
    """
    Configuration for the HTTP server.

    =========================================================================
    CONFIGURATION GROUPS
    =========================================================================

    NETWORK     host, port, backlog, timeout
    PROTOCOL    body_read_mode, legacy_header_endings,
                max_line_size, max_request_size
    FILES       directory
    LOGGING     log_level, log_format

    =========================================================================
    """

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    host: str = "127.0.0.1"
    """IP address to bind to. "0.0.0.0" to listen on every interface."""

    port: int = 4221
    """TCP port. 0 lets the OS pick one (tests)."""

    backlog: int = 128
    """Pending connections the OS queues before refusing new ones."""

    timeout: Optional[float] = None
    """
    Per-connection socket timeout in seconds.
    None blocks forever: a silent client holds its thread until it goes away.
    """

    # ─────────────────────────────────────────────────────────────────────
    # PROTOCOL SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    body_read_mode: str = "exact"
    """
    "exact"    - read exactly Content-Length bytes
    "buffered" - take whatever is already buffered, ignoring the number
    """

    legacy_header_endings: bool = False
    """Terminate Content-Type/Content-Length with a bare "\\n" instead of CRLF."""

    max_line_size: int = 64 * 1024
    """Longest request or header line accepted, in bytes."""

    max_request_size: int = 10 * 1024 * 1024
    """Largest request accepted (headers + body), in bytes."""

    # ─────────────────────────────────────────────────────────────────────
    # FILES
    # ─────────────────────────────────────────────────────────────────────

    directory: Optional[str] = None
    """
    Base directory for /files/ routes.
    When unset, file requests are answered with 500.
    """

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING
    # ─────────────────────────────────────────────────────────────────────

    log_level: str = "INFO"
    """DEBUG, INFO, WARNING or ERROR."""

    log_format: str = "text"
    """Access log format: "text" (Apache style) or "json"."""

    @classmethod
    def from_env(cls, **overrides) -> "ServerConfig":
        """
        Create configuration from environment variables.

        =====================================================================
        ENVIRONMENT VARIABLES
        =====================================================================

        TINYHTTPD_HOST                   Bind address (default: 127.0.0.1)
        TINYHTTPD_PORT                   Port (default: 4221)
        TINYHTTPD_DIRECTORY              Base directory for /files/
        TINYHTTPD_TIMEOUT                Socket timeout in seconds
        TINYHTTPD_BODY_READ_MODE         exact | buffered
        TINYHTTPD_LEGACY_HEADER_ENDINGS  1/true/yes/on to enable
        TINYHTTPD_LOG_LEVEL              Logging level (default: INFO)
        TINYHTTPD_LOG_FORMAT             text | json

        Keyword overrides win over the environment:

            config = ServerConfig.from_env(port=0)

        =====================================================================
        """
        config = cls(
            host=os.getenv("TINYHTTPD_HOST", "127.0.0.1"),
            port=int(os.getenv("TINYHTTPD_PORT", "4221")),
            directory=os.getenv("TINYHTTPD_DIRECTORY") or None,
            timeout=_env_float("TINYHTTPD_TIMEOUT"),
            body_read_mode=os.getenv("TINYHTTPD_BODY_READ_MODE", "exact"),
            legacy_header_endings=_env_bool("TINYHTTPD_LEGACY_HEADER_ENDINGS"),
            log_level=os.getenv("TINYHTTPD_LOG_LEVEL", "INFO"),
            log_format=os.getenv("TINYHTTPD_LOG_FORMAT", "text"),
        )
        return replace(config, **overrides) if overrides else config

    def validate(self) -> None:
        """
        Validate configuration values.

        Called by HTTPServer.__init__ so that a bad value stops the process
        at startup rather than on the first request that needs it.

        Raises:
            ValueError: On the first invalid setting.
        """
        if not 0 <= self.port < 65536:
            raise ValueError(f"Invalid port: {self.port}. Must be 0-65535.")

        if self.backlog < 1:
            raise ValueError("backlog must be >= 1")

        if self.timeout is not None and self.timeout <= 0:
            raise ValueError("timeout must be > 0")

        if self.body_read_mode not in ("exact", "buffered"):
            raise ValueError(f"Invalid body_read_mode: {self.body_read_mode!r}")

        if self.max_line_size < 64:
            raise ValueError("max_line_size must be >= 64")

        if self.max_request_size < self.max_line_size:
            raise ValueError("max_request_size must be >= max_line_size")

        if self.log_level.upper() not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Invalid log_level: {self.log_level!r}")

        if self.log_format not in ("text", "json"):
            raise ValueError(f"Invalid log_format: {self.log_format!r}")

        if self.directory is not None and not os.path.isdir(self.directory):
            raise ValueError(f"directory does not exist: {self.directory}")
