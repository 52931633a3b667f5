"""
pytest configuration and fixtures.
"""

import socket
import threading
from typing import Generator, Optional

import pytest

# Add src to path for imports
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from tinyhttpd import HTTPServer, ServerConfig


@pytest.fixture
def sample_get_request() -> bytes:
    """Sample HTTP GET request."""
    return (
        b"GET /echo/foo/bar HTTP/1.1\r\n"
        b"Host: localhost:4221\r\n"
        b"User-Agent: test-client\r\n"
        b"Accept: */*\r\n"
        b"\r\n"
    )


@pytest.fixture
def sample_post_request() -> bytes:
    """Sample HTTP POST request with a body."""
    body = b"hello, file"
    return (
        b"POST /files/notes.txt HTTP/1.1\r\n"
        b"Host: localhost:4221\r\n"
        b"Content-Type: application/octet-stream\r\n"
        + f"Content-Length: {len(body)}\r\n".encode()
        + b"\r\n"
    ) + body


@pytest.fixture
def free_port() -> int:
    """Get a free port for testing."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(("127.0.0.1", 0))
        return s.getsockname()[1]


@pytest.fixture
def files_dir(tmp_path: Path) -> Path:
    """Empty base directory for /files/ routes."""
    directory = tmp_path / "files"
    directory.mkdir()
    return directory


class BackgroundServer:
    """Runs an HTTPServer in a background thread for integration tests."""

    def __init__(self, server: HTTPServer):
        self.server = server
        self._thread: Optional[threading.Thread] = None

    @property
    def port(self) -> int:
        return self.server.address[1]

    def start(self):
        """Start server in background thread and wait until it listens."""
        self._thread = threading.Thread(
            target=self.server.run,
            kwargs={"configure_logging": False},
            daemon=True,
        )
        self._thread.start()

        if not self.server.wait_until_ready(timeout=5.0):
            raise RuntimeError("Server failed to start")

    def stop(self):
        """Stop the server."""
        self.server.shutdown()

        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=10.0)

    def request(self, raw: bytes, timeout: float = 5.0) -> bytes:
        """Send raw bytes, half-close, and read the reply until EOF."""
        with socket.create_connection(("127.0.0.1", self.port), timeout=timeout) as s:
            s.sendall(raw)
            s.shutdown(socket.SHUT_WR)

            chunks = []
            while True:
                chunk = s.recv(4096)
                if not chunk:
                    break
                chunks.append(chunk)
            return b"".join(chunks)


def _start_server(config: ServerConfig) -> BackgroundServer:
    background = BackgroundServer(HTTPServer(config))
    background.start()
    return background


@pytest.fixture
def live_server(files_dir: Path) -> Generator[BackgroundServer, None, None]:
    """Server on a random port with an empty base directory."""
    background = _start_server(ServerConfig(
        host="127.0.0.1",
        port=0,
        timeout=5.0,
        directory=str(files_dir),
        log_level="WARNING",
    ))

    yield background

    background.stop()


@pytest.fixture
def live_server_no_dir() -> Generator[BackgroundServer, None, None]:
    """Server on a random port without a base directory."""
    background = _start_server(ServerConfig(
        host="127.0.0.1",
        port=0,
        timeout=5.0,
        log_level="WARNING",
    ))

    yield background

    background.stop()


@pytest.fixture
def server_factory() -> Generator:
    """Start servers with custom configs; every one is stopped afterwards."""
    started = []

    def start(**overrides) -> BackgroundServer:
        settings = {"host": "127.0.0.1", "port": 0, "timeout": 5.0, "log_level": "WARNING"}
        settings.update(overrides)
        background = _start_server(ServerConfig(**settings))
        started.append(background)
        return background

    yield start

    for background in started:
        background.stop()
