"""
pytest configuration and fixtures.
"""

import socket
import threading
from pathlib import Path
from typing import Generator, Optional

import pytest

# Add src to path for imports
import sys
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from minihttp import HTTPServer, ServerConfig
from minihttp.handlers.static import StaticFileServer
from minihttp.http.router import Router


@pytest.fixture
def sample_get_request() -> bytes:
    """Sample HTTP GET request."""
    return (
        b"GET /static/index.html?v=2 HTTP/1.1\r\n"
        b"Host: localhost:8080\r\n"
        b"User-Agent: pytest\r\n"
        b"Accept: text/html\r\n"
        b"\r\n"
    )


@pytest.fixture
def sample_post_request() -> bytes:
    """Sample HTTP POST request with a JSON body."""
    body = b'{"key":"value"}'
    head = (
        b"POST /submit HTTP/1.1\r\n"
        b"Host: localhost:8080\r\n"
        b"Content-Type: application/json\r\n"
    )
    return head + b"Content-Length: %d\r\n\r\n" % len(body) + body


@pytest.fixture
def static_root(tmp_path: Path) -> Path:
    """A static assets root with a few files of different types."""
    root = tmp_path / "static"
    root.mkdir()
    (root / "index.html").write_bytes(b"<h1>hi</h1>")
    (root / "style.css").write_bytes(b"body { margin: 0; }")
    (root / "app.js").write_bytes(b"console.log(1);")
    (root / "data.bin").write_bytes(bytes(range(256)))
    (root / "README").write_bytes(b"no extension")

    sub = root / "img"
    sub.mkdir()
    (sub / "logo.PNG").write_bytes(b"\x89PNG\r\n\x1a\n")

    # Sibling of the root that must never be reachable
    (tmp_path / "secret.txt").write_bytes(b"top secret")
    return root


@pytest.fixture
def static_server(static_root: Path) -> StaticFileServer:
    return StaticFileServer(static_root)


@pytest.fixture
def router(static_server: StaticFileServer) -> Router:
    return Router(static_server)


@pytest.fixture
def config(static_root: Path) -> ServerConfig:
    """Test server configuration."""
    return ServerConfig(
        host="127.0.0.1",
        port=0,  # Let OS pick a free port
        min_workers=2,
        static_dir=str(static_root),
        log_level="WARNING",
    )


@pytest.fixture
def free_port() -> int:
    """Get a free port for testing."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(("127.0.0.1", 0))
        return s.getsockname()[1]


class TestServer:
    """Test server helper that runs in a background thread."""

    __test__ = False  # Not a test class

    def __init__(self, server: HTTPServer):
        self.server = server
        self._thread: Optional[threading.Thread] = None

    @property
    def port(self) -> int:
        return self.server.address[1]

    def start(self):
        """Start server in background thread and wait until it listens."""
        self._thread = threading.Thread(target=self.server.run, daemon=True)
        self._thread.start()

        if not self.server.wait_until_ready(timeout=5.0):
            raise RuntimeError("Server failed to start")

    def stop(self):
        """Stop the server."""
        self.server.shutdown()

        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=5.0)

    def request(self, raw: bytes, shutdown_write: bool = False) -> bytes:
        """
        Send raw bytes on a fresh connection and read until the server closes.

        With shutdown_write the client half-closes after sending, which
        lets tests exercise the "connected but sent nothing" case.
        """
        with socket.create_connection(("127.0.0.1", self.port), timeout=5.0) as s:
            if raw:
                s.sendall(raw)
            if shutdown_write:
                s.shutdown(socket.SHUT_WR)

            chunks = []
            while True:
                chunk = s.recv(4096)
                if not chunk:
                    break
                chunks.append(chunk)
            return b"".join(chunks)


@pytest.fixture
def test_server(config: ServerConfig) -> Generator[TestServer, None, None]:
    """A running server over the static_root fixture."""
    test_srv = TestServer(HTTPServer(config))
    test_srv.start()

    yield test_srv

    test_srv.stop()


@pytest.fixture
def server_factory(config: ServerConfig):
    """Start extra servers with config overrides; all are stopped at teardown."""
    started = []

    def factory(**overrides) -> TestServer:
        cfg = ServerConfig(**{**config.__dict__, **overrides})
        test_srv = TestServer(HTTPServer(cfg))
        test_srv.start()
        started.append(test_srv)
        return test_srv

    yield factory

    for test_srv in started:
        test_srv.stop()
