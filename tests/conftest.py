"""
pytest configuration and fixtures.
"""

import socket
import threading
import time
from pathlib import Path
from typing import Generator, List, Tuple
import pytest

# Add src to path for imports
import sys
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from webserver import WebServer, ServerConfig
from webserver.core.connection import Connection
from webserver.handlers import ConnectionHandler, StaticFileHandler


INDEX_HTML = b"<!DOCTYPE html><html><body><h1>Home</h1></body></html>"
STYLE_CSS = b"body { color: #333; }\n"
LOGO_PNG = b"\x89PNG\r\n\x1a\n" + bytes(range(256)) * 4


@pytest.fixture
def web_root(tmp_path: Path) -> Path:
    """A small site: index, stylesheet, image and a subdirectory."""
    root = tmp_path / "wwwroot"
    root.mkdir()
    (root / "index.html").write_bytes(INDEX_HTML)
    (root / "style.css").write_bytes(STYLE_CSS)
    (root / "logo.png").write_bytes(LOGO_PNG)
    (root / "docs").mkdir()
    (root / "docs" / "readme.txt").write_bytes(b"plain text\n")
    return root


@pytest.fixture
def free_port() -> int:
    """Get a free port for testing (ephemeral ports are always > 1024)."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(('127.0.0.1', 0))
        return s.getsockname()[1]


@pytest.fixture
def connection_handler(web_root: Path) -> ConnectionHandler:
    """Handler serving the test web root, with a small chunk size."""
    return ConnectionHandler(StaticFileHandler(web_root), chunk_size=64)


# =============================================================================
# RAW HTTP HELPERS
# =============================================================================

class RawResponse:
    """A response split into status line, ordered headers and body."""

    def __init__(self, raw: bytes):
        self.raw = raw
        head, _, self.body = raw.partition(b"\r\n\r\n")
        lines = head.decode("iso-8859-1").split("\r\n")
        self.status_line = lines[0]
        self.version, code, self.reason = self.status_line.split(" ", 2)
        self.status = int(code)
        self.header_list: List[Tuple[str, str]] = [
            tuple(line.split(": ", 1)) for line in lines[1:]
        ]

    @property
    def headers(self) -> dict:
        return dict(self.header_list)

    @property
    def header_names(self) -> List[str]:
        return [name for name, _ in self.header_list]


def recv_all(sock: socket.socket) -> bytes:
    """Read until the peer closes."""
    chunks = []
    while True:
        data = sock.recv(65536)
        if not data:
            return b"".join(chunks)
        chunks.append(data)


def exchange(handler: ConnectionHandler, raw_request: bytes) -> bytes:
    """
    Drive ConnectionHandler over a socketpair.

    The handler runs in its own thread, as it would in the server, so
    large responses cannot deadlock against our reads.
    """
    client, server_side = socket.socketpair()
    conn = Connection(socket=server_side, address=("127.0.0.1", 50000))
    thread = threading.Thread(target=handler.handle, args=(conn,), daemon=True)
    thread.start()
    try:
        client.settimeout(5.0)
        if raw_request:
            client.sendall(raw_request)
        client.shutdown(socket.SHUT_WR)
        return recv_all(client)
    finally:
        client.close()
        thread.join(timeout=5.0)


def http_get(port: int, raw_request: bytes) -> bytes:
    """Send a raw request to a running server and read the full response."""
    with socket.create_connection(("127.0.0.1", port), timeout=5.0) as sock:
        sock.sendall(raw_request)
        return recv_all(sock)


# =============================================================================
# RUNNING SERVER
# =============================================================================

class TestServer:
    """Test server helper that runs in a background thread."""

    __test__ = False  # Not a test class, despite the name

    def __init__(self, server: WebServer, port: int):
        self.server = server
        self.port = port
        self._thread: threading.Thread = None

    def start(self):
        """Start server in background thread."""
        self._thread = threading.Thread(target=self.server.start, daemon=True)
        self._thread.start()

        # Wait for server to be ready
        for _ in range(50):  # 5 seconds max
            try:
                with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
                    s.connect(('127.0.0.1', self.port))
                    return
            except ConnectionRefusedError:
                time.sleep(0.1)

        raise RuntimeError("Server failed to start")

    def get(self, raw_request: bytes) -> RawResponse:
        return RawResponse(http_get(self.port, raw_request))

    def stop(self):
        """Stop the server."""
        self.server.stop()

        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=5.0)


@pytest.fixture
def test_server(web_root: Path, free_port: int) -> Generator[TestServer, None, None]:
    """A running server on a free port serving the test web root."""
    server = WebServer(ServerConfig(
        host="127.0.0.1",
        port=free_port,
        web_root=str(web_root),
        log_level="WARNING",
    ))

    test_srv = TestServer(server, free_port)
    test_srv.start()

    yield test_srv

    test_srv.stop()
