"""
=============================================================================
CONNECTION HANDLER
=============================================================================

Runs the whole request/response pipeline for one accepted connection,
inside that connection's own thread.

=============================================================================
PIPELINE
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                  ConnectionHandler.handle(conn)                     │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   with conn:                         ← closed on EVERY exit path    │
    │       │                                                              │
    │       ├──► read request line                                         │
    │       │       EOF / empty ──────────► close, send nothing           │
    │       │       too long ─────────────► 400                           │
    │       │                                                              │
    │       ├──► read + log headers until blank line (never interpreted)  │
    │       │                                                              │
    │       ├──► parse_request_line()                                     │
    │       │       < 3 tokens ───────────► 400                           │
    │       │       not "HTTP/..." ───────► 400                           │
    │       │       not GET ──────────────► 501                           │
    │       │                                                              │
    │       ├──► StaticFileHandler.handle()  → 200 / 403 / 404            │
    │       │                                                              │
    │       └──► ResponseWriter.send()  + access log line                 │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
ERRORS
=============================================================================

Protocol and resource problems become HTTP error pages; they never crash
the thread. Transport problems (client vanished, read timeout, file cut
short mid-stream) are logged and the connection is abandoned: once the
status line is sent there is no way to report anything else to the client.
Nothing escapes handle(), so one bad connection never affects another.

=============================================================================
"""

import logging
from typing import Optional

from ..core.connection import Connection, ConnectionState
from ..http.request import HTTPParseError, parse_request_line
from ..http.response import (
    HTTPResponse,
    ResponseWriter,
    DEFAULT_CHUNK_SIZE,
    DEFAULT_SERVER_NAME,
    error_response,
)
from .static import StaticFileHandler


logger = logging.getLogger(__name__)

# One line per response, like a web server access log
access_logger = logging.getLogger("webserver.access")


class ConnectionHandler:
    """
    Handles exactly one request per connection.

    Holds no per-connection state, so a single instance is shared by every
    connection thread.

    Usage:
        handler = ConnectionHandler(StaticFileHandler("/srv/www"))
        threading.Thread(target=handler.handle, args=(conn,)).start()
    """

    def __init__(
        self,
        static_handler: StaticFileHandler,
        server_name: str = DEFAULT_SERVER_NAME,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ):
        self.static_handler = static_handler
        self.server_name = server_name
        self.chunk_size = chunk_size

    @classmethod
    def from_config(cls, config) -> "ConnectionHandler":
        return cls(
            StaticFileHandler.from_config(config),
            server_name=config.server_name,
            chunk_size=config.chunk_size,
        )

    def handle(self, conn: Connection) -> None:
        """
        Process one connection and close it. Never raises.

        Args:
            conn: The accepted client connection.
        """
        with conn:
            try:
                self._process(conn)
            except OSError as e:
                # Client went away, read timed out, or a file came up short
                logger.warning(
                    f"[{conn.id}] Connection with {conn.client_ip}:{conn.client_port} "
                    f"abandoned: {e}"
                )
            except Exception:
                logger.exception(f"[{conn.id}] Unexpected error handling connection")

    def _process(self, conn: Connection):
        writer = ResponseWriter(conn.wfile, self.server_name, self.chunk_size)

        # ─────────────────────────────────────────────────────────────────
        # STEP 1: Request line
        # ─────────────────────────────────────────────────────────────────
        try:
            line = conn.read_line()
        except HTTPParseError as e:
            logger.info(f"[{conn.id}] Rejected request: {e}")
            self._send(conn, writer, error_response(e.status_code, self.server_name), "")
            return

        if not line:
            # Idle or aborted connection: nothing to answer
            logger.debug(f"[{conn.id}] No request line, closing")
            return

        logger.info(f"[{conn.id}] Request line: {line}")

        # ─────────────────────────────────────────────────────────────────
        # STEP 2: Headers (logged, not interpreted)
        # ─────────────────────────────────────────────────────────────────
        for header in conn.read_headers():
            logger.debug(f"[{conn.id}]   {header}")

        # ─────────────────────────────────────────────────────────────────
        # STEP 3: Validate method and protocol
        # ─────────────────────────────────────────────────────────────────
        try:
            request = parse_request_line(line, conn.address)
        except HTTPParseError as e:
            logger.info(f"[{conn.id}] Rejected request: {e}")
            response = error_response(e.status_code, self.server_name, source=line)
            self._send(conn, writer, response, line)
            return

        # ─────────────────────────────────────────────────────────────────
        # STEP 4: Resolve and respond
        # ─────────────────────────────────────────────────────────────────
        response = self.static_handler.handle(request)
        self._send(conn, writer, response, request.request_line)

    def _send(
        self,
        conn: Connection,
        writer: ResponseWriter,
        response: HTTPResponse,
        request_line: Optional[str],
    ):
        """Write the response and log it."""
        conn.state = ConnectionState.WRITING
        sent = writer.send(response)

        access_logger.info(
            f'{conn.client_ip}:{conn.client_port} "{request_line}" '
            f"{int(response.status)} {response.reason} - {response.source or '-'} "
            f"({sent} bytes)"
        )
