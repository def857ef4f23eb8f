"""
=============================================================================
CONNECTION MANAGEMENT
=============================================================================

Wraps one accepted client socket with the line-oriented API the request
handler needs, and guarantees the socket is released.

=============================================================================
TCP IS A BYTE STREAM, NOT A MESSAGE PROTOCOL!
=============================================================================

TCP does NOT preserve message boundaries. The request line

    GET /index.html HTTP/1.0\r\n

may arrive as "GET /ind" followed by "ex.html HTTP/1.0\r\n". We never
call recv() and hope: the socket is wrapped in a buffered file object
(socket.makefile) and we read whole lines from it.

    raw socket ──► makefile("rb") ──► readline() ──► "GET /index.html HTTP/1.0"
                   (buffering)        (up to \n)      (CRLF stripped)

Responses go the other way through makefile("wb"), which batches the
status line, headers and body chunks into few send() calls.

=============================================================================
ONE REQUEST, THEN CLOSE
=============================================================================

HTTP/1.0 without keep-alive is simple: read one request, send one
response, close. The closing sequence still matters:

    1. flush + close the file objects
    2. shutdown(SHUT_WR)      → FIN: "no more data from us"
    3. drain what the client still sends (headers we did not read, a
       body we ignore) so the kernel does not answer with a RST that
       could destroy the response in flight
    4. close()                → release the file descriptor

=============================================================================
"""

import socket
import time
import logging
import uuid
from enum import Enum
from dataclasses import dataclass, field
from typing import BinaryIO, List, Optional

from ..http.request import HTTPParseError


logger = logging.getLogger(__name__)

# How long close() waits for the client to finish sending
DRAIN_TIMEOUT = 0.5


class ConnectionState(Enum):
    """Connection lifecycle states, for logging and idempotent close()."""
    NEW = "new"              # Just accepted, nothing read yet
    READING = "reading"      # Reading the request line and headers
    WRITING = "writing"      # Sending the response
    CLOSED = "closed"        # Socket released


@dataclass
class Connection:
    """
    Represents a client connection.

    Attributes:
        socket: The client socket.
        address: Client's (ip, port) tuple.
        id: Short unique identifier for log lines.
        state: Current connection state.
        created_at: Timestamp when the connection was accepted.
        timeout: Read timeout in seconds (None = block forever).
        max_line_length: Longest request line accepted.
    """

    # Required parameters
    socket: socket.socket
    address: tuple

    # Generated/default parameters
    id: str = field(default_factory=lambda: str(uuid.uuid4())[:8])
    state: ConnectionState = ConnectionState.NEW
    created_at: float = field(default_factory=time.time)

    # Configuration (passed from ServerConfig)
    timeout: Optional[float] = None
    max_line_length: int = 8192

    # Buffered file objects over the socket
    rfile: BinaryIO = field(init=False, repr=False)
    wfile: BinaryIO = field(init=False, repr=False)

    def __post_init__(self):
        # settimeout(None) puts the socket in plain blocking mode
        self.socket.settimeout(self.timeout)
        self.rfile = self.socket.makefile("rb")
        self.wfile = self.socket.makefile("wb")

    @property
    def client_ip(self) -> str:
        return self.address[0]

    @property
    def client_port(self) -> int:
        return self.address[1]

    @property
    def age(self) -> float:
        """Connection age in seconds."""
        return time.time() - self.created_at

    # =========================================================================
    # READING
    # =========================================================================

    def read_line(self) -> Optional[str]:
        """
        Read one line, without its line terminator.

        Accepts CRLF and bare LF; the terminator does not count toward
        max_line_length. Bytes are decoded as UTF-8, with undecodable bytes
        kept as surrogates (the same way os.fsdecode maps file names), so
        a UTF-8 resource names the same file on disk and decoding never
        fails.

        Returns:
            The line, "" for an empty line, or None at end of stream.

        Raises:
            HTTPParseError: If the line is longer than max_line_length.
            OSError: On socket errors (including timeouts).
        """
        self.state = ConnectionState.READING

        # Room for the longest allowed line plus "\r\n"
        raw = self.rfile.readline(self.max_line_length + 2)
        if not raw:
            return None

        line = raw.rstrip(b"\r\n")
        if len(line) > self.max_line_length:
            raise HTTPParseError(f"Line exceeds {self.max_line_length} bytes")

        return line.decode("utf-8", "surrogateescape")

    def read_headers(self) -> List[str]:
        """
        Read header lines up to the empty line (or end of stream).

        Headers are returned for logging only. Over-long header lines are
        consumed in pieces rather than rejected: nothing interprets them.
        """
        headers = []
        while True:
            raw = self.rfile.readline(self.max_line_length + 1)
            line = raw.rstrip(b"\r\n")
            if not line:
                return headers
            headers.append(line.decode("utf-8", "replace"))

    # =========================================================================
    # CLOSING
    # =========================================================================

    def close(self):
        """
        Close the connection. Safe to call more than once.

        Never raises: by the time we close, the client may already be gone.
        """
        if self.state == ConnectionState.CLOSED:
            return

        for stream in (self.wfile, self.rfile):
            try:
                stream.close()  # wfile.close() flushes
            except OSError as e:
                logger.debug(f"[{self.id}] Error closing stream: {e}")

        try:
            self.socket.shutdown(socket.SHUT_WR)
        except OSError:
            pass  # Already disconnected

        try:
            self.socket.settimeout(DRAIN_TIMEOUT)
            while self.socket.recv(1024):
                pass  # Discard anything the client still sends
        except OSError:
            pass  # socket.timeout is an OSError too

        try:
            self.socket.close()
        except OSError:
            pass

        self.state = ConnectionState.CLOSED
        logger.debug(f"[{self.id}] Connection closed after {self.age:.3f}s")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Ensure the connection is closed, whatever happened."""
        self.close()
        return False  # Don't suppress exceptions
