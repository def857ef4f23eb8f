"""
=============================================================================
HTTP RESPONSE FRAMING
=============================================================================

Builds HTTP/1.0 responses and writes them onto a connection.

=============================================================================
HTTP RESPONSE ANATOMY
=============================================================================

Every response this server sends has exactly the same shape:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                     HTTP RESPONSE STRUCTURE                         │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   HTTP/1.0 200 OK\r\n                     ← status line             │
    │   Server: WebServer/1.0\r\n               ┐                         │
    │   Date: Thu, 15 Jan 2026 12:30:45 GMT\r\n │                         │
    │   Content-Type: text/html\r\n             │ fixed header set,       │
    │   Content-Length: 1337\r\n                │ always in this order    │
    │   Connection: close\r\n                   ┘                         │
    │   \r\n                                    ← end of headers          │
    │   <!DOCTYPE html>...                      ← body (exactly           │
    │                                              Content-Length bytes)  │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

Two invariants hold for every response:

1. Content-Length is the exact number of body bytes we transmit.
   HTTP/1.0 clients may also read until EOF, but a correct length lets
   them detect truncation.

2. There is exactly one "Connection: close" header. One request per
   connection, no keep-alive is ever offered, even if the client asks.

=============================================================================
TWO KINDS OF BODY
=============================================================================

    In-memory bytes          Streaming file handle
    ───────────────          ─────────────────────
    Error pages              Static files (any size)
    write_body()             write_file()
    one write                copied in fixed-size chunks

Files are never read into memory in one go. Memory per connection is
bounded by the chunk size no matter how large the file is.

Once the status line is on the wire it cannot be taken back. If a file
comes up short mid-stream, or the client disappears, we raise and the
connection is abandoned. Nothing is retried.

=============================================================================
"""

import os
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import BinaryIO, Optional

from .status_codes import HTTPStatus


HTTP_VERSION = "HTTP/1.0"
DEFAULT_SERVER_NAME = "WebServer/1.0"
DEFAULT_CHUNK_SIZE = 4096

HTML_CONTENT_TYPE = "text/html; charset=utf-8"

# Header bytes are ISO-8859-1 on the wire
HEADER_ENCODING = "iso-8859-1"


@dataclass
class HTTPResponse:
    """
    A response waiting to be written.

    Built by the static file handler, consumed exactly once by
    ResponseWriter.send(), then discarded. When ``file`` is set it is the
    body source and the writer closes it after streaming.

    Attributes:
        status: HTTP status code.
        content_type: Value of the Content-Type header.
        body: In-memory body (used when ``file`` is None).
        file: Open binary file to stream instead of ``body``.
        content_length: Byte count to stream from ``file``.
        source: What is being served (file name or resource), for logging.
    """

    status: HTTPStatus = HTTPStatus.OK
    content_type: str = HTML_CONTENT_TYPE
    body: bytes = b""
    file: Optional[BinaryIO] = field(default=None, repr=False)
    content_length: Optional[int] = None
    source: str = ""

    @property
    def reason(self) -> str:
        return self.status.phrase

    @property
    def is_streamed(self) -> bool:
        return self.file is not None

    def close(self):
        """Release the file handle, if any. Safe to call twice."""
        if self.file is not None:
            self.file.close()


class ResponseWriter:
    """
    Serializes responses onto a connection's output stream.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                        ResponseWriter                               │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   send(response)                                                     │
    │       │                                                              │
    │       ├── file?  ──► write_file()   head + chunked copy + flush     │
    │       │                                                              │
    │       └── bytes? ──► write_body()   head + body + flush             │
    │                                                                      │
    │   _write_head()      status line, 5 headers, blank line             │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

    Usage:
        writer = ResponseWriter(conn.wfile, server_name="WebServer/1.0")
        writer.write_body(404, "Not Found", "text/html", b"<h1>404</h1>")
    """

    def __init__(
        self,
        wfile: BinaryIO,
        server_name: str = DEFAULT_SERVER_NAME,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ):
        """
        Args:
            wfile: Writable binary stream (usually socket.makefile("wb")).
            server_name: Value of the Server header.
            chunk_size: Bytes copied per read when streaming a file.
        """
        self.wfile = wfile
        self.server_name = server_name
        self.chunk_size = chunk_size

    def send(self, response: HTTPResponse) -> int:
        """
        Write a complete response and release its file handle.

        Returns:
            Number of body bytes written.
        """
        try:
            if response.is_streamed:
                return self.write_file(
                    response.status,
                    response.reason,
                    response.content_type,
                    response.file,
                    response.content_length,
                )
            return self.write_body(
                response.status,
                response.reason,
                response.content_type,
                response.body,
            )
        finally:
            response.close()

    def write_body(
        self,
        status: int,
        reason: str,
        content_type: str,
        body: bytes,
    ) -> int:
        """
        Write a response whose body is already in memory.

        Returns:
            Number of body bytes written.
        """
        self._write_head(status, reason, content_type, len(body))
        self.wfile.write(body)
        self.wfile.flush()
        return len(body)

    def write_file(
        self,
        status: int,
        reason: str,
        content_type: str,
        file: BinaryIO,
        content_length: Optional[int] = None,
    ) -> int:
        """
        Write a response streaming its body from an open file.

        Content-Length is taken from ``content_length`` or, when omitted,
        from the file's size. Exactly that many bytes are copied, in chunks
        of ``chunk_size``, even if the file grows while we read it.

        Returns:
            Number of body bytes written.

        Raises:
            OSError: If the file ends before ``content_length`` bytes, or
                     on any read/write failure. Bytes already sent stay sent.
        """
        if content_length is None:
            content_length = os.fstat(file.fileno()).st_size

        self._write_head(status, reason, content_type, content_length)

        remaining = content_length
        while remaining > 0:
            chunk = file.read(min(self.chunk_size, remaining))
            if not chunk:
                raise OSError(
                    f"File ended {remaining} bytes short of Content-Length {content_length}"
                )
            self.wfile.write(chunk)
            remaining -= len(chunk)

        self.wfile.flush()
        return content_length

    def _write_head(self, status: int, reason: str, content_type: str, content_length: int):
        """Write the status line and the fixed header set."""
        lines = [
            f"{HTTP_VERSION} {int(status)} {reason}",
            f"Server: {self.server_name}",
            f"Date: {format_http_date(datetime.now(timezone.utc))}",
            f"Content-Type: {content_type}",
            f"Content-Length: {content_length}",
            "Connection: close",
            "",  # Empty line separates headers from body
        ]
        self.wfile.write("\r\n".join(lines).encode(HEADER_ENCODING) + b"\r\n")


# =============================================================================
# UTILITY FUNCTIONS
# =============================================================================

def format_http_date(dt: datetime) -> str:
    """
    Format a datetime as an HTTP-date (RFC 1123).

    Format: Day, DD Mon YYYY HH:MM:SS GMT
    Example: Thu, 15 Jan 2026 12:30:45 GMT

    HTTP dates are ALWAYS in GMT. We spell out day and month names
    ourselves because strftime("%a") follows the process locale.

    Args:
        dt: Datetime to format (aware datetimes are converted to UTC).

    Returns:
        Formatted date string.
    """
    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc)

    # Weekday names (0=Monday in Python's datetime)
    days = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]

    # Month names (1-indexed, so we subtract 1)
    months = ["Jan", "Feb", "Mar", "Apr", "May", "Jun",
              "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]

    return (
        f"{days[dt.weekday()]}, "
        f"{dt.day:02d} {months[dt.month - 1]} {dt.year} "
        f"{dt.hour:02d}:{dt.minute:02d}:{dt.second:02d} GMT"
    )


# =============================================================================
# ERROR PAGES
# =============================================================================
#
# Generated HTML bodies for every non-200 status. They name the status and
# the server, never the requested path (no reflected input).
#
# =============================================================================

_ERROR_PAGE = (
    "<!DOCTYPE html>\r\n"
    "<html><head><title>{code} {reason}</title></head>\r\n"
    "<body><h1>{code} - {reason}</h1>\r\n"
    "<hr><p><em>{server}</em></p></body></html>"
)

_NOT_FOUND_PAGE = (
    "<!DOCTYPE html>\r\n"
    "<html><head><title>404 Not Found</title></head>\r\n"
    "<body><h1>404 - File Not Found</h1>\r\n"
    "<p>The requested resource does not exist on this server.</p>\r\n"
    "<hr><p><em>{server}</em></p></body></html>"
)


def error_response(
    status: HTTPStatus,
    server_name: str = DEFAULT_SERVER_NAME,
    source: str = "",
) -> HTTPResponse:
    """
    Create an error response with a generated HTML page.

    404 gets the friendlier "File Not Found" page; every other status gets
    the generic "<code> - <reason>" page.

    Args:
        status: Error status (400, 403, 404, 501).
        server_name: Shown in the page footer.
        source: Resource the error is about, for logging only.

    Returns:
        HTTPResponse with an in-memory HTML body.
    """
    if status == HTTPStatus.NOT_FOUND:
        html = _NOT_FOUND_PAGE.format(server=server_name)
    else:
        html = _ERROR_PAGE.format(code=int(status), reason=status.phrase, server=server_name)

    return HTTPResponse(
        status=status,
        content_type=HTML_CONTENT_TYPE,
        body=html.encode("utf-8"),
        source=source,
    )


def forbidden(server_name: str = DEFAULT_SERVER_NAME, source: str = "") -> HTTPResponse:
    """403 Forbidden: traversal attempt or unreadable file."""
    return error_response(HTTPStatus.FORBIDDEN, server_name, source)


def not_found(server_name: str = DEFAULT_SERVER_NAME, source: str = "") -> HTTPResponse:
    """404 Not Found with the generated default page."""
    return error_response(HTTPStatus.NOT_FOUND, server_name, source)
