"""
=============================================================================
HTTP REQUEST LINE PARSING
=============================================================================

Turns the first line of an HTTP/1.0 request into a structured value.

=============================================================================
WHAT WE ACTUALLY READ
=============================================================================

A client sends:

    GET /images/logo.png HTTP/1.0\r\n      ← REQUEST LINE (parsed here)
    Host: localhost:8080\r\n               ← headers (read, logged, ignored)
    User-Agent: curl/8.0\r\n
    \r\n                                   ← end of headers

Only the request line matters to a static file server. It has three
space-separated tokens:

    GET   /images/logo.png   HTTP/1.0
    ─┬─   ────────┬───────   ────┬───
     │            │              │
   Method     Resource       Protocol

Headers are never interpreted (no Host, no If-Modified-Since) and no
body is ever read, because GET requests do not carry one.

=============================================================================
VALIDATION ORDER
=============================================================================

The checks run in a fixed order and the first failure wins:

    1. Fewer than 3 tokens             → 400 Bad Request
    2. Protocol not starting "HTTP/"   → 400 Bad Request
    3. Method is not GET (any case)    → 501 Not Implemented

So "POST / FTP/1.0" is a 400 (protocol checked first), not a 501.

=============================================================================
"""

from dataclasses import dataclass
from typing import Optional, Tuple

from .status_codes import HTTPStatus


# The one retrieval method this server implements
SUPPORTED_METHOD = "GET"

# Every protocol token must start with this literal
PROTOCOL_PREFIX = "HTTP/"


class HTTPParseError(Exception):
    """
    Raised when the request line cannot be accepted.

    Carries the HTTP status that should be returned to the client:

        400 Bad Request      - malformed line or non-HTTP protocol
        501 Not Implemented  - method other than GET
    """

    def __init__(self, message: str, status_code: HTTPStatus = HTTPStatus.BAD_REQUEST):
        super().__init__(message)
        self.status_code = status_code


@dataclass(frozen=True)
class HTTPRequest:
    """
    A parsed request line.

    Immutable: built once per connection and thrown away when the
    connection closes.

    Attributes:
        method: HTTP method as received (e.g. "GET", "get").
        resource_path: Resource as received. May still contain ".." at this
                       point; traversal is rejected later.
        protocol_version: Protocol token (e.g. "HTTP/1.0").
        request_line: The raw line, kept for logging.
        client_address: Peer (ip, port), if known.
    """

    method: str
    resource_path: str
    protocol_version: str
    request_line: str = ""
    client_address: Optional[Tuple[str, int]] = None

    @property
    def client_ip(self) -> str:
        """Client IP address, or "-" when unknown (access log convention)."""
        return self.client_address[0] if self.client_address else "-"


def parse_request_line(
    line: str,
    client_address: Optional[Tuple[str, int]] = None,
) -> HTTPRequest:
    """
    Parse and validate a request line.

    Tokens are split on any run of whitespace. Extra tokens after the
    protocol are ignored, which is what lenient HTTP/1.0 servers did.

    Args:
        line: The request line without its trailing CRLF.
        client_address: Peer address to attach to the request.

    Returns:
        The parsed HTTPRequest.

    Raises:
        HTTPParseError: With status 400 or 501, see module docstring.

    Examples:
        >>> parse_request_line("GET /index.html HTTP/1.0").resource_path
        '/index.html'
    """
    parts = line.split()
    if len(parts) < 3:
        raise HTTPParseError(f"Invalid request line: {line!r}")

    method, resource, protocol = parts[0], parts[1], parts[2]

    if not protocol.startswith(PROTOCOL_PREFIX):
        raise HTTPParseError(f"Unsupported protocol: {protocol!r}")

    if method.upper() != SUPPORTED_METHOD:
        raise HTTPParseError(
            f"Method not implemented: {method!r}",
            status_code=HTTPStatus.NOT_IMPLEMENTED,
        )

    return HTTPRequest(
        method=method,
        resource_path=resource,
        protocol_version=protocol,
        request_line=line,
        client_address=client_address,
    )
