"""
=============================================================================
HTTP PROTOCOL COMPONENTS
=============================================================================

The HTTP/1.0 subset this server speaks:

    request.py       Request line parsing and validation
    response.py      Response model, ResponseWriter, error pages
    status_codes.py  The five status codes we emit
    mime_types.py    Extension → Content-Type table

Nothing in this package touches sockets or the filesystem layout; it only
turns lines into values and values into bytes.

=============================================================================
"""

from .request import HTTPRequest, HTTPParseError, parse_request_line
from .response import (
    HTTPResponse,
    ResponseWriter,
    format_http_date,
    error_response,
    # Shortcuts used by the static file handler
    forbidden,          # 403 Forbidden
    not_found,          # 404 Not Found
)
from .status_codes import HTTPStatus
from .mime_types import get_mime_type

__all__ = [
    # Request parsing
    "HTTPRequest",
    "HTTPParseError",
    "parse_request_line",

    # Response writing
    "HTTPResponse",
    "ResponseWriter",
    "format_http_date",
    "error_response",
    "forbidden",
    "not_found",

    # Status codes
    "HTTPStatus",

    # MIME types
    "get_mime_type",
]
