"""
=============================================================================
HTTP STATUS CODES
=============================================================================

The status codes this server can emit, with their reason phrases.

A static file server speaking HTTP/1.0 needs very few of them:

    ┌──────┬───────────────────┬──────────────────────────────────────────┐
    │ Code │ Reason phrase     │ When                                     │
    ├──────┼───────────────────┼──────────────────────────────────────────┤
    │ 200  │ OK                │ File found, readable, streamed           │
    │ 400  │ Bad Request       │ Malformed request line / not HTTP        │
    │ 403  │ Forbidden         │ ".." in the path, escape, unreadable     │
    │ 404  │ Not Found         │ Missing file or not a regular file       │
    │ 501  │ Not Implemented   │ Any method other than GET                │
    └──────┴───────────────────┴──────────────────────────────────────────┘

No other code is ever produced by the request pipeline.

=============================================================================
"""

from enum import IntEnum


class HTTPStatus(IntEnum):
    """
    HTTP status codes and reason phrases.

    This enum extends IntEnum, so status codes can be used as integers:

        >>> HTTPStatus.OK
        <HTTPStatus.OK: 200>
        >>> HTTPStatus.OK == 200
        True
        >>> HTTPStatus.OK.phrase
        'OK'
    """

    # 2xx SUCCESS
    OK = 200

    # 4xx CLIENT ERRORS
    BAD_REQUEST = 400           # Malformed request line
    FORBIDDEN = 403             # Traversal attempt or unreadable file
    NOT_FOUND = 404             # Resource doesn't exist

    # 5xx SERVER ERRORS
    NOT_IMPLEMENTED = 501       # Method other than GET

    @property
    def phrase(self) -> str:
        """
        Get the reason phrase for this status code.

            HTTP/1.0 404 Not Found
                     ─── ─────────
                      │      │
                      │      └── Reason phrase
                      └───────── Status code
        """
        return _STATUS_PHRASES[self]


_STATUS_PHRASES = {
    HTTPStatus.OK: "OK",
    HTTPStatus.BAD_REQUEST: "Bad Request",
    HTTPStatus.FORBIDDEN: "Forbidden",
    HTTPStatus.NOT_FOUND: "Not Found",
    HTTPStatus.NOT_IMPLEMENTED: "Not Implemented",
}
