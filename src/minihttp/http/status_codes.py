"""
=============================================================================
HTTP STATUS CODES
=============================================================================

The status codes this server can put on the wire, with their canonical
reason phrases (RFC 9110).

=============================================================================
WHICH CODES, AND WHY ONLY THESE
=============================================================================

Every connection ends in exactly one response, and the request pipeline
can only produce a handful of outcomes:

    ┌────────┬───────────────────────────────────────────────────────────┐
    │  200   │ Welcome page, static file found, POST body accepted      │
    ├────────┼───────────────────────────────────────────────────────────┤
    │  400   │ Start line could not be parsed                           │
    │  404   │ No route for the path, or static file missing            │
    │  405   │ Method other than GET or POST                            │
    │  415   │ POST body with a Content-Type we do not accept           │
    ├────────┼───────────────────────────────────────────────────────────┤
    │  500   │ Static file exists but could not be read                 │
    └────────┴───────────────────────────────────────────────────────────┘

The enum is an IntEnum so a status compares equal to its number:

    >>> HTTPStatus.NOT_FOUND == 404
    True

=============================================================================
"""

from enum import IntEnum


class HTTPStatus(IntEnum):
    """
    HTTP status codes with reason phrases.

    Each member exposes `.phrase`, the text that follows the code in the
    status line:

        HTTP/1.1 415 Unsupported Media Type
                 ─── ──────────────────────
                  │            │
                  │            └── phrase
                  └─────────────── int(status)
    """

    # 2xx SUCCESS
    OK = 200

    # 4xx CLIENT ERRORS
    BAD_REQUEST = 400                   # Start line malformed
    NOT_FOUND = 404                     # Unknown path / missing file
    METHOD_NOT_ALLOWED = 405            # Anything but GET and POST
    UNSUPPORTED_MEDIA_TYPE = 415        # POST body type not understood

    # 5xx SERVER ERRORS
    INTERNAL_SERVER_ERROR = 500         # Static file unreadable

    @property
    def phrase(self) -> str:
        """Canonical reason phrase for the status line."""
        return _STATUS_PHRASES[self]

    @property
    def is_success(self) -> bool:
        return 200 <= self < 300

    @property
    def is_client_error(self) -> bool:
        return 400 <= self < 500

    @property
    def is_server_error(self) -> bool:
        return 500 <= self < 600

    @property
    def is_error(self) -> bool:
        """True for 4xx and 5xx."""
        return self >= 400


_STATUS_PHRASES = {
    HTTPStatus.OK: "OK",
    HTTPStatus.BAD_REQUEST: "Bad Request",
    HTTPStatus.NOT_FOUND: "Not Found",
    HTTPStatus.METHOD_NOT_ALLOWED: "Method Not Allowed",
    HTTPStatus.UNSUPPORTED_MEDIA_TYPE: "Unsupported Media Type",
    HTTPStatus.INTERNAL_SERVER_ERROR: "Internal Server Error",
}
