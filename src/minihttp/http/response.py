"""
=============================================================================
HTTP RESPONSE MODEL AND BUILDER
=============================================================================

Builds HTTP/1.1 responses and serializes them to the bytes written back on
the socket.

=============================================================================
HTTP RESPONSE ANATOMY
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                     HTTP RESPONSE STRUCTURE                         │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │  ┌─ STATUS LINE ──────────────────────────────────────────────────┐ │
    │  │    HTTP/1.1 404 Not Found\r\n                                  │ │
    │  │    ────┬─── ─┬─ ────┬────                                      │ │
    │  │     Version Code  Phrase                                       │ │
    │  └─────────────────────────────────────────────────────────────────┘ │
    │                                                                      │
    │  ┌─ HEADERS ──────────────────────────────────────────────────────┐ │
    │  │    Content-Type: text/plain\r\n                                │ │
    │  │    Content-Length: 19\r\n                                      │ │
    │  └─────────────────────────────────────────────────────────────────┘ │
    │                                                                      │
    │  ┌─ BLANK LINE ───────────────────────────────────────────────────┐ │
    │  │    \r\n                                                        │ │
    │  └─────────────────────────────────────────────────────────────────┘ │
    │                                                                      │
    │  ┌─ BODY ─────────────────────────────────────────────────────────┐ │
    │  │    404 Not Found: /x                                           │ │
    │  └─────────────────────────────────────────────────────────────────┘ │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
CONTENT-LENGTH IS NEVER GUESSED
=============================================================================

There is no chunked encoding here, so the client finds the end of the body
from Content-Length alone. The header is computed exactly once, by
ResponseBuilder.build(), from len(body). HTTPResponse refuses to exist if
the two disagree, and to_bytes() writes headers as they are.

=============================================================================
IMMUTABILITY
=============================================================================

A response is built once and then only read. HTTPResponse is a frozen
dataclass; adding transport headers (Connection, Server) goes through
with_headers(), which returns a NEW response. Routing the same request
twice therefore yields byte-identical output.

=============================================================================
"""

from dataclasses import dataclass, field, replace
from typing import Dict, Optional, Tuple, Union

from .status_codes import HTTPStatus


HTTP_VERSION = "HTTP/1.1"

TEXT_PLAIN = "text/plain"


@dataclass(frozen=True)
class HTTPResponse:
    """
    An HTTP response ready to be serialized.

    Use ResponseBuilder (or the helpers at the bottom of this module) to
    construct one; they take care of Content-Length.

    =========================================================================
    RESPONSE LIFECYCLE
    =========================================================================

        Router returns          to_bytes()              Connection
        HTTPResponse    ─────►  serializes    ─────►    write() sends
                                                        raw bytes
    =========================================================================
    """

    status: HTTPStatus = HTTPStatus.OK
    headers: Dict[str, str] = field(default_factory=dict)
    body: bytes = b""
    version: str = HTTP_VERSION

    def __post_init__(self):
        declared = self.headers.get("Content-Length")
        if declared is not None and declared != str(len(self.body)):
            raise ValueError(
                f"Content-Length {declared} does not match body length {len(self.body)}"
            )

    @property
    def status_line(self) -> str:
        """
        The HTTP status line, without CRLF.

        Format: HTTP-VERSION SP STATUS-CODE SP REASON-PHRASE
        Example: "HTTP/1.1 200 OK"
        """
        return f"{self.version} {int(self.status)} {self.status.phrase}"

    @property
    def content_type(self) -> Optional[str]:
        return self.headers.get("Content-Type")

    def with_headers(self, **extra: str) -> "HTTPResponse":
        """
        Return a copy with additional headers.

        Keyword names use underscores for dashes:
            response.with_headers(Connection="close", X_Served_By="a")
        """
        headers = dict(self.headers)
        for name, value in extra.items():
            headers[name.replace("_", "-")] = value
        return replace(self, headers=headers)

    def to_bytes(self) -> bytes:
        """
        Serialize the response for sending over the socket.

        =====================================================================
        SERIALIZATION FORMAT
        =====================================================================

            HTTP/1.1 200 OK\r\n          ← Status line
            Content-Type: text/plain\r\n
            Content-Length: 24\r\n
            \r\n                         ← Empty line (separator)
            Welcome to the homepage!     ← Body bytes

        =====================================================================
        """
        lines = [self.status_line]
        for name, value in self.headers.items():
            lines.append(f"{name}: {value}")

        head = ("\r\n".join(lines) + "\r\n\r\n").encode("latin-1", errors="replace")
        return head + self.body


class ResponseBuilder:
    """
    Fluent builder for HTTP responses.

    ==========================================================================
    THE BUILDER PATTERN
    ==========================================================================

        response = (ResponseBuilder()
            .status(HTTPStatus.NOT_FOUND)
            .text("404 Not Found: /missing")
            .build())

    Each setter returns the builder so calls chain. build() is the one
    place Content-Length gets computed.

    ==========================================================================
    """

    def __init__(self):
        self._status = HTTPStatus.OK
        self._headers: Dict[str, str] = {}
        self._body = b""

    def status(self, status: HTTPStatus) -> "ResponseBuilder":
        self._status = HTTPStatus(status)
        return self

    def header(self, name: str, value: str) -> "ResponseBuilder":
        """Set a response header. Content-Length is ignored; build() owns it."""
        if name.lower() != "content-length":
            self._headers[name] = value
        return self

    def content_type(self, content_type: str) -> "ResponseBuilder":
        return self.header("Content-Type", content_type)

    def body(self, body: Union[str, bytes]) -> "ResponseBuilder":
        """Set the body. Strings are encoded as UTF-8."""
        self._body = body.encode("utf-8") if isinstance(body, str) else bytes(body)
        return self

    def text(self, text: Union[str, bytes], content_type: str = TEXT_PLAIN) -> "ResponseBuilder":
        """Plain text body. Bytes pass through untouched (used for echoes)."""
        return self.content_type(content_type).body(text)

    def build(self) -> HTTPResponse:
        """
        Construct the HTTPResponse.

        Content-Type defaults to application/octet-stream when a handler
        never set one, so the header is always present.
        """
        headers = dict(self._headers)
        headers.setdefault("Content-Type", "application/octet-stream")
        headers["Content-Length"] = str(len(self._body))
        return HTTPResponse(status=self._status, headers=headers, body=self._body)


# =============================================================================
# STATUS LINE PARSING
# =============================================================================

def parse_status_line(line: Union[str, bytes]) -> Tuple[str, HTTPStatus, str]:
    """
    Split a status line back into (version, status, phrase).

    Accepts the line with or without its trailing CRLF, or a whole
    serialized response (only the first line is read).

    Raises:
        ValueError: If the line is not "VERSION CODE PHRASE".
    """
    if isinstance(line, bytes):
        line = line.decode("latin-1")
    first = line.split("\r\n", 1)[0]
    parts = first.split(" ", 2)
    if len(parts) != 3 or not parts[1].isdigit():
        raise ValueError(f"Invalid status line: {first!r}")
    version, code, phrase = parts
    return version, HTTPStatus(int(code)), phrase


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================
#
# One-liners for the responses the router and handlers produce.
#
#     return ok("Welcome to the homepage!")
#     return not_found("404 Not Found: /missing")
#
# =============================================================================

def ok(body: Union[str, bytes] = "", content_type: str = TEXT_PLAIN) -> HTTPResponse:
    """200 OK with the given body."""
    return ResponseBuilder().status(HTTPStatus.OK).text(body, content_type).build()


def bad_request(message: str = "400 Bad Request") -> HTTPResponse:
    return ResponseBuilder().status(HTTPStatus.BAD_REQUEST).text(message).build()


def not_found(message: str = "404 Not Found") -> HTTPResponse:
    return ResponseBuilder().status(HTTPStatus.NOT_FOUND).text(message).build()


def method_not_allowed(message: str, allowed_methods: Tuple[str, ...]) -> HTTPResponse:
    """
    405 Method Not Allowed.

    Includes the Allow header listing valid methods (RFC 9110 §15.5.6).
    """
    return (ResponseBuilder()
        .status(HTTPStatus.METHOD_NOT_ALLOWED)
        .header("Allow", ", ".join(allowed_methods))
        .text(message)
        .build())


def unsupported_media_type(message: str) -> HTTPResponse:
    return ResponseBuilder().status(HTTPStatus.UNSUPPORTED_MEDIA_TYPE).text(message).build()


def internal_error(message: str = "500 Internal Server Error") -> HTTPResponse:
    """500 Internal Server Error. Keep the message generic; causes go to the log."""
    return ResponseBuilder().status(HTTPStatus.INTERNAL_SERVER_ERROR).text(message).build()

