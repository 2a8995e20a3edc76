"""
=============================================================================
HTTP REQUEST PARSER
=============================================================================

Turns the bytes from a single socket read into a structured HTTPRequest.

=============================================================================
HTTP REQUEST ANATOMY
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                     HTTP REQUEST STRUCTURE                          │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │  ┌─ START LINE ───────────────────────────────────────────────────┐ │
    │  │    POST /submit?src=form HTTP/1.1\r\n                          │ │
    │  │    ─┬── ────────┬─────── ────┬───                              │ │
    │  │   Method    Target        Version                              │ │
    │  │            ┌────┴─────┐                                        │ │
    │  │          Path       Query                                      │ │
    │  │        /submit     src=form                                    │ │
    │  └─────────────────────────────────────────────────────────────────┘ │
    │                                                                      │
    │  ┌─ HEADERS ──────────────────────────────────────────────────────┐ │
    │  │    Content-Type: application/json\r\n                          │ │
    │  │    Content-Length: 15\r\n                                      │ │
    │  └─────────────────────────────────────────────────────────────────┘ │
    │                                                                      │
    │  ┌─ BLANK LINE ───────────────────────────────────────────────────┐ │
    │  │    \r\n                                                        │ │
    │  └─────────────────────────────────────────────────────────────────┘ │
    │                                                                      │
    │  ┌─ BODY (optional) ──────────────────────────────────────────────┐ │
    │  │    {"key":"value"}                                             │ │
    │  └─────────────────────────────────────────────────────────────────┘ │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
HOW FORGIVING IS THE PARSER?
=============================================================================

Only two things are fatal:

    1. Zero bytes                         → HTTPParseError(EMPTY_REQUEST)
    2. Start line with < 3 tokens         → HTTPParseError(MALFORMED_START_LINE)

Everything else is accepted as-is:

    • Header lines without a colon are skipped, not rejected.
    • Unknown methods are kept verbatim; the router decides what to do.
    • The version token is not validated, Host is not required.
    • A buffer cut off before the blank line still parses; whatever header
      lines arrived are kept and there is no body.

=============================================================================
THE BODY IS WHATEVER WAS READ
=============================================================================

The connection reads once. Everything after the blank line, up to the end
of that read, is the body, verbatim. Content-Length is NOT consulted:

    POST /submit HTTP/1.1\r\n
    Content-Length: 1000\r\n         ← claims 1000 bytes
    \r\n
    {"a":1}                          ← body is these 7 bytes, no error

A client that sends more than one read's worth gets a truncated body. Fixing
that means a read loop with real body framing, not a parser tweak.

=============================================================================
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional
import logging

from .headers import Headers


logger = logging.getLogger(__name__)


class ParseErrorKind(Enum):
    """Why a buffer could not become a request."""
    EMPTY_REQUEST = "empty_request"                  # Zero bytes read
    MALFORMED_START_LINE = "malformed_start_line"    # Fewer than 3 tokens


class HTTPParseError(Exception):
    """
    Raised when a buffer cannot be parsed into a request.

    Carries the failure kind and the status code a best-effort error
    response should use. The server closes EMPTY_REQUEST connections
    silently (the client already hung up) and answers
    MALFORMED_START_LINE with 400.
    """

    def __init__(self, message: str, kind: ParseErrorKind, status_code: int = 400):
        super().__init__(message)
        self.kind = kind
        self.status_code = status_code


@dataclass
class HTTPRequest:
    """
    A parsed HTTP request.

    =========================================================================
    FIELDS
    =========================================================================

        method:         Start-line method token, case preserved.
                        "GET" and "POST" are dispatched; anything else
                        is kept for the 405 message.

        path:           Request-target up to the first "?".
                        Never percent-decoded, never normalized.
                        "/static/a%20b.txt" stays exactly that.

        query:          Raw text after the first "?" ("" if none).

        version:        Third start-line token, unchecked.

        headers:        Headers container, lowercase keys,
                        last duplicate wins.

        body:           Bytes after the blank line, or None when
                        nothing followed it.

        client_address: (ip, port) of the peer, for logging.

        raw:            The exact bytes that were parsed.

    =========================================================================
    """

    method: str
    path: str
    version: str = "HTTP/1.1"
    query: str = ""
    headers: Headers = field(default_factory=Headers)
    body: Optional[bytes] = None

    client_address: tuple[str, int] = ("", 0)
    raw: bytes = field(default=b"", repr=False)

    def __post_init__(self):
        if not isinstance(self.headers, Headers):
            self.headers = Headers(self.headers)

    @property
    def content_type(self) -> Optional[str]:
        """
        Media type token of the Content-Type header.

        Parameters are stripped and the token lower-cased:
            "Application/JSON; charset=utf-8" → "application/json"

        None when the header is missing or empty.
        """
        value = self.headers.get("content-type", "")
        token = value.split(";", 1)[0].strip().lower()
        return token or None

    @property
    def target(self) -> str:
        """The request-target as it appeared on the start line."""
        return f"{self.path}?{self.query}" if self.query else self.path

    def get_header(self, name: str, default: str = "") -> str:
        """Case-insensitive header lookup."""
        return self.headers.get(name, default)


class RequestParser:
    """
    Parses raw request bytes into HTTPRequest objects.

    ==========================================================================
    PARSER STEPS
    ==========================================================================

        Raw bytes
            │
            ▼
        1. Empty? ─────────────────────────► HTTPParseError(EMPTY_REQUEST)
            │
            ▼
        2. Split at first \r\n\r\n  →  head | body
            │   (no separator: whole buffer is head, no body)
            ▼
        3. Start line = head up to first \r\n
            │   < 3 tokens ────────────────► HTTPParseError(MALFORMED_START_LINE)
            ▼
        4. Remaining head lines → Headers (colon-less lines skipped)
            │
            ▼
        5. HTTPRequest(method, path, query, version, headers, body)

    ==========================================================================
    """

    HEADER_TERMINATOR = b"\r\n\r\n"
    LINE_TERMINATOR = "\r\n"

    def parse(
        self,
        data: bytes,
        client_address: tuple[str, int] = ("", 0),
    ) -> HTTPRequest:
        """
        Parse raw HTTP request data.

        Args:
            data: Bytes from one socket read.
            client_address: Peer (ip, port), stored on the request.

        Returns:
            The parsed HTTPRequest.

        Raises:
            HTTPParseError: On an empty buffer or malformed start line.
        """
        if not data:
            raise HTTPParseError("Empty request", ParseErrorKind.EMPTY_REQUEST)

        # =====================================================================
        # STEP 1: Split head and body at the blank line
        # =====================================================================
        head_bytes, separator, body_bytes = data.partition(self.HEADER_TERMINATOR)
        if not separator:
            # Short read: no blank line arrived. Everything is head.
            body_bytes = b""

        head = head_bytes.decode("utf-8", errors="replace")
        start_line, _, header_block = head.partition(self.LINE_TERMINATOR)

        # =====================================================================
        # STEP 2: Start line
        # =====================================================================
        method, path, query, version = self._parse_start_line(start_line)

        # =====================================================================
        # STEP 3: Headers
        # =====================================================================
        headers = self._parse_headers(header_block.split(self.LINE_TERMINATOR))

        return HTTPRequest(
            method=method,
            path=path,
            version=version,
            query=query,
            headers=headers,
            body=body_bytes or None,
            client_address=client_address,
            raw=data,
        )

    def _parse_start_line(self, line: str) -> tuple[str, str, str, str]:
        """
        Split "METHOD TARGET VERSION" into its parts.

        Tokens are separated by any run of whitespace. Extra tokens after
        the version are ignored. The target is split at the first "?" into
        path and query.

        Returns:
            (method, path, query, version)
        """
        tokens = line.split()
        if len(tokens) < 3:
            raise HTTPParseError(
                f"Malformed start line: {line!r}",
                ParseErrorKind.MALFORMED_START_LINE,
            )

        method, target, version = tokens[:3]
        path, _, query = target.partition("?")
        if not path:
            raise HTTPParseError(
                f"Empty request path in target: {target!r}",
                ParseErrorKind.MALFORMED_START_LINE,
            )

        return method, path, query, version

    def _parse_headers(self, lines: list[str]) -> Headers:
        """
        Parse "Name: Value" lines into a Headers container.

        Lines without a colon (or with nothing before it) are skipped. The
        first empty line ends the block; with a complete head there is none,
        since the blank line was consumed by the head/body split.
        """
        headers = Headers()

        for line in lines:
            if not line:
                break

            name, colon, value = line.partition(":")
            name = name.strip()
            if not colon or not name:
                logger.debug(f"Skipping malformed header line: {line!r}")
                continue

            # Last write wins for duplicates
            headers[name] = value.strip()

        return headers


# =============================================================================
# CONVENIENCE FUNCTION
# =============================================================================

def parse_request(
    data: bytes,
    client_address: tuple[str, int] = ("", 0),
) -> HTTPRequest:
    """Parse a request in one call. See RequestParser.parse."""
    return RequestParser().parse(data, client_address)
