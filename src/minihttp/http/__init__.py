"""
=============================================================================
HTTP PROTOCOL LAYER
=============================================================================

Everything between raw bytes and a response, with no sockets involved:

    bytes ──► RequestParser ──► HTTPRequest ──► Router ──► HTTPResponse ──► bytes
                                                  │
                                          classify / render
                                                  │
                                  Welcome, ServeStatic, SubmitJson, ...

    request.py       start line, headers and body from one read
    headers.py       case-insensitive header container
    router.py        method + path → outcome → response
    outcomes.py      the closed set of routing decisions
    response.py      response model, builder, helpers
    status_codes.py  the status codes this server emits
    mime_types.py    file extension → Content-Type

=============================================================================
"""

from .status_codes import HTTPStatus
from .headers import Headers
from .mime_types import get_mime_type, DEFAULT_MIME_TYPE
from .request import (
    HTTPRequest,
    RequestParser,
    HTTPParseError,
    ParseErrorKind,
    parse_request,
)
from .response import (
    HTTPResponse,
    ResponseBuilder,
    parse_status_line,
    ok,                      # 200
    bad_request,             # 400
    not_found,               # 404
    method_not_allowed,      # 405
    unsupported_media_type,  # 415
    internal_error,          # 500
)
from .outcomes import (
    RouteOutcome,
    Welcome,
    ServeStatic,
    SubmitJson,
    SubmitForm,
    UnsupportedMedia,
    NotFound,
    MethodNotAllowed,
)
from .router import Router, create_router

__all__ = [
    "HTTPStatus",
    "Headers",
    "get_mime_type",
    "DEFAULT_MIME_TYPE",

    # Request parsing
    "HTTPRequest",
    "RequestParser",
    "HTTPParseError",
    "ParseErrorKind",
    "parse_request",

    # Responses
    "HTTPResponse",
    "ResponseBuilder",
    "parse_status_line",
    "ok",
    "bad_request",
    "not_found",
    "method_not_allowed",
    "unsupported_media_type",
    "internal_error",

    # Routing
    "RouteOutcome",
    "Welcome",
    "ServeStatic",
    "SubmitJson",
    "SubmitForm",
    "UnsupportedMedia",
    "NotFound",
    "MethodNotAllowed",
    "Router",
    "create_router",
]
