"""
=============================================================================
REQUEST ROUTER
=============================================================================

Maps a parsed request to a response. The router is TOTAL: every request,
however odd its method or path, produces a response. It never raises for
a routing reason.

=============================================================================
TWO STAGES: CLASSIFY, THEN RENDER
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                        ROUTING FLOW                                 │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   HTTPRequest                                                        │
    │       │                                                              │
    │       ▼                                                              │
    │   classify()  ── pure, no I/O ──►  RouteOutcome                      │
    │       │                                                              │
    │       │   GET  /              → Welcome()                            │
    │       │   GET  /static/<p>    → ServeStatic(p)                       │
    │       │   POST /submit        → SubmitJson | SubmitForm |            │
    │       │                         UnsupportedMedia                     │
    │       │   GET|POST  other     → NotFound(path)                       │
    │       │   any other method    → MethodNotAllowed(method)             │
    │       ▼                                                              │
    │   render()  ── table lookup on the outcome's class ──►  HTTPResponse │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

Rules are checked top to bottom, first match wins. Only ServeStatic touches
the filesystem, and only at render time.

=============================================================================
DETERMINISM
=============================================================================

Error bodies are plain functions of the request:

    GET /nope      → 404, "404 Not Found: /nope"
    PUT /          → 405, "405 Method Not Allowed: PUT"

Routing the same request twice gives byte-identical responses (assuming
the static files did not change in between).

=============================================================================
"""

import logging
from typing import Callable, Dict, Optional, Type

from ..handlers import submit
from ..handlers.static import (
    StaticFileIOError,
    StaticFileNotFound,
    StaticFileServer,
)
from .outcomes import (
    OUTCOME_TYPES,
    MethodNotAllowed,
    NotFound,
    RouteOutcome,
    ServeStatic,
    SubmitForm,
    SubmitJson,
    UnsupportedMedia,
    Welcome,
)
from .request import HTTPRequest
from .response import (
    HTTPResponse,
    internal_error,
    method_not_allowed,
    not_found,
    ok,
)


logger = logging.getLogger(__name__)


WELCOME_MESSAGE = "Welcome to the homepage!"

STATIC_PREFIX = "/static/"
SUBMIT_PATH = "/submit"

# Methods that are dispatched at all; anything else is a 405
ALLOWED_METHODS = ("GET", "POST")


class Router:
    """
    Fixed-table HTTP router.

    =========================================================================
    USAGE
    =========================================================================

        router = Router(StaticFileServer("./static"))

        response = router.route(parse_request(raw_bytes))

        # Or look at the decision without producing a response:
        router.classify(request)   # → ServeStatic(path='index.html')

    =========================================================================
    """

    def __init__(self, static_server: StaticFileServer):
        self.static_server = static_server

        # One renderer per outcome class
        self._renderers: Dict[Type, Callable[..., HTTPResponse]] = {
            Welcome: self._render_welcome,
            ServeStatic: self._render_static,
            SubmitJson: submit.render,
            SubmitForm: submit.render,
            UnsupportedMedia: submit.render,
            NotFound: self._render_not_found,
            MethodNotAllowed: self._render_method_not_allowed,
        }

        missing = set(OUTCOME_TYPES) - set(self._renderers)
        if missing:
            raise TypeError(f"No renderer for outcomes: {sorted(t.__name__ for t in missing)}")

    # =========================================================================
    # CLASSIFICATION
    # =========================================================================

    def classify(self, request: HTTPRequest) -> RouteOutcome:
        """
        Decide what a request is asking for. Pure; first match wins.
        """
        method, path = request.method, request.path

        if method == "GET" and path == "/":
            return Welcome()

        if method == "GET" and path.startswith(STATIC_PREFIX):
            return ServeStatic(path[len(STATIC_PREFIX):])

        if method == "POST" and path == SUBMIT_PATH:
            return submit.classify(request)

        if method in ALLOWED_METHODS:
            return NotFound(path)

        return MethodNotAllowed(method)

    # =========================================================================
    # RENDERING
    # =========================================================================

    def render(self, outcome: RouteOutcome) -> HTTPResponse:
        """Produce the response for a classified request."""
        renderer = self._renderers[type(outcome)]
        return renderer(outcome)

    def route(self, request: HTTPRequest) -> HTTPResponse:
        """
        Route a request to its response. Never raises for routing reasons.
        """
        outcome = self.classify(request)
        logger.debug(f"{request.method} {request.path} → {outcome!r}")
        return self.render(outcome)

    # ─────────────────────────────────────────────────────────────────────
    # Built-in renderers
    # ─────────────────────────────────────────────────────────────────────

    def _render_welcome(self, outcome: Welcome) -> HTTPResponse:
        return ok(WELCOME_MESSAGE)

    def _render_static(self, outcome: ServeStatic) -> HTTPResponse:
        try:
            found = self.static_server.serve(outcome.path)
        except StaticFileNotFound:
            return not_found(f"404 File Not Found: {outcome.path}")
        except StaticFileIOError:
            # Cause already logged by the static server
            return internal_error()

        return ok(found.body, content_type=found.content_type)

    def _render_not_found(self, outcome: NotFound) -> HTTPResponse:
        return not_found(f"404 Not Found: {outcome.path}")

    def _render_method_not_allowed(self, outcome: MethodNotAllowed) -> HTTPResponse:
        return method_not_allowed(
            f"405 Method Not Allowed: {outcome.method}",
            ALLOWED_METHODS,
        )


def create_router(static_dir: Optional[str] = None) -> Router:
    """Router over a static root, defaulting to ./static."""
    return Router(StaticFileServer(static_dir or "static"))
