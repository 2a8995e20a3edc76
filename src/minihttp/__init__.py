"""
=============================================================================
MINIHTTP
=============================================================================

A small threaded HTTP/1.1 server on raw sockets. One request per
connection, a fixed route table:

    GET  /                 "Welcome to the homepage!"
    GET  /static/<path>    file under the static root
    POST /submit           echo of a JSON or form-encoded body

=============================================================================
QUICK START
=============================================================================

    from minihttp import HTTPServer, ServerConfig

    HTTPServer(ServerConfig(port=8080, static_dir="./static")).run()

or from the shell:

    python -m minihttp --port 8080 --static ./static

=============================================================================
"""

__version__ = "1.0.0"

from .config import ServerConfig
from .server import HTTPServer, create_app
from .http import HTTPRequest, HTTPResponse, HTTPStatus, Router, create_router

__all__ = [
    "__version__",
    "ServerConfig",
    "HTTPServer",
    "create_app",
    "HTTPRequest",
    "HTTPResponse",
    "HTTPStatus",
    "Router",
    "create_router",
]
