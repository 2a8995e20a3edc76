"""
=============================================================================
HTTP SERVER
=============================================================================

Ties the listener, the worker pool and the request pipeline together.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                           HTTPServer                                │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   SocketServer ──accept──► _handle_connection ──submit──► ThreadPool │
    │   (main thread)                                          │         │
    │                                                  one worker each     │
    │                                                          ▼         │
    │                                                 _process_connection  │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
ONE CONNECTION, ONE REQUEST
=============================================================================

    1. read()                 one recv of up to buffer_size bytes
    2. RequestParser.parse    bytes → HTTPRequest
         empty buffer         → close, nothing sent
         bad start line       → 400, close
    3. Router.route           HTTPRequest → HTTPResponse
         unexpected error     → 500 (logged with traceback)
    4. add Connection: close and Server headers
    5. write()                one sendall
    6. access log line, close

No keep-alive: every response ends its connection.

=============================================================================
"""

import logging
from typing import Optional, Tuple

from .access_log import AccessLogger
from .config import ServerConfig
from .core import SocketServer, Connection, ThreadPool
from .http import (
    HTTPParseError,
    HTTPRequest,
    HTTPResponse,
    ParseErrorKind,
    RequestParser,
    Router,
    bad_request,
    create_router,
    internal_error,
)


logger = logging.getLogger(__name__)


SHUTDOWN_TIMEOUT = 30.0


class HTTPServer:
    """
    Threaded HTTP/1.1 server answering one request per connection.

    =========================================================================
    USAGE
    =========================================================================

        server = HTTPServer(ServerConfig(port=8080, static_dir="./static"))
        server.run()      # Blocks until Ctrl+C / SIGTERM

    From another thread (tests):

        thread = threading.Thread(target=server.run, daemon=True)
        thread.start()
        server.wait_until_ready(timeout=5)
        host, port = server.address
        ...
        server.shutdown()

    =========================================================================
    """

    def __init__(self, config: Optional[ServerConfig] = None, router: Optional[Router] = None):
        self.config = config or ServerConfig()
        self.config.validate()

        self._parser = RequestParser()
        self.router = router or create_router(self.config.static_dir)
        self._access_log = AccessLogger(log_format=self.config.log_format)

        self._thread_pool = ThreadPool(
            min_workers=self.config.min_workers,
            idle_timeout=self.config.worker_idle_timeout,
        )
        self._socket_server = SocketServer(self.config)

    @property
    def address(self) -> Tuple[str, int]:
        """Bound (host, port); the real port once the server is listening."""
        return self._socket_server.address

    @property
    def is_running(self) -> bool:
        return self._socket_server.is_running

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    def run(self):
        """Start serving. Blocks until shutdown()."""
        self._setup_logging()
        self._thread_pool.start()

        logger.info(
            f"Starting {self.config.server_name} "
            f"({self.config.min_workers} workers, "
            f"static root {self.router.static_server.root_dir})"
        )

        try:
            self._socket_server.start(self._handle_connection)
        except KeyboardInterrupt:
            logger.info("Received keyboard interrupt")
        finally:
            self._stop()

    def shutdown(self):
        """Ask the accept loop to stop. run() returns once in-flight work is done."""
        self._socket_server.shutdown()

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        return self._socket_server.wait_until_ready(timeout)

    def _setup_logging(self):
        level = getattr(logging, self.config.log_level.upper(), logging.INFO)

        logging.basicConfig(
            level=level,
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        logging.getLogger("minihttp").setLevel(level)

    def _stop(self):
        logger.info("Shutting down server...")
        self._thread_pool.shutdown(wait=True, timeout=SHUTDOWN_TIMEOUT)
        logger.info("Server stopped")

    # =========================================================================
    # REQUEST HANDLING
    # =========================================================================

    def _handle_connection(self, conn: Connection):
        """Called on the accept thread: hand the connection to a worker."""
        self._thread_pool.submit(self._process_connection, args=(conn,))

    def _process_connection(self, conn: Connection):
        """Worker thread: read, parse, route, write, close."""
        with conn:
            request, response = self._pipeline(conn.read(), conn.address, conn.id)
            if response is None:
                logger.debug(f"[{conn.id}] Closed without a request")
                return

            conn.write(response.to_bytes())

            if request is not None:
                self._access_log.log(
                    request,
                    response,
                    request_id=conn.id,
                    duration_ms=conn.age * 1000,
                )

    def _pipeline(
        self,
        data: bytes,
        client_address: Tuple[str, int],
        request_id: str,
    ) -> Tuple[Optional[HTTPRequest], Optional[HTTPResponse]]:
        """
        Parse and route one buffer.

        Returns:
            (request, response). request is None when parsing failed;
            response is None only for an empty buffer.
        """
        try:
            request = self._parser.parse(data, client_address)
        except HTTPParseError as e:
            if e.kind is ParseErrorKind.EMPTY_REQUEST:
                return None, None
            logger.info(f"[{request_id}] Bad request from {client_address[0] or '-'}: {e}")
            return None, self._finalize(bad_request(f"400 Bad Request: {e}"))

        try:
            response = self.router.route(request)
        except Exception as e:
            logger.exception(f"[{request_id}] Error handling {request.method} {request.path}: {e}")
            response = internal_error()

        return request, self._finalize(response)

    def _finalize(self, response: HTTPResponse) -> HTTPResponse:
        return response.with_headers(Connection="close", Server=self.config.server_name)

    def handle_bytes(
        self,
        data: bytes,
        client_address: Tuple[str, int] = ("", 0),
    ) -> Optional[HTTPResponse]:
        """
        Run the request pipeline on a raw buffer without any socket.

        Returns:
            The response that would be written, or None when the buffer
            is empty and the connection would be closed silently.
        """
        _, response = self._pipeline(data, client_address, request_id="-")
        return response


def create_app(config: Optional[ServerConfig] = None) -> HTTPServer:
    """Build a server from config, defaulting to the environment."""
    return HTTPServer(config or ServerConfig.from_env())
