"""
Unit tests for the server's request pipeline, without sockets.
"""

import pytest

from minihttp import HTTPServer, ServerConfig
from minihttp.http.outcomes import NotFound
from minihttp.http.status_codes import HTTPStatus


@pytest.fixture
def server(config: ServerConfig) -> HTTPServer:
    return HTTPServer(config)


class TestHandleBytes:

    def test_welcome(self, server: HTTPServer):
        response = server.handle_bytes(b"GET / HTTP/1.1\r\n\r\n")

        assert response.status == HTTPStatus.OK
        assert response.body == b"Welcome to the homepage!"

    def test_connection_and_server_headers(self, server: HTTPServer):
        response = server.handle_bytes(b"GET /nope HTTP/1.1\r\n\r\n")

        assert response.headers["Connection"] == "close"
        assert response.headers["Server"] == "minihttp/1.0"
        assert response.headers["Content-Length"] == str(len(response.body))

    def test_empty_buffer_gives_no_response(self, server: HTTPServer):
        assert server.handle_bytes(b"") is None

    def test_malformed_start_line_is_400(self, server: HTTPServer):
        response = server.handle_bytes(b"garbage\r\n\r\n")

        assert response.status == HTTPStatus.BAD_REQUEST
        assert response.body.startswith(b"400 Bad Request: ")
        assert response.headers["Connection"] == "close"

    def test_routing_exception_is_500(self, server: HTTPServer, monkeypatch):
        def explode(outcome):
            raise RuntimeError("boom")

        monkeypatch.setitem(server.router._renderers, NotFound, explode)
        response = server.handle_bytes(b"GET /nope HTTP/1.1\r\n\r\n")

        assert response.status == HTTPStatus.INTERNAL_SERVER_ERROR
        assert response.body == b"500 Internal Server Error"

    def test_custom_server_name(self, config: ServerConfig):
        config.server_name = "test/0.1"
        response = HTTPServer(config).handle_bytes(b"GET / HTTP/1.1\r\n\r\n")

        assert response.headers["Server"] == "test/0.1"

    def test_invalid_config_rejected(self):
        with pytest.raises(ValueError):
            HTTPServer(ServerConfig(port=70000))

    def test_bare_lf_request_has_no_content_type(self, server: HTTPServer):
        """LF-only line endings leave the POST without headers: 415, not 200."""
        response = server.handle_bytes(
            b"POST /submit HTTP/1.1\nContent-Type: application/json\n\n{}"
        )

        assert response.status == HTTPStatus.UNSUPPORTED_MEDIA_TYPE
        assert response.body == b"415 Unsupported Media Type: none"
