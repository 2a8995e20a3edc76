"""
Unit tests for HTTP response building.
"""

import pytest

from minihttp.http.response import (
    HTTPResponse,
    ResponseBuilder,
    HTTPStatus,
    ok,
    not_found,
    bad_request,
    method_not_allowed,
    unsupported_media_type,
    internal_error,
    parse_status_line,
)


class TestHTTPResponse:
    """Tests for HTTPResponse class."""

    def test_status_line(self):
        """Test status line generation."""
        response = HTTPResponse(status=HTTPStatus.OK)
        assert response.status_line == "HTTP/1.1 200 OK"

        response = HTTPResponse(status=HTTPStatus.UNSUPPORTED_MEDIA_TYPE)
        assert response.status_line == "HTTP/1.1 415 Unsupported Media Type"

    def test_to_bytes_layout(self):
        """Status line, headers in order, blank line, raw body."""
        response = ok("Welcome to the homepage!")

        assert response.to_bytes() == (
            b"HTTP/1.1 200 OK\r\n"
            b"Content-Type: text/plain\r\n"
            b"Content-Length: 24\r\n"
            b"\r\n"
            b"Welcome to the homepage!"
        )

    def test_to_bytes_adds_nothing(self):
        """Serialization writes exactly the headers it was given."""
        response = HTTPResponse(headers={"X-Custom": "value"}, body=b"")

        assert response.to_bytes() == b"HTTP/1.1 200 OK\r\nX-Custom: value\r\n\r\n"

    def test_content_length_mismatch_rejected(self):
        with pytest.raises(ValueError):
            HTTPResponse(headers={"Content-Length": "3"}, body=b"hello")

    def test_with_headers_returns_copy(self):
        original = ok("hi")
        extended = original.with_headers(Connection="close", X_Served_By="test")

        assert extended.headers["Connection"] == "close"
        assert extended.headers["X-Served-By"] == "test"
        assert "Connection" not in original.headers
        assert extended.body == original.body

    def test_frozen(self):
        response = ok("hi")
        with pytest.raises(AttributeError):
            response.body = b"changed"

    def test_content_type_property(self):
        assert ok("x", content_type="text/css").content_type == "text/css"
        assert HTTPResponse().content_type is None


class TestResponseBuilder:
    """Tests for ResponseBuilder class."""

    def test_status(self):
        response = ResponseBuilder().status(HTTPStatus.NOT_FOUND).build()
        assert response.status == HTTPStatus.NOT_FOUND

    def test_status_from_int(self):
        response = ResponseBuilder().status(405).build()
        assert response.status is HTTPStatus.METHOD_NOT_ALLOWED

    def test_text_body(self):
        response = ResponseBuilder().text("héllo").build()

        assert response.headers["Content-Type"] == "text/plain"
        assert response.body == "héllo".encode("utf-8")
        assert response.headers["Content-Length"] == str(len("héllo".encode("utf-8")))

    def test_bytes_body_untouched(self):
        payload = bytes(range(256))
        response = ResponseBuilder().body(payload).build()

        assert response.body == payload
        assert response.headers["Content-Length"] == "256"

    def test_default_content_type(self):
        response = ResponseBuilder().body(b"x").build()
        assert response.headers["Content-Type"] == "application/octet-stream"

    def test_content_length_cannot_be_set(self):
        """build() always computes Content-Length from the body."""
        response = (ResponseBuilder()
            .header("Content-Length", "999")
            .body(b"abc")
            .build())

        assert response.headers["Content-Length"] == "3"

    def test_empty_body(self):
        response = ResponseBuilder().build()

        assert response.body == b""
        assert response.headers["Content-Length"] == "0"

    def test_method_chaining(self):
        response = (ResponseBuilder()
            .status(HTTPStatus.OK)
            .header("X-One", "1")
            .content_type("text/css")
            .body("a {}")
            .build())

        assert response.headers["X-One"] == "1"
        assert response.content_type == "text/css"
        assert response.body == b"a {}"


class TestConvenienceFunctions:
    """Tests for convenience response functions."""

    def test_ok(self):
        response = ok("hello")

        assert response.status == HTTPStatus.OK
        assert response.body == b"hello"
        assert response.content_type == "text/plain"

    def test_ok_with_content_type(self):
        response = ok(b"<h1>hi</h1>", content_type="text/html")

        assert response.content_type == "text/html"
        assert response.body == b"<h1>hi</h1>"

    def test_not_found(self):
        response = not_found("404 Not Found: /nope")

        assert response.status == HTTPStatus.NOT_FOUND
        assert response.body == b"404 Not Found: /nope"

    def test_bad_request(self):
        assert bad_request().status == HTTPStatus.BAD_REQUEST

    def test_method_not_allowed_has_allow_header(self):
        response = method_not_allowed("405 Method Not Allowed: PUT", ("GET", "POST"))

        assert response.status == HTTPStatus.METHOD_NOT_ALLOWED
        assert response.headers["Allow"] == "GET, POST"
        assert response.body == b"405 Method Not Allowed: PUT"

    def test_unsupported_media_type(self):
        response = unsupported_media_type("415 Unsupported Media Type: text/xml")
        assert response.status == HTTPStatus.UNSUPPORTED_MEDIA_TYPE

    def test_internal_error_is_generic(self):
        response = internal_error()

        assert response.status == HTTPStatus.INTERNAL_SERVER_ERROR
        assert response.body == b"500 Internal Server Error"


class TestStatusLineParsing:
    """A serialized response's status line parses back to its status."""

    @pytest.mark.parametrize("status", list(HTTPStatus))
    def test_status_line_parses_back(self, status):
        wire = ResponseBuilder().status(status).build().to_bytes()
        version, parsed, phrase = parse_status_line(wire)

        assert version == "HTTP/1.1"
        assert parsed is status
        assert phrase == status.phrase

    def test_invalid_status_line(self):
        with pytest.raises(ValueError):
            parse_status_line("HTTP/1.1 OK")


class TestHTTPStatus:
    """Tests for HTTPStatus enum."""

    def test_status_phrases(self):
        assert HTTPStatus.OK.phrase == "OK"
        assert HTTPStatus.NOT_FOUND.phrase == "Not Found"
        assert HTTPStatus.UNSUPPORTED_MEDIA_TYPE.phrase == "Unsupported Media Type"

    def test_status_categories(self):
        assert HTTPStatus.OK.is_success
        assert not HTTPStatus.OK.is_error

        assert HTTPStatus.NOT_FOUND.is_client_error
        assert HTTPStatus.NOT_FOUND.is_error

        assert HTTPStatus.INTERNAL_SERVER_ERROR.is_server_error
        assert not HTTPStatus.INTERNAL_SERVER_ERROR.is_client_error
