"""
Integration tests: real sockets against a server running in a thread.
"""

import json
import logging
import socket
import time
from concurrent.futures import ThreadPoolExecutor

import pytest

from minihttp.http.outcomes import Welcome
from minihttp.http.response import parse_status_line
from minihttp.http.status_codes import HTTPStatus


def split_response(raw: bytes):
    """(status, headers dict, body) from a raw response."""
    head, _, body = raw.partition(b"\r\n\r\n")
    lines = head.decode("latin-1").split("\r\n")
    _, status, _ = parse_status_line(lines[0])
    headers = {}
    for line in lines[1:]:
        name, _, value = line.partition(":")
        headers[name.strip()] = value.strip()
    return status, headers, body


class TestScenarios:
    """End-to-end request/response pairs."""

    def test_welcome(self, test_server):
        status, headers, body = split_response(test_server.request(b"GET / HTTP/1.1\r\n\r\n"))

        assert status == HTTPStatus.OK
        assert headers["Content-Type"] == "text/plain"
        assert body == b"Welcome to the homepage!"

    def test_static_file(self, test_server):
        raw = test_server.request(b"GET /static/index.html HTTP/1.1\r\n\r\n")
        status, headers, body = split_response(raw)

        assert status == HTTPStatus.OK
        assert headers["Content-Type"] == "text/html"
        assert body == b"<h1>hi</h1>"

    def test_static_missing(self, test_server):
        status, _, body = split_response(
            test_server.request(b"GET /static/missing.html HTTP/1.1\r\n\r\n")
        )

        assert status == HTTPStatus.NOT_FOUND
        assert body == b"404 File Not Found: missing.html"

    def test_submit_json(self, test_server):
        raw = test_server.request(
            b"POST /submit HTTP/1.1\r\n"
            b"Content-Type: application/json\r\n"
            b"\r\n"
            b'{"key":"value"}'
        )
        status, _, body = split_response(raw)

        assert status == HTTPStatus.OK
        assert body == b'Received JSON: {"key":"value"}'

    def test_submit_unsupported(self, test_server):
        raw = test_server.request(
            b"POST /submit HTTP/1.1\r\nContent-Type: text/xml\r\n\r\n<a/>"
        )
        status, _, _ = split_response(raw)

        assert status == HTTPStatus.UNSUPPORTED_MEDIA_TYPE

    def test_method_not_allowed(self, test_server):
        status, headers, body = split_response(test_server.request(b"PUT / HTTP/1.1\r\n\r\n"))

        assert status == HTTPStatus.METHOD_NOT_ALLOWED
        assert headers["Allow"] == "GET, POST"
        assert body == b"405 Method Not Allowed: PUT"

    def test_traversal_blocked(self, test_server):
        raw = test_server.request(b"GET /static/../secret.txt HTTP/1.1\r\n\r\n")
        status, _, body = split_response(raw)

        assert status == HTTPStatus.NOT_FOUND
        assert b"top secret" not in raw


class TestWireFormat:

    def test_framing_headers(self, test_server):
        raw = test_server.request(b"GET /static/data.bin HTTP/1.1\r\n\r\n")
        status, headers, body = split_response(raw)

        assert status == HTTPStatus.OK
        assert headers["Content-Length"] == str(len(body)) == "256"
        assert headers["Connection"] == "close"
        assert headers["Server"] == "minihttp/1.0"
        assert body == bytes(range(256))

    def test_status_line_parses_back(self, test_server):
        raw = test_server.request(b"GET /nope HTTP/1.1\r\n\r\n")
        version, status, phrase = parse_status_line(raw)

        assert version == "HTTP/1.1"
        assert status == HTTPStatus.NOT_FOUND
        assert phrase == "Not Found"


class TestErrorHandling:

    def test_malformed_start_line(self, test_server):
        status, _, body = split_response(test_server.request(b"HELLO\r\n\r\n"))

        assert status == HTTPStatus.BAD_REQUEST
        assert body.startswith(b"400 Bad Request: ")

    def test_empty_request_closes_silently(self, test_server):
        """Connect, send nothing, half-close: the server closes without a response."""
        assert test_server.request(b"", shutdown_write=True) == b""

    def test_server_survives_bad_clients(self, test_server):
        test_server.request(b"", shutdown_write=True)
        test_server.request(b"\x00\x01\x02\r\n\r\n")

        status, _, _ = split_response(test_server.request(b"GET / HTTP/1.1\r\n\r\n"))
        assert status == HTTPStatus.OK

    def test_handler_exception_is_500(self, test_server, monkeypatch):
        def explode(outcome):
            raise RuntimeError("handler bug")

        monkeypatch.setitem(test_server.server.router._renderers, Welcome, explode)

        status, _, body = split_response(test_server.request(b"GET / HTTP/1.1\r\n\r\n"))
        assert status == HTTPStatus.INTERNAL_SERVER_ERROR
        assert body == b"500 Internal Server Error"

        # Other routes are unaffected
        status, _, _ = split_response(test_server.request(b"GET /nope HTTP/1.1\r\n\r\n"))
        assert status == HTTPStatus.NOT_FOUND


class TestConcurrency:

    def test_concurrent_clients(self, test_server):
        """Each client gets the response to its own request."""
        def fetch(i: int) -> bytes:
            if i % 2:
                return test_server.request(f"GET /missing-{i} HTTP/1.1\r\n\r\n".encode())
            return test_server.request(
                b"POST /submit HTTP/1.1\r\nContent-Type: application/json\r\n\r\n"
                + f'{{"n":{i}}}'.encode()
            )

        with ThreadPoolExecutor(max_workers=16) as executor:
            results = list(executor.map(fetch, range(40)))

        for i, raw in enumerate(results):
            status, _, body = split_response(raw)
            if i % 2:
                assert status == HTTPStatus.NOT_FOUND
                assert body == f"404 Not Found: /missing-{i}".encode()
            else:
                assert status == HTTPStatus.OK
                assert body == f'Received JSON: {{"n":{i}}}'.encode()

    def test_idle_clients_do_not_block_others(self, server_factory):
        """Clients that connect and send nothing never hold up a new client."""
        srv = server_factory(min_workers=1)

        # More silent connections than warm workers, each parked in recv()
        idle = []
        try:
            for _ in range(3):
                idle.append(socket.create_connection(("127.0.0.1", srv.port), timeout=5.0))
            time.sleep(0.3)

            status, _, body = split_response(srv.request(b"GET / HTTP/1.1\r\n\r\n"))
            assert status == HTTPStatus.OK
            assert body == b"Welcome to the homepage!"
            assert srv.server._thread_pool.worker_count >= 4
        finally:
            for s in idle:
                s.close()


class TestLifecycle:

    def test_port_zero_binds_real_port(self, test_server):
        assert test_server.port != 0

    def test_shutdown_stops_accepting(self, server_factory):
        srv = server_factory()
        port = srv.port
        srv.stop()

        assert not srv.server.is_running
        with pytest.raises(OSError):
            socket.create_connection(("127.0.0.1", port), timeout=1.0).close()

    def test_json_access_log(self, server_factory, caplog):
        srv = server_factory(log_format="json")

        with caplog.at_level(logging.INFO, logger="minihttp.access"):
            srv.request(b"GET /nope?x=1 HTTP/1.1\r\nUser-Agent: it\r\n\r\n")
            srv.stop()

        [record] = [r for r in caplog.records if r.name == "minihttp.access"]
        entry = json.loads(record.getMessage())
        assert entry["path"] == "/nope"
        assert entry["query"] == "x=1"
        assert entry["status_code"] == 404
        assert entry["user_agent"] == "it"
