"""
=============================================================================
ACCESS LOG
=============================================================================

One line per answered request on the "minihttp.access" logger, separate
from the diagnostic loggers so it can be routed or silenced on its own:

    logging.getLogger("minihttp.access").addHandler(file_handler)

Two renderings of the same entry:

    text (Apache style):
        127.0.0.1 - - [19/Oct/2026:10:55:36 +0000] "GET /static/a.css" 200 1234 0.52ms

    json:
        {"request_id": "a1b2c3d4", "method": "GET", "path": "/static/a.css",
         "query": "", "client_ip": "127.0.0.1", "user_agent": "curl/8.0",
         "status_code": 200, "content_length": 1234, "duration_ms": 0.52,
         "timestamp": "19/Oct/2026:10:55:36 +0000"}

Only successfully parsed requests are logged here. Connections closed
without a request, and 400 rejections, go to the diagnostic loggers.

=============================================================================
"""

import json
import logging
import time
from dataclasses import dataclass

from .http.request import HTTPRequest
from .http.response import HTTPResponse
from .http.status_codes import HTTPStatus


logger = logging.getLogger("minihttp.access")


@dataclass
class RequestLog:
    """
    One access log entry.

    request_id:     Connection id, correlates with diagnostic log lines
    method, path:   From the request line
    query:          Raw query string, "" when absent
    client_ip:      Peer address
    user_agent:     User-Agent header, "-" when absent
    status_code:    Response status
    content_length: Response body size in bytes
    duration_ms:    Accept to response written
    timestamp:      Local time, Apache format
    """
    request_id: str
    method: str
    path: str
    query: str
    client_ip: str
    user_agent: str
    status_code: int
    content_length: int
    duration_ms: float
    timestamp: str

    def to_dict(self) -> dict:
        return {
            "request_id": self.request_id,
            "method": self.method,
            "path": self.path,
            "query": self.query,
            "client_ip": self.client_ip,
            "user_agent": self.user_agent,
            "status_code": self.status_code,
            "content_length": self.content_length,
            "duration_ms": round(self.duration_ms, 2),
            "timestamp": self.timestamp,
        }

    def to_text(self) -> str:
        return (
            f'{self.client_ip} - - [{self.timestamp}] '
            f'"{self.method} {self.path}" {self.status_code} '
            f'{self.content_length} {self.duration_ms:.2f}ms'
        )


def build_entry(
    request: HTTPRequest,
    response: HTTPResponse,
    request_id: str,
    duration_ms: float,
) -> RequestLog:
    """Collect the fields of an access log entry from a request/response pair."""
    client_ip = request.client_address[0] if request.client_address else "-"

    return RequestLog(
        request_id=request_id,
        method=request.method,
        path=request.path,
        query=request.query,
        client_ip=client_ip,
        user_agent=request.get_header("user-agent") or "-",
        status_code=int(response.status),
        content_length=len(response.body),
        duration_ms=duration_ms,
        timestamp=time.strftime("%d/%b/%Y:%H:%M:%S %z"),
    )


class AccessLogger:
    """
    Writes RequestLog entries in the configured format.

        access = AccessLogger(log_format="json")
        access.log(request, response, request_id=conn.id, duration_ms=12.5)
    """

    def __init__(self, log_format: str = "text", log_level: int = logging.INFO):
        if log_format not in ("text", "json"):
            raise ValueError(f"Unknown access log format: {log_format!r}")
        self.log_format = log_format
        self.log_level = log_level

    def format(self, entry: RequestLog) -> str:
        if self.log_format == "json":
            return json.dumps(entry.to_dict())
        return entry.to_text()

    def log(
        self,
        request: HTTPRequest,
        response: HTTPResponse,
        request_id: str,
        duration_ms: float,
    ) -> RequestLog:
        entry = build_entry(request, response, request_id, duration_ms)
        level = logging.WARNING if HTTPStatus(response.status).is_server_error else self.log_level
        logger.log(level, self.format(entry))
        return entry
