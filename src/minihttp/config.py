"""
=============================================================================
SERVER CONFIGURATION
=============================================================================

Every tunable lives on one dataclass. Values come from, highest priority
first:

    1. Command-line arguments      python -m minihttp --port 3000
    2. Environment variables       HTTP_PORT=3000 python -m minihttp
    3. The defaults below

validate() runs at startup so a bad value fails before the socket is bound.

=============================================================================
"""

import os
from dataclasses import dataclass
from typing import Optional


LOG_FORMATS = ("text", "json")


@dataclass
class ServerConfig:
    """
    Configuration for the HTTP server.

    Development:
        ServerConfig(log_level="DEBUG")

    Tests (OS-assigned port):
        ServerConfig(port=0, static_dir=str(tmp_path))
    """

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK
    # ─────────────────────────────────────────────────────────────────────

    host: str = "127.0.0.1"
    """Interface to bind. 0.0.0.0 for all interfaces."""

    port: int = 8080
    """TCP port. 0 lets the OS pick a free one."""

    backlog: int = 128
    """Pending connections the kernel queues before accept()."""

    buffer_size: int = 4096
    """
    Bytes taken by the single read of each connection. A request larger
    than this is parsed from its first buffer_size bytes.
    """

    # ─────────────────────────────────────────────────────────────────────
    # THREADING
    # ─────────────────────────────────────────────────────────────────────

    min_workers: int = 4
    """Worker threads kept alive. More are started whenever all are busy."""

    worker_idle_timeout: float = 30.0
    """Seconds an extra worker waits for a connection before exiting."""

    # ─────────────────────────────────────────────────────────────────────
    # CONTENT
    # ─────────────────────────────────────────────────────────────────────

    static_dir: str = "static"
    """Root served under /static/. Relative paths resolve against the CWD."""

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING
    # ─────────────────────────────────────────────────────────────────────

    log_level: str = "INFO"

    log_format: str = "text"
    """Access log format: "text" (Apache style) or "json"."""

    server_name: str = "minihttp/1.0"
    """Value of the Server response header."""

    @classmethod
    def from_env(cls, environ: Optional[dict] = None) -> "ServerConfig":
        """
        Build a configuration from environment variables.

            HTTP_HOST        host
            HTTP_PORT        port
            HTTP_WORKERS     min_workers
            HTTP_STATIC_DIR  static_dir
            HTTP_LOG_LEVEL   log_level
            HTTP_LOG_FORMAT  log_format

        Unset variables keep their defaults.
        """
        env = os.environ if environ is None else environ
        defaults = cls()

        return cls(
            host=env.get("HTTP_HOST", defaults.host),
            port=int(env.get("HTTP_PORT", defaults.port)),
            min_workers=int(env.get("HTTP_WORKERS", defaults.min_workers)),
            static_dir=env.get("HTTP_STATIC_DIR", defaults.static_dir),
            log_level=env.get("HTTP_LOG_LEVEL", defaults.log_level).upper(),
            log_format=env.get("HTTP_LOG_FORMAT", defaults.log_format).lower(),
        )

    def validate(self) -> None:
        """
        Raise ValueError on the first invalid setting.
        """
        if not 0 <= self.port < 65536:
            raise ValueError(f"Invalid port: {self.port}. Must be 0-65535.")

        if self.backlog < 1:
            raise ValueError("backlog must be >= 1")

        if self.min_workers < 1:
            raise ValueError("min_workers must be >= 1")

        if self.worker_idle_timeout <= 0:
            raise ValueError("worker_idle_timeout must be > 0")

        if self.buffer_size < 1024:
            raise ValueError("buffer_size must be >= 1024")

        if self.log_format not in LOG_FORMATS:
            raise ValueError(
                f"Invalid log_format: {self.log_format!r}. Must be one of {', '.join(LOG_FORMATS)}."
            )
