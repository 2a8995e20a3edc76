"""
=============================================================================
CONNECTION
=============================================================================

Wraps one accepted client socket. The request pipeline only ever needs
three things from it:

    read()   → bytes       one recv(), b"" means the peer closed
    write(b) → bool        one sendall() of the full response
    close()                shut down and release the socket

=============================================================================
ONE READ, ONE WRITE
=============================================================================

TCP is a byte stream. A client's request might arrive in one segment or in
several:

    send("GET / HTTP/1.1\\r\\n\\r\\n")
        recv() → "GET / HTTP/1.1\\r\\n\\r\\n"      (usual case)
        recv() → "GET / HT"                      (possible)

This server reads exactly ONCE per connection, up to buffer_size bytes,
and parses whatever arrived. Small requests (the overwhelming majority)
fit in one segment. A request split across segments is parsed from its
first part; the parser tolerates that, but a body may come up short.

The response is written with a single sendall(), which loops in the
kernel until every byte is queued.

    ┌──────────┐   accept   ┌────────────┐  read  ┌────────┐  write  ┌───────┐
    │ Listener │ ─────────► │ Connection │ ─────► │ Parser │ ... ──► │ close │
    └──────────┘            └────────────┘        └────────┘         └───────┘

=============================================================================
"""

import socket
import time
import logging
import uuid
from enum import Enum
from dataclasses import dataclass, field


logger = logging.getLogger(__name__)


class ConnectionState(Enum):
    """Where a connection is in its single request/response cycle."""
    NEW = "new"                # Accepted, nothing read yet
    READING = "reading"        # Inside recv()
    PROCESSING = "processing"  # Parsing and routing
    WRITING = "writing"        # Inside sendall()
    CLOSED = "closed"          # Socket released


@dataclass
class Connection:
    """
    A client connection.

    Attributes:
        socket: The accepted client socket.
        address: Client's (ip, port).
        id: Short identifier for log lines.
        state: Current ConnectionState.
        created_at: Accept time (for the access log duration).
        buffer_size: Maximum bytes taken by the single read.
    """

    socket: socket.socket
    address: tuple[str, int]

    id: str = field(default_factory=lambda: str(uuid.uuid4())[:8])
    state: ConnectionState = ConnectionState.NEW
    created_at: float = field(default_factory=time.time)

    buffer_size: int = 4096

    def __post_init__(self):
        # Listener sockets poll with a timeout; accepted ones must block
        self.socket.setblocking(True)

    @property
    def client_ip(self) -> str:
        return self.address[0]

    @property
    def age(self) -> float:
        """Seconds since the connection was accepted."""
        return time.time() - self.created_at

    def read(self) -> bytes:
        """
        Read once from the socket.

        Returns:
            Up to buffer_size bytes. b"" means the client closed the
            connection (or reset it) before sending anything.
        """
        self.state = ConnectionState.READING
        try:
            return self.socket.recv(self.buffer_size)
        except (ConnectionResetError, BrokenPipeError):
            logger.debug(f"[{self.id}] Connection reset before request")
            return b""
        finally:
            self.state = ConnectionState.PROCESSING

    def write(self, data: bytes) -> bool:
        """
        Send the complete response.

        Returns:
            True if every byte was handed to the kernel, False if the
            client went away first.
        """
        self.state = ConnectionState.WRITING
        try:
            self.socket.sendall(data)
            return True
        except OSError as e:
            logger.warning(f"[{self.id}] Send failed: {e}")
            return False

    def close(self):
        """
        Close the connection.

        shutdown(SHUT_WR) sends FIN so the client sees a clean end of
        response before the descriptor is released.
        """
        if self.state == ConnectionState.CLOSED:
            return

        try:
            self.socket.shutdown(socket.SHUT_WR)
        except OSError:
            pass  # Peer already gone
        finally:
            self.socket.close()
            self.state = ConnectionState.CLOSED

    def __enter__(self) -> "Connection":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False

    def __repr__(self) -> str:
        return f"Connection(id={self.id}, client={self.client_ip}:{self.address[1]}, state={self.state.value})"
