"""
=============================================================================
CORE SERVER COMPONENTS
=============================================================================

The networking plumbing underneath the HTTP layer:

    ┌─────────────────┐   Connection    ┌─────────────────┐
    │  SocketServer   │ ──────────────► │   ThreadPool    │
    │  accept loop    │                 │  worker threads │
    └─────────────────┘                 └─────────────────┘

    socket_server.py   listening socket, accept loop, signal handling
    connection.py      one client socket: single read, single write
    thread_pool.py     elastic pool, one worker per live connection

=============================================================================
"""

from .socket_server import SocketServer
from .connection import Connection, ConnectionState
from .thread_pool import ThreadPool

__all__ = [
    "SocketServer",
    "Connection",
    "ConnectionState",
    "ThreadPool",
]
