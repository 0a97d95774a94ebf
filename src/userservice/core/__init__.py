"""
=============================================================================
CORE SERVER COMPONENTS
=============================================================================

The networking plumbing underneath the user service.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                         SOCKET SERVER                                │
    │  • Creates the listening socket, binds, listens                     │
    │  • Runs the accept() loop, survives per-client accept failures      │
    │  • Turns SIGTERM/SIGINT into a graceful stop                        │
    └─────────────────────────────────────────────────────────────────────┘
                                    │ new Connection
                                    ▼
    ┌─────────────────────────────────────────────────────────────────────┐
    │                          THREAD POOL                                 │
    │  • Fixed number of workers, bounded queue                           │
    │  • Full queue → caller answers 503                                  │
    └─────────────────────────────────────────────────────────────────────┘
                                    │ worker runs
                                    ▼
    ┌─────────────────────────────────────────────────────────────────────┐
    │                          CONNECTION                                  │
    │  • Reads one request (bounded by max_request_size)                  │
    │  • Writes one response, then closes                                 │
    └─────────────────────────────────────────────────────────────────────┘

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
