"""
=============================================================================
CORE NETWORKING COMPONENTS
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                          SOCKET SERVER                              │
    │  • Binds the listening socket, runs the accept loop                 │
    │  • Starts one thread per accepted connection                        │
    └─────────────────────────────────────────────────────────────────────┘
                                    │
                                    │ one thread each
                                    ▼
    ┌─────────────────────────────────────────────────────────────────────┐
    │                          CONNECTION                                 │
    │  • Wraps the client socket with buffered line reading               │
    │  • Guarantees the socket is closed (context manager)                │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
"""

from .socket_server import SocketServer
from .connection import Connection, ConnectionState

__all__ = [
    "SocketServer",     # TCP listener - accepts connections
    "Connection",       # Wrapper for client socket - handles I/O
    "ConnectionState",  # Enum for connection lifecycle states
]
