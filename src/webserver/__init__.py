"""
=============================================================================
WEBSERVER - Threaded HTTP/1.0 Static File Server
=============================================================================

Serves files from a directory over HTTP/1.0 using raw Python sockets:
one request per connection, one thread per connection, connection closed
after every response.

=============================================================================
PACKAGE STRUCTURE
=============================================================================

    webserver/
    ├── __init__.py          # This file - package exports
    ├── __main__.py          # CLI entry point (python -m webserver)
    ├── server.py            # WebServer orchestrator
    ├── config.py            # ServerConfig dataclass, ConfigurationError
    ├── core/                # Networking
    │   ├── socket_server.py # Listener: bind + accept loop + threads
    │   └── connection.py    # Client socket wrapper
    ├── http/                # Protocol
    │   ├── request.py       # Request line parsing
    │   ├── response.py      # ResponseWriter, error pages
    │   ├── status_codes.py  # 200/400/403/404/501
    │   └── mime_types.py    # Extension → Content-Type
    └── handlers/            # Request handling
        ├── connection.py    # Per-connection pipeline
        └── static.py        # PathResolver + static files

=============================================================================
QUICK START
=============================================================================

    from webserver import WebServer, ServerConfig

    server = WebServer(ServerConfig(port=8080, web_root="wwwroot"))
    server.start()   # Ctrl+C to stop

Or from the shell:

    python -m webserver 8080 ./wwwroot

=============================================================================
WHAT IT SPEAKS
=============================================================================

    GET /path HTTP/1.0          → 200 with the file, or
                                  403 (traversal / unreadable)
                                  404 (missing; custom 404.html if present)
    GET                         → 400 (malformed)
    GET / FTP/1.0               → 400 (not HTTP)
    POST / HTTP/1.0             → 501 (only GET is implemented)

No keep-alive, no chunked encoding, no compression, no TLS.

=============================================================================
"""

__version__ = "1.0.0"

from .server import WebServer
from .config import ServerConfig, ConfigurationError

__all__ = ["WebServer", "ServerConfig", "ConfigurationError", "__version__"]
