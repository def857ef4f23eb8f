"""
=============================================================================
WEB SERVER
=============================================================================

Ties the listener, the connection handler and the configuration together.

=============================================================================
ARCHITECTURE OVERVIEW
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                     WEB SERVER ARCHITECTURE                         │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │                        ┌─────────────────┐                          │
    │                        │    WebServer    │  config, logging,        │
    │                        │  (Orchestrator) │  start() / stop()        │
    │                        └────────┬────────┘                          │
    │                                 │                                    │
    │                 ┌───────────────┴───────────────┐                   │
    │                 ▼                               ▼                   │
    │         ┌──────────────┐               ┌─────────────────┐          │
    │         │ SocketServer │ ──thread────► │ConnectionHandler│          │
    │         │  (Listener)  │  per conn     │  (pipeline)     │          │
    │         └──────────────┘               └────────┬────────┘          │
    │                                                 │                   │
    │                                ┌────────────────┼──────────────┐    │
    │                                ▼                ▼              ▼    │
    │                         ┌────────────┐  ┌────────────┐ ┌───────────┐│
    │                         │PathResolver│  │ mime_types │ │ Response- ││
    │                         │            │  │            │ │ Writer    ││
    │                         └────────────┘  └────────────┘ └───────────┘│
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
"""

import logging
from pathlib import Path
from typing import Optional, Tuple

from .config import ServerConfig
from .core import SocketServer
from .handlers import ConnectionHandler


logger = logging.getLogger(__name__)


class WebServer:
    """
    Threaded HTTP/1.0 static file server.

    Usage:
        server = WebServer(ServerConfig(port=8080, web_root="wwwroot"))
        server.start()          # Blocks until stop() or Ctrl+C

        # From another thread:
        server.stop()

    Raises:
        ConfigurationError: On construction, if the config is invalid
                            (e.g. port <= 1024). Nothing is bound then.
    """

    def __init__(self, config: Optional[ServerConfig] = None):
        self.config = config or ServerConfig()
        self.config.validate()  # Fail-fast on invalid config

        self._socket_server = SocketServer(self.config)
        self._handler: Optional[ConnectionHandler] = None

    @property
    def is_running(self) -> bool:
        return self._socket_server.is_running

    @property
    def address(self) -> Tuple[str, int]:
        return self._socket_server.address

    def start(self, port: Optional[int] = None, web_root: Optional[str] = None):
        """
        Start serving (blocking).

        Args:
            port: Override config port.
            web_root: Override config web root.

        Raises:
            ConfigurationError: If an override makes the config invalid.
            OSError: If the port cannot be bound.
        """
        if port is not None:
            self.config.port = port
        if web_root is not None:
            self.config.web_root = web_root
        self.config.validate()

        self._setup_logging()

        if not Path(self.config.web_root).is_dir():
            logger.warning(
                f"Web root {self.config.web_root!r} is not a directory; "
                f"every request will get 404"
            )

        # Built here so start() overrides are honoured
        self._handler = ConnectionHandler.from_config(self.config)

        logger.info(
            f"Starting HTTP/1.0 server on {self.config.host}:{self.config.port}, "
            f"serving {self._handler.static_handler.web_root}"
        )
        self._print_startup_banner()

        try:
            self._socket_server.start(self._handler.handle)
        except KeyboardInterrupt:
            logger.info("Received keyboard interrupt")
        finally:
            logger.info("Server stopped")

    def stop(self):
        """Ask the server to stop. Returns immediately."""
        self._socket_server.shutdown()

    def wait_for_shutdown(self, timeout: Optional[float] = None) -> bool:
        return self._socket_server.wait_for_shutdown(timeout)

    def _print_startup_banner(self):
        print()
        print("========================================")
        print(f"{self.config.server_name} (HTTP/1.0)")
        print(f"Port: {self.config.port}")
        print(f"Web root: {self.config.web_root}")
        print("========================================")
        print("Waiting for connections... (Ctrl+C to stop)")
        print()

    def _setup_logging(self):
        """Configure logging based on config."""
        level = getattr(logging, self.config.log_level.upper(), logging.INFO)

        # No-op if the application already configured the root logger
        logging.basicConfig(
            level=level,
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

        logging.getLogger("webserver").setLevel(level)
