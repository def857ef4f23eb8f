"""
=============================================================================
SERVER CONFIGURATION
=============================================================================

Centralized configuration for the web server.

=============================================================================
CONFIGURATION SOURCES
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    CONFIGURATION HIERARCHY                          │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   Priority (highest to lowest):                                     │
    │                                                                      │
    │   1. Command-line arguments                                         │
    │      └── python -m webserver 9000 ./public                         │
    │                                                                      │
    │   2. Environment variables                                          │
    │      └── HTTP_PORT=9000 HTTP_WEB_ROOT=./public python -m webserver │
    │                                                                      │
    │   3. Defaults (this file)                                           │
    │      └── port 8080, web root "wwwroot"                              │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
FAIL-FAST
=============================================================================

An invalid port is a configuration error, not a runtime one. The server
validates its config when it is constructed, so a bad value never gets
as far as bind():

    WebServer(ServerConfig(port=80))   → ConfigurationError
                                          (ports <= 1024 are privileged)

=============================================================================
"""

import logging
import os
from dataclasses import dataclass
from typing import Optional


MIN_PORT = 1025
MAX_PORT = 65535


class ConfigurationError(ValueError):
    """Raised when the server configuration is invalid. Fatal at startup."""


@dataclass
class ServerConfig:
    """
    Configuration for the web server.

    =========================================================================
    CONFIGURATION GROUPS
    =========================================================================

    NETWORK SETTINGS
    - host, port, backlog, timeout

    CONTENT
    - web_root, index_file, not_found_page

    LIMITS
    - chunk_size, max_line_length

    LOGGING / IDENTITY
    - log_level, server_name

    =========================================================================
    """

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    host: str = "0.0.0.0"
    """
    The IP address to bind to.
    - "0.0.0.0" - All network interfaces (default)
    - "127.0.0.1" - Localhost only
    """

    port: int = 8080
    """
    The port number to listen on. Must be above 1024 (unprivileged).
    """

    backlog: int = 128
    """
    Maximum number of queued connections waiting for accept().
    """

    timeout: Optional[float] = None
    """
    Read timeout for client connections, in seconds.
    None = no timeout: a silent client holds its thread until it leaves.
    Set this to harden the server against slow or idle clients.
    """

    # ─────────────────────────────────────────────────────────────────────
    # CONTENT
    # ─────────────────────────────────────────────────────────────────────

    web_root: str = "wwwroot"
    """
    Directory served to clients. Nothing outside it is ever readable.
    """

    index_file: str = "index.html"
    """
    File served for a request to "/".
    """

    not_found_page: str = "404.html"
    """
    Optional custom 404 page inside web_root. Used when present.
    """

    # ─────────────────────────────────────────────────────────────────────
    # LIMITS
    # ─────────────────────────────────────────────────────────────────────

    chunk_size: int = 4096
    """
    Bytes read per chunk when streaming a file to the client.
    """

    max_line_length: int = 8192
    """
    Longest request line accepted, in bytes. Longer lines get 400.
    """

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING / IDENTITY
    # ─────────────────────────────────────────────────────────────────────

    log_level: str = "INFO"
    """
    Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
    DEBUG also logs every request header line.
    """

    server_name: str = "WebServer/1.0"
    """
    Value of the Server response header.
    """

    @classmethod
    def from_env(cls) -> "ServerConfig":
        """
        Create configuration from environment variables.

        HTTP_HOST       Bind address (default: 0.0.0.0)
        HTTP_PORT       Port (default: 8080)
        HTTP_WEB_ROOT   Directory to serve (default: wwwroot)
        HTTP_TIMEOUT    Client read timeout in seconds (default: none)
        HTTP_LOG_LEVEL  Logging level (default: INFO)

        Raises:
            ConfigurationError: If a numeric variable is not a number.
        """
        try:
            port = int(os.getenv("HTTP_PORT", "8080"))
        except ValueError:
            raise ConfigurationError(f"Invalid HTTP_PORT: {os.getenv('HTTP_PORT')!r}")

        timeout = os.getenv("HTTP_TIMEOUT")
        try:
            timeout = float(timeout) if timeout else None
        except ValueError:
            raise ConfigurationError(f"Invalid HTTP_TIMEOUT: {timeout!r}")

        return cls(
            host=os.getenv("HTTP_HOST", "0.0.0.0"),
            port=port,
            web_root=os.getenv("HTTP_WEB_ROOT", "wwwroot"),
            timeout=timeout,
            log_level=os.getenv("HTTP_LOG_LEVEL", "INFO"),
        )

    def validate(self) -> None:
        """
        Validate configuration values.

        Raises:
            ConfigurationError: On the first invalid value found.
        """
        if not MIN_PORT <= self.port <= MAX_PORT:
            raise ConfigurationError(
                f"Invalid port: {self.port}. Must be greater than 1024 and at most {MAX_PORT}."
            )

        if self.backlog < 1:
            raise ConfigurationError("backlog must be >= 1")

        if self.chunk_size < 1:
            raise ConfigurationError("chunk_size must be >= 1")

        if self.max_line_length < 16:
            raise ConfigurationError("max_line_length must be >= 16")

        if self.timeout is not None and self.timeout <= 0:
            raise ConfigurationError("timeout must be > 0")

        if not isinstance(logging.getLevelName(self.log_level.upper()), int):
            raise ConfigurationError(f"Unknown log level: {self.log_level}")
