"""
=============================================================================
LISTENER: TCP ACCEPT LOOP
=============================================================================

Binds the listening socket, accepts connections, and gives every accepted
connection its own thread.

=============================================================================
SOCKET LIFECYCLE (Server Side)
=============================================================================

    1. socket()    Create a TCP socket
    2. bind()      Reserve IP:PORT          ← failure here is FATAL
    3. listen()    OS starts queueing connections (backlog)
    4. accept()    Returns a NEW socket per client   ← failure is transient
    5. close()     Release the listening socket

                    ┌───────────────────────┐
                    │   Listening Socket    │ ◄── Created once at startup
                    └───────────┬───────────┘     Never sends/receives data
                                │ accept()
        ┌───────────────────────┼───────────────────────┐
        ▼                       ▼                       ▼
    ┌───────────┐         ┌───────────┐         ┌───────────┐
    │ Thread 1  │         │ Thread 2  │         │ Thread 3  │
    │ conn A    │         │ conn B    │         │ conn C    │
    └───────────┘         └───────────┘         └───────────┘

=============================================================================
THREAD PER CONNECTION
=============================================================================

Each accepted connection gets a fresh daemon thread running the
connection handler. There is no pool and no admission limit: the number of
threads equals the number of open connections. Threads share nothing
mutable (the config is read-only), so no locks are needed.

The cost: with no read timeout configured, a client that connects and
never sends a line holds a thread forever. Set ServerConfig.timeout to
bound that.

=============================================================================
SHUTDOWN
=============================================================================

shutdown() only flips a flag. The flag is checked between accept() calls,
and accept() itself times out every ACCEPT_POLL_INTERVAL seconds, so the
loop notices within about a second even if no client ever connects:

    while running:
        try:
            accept()            # blocks at most 1 second
        except timeout:
            continue            # re-check running

In-flight connection threads are not interrupted; they finish their one
response on their own.

=============================================================================
"""

import socket
import signal
import logging
import threading
from typing import Optional, Callable, Tuple

from ..config import ServerConfig
from .connection import Connection


logger = logging.getLogger(__name__)

# Seconds accept() may block before the running flag is re-checked
ACCEPT_POLL_INTERVAL = 1.0


class SocketServer:
    """
    Low-level TCP listener.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                      SocketServer Internals                          │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │    start(handler)                                                    │
    │        ├──► _create_socket()   socket + SO_REUSEADDR + poll timeout │
    │        ├──► bind()             fatal on failure                      │
    │        ├──► listen()                                                 │
    │        ├──► _setup_signals()   main thread only                      │
    │        └──► _accept_loop()     BLOCKS here                           │
    │                 └──► accept() → Connection → _dispatch() (thread)   │
    │                                                                      │
    │    shutdown()        running = False                                 │
    │    _cleanup()        restore signals, close socket                   │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

    Usage:
        server = SocketServer(config)
        server.start(handler.handle)  # Blocks until shutdown()
    """

    def __init__(self, config: ServerConfig):
        """
        Args:
            config: Server configuration (host, port, backlog, timeout...).

        The socket is created lazily in start().
        """
        self.config = config
        self._socket: Optional[socket.socket] = None
        self._running = False

        # Set when the accept loop has fully stopped
        self._shutdown_event = threading.Event()

        self._original_handlers: dict = {}

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def address(self) -> Tuple[str, int]:
        """The bound (host, port), or the configured one before start()."""
        if self._socket is not None:
            try:
                return self._socket.getsockname()[:2]
            except OSError:
                pass
        return (self.config.host, self.config.port)

    def _create_socket(self) -> socket.socket:
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)

        # Avoid "Address already in use" for ~60s after a restart
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)

        # Lets the accept loop re-check the running flag
        sock.settimeout(ACCEPT_POLL_INTERVAL)

        return sock

    def _setup_signals(self):
        """
        Stop on SIGINT (Ctrl+C) and SIGTERM (kill, docker stop).

        Python only allows installing signal handlers from the main thread,
        so a server started from a worker thread (tests, embedding) leaves
        signals alone.
        """
        if threading.current_thread() is not threading.main_thread():
            return

        def shutdown_handler(signum, frame):
            signal_name = signal.Signals(signum).name
            logger.info(f"Received {signal_name}, initiating shutdown...")
            self.shutdown()

        self._original_handlers[signal.SIGTERM] = signal.signal(signal.SIGTERM, shutdown_handler)
        self._original_handlers[signal.SIGINT] = signal.signal(signal.SIGINT, shutdown_handler)

    def _restore_signals(self):
        for sig, handler in self._original_handlers.items():
            signal.signal(sig, handler)
        self._original_handlers.clear()

    def start(self, connection_handler: Callable[[Connection], None]):
        """
        Bind, listen and accept connections until shutdown().

        Args:
            connection_handler: Called with each Connection, in a new thread.

        Raises:
            OSError: If the socket cannot be bound. Fatal: nothing is served.
        """
        self._socket = self._create_socket()

        try:
            self._socket.bind((self.config.host, self.config.port))
        except OSError as e:
            logger.critical(f"Failed to bind to {self.config.host}:{self.config.port}: {e}")
            self._socket.close()
            self._socket = None
            raise

        self._socket.listen(self.config.backlog)

        self._running = True
        self._shutdown_event.clear()
        self._setup_signals()

        host, port = self.address
        logger.info(f"Server listening on {host}:{port}")

        try:
            self._accept_loop(connection_handler)
        finally:
            self._cleanup()

    def _accept_loop(self, connection_handler: Callable[[Connection], None]):
        while self._running:
            try:
                client_socket, client_address = self._socket.accept()
            except socket.timeout:
                continue  # Normal: re-check self._running
            except OSError as e:
                if not self._running or self._socket.fileno() == -1:
                    break  # Listening socket is being torn down
                logger.error(f"Accept error: {e}")
                continue

            logger.info(f"Accepted connection from {client_address[0]}:{client_address[1]}")

            try:
                conn = Connection(
                    socket=client_socket,
                    address=client_address,
                    timeout=self.config.timeout,
                    max_line_length=self.config.max_line_length,
                )
            except OSError as e:
                logger.error(f"Could not set up connection from {client_address[0]}: {e}")
                client_socket.close()
                continue

            self._dispatch(conn, connection_handler)

    def _dispatch(self, conn: Connection, connection_handler: Callable[[Connection], None]):
        """Run the handler for one connection in its own thread."""
        thread = threading.Thread(
            target=connection_handler,
            args=(conn,),
            name=f"conn-{conn.id}",
            daemon=True,
        )
        try:
            thread.start()
        except RuntimeError as e:
            # Out of threads: drop this connection, keep accepting
            logger.error(f"[{conn.id}] Could not start handler thread: {e}")
            conn.close()

    def shutdown(self):
        """
        Stop accepting connections. Idempotent; callable from any thread
        or a signal handler. Takes effect within ACCEPT_POLL_INTERVAL.
        """
        if self._running:
            logger.info("Shutting down socket server...")
        self._running = False

    def _cleanup(self):
        self._restore_signals()

        if self._socket:
            try:
                self._socket.close()
            except OSError:
                pass
            self._socket = None

        self._running = False
        self._shutdown_event.set()
        logger.info("Socket server stopped")

    def wait_for_shutdown(self, timeout: Optional[float] = None) -> bool:
        """
        Wait until the accept loop has stopped and the socket is closed.

        Returns:
            True if shutdown completed, False on timeout.
        """
        return self._shutdown_event.wait(timeout)
