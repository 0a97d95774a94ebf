"""
=============================================================================
USER SERVICE
=============================================================================

The orchestrator that ties the socket server, the worker pool, the request
dispatcher and the store together.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                      USER SERVICE ARCHITECTURE                      │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │                        ┌─────────────────┐                          │
    │                        │   UserServer    │                          │
    │                        │  (Orchestrator) │                          │
    │                        └────────┬────────┘                          │
    │                                 │                                    │
    │            ┌────────────────────┼────────────────────┐              │
    │            ▼                    ▼                    ▼              │
    │    ┌──────────────┐    ┌──────────────┐    ┌──────────────┐        │
    │    │ SocketServer │    │  ThreadPool  │    │  Dispatcher  │        │
    │    │ (Networking) │    │ (Concurrency)│    │ (Prefixes)   │        │
    │    └──────────────┘    └──────────────┘    └──────┬───────┘        │
    │                                                    ▼                │
    │                                            ┌──────────────┐        │
    │                                            │ UserHandlers │        │
    │                                            └──────┬───────┘        │
    │                                                   ▼                 │
    │                                            ┌──────────────┐        │
    │                                            │  UserStore   │        │
    │                                            │ (SQLAlchemy) │        │
    │                                            └──────────────┘        │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
REQUEST LIFECYCLE
=============================================================================

    1. STARTUP
       └── users table created if missing; failure aborts before bind

    2. CLIENT CONNECTS
       └── SocketServer accepts, Connection queued in ThreadPool
           (queue full → 503 "Server overloaded")

    3. READ (Worker Thread)
       └── One request, at most max_request_size bytes (else 413)

    4. DISPATCH
       └── Request text matched against the route prefixes

    5. RESPOND AND CLOSE
       └── One response, access log line, connection closed

=============================================================================
"""

import logging
import time
from typing import Optional, Tuple

from .config import ServiceConfig
from .core import SocketServer, Connection, ConnectionState, ThreadPool
from .errors import RequestTooLarge
from .handlers import UserHandlers
from .http import (
    Dispatcher,
    HTTPResponse,
    decode_request,
    request_line,
    payload_too_large,
    service_unavailable,
)
from .passwords import PasswordHasher
from .store import UserStore


logger = logging.getLogger(__name__)

# One line per request, configurable separately from the module loggers:
#   logging.getLogger("userservice.access").setLevel(logging.WARNING)
access_logger = logging.getLogger("userservice.access")


class UserServer:
    """
    The user CRUD service.

    Usage:
        server = UserServer(ServiceConfig(database_url="sqlite:///users.db"))
        server.run()  # Blocks until SIGINT/SIGTERM or shutdown()

    Raises from run():
        StoreError: The users table could not be created at startup.
        OSError: The listen address could not be bound.
    """

    def __init__(self, config: ServiceConfig, store: Optional[UserStore] = None):
        self.config = config
        self.config.validate()  # Fail-fast on invalid config

        # ─────────────────────────────────────────────────────────────────
        # APPLICATION COMPONENTS
        # ─────────────────────────────────────────────────────────────────

        self._store = store or UserStore.from_config(config)
        self._hasher = PasswordHasher(config.password_policy, config.bcrypt_rounds)
        self._handlers = UserHandlers(self._store, self._hasher)
        self._dispatcher = Dispatcher.for_handlers(self._handlers)

        # ─────────────────────────────────────────────────────────────────
        # CORE COMPONENTS
        # ─────────────────────────────────────────────────────────────────

        self._socket_server = SocketServer(config)
        self._thread_pool = ThreadPool(workers=config.workers, queue_size=config.queue_size)

        self._running = False

    @property
    def store(self) -> UserStore:
        return self._store

    @property
    def address(self) -> Tuple[str, int]:
        return self._socket_server.address

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        """Block until the listener accepts connections."""
        return self._socket_server.wait_until_ready(timeout)

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    def run(self):
        """Create the schema, start the workers and serve (blocking)."""
        self._setup_logging()

        # Schema before bind: a broken store means no listener at all
        logger.info("Ensuring users table exists")
        try:
            self._store.ensure_schema()
        except Exception:
            self._store.dispose()
            raise

        self._thread_pool.start()
        self._running = True
        logger.info(
            f"Starting user service on {self.config.host}:{self.config.port} "
            f"({self.config.workers} workers, password policy {self.config.password_policy.value})"
        )

        try:
            self._socket_server.start(self._handle_connection)
        except KeyboardInterrupt:
            logger.info("Received keyboard interrupt")
        finally:
            self._shutdown()

    def shutdown(self):
        """Stop accepting connections. run() returns once in-flight requests finish."""
        self._socket_server.shutdown()

    def _shutdown(self):
        logger.info("Shutting down user service...")
        self._running = False
        self._socket_server.shutdown()

        stats = self._thread_pool.stats
        logger.info(f"Requests completed: {stats['completed']}, failed: {stats['failed']}")
        self._thread_pool.shutdown(wait=True, timeout=self.config.timeout)

        self._store.dispose()
        logger.info("User service stopped")

    def _setup_logging(self):
        level = getattr(logging, self.config.log_level.upper(), logging.INFO)
        logging.basicConfig(
            level=level,
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        logging.getLogger("userservice").setLevel(level)

    # =========================================================================
    # CONNECTION HANDLING
    # =========================================================================

    def _handle_connection(self, conn: Connection):
        """
        Hand a new connection to the worker pool (runs on the accept thread).
        """
        if not self._thread_pool.submit(self._process_connection, args=(conn,)):
            logger.warning(f"[{conn.id}] Worker queue full, rejecting {conn.client_ip}")
            with conn:
                conn.send_response(service_unavailable().to_bytes())

    def _process_connection(self, conn: Connection):
        """
        Read one request, dispatch it, write one response (runs in a worker).
        """
        with conn:
            start = time.time()
            try:
                raw = conn.read_request()
            except RequestTooLarge as e:
                logger.warning(f"[{conn.id}] {e}")
                self._respond(conn, "", payload_too_large(), start)
                return
            except OSError as e:
                logger.warning(f"[{conn.id}] Read failed: {e}")
                return

            if raw is None:
                logger.debug(f"[{conn.id}] Client sent nothing, closing")
                return

            text = decode_request(raw)
            conn.state = ConnectionState.PROCESSING
            response = self._dispatcher.dispatch(text)
            self._respond(conn, request_line(text), response, start)

    def _respond(self, conn: Connection, line: str, response: HTTPResponse, start: float):
        conn.send_response(response.to_bytes())
        duration_ms = (time.time() - start) * 1000
        level = logging.WARNING if response.status.is_error else logging.INFO
        access_logger.log(
            level,
            f'{conn.client_ip} "{line}" {int(response.status)} '
            f"{len(response.body)} {duration_ms:.1f}ms"
        )


def create_app(config: Optional[ServiceConfig] = None) -> UserServer:
    """
    Create a user service, reading the environment when no config is given.
    """
    return UserServer(config or ServiceConfig.from_env())
