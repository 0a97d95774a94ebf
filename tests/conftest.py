"""
pytest configuration and fixtures.
"""

import json
import socket
import threading
from typing import Callable, Generator, Optional, Tuple
import pytest

# Add src to path for imports
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from userservice import UserServer, ServiceConfig
from userservice.handlers import UserHandlers
from userservice.http import Dispatcher
from userservice.passwords import PasswordHasher, PasswordPolicy
from userservice.store import UserStore


# bcrypt's minimum cost keeps the suite fast
TEST_ROUNDS = 4


def build_request(method: str, path: str, body: Optional[dict] = None) -> str:
    """Request text the way an HTTP client would send it."""
    payload = json.dumps(body) if body is not None else ""
    lines = [
        f"{method} {path} HTTP/1.1",
        "Host: localhost:8080",
        "User-Agent: pytest",
    ]
    if body is not None:
        lines.append("Content-Type: application/json")
        lines.append(f"Content-Length: {len(payload.encode('utf-8'))}")
    return "\r\n".join(lines) + "\r\n\r\n" + payload


@pytest.fixture
def make_request() -> Callable[..., str]:
    return build_request


@pytest.fixture
def sample_user() -> dict:
    return {"name": "Ann", "email": "a@x.com", "password": "pw"}


# =============================================================================
# STORE
# =============================================================================

@pytest.fixture
def database_url(tmp_path: Path) -> str:
    """SQLite file per test. In-memory SQLite is not shared across a pool."""
    return f"sqlite:///{tmp_path / 'users.db'}"


@pytest.fixture
def store(database_url: str) -> Generator[UserStore, None, None]:
    store = UserStore(database_url, pool_size=2)
    store.ensure_schema()
    yield store
    store.dispose()


@pytest.fixture
def hasher() -> PasswordHasher:
    return PasswordHasher(PasswordPolicy.ALWAYS, rounds=TEST_ROUNDS)


@pytest.fixture
def legacy_hasher() -> PasswordHasher:
    return PasswordHasher(PasswordPolicy.LEGACY, rounds=TEST_ROUNDS)


@pytest.fixture
def handlers(store: UserStore, hasher: PasswordHasher) -> UserHandlers:
    return UserHandlers(store, hasher)


@pytest.fixture
def dispatcher(handlers: UserHandlers) -> Dispatcher:
    return Dispatcher.for_handlers(handlers)


# =============================================================================
# SERVER
# =============================================================================

@pytest.fixture
def free_port() -> int:
    """Get a free port for testing."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(('127.0.0.1', 0))
        return s.getsockname()[1]


@pytest.fixture
def config(database_url: str, free_port: int) -> ServiceConfig:
    """Service configuration for a server bound to localhost."""
    return ServiceConfig(
        host="127.0.0.1",
        port=free_port,
        workers=2,
        timeout=5.0,
        max_request_size=4096,
        database_url=database_url,
        bcrypt_rounds=TEST_ROUNDS,
        log_level="WARNING",
    )


class ServiceRunner:
    """Runs a UserServer in a background thread."""

    def __init__(self, server: UserServer):
        self.server = server
        self._thread: Optional[threading.Thread] = None

    @property
    def port(self) -> int:
        return self.server.address[1]

    def start(self):
        self._thread = threading.Thread(target=self.server.run, daemon=True)
        self._thread.start()

        if not self.server.wait_until_ready(timeout=5.0):
            raise RuntimeError("Server failed to start")

    def stop(self):
        self.server.shutdown()
        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=10.0)

    def send(self, raw: bytes) -> Tuple[str, dict, bytes]:
        """
        Send raw bytes and read the response until the server closes.

        Returns:
            (status line, headers, body)
        """
        with socket.create_connection(("127.0.0.1", self.port), timeout=5.0) as sock:
            sock.sendall(raw)
            sock.shutdown(socket.SHUT_WR)

            chunks = []
            while True:
                chunk = sock.recv(4096)
                if not chunk:
                    break
                chunks.append(chunk)

        data = b"".join(chunks)
        head, _, body = data.partition(b"\r\n\r\n")
        lines = head.decode("utf-8").split("\r\n")
        headers = {}
        for line in lines[1:]:
            name, _, value = line.partition(":")
            headers[name.strip()] = value.strip()
        return lines[0], headers, body

    def request(self, method: str, path: str, body: Optional[dict] = None) -> Tuple[str, dict, bytes]:
        return self.send(build_request(method, path, body).encode("utf-8"))


@pytest.fixture
def live_server(config: ServiceConfig) -> Generator[ServiceRunner, None, None]:
    """A running service on a free local port."""
    runner = ServiceRunner(UserServer(config))
    runner.start()

    yield runner

    runner.stop()
