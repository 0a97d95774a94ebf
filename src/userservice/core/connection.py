"""
=============================================================================
CONNECTION MANAGEMENT
=============================================================================

Wraps one accepted client socket: read exactly one request, write exactly
one response, close. There is no keep-alive.

=============================================================================
TCP IS A BYTE STREAM
=============================================================================

A single recv() may return half a request line, or headers without the
body. The reader keeps pulling chunks of ``buffer_size`` bytes until it has
a complete request:

    ┌─────────────────────────────────────────────────────────────────┐
    │                    read_request() Flow                           │
    ├─────────────────────────────────────────────────────────────────┤
    │                                                                  │
    │   while no \r\n\r\n and peer still sending:                      │
    │       recv() → buffer                                            │
    │       buffer > max_request_size?  → RequestTooLarge (413)        │
    │                                                                  │
    │   Content-Length declared?                                       │
    │       larger than max_request_size? → RequestTooLarge (413)      │
    │       while body incomplete and peer still sending:              │
    │           recv() → buffer                                        │
    │                                                                  │
    │   return buffer  (None if nothing arrived)                       │
    │                                                                  │
    └─────────────────────────────────────────────────────────────────┘

Oversized requests are rejected outright. They are never truncated and
then dispatched half-read.

A read timeout with partial data returns what arrived, so a bare
"GET /users" typed into netcat still gets an answer.

=============================================================================
CONNECTION STATE MACHINE
=============================================================================

    NEW ──► READING ──► PROCESSING ──► WRITING ──► CLOSING ──► CLOSED
              │                                       ▲
              └───────────────────────────────────────┘
                  (nothing received, or read error)

=============================================================================
"""

import socket
import time
import logging
import uuid
from enum import Enum
from dataclasses import dataclass, field
from typing import Optional

from ..errors import RequestTooLarge


logger = logging.getLogger(__name__)

HEADER_END = b"\r\n\r\n"

# Upper bounds on discarding unread client data before close
DRAIN_TIMEOUT = 0.2
DRAIN_LIMIT = 64 * 1024


class ConnectionState(Enum):
    """Connection lifecycle states (used in debug logs)."""
    NEW = "new"
    READING = "reading"
    PROCESSING = "processing"
    WRITING = "writing"
    CLOSING = "closing"
    CLOSED = "closed"


@dataclass
class Connection:
    """
    A client connection carrying a single request.

    Attributes:
        socket: The client socket returned by accept().
        address: Client's (ip, port) tuple.
        id: Short random identifier for log correlation.
        state: Current lifecycle state.
        created_at: Timestamp when the connection was accepted.
        buffer_size: Bytes requested per recv() call.
        timeout: Socket read/write timeout in seconds (None blocks forever).
        max_request_size: Largest request accepted, in bytes.
    """

    socket: socket.socket
    address: tuple

    id: str = field(default_factory=lambda: str(uuid.uuid4())[:8])
    state: ConnectionState = ConnectionState.NEW
    created_at: float = field(default_factory=time.time)

    buffer_size: int = 1024
    timeout: Optional[float] = 30.0
    max_request_size: int = 64 * 1024

    _buffer: bytes = field(default=b"", repr=False)

    def __post_init__(self):
        self.socket.setblocking(True)
        if self.timeout:
            self.socket.settimeout(self.timeout)

    @property
    def client_ip(self) -> str:
        return self.address[0] if self.address else ""

    # =========================================================================
    # READING
    # =========================================================================

    def read_request(self) -> Optional[bytes]:
        """
        Read one request from the socket.

        Returns:
            The raw request bytes, or None if the client sent nothing.

        Raises:
            RequestTooLarge: If the request exceeds max_request_size.
        """
        self.state = ConnectionState.READING

        try:
            while HEADER_END not in self._buffer:
                if not self._fill():
                    break

            header_end = self._buffer.find(HEADER_END)
            if header_end != -1:
                body_start = header_end + len(HEADER_END)
                content_length = self._parse_content_length(self._buffer[:header_end])

                if body_start + content_length > self.max_request_size:
                    raise RequestTooLarge(body_start + content_length, self.max_request_size)

                while len(self._buffer) - body_start < content_length:
                    if not self._fill():
                        break

        except socket.timeout:
            if not self._buffer:
                logger.debug(f"[{self.id}] Read timeout, nothing received")
                return None
            logger.debug(f"[{self.id}] Read timeout, using {len(self._buffer)} bytes received")

        if not self._buffer:
            return None
        return self._buffer

    def _fill(self) -> bool:
        """
        Append one chunk to the buffer.

        Returns:
            False once the peer has stopped sending.
        """
        chunk = self._recv()
        if not chunk:
            return False

        self._buffer += chunk
        if len(self._buffer) > self.max_request_size:
            raise RequestTooLarge(len(self._buffer), self.max_request_size)
        return True

    def _recv(self) -> bytes:
        try:
            return self.socket.recv(self.buffer_size)
        except (ConnectionResetError, BrokenPipeError):
            # Client disconnected abruptly
            return b""

    def _parse_content_length(self, headers: bytes) -> int:
        """Content-Length from raw header bytes, 0 if absent or malformed."""
        header_str = headers.decode("utf-8", errors="replace").lower()
        for line in header_str.split("\r\n"):
            if line.startswith("content-length:"):
                try:
                    return max(int(line.split(":", 1)[1].strip()), 0)
                except ValueError:
                    return 0
        return 0

    # =========================================================================
    # WRITING
    # =========================================================================

    def send_response(self, data: bytes) -> bool:
        """
        Send the whole response with sendall().

        Returns:
            True if the data was sent, False if the client went away.
        """
        self.state = ConnectionState.WRITING
        try:
            self.socket.sendall(data)
            return True
        except OSError as e:
            logger.warning(f"[{self.id}] Send failed: {e}")
            return False

    # =========================================================================
    # CLOSING
    # =========================================================================

    def close(self):
        """
        Close the connection: send FIN, drain briefly, release the socket.
        """
        if self.state == ConnectionState.CLOSED:
            return

        self.state = ConnectionState.CLOSING

        try:
            self.socket.shutdown(socket.SHUT_WR)
        except OSError:
            pass  # Peer already gone

        self._drain()

        try:
            self.socket.close()
        except OSError:
            pass

        self.state = ConnectionState.CLOSED
        logger.debug(f"[{self.id}] Connection closed after {time.time() - self.created_at:.3f}s")

    def _drain(self):
        """
        Discard what the peer is still sending, bounded by DRAIN_TIMEOUT
        overall and DRAIN_LIMIT bytes.
        """
        deadline = time.time() + DRAIN_TIMEOUT
        drained = 0
        try:
            while drained < DRAIN_LIMIT:
                remaining = deadline - time.time()
                if remaining <= 0:
                    break
                self.socket.settimeout(remaining)
                chunk = self.socket.recv(4096)
                if not chunk:
                    break
                drained += len(chunk)
        except OSError:
            pass  # socket.timeout is an OSError too

        if drained >= DRAIN_LIMIT:
            logger.debug(f"[{self.id}] Stopped draining after {drained} bytes")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
