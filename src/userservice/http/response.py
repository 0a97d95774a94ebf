"""
=============================================================================
HTTP RESPONSE SERIALIZATION
=============================================================================

Every handler answers with an HTTPResponse: a status plus a body. This module
turns that pair into the bytes written back on the socket.

=============================================================================
WIRE FORMAT
=============================================================================

    HTTP/1.1 200 OK\r\n                    ← Status line
    Content-Type: application/json\r\n     ← Always JSON, even for text bodies
    Content-Length: 12\r\n                 ← Auto-calculated
    Connection: close\r\n                  ← One request per connection
    \r\n                                   ← Empty line (separator)
    User deleted                           ← Body bytes

Content-Type is declared as application/json unconditionally, including for
the plain-text messages ("User updated", "Not Found", ...). Clients written
against the service rely on the header never changing.

There is no keep-alive: the server closes the socket after the response, and
says so with ``Connection: close``.

=============================================================================
HELPERS
=============================================================================

    ok_json(data)               200, body = json.dumps(data)
    ok_text(text)               200, body = text
    bad_request(text)           400
    not_found(text)             404
    payload_too_large(text)     413
    internal_error(text)        500
    service_unavailable(text)   503

=============================================================================
"""

import json
from dataclasses import dataclass, field
from typing import Any, Dict, Union

from .status_codes import HTTPStatus


CONTENT_TYPE = "application/json"


@dataclass
class HTTPResponse:
    """
    Represents an HTTP response to be sent to the client.

        Handler returns          to_bytes()              Socket sends
        HTTPResponse    ─────►   serializes    ─────►    raw bytes
    """

    status: HTTPStatus = HTTPStatus.OK
    body: bytes = b""
    headers: Dict[str, str] = field(default_factory=dict)
    version: str = "HTTP/1.1"

    def __post_init__(self):
        if isinstance(self.body, str):
            self.body = self.body.encode("utf-8")

    @property
    def status_line(self) -> str:
        """Example: ``HTTP/1.1 404 Not Found``"""
        return f"{self.version} {int(self.status)} {self.status.phrase}"

    @property
    def text(self) -> str:
        """Body decoded as UTF-8 (handy in tests and access logs)."""
        return self.body.decode("utf-8")

    def set_header(self, name: str, value: str) -> "HTTPResponse":
        """Set a header, returns self for chaining."""
        self.headers[name] = value
        return self

    def to_bytes(self) -> bytes:
        """
        Serialize the response for ``socket.sendall()``.

        Content-Type, Content-Length and Connection are filled in unless a
        caller set them explicitly.
        """
        response_headers = {
            "Content-Type": CONTENT_TYPE,
            "Content-Length": str(len(self.body)),
            "Connection": "close",
        }
        response_headers.update(self.headers)

        lines = [self.status_line]
        for name, value in response_headers.items():
            lines.append(f"{name}: {value}")
        lines.append("")

        head = "\r\n".join(lines).encode("utf-8") + b"\r\n"
        return head + self.body


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================

def ok_json(data: Any) -> HTTPResponse:
    """
    200 with a JSON-encoded body.

    Example:
        return ok_json(user.to_dict())
        return ok_json([u.to_dict() for u in users])
    """
    return HTTPResponse(HTTPStatus.OK, json.dumps(data))


def ok_text(text: Union[str, bytes]) -> HTTPResponse:
    """200 with a plain message body ("User updated")."""
    return HTTPResponse(HTTPStatus.OK, text)


def bad_request(text: str = "Bad Request") -> HTTPResponse:
    return HTTPResponse(HTTPStatus.BAD_REQUEST, text)


def not_found(text: str = "Not Found") -> HTTPResponse:
    return HTTPResponse(HTTPStatus.NOT_FOUND, text)


def payload_too_large(text: str = "Request Too Large") -> HTTPResponse:
    return HTTPResponse(HTTPStatus.PAYLOAD_TOO_LARGE, text)


def internal_error(text: str = "Internal Server Error") -> HTTPResponse:
    return HTTPResponse(HTTPStatus.INTERNAL_SERVER_ERROR, text)


def service_unavailable(text: str = "Server overloaded") -> HTTPResponse:
    return HTTPResponse(HTTPStatus.SERVICE_UNAVAILABLE, text)
