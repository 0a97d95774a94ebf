"""
=============================================================================
HTTP STATUS CODES
=============================================================================

The handful of status codes this service can answer with, and their reason
phrases for the status line.

    ┌────────────────────────────────────────────────────────────────────┐
    │                      STATUS CODES IN USE                           │
    ├────────┬───────────────────────────────────────────────────────────┤
    │  200   │ OK                  - every successful user operation     │
    ├────────┼───────────────────────────────────────────────────────────┤
    │  400   │ Bad Request         - id segment is not an integer        │
    │  404   │ Not Found           - unknown route, missing user         │
    │  413   │ Payload Too Large   - request over max_request_size       │
    ├────────┼───────────────────────────────────────────────────────────┤
    │  500   │ Internal Server Error - store, decode or hash failure     │
    │  503   │ Service Unavailable - worker pool queue is full           │
    └────────┴───────────────────────────────────────────────────────────┘

Create answers 200 rather than 201 and delete answers 200 with a body rather
than 204. Existing clients depend on that.

=============================================================================
"""

from enum import IntEnum


class HTTPStatus(IntEnum):
    """
    HTTP status codes used by the service.

    IntEnum, so members compare equal to plain ints:

        >>> HTTPStatus.NOT_FOUND == 404
        True
        >>> HTTPStatus.NOT_FOUND.phrase
        'Not Found'
    """

    OK = 200

    BAD_REQUEST = 400
    NOT_FOUND = 404
    PAYLOAD_TOO_LARGE = 413

    INTERNAL_SERVER_ERROR = 500
    SERVICE_UNAVAILABLE = 503

    @property
    def phrase(self) -> str:
        """Reason phrase for the status line (``HTTP/1.1 404 Not Found``)."""
        return _STATUS_PHRASES[self]

    @property
    def is_success(self) -> bool:
        return 200 <= self < 300

    @property
    def is_error(self) -> bool:
        """True for 4xx and 5xx, used to pick the access log level."""
        return self >= 400


_STATUS_PHRASES = {
    HTTPStatus.OK: "OK",
    HTTPStatus.BAD_REQUEST: "Bad Request",
    HTTPStatus.NOT_FOUND: "Not Found",
    HTTPStatus.PAYLOAD_TOO_LARGE: "Payload Too Large",
    HTTPStatus.INTERNAL_SERVER_ERROR: "Internal Server Error",
    HTTPStatus.SERVICE_UNAVAILABLE: "Service Unavailable",
}
