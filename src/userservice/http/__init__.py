"""
=============================================================================
HTTP LAYER
=============================================================================

Just enough HTTP to serve the user resource. There is no general request
parser here: the dispatcher classifies raw request text by prefix and the
handlers pull the id and the JSON body out of that text directly.

    ┌─────────────────────────────────────────────────────────────────────┐
    │ REQUEST HELPERS (request.py)                                        │
    │ ─────────────────────────────────────────────────────────────────── │
    │   decode_request()    bytes → text (lossy UTF-8)                   │
    │   extract_user_id()   "PUT /users/42 HTTP/1.1..." → "42"           │
    │   parse_user_id()     → 42, or IdentifierParseError                │
    │   decode_user_body()  JSON after \r\n\r\n → User                  │
    └─────────────────────────────────────────────────────────────────────┘

    ┌─────────────────────────────────────────────────────────────────────┐
    │ DISPATCHER (dispatcher.py)                                          │
    │ ─────────────────────────────────────────────────────────────────── │
    │   classify()          literal prefix → Route                        │
    │   Dispatcher          Route → handler → HTTPResponse               │
    └─────────────────────────────────────────────────────────────────────┘

    ┌─────────────────────────────────────────────────────────────────────┐
    │ RESPONSES (response.py, status_codes.py)                            │
    │ ─────────────────────────────────────────────────────────────────── │
    │   HTTPResponse        status + body → bytes                         │
    │   ok_json, ok_text, bad_request, not_found, internal_error, ...    │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
"""

from .dispatcher import Dispatcher, Route, classify
from .request import (
    decode_request,
    decode_user_body,
    extract_user_id,
    parse_user_id,
    request_line,
)
from .response import (
    HTTPResponse,
    ok_json,
    ok_text,
    bad_request,
    not_found,
    payload_too_large,
    internal_error,
    service_unavailable,
)
from .status_codes import HTTPStatus

__all__ = [
    # Dispatching
    "Dispatcher",
    "Route",
    "classify",

    # Request text
    "decode_request",
    "decode_user_body",
    "extract_user_id",
    "parse_user_id",
    "request_line",

    # Responses
    "HTTPResponse",
    "HTTPStatus",
    "ok_json",
    "ok_text",
    "bad_request",
    "not_found",
    "payload_too_large",
    "internal_error",
    "service_unavailable",
]
