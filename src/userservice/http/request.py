"""
=============================================================================
REQUEST TEXT HELPERS
=============================================================================

The service never builds a full HTTP request object. Handlers work on the
raw request text and pull out exactly two things:

    PUT /users/42 HTTP/1.1\r\n          ◄── extract_user_id() → "42"
    Host: localhost:8080\r\n
    Content-Type: application/json\r\n
    \r\n
    {"name": "Ann", "email": "a@x.com", "password": "pw"}
    └────────────────────────────────────────────────────┘
                    decode_user_body() → User(...)

Headers are not parsed. Content-Length only matters to the connection reader
(to know when the body has fully arrived).

=============================================================================
IDENTIFIER EXTRACTION
=============================================================================

Splitting the whole request on "/" puts the id at index 2:

    "PUT /users/42 HTTP/1.1\r\n..."
        .split("/")
    → ["PUT ", "users", "42 HTTP", "1.1\r\n..."]
                         ──┬────
                           └── index 2, first whitespace-delimited token → "42"

The extractor never fails, it returns "" instead. Turning that string into an
integer is parse_user_id()'s job, and failure there is a client error (400).

=============================================================================
"""

import json
import re
from typing import Optional

from ..errors import DecodeError, IdentifierParseError
from ..models import User


HEADER_TERMINATOR = "\r\n\r\n"

# PostgreSQL "integer" (the type behind SERIAL) is a signed 32-bit value
MIN_USER_ID = -(2 ** 31)
MAX_USER_ID = 2 ** 31 - 1

_INTEGER_RE = re.compile(r"[+-]?[0-9]+")

_REQUIRED_FIELDS = ("name", "email", "password")


def decode_request(data: bytes) -> str:
    """Decode raw request bytes as UTF-8, replacing invalid sequences."""
    return data.decode("utf-8", errors="replace")


def request_line(text: str) -> str:
    """First line of the request, used for access logging."""
    return text.split("\r\n", 1)[0].split("\n", 1)[0]


def extract_user_id(text: str) -> str:
    """
    Pull the id segment out of the request path.

    Args:
        text: Decoded request text.

    Returns:
        The segment after ``/users/`` up to the first whitespace, or ""
        when the request has no such segment.
    """
    segments = text.split("/")
    if len(segments) < 3:
        return ""
    tokens = segments[2].split()
    return tokens[0] if tokens else ""


def parse_user_id(text: str) -> int:
    """
    Extract the id segment and parse it as an integer.

    Only ASCII digits with an optional sign are accepted, within the range
    of the table's integer primary key.

    Raises:
        IdentifierParseError: If the segment is missing or not an integer.
    """
    raw = extract_user_id(text)
    if not _INTEGER_RE.fullmatch(raw):
        raise IdentifierParseError(raw)

    value = int(raw)
    if not MIN_USER_ID <= value <= MAX_USER_ID:
        raise IdentifierParseError(raw)
    return value


def request_body(text: str) -> str:
    """Everything after the last header/body separator."""
    return text.split(HEADER_TERMINATOR)[-1]


def decode_user_body(text: str) -> User:
    """
    Deserialize the request body into a User.

    ``id`` is optional and ignored if present. Unknown keys are ignored.

    Args:
        text: Decoded request text (headers included).

    Returns:
        A User with ``id=None``.

    Raises:
        DecodeError: If the body is not a JSON object carrying string
                     ``name``, ``email`` and ``password`` fields, or a
                     field cannot be encoded as UTF-8.
    """
    try:
        payload = json.loads(request_body(text))
    except json.JSONDecodeError as e:
        raise DecodeError(f"Invalid JSON body: {e}") from e
    except RecursionError as e:
        raise DecodeError("JSON body nested too deeply") from e

    if not isinstance(payload, dict):
        raise DecodeError("JSON body must be an object")

    values = {}
    for name in _REQUIRED_FIELDS:
        value: Optional[object] = payload.get(name)
        if value is None:
            raise DecodeError(f"Missing field: {name}")
        if not isinstance(value, str):
            raise DecodeError(f"Field {name} must be a string")
        try:
            value.encode("utf-8")
        except UnicodeEncodeError as e:
            # Lone surrogates from \u escapes cannot be stored or hashed
            raise DecodeError(f"Field {name} is not valid UTF-8") from e
        values[name] = value

    return User(**values)
