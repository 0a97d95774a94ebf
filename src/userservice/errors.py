"""
=============================================================================
ERROR TAXONOMY
=============================================================================

Every failure the service knows how to name lives here. Handlers catch these
at their boundary and turn them into one of a few fixed responses.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                      ERROR → RESPONSE MAPPING                        │
    ├──────────────────────────┬──────────────────────────────────────────┤
    │  StoreConnectionError    │  500 (store unreachable)                 │
    │  QueryError              │  500 (statement failed)                  │
    │  RowNotFound             │  404 in get                              │
    │  DecodeError             │  500 (bad JSON body)                     │
    │  IdentifierParseError    │  400 (id segment is not an integer)      │
    │  PasswordHashError       │  500 (bcrypt refused the input)          │
    │  RequestTooLarge         │  413 (raised by the connection reader)   │
    └──────────────────────────┴──────────────────────────────────────────┘

=============================================================================
"""


class UserServiceError(Exception):
    """Base class for all errors raised by the service."""


# =============================================================================
# STORE ERRORS
# =============================================================================

class StoreError(UserServiceError):
    """Base class for failures coming out of the store gateway."""


class StoreConnectionError(StoreError):
    """The relational store could not be reached (or the pool is exhausted)."""


class QueryError(StoreError):
    """A statement reached the store but failed."""


class RowNotFound(StoreError):
    """A single-row query returned zero rows."""

    def __init__(self, user_id: int):
        super().__init__(f"User {user_id} not found")
        self.user_id = user_id


# =============================================================================
# REQUEST ERRORS
# =============================================================================

class DecodeError(UserServiceError):
    """The request body is not a JSON object with name, email and password."""


class IdentifierParseError(UserServiceError):
    """The id segment of the request path is not a valid integer."""

    def __init__(self, raw: str):
        super().__init__(f"Invalid user id: {raw!r}")
        self.raw = raw


class RequestTooLarge(UserServiceError):
    """The client sent more bytes than max_request_size allows."""

    def __init__(self, size: int, limit: int):
        super().__init__(f"Request too large: {size} bytes (limit {limit})")
        self.size = size
        self.limit = limit


class PasswordHashError(UserServiceError):
    """The one-way hash could not be computed for the supplied password."""
