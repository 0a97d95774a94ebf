"""
=============================================================================
USER RESOURCE HANDLERS
=============================================================================

One method per route. Each takes the raw request text and returns an
HTTPResponse. None of them raise: every failure they know about is turned
into one of a few fixed responses.

    ┌──────────┬──────────────────────┬───────────────────────────────────┐
    │ Handler  │ 200                  │ Failures                          │
    ├──────────┼──────────────────────┼───────────────────────────────────┤
    │ list     │ JSON array           │ 500 "Error"                       │
    │ get      │ JSON object          │ 400 bad id                        │
    │          │                      │ 404 "User not found"              │
    │          │                      │ 500 "Error"                       │
    │ create   │ JSON object (w/ id)  │ 500 "Error creating user"         │
    │ update   │ "User updated"       │ 400 bad id                        │
    │          │                      │ 500 "Error updating user"         │
    │ delete   │ "User deleted"       │ 400 bad id                        │
    │          │                      │ 404 "User not found"              │
    │          │                      │ 500 "Error deleting user"         │
    └──────────┴──────────────────────┴───────────────────────────────────┘

The id is parsed before anything touches the store, so a malformed id never
costs a database round-trip.

=============================================================================
"""

import logging

from ..errors import (
    DecodeError,
    IdentifierParseError,
    PasswordHashError,
    RowNotFound,
    StoreError,
)
from ..http.request import decode_user_body, parse_user_id
from ..http.response import (
    HTTPResponse,
    bad_request,
    internal_error,
    not_found,
    ok_json,
    ok_text,
)
from ..passwords import PasswordHasher
from ..store import UserStore


logger = logging.getLogger(__name__)

INVALID_ID = "Invalid user id"
USER_NOT_FOUND = "User not found"


class UserHandlers:
    """
    Request handlers for the ``/users`` resource.

    Args:
        store: Gateway used for every database operation.
        hasher: Applies the configured password policy on writes.
    """

    def __init__(self, store: UserStore, hasher: PasswordHasher):
        self.store = store
        self.hasher = hasher

    def list_users(self) -> HTTPResponse:
        """GET /users"""
        try:
            users = self.store.list_users()
        except StoreError as e:
            logger.error(f"Listing users failed: {e}")
            return internal_error("Error")
        return ok_json([user.to_dict() for user in users])

    def get_user(self, text: str) -> HTTPResponse:
        """GET /users/{id}"""
        try:
            user_id = parse_user_id(text)
        except IdentifierParseError as e:
            logger.info(str(e))
            return bad_request(INVALID_ID)

        try:
            user = self.store.get_user(user_id)
        except RowNotFound:
            return not_found(USER_NOT_FOUND)
        except StoreError as e:
            logger.error(f"Fetching user {user_id} failed: {e}")
            return internal_error("Error")
        return ok_json(user.to_dict())

    def create_user(self, text: str) -> HTTPResponse:
        """POST /users"""
        try:
            body = decode_user_body(text)
            password = self.hasher.for_create(body.password)
            user = self.store.insert_user(body.name, body.email, password)
        except (DecodeError, PasswordHashError, StoreError) as e:
            logger.error(f"Creating user failed: {e}")
            return internal_error("Error creating user")
        logger.info(f"Created user {user.id}")
        return ok_json(user.to_dict())

    def update_user(self, text: str) -> HTTPResponse:
        """PUT /users/{id}"""
        try:
            user_id = parse_user_id(text)
        except IdentifierParseError as e:
            logger.info(str(e))
            return bad_request(INVALID_ID)

        try:
            body = decode_user_body(text)
            password = self.hasher.for_update(body.password)
            affected = self.store.update_user(user_id, body.name, body.email, password)
        except (DecodeError, PasswordHashError, StoreError) as e:
            logger.error(f"Updating user {user_id} failed: {e}")
            return internal_error("Error updating user")

        if affected == 0:
            logger.warning(f"Update matched no rows for user {user_id}")
        return ok_text("User updated")

    def delete_user(self, text: str) -> HTTPResponse:
        """DELETE /users/{id}"""
        try:
            user_id = parse_user_id(text)
        except IdentifierParseError as e:
            logger.info(str(e))
            return bad_request(INVALID_ID)

        try:
            affected = self.store.delete_user(user_id)
        except StoreError as e:
            logger.error(f"Deleting user {user_id} failed: {e}")
            return internal_error("Error deleting user")

        if affected == 0:
            return not_found(USER_NOT_FOUND)
        logger.info(f"Deleted user {user_id}")
        return ok_text("User deleted")
