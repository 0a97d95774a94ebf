"""
Unit tests for the user handlers, driven through the dispatcher.
"""

import json
import logging

import pytest

from userservice.handlers import UserHandlers
from userservice.http import Dispatcher
from userservice.http.status_codes import HTTPStatus
from userservice.passwords import verify_password
from userservice.store import UserStore


def create(dispatcher, make_request, body) -> dict:
    response = dispatcher.dispatch(make_request("POST", "/users", body))
    assert response.status == HTTPStatus.OK
    return json.loads(response.body)


class TestCreate:
    """POST /users"""

    def test_returns_user_with_id(self, dispatcher, make_request, sample_user):
        created = create(dispatcher, make_request, sample_user)

        assert isinstance(created["id"], int)
        assert created["name"] == "Ann"
        assert created["email"] == "a@x.com"

    def test_password_is_hashed(self, dispatcher, make_request, store, sample_user):
        created = create(dispatcher, make_request, sample_user)

        stored = store.get_user(created["id"]).password
        assert created["password"] == stored
        assert stored != "pw"
        assert verify_password("pw", stored)

    def test_malformed_body(self, dispatcher, make_request):
        response = dispatcher.dispatch(make_request("POST", "/users", {"name": "Ann"}))

        assert response.status == HTTPStatus.INTERNAL_SERVER_ERROR
        assert response.text == "Error creating user"

    def test_invalid_json(self, dispatcher):
        response = dispatcher.dispatch("POST /users HTTP/1.1\r\n\r\n{oops")
        assert response.text == "Error creating user"

    def test_unhashable_password(self, dispatcher, make_request):
        body = {"name": "Ann", "email": "a@x.com", "password": "x" * 100}
        response = dispatcher.dispatch(make_request("POST", "/users", body))

        assert response.status == HTTPStatus.INTERNAL_SERVER_ERROR
        assert response.text == "Error creating user"

    def test_unencodable_string(self, dispatcher, make_request):
        body = {"name": "\ud800", "email": "a@x.com", "password": "pw"}
        response = dispatcher.dispatch(make_request("POST", "/users", body))

        assert response.status == HTTPStatus.INTERNAL_SERVER_ERROR
        assert response.text == "Error creating user"

    def test_deeply_nested_body(self, dispatcher):
        response = dispatcher.dispatch("POST /users HTTP/1.1\r\n\r\n" + "[" * 50000)

        assert response.status == HTTPStatus.INTERNAL_SERVER_ERROR
        assert response.text == "Error creating user"


class TestGet:
    """GET /users/{id}"""

    def test_round_trip(self, dispatcher, make_request, sample_user):
        created = create(dispatcher, make_request, sample_user)

        response = dispatcher.dispatch(make_request("GET", f"/users/{created['id']}"))
        fetched = json.loads(response.body)

        assert response.status == HTTPStatus.OK
        assert fetched == created

    def test_missing(self, dispatcher, make_request):
        response = dispatcher.dispatch(make_request("GET", "/users/999"))

        assert response.status == HTTPStatus.NOT_FOUND
        assert response.text == "User not found"

    def test_non_integer_id(self, dispatcher, make_request):
        response = dispatcher.dispatch(make_request("GET", "/users/abc"))

        assert response.status == HTTPStatus.BAD_REQUEST
        assert response.text == "Invalid user id"


class TestList:
    """GET /users"""

    def test_empty(self, dispatcher, make_request):
        response = dispatcher.dispatch(make_request("GET", "/users"))

        assert response.status == HTTPStatus.OK
        assert json.loads(response.body) == []

    def test_count_matches_rows(self, dispatcher, make_request, store):
        for i in range(3):
            store.insert_user(f"user{i}", f"u{i}@x.com", "pw")

        users = json.loads(dispatcher.dispatch(make_request("GET", "/users")).body)

        assert len(users) == 3
        assert {u["name"] for u in users} == {"user0", "user1", "user2"}


class TestUpdate:
    """PUT /users/{id}"""

    def test_replaces_fields(self, dispatcher, make_request, store, sample_user):
        created = create(dispatcher, make_request, sample_user)

        response = dispatcher.dispatch(make_request(
            "PUT", f"/users/{created['id']}",
            {"name": "Bea", "email": "b@x.com", "password": "new"},
        ))

        assert response.status == HTTPStatus.OK
        assert response.text == "User updated"
        updated = store.get_user(created["id"])
        assert (updated.name, updated.email) == ("Bea", "b@x.com")
        assert verify_password("new", updated.password)

    def test_missing_row_still_reports_updated(self, dispatcher, make_request, sample_user, caplog):
        caplog.set_level(logging.WARNING, logger="userservice.handlers.users")

        response = dispatcher.dispatch(make_request("PUT", "/users/999", sample_user))

        assert response.status == HTTPStatus.OK
        assert response.text == "User updated"
        assert "matched no rows" in caplog.text

    def test_non_integer_id(self, dispatcher, make_request, sample_user):
        response = dispatcher.dispatch(make_request("PUT", "/users/x", sample_user))

        assert response.status == HTTPStatus.BAD_REQUEST
        assert response.text == "Invalid user id"

    def test_malformed_body(self, dispatcher, make_request, store):
        user = store.insert_user("Ann", "a@x.com", "pw")

        response = dispatcher.dispatch(make_request("PUT", f"/users/{user.id}", {"name": "Bea"}))

        assert response.status == HTTPStatus.INTERNAL_SERVER_ERROR
        assert response.text == "Error updating user"
        assert store.get_user(user.id).name == "Ann"

    def test_unencodable_password(self, dispatcher, make_request, store):
        user = store.insert_user("Ann", "a@x.com", "pw")
        body = {"name": "Ann", "email": "a@x.com", "password": "\ud800"}

        response = dispatcher.dispatch(make_request("PUT", f"/users/{user.id}", body))

        assert response.status == HTTPStatus.INTERNAL_SERVER_ERROR
        assert response.text == "Error updating user"


class TestDelete:
    """DELETE /users/{id}"""

    def test_delete_then_get(self, dispatcher, make_request, store):
        user = store.insert_user("Ann", "a@x.com", "pw")

        response = dispatcher.dispatch(make_request("DELETE", f"/users/{user.id}"))
        assert response.status == HTTPStatus.OK
        assert response.text == "User deleted"

        response = dispatcher.dispatch(make_request("GET", f"/users/{user.id}"))
        assert response.status == HTTPStatus.NOT_FOUND

    def test_missing(self, dispatcher, make_request):
        response = dispatcher.dispatch(make_request("DELETE", "/users/999"))

        assert response.status == HTTPStatus.NOT_FOUND
        assert response.text == "User not found"

    def test_non_integer_id(self, dispatcher, make_request):
        response = dispatcher.dispatch(make_request("DELETE", "/users/one"))
        assert response.status == HTTPStatus.BAD_REQUEST


class TestLegacyPolicy:
    """Handlers running with the legacy password policy."""

    @pytest.fixture
    def legacy_dispatcher(self, store, legacy_hasher) -> Dispatcher:
        return Dispatcher.for_handlers(UserHandlers(store, legacy_hasher))

    def test_example_scenario(self, legacy_dispatcher, make_request, sample_user):
        created = create(legacy_dispatcher, make_request, sample_user)
        assert created["password"] == "pw"

        response = legacy_dispatcher.dispatch(
            make_request("PUT", f"/users/{created['id']}", sample_user)
        )
        assert response.text == "User updated"

        fetched = json.loads(
            legacy_dispatcher.dispatch(make_request("GET", f"/users/{created['id']}")).body
        )
        assert fetched["password"] != "pw"
        assert verify_password("pw", fetched["password"])

    def test_long_password_kept_on_update(self, legacy_dispatcher, make_request, store, sample_user):
        created = create(legacy_dispatcher, make_request, sample_user)
        long_password = "already-hashed-value-0123456789"

        legacy_dispatcher.dispatch(make_request(
            "PUT", f"/users/{created['id']}",
            {"name": "Ann", "email": "a@x.com", "password": long_password},
        ))

        assert store.get_user(created["id"]).password == long_password


class TestStoreFailures:
    """Store errors surface as 500 with the operation's message."""

    @pytest.fixture
    def broken_dispatcher(self, database_url, hasher):
        # No ensure_schema(): every statement fails
        store = UserStore(database_url)
        yield Dispatcher.for_handlers(UserHandlers(store, hasher))
        store.dispose()

    @pytest.mark.parametrize("method, path, body, message", [
        ("GET", "/users", None, "Error"),
        ("GET", "/users/1", None, "Error"),
        ("POST", "/users", {"name": "A", "email": "e", "password": "p"}, "Error creating user"),
        ("PUT", "/users/1", {"name": "A", "email": "e", "password": "p"}, "Error updating user"),
        ("DELETE", "/users/1", None, "Error deleting user"),
    ])
    def test_500(self, broken_dispatcher, make_request, method, path, body, message):
        response = broken_dispatcher.dispatch(make_request(method, path, body))

        assert response.status == HTTPStatus.INTERNAL_SERVER_ERROR
        assert response.text == message
