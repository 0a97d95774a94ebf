"""
=============================================================================
ROUTE DISPATCHER (PREFIX CLASSIFICATION)
=============================================================================

Routing here is not pattern matching on a parsed method and path. The raw
request text is checked against five literal prefixes, in a fixed order,
and the first hit wins:

    ┌─────┬────────────────────┬───────────────────────────┬──────────┐
    │  #  │  starts with       │  but not                  │  route   │
    ├─────┼────────────────────┼───────────────────────────┼──────────┤
    │  1  │  "GET /users"      │  "GET /users/"            │  LIST    │
    │  2  │  "GET /users/"     │                           │  GET     │
    │  3  │  "POST /users"     │                           │  CREATE  │
    │  4  │  "PUT /users/"     │                           │  UPDATE  │
    │  5  │  "DELETE /users/"  │                           │  DELETE  │
    └─────┴────────────────────┴───────────────────────────┴──────────┘

Anything else gets 404 "Not Found".

ORDER MATTERS
─────────────
"GET /users" is a prefix of "GET /users/7". Rule 1 carries an exclusion so
that the shorter prefix never swallows the get-by-id route. Reordering the
table or dropping the exclusion makes GET /users/{id} unreachable.

Prefix matching is deliberately loose: "GET /users?page=2" lists,
"POST /users/" creates, "GET /usersXYZ" lists.

=============================================================================
"""

import logging
from enum import Enum
from typing import Callable, Dict, Optional, Tuple

from .response import HTTPResponse, internal_error, not_found


logger = logging.getLogger(__name__)


class Route(Enum):
    """The five user routes."""
    LIST = "list"
    GET = "get"
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


# (route, prefix, excluded prefix) in priority order
ROUTE_TABLE: Tuple[Tuple[Route, str, Optional[str]], ...] = (
    (Route.LIST, "GET /users", "GET /users/"),
    (Route.GET, "GET /users/", None),
    (Route.CREATE, "POST /users", None),
    (Route.UPDATE, "PUT /users/", None),
    (Route.DELETE, "DELETE /users/", None),
)


RouteHandler = Callable[[str], HTTPResponse]


def classify(text: str) -> Optional[Route]:
    """
    Classify request text by literal prefix.

    Returns:
        The matching Route, or None when no prefix matches.
    """
    for route, prefix, excluded in ROUTE_TABLE:
        if not text.startswith(prefix):
            continue
        if excluded is not None and text.startswith(excluded):
            continue
        return route
    return None


class Dispatcher:
    """
    Maps classified requests onto handler callables.

    Each handler takes the request text and returns an HTTPResponse. The
    dispatcher is the last line of defence: a handler that raises anyway
    is logged and answered with 500.

    Usage:
        dispatcher = Dispatcher.for_handlers(UserHandlers(store, hasher))
        response = dispatcher.dispatch("GET /users HTTP/1.1\\r\\n\\r\\n")
    """

    def __init__(self, handlers: Dict[Route, RouteHandler]):
        missing = [route.value for route in Route if route not in handlers]
        if missing:
            raise ValueError(f"No handler for routes: {', '.join(missing)}")
        self._handlers = dict(handlers)

    @classmethod
    def for_handlers(cls, users) -> "Dispatcher":
        """Wire the five routes to a UserHandlers instance."""
        return cls({
            Route.LIST: lambda text: users.list_users(),
            Route.GET: users.get_user,
            Route.CREATE: users.create_user,
            Route.UPDATE: users.update_user,
            Route.DELETE: users.delete_user,
        })

    def dispatch(self, text: str) -> HTTPResponse:
        """Classify the request and run its handler."""
        route = classify(text)
        if route is None:
            return not_found("Not Found")

        try:
            return self._handlers[route](text)
        except Exception as e:
            logger.exception(f"Unhandled error in {route.value} handler: {e}")
            return internal_error()
