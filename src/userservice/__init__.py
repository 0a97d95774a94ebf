"""
=============================================================================
USERSERVICE
=============================================================================

A small user CRUD service speaking HTTP/1.1 over raw TCP sockets, backed by
a relational store through SQLAlchemy.

    GET    /users          list all users
    GET    /users/{id}     one user
    POST   /users          create   {"name", "email", "password"}
    PUT    /users/{id}     update   {"name", "email", "password"}
    DELETE /users/{id}     delete

Responses are JSON for user data and plain strings for status messages,
always with ``Content-Type: application/json`` and ``Connection: close``.
Passwords are stored as bcrypt hashes.

=============================================================================
PACKAGE LAYOUT
=============================================================================

    userservice/
    ├── config.py        ServiceConfig (env + CLI)
    ├── errors.py        Exception taxonomy
    ├── models.py        User record
    ├── passwords.py     bcrypt hashing policy
    ├── server.py        UserServer orchestrator
    ├── core/            Sockets, connections, worker pool
    ├── http/            Request text helpers, responses, dispatcher
    ├── handlers/        The five user operations
    └── store/           SQLAlchemy table and gateway

=============================================================================
"""

__version__ = "1.0.0"

from .server import UserServer, create_app
from .config import ServiceConfig

__all__ = ["UserServer", "ServiceConfig", "create_app", "__version__"]
