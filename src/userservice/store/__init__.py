"""
Relational store access.

    UserStore             pooled CRUD on the users table (gateway.py)
    users, metadata       SQLAlchemy Core table definition (schema.py)
"""

from .gateway import UserStore, create_store_engine
from .schema import metadata, users

__all__ = [
    "UserStore",
    "create_store_engine",
    "metadata",
    "users",
]
