"""
Table definitions for the relational store.

One table, declared with SQLAlchemy Core so the same definition renders on
PostgreSQL (production) and SQLite (tests):

    PostgreSQL                              SQLite
    ──────────                              ──────
    CREATE TABLE users (                    CREATE TABLE users (
        id SERIAL NOT NULL,                     id INTEGER NOT NULL,
        name TEXT NOT NULL,                     name TEXT NOT NULL,
        email TEXT NOT NULL,                    email TEXT NOT NULL,
        password TEXT NOT NULL,                 password TEXT NOT NULL,
        PRIMARY KEY (id)                        PRIMARY KEY (id)
    )                                       )
"""

from sqlalchemy import Column, Integer, MetaData, Table, Text


metadata = MetaData()

users = Table(
    "users",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("name", Text, nullable=False),
    Column("email", Text, nullable=False),
    Column("password", Text, nullable=False),
)
