"""
User data model.

The one entity this service knows about. It is a plain dataclass shared by
the body decoder, the store gateway and the handlers:

    JSON body ──► decode_user_body() ──► User(id=None, ...)
                                              │
                                              ▼
                                   UserStore.insert_user()
                                              │
                                              ▼
    JSON response ◄── to_dict() ◄── User(id=7, ...)

The store assigns ``id``. Nothing in this package generates one.
"""

from dataclasses import dataclass
from typing import Any, Mapping, Optional


@dataclass
class User:
    """
    A row of the ``users`` table.

    Attributes:
        name: Display name. Not validated.
        email: Email address. Not validated.
        password: Whatever is stored on read paths (plaintext or a bcrypt
                  hash), caller-supplied input on write paths.
        id: Store-assigned primary key. None until the row is inserted.
    """

    name: str
    email: str
    password: str
    id: Optional[int] = None

    def to_dict(self) -> dict:
        """Serialize for a JSON response (key order matches the table)."""
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "password": self.password,
        }

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "User":
        """Build a User from a store row mapping."""
        return cls(
            id=row["id"],
            name=row["name"],
            email=row["email"],
            password=row["password"],
        )
