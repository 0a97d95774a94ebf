"""
=============================================================================
PASSWORD HASHING
=============================================================================

Passwords are stored through a one-way bcrypt hash. Which write paths hash
is decided by a PasswordPolicy:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                         PASSWORD POLICIES                            │
    ├──────────┬──────────────────────────┬───────────────────────────────┤
    │  Policy  │  create (POST)           │  update (PUT)                 │
    ├──────────┼──────────────────────────┼───────────────────────────────┤
    │  ALWAYS  │  hash                    │  hash                         │
    │  LEGACY  │  store verbatim          │  hash if len < 20,            │
    │          │                          │  else store verbatim          │
    └──────────┴──────────────────────────┴───────────────────────────────┘

LEGACY treats anything 20 characters or longer as "already hashed". That
cannot tell a long plaintext from a real hash, so ALWAYS is the default and
LEGACY only exists for byte-for-byte parity with older deployments.

=============================================================================
BCRYPT COST
=============================================================================

The cost (log2 of the key-expansion rounds) defaults to 12. Every +1
doubles the hashing time. Tests run with the minimum cost of 4.

bcrypt only looks at the first 72 bytes of its input. Longer passwords are
rejected with PasswordHashError rather than silently truncated.

=============================================================================
"""

import logging
from enum import Enum

import bcrypt

from .errors import PasswordHashError


logger = logging.getLogger(__name__)

DEFAULT_ROUNDS = 12

MAX_PASSWORD_BYTES = 72

# Inputs at least this many UTF-8 bytes long are assumed to be hashed already
# (LEGACY only)
LEGACY_HASH_THRESHOLD = 20


class PasswordPolicy(Enum):
    """Which write paths hash the supplied password."""
    ALWAYS = "always"
    LEGACY = "legacy"


def hash_password(plain: str, rounds: int = DEFAULT_ROUNDS) -> str:
    """
    Hash a password with bcrypt.

    Args:
        plain: Password as supplied by the client.
        rounds: bcrypt cost factor (4-31).

    Returns:
        The ``$2b$...`` hash as text.

    Raises:
        PasswordHashError: If bcrypt rejects the input.
    """
    try:
        encoded = plain.encode("utf-8")
        if len(encoded) > MAX_PASSWORD_BYTES:
            raise PasswordHashError(f"Password longer than {MAX_PASSWORD_BYTES} bytes")
        hashed = bcrypt.hashpw(encoded, bcrypt.gensalt(rounds=rounds))
    except ValueError as e:
        # UnicodeEncodeError is a ValueError too
        raise PasswordHashError(str(e)) from e
    return hashed.decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    """Check a plaintext password against a stored bcrypt hash."""
    try:
        return bcrypt.checkpw(plain.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        # Stored value is not a bcrypt hash at all
        return False


def _byte_length(plain: str) -> int:
    return len(plain.encode("utf-8", errors="surrogatepass"))


class PasswordHasher:
    """
    Applies a PasswordPolicy on the create and update paths.

    Usage:
        hasher = PasswordHasher(PasswordPolicy.ALWAYS, rounds=12)
        stored = hasher.for_create(body.password)
    """

    def __init__(self, policy: PasswordPolicy = PasswordPolicy.ALWAYS, rounds: int = DEFAULT_ROUNDS):
        self.policy = policy
        self.rounds = rounds

    def for_create(self, plain: str) -> str:
        """Value to store for a newly created user."""
        if self.policy is PasswordPolicy.LEGACY:
            return plain
        return hash_password(plain, self.rounds)

    def for_update(self, plain: str) -> str:
        """Value to store when a user row is replaced."""
        if self.policy is PasswordPolicy.LEGACY and _byte_length(plain) >= LEGACY_HASH_THRESHOLD:
            logger.debug(f"Password treated as pre-hashed (length {_byte_length(plain)} bytes)")
            return plain
        return hash_password(plain, self.rounds)
