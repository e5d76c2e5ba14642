"""bcrypt password hashing for user accounts."""

from __future__ import annotations

import bcrypt

DEFAULT_ROUNDS = 12


class BcryptPasswordHasher:
    """Hashes and verifies login passwords with bcrypt."""

    def __init__(self, rounds: int = DEFAULT_ROUNDS) -> None:
        self._rounds = rounds

    def hash(self, password: str) -> str:
        hashed = bcrypt.hashpw(password.encode(), bcrypt.gensalt(rounds=self._rounds))
        return hashed.decode("ascii")

    def verify(self, password: str, password_hash: str) -> bool:
        try:
            return bcrypt.checkpw(password.encode(), password_hash.encode("ascii"))
        except ValueError:
            # Malformed stored hash
            return False
