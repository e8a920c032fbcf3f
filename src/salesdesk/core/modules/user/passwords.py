"""bcrypt password hashing with a configurable cost factor."""

import secrets
from functools import cached_property

import bcrypt


class PasswordHasher:
    def __init__(self, rounds: int) -> None:
        self.rounds = rounds

    @cached_property
    def dummy_hash(self) -> str:
        """Hash of a random password, checked against when the user does not exist."""
        return self.hash_password(secrets.token_urlsafe(16))

    def hash_password(self, password: str) -> str:
        return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=self.rounds)).decode("utf-8")

    def verify_password(self, password: str, password_hash: str) -> bool:
        """Check a plaintext password against a stored hash; malformed hashes never match."""
        try:
            return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
        except ValueError:
            return False

    def verify_dummy(self, password: str) -> bool:
        """Run a full check against the dummy hash. Blocking, call from a worker thread."""
        return self.verify_password(password, self.dummy_hash)
