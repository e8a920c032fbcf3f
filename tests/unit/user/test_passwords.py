"""Tests for bcrypt password hashing."""

from salesdesk.core.modules.user.passwords import PasswordHasher


class TestPasswordHasher:
    def setup_method(self):
        self.hasher = PasswordHasher(rounds=4)

    def test_hash_is_not_plaintext(self):
        password_hash = self.hasher.hash_password("Pw#12345")
        assert password_hash != "Pw#12345"
        assert password_hash.startswith("$2b$04$")

    def test_same_password_produces_different_hashes(self):
        """Salting makes every hash unique."""
        assert self.hasher.hash_password("Pw#12345") != self.hasher.hash_password("Pw#12345")

    def test_verify_correct_password(self):
        password_hash = self.hasher.hash_password("Pw#12345")
        assert self.hasher.verify_password("Pw#12345", password_hash) is True

    def test_verify_wrong_password(self):
        password_hash = self.hasher.hash_password("Pw#12345")
        assert self.hasher.verify_password("Pw#54321", password_hash) is False

    def test_malformed_hash_never_matches(self):
        assert self.hasher.verify_password("Pw#12345", "not-a-bcrypt-hash") is False

    def test_dummy_hash_is_cached(self):
        assert self.hasher.dummy_hash is self.hasher.dummy_hash
        assert self.hasher.verify_password("anything", self.hasher.dummy_hash) is False

    def test_verify_dummy_never_matches(self):
        assert self.hasher.verify_dummy("anything") is False
