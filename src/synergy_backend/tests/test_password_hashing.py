"""Tests for Argon2 password hashing."""

from synergy_types.password_utils import hash_password, needs_rehash, verify_password


class TestPasswordHashing:
    """Tests for basic password hashing operations."""

    def test_hash_password_creates_valid_hash(self):
        """Test that password hashing produces valid Argon2 hash."""
        hashed = hash_password("MySecurePassword123!")

        assert hashed.startswith("$argon2id$")

    def test_hash_password_uses_unique_salt(self):
        """Test that same password produces different hashes (different salt)."""
        password = "MySecurePassword123!"
        hashed1 = hash_password(password)
        hashed2 = hash_password(password)

        assert hashed1 != hashed2
        assert verify_password(password, hashed1)
        assert verify_password(password, hashed2)

    def test_verify_password_incorrect(self):
        hashed = hash_password("MySecurePassword123!")
        assert verify_password("WrongPassword123!", hashed) is False

    def test_verify_password_case_sensitive(self):
        password = "MyPassword123!"
        hashed = hash_password(password)

        assert verify_password(password, hashed) is True
        assert verify_password(password.lower(), hashed) is False

    def test_verify_password_against_garbage_hash(self):
        """A stored value that is not an Argon2 hash never verifies."""
        assert verify_password("anything", "plaintext") is False
        assert verify_password("anything", "") is False

    def test_needs_rehash_new_hash(self):
        assert needs_rehash(hash_password("MySecurePassword123!")) is False
