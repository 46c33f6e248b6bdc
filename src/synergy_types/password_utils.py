"""
Password hashing utilities using Argon2.

Example Usage:
    >>> from synergy_types.password_utils import hash_password, verify_password
    >>> hashed = hash_password("correct horse")
    >>> verify_password("correct horse", hashed)
    True
"""

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHash, VerificationError, VerifyMismatchError


# Argon2id with OWASP recommended parameters
_ph = PasswordHasher(
    time_cost=3,
    memory_cost=65536,
    parallelism=4,
    hash_len=32,
    salt_len=16,
)


def hash_password(password: str) -> str:
    """
    Hash a password using Argon2id.

    Each call uses a fresh random salt, so the same password produces
    a different hash every time.

    Returns:
        Argon2 hash string in PHC format:
        $argon2id$v=19$m=65536,t=3,p=4$<salt>$<hash>
    """
    return _ph.hash(password)


def verify_password(password: str, hashed_password: str) -> bool:
    """
    Verify a password against its hash.

    Returns:
        True if password matches hash, False otherwise (including
        corrupted or non-Argon2 hashes)
    """
    try:
        _ph.verify(hashed_password, password)
        return True
    except (VerifyMismatchError, VerificationError, InvalidHash):
        return False


def needs_rehash(hashed_password: str) -> bool:
    """Check if a hash was produced with outdated parameters."""
    try:
        return _ph.check_needs_rehash(hashed_password)
    except (VerificationError, InvalidHash):
        return True
